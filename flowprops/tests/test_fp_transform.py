#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import pytest

from conftest import (
    alias, arrow_component, class_component, class_expression, emit, export, function_component, has_error_code,
    import_types, obj, prim, prop, ref,
)
from fp_ast import (
    ArrayType, AssignmentExpr, BlockStmt, CallExpr, ClassDecl, ClassProperty, ExportDefaultDecl, ExportNamedDecl,
    ExportSpecifier, ExpressionStmt, FunctionDecl, Identifier, ImportDecl, ImportSpecifier, MemberExpr, NumberLit,
    ObjectExpr, ObjectProp, Param, Program, ReturnStmt, StringLit, TupleType, VarDecl, VarDeclarator,
)
from fp_context import SUPPRESS_DIRECTIVE, TransformContext
from fp_errors import TransformError
from fp_imports import export_name_for_type
from fp_transform import PropTypesTransformer
from fp_tree import index_of

PROPS_BINDING = export_name_for_type("Props")


def _props_alias():
    return alias("Props", obj(prop("name", prim("string")), prop("age", prim("number"), optional=True)))


def test_function_component_gets_prop_types(transform):
    result = transform([_props_alias(), function_component("Foo", ref("Props"))])

    assert result.changed
    assert emit(result.program) == (
        'import PropTypes from "prop-types";\n'
        "type Props = { name: string, age?: number };\n"
        "function Foo(props: Props) {\n"
        "  return <div />;\n"
        "}\n"
        "Foo.propTypes = {\n"
        "  name: PropTypes.string.isRequired,\n"
        "  age: PropTypes.number\n"
        "};\n"
    )


def test_arrow_component_with_inline_props(transform):
    result = transform([arrow_component("Bar", obj(prop("label", prim("string"))))])

    assert "Bar.propTypes = {\n  label: PropTypes.string.isRequired\n};" in emit(result.program)


def test_class_component_from_super_type_argument(transform):
    result = transform([_props_alias(), class_component("Foo", ref("Props"))])

    text = emit(result.program)
    assert "class Foo extends React.Component<Props> {" in text
    assert "  static propTypes = {\n    name: PropTypes.string.isRequired,\n    age: PropTypes.number\n  };" in text


def test_class_component_from_props_property(transform):
    props = ClassProperty("props", type_annotation=obj(prop("title", prim("string"))))

    result = transform([class_component("Foo", body=[props], base="PureComponent")])

    assert "static propTypes = {\n    title: PropTypes.string.isRequired\n  };" in emit(result.program)


def test_class_context_from_third_type_argument(transform):
    context = alias("Ctx", obj(prop("theme", prim("string"))))

    result = transform([_props_alias(), context, class_component("Foo", ref("Props"), ref("State"), ref("Ctx"))])

    cls = next(s for s in result.program.body if isinstance(s, ClassDecl))
    keys = [m.key for m in cls.body if isinstance(m, ClassProperty)]
    assert keys == ["propTypes", "contextTypes"]


def test_object_super_type_argument_is_skipped(transform):
    result = transform([class_component("Foo", ref("Object"))])

    assert not result.changed
    assert not any(isinstance(s, ImportDecl) for s in result.program.body)


def test_unknown_super_type_argument_is_reported(transform):
    result = transform([class_component("Foo", ref("Missing"))])

    assert not result.changed
    assert has_error_code(result.diagnostics, "RES-0020")


def test_class_not_extending_component_is_ignored(transform):
    result = transform([_props_alias(), class_component("Foo", ref("Props"), base="Base")])

    assert not result.changed


def test_class_props_annotation_that_is_not_an_object_fails(transform):
    props = ClassProperty("props", type_annotation=prim("string"))

    with pytest.raises(TransformError) as exc:
        transform([class_component("Foo", body=[props])], filename="foo.js")

    message = exc.value.format()
    assert "[XFM-0020]" in message
    assert "(in declaration 'Foo')" in message
    assert message.startswith("foo.js")


def test_anonymous_default_function_component_fails(transform):
    with pytest.raises(TransformError) as exc:
        transform([ExportDefaultDecl(function_component(None, obj(prop("a", prim("string")))))])

    assert "[XFM-0010]" in exc.value.format()


def test_default_exported_class_uses_static_member(transform):
    result = transform([_props_alias(), ExportDefaultDecl(class_component(None, ref("Props")))])

    assert "export default class extends React.Component<Props> {" in emit(result.program)
    assert "static propTypes = {" in emit(result.program)


def test_exported_function_component_assignment_follows_export(transform):
    stmt = ExportNamedDecl(function_component("Foo", ref("Props")))

    result = transform([_props_alias(), stmt])

    after = result.program.body[index_of(result.program.body, stmt) + 1]
    assert isinstance(after, ExpressionStmt)
    assert after.expr.target == MemberExpr(Identifier("Foo"), "propTypes")


def test_context_from_second_parameter(transform):
    fn = function_component("Foo", obj(prop("a", prim("string"))), obj(prop("theme", prim("string"))))

    result = transform([fn])

    text = emit(result.program)
    assert text.index("Foo.propTypes = {") < text.index("Foo.contextTypes = {\n  theme: PropTypes.string.isRequired\n};")


def test_function_without_jsx_is_not_a_component(transform):
    fn = FunctionDecl("helper", [Param("props", ref("Props"))], BlockStmt([ReturnStmt(NumberLit(1))]))

    result = transform([_props_alias(), fn])

    assert not result.changed


def test_create_element_marks_a_component(transform):
    call = CallExpr(MemberExpr(Identifier("React"), "createElement"), [StringLit("div")])
    fn = FunctionDecl("Foo", [Param("props", ref("Props"))], BlockStmt([ReturnStmt(call)]))

    result = transform([_props_alias(), fn])

    assert "Foo.propTypes = {" in emit(result.program)


def test_react_node_return_type_marks_a_component(transform):
    fn = FunctionDecl("Foo", [Param("props", ref("Props"))], BlockStmt([ReturnStmt(Identifier("x"))]),
                      return_type=ref("React.Node"))

    result = transform([_props_alias(), fn])

    assert "Foo.propTypes = {" in emit(result.program)


def test_component_without_props_annotation_is_noted(transform):
    result = transform([function_component("Foo")])

    assert not result.changed
    assert has_error_code(result.diagnostics, "ANN-0020")


def test_nested_component_is_annotated_in_its_scope(transform):
    inner = function_component("Inner", obj(prop("a", prim("string"))))
    outer = FunctionDecl("makeInner", [], BlockStmt([inner, ReturnStmt(Identifier("Inner"))]))

    result = transform([outer])

    block = outer.body.body
    assert block[0] is inner
    assert isinstance(block[1], ExpressionStmt)
    assert isinstance(block[2], ReturnStmt)
    assert result.changed


def test_default_props_relax_required(transform):
    defaults = ClassProperty("defaultProps", ObjectExpr([ObjectProp("name", StringLit("x"))]), static=True)

    result = transform([_props_alias(), class_component("Foo", ref("Props"), body=[defaults])])

    text = emit(result.program)
    assert "name: PropTypes.string,\n" in text
    assert "name: PropTypes.string.isRequired" not in text


# --- exported and imported types ---

def test_exported_type_is_hoisted_and_reexported(transform):
    result = transform([export(_props_alias()), function_component("Foo", ref("Props"))])

    text = emit(result.program)
    assert f"var {PROPS_BINDING} = {{\n  name: PropTypes.string.isRequired,\n  age: PropTypes.number\n}};\n" \
           "export type Props" in text
    assert f"Foo.propTypes = {PROPS_BINDING};" in text
    assert text.endswith(f"export {{ {PROPS_BINDING} }};\n")
    assert result.unit.registry.exported == {"Props": PROPS_BINDING}


def test_omit_runtime_type_export(transform):
    result = transform([export(_props_alias())], omit_runtime_type_export=True)

    text = emit(result.program)
    assert f"var {PROPS_BINDING} = {{" in text
    assert "export {" not in text


def test_recursive_alias_gets_a_private_binding(transform):
    tree = alias("Tree", obj(prop("label", prim("string")), prop("children", ArrayType(ref("Tree")))))

    result = transform([tree, function_component("Node", ref("Tree"))])

    binding = export_name_for_type("Tree")
    text = emit(result.program)
    assert f"var {binding} = {{" in text
    assert ".apply(this, arguments)" in text
    assert f"Node.propTypes = {binding};" in text
    assert "export {" not in text


def test_cross_unit_reference_resolves_to_shared_binding():
    transformer = PropTypesTransformer()
    unit_a = Program([export(_props_alias())], filename="a.js")
    unit_b = Program([import_types("./a", "Props"), function_component("Bar", ref("Props"))], filename="b.js")

    text_a = emit(transformer.transform(unit_a).program)
    text_b = emit(transformer.transform(unit_b).program)

    assert f"export {{ {PROPS_BINDING} }};" in text_a
    assert f'import {{ {PROPS_BINDING} }} from "./a";' in text_b
    assert f"Bar.propTypes = {PROPS_BINDING};" in text_b


def test_imported_type_as_field_is_adapted(transform):
    user = export_name_for_type("User")
    body = [import_types("./user", "User"), function_component("Foo", obj(prop("user", ref("User"))))]

    result = transform(body)

    assert f'typeof {user} === "function" ? {user}.isRequired : PropTypes.shape({user}).isRequired' \
           in emit(result.program)


def test_react_type_imports_map_to_prop_types(transform):
    react = ImportDecl(
        [ImportSpecifier("Node", "Node", "type"), ImportSpecifier("ComponentType", "CT", "type")], "react",
    )
    props = alias("Props", obj(prop("children", ref("Node")), prop("as", ref("CT", ref("any")))))

    result = transform([react, props, function_component("Foo", ref("Props"))])

    text = emit(result.program)
    assert "children: PropTypes.node.isRequired" in text
    assert "as: PropTypes.func.isRequired" in text
    assert result.unit.registry.imported["CT"].source_name == "ComponentType"


def test_package_type_imports_are_ignored(transform):
    body = [import_types("some-lib", "Thing"), function_component("Foo", obj(prop("thing", ref("Thing"))))]

    result = transform(body)

    assert result.unit.registry.imported == {}
    assert has_error_code(result.diagnostics, "RES-0010")
    assert "thing: PropTypes.any.isRequired" in emit(result.program)


def test_type_reexport_from_other_unit(transform):
    stmt = ExportNamedDecl(None, [ExportSpecifier("Props", "Props")], source="./a", export_kind="type")

    result = transform([stmt])

    text = emit(result.program)
    assert f'import {{ {PROPS_BINDING} }} from "./a";' in text
    assert f"export {{ {PROPS_BINDING} }};" in text


def test_declared_class_is_checked_with_instance_of(transform):
    user = ClassDecl("User", None, [ClassProperty("name", type_annotation=prim("string"))])

    result = transform([user, function_component("Foo", obj(prop("owner", ref("User"))))])

    text = emit(result.program)
    assert "PropTypes.oneOfType([PropTypes.instanceOf(User), PropTypes.shape({" in text


# --- options ---

def test_dead_code_uses_require_and_guards(transform):
    result = transform([export(_props_alias()), function_component("Foo", ref("Props"))], dead_code=True)

    text = emit(result.program)
    assert not any(isinstance(s, ImportDecl) for s in result.program.body)
    assert f'var {PROPS_BINDING} = process.env.NODE_ENV === "production" ? null : {{' in text
    assert 'name: require("prop-types").string.isRequired' in text
    assert 'if (!(process.env.NODE_ENV === "production") && typeof exports !== "undefined") {' in text
    assert f'Foo.propTypes = process.env.NODE_ENV === "production" ? null : {PROPS_BINDING};' in text


def test_suppression_directive_leaves_unit_untouched(transform):
    body = [_props_alias(), function_component("Foo", ref("Props"))]

    result = transform(body, directives=[SUPPRESS_DIRECTIVE])

    assert not result.changed
    assert result.unit.suppressed
    assert len(result.program.body) == 2


@pytest.mark.parametrize("ignore, suppressed", [(True, True), (False, False)])
def test_node_modules_are_skipped_when_asked(transform, ignore, suppressed):
    body = [_props_alias(), function_component("Foo", ref("Props"))]

    result = transform(body, filename="/app/node_modules/pkg/foo.js", ignore_node_modules=ignore)

    assert result.unit.suppressed is suppressed
    assert result.changed is not suppressed


def test_units_do_not_share_state():
    transformer = PropTypesTransformer(TransformContext())
    transformer.transform(Program([_props_alias()]))

    result = transformer.transform(Program([function_component("Foo", ref("Props"))]))

    assert not result.changed
    assert has_error_code(result.diagnostics, "RES-0010")
    assert result.unit.registry.internal == {}


# --- class expressions ---

def _static_prop_types(cls):
    return [m for m in cls.body if isinstance(m, ClassProperty) and m.static and m.key == "propTypes"]


def test_class_expression_in_variable_gets_static_member(transform):
    cls = class_expression(None, ref("Props"))

    result = transform([_props_alias(), VarDecl("const", [VarDeclarator("Foo", cls)])])

    assert len(_static_prop_types(cls)) == 1
    assert "Foo" in result.unit.registry.classes


def test_class_expression_in_call_argument(transform):
    cls = class_expression("Foo", ref("Props"))
    stmt = ExportDefaultDecl(CallExpr(CallExpr(Identifier("connect"), []), [cls]))

    result = transform([_props_alias(), stmt])

    assert result.changed
    assert len(_static_prop_types(cls)) == 1
    assert "static propTypes = {" in emit(result.program)
    # the class's own name is not visible outside the expression
    assert "Foo" not in result.unit.registry.classes


def test_class_expression_assigned_to_module_exports(transform):
    cls = class_expression("Foo", ref("Props"))
    stmt = ExpressionStmt(AssignmentExpr(MemberExpr(Identifier("module"), "exports"), cls))

    transform([_props_alias(), stmt])

    assert len(_static_prop_types(cls)) == 1


def test_class_expression_returned_from_function(transform):
    cls = class_expression(None, ref("Props"))
    factory = FunctionDecl("make", [], BlockStmt([ReturnStmt(cls)]))

    transform([_props_alias(), factory])

    assert len(_static_prop_types(cls)) == 1


def test_no_static_class_expression_in_variable_gets_assignment(transform):
    cls = class_expression(None, ref("Props"))
    decl = VarDecl("const", [VarDeclarator("Foo", cls)])

    result = transform([_props_alias(), decl], no_static=True)

    text = emit(result.program)
    assert not _static_prop_types(cls)
    assert "Foo.propTypes = {\n  name: PropTypes.string.isRequired,\n  age: PropTypes.number\n};" in text
    assert index_of(result.program.body, decl) < len(result.program.body) - 1


def test_no_static_class_expression_without_binding_is_skipped(transform):
    cls = class_expression("Foo", ref("Props"))
    stmt = ExportDefaultDecl(CallExpr(Identifier("connect"), [cls]))

    result = transform([_props_alias(), stmt], no_static=True)

    assert not _static_prop_types(cls)
    assert "propTypes" not in emit(result.program)
    assert not result.has_errors()


# --- result summary ---

def test_conflicting_explicit_prop_types_is_an_error(transform):
    explicit = ExpressionStmt(AssignmentExpr(MemberExpr(Identifier("Foo"), "propTypes"), Identifier("shared")))

    result = transform([_props_alias(), function_component("Foo", ref("Props")), explicit])

    assert has_error_code(result.diagnostics, "ANN-0010")
    assert result.has_errors()
    assert not result.has_warnings()


def test_approximation_is_a_warning(transform):
    pair = alias("Props", obj(prop("pair", TupleType([prim("string"), prim("number")]))))

    result = transform([pair, function_component("Foo", ref("Props"))])

    assert result.has_warnings()
    assert not result.has_errors()
