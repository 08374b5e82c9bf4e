#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import copy

import pytest

from conftest import (
    babel_block, babel_class_component, babel_file, babel_function_component, babel_generic, babel_ident,
    babel_object_type, babel_props_alias, emit,
)
from fp_ast import (
    ClassDecl, FunctionDecl, GenericType, JSXElement, NullableType, ObjectType, RawNode, ReturnStmt, Span,
    TypeAliasDecl,
)
from fp_babel_json import dump_program, load_expression, load_program
from fp_errors import BabelFormatError
from fp_transform import PropTypesTransformer


# --- loading ---

def test_load_maps_statements_and_types():
    program = load_program(babel_file(babel_props_alias(), babel_function_component()), filename="foo.js")

    alias, fn = program.body
    assert isinstance(alias, TypeAliasDecl)
    assert isinstance(alias.right, ObjectType)
    assert [p.key for p in alias.right.properties] == ["name", "age"]
    assert alias.right.properties[1].optional
    assert isinstance(fn, FunctionDecl)
    assert fn.params[0].type_annotation == GenericType("Props")
    assert isinstance(fn.body.body[0], ReturnStmt)
    assert isinstance(fn.body.body[0].value, JSXElement)
    assert program.filename == "foo.js"


def test_load_keeps_one_based_spans():
    program = load_program(babel_file(babel_function_component()))

    assert program.body[0].span == Span(2, 1, 4, 2)


def test_load_qualified_and_nullable_types():
    annotation = {
        "type": "NullableTypeAnnotation",
        "typeAnnotation": {
            "type": "GenericTypeAnnotation",
            "id": {"type": "QualifiedTypeIdentifier", "qualification": babel_ident("React"), "id": babel_ident("Node")},
            "typeParameters": None,
        },
    }
    fn = babel_function_component()
    fn["params"] = [babel_ident("props", babel_object_type(("children", annotation, False)))]

    program = load_program(babel_file(fn))

    value = program.body[0].params[0].type_annotation.properties[0].value
    assert value == NullableType(GenericType("React.Node"))


def test_load_directives():
    program = load_program(babel_file(directives=["use strict"]))

    assert program.directives == ["use strict"]


def test_unmodelled_statement_is_kept_raw():
    loop = {"type": "ForOfStatement", "left": babel_ident("x"), "right": babel_ident("xs"), "body": babel_block()}

    program = load_program(babel_file(loop))

    assert isinstance(program.body[0], RawNode)
    assert dump_program(program)["program"]["body"][0] is loop


def test_unmodelled_expression_is_kept_raw():
    expr = load_expression({"type": "TemplateLiteral", "quasis": [], "expressions": []})

    assert isinstance(expr, RawNode)


@pytest.mark.parametrize(
    "data, path",
    [
        ([], "$"),
        ({"program": {}}, "$"),
        ({"type": "File"}, "$"),
        ({"type": "File", "program": {"type": "Script", "body": []}}, "$.program"),
        ({"type": "Program"}, "$"),
    ],
)
def test_malformed_input_is_rejected(data, path):
    with pytest.raises(BabelFormatError) as exc:
        load_program(data)

    assert exc.value.path == path


def test_malformed_nested_node_names_its_path():
    with pytest.raises(BabelFormatError) as exc:
        load_program(babel_file({"type": "ExpressionStatement"}))

    assert str(exc.value) == "$.program.body[0]: ExpressionStatement node has no 'expression'"


# --- dumping ---

def test_untouched_nodes_dump_to_their_source():
    source = babel_file(babel_props_alias())
    original = copy.deepcopy(source)

    dumped = dump_program(load_program(source))

    assert dumped == original


def test_transformed_function_dumps_assignment_and_import():
    program = load_program(babel_file(babel_props_alias(), babel_function_component()))
    PropTypesTransformer().transform(program)

    body = dump_program(program)["program"]["body"]

    assert body[0]["type"] == "ImportDeclaration"
    assert body[0]["source"] == {"type": "StringLiteral", "value": "prop-types"}
    assert body[0]["specifiers"] == [{"type": "ImportDefaultSpecifier", "local": babel_ident("PropTypes")}]
    assert body[1] == babel_props_alias()
    assignment = body[3]["expression"]
    assert assignment["type"] == "AssignmentExpression"
    assert assignment["left"]["object"] == babel_ident("Foo")
    assert assignment["left"]["property"] == babel_ident("propTypes")
    keys = [p["key"]["name"] for p in assignment["right"]["properties"]]
    assert keys == ["name", "age"]


def test_transformed_class_dumps_static_member():
    program = load_program(babel_file(babel_props_alias(), babel_class_component()))
    PropTypesTransformer().transform(program)

    cls = dump_program(program)["program"]["body"][2]

    assert cls["superTypeParameters"]["params"] == [babel_generic("Props")]
    member = cls["body"]["body"][-1]
    assert member["type"] == "ClassProperty"
    assert member["static"] is True
    assert member["key"] == babel_ident("propTypes")
    assert member["value"]["type"] == "ObjectExpression"


def test_loaded_tree_emits_as_javascript():
    program = load_program(babel_file(babel_props_alias(), babel_class_component()))
    assert isinstance(program.body[1], ClassDecl)
    PropTypesTransformer().transform(program)

    text = emit(program)

    assert "class Foo extends React.Component<Props> {" in text
    assert "return <span />;" in text


def test_jsx_attributes_are_emitted_from_source():
    program = load_program(babel_file(babel_function_component()))

    assert 'return <div className="box" />;' in emit(program)
