#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from typing import List, Optional, Tuple, Union

from fp_annotate import Annotator, ComponentTarget, PropsSource
from fp_ast import (
    Node, Program, TypeNode, GenericType, NullableType, Identifier, MemberExpr, CallExpr, JSXElement, BlockStmt,
    IfStmt, VarDecl, VarDeclarator, FunctionDecl, FunctionExpr, ArrowFunctionExpr, ClassProperty, ClassMethod,
    ClassDecl, ClassExpr, TypeAliasDecl, InterfaceDecl, OpaqueTypeDecl, ImportDecl, ImportSpecifier,
    ExportNamedDecl, ExportDefaultDecl, ObjectType, ObjectTypeProperty, TYPE_DECLS,
)
from fp_builder import ValidatorBuilder, describes_props
from fp_context import SUPPRESS_DIRECTIVE, TransformContext
from fp_imports import ModuleImports, export_name_for_type
from fp_logger import log_debug, log_info, log_stage
from fp_projection import TypeProjector, ELEMENT_GENERICS, NODE_GENERICS
from fp_registry import ResolutionKind
from fp_tree import insert_before, iter_children, walk
from fp_unit import TransformResult, UnitContext
from fp_validators import AnyValidator, ShapeValidator

REACT_MODULE = "react"

# Type exports of `react` that map onto a prop-types validator.
REACT_TYPE_VALIDATORS = {
    "Node": "node",
    "ChildrenArray": "node",
    "Element": "element",
    "MixedElement": "element",
    "ComponentType": "func",
    "AbstractComponent": "func",
    "ElementType": "func",
    "StatelessFunctionalComponent": "func",
}

COMPONENT_BASES = ("Component", "PureComponent")

# Return annotations that mark a function as a component.
ELEMENT_RETURN_TYPES = NODE_GENERICS + ELEMENT_GENERICS + ("ReactElement",)

# Sources that name an installed package rather than a file of this project.
_PACKAGE_SOURCE_RE = re.compile(r"^@?\w")

TypeDecl = Union[TypeAliasDecl, InterfaceDecl, OpaqueTypeDecl]


class PropTypesTransformer:
    """
    Entry point: inserts prop-types validators into one compilation unit at a time.

        result = PropTypesTransformer(context).transform(program)

    The program is edited in place. Every call gets a fresh UnitContext, so
    nothing leaks from one unit into the next.
    """

    def __init__(self, context: Optional[TransformContext] = None):
        self.context = context or TransformContext.default()

    def transform(self, program: Program) -> TransformResult:
        log_stage(self.context, "Transforming", program.filename)
        unit = UnitContext(program, self.context)

        if self._is_suppressed(program):
            unit.suppressed = True
            log_info(self.context, f"Skipping suppressed unit '{program.filename}'")
            return TransformResult(program, unit.diagnostics, changed=False, unit=unit)

        unit_pass = _UnitPass(unit)
        unit_pass.visit_body(program.body)

        changed = unit_pass.changed or bool(unit.added_imports)
        log_debug(self.context, f"Unit '{program.filename}': {len(unit.diagnostics)} diagnostic(s)")
        return TransformResult(program, unit.diagnostics, changed=changed, unit=unit)

    def _is_suppressed(self, program: Program) -> bool:
        if program.directives and program.directives[0] == SUPPRESS_DIRECTIVE:
            return True
        return bool(
            self.context.ignore_node_modules
            and program.filename
            and "node_modules" in program.filename
        )


class _UnitPass:
    """
    The single top-to-bottom walk over one unit.

    Type declarations and type imports are registered when reached; a
    component only sees what was registered above it.
    """

    def __init__(self, unit: UnitContext):
        self.unit = unit
        self.options = unit.options
        self.registry = unit.registry
        self.imports = ModuleImports(unit)
        self.builder = ValidatorBuilder(self.imports)
        self.projector = TypeProjector(unit)
        self.annotator = Annotator(unit, self.imports, self.builder)
        self.changed = False

    # --- statement lists ---

    def visit_body(self, body: List[Node]) -> None:
        # Iterate a snapshot: generated statements are never revisited, removed ones are skipped.
        for stmt in list(body):
            if not any(s is stmt for s in body):
                continue
            self.visit_statement(body, stmt)

    def visit_statement(self, container: List[Node], stmt: Node) -> None:
        if isinstance(stmt, ImportDecl):
            self._register_imports(stmt)
        elif isinstance(stmt, TYPE_DECLS):
            self._register_type(container, stmt, anchor=stmt, exported=False)
        elif isinstance(stmt, ExportNamedDecl):
            self._visit_export(container, stmt)
        elif isinstance(stmt, ExportDefaultDecl):
            self._visit_declaration(container, stmt.declaration, anchor=stmt)
        else:
            self._visit_declaration(container, stmt, anchor=stmt)

    def _visit_declaration(self, container: List[Node], node: Node, anchor: Node) -> None:
        if isinstance(node, ClassDecl):
            self._visit_class(container, node, node.name, anchor)
        elif isinstance(node, FunctionDecl):
            self._visit_function(container, node, node.name, anchor)
            self.visit_body(node.body.body)
        elif isinstance(node, VarDecl):
            for d in node.declarations:
                self._visit_declarator(container, d, anchor)
        elif isinstance(node, BlockStmt):
            self.visit_body(node.body)
        elif isinstance(node, IfStmt):
            for branch in (node.consequent, node.alternate):
                if isinstance(branch, BlockStmt):
                    self.visit_body(branch.body)
        elif node is not None:
            self._visit_expression(container, node, anchor)

    def _visit_declarator(self, container: List[Node], d: VarDeclarator, anchor: Node) -> None:
        init = d.init
        if isinstance(init, ClassExpr):
            # The declarator name is the binding in scope after the statement, not the class's own name.
            self._visit_class(container, init, d.name or init.name, anchor)
        elif isinstance(init, (FunctionExpr, ArrowFunctionExpr)):
            self._visit_function(container, init, d.name, anchor)
            if isinstance(init.body, BlockStmt):
                self.visit_body(init.body.body)
        elif init is not None:
            self._visit_expression(container, init, anchor)

    def _visit_expression(self, container: List[Node], node: Node, anchor: Node) -> None:
        """
        Class components nested in an expression: call arguments, assignment
        values, return values, object values. `anchor` is the enclosing statement.
        """
        if isinstance(node, ClassExpr):
            self._visit_class(container, node, node.name, anchor, bound=False)
        elif isinstance(node, (FunctionExpr, ArrowFunctionExpr)):
            if isinstance(node.body, BlockStmt):
                self.visit_body(node.body.body)
            else:
                self._visit_expression(container, node.body, anchor)
        else:
            for child in iter_children(node):
                self._visit_expression(container, child, anchor)

    # --- registration ---

    def _register_imports(self, decl: ImportDecl) -> None:
        source = decl.source
        if _PACKAGE_SOURCE_RE.match(source) and source != REACT_MODULE:
            return

        for spec in decl.specifiers:
            if decl.import_kind != "type" and spec.import_kind != "type":
                continue
            local = spec.local
            original = spec.imported if isinstance(spec, ImportSpecifier) else local

            if source == REACT_MODULE:
                validator = REACT_TYPE_VALIDATORS.get(original)
                if validator is None:
                    continue
                self.registry.declare_imported(local, original, source)
                self.registry.bind_imported_access(local, self.imports.prop_types(validator), is_validator=True)
                continue

            self.registry.declare_imported(local, original, source)
            access = self.imports.get_from_module(
                "named",
                export_name_for_type(original),
                source,
                local=export_name_for_type(local),
            )
            self.registry.bind_imported_access(local, access)
            log_debug(self.options, f"Registered imported type '{local}' from '{source}'")

    def _register_type(self, container: List[Node], decl: TypeDecl, anchor: Node, exported: bool) -> None:
        name = decl.name
        if not name:
            self.unit.fail("[XFM-0030] type declaration has no name", decl, declaration="<anonymous type>")

        right, extends = self._declaration_body(decl)
        binding = export_name_for_type(name)
        validator, recursive = self.projector.project_declaration(
            name, right, binding, type_params=decl.type_params, extends=extends,
        )
        self.registry.declare_internal(name, validator, node=right, type_params=decl.type_params)
        log_debug(self.options, f"Registered type '{name}'")

        if not exported and not recursive:
            return

        # Hoisted binding, reused by components and other units instead of re-deriving the validator.
        value = self.imports.wrap_in_dce_check(self.builder.build_export_value(validator))
        insert_before(container, anchor, VarDecl("var", [VarDeclarator(binding, value)]))
        self.registry.declare_exported(name, binding)
        self.changed = True

        if exported and not self.options.omit_runtime_type_export:
            self.imports.add_export_binding(container, anchor, binding)

    @staticmethod
    def _declaration_body(decl: TypeDecl) -> Tuple[Optional[TypeNode], List[GenericType]]:
        if isinstance(decl, TypeAliasDecl):
            return decl.right, []
        if isinstance(decl, InterfaceDecl):
            return decl.body, decl.extends
        return decl.impltype, []

    # --- exports ---

    def _visit_export(self, container: List[Node], stmt: ExportNamedDecl) -> None:
        if stmt.generated:
            return

        if stmt.export_kind == "type" and stmt.source:
            # export type {X} from './m': pass the other unit's binding through.
            for spec in stmt.specifiers:
                export_name = export_name_for_type(spec.local)
                access = self.imports.get_from_module("named", export_name, stmt.source)
                self.imports.add_export_binding(container, stmt, export_name, access)
                self.changed = True
            return

        if stmt.export_kind == "type" and stmt.declaration is None:
            for spec in stmt.specifiers:
                imported = self.registry.imported.get(spec.local)
                if imported is None or imported.access is None:
                    continue
                if spec.local != spec.exported:
                    log_debug(self.options, f"Renamed type re-export '{spec.local}' as '{spec.exported}' skipped")
                    continue
                self.imports.add_export_binding(container, stmt, export_name_for_type(spec.local), imported.access)
                self.changed = True
            return

        decl = stmt.declaration
        if decl is None:
            return
        if isinstance(decl, TYPE_DECLS):
            self._register_type(container, decl, anchor=stmt, exported=True)
        else:
            self._visit_declaration(container, decl, anchor=stmt)

    # --- components ---

    def _visit_class(self, container: List[Node], node: Union[ClassDecl, ClassExpr], name: Optional[str],
                     anchor: Node, bound: bool = True) -> None:
        """`bound`: `name` is a binding in scope after `anchor`, so it can be referenced there."""
        if name and bound:
            self.registry.declare_class(name, self._class_shape(node))

        for item in node.body:
            if isinstance(item, ClassMethod):
                self.visit_body(item.body.body)

        if not self._extends_component(node):
            log_debug(self.options, f"Class '{name}' is not a component")
            return
        if self.options.no_static and not bound:
            # Nothing outside the expression can name the class.
            log_debug(self.options, f"Class expression '{name or '<anonymous>'}' skipped: no binding to assign to")
            return

        props: Optional[PropsSource] = None
        context: Optional[PropsSource] = None
        for item in node.body:
            if not isinstance(item, ClassProperty) or item.static or item.type_annotation is None:
                continue
            if item.key == "props":
                props = self._class_member_source(item, name)
            elif item.key == "context":
                context = self._class_member_source(item, name)

        args = node.super_type_args
        if args:
            props_arg = args[0]
            if isinstance(props_arg, GenericType):
                if props_arg.name == "Object":
                    return
                if not self._is_registered(props_arg.name):
                    self.unit.note(f"[RES-0020] props type '{props_arg.name}' of class '{name}' not found", props_arg)
                    return
            props = self._props_source(props_arg)
            if len(args) == 3:
                context_arg = args[2]
                if isinstance(context_arg, GenericType):
                    if context_arg.name == "Object":
                        return
                    if not self._is_registered(context_arg.name):
                        self.unit.note(
                            f"[RES-0020] context type '{context_arg.name}' of class '{name}' not found",
                            context_arg,
                        )
                        context_arg = None
                if context_arg is not None:
                    context = self._props_source(context_arg)

        if props is None and context is None:
            return
        target = ComponentTarget(name, node, container, anchor, is_class=True)
        self.changed = self.annotator.annotate(target, props, context) or self.changed

    def _visit_function(self, container: List[Node], node: Union[FunctionDecl, FunctionExpr, ArrowFunctionExpr],
                        name: Optional[str], anchor: Node) -> None:
        if not self._is_function_component(node):
            return

        params = node.params
        if not params:
            return
        if params[0].type_annotation is None:
            self.unit.note(f"[ANN-0020] component '{name}' has no props annotation", params[0])
            return

        props = self._props_source(params[0].type_annotation)
        context = None
        if len(params) > 1 and params[1].type_annotation is not None:
            context = self._props_source(params[1].type_annotation)
        if props is None:
            return

        target = ComponentTarget(name, node, container, anchor, is_class=False)
        self.changed = self.annotator.annotate(target, props, context) or self.changed

    # --- helpers ---

    def _props_source(self, annotation: TypeNode) -> Optional[PropsSource]:
        """A reference to the hoisted binding of an exported type, else a fresh projection."""
        if isinstance(annotation, GenericType) and not annotation.type_args:
            binding = self.registry.exported_binding(annotation.name)
            if binding is not None:
                return PropsSource(binding=binding)
        validator = self.projector.project(annotation)
        if isinstance(validator, AnyValidator):
            return None
        return PropsSource(validator=validator)

    def _class_member_source(self, item: ClassProperty, name: Optional[str]) -> Optional[PropsSource]:
        source = self._props_source(item.type_annotation)
        if source is not None and source.validator is not None and not describes_props(source.validator):
            self.unit.fail(
                f"[XFM-0020] cannot derive validators from the '{item.key}' annotation of class '{name}'",
                item,
                declaration=name,
            )
        return source

    def _class_shape(self, node: Union[ClassDecl, ClassExpr]) -> Optional[ShapeValidator]:
        """Shape of a class's typed instance properties, accepted in place of an instance."""
        props = [
            item for item in node.body
            if isinstance(item, ClassProperty) and not item.static and item.type_annotation is not None
            and item.key not in ("props", "context", "state")
        ]
        if not props:
            return None
        validator = self.projector.project(
            ObjectType([ObjectTypeProperty(p.key, p.type_annotation) for p in props])
        )
        return validator if isinstance(validator, ShapeValidator) else None

    def _is_registered(self, name: str) -> bool:
        res = self.registry.resolve(name)
        return res.kind in (ResolutionKind.INTERNAL, ResolutionKind.IMPORTED)

    @staticmethod
    def _extends_component(node: Union[ClassDecl, ClassExpr]) -> bool:
        sup = node.super_class
        if isinstance(sup, Identifier):
            return sup.name in COMPONENT_BASES
        if isinstance(sup, MemberExpr):
            return isinstance(sup.obj, Identifier) and sup.obj.name == "React" and sup.prop in COMPONENT_BASES
        return False

    def _is_function_component(self, node: Union[FunctionDecl, FunctionExpr, ArrowFunctionExpr]) -> bool:
        if self._returns_react_element(node.return_type):
            return True
        body = node.body
        for child in walk(body):
            if isinstance(child, JSXElement):
                return True
            if isinstance(child, CallExpr) and _is_create_element(child.callee):
                return True
        return False

    def _returns_react_element(self, annotation: Optional[TypeNode]) -> bool:
        if isinstance(annotation, NullableType):
            annotation = annotation.inner
        if not isinstance(annotation, GenericType):
            return False
        if annotation.name in ELEMENT_RETURN_TYPES:
            return True
        imported = self.registry.imported.get(annotation.name)
        return imported is not None and imported.location == REACT_MODULE \
            and REACT_TYPE_VALIDATORS.get(imported.source_name) in ("node", "element")


def _is_create_element(callee: Node) -> bool:
    if isinstance(callee, Identifier):
        return callee.name == "createElement"
    return isinstance(callee, MemberExpr) and callee.prop == "createElement" \
        and isinstance(callee.obj, Identifier) and callee.obj.name == "React"
