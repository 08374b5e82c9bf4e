#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fp_ast import (
    PrimitiveType, ObjectType, ObjectTypeProperty, GenericType, Identifier, MemberExpr, JSXElement, ReturnStmt,
    BlockStmt, VarDecl, VarDeclarator, Param, FunctionDecl, ArrowFunctionExpr, ClassMethod, ClassDecl,
    ClassExpr, TypeAliasDecl, ImportDecl, ImportSpecifier, ExportNamedDecl, Program,
)
from fp_builder import ValidatorBuilder
from fp_context import TransformContext
from fp_imports import ModuleImports
from fp_js_emitter import JsEmitter
from fp_projection import TypeProjector
from fp_transform import PropTypesTransformer
from fp_unit import UnitContext


# --- host tree helpers ---

def prim(name: str) -> PrimitiveType:
    return PrimitiveType(name)


def ref(name: str, *args) -> GenericType:
    return GenericType(name, list(args))


def prop(key: str, value, optional: bool = False) -> ObjectTypeProperty:
    return ObjectTypeProperty(key, value, optional)


def obj(*props, exact: bool = False) -> ObjectType:
    return ObjectType(list(props), exact=exact)


def alias(name: str, right, params=()) -> TypeAliasDecl:
    return TypeAliasDecl(name, right, list(params))


def export(decl) -> ExportNamedDecl:
    return ExportNamedDecl(decl)


def import_types(source: str, *names: str) -> ImportDecl:
    return ImportDecl([ImportSpecifier(n, n) for n in names], source, import_kind="type")


def function_component(name: str, props_type=None, context_type=None) -> FunctionDecl:
    """`function Name(props: T) { return <div />; }`"""
    params = [Param("props", props_type)]
    if context_type is not None:
        params.append(Param("context", context_type))
    return FunctionDecl(name, params, BlockStmt([ReturnStmt(JSXElement("div"))]))


def arrow_component(name: str, props_type) -> VarDecl:
    """`const Name = (props: T) => <div />;`"""
    return VarDecl("const", [VarDeclarator(name, ArrowFunctionExpr([Param("props", props_type)], JSXElement("div")))])


def class_component(name: str, *super_args, body=None, base: str = "React.Component") -> ClassDecl:
    """`class Name extends React.Component<...> { render() { return <div />; } }`"""
    if "." in base:
        obj_name, prop_name = base.split(".")
        super_class = MemberExpr(Identifier(obj_name), prop_name)
    else:
        super_class = Identifier(base)
    render = ClassMethod("render", [], BlockStmt([ReturnStmt(JSXElement("div"))]))
    members = list(body or []) + [render]
    return ClassDecl(name, super_class, members, list(super_args))


def class_expression(name, *super_args, body=None, base: str = "React.Component") -> ClassExpr:
    """`class Name extends React.Component<...> {...}` in expression position."""
    decl = class_component(name, *super_args, body=body, base=base)
    return ClassExpr(decl.name, decl.super_class, decl.body, decl.super_type_args)


def emit(node) -> str:
    """JavaScript for a program or a single expression."""
    if isinstance(node, Program):
        return JsEmitter().emit_program(node)
    return JsEmitter().emit_expression(node)


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Code string like "RES-0010" or "[RES-0010]"

    Returns:
        True if any diagnostic message contains the code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)


# --- Babel JSON builders ---

def babel_ident(name, annotation=None):
    node = {"type": "Identifier", "name": name}
    if annotation is not None:
        node["typeAnnotation"] = {"type": "TypeAnnotation", "typeAnnotation": annotation}
    return node


def babel_generic(name):
    return {"type": "GenericTypeAnnotation", "id": babel_ident(name), "typeParameters": None}


def babel_object_type(*props):
    return {
        "type": "ObjectTypeAnnotation",
        "properties": [
            {"type": "ObjectTypeProperty", "key": babel_ident(key), "value": value, "optional": optional}
            for key, value, optional in props
        ],
        "indexers": [],
        "exact": False,
    }


def babel_jsx(name, **attributes):
    return {
        "type": "JSXElement",
        "openingElement": {
            "type": "JSXOpeningElement",
            "name": {"type": "JSXIdentifier", "name": name},
            "attributes": [
                {
                    "type": "JSXAttribute",
                    "name": {"type": "JSXIdentifier", "name": key},
                    "value": {"type": "StringLiteral", "value": value},
                }
                for key, value in attributes.items()
            ],
            "selfClosing": True,
        },
        "closingElement": None,
        "children": [],
    }


def babel_block(*stmts):
    return {"type": "BlockStatement", "body": list(stmts), "directives": []}


def babel_props_alias():
    return {
        "type": "TypeAlias",
        "id": babel_ident("Props"),
        "typeParameters": None,
        "right": babel_object_type(
            ("name", {"type": "StringTypeAnnotation"}, False),
            ("age", {"type": "NumberTypeAnnotation"}, True),
        ),
    }


def babel_function_component():
    return {
        "type": "FunctionDeclaration",
        "id": babel_ident("Foo"),
        "params": [babel_ident("props", babel_generic("Props"))],
        "body": babel_block({"type": "ReturnStatement", "argument": babel_jsx("div", className="box")}),
        "returnType": None,
        "async": False,
        "generator": False,
        "loc": {"start": {"line": 2, "column": 0}, "end": {"line": 4, "column": 1}},
    }


def babel_class_component():
    render = {
        "type": "ClassMethod",
        "kind": "method",
        "key": babel_ident("render"),
        "computed": False,
        "static": False,
        "params": [],
        "body": babel_block({"type": "ReturnStatement", "argument": babel_jsx("span")}),
    }
    return {
        "type": "ClassDeclaration",
        "id": babel_ident("Foo"),
        "superClass": {
            "type": "MemberExpression",
            "object": babel_ident("React"),
            "property": babel_ident("Component"),
            "computed": False,
        },
        "superTypeParameters": {"type": "TypeParameterInstantiation", "params": [babel_generic("Props")]},
        "body": {"type": "ClassBody", "body": [render]},
    }


def babel_file(*body, directives=()):
    return {
        "type": "File",
        "program": {
            "type": "Program",
            "sourceType": "module",
            "body": list(body),
            "directives": [
                {"type": "Directive", "value": {"type": "DirectiveLiteral", "value": d}} for d in directives
            ],
        },
    }


# --- fixtures ---

@pytest.fixture
def context() -> TransformContext:
    return TransformContext.default()


@pytest.fixture
def unit(context: TransformContext) -> UnitContext:
    return UnitContext(Program([]), context)


@pytest.fixture
def projector(unit: UnitContext) -> TypeProjector:
    return TypeProjector(unit)


@pytest.fixture
def builder(unit: UnitContext) -> ValidatorBuilder:
    return ValidatorBuilder(ModuleImports(unit))


@pytest.fixture
def transform():
    """Run one unit through the transformer.

    Usage:
        def test_something(transform):
            result = transform([alias("P", obj(...)), function_component("Foo", ref("P"))])
            assert result.changed
    """

    def _transform(body, filename: str | None = None, directives=None, **options):
        program = Program(list(body), list(directives or []), filename=filename)
        return PropTypesTransformer(TransformContext(**options)).transform(program)

    return _transform


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write
