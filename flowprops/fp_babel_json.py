"""
Babel AST interchange.

Maps the JSON form of a Babel `File`/`Program` (as produced by @babel/parser
with the `flow` and `jsx` plugins) to the host tree and back.

Anything the host tree does not model becomes a RawNode and is written back
unchanged. Loaded nodes keep their source object in `origin`, so dumping
rebuilds only the fields the tree models and preserves the rest (type
parameters, async flags, source positions, ...).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from typing import Any, Dict, List, Optional

from fp_ast import (
    Span, Node, TypeNode, PrimitiveType, AnyType, ObjectType, ObjectTypeProperty, ObjectTypeIndexer,
    ObjectTypeSpread, ArrayType, TupleType, UnionType, IntersectionType, LiteralType, GenericType, NullableType,
    Expr, Identifier, StringLit, NumberLit, BoolLit, NullLit, MemberExpr, CallExpr, ObjectProp, SpreadElement,
    ObjectExpr, ArrayExpr, ConditionalExpr, BinaryExpr, LogicalExpr, UnaryExpr, AssignmentExpr, JSXElement, RawNode,
    ExpressionStmt, ReturnStmt, BlockStmt, IfStmt, VarDeclarator, VarDecl, Param, FunctionDecl, FunctionExpr,
    ArrowFunctionExpr, ClassProperty, ClassMethod, ClassDecl, ClassExpr, TypeAliasDecl, InterfaceDecl,
    OpaqueTypeDecl, ImportSpecifier, ImportDefaultSpecifier, ImportDecl, ExportSpecifier, ExportNamedDecl,
    ExportDefaultDecl, Program,
)
from fp_errors import BabelFormatError

Json = Dict[str, Any]

_PRIMITIVE_ANNOTATIONS = {
    "StringTypeAnnotation": "string",
    "NumberTypeAnnotation": "number",
    "BooleanTypeAnnotation": "boolean",
    "FunctionTypeAnnotation": "function",
    "SymbolTypeAnnotation": "symbol",
    "BigIntTypeAnnotation": "bigint",
    "MixedTypeAnnotation": "mixed",
    "VoidTypeAnnotation": "void",
    "NullLiteralTypeAnnotation": "null",
    "EmptyTypeAnnotation": "empty",
}
_PRIMITIVE_NAMES = {v: k for k, v in _PRIMITIVE_ANNOTATIONS.items()}
_PRIMITIVE_NAMES["bool"] = "BooleanTypeAnnotation"

_LITERAL_ANNOTATIONS = ("StringLiteralTypeAnnotation", "NumberLiteralTypeAnnotation", "BooleanLiteralTypeAnnotation")

_STATEMENT_KINDS = (
    "ClassDeclaration", "FunctionDeclaration", "VariableDeclaration", "TypeAlias", "InterfaceDeclaration",
    "OpaqueType",
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class _Unmapped(Exception):
    """The host tree cannot represent this node; the nearest statement/expression becomes raw."""
    pass


# ==========================================================
# Loading
# ==========================================================

class BabelLoader:
    def __init__(self, filename: Optional[str] = None):
        self.filename = filename

    def program(self, data: Any) -> Program:
        if not isinstance(data, dict):
            raise BabelFormatError("expected a JSON object")
        kind = data.get("type")
        if kind is None:
            raise BabelFormatError("node has no 'type'")
        path = "$"
        if kind == "File":
            if "program" not in data:
                raise BabelFormatError("File node has no 'program'")
            data = data["program"]
            path = "$.program"
            kind = data.get("type") if isinstance(data, dict) else None
        if kind != "Program":
            raise BabelFormatError(f"expected a Program node, got '{kind}'", path)
        if not isinstance(data.get("body"), list):
            raise BabelFormatError("Program node has no 'body' list", path)

        body = [self.stmt(s, f"{path}.body[{i}]") for i, s in enumerate(data["body"])]
        directives = [d.get("value", {}).get("value", "") for d in data.get("directives") or []]
        return Program(body, directives, filename=self.filename, span=_span(data), origin=data)

    # --- statements ---

    def stmt(self, data: Any, path: str = "$") -> Node:
        kind = _kind(data, path)
        try:
            return self._stmt(kind, data, path)
        except _Unmapped:
            return RawNode(data, span=_span(data))
        except KeyError as e:
            raise BabelFormatError(f"{kind} node has no {e}", path) from None

    def _stmt(self, kind: str, data: Json, path: str) -> Node:
        span = _span(data)
        if kind == "ExpressionStatement":
            return ExpressionStmt(self.expr(data["expression"], path), span=span, origin=data)
        if kind == "ReturnStatement":
            arg = data.get("argument")
            return ReturnStmt(self.expr(arg, path) if arg is not None else None, span=span, origin=data)
        if kind == "BlockStatement":
            return self.block(data, path)
        if kind == "IfStatement":
            alternate = data.get("alternate")
            return IfStmt(
                self.expr(data["test"], path),
                self.stmt(data["consequent"], path),
                self.stmt(alternate, path) if alternate is not None else None,
                span=span, origin=data,
            )
        if kind == "VariableDeclaration":
            declarations = []
            for d in data.get("declarations", []):
                ident = d.get("id") or {}
                if ident.get("type") != "Identifier":
                    raise _Unmapped()
                init = d.get("init")
                declarations.append(VarDeclarator(
                    ident["name"],
                    self.expr(init, path) if init is not None else None,
                    span=_span(d), origin=d,
                ))
            return VarDecl(data.get("kind", "var"), declarations, span=span, origin=data)
        if kind == "FunctionDeclaration":
            return FunctionDecl(
                _name(data.get("id")),
                self.params(data.get("params", [])),
                self.block(data["body"], path),
                self.type_annotation(data.get("returnType")),
                span=span, origin=data,
            )
        if kind == "ClassDeclaration":
            return ClassDecl(_name(data.get("id")), *self._class_parts(data, path), span=span, origin=data)
        if kind == "TypeAlias":
            return TypeAliasDecl(
                _name(data.get("id")), self.type_node(data.get("right")), _type_params(data),
                span=span, origin=data,
            )
        if kind == "InterfaceDeclaration":
            extends = [
                GenericType(_name(e.get("id")), self._type_args(e), span=_span(e), origin=e)
                for e in data.get("extends") or []
            ]
            body = self.type_node(data.get("body"))
            if not isinstance(body, ObjectType):
                raise _Unmapped()
            return InterfaceDecl(_name(data.get("id")), body, _type_params(data), extends, span=span, origin=data)
        if kind == "OpaqueType":
            impl = data.get("impltype")
            return OpaqueTypeDecl(
                _name(data.get("id")), self.type_node(impl) if impl is not None else None, _type_params(data),
                span=span, origin=data,
            )
        if kind == "ImportDeclaration":
            specifiers: List[Node] = []
            for s in data.get("specifiers", []):
                s_kind = s.get("type")
                if s_kind == "ImportSpecifier":
                    imported = s["imported"]
                    imported_name = imported.get("name", imported.get("value"))
                    specifiers.append(ImportSpecifier(
                        imported_name, s["local"]["name"], s.get("importKind") or "value",
                        span=_span(s), origin=s,
                    ))
                elif s_kind == "ImportDefaultSpecifier":
                    specifiers.append(ImportDefaultSpecifier(s["local"]["name"], span=_span(s), origin=s))
                else:
                    raise _Unmapped()
            return ImportDecl(
                specifiers, data["source"]["value"], data.get("importKind") or "value", span=span, origin=data,
            )
        if kind == "ExportNamedDeclaration":
            decl = data.get("declaration")
            specifiers = []
            for s in data.get("specifiers", []):
                if s.get("type") != "ExportSpecifier":
                    raise _Unmapped()
                specifiers.append(ExportSpecifier(_name(s["local"]), _name(s["exported"]), span=_span(s), origin=s))
            source = data.get("source")
            return ExportNamedDecl(
                self.stmt(decl, f"{path}.declaration") if decl is not None else None,
                specifiers,
                source["value"] if source else None,
                data.get("exportKind") or "value",
                span=span, origin=data,
            )
        if kind == "ExportDefaultDeclaration":
            decl = data["declaration"]
            if _kind(decl, f"{path}.declaration") in _STATEMENT_KINDS:
                inner: Node = self.stmt(decl, f"{path}.declaration")
            else:
                inner = self.expr(decl, f"{path}.declaration")
            return ExportDefaultDecl(inner, span=span, origin=data)
        raise _Unmapped()

    def block(self, data: Json, path: str) -> BlockStmt:
        if _kind(data, path) != "BlockStatement":
            raise _Unmapped()
        return BlockStmt([self.stmt(s, path) for s in data.get("body", [])], span=_span(data), origin=data)

    def _class_parts(self, data: Json, path: str):
        super_class = data.get("superClass")
        body: List[Node] = []
        for item in (data.get("body") or {}).get("body", []):
            body.append(self._class_member(item, path))
        super_args = [self.type_node(p) for p in (data.get("superTypeParameters") or {}).get("params", [])]
        return (
            self.expr(super_class, path) if super_class is not None else None,
            body,
            super_args,
        )

    def _class_member(self, item: Json, path: str) -> Node:
        kind = _kind(item, path)
        key = item.get("key") or {}
        if item.get("computed") or key.get("type") != "Identifier":
            return RawNode(item, span=_span(item))
        if kind == "ClassProperty":
            value = item.get("value")
            annotation = item.get("typeAnnotation")
            return ClassProperty(
                key["name"],
                self.expr(value, path) if value is not None else None,
                self.type_annotation(annotation),
                bool(item.get("static")),
                span=_span(item), origin=item,
            )
        if kind == "ClassMethod":
            try:
                return ClassMethod(
                    key["name"], self.params(item.get("params", [])), self.block(item["body"], path),
                    bool(item.get("static")), span=_span(item), origin=item,
                )
            except _Unmapped:
                return RawNode(item, span=_span(item))
        return RawNode(item, span=_span(item))

    def params(self, items: List[Json]) -> List[Param]:
        params = []
        for p in items:
            annotation = p.get("typeAnnotation")
            if annotation is None and p.get("type") == "AssignmentPattern":
                annotation = (p.get("left") or {}).get("typeAnnotation")
            name = p["name"] if p.get("type") == "Identifier" else ""
            params.append(Param(name, self.type_annotation(annotation), span=_span(p), origin=p))
        return params

    # --- expressions ---

    def expr(self, data: Any, path: str = "$") -> Expr:
        kind = _kind(data, path)
        try:
            return self._expr(kind, data, path)
        except _Unmapped:
            return RawNode(data, span=_span(data))
        except KeyError as e:
            raise BabelFormatError(f"{kind} node has no {e}", path) from None

    def _expr(self, kind: str, data: Json, path: str) -> Expr:
        span = _span(data)
        if kind == "Identifier":
            return Identifier(data["name"], span=span, origin=data)
        if kind == "ThisExpression":
            return Identifier("this", span=span, origin=data)
        if kind == "StringLiteral":
            return StringLit(data["value"], span=span, origin=data)
        if kind == "NumericLiteral":
            return NumberLit(data["value"], span=span, origin=data)
        if kind == "BooleanLiteral":
            return BoolLit(bool(data["value"]), span=span, origin=data)
        if kind == "NullLiteral":
            return NullLit(span=span, origin=data)
        if kind == "MemberExpression":
            prop = data["property"]
            if data.get("computed"):
                if prop.get("type") != "StringLiteral":
                    raise _Unmapped()
                name = prop["value"]
            elif prop.get("type") == "Identifier":
                name = prop["name"]
            else:
                raise _Unmapped()
            return MemberExpr(self.expr(data["object"], path), name, span=span, origin=data)
        if kind == "CallExpression":
            args = data.get("arguments", [])
            if any(a.get("type") == "SpreadElement" for a in args):
                raise _Unmapped()
            return CallExpr(self.expr(data["callee"], path), [self.expr(a, path) for a in args],
                            span=span, origin=data)
        if kind == "ObjectExpression":
            properties: List[Node] = []
            for p in data.get("properties", []):
                p_kind = p.get("type")
                if p_kind == "SpreadElement":
                    properties.append(SpreadElement(self.expr(p["argument"], path), span=_span(p), origin=p))
                elif p_kind == "ObjectProperty" and not p.get("computed"):
                    properties.append(ObjectProp(_key(p["key"]), self.expr(p["value"], path),
                                                 span=_span(p), origin=p))
                else:
                    raise _Unmapped()
            return ObjectExpr(properties, span=span, origin=data)
        if kind == "ArrayExpression":
            elements = data.get("elements", [])
            if any(e is None or e.get("type") == "SpreadElement" for e in elements):
                raise _Unmapped()
            return ArrayExpr([self.expr(e, path) for e in elements], span=span, origin=data)
        if kind == "ConditionalExpression":
            return ConditionalExpr(
                self.expr(data["test"], path), self.expr(data["consequent"], path),
                self.expr(data["alternate"], path), span=span, origin=data,
            )
        if kind == "BinaryExpression":
            return BinaryExpr(data["operator"], self.expr(data["left"], path), self.expr(data["right"], path),
                              span=span, origin=data)
        if kind == "LogicalExpression":
            return LogicalExpr(data["operator"], self.expr(data["left"], path), self.expr(data["right"], path),
                               span=span, origin=data)
        if kind == "UnaryExpression":
            return UnaryExpr(data["operator"], self.expr(data["argument"], path), span=span, origin=data)
        if kind == "AssignmentExpression":
            if data.get("operator") != "=":
                raise _Unmapped()
            return AssignmentExpr(self.expr(data["left"], path), self.expr(data["right"], path),
                                  span=span, origin=data)
        if kind == "FunctionExpression":
            return FunctionExpr(
                _name(data.get("id")), self.params(data.get("params", [])), self.block(data["body"], path),
                self.type_annotation(data.get("returnType")), span=span, origin=data,
            )
        if kind == "ArrowFunctionExpression":
            body = data["body"]
            if body.get("type") == "BlockStatement":
                arrow_body: Node = self.block(body, path)
            else:
                arrow_body = self.expr(body, path)
            return ArrowFunctionExpr(
                self.params(data.get("params", [])), arrow_body, self.type_annotation(data.get("returnType")),
                span=span, origin=data,
            )
        if kind == "ClassExpression":
            return ClassExpr(_name(data.get("id")), *self._class_parts(data, path), span=span, origin=data)
        if kind in ("JSXElement", "JSXFragment"):
            return JSXElement(_jsx_name(data), span=span, origin=data)
        raise _Unmapped()

    # --- type annotations ---

    def type_annotation(self, data: Optional[Json]) -> Optional[TypeNode]:
        """Unwraps a `TypeAnnotation` holder; None when there is no annotation."""
        if data is None:
            return None
        return self.type_node(data)

    def type_node(self, data: Optional[Json]) -> TypeNode:
        if data is None:
            return AnyType()
        kind = _kind(data, "$")
        span = _span(data)
        if kind == "TypeAnnotation":
            return self.type_node(data.get("typeAnnotation"))
        if kind in _PRIMITIVE_ANNOTATIONS:
            return PrimitiveType(_PRIMITIVE_ANNOTATIONS[kind], span=span, origin=data)
        if kind == "ObjectTypeAnnotation":
            properties: List[Node] = []
            for p in data.get("properties", []):
                if p.get("type") == "ObjectTypeSpreadProperty":
                    properties.append(ObjectTypeSpread(self.type_node(p.get("argument")), span=_span(p), origin=p))
                else:
                    properties.append(ObjectTypeProperty(
                        _key(p["key"]), self.type_node(p.get("value")), bool(p.get("optional")),
                        span=_span(p), origin=p,
                    ))
            indexers = [
                ObjectTypeIndexer(self.type_node(i.get("key")), self.type_node(i.get("value")),
                                  span=_span(i), origin=i)
                for i in data.get("indexers") or []
            ]
            return ObjectType(properties, indexers, bool(data.get("exact")), span=span, origin=data)
        if kind == "ArrayTypeAnnotation":
            return ArrayType(self.type_node(data.get("elementType")), span=span, origin=data)
        if kind == "TupleTypeAnnotation":
            return TupleType([self.type_node(t) for t in data.get("types") or []], span=span, origin=data)
        if kind == "UnionTypeAnnotation":
            return UnionType([self.type_node(t) for t in data.get("types", [])], span=span, origin=data)
        if kind == "IntersectionTypeAnnotation":
            return IntersectionType([self.type_node(t) for t in data.get("types", [])], span=span, origin=data)
        if kind in _LITERAL_ANNOTATIONS:
            return LiteralType(data["value"], span=span, origin=data)
        if kind == "GenericTypeAnnotation":
            return GenericType(_name(data.get("id")), self._type_args(data), span=span, origin=data)
        if kind == "NullableTypeAnnotation":
            return NullableType(self.type_node(data.get("typeAnnotation")), span=span, origin=data)
        # AnyTypeAnnotation, ExistsTypeAnnotation, TypeofTypeAnnotation and anything newer.
        return AnyType(span=span, origin=data)

    def _type_args(self, data: Json) -> List[TypeNode]:
        return [self.type_node(p) for p in (data.get("typeParameters") or {}).get("params", [])]


def _kind(data: Any, path: str) -> str:
    if not isinstance(data, dict):
        raise BabelFormatError("expected a node object", path)
    kind = data.get("type")
    if not isinstance(kind, str):
        raise BabelFormatError("node has no 'type'", path)
    return kind


def _span(data: Json) -> Optional[Span]:
    loc = data.get("loc") if isinstance(data, dict) else None
    if not loc or "start" not in loc or "end" not in loc:
        return None
    start, end = loc["start"], loc["end"]
    return Span(start["line"], start["column"] + 1, end["line"], end["column"] + 1)


def _name(ident: Optional[Json]) -> Optional[str]:
    """Name of an Identifier, or the dotted name of a QualifiedTypeIdentifier."""
    if ident is None:
        return None
    kind = ident.get("type")
    if kind == "QualifiedTypeIdentifier":
        return f"{_name(ident.get('qualification'))}.{_name(ident.get('id'))}"
    if kind == "StringLiteral":
        return ident["value"]
    return ident.get("name")


def _key(key: Json) -> str:
    if key.get("type") == "Identifier":
        return key["name"]
    if key.get("type") in ("StringLiteral", "NumericLiteral"):
        return str(key["value"])
    raise _Unmapped()


def _type_params(data: Json) -> List[str]:
    return [p["name"] for p in (data.get("typeParameters") or {}).get("params", [])]


def _jsx_name(data: Json) -> str:
    def name_of(n: Optional[Json]) -> str:
        if n is None:
            return ""
        kind = n.get("type")
        if kind == "JSXMemberExpression":
            return f"{name_of(n.get('object'))}.{name_of(n.get('property'))}"
        if kind == "JSXNamespacedName":
            return f"{name_of(n.get('namespace'))}:{name_of(n.get('name'))}"
        return n.get("name", "")

    opening = data.get("openingElement")
    return name_of(opening.get("name")) if opening else ""


# ==========================================================
# Dumping
# ==========================================================

class BabelDumper:
    def program(self, program: Program) -> Json:
        out = self._base(program, "Program")
        out["body"] = [self.node(s) for s in program.body]
        if program.origin is None:
            out["sourceType"] = "module"
            out["directives"] = [
                {"type": "Directive", "value": {"type": "DirectiveLiteral", "value": d}} for d in program.directives
            ]
        return {"type": "File", "program": out}

    @staticmethod
    def _base(node: Node, kind: str) -> Json:
        out = dict(node.origin) if isinstance(node.origin, dict) else {}
        out["type"] = kind
        return out

    def node(self, n: Optional[Node]) -> Optional[Json]:
        if n is None:
            return None
        if isinstance(n, RawNode):
            return n.data
        if isinstance(n, TypeNode):
            return self.type_node(n)
        if isinstance(n, (TypeAliasDecl, InterfaceDecl, OpaqueTypeDecl, ImportDecl, JSXElement, Param)) \
                and n.origin is not None:
            # Never edited by the transform.
            return n.origin

        # --- statements ---
        if isinstance(n, ExpressionStmt):
            out = self._base(n, "ExpressionStatement")
            out["expression"] = self.node(n.expr)
        elif isinstance(n, ReturnStmt):
            out = self._base(n, "ReturnStatement")
            out["argument"] = self.node(n.value)
        elif isinstance(n, BlockStmt):
            out = self._base(n, "BlockStatement")
            out["body"] = [self.node(s) for s in n.body]
            out.setdefault("directives", [])
        elif isinstance(n, IfStmt):
            out = self._base(n, "IfStatement")
            out["test"] = self.node(n.test)
            out["consequent"] = self.node(n.consequent)
            out["alternate"] = self.node(n.alternate)
        elif isinstance(n, VarDecl):
            out = self._base(n, "VariableDeclaration")
            out["kind"] = n.kind
            out["declarations"] = [self._declarator(d) for d in n.declarations]
        elif isinstance(n, FunctionDecl):
            out = self._base(n, "FunctionDeclaration")
            self._function_fields(out, n.name, n.params, n.body)
        elif isinstance(n, (ClassDecl, ClassExpr)):
            out = self._base(n, "ClassDeclaration" if isinstance(n, ClassDecl) else "ClassExpression")
            out["id"] = _identifier(n.name) if n.name else None
            out["superClass"] = self.node(n.super_class)
            body = dict(out.get("body") or {"type": "ClassBody"})
            body["body"] = [self.node(item) for item in n.body]
            out["body"] = body
        elif isinstance(n, ClassProperty):
            out = self._base(n, "ClassProperty")
            out["key"] = _identifier(n.key)
            out["value"] = self.node(n.value)
            out["static"] = n.static
            out.setdefault("computed", False)
            if n.origin is None and n.type_annotation is not None:
                out["typeAnnotation"] = _type_annotation(self.type_node(n.type_annotation))
        elif isinstance(n, ClassMethod):
            out = self._base(n, "ClassMethod")
            out.setdefault("kind", "constructor" if n.name == "constructor" else "method")
            out["key"] = _identifier(n.name)
            out["static"] = n.static
            out.setdefault("computed", False)
            out["params"] = [self.node(p) for p in n.params]
            out["body"] = self.node(n.body)
        elif isinstance(n, Param):
            out = _identifier(n.name)
            if n.type_annotation is not None:
                out["typeAnnotation"] = _type_annotation(self.type_node(n.type_annotation))
        elif isinstance(n, TypeAliasDecl):
            out = {"type": "TypeAlias", "id": _identifier(n.name), "typeParameters": _type_param_decl(n.type_params),
                   "right": self.type_node(n.right)}
        elif isinstance(n, InterfaceDecl):
            out = {
                "type": "InterfaceDeclaration",
                "id": _identifier(n.name),
                "typeParameters": _type_param_decl(n.type_params),
                "extends": [
                    {"type": "InterfaceExtends", "id": _qualified(e.name), "typeParameters": self._type_args(e)}
                    for e in n.extends
                ],
                "body": self.type_node(n.body),
            }
        elif isinstance(n, OpaqueTypeDecl):
            out = {"type": "OpaqueType", "id": _identifier(n.name), "typeParameters": _type_param_decl(n.type_params),
                   "impltype": self.type_node(n.impltype) if n.impltype is not None else None, "supertype": None}
        elif isinstance(n, ImportDecl):
            out = {"type": "ImportDeclaration", "importKind": n.import_kind, "source": _string(n.source),
                   "specifiers": [self._import_specifier(s) for s in n.specifiers]}
        elif isinstance(n, ExportNamedDecl):
            out = self._base(n, "ExportNamedDeclaration")
            out["declaration"] = self.node(n.declaration)
            out["specifiers"] = [self._export_specifier(s) for s in n.specifiers]
            out["source"] = _string(n.source) if n.source is not None else None
            out["exportKind"] = n.export_kind
        elif isinstance(n, ExportDefaultDecl):
            out = self._base(n, "ExportDefaultDeclaration")
            out["declaration"] = self.node(n.declaration)
        else:
            out = self.expr(n)
        return out

    def _declarator(self, d: VarDeclarator) -> Json:
        out = self._base(d, "VariableDeclarator")
        ident = out.get("id")
        if not (isinstance(ident, dict) and ident.get("name") == d.name):
            out["id"] = _identifier(d.name)
        out["init"] = self.node(d.init)
        return out

    def _function_fields(self, out: Json, name: Optional[str], params: List[Param], body: Node) -> None:
        out["id"] = _identifier(name) if name else None
        out["params"] = [self.node(p) for p in params]
        out["body"] = self.node(body)
        out.setdefault("async", False)
        out.setdefault("generator", False)

    def _import_specifier(self, s: Node) -> Json:
        if s.origin is not None:
            return s.origin
        if isinstance(s, ImportDefaultSpecifier):
            return {"type": "ImportDefaultSpecifier", "local": _identifier(s.local)}
        assert isinstance(s, ImportSpecifier)
        return {"type": "ImportSpecifier", "imported": _identifier(s.imported), "local": _identifier(s.local),
                "importKind": None if s.import_kind == "value" else s.import_kind}

    def _export_specifier(self, s: ExportSpecifier) -> Json:
        if s.origin is not None:
            return s.origin
        return {"type": "ExportSpecifier", "local": _identifier(s.local), "exported": _identifier(s.exported)}

    # --- expressions ---

    def expr(self, n: Node) -> Json:
        if isinstance(n, Identifier):
            if n.name == "this":
                return self._base(n, "ThisExpression")
            out = self._base(n, "Identifier")
            out["name"] = n.name
        elif isinstance(n, StringLit):
            out = self._base(n, "StringLiteral")
            out["value"] = n.value
        elif isinstance(n, NumberLit):
            out = self._base(n, "NumericLiteral")
            out["value"] = n.value
        elif isinstance(n, BoolLit):
            out = self._base(n, "BooleanLiteral")
            out["value"] = n.value
        elif isinstance(n, NullLit):
            out = self._base(n, "NullLiteral")
        elif isinstance(n, MemberExpr):
            out = self._base(n, "MemberExpression")
            out["object"] = self.node(n.obj)
            if _IDENTIFIER_RE.match(n.prop):
                out["property"] = _identifier(n.prop)
                out["computed"] = False
            else:
                out["property"] = _string(n.prop)
                out["computed"] = True
        elif isinstance(n, CallExpr):
            out = self._base(n, "CallExpression")
            out["callee"] = self.node(n.callee)
            out["arguments"] = [self.node(a) for a in n.args]
        elif isinstance(n, ObjectExpr):
            out = self._base(n, "ObjectExpression")
            out["properties"] = [self._object_member(p) for p in n.properties]
        elif isinstance(n, ArrayExpr):
            out = self._base(n, "ArrayExpression")
            out["elements"] = [self.node(e) for e in n.elements]
        elif isinstance(n, ConditionalExpr):
            out = self._base(n, "ConditionalExpression")
            out["test"] = self.node(n.test)
            out["consequent"] = self.node(n.consequent)
            out["alternate"] = self.node(n.alternate)
        elif isinstance(n, (BinaryExpr, LogicalExpr)):
            out = self._base(n, "BinaryExpression" if isinstance(n, BinaryExpr) else "LogicalExpression")
            out["operator"] = n.op
            out["left"] = self.node(n.left)
            out["right"] = self.node(n.right)
        elif isinstance(n, UnaryExpr):
            out = self._base(n, "UnaryExpression")
            out["operator"] = n.op
            out["prefix"] = True
            out["argument"] = self.node(n.operand)
        elif isinstance(n, AssignmentExpr):
            out = self._base(n, "AssignmentExpression")
            out["operator"] = "="
            out["left"] = self.node(n.target)
            out["right"] = self.node(n.value)
        elif isinstance(n, FunctionExpr):
            out = self._base(n, "FunctionExpression")
            self._function_fields(out, n.name, n.params, n.body)
        elif isinstance(n, ArrowFunctionExpr):
            out = self._base(n, "ArrowFunctionExpression")
            out["params"] = [self.node(p) for p in n.params]
            out["body"] = self.node(n.body)
            out["expression"] = not isinstance(n.body, BlockStmt)
            out.setdefault("async", False)
        elif isinstance(n, JSXElement):
            opening_name = {"type": "JSXIdentifier", "name": n.name}
            out = {
                "type": "JSXElement",
                "openingElement": {"type": "JSXOpeningElement", "name": opening_name, "attributes": [],
                                   "selfClosing": True},
                "closingElement": None,
                "children": [],
            }
        else:
            raise TypeError(f"cannot dump {type(n).__name__}")
        return out

    def _object_member(self, p: Node) -> Json:
        if isinstance(p, SpreadElement):
            out = self._base(p, "SpreadElement")
            out["argument"] = self.node(p.argument)
            return out
        assert isinstance(p, ObjectProp)
        out = self._base(p, "ObjectProperty")
        key = out.get("key")
        if not (isinstance(key, dict) and _key(key) == p.key):
            out["key"] = _identifier(p.key) if _IDENTIFIER_RE.match(p.key) else _string(p.key)
        out["value"] = self.node(p.value)
        out.setdefault("computed", False)
        out.setdefault("shorthand", False)
        return out

    # --- type annotations ---

    def type_node(self, n: TypeNode) -> Json:
        if n.origin is not None:
            return n.origin
        if isinstance(n, PrimitiveType):
            return {"type": _PRIMITIVE_NAMES.get(n.name, "AnyTypeAnnotation")}
        if isinstance(n, AnyType):
            return {"type": "AnyTypeAnnotation"}
        if isinstance(n, ObjectType):
            properties = []
            for p in n.properties:
                if isinstance(p, ObjectTypeSpread):
                    properties.append({"type": "ObjectTypeSpreadProperty", "argument": self.type_node(p.argument)})
                else:
                    properties.append({"type": "ObjectTypeProperty", "key": _identifier(p.key),
                                       "value": self.type_node(p.value), "optional": p.optional,
                                       "static": False, "proto": False, "method": False, "kind": "init",
                                       "variance": None})
            return {
                "type": "ObjectTypeAnnotation",
                "properties": properties,
                "indexers": [
                    {"type": "ObjectTypeIndexer", "id": None, "key": self.type_node(i.key),
                     "value": self.type_node(i.value), "variance": None, "static": False}
                    for i in n.indexers
                ],
                "callProperties": [],
                "internalSlots": [],
                "exact": n.exact,
            }
        if isinstance(n, ArrayType):
            return {"type": "ArrayTypeAnnotation", "elementType": self.type_node(n.element)}
        if isinstance(n, TupleType):
            return {"type": "TupleTypeAnnotation", "types": [self.type_node(t) for t in n.elements]}
        if isinstance(n, UnionType):
            return {"type": "UnionTypeAnnotation", "types": [self.type_node(t) for t in n.members]}
        if isinstance(n, IntersectionType):
            return {"type": "IntersectionTypeAnnotation", "types": [self.type_node(t) for t in n.members]}
        if isinstance(n, LiteralType):
            if isinstance(n.value, bool):
                return {"type": "BooleanLiteralTypeAnnotation", "value": n.value}
            if isinstance(n.value, (int, float)):
                return {"type": "NumberLiteralTypeAnnotation", "value": n.value}
            return {"type": "StringLiteralTypeAnnotation", "value": n.value}
        if isinstance(n, GenericType):
            return {"type": "GenericTypeAnnotation", "id": _qualified(n.name), "typeParameters": self._type_args(n)}
        if isinstance(n, NullableType):
            return {"type": "NullableTypeAnnotation", "typeAnnotation": self.type_node(n.inner)}
        raise TypeError(f"cannot dump type {type(n).__name__}")

    def _type_args(self, n: GenericType) -> Optional[Json]:
        if not n.type_args:
            return None
        return {"type": "TypeParameterInstantiation", "params": [self.type_node(a) for a in n.type_args]}


def _identifier(name: str) -> Json:
    return {"type": "Identifier", "name": name}


def _string(value: str) -> Json:
    return {"type": "StringLiteral", "value": value}


def _qualified(name: str) -> Json:
    parts = name.split(".")
    node = _identifier(parts[0])
    for part in parts[1:]:
        node = {"type": "QualifiedTypeIdentifier", "qualification": node, "id": _identifier(part)}
    return node


def _type_annotation(t: Json) -> Json:
    return {"type": "TypeAnnotation", "typeAnnotation": t}


def _type_param_decl(params: List[str]) -> Optional[Json]:
    if not params:
        return None
    return {"type": "TypeParameterDeclaration", "params": [{"type": "TypeParameter", "name": p} for p in params]}


# --- public API ---

def load_program(data: Any, filename: Optional[str] = None) -> Program:
    """Map a Babel `File` or `Program` JSON object to the host tree."""
    return BabelLoader(filename).program(data)


def load_expression(data: Any) -> Expr:
    return BabelLoader().expr(data)


def dump_program(program: Program) -> Json:
    """Map the host tree back to a Babel `File` JSON object."""
    return BabelDumper().program(program)
