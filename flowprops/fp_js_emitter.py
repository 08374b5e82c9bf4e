#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from fp_ast import (
    Node, TypeNode, PrimitiveType, AnyType, ObjectType, ObjectTypeProperty, ObjectTypeSpread, ArrayType, TupleType,
    UnionType, IntersectionType, LiteralType, GenericType, NullableType, Identifier, StringLit, NumberLit, BoolLit,
    NullLit, MemberExpr, CallExpr, ObjectProp, SpreadElement, ObjectExpr, ArrayExpr, ConditionalExpr, BinaryExpr,
    LogicalExpr, UnaryExpr, AssignmentExpr, JSXElement, RawNode, ExpressionStmt, ReturnStmt, BlockStmt, IfStmt,
    VarDecl, Param, FunctionDecl, FunctionExpr, ArrowFunctionExpr, ClassProperty, ClassMethod, ClassDecl, ClassExpr,
    TypeAliasDecl, InterfaceDecl, OpaqueTypeDecl, ImportSpecifier, ImportDefaultSpecifier, ImportDecl,
    ExportNamedDecl, ExportDefaultDecl, Program,
)
from fp_babel_json import load_expression

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Binding power, higher binds tighter.
PREC_ASSIGN = 1
PREC_CONDITIONAL = 2
PREC_UNARY = 14
PREC_MEMBER = 17
PREC_PRIMARY = 18

BINARY_PRECEDENCE = {
    "||": 3, "??": 3,
    "&&": 4,
    "|": 5, "^": 6, "&": 7,
    "==": 8, "!=": 8, "===": 8, "!==": 8,
    "<": 9, ">": 9, "<=": 9, ">=": 9, "instanceof": 9, "in": 9,
    "<<": 10, ">>": 10, ">>>": 10,
    "+": 11, "-": 11,
    "*": 12, "/": 12, "%": 12,
    "**": 13,
}


@dataclass
class JsCodeBuilder:
    """
    Helper for building JavaScript code with indentation tracking.
    """
    lines: List[str] = field(default_factory=list)
    indent_level: int = 0
    indent_str: str = "  "

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        assert self.indent_level > 0, "dedent below zero"
        self.indent_level -= 1

    def emit(self, line: str = "") -> None:
        """Emit a line with current indentation."""
        if line:
            self.lines.append(self.indent_str * self.indent_level + line)
        else:
            self.lines.append("")

    def to_string(self) -> str:
        return "\n".join(self.lines)


class JsEmitter:
    """
    Renders the host tree as JavaScript with Flow annotations.

    Statements go through a JsCodeBuilder; expressions are rendered to
    strings, with nested multi-line constructs (objects, function bodies)
    indented relative to the statement holding them.

    Nodes kept verbatim from the interchange input (RawNode) are rendered
    for the common pattern and JSX shapes; anything else is shown as a
    placeholder comment. The JSON output is the lossless form.
    """

    def __init__(self, indent_str: str = "  "):
        self.indent_str = indent_str

    # --- entry points ---

    def emit_program(self, program: Program) -> str:
        out = JsCodeBuilder(indent_str=self.indent_str)
        for d in program.directives:
            out.emit(f"{json.dumps(d)};")
        for stmt in program.body:
            self.emit_statement(out, stmt)
        return out.to_string() + "\n"

    def emit_expression(self, e: Node) -> str:
        return self.expr(e, 0)

    # --- statements ---

    def emit_statement(self, out: JsCodeBuilder, s: Node) -> None:
        level = out.indent_level
        if isinstance(s, ExpressionStmt):
            text = self.expr(s.expr, level)
            if text.startswith(("function", "{", "class")):
                text = f"({text})"
            out.emit(f"{text};")
        elif isinstance(s, ReturnStmt):
            out.emit("return;" if s.value is None else f"return {self.expr(s.value, level)};")
        elif isinstance(s, BlockStmt):
            out.emit("{")
            self._emit_block_body(out, s)
            out.emit("}")
        elif isinstance(s, IfStmt):
            self._emit_if(out, s, "if")
        elif isinstance(s, VarDecl):
            out.emit(self._var_decl(s, level) + ";")
        elif isinstance(s, FunctionDecl):
            out.emit(self._function(s.name, s.params, s.body, s.return_type, level))
        elif isinstance(s, ClassDecl):
            out.emit(self._class(s, level))
        elif isinstance(s, TypeAliasDecl):
            out.emit(f"type {s.name}{_type_params(s.type_params)} = {self.type_str(s.right)};")
        elif isinstance(s, OpaqueTypeDecl):
            impl = f" = {self.type_str(s.impltype)}" if s.impltype is not None else ""
            out.emit(f"opaque type {s.name}{_type_params(s.type_params)}{impl};")
        elif isinstance(s, InterfaceDecl):
            extends = ""
            if s.extends:
                extends = " extends " + ", ".join(self.type_str(e) for e in s.extends)
            out.emit(f"interface {s.name}{_type_params(s.type_params)}{extends} {self.type_str(s.body)}")
        elif isinstance(s, ImportDecl):
            out.emit(self._import(s))
        elif isinstance(s, ExportNamedDecl):
            self._emit_export(out, s)
        elif isinstance(s, ExportDefaultDecl):
            if isinstance(s.declaration, (FunctionDecl, ClassDecl)):
                sub = JsCodeBuilder(indent_level=level, indent_str=self.indent_str)
                self.emit_statement(sub, s.declaration)
                out.emit("export default " + sub.to_string().lstrip())
            else:
                out.emit(f"export default {self.expr(s.declaration, level)};")
        elif isinstance(s, RawNode):
            out.emit(self._raw_statement(s.data, level))
        else:
            # Fallback (should not happen)
            out.emit(f"/* unsupported node {type(s).__name__} */")

    def _emit_block_body(self, out: JsCodeBuilder, block: BlockStmt) -> None:
        out.indent()
        for stmt in block.body:
            self.emit_statement(out, stmt)
        out.dedent()

    def _emit_if(self, out: JsCodeBuilder, s: IfStmt, keyword: str) -> None:
        level = out.indent_level
        head = f"{keyword} ({self.expr(s.test, level)})"
        if isinstance(s.consequent, BlockStmt):
            out.emit(head + " {")
            self._emit_block_body(out, s.consequent)
        else:
            out.emit(head + " {")
            out.indent()
            self.emit_statement(out, s.consequent)
            out.dedent()
        if s.alternate is None:
            out.emit("}")
        elif isinstance(s.alternate, IfStmt):
            out.emit("}")
            sub = JsCodeBuilder(indent_level=level, indent_str=self.indent_str)
            self._emit_if(sub, s.alternate, "if")
            out.lines[-1] = out.lines[-1] + " else " + sub.lines[0].lstrip()
            out.lines.extend(sub.lines[1:])
        else:
            out.emit("} else {")
            if isinstance(s.alternate, BlockStmt):
                self._emit_block_body(out, s.alternate)
            else:
                out.indent()
                self.emit_statement(out, s.alternate)
                out.dedent()
            out.emit("}")

    def _emit_export(self, out: JsCodeBuilder, s: ExportNamedDecl) -> None:
        level = out.indent_level
        if s.declaration is not None:
            sub = JsCodeBuilder(indent_level=level, indent_str=self.indent_str)
            self.emit_statement(sub, s.declaration)
            out.emit("export " + sub.to_string().lstrip())
            return
        keyword = "export type" if s.export_kind == "type" else "export"
        specs = ", ".join(
            sp.local if sp.local == sp.exported else f"{sp.local} as {sp.exported}" for sp in s.specifiers
        )
        source = f" from {json.dumps(s.source)}" if s.source is not None else ""
        out.emit(f"{keyword} {{ {specs} }}{source};")

    def _import(self, s: ImportDecl) -> str:
        keyword = "import type" if s.import_kind == "type" else "import"
        default = [sp.local for sp in s.specifiers if isinstance(sp, ImportDefaultSpecifier)]
        named = []
        for sp in s.specifiers:
            if isinstance(sp, ImportSpecifier):
                text = sp.local if sp.imported == sp.local else f"{sp.imported} as {sp.local}"
                if sp.import_kind in ("type", "typeof"):
                    text = f"{sp.import_kind} {text}"
                named.append(text)
        parts = default + ([f"{{ {', '.join(named)} }}"] if named else [])
        return f"{keyword} {', '.join(parts)} from {json.dumps(s.source)};"

    def _var_decl(self, s: VarDecl, level: int) -> str:
        decls = []
        for d in s.declarations:
            decls.append(d.name if d.init is None else f"{d.name} = {self._wrap(d.init, PREC_ASSIGN, level)}")
        return f"{s.kind} {', '.join(decls)}"

    # --- functions and classes ---

    def _params(self, params: List[Param], level: int) -> str:
        rendered = []
        for p in params:
            text = p.name
            if not text and isinstance(p.origin, dict):
                pattern = p.origin.get("left") if p.origin.get("type") == "AssignmentPattern" else p.origin
                text = self._raw(pattern, level)
                if p.origin.get("type") == "AssignmentPattern":
                    default = self._raw(p.origin.get("right"), level)
                    if p.type_annotation is not None:
                        text = f"{text}: {self.type_str(p.type_annotation)}"
                    rendered.append(f"{text} = {default}")
                    continue
            if p.type_annotation is not None:
                text = f"{text}: {self.type_str(p.type_annotation)}"
            rendered.append(text)
        return ", ".join(rendered)

    def _function(self, name: Optional[str], params: List[Param], body: BlockStmt,
                  return_type: Optional[TypeNode], level: int) -> str:
        ret = f": {self.type_str(return_type)}" if return_type is not None else ""
        head = f"function {name}" if name else "function "
        return f"{head}({self._params(params, level)}){ret} {self._block(body, level)}"

    def _block(self, body: BlockStmt, level: int) -> str:
        if not body.body:
            return "{}"
        sub = JsCodeBuilder(indent_level=level + 1, indent_str=self.indent_str)
        for stmt in body.body:
            self.emit_statement(sub, stmt)
        return "{\n" + sub.to_string() + "\n" + self.indent_str * level + "}"

    def _class(self, c: Union[ClassDecl, ClassExpr], level: int) -> str:
        head = "class"
        if c.name:
            head += f" {c.name}"
        if c.super_class is not None:
            head += f" extends {self._wrap(c.super_class, PREC_MEMBER, level)}"
            if c.super_type_args:
                head += "<" + ", ".join(self.type_str(a) for a in c.super_type_args) + ">"
        if not c.body:
            return head + " {}"
        sub = JsCodeBuilder(indent_level=level + 1, indent_str=self.indent_str)
        for item in c.body:
            self._emit_class_member(sub, item)
        return head + " {\n" + sub.to_string() + "\n" + self.indent_str * level + "}"

    def _emit_class_member(self, out: JsCodeBuilder, item: Node) -> None:
        level = out.indent_level
        if isinstance(item, ClassProperty):
            text = ("static " if item.static else "") + item.key
            if item.type_annotation is not None:
                text += f": {self.type_str(item.type_annotation)}"
            if item.value is not None:
                text += f" = {self._wrap(item.value, PREC_ASSIGN, level)}"
            out.emit(text + ";")
        elif isinstance(item, ClassMethod):
            prefix = "static " if item.static else ""
            out.emit(f"{prefix}{item.name}({self._params(item.params, level)}) {self._block(item.body, level)}")
        elif isinstance(item, RawNode):
            out.emit(f"/* {item.data.get('type', 'unknown')} */")

    # --- expressions ---

    def precedence(self, e: Node) -> int:
        if isinstance(e, (AssignmentExpr, ArrowFunctionExpr)):
            return PREC_ASSIGN
        if isinstance(e, ConditionalExpr):
            return PREC_CONDITIONAL
        if isinstance(e, (BinaryExpr, LogicalExpr)):
            return BINARY_PRECEDENCE.get(e.op, PREC_CONDITIONAL + 1)
        if isinstance(e, UnaryExpr):
            return PREC_UNARY
        if isinstance(e, (MemberExpr, CallExpr)):
            return PREC_MEMBER
        if isinstance(e, RawNode):
            return PREC_ASSIGN
        return PREC_PRIMARY

    def _wrap(self, e: Node, min_prec: int, level: int) -> str:
        text = self.expr(e, level)
        if self.precedence(e) < min_prec:
            return f"({text})"
        return text

    def expr(self, e: Node, level: int) -> str:
        if isinstance(e, Identifier):
            return e.name
        if isinstance(e, StringLit):
            return json.dumps(e.value)
        if isinstance(e, NumberLit):
            return _number(e.value)
        if isinstance(e, BoolLit):
            return "true" if e.value else "false"
        if isinstance(e, NullLit):
            return "null"
        if isinstance(e, MemberExpr):
            obj = self._wrap(e.obj, PREC_MEMBER, level)
            if isinstance(e.obj, (FunctionExpr, ObjectExpr, NumberLit)):
                obj = f"({obj})"
            if _IDENTIFIER_RE.match(e.prop):
                return f"{obj}.{e.prop}"
            return f"{obj}[{json.dumps(e.prop)}]"
        if isinstance(e, CallExpr):
            callee = self._wrap(e.callee, PREC_MEMBER, level)
            if isinstance(e.callee, (FunctionExpr, ArrowFunctionExpr)):
                callee = f"({callee})"
            args = ", ".join(self._wrap(a, PREC_ASSIGN, level) for a in e.args)
            return f"{callee}({args})"
        if isinstance(e, ObjectExpr):
            return self._object(e, level)
        if isinstance(e, ArrayExpr):
            return "[" + ", ".join(self._wrap(x, PREC_ASSIGN, level) for x in e.elements) + "]"
        if isinstance(e, ConditionalExpr):
            test = self._wrap(e.test, PREC_CONDITIONAL + 1, level)
            return (f"{test} ? {self._wrap(e.consequent, PREC_ASSIGN, level)}"
                    f" : {self._wrap(e.alternate, PREC_ASSIGN, level)}")
        if isinstance(e, (BinaryExpr, LogicalExpr)):
            prec = self.precedence(e)
            return f"{self._wrap(e.left, prec, level)} {e.op} {self._wrap(e.right, prec + 1, level)}"
        if isinstance(e, UnaryExpr):
            operand = self._wrap(e.operand, PREC_UNARY, level)
            if e.op.isalpha():
                return f"{e.op} {operand}"
            return f"{e.op}{operand}"
        if isinstance(e, AssignmentExpr):
            return f"{self._wrap(e.target, PREC_MEMBER, level)} = {self._wrap(e.value, PREC_ASSIGN, level)}"
        if isinstance(e, FunctionExpr):
            return self._function(e.name, e.params, e.body, e.return_type, level)
        if isinstance(e, ArrowFunctionExpr):
            ret = f": {self.type_str(e.return_type)}" if e.return_type is not None else ""
            head = f"({self._params(e.params, level)}){ret} =>"
            if isinstance(e.body, BlockStmt):
                return f"{head} {self._block(e.body, level)}"
            body = self._wrap(e.body, PREC_ASSIGN, level)
            if isinstance(e.body, ObjectExpr):
                body = f"({body})"
            return f"{head} {body}"
        if isinstance(e, ClassExpr):
            return self._class(e, level)
        if isinstance(e, JSXElement):
            if isinstance(e.origin, dict):
                return self._raw(e.origin, level)
            return f"<{e.name} />"
        if isinstance(e, RawNode):
            return self._raw(e.data, level)
        raise TypeError(f"cannot emit {type(e).__name__}")

    def _object(self, e: ObjectExpr, level: int) -> str:
        if not e.properties:
            return "{}"
        inner = self.indent_str * (level + 1)
        entries = []
        for p in e.properties:
            if isinstance(p, SpreadElement):
                entries.append(f"{inner}...{self._wrap(p.argument, PREC_ASSIGN, level + 1)}")
            else:
                assert isinstance(p, ObjectProp)
                key = p.key if _IDENTIFIER_RE.match(p.key) else json.dumps(p.key)
                entries.append(f"{inner}{key}: {self._wrap(p.value, PREC_ASSIGN, level + 1)}")
        return "{\n" + ",\n".join(entries) + "\n" + self.indent_str * level + "}"

    # --- type annotations ---

    def type_str(self, t: Optional[TypeNode]) -> str:
        if t is None:
            return "any"
        if isinstance(t, PrimitiveType):
            return t.name
        if isinstance(t, AnyType):
            if isinstance(t.origin, dict) and t.origin.get("type") == "ExistsTypeAnnotation":
                return "*"
            return "any"
        if isinstance(t, ObjectType):
            entries = []
            for p in t.properties:
                if isinstance(p, ObjectTypeSpread):
                    entries.append(f"...{self.type_str(p.argument)}")
                else:
                    assert isinstance(p, ObjectTypeProperty)
                    key = p.key if _IDENTIFIER_RE.match(p.key) else json.dumps(p.key)
                    entries.append(f"{key}{'?' if p.optional else ''}: {self.type_str(p.value)}")
            for i in t.indexers:
                entries.append(f"[{self.type_str(i.key)}]: {self.type_str(i.value)}")
            open_, close = ("{|", "|}") if t.exact else ("{", "}")
            if not entries:
                return open_ + close
            return f"{open_} {', '.join(entries)} {close}"
        if isinstance(t, ArrayType):
            return f"Array<{self.type_str(t.element)}>"
        if isinstance(t, TupleType):
            return "[" + ", ".join(self.type_str(x) for x in t.elements) + "]"
        if isinstance(t, UnionType):
            return " | ".join(self._type_member(m) for m in t.members)
        if isinstance(t, IntersectionType):
            return " & ".join(self._type_member(m) for m in t.members)
        if isinstance(t, LiteralType):
            if isinstance(t.value, bool):
                return "true" if t.value else "false"
            if isinstance(t.value, (int, float)):
                return _number(t.value)
            return json.dumps(t.value)
        if isinstance(t, GenericType):
            if t.type_args:
                return f"{t.name}<{', '.join(self.type_str(a) for a in t.type_args)}>"
            return t.name
        if isinstance(t, NullableType):
            return f"?{self._type_member(t.inner)}"
        raise TypeError(f"cannot emit type {type(t).__name__}")

    def _type_member(self, t: TypeNode) -> str:
        text = self.type_str(t)
        if isinstance(t, (UnionType, IntersectionType)):
            return f"({text})"
        return text

    # --- verbatim input ---

    def _raw_statement(self, data: Any, level: int) -> str:
        kind = data.get("type", "unknown") if isinstance(data, dict) else "unknown"
        return f"/* {kind} */"

    def _raw(self, data: Any, level: int) -> str:
        if not isinstance(data, dict):
            return "/* ? */"
        kind = data.get("type")
        if kind == "Identifier":
            return data.get("name", "")
        if kind == "ObjectPattern":
            entries = []
            for p in data.get("properties", []):
                if p.get("type") == "RestElement":
                    entries.append(f"...{self._raw(p.get('argument'), level)}")
                    continue
                key = self._raw(p.get("key"), level)
                value = p.get("value")
                if p.get("shorthand"):
                    entries.append(self._raw(value, level))
                else:
                    entries.append(f"{key}: {self._raw(value, level)}")
            return "{ " + ", ".join(entries) + " }" if entries else "{}"
        if kind == "ArrayPattern":
            return "[" + ", ".join("" if el is None else self._raw(el, level) for el in data.get("elements", [])) + "]"
        if kind == "AssignmentPattern":
            return f"{self._raw(data.get('left'), level)} = {self._raw(data.get('right'), level)}"
        if kind == "RestElement":
            return f"...{self._raw(data.get('argument'), level)}"
        if kind in ("JSXElement", "JSXFragment"):
            return self._jsx(data, level)
        loaded = load_expression(data)
        if not isinstance(loaded, RawNode):
            return self.expr(loaded, level)
        return f"/* {kind} */"

    def _jsx(self, data: Any, level: int) -> str:
        kind = data.get("type")
        if kind == "JSXText":
            return data.get("value", "")
        if kind == "JSXExpressionContainer":
            inner = data.get("expression") or {}
            if inner.get("type") == "JSXEmptyExpression":
                return "{}"
            return "{" + self._raw(inner, level) + "}"
        if kind == "JSXSpreadChild":
            return "{..." + self._raw(data.get("expression"), level) + "}"
        if kind not in ("JSXElement", "JSXFragment"):
            return self._raw(data, level)

        children = "".join(self._jsx(c, level) for c in data.get("children", []))
        if kind == "JSXFragment":
            return f"<>{children}</>"

        opening = data.get("openingElement") or {}
        name = _jsx_name(opening.get("name"))
        attrs = []
        for a in opening.get("attributes", []):
            if a.get("type") == "JSXSpreadAttribute":
                attrs.append("{..." + self._raw(a.get("argument"), level) + "}")
                continue
            attr_name = _jsx_name(a.get("name"))
            value = a.get("value")
            if value is None:
                attrs.append(attr_name)
            elif value.get("type") == "StringLiteral":
                attrs.append(f"{attr_name}={json.dumps(value.get('value', ''))}")
            else:
                attrs.append(f"{attr_name}={self._jsx(value, level)}")
        head = name + "".join(" " + a for a in attrs)
        if opening.get("selfClosing"):
            return f"<{head} />"
        return f"<{head}>{children}</{name}>"


def _jsx_name(n: Any) -> str:
    if not isinstance(n, dict):
        return ""
    kind = n.get("type")
    if kind == "JSXMemberExpression":
        return f"{_jsx_name(n.get('object'))}.{_jsx_name(n.get('property'))}"
    if kind == "JSXNamespacedName":
        return f"{_jsx_name(n.get('namespace'))}:{_jsx_name(n.get('name'))}"
    return n.get("name", "")


def _number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _type_params(params: List[str]) -> str:
    return f"<{', '.join(params)}>" if params else ""
