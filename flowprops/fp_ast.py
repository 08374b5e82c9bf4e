#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


# ==========================
# Host tree definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)
    # Interchange object this node was loaded from; fields the tree does not model are kept from it.
    origin: Any = field(default=None, repr=False, compare=False, kw_only=True)


# --- type annotations ---

class TypeNode(Node):
    pass


@dataclass
class PrimitiveType(TypeNode):
    name: str  # "string", "number", "boolean", "function", "mixed", "void", ...


@dataclass
class AnyType(TypeNode):
    pass


@dataclass
class ObjectTypeProperty(Node):
    key: str
    value: TypeNode
    optional: bool = False


@dataclass
class ObjectTypeIndexer(Node):
    key: TypeNode
    value: TypeNode


@dataclass
class ObjectTypeSpread(Node):
    argument: TypeNode


@dataclass
class ObjectType(TypeNode):
    properties: List[Union[ObjectTypeProperty, ObjectTypeSpread]]  # in source order
    indexers: List[ObjectTypeIndexer] = field(default_factory=list)
    exact: bool = False


@dataclass
class ArrayType(TypeNode):
    element: TypeNode


@dataclass
class TupleType(TypeNode):
    elements: List[TypeNode]


@dataclass
class UnionType(TypeNode):
    members: List[TypeNode]


@dataclass
class IntersectionType(TypeNode):
    members: List[TypeNode]


@dataclass
class LiteralType(TypeNode):
    value: Union[str, int, float, bool]


@dataclass
class GenericType(TypeNode):
    name: str  # may be dotted, e.g. "React.Node"
    type_args: List[TypeNode] = field(default_factory=list)


@dataclass
class NullableType(TypeNode):
    inner: TypeNode


# --- expressions ---

class Expr(Node):
    pass


@dataclass
class Identifier(Expr):
    name: str


@dataclass
class StringLit(Expr):
    value: str


@dataclass
class NumberLit(Expr):
    value: Union[int, float]


@dataclass
class BoolLit(Expr):
    value: bool


@dataclass
class NullLit(Expr):
    pass


@dataclass
class MemberExpr(Expr):
    obj: Expr
    prop: str


@dataclass
class CallExpr(Expr):
    callee: Expr
    args: List[Expr]


@dataclass
class ObjectProp(Node):
    key: str
    value: Expr


@dataclass
class SpreadElement(Node):
    argument: Expr


@dataclass
class ObjectExpr(Expr):
    properties: List[Union[ObjectProp, SpreadElement]]


@dataclass
class ArrayExpr(Expr):
    elements: List[Expr]


@dataclass
class ConditionalExpr(Expr):
    test: Expr
    consequent: Expr
    alternate: Expr


@dataclass
class BinaryExpr(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass
class LogicalExpr(Expr):
    op: str  # "&&" or "||"
    left: Expr
    right: Expr


@dataclass
class UnaryExpr(Expr):
    op: str  # "!", "typeof", "-", ...
    operand: Expr


@dataclass
class AssignmentExpr(Expr):
    target: Expr
    value: Expr


@dataclass
class JSXElement(Expr):
    name: str
    children: List[Node] = field(default_factory=list)


@dataclass
class RawNode(Expr):
    """A host node this tool does not model; kept verbatim."""
    data: Any


# --- statements ---

@dataclass
class Stmt(Node):
    pass


@dataclass
class ExpressionStmt(Stmt):
    expr: Expr


@dataclass
class ReturnStmt(Stmt):
    value: Optional[Expr]


@dataclass
class BlockStmt(Stmt):
    body: List[Node]


@dataclass
class IfStmt(Stmt):
    test: Expr
    consequent: Stmt
    alternate: Optional[Stmt] = None


@dataclass
class VarDeclarator(Node):
    name: str
    init: Optional[Expr]


@dataclass
class VarDecl(Stmt):
    kind: str  # "var", "let" or "const"
    declarations: List[VarDeclarator]


# --- functions and classes ---

@dataclass
class Param(Node):
    name: str
    type_annotation: Optional[TypeNode] = None


@dataclass
class FunctionDecl(Stmt):
    name: Optional[str]
    params: List[Param]
    body: BlockStmt
    return_type: Optional[TypeNode] = None


@dataclass
class FunctionExpr(Expr):
    name: Optional[str]
    params: List[Param]
    body: BlockStmt
    return_type: Optional[TypeNode] = None


@dataclass
class ArrowFunctionExpr(Expr):
    params: List[Param]
    body: Union[BlockStmt, Expr]
    return_type: Optional[TypeNode] = None


@dataclass
class ClassProperty(Node):
    key: str
    value: Optional[Expr] = None
    type_annotation: Optional[TypeNode] = None
    static: bool = False


@dataclass
class ClassMethod(Node):
    name: str
    params: List[Param]
    body: BlockStmt
    static: bool = False


@dataclass
class ClassDecl(Stmt):
    name: Optional[str]
    super_class: Optional[Expr]
    body: List[Node]
    super_type_args: List[TypeNode] = field(default_factory=list)


@dataclass
class ClassExpr(Expr):
    name: Optional[str]
    super_class: Optional[Expr]
    body: List[Node]
    super_type_args: List[TypeNode] = field(default_factory=list)


# --- type declarations ---

@dataclass
class TypeAliasDecl(Stmt):
    name: str
    right: TypeNode
    type_params: List[str] = field(default_factory=list)


@dataclass
class InterfaceDecl(Stmt):
    name: str
    body: ObjectType
    type_params: List[str] = field(default_factory=list)
    extends: List[GenericType] = field(default_factory=list)


@dataclass
class OpaqueTypeDecl(Stmt):
    name: str
    impltype: Optional[TypeNode]
    type_params: List[str] = field(default_factory=list)


# --- modules ---

@dataclass
class ImportSpecifier(Node):
    imported: str
    local: str
    import_kind: str = "value"  # "value", "type" or "typeof"


@dataclass
class ImportDefaultSpecifier(Node):
    local: str
    import_kind: str = "value"


@dataclass
class ImportDecl(Stmt):
    specifiers: List[Union[ImportSpecifier, ImportDefaultSpecifier]]
    source: str
    import_kind: str = "value"


@dataclass
class ExportSpecifier(Node):
    local: str
    exported: str


@dataclass
class ExportNamedDecl(Stmt):
    declaration: Optional[Stmt]
    specifiers: List[ExportSpecifier] = field(default_factory=list)
    source: Optional[str] = None
    export_kind: str = "value"  # "value" or "type"
    # Set on exports created by the transform itself; never revisited.
    generated: bool = field(default=False, compare=False)


@dataclass
class ExportDefaultDecl(Stmt):
    declaration: Node


@dataclass
class Program(Node):
    body: List[Node]
    directives: List[str] = field(default_factory=list)
    filename: Optional[str] = field(default=None, repr=False, compare=False, kw_only=True)


TYPE_DECLS = (TypeAliasDecl, InterfaceDecl, OpaqueTypeDecl)
FUNCTION_NODES = (FunctionDecl, FunctionExpr, ArrowFunctionExpr)
CLASS_NODES = (ClassDecl, ClassExpr)
