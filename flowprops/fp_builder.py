#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Optional

from fp_ast import (
    Expr, Identifier, StringLit, NumberLit, BoolLit, MemberExpr, CallExpr, ObjectExpr, ObjectProp, ArrayExpr,
    ConditionalExpr, BinaryExpr, UnaryExpr, FunctionExpr, BlockStmt, ReturnStmt,
)
from fp_imports import ModuleImports
from fp_validators import (
    Validator, LiteralValue, AnyValidator, PrimitiveValidator, ShapeValidator, OneOfTypeValidator, OneOfValidator,
    ArrayOfValidator, InstanceOfOrShapeValidator, RawValidator, RecursiveRefValidator,
)


def describes_props(v: Validator) -> bool:
    """True if `v` can be assigned to `propTypes` as a whole: an object shape or a reference to one."""
    if isinstance(v, RawValidator):
        return not v.is_validator
    return isinstance(v, (ShapeValidator, RecursiveRefValidator))


def literal_expr(value: LiteralValue) -> Expr:
    if isinstance(value, bool):
        return BoolLit(value)
    if isinstance(value, (int, float)):
        return NumberLit(value)
    return StringLit(value)


class ValidatorBuilder:
    """
    Turns validator descriptors into prop-types expressions.

    `.isRequired` is only emitted for shape fields and top-level props;
    validators nested in oneOfType/arrayOf/instanceOf are always optional.
    """

    def __init__(self, imports: ModuleImports):
        self.imports = imports

    def build(self, v: Validator, required: Optional[bool] = None) -> Expr:
        req = v.required if required is None else required
        pt = self.imports.prop_types

        if isinstance(v, PrimitiveValidator):
            return pt(v.name, req)
        if isinstance(v, ShapeValidator):
            return self._required(CallExpr(pt("shape"), [self.build_props_object(v)]), req)
        if isinstance(v, OneOfTypeValidator):
            members = [self.build(m, required=False) for m in v.members]
            return self._required(CallExpr(pt("oneOfType"), [ArrayExpr(members)]), req)
        if isinstance(v, OneOfValidator):
            values = [literal_expr(x) for x in v.values]
            return self._required(CallExpr(pt("oneOf"), [ArrayExpr(values)]), req)
        if isinstance(v, ArrayOfValidator):
            return self._required(CallExpr(pt("arrayOf"), [self.build(v.element, required=False)]), req)
        if isinstance(v, InstanceOfOrShapeValidator):
            check: Expr = CallExpr(pt("instanceOf"), [Identifier(v.class_name)])
            if v.shape is not None:
                shape = self.build(v.shape, required=False)
                check = CallExpr(pt("oneOfType"), [ArrayExpr([check, shape])])
            return self._required(check, req)
        if isinstance(v, RawValidator):
            if v.is_validator:
                return self._required(v.expr, req)
            return self._adapt(v.expr, req)
        if isinstance(v, RecursiveRefValidator):
            return self._lazy_ref(v.binding, req)
        if isinstance(v, AnyValidator):
            return pt("any", req)
        raise TypeError(f"unknown validator descriptor {type(v).__name__}")

    def build_props_object(self, shape: ShapeValidator) -> ObjectExpr:
        """`{key: validator, ...}` in field order, as assigned to `propTypes`."""
        return ObjectExpr([ObjectProp(f.key, self.build(f.validator)) for f in shape.fields])

    def build_export_value(self, v: Validator) -> Expr:
        """
        Value of a shared binding: a props object for shapes, so it can be
        assigned to `propTypes` directly, a plain validator otherwise.
        """
        if isinstance(v, ShapeValidator):
            return self.build_props_object(v)
        return self.build(v, required=False)

    def build_props_value(self, v: Validator) -> Optional[Expr]:
        """Value assigned to `propTypes`/`contextTypes`, or None if `v` does not describe props."""
        if not describes_props(v):
            return None
        if isinstance(v, ShapeValidator):
            return self.build_props_object(v)
        if isinstance(v, RawValidator):
            return v.expr
        assert isinstance(v, RecursiveRefValidator)
        return Identifier(v.binding)

    # --- helpers ---

    @staticmethod
    def _required(expr: Expr, required: bool) -> Expr:
        return MemberExpr(expr, "isRequired") if required else expr

    def _adapt(self, expr: Expr, required: bool) -> Expr:
        """
        A shared binding is a props object or a validator depending on the
        type it came from: `typeof X === "function" ? X : PropTypes.shape(X)`.
        """
        is_func = BinaryExpr("===", UnaryExpr("typeof", expr), StringLit("function"))
        shape = CallExpr(self.imports.prop_types("shape"), [expr])
        return ConditionalExpr(is_func, self._required(expr, required), self._required(shape, required))

    def _lazy_ref(self, binding: str, required: bool) -> Expr:
        """`function () { return <binding>.apply(this, arguments); }`, read at validation time."""
        target = self._adapt(Identifier(binding), required)
        call = CallExpr(MemberExpr(target, "apply"), [Identifier("this"), Identifier("arguments")])
        return FunctionExpr(None, [], BlockStmt([ReturnStmt(call)]))
