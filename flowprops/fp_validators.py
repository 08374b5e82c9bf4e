#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import List, Optional, Union

from fp_ast import Expr

# ==========================================================
# Validator descriptors: the runtime prop-types vocabulary.
# ==========================================================

PRIMITIVE_VALIDATORS = ("string", "number", "bool", "func", "object", "symbol", "node", "element", "any")

LiteralValue = Union[str, int, float, bool]


@dataclass
class Validator:
    """
    Base class for all validator descriptors.

    `required` is late-bound: projection always sets it from the static type,
    the default-props pass may clear it on top-level shape fields.
    """
    required: bool = field(default=True, kw_only=True)

    kind = "any"


@dataclass
class AnyValidator(Validator):
    kind = "any"


@dataclass
class PrimitiveValidator(Validator):
    name: str  # one of PRIMITIVE_VALIDATORS

    kind = "primitive"


@dataclass
class ShapeField:
    key: str
    validator: Validator


@dataclass
class ShapeValidator(Validator):
    fields: List[ShapeField]

    kind = "shape"

    def field_named(self, key: str) -> Optional[ShapeField]:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def put(self, key: str, validator: Validator) -> None:
        """Set `key`; an existing field keeps its position and takes the new validator."""
        existing = self.field_named(key)
        if existing is None:
            self.fields.append(ShapeField(key, validator))
        else:
            existing.validator = validator


@dataclass
class OneOfTypeValidator(Validator):
    members: List[Validator]

    kind = "oneOfType"


@dataclass
class OneOfValidator(Validator):
    values: List[LiteralValue]

    kind = "oneOf"


@dataclass
class ArrayOfValidator(Validator):
    element: Validator

    kind = "arrayOf"


@dataclass
class InstanceOfOrShapeValidator(Validator):
    class_name: str
    shape: Optional[ShapeValidator] = None

    kind = "instanceOfOrShape"


@dataclass
class RawValidator(Validator):
    """An already generated validator from another unit, referenced as-is."""
    expr: Expr
    # True for prop-types validators (e.g. PropTypes.node); False for shared bindings,
    # which hold a props object when the source type is an object shape.
    is_validator: bool = False

    kind = "custom"


@dataclass
class RecursiveRefValidator(Validator):
    """A reference back to the hoisted binding of an alias still being translated."""
    binding: str

    kind = "custom"


def merge_shapes(shapes: List[ShapeValidator]) -> ShapeValidator:
    """Right-biased merge: a later shape's field replaces an earlier one in place."""
    merged = ShapeValidator([])
    for shape in shapes:
        for f in shape.fields:
            merged.put(f.key, f.validator)
    return merged


# --- stringification for debugging ---

def format_validator(v: Optional[Validator]) -> str:
    if v is None:
        return "<none>"
    suffix = "" if v.required else "?"
    if isinstance(v, PrimitiveValidator):
        body = v.name
    elif isinstance(v, ShapeValidator):
        inner = ", ".join(f"{f.key}: {format_validator(f.validator)}" for f in v.fields)
        body = f"shape({{{inner}}})"
    elif isinstance(v, OneOfTypeValidator):
        body = f"oneOfType({' | '.join(format_validator(m) for m in v.members)})"
    elif isinstance(v, OneOfValidator):
        body = f"oneOf({', '.join(repr(x) for x in v.values)})"
    elif isinstance(v, ArrayOfValidator):
        body = f"arrayOf({format_validator(v.element)})"
    elif isinstance(v, InstanceOfOrShapeValidator):
        body = f"instanceOf({v.class_name})"
        if v.shape is not None:
            body = f"{body} | {format_validator(v.shape)}"
    elif isinstance(v, RawValidator):
        body = "raw"
    elif isinstance(v, RecursiveRefValidator):
        body = f"ref({v.binding})"
    elif isinstance(v, AnyValidator):
        body = "any"
    else:
        # Fallback (should not happen)
        body = repr(v)
    return f"{body}{suffix}"
