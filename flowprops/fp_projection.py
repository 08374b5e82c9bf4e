#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import copy
from typing import Dict, List, Optional, Set, Tuple

from fp_ast import (
    TypeNode, PrimitiveType, AnyType, ObjectType, ObjectTypeProperty, ObjectTypeSpread, ArrayType, TupleType,
    UnionType, IntersectionType, LiteralType, GenericType, NullableType,
)
from fp_registry import InternalEntry, ResolutionKind
from fp_unit import UnitContext
from fp_validators import (
    Validator, AnyValidator, PrimitiveValidator, ShapeValidator, OneOfTypeValidator, OneOfValidator,
    ArrayOfValidator, InstanceOfOrShapeValidator, RawValidator, RecursiveRefValidator, merge_shapes,
)

# Flow primitive annotation -> prop-types primitive
PRIMITIVE_MAP = {
    "string": "string",
    "number": "number",
    "boolean": "bool",
    "bool": "bool",
    "function": "func",
    "symbol": "symbol",
}

# Primitive annotations that carry no runtime constraint.
UNCONSTRAINED_PRIMITIVES = ("mixed", "any", "void", "null", "empty", "undefined")

NULLISH_PRIMITIVES = ("null", "void")

# Global constructors checked with instanceOf when referenced as a type.
KNOWN_GLOBAL_CLASSES = (
    "Date", "RegExp", "Map", "Set", "WeakMap", "WeakSet", "Promise", "Error",
    "File", "Blob", "URL", "ArrayBuffer", "HTMLElement", "Element", "Event",
)

ARRAY_GENERICS = ("Array", "$ReadOnlyArray")
FUNC_GENERICS = (
    "Function", "Class", "React.ComponentType", "React$ComponentType", "React.AbstractComponent",
    "React.StatelessFunctionalComponent", "React.ElementType",
)
NODE_GENERICS = ("React.Node", "React$Node", "React.ChildrenArray")
ELEMENT_GENERICS = ("React.Element", "React$Element", "React.MixedElement")
PASSTHROUGH_GENERICS = ("$Exact", "$ReadOnly")


def _literal_family(value) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


class TypeProjector:
    """
    Translates type annotations into validator descriptors.

    Reads the unit's TypeRegistry and records diagnostics for resolution gaps
    and approximations; it never changes the tree.

    Every validator produced here is required; only the default-props pass
    in the annotator lowers `required`, and only for top-level fields.
    """

    def __init__(self, unit: UnitContext):
        self.unit = unit
        self.registry = unit.registry
        # Type parameter bindings of the alias body currently being projected.
        self._scopes: List[Dict[str, Validator]] = []
        # Generic aliases being instantiated; guards recursive instantiation.
        self._instantiating: Set[str] = set()

    # --- entry points ---

    def project_declaration(
            self,
            name: str,
            right: Optional[TypeNode],
            binding: str,
            type_params: Optional[List[str]] = None,
            extends: Optional[List[GenericType]] = None,
    ) -> Tuple[Validator, bool]:
        """
        Project the body of a type declaration named `name`.

        References to `name` inside its own body become references to
        `binding`, so recursive aliases terminate. Returns the validator and
        whether such a self reference occurred.
        """
        self.registry.begin_alias(name, binding)
        self._scopes.append({p: AnyValidator() for p in (type_params or [])})
        try:
            if right is None:
                validator: Validator = AnyValidator()
            else:
                validator = self.project(right)
            if extends:
                validator = self._apply_extends(name, validator, extends)
        finally:
            self._scopes.pop()
            recursive = self.registry.end_alias(name)
        return validator, recursive

    def project(self, node: TypeNode) -> Validator:
        if isinstance(node, PrimitiveType):
            return self._project_primitive(node)
        elif isinstance(node, AnyType):
            return AnyValidator()
        elif isinstance(node, ObjectType):
            return self._project_object(node)
        elif isinstance(node, ArrayType):
            return ArrayOfValidator(self._element(self.project(node.element)))
        elif isinstance(node, TupleType):
            return self._project_tuple(node)
        elif isinstance(node, UnionType):
            return self._project_union(node)
        elif isinstance(node, IntersectionType):
            return self._project_intersection(node)
        elif isinstance(node, LiteralType):
            return OneOfValidator([node.value])
        elif isinstance(node, GenericType):
            return self._project_generic(node)
        elif isinstance(node, NullableType):
            inner = self.project(node.inner)
            inner.required = False
            return inner
        else:
            self.unit.warn(
                f"[APX-0040] unsupported type annotation '{type(node).__name__}', checked as any",
                node,
            )
            return AnyValidator()

    # --- per variant ---

    def _project_primitive(self, node: PrimitiveType) -> Validator:
        name = PRIMITIVE_MAP.get(node.name)
        if name is not None:
            return PrimitiveValidator(name)
        if node.name not in UNCONSTRAINED_PRIMITIVES:
            self.unit.note(f"[APX-0040] unknown primitive type '{node.name}', checked as any", node)
        return AnyValidator()

    def _project_object(self, node: ObjectType) -> Validator:
        shape = ShapeValidator([])

        for prop in node.properties:
            if isinstance(prop, ObjectTypeSpread):
                spread = self.project(prop.argument)
                if isinstance(spread, ShapeValidator):
                    for f in spread.fields:
                        shape.put(f.key, f.validator)
                else:
                    self.unit.note("[RES-0030] spread of a type that is not an object shape, its keys are unchecked",
                                   prop)
                continue
            assert isinstance(prop, ObjectTypeProperty)
            validator = self.project(prop.value)
            if prop.optional:
                validator.required = False
            shape.put(prop.key, validator)

        if node.indexers:
            if not shape.fields:
                self.unit.warn("[APX-0030] object type with only an index signature, checked as any", node)
                return AnyValidator()
            self.unit.warn("[APX-0030] index signature keys are unchecked; only named keys are validated", node)

        return shape

    def _project_tuple(self, node: TupleType) -> Validator:
        self.unit.warn("[APX-0010] tuple type checked as an array of its element types", node)
        members = self._dedupe([self._element(self.project(e)) for e in node.elements])
        if not members:
            return ArrayOfValidator(AnyValidator())
        if len(members) == 1:
            return ArrayOfValidator(members[0])
        return ArrayOfValidator(OneOfTypeValidator(members))

    def _project_union(self, node: UnionType) -> Validator:
        members: List[TypeNode] = []
        optional = False
        for m in node.members:
            if isinstance(m, PrimitiveType) and m.name in NULLISH_PRIMITIVES:
                optional = True
                continue
            members.append(m)

        result: Validator
        if not members:
            result = AnyValidator()
        elif all(isinstance(m, LiteralType) for m in members) and \
                len({_literal_family(m.value) for m in members}) == 1:
            values = []
            for m in members:
                if m.value not in values:
                    values.append(m.value)
            result = OneOfValidator(values)
        else:
            projected = []
            for m in members:
                p = self.project(m)
                if not p.required:
                    optional = True
                projected.append(self._element(p))
            projected = self._dedupe(projected)
            if any(isinstance(p, AnyValidator) for p in projected):
                result = AnyValidator()
            elif len(projected) == 1:
                result = projected[0]
            else:
                result = OneOfTypeValidator(projected)

        if optional:
            result.required = False
        return result

    def _project_intersection(self, node: IntersectionType) -> Validator:
        projected = [self.project(m) for m in node.members]
        if projected and all(isinstance(p, ShapeValidator) for p in projected):
            return merge_shapes(projected)
        self.unit.warn("[APX-0020] intersection of non-object types cannot be merged, checked as any", node)
        return AnyValidator()

    def _project_generic(self, node: GenericType) -> Validator:
        name = node.name

        if self._scopes and name in self._scopes[-1]:
            return copy.deepcopy(self._scopes[-1][name])

        res = self.registry.resolve(name)
        if res.kind is ResolutionKind.INTERNAL:
            if node.type_args and res.entry is not None and res.entry.type_params:
                return self._instantiate(res.entry, node.type_args, res.validator)
            return res.validator
        if res.kind is ResolutionKind.IMPORTED:
            return RawValidator(copy.deepcopy(res.access), is_validator=res.is_validator)
        if res.kind is ResolutionKind.RECURSIVE:
            return RecursiveRefValidator(res.binding)

        builtin = self._project_builtin(node)
        if builtin is not None:
            return builtin

        if name in self.registry.classes:
            shape = self.registry.classes[name]
            return InstanceOfOrShapeValidator(name, copy.deepcopy(shape))
        if name in KNOWN_GLOBAL_CLASSES:
            return InstanceOfOrShapeValidator(name)

        if res.pending_import:
            self.unit.note(f"[RES-0011] imported type '{name}' used before its import, checked as any", node)
        else:
            self.unit.note(f"[RES-0010] unknown type '{name}', checked as any", node)
        return AnyValidator()

    def _project_builtin(self, node: GenericType) -> Optional[Validator]:
        name = node.name
        args = node.type_args
        if name in ARRAY_GENERICS:
            return ArrayOfValidator(self._element(self.project(args[0])) if args else AnyValidator())
        if name in FUNC_GENERICS:
            return PrimitiveValidator("func")
        if name == "Object":
            return PrimitiveValidator("object")
        if name in NODE_GENERICS:
            return PrimitiveValidator("node")
        if name in ELEMENT_GENERICS:
            return PrimitiveValidator("element")
        if name in PASSTHROUGH_GENERICS:
            return self.project(args[0]) if args else AnyValidator()
        if name == "$Keys":
            target = self.project(args[0]) if args else None
            if isinstance(target, ShapeValidator):
                return OneOfValidator([f.key for f in target.fields])
            return PrimitiveValidator("string")
        return None

    # --- helpers ---

    def _instantiate(self, entry: InternalEntry, type_args: List[TypeNode], fallback: Validator) -> Validator:
        """Re-project a generic alias body with its type parameters bound to `type_args`."""
        if entry.name in self._instantiating or entry.node is None:
            return fallback
        if len(type_args) > len(entry.type_params):
            self.unit.note(f"[APX-0050] extra type arguments for '{entry.name}' ignored")
        args = [self.project(a) for a in type_args]
        scope: Dict[str, Validator] = {}
        for i, param in enumerate(entry.type_params):
            scope[param] = args[i] if i < len(args) else AnyValidator()
        self._instantiating.add(entry.name)
        self._scopes.append(scope)
        try:
            return self.project(entry.node)
        finally:
            self._scopes.pop()
            self._instantiating.discard(entry.name)

    def _apply_extends(self, name: str, body: Validator, extends: List[GenericType]) -> Validator:
        shapes: List[ShapeValidator] = []
        for parent in extends:
            projected = self.project(parent)
            if isinstance(projected, ShapeValidator):
                shapes.append(projected)
            else:
                self.unit.note(f"[RES-0030] '{name}' extends '{parent.name}', which is not an object shape", parent)
        if not shapes or not isinstance(body, ShapeValidator):
            return body
        return merge_shapes(shapes + [body])

    @staticmethod
    def _element(v: Validator) -> Validator:
        """Validators nested in arrayOf/oneOfType never carry isRequired."""
        v.required = True
        return v

    @staticmethod
    def _dedupe(validators: List[Validator]) -> List[Validator]:
        out: List[Validator] = []
        for v in validators:
            if not any(v == o for o in out):
                out.append(v)
        return out
