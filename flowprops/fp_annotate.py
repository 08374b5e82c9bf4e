#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from fp_ast import (
    Node, Expr, Identifier, MemberExpr, AssignmentExpr, ObjectExpr, ObjectProp, SpreadElement, ExpressionStmt,
    ClassProperty, CLASS_NODES,
)
from fp_builder import ValidatorBuilder
from fp_imports import ModuleImports
from fp_logger import log_debug
from fp_tree import insert_after, remove
from fp_unit import UnitContext
from fp_validators import ShapeValidator, Validator

PROP_TYPES = "propTypes"
CONTEXT_TYPES = "contextTypes"
DEFAULT_PROPS = "defaultProps"


@dataclass
class ComponentTarget:
    """
    A class or function component found by the traversal.

    container/anchor locate the statement after which post-declaration
    assignments go: the declaration itself, its variable declaration, or the
    export wrapping either.
    """
    name: Optional[str]
    node: Node
    container: List[Node]
    anchor: Node
    is_class: bool


@dataclass
class PropsSource:
    """A freshly projected validator, or the hoisted binding of an exported type."""
    validator: Optional[Validator] = None
    binding: Optional[str] = None


# (value, statement list holding it, holder node to remove on merge)
_Preset = Tuple[Expr, List[Node], Node]


class Annotator:
    """
    Attaches generated propTypes/contextTypes to component declarations.

      1. classify: static class member, or assignment after the declaration
      2. take the validator, or the exported binding it was hoisted to
      3. merge with hand-written propTypes, per key, hand-written wins
      4. clear `required` on top-level props that have a default value
      5. wrap the propTypes value for dead code elimination
      6. insert
    """

    def __init__(self, unit: UnitContext, imports: ModuleImports, builder: ValidatorBuilder):
        self.unit = unit
        self.options = unit.options
        self.imports = imports
        self.builder = builder

    def annotate(
            self,
            target: ComponentTarget,
            props: Optional[PropsSource],
            context: Optional[PropsSource] = None,
    ) -> bool:
        """Returns True if anything was attached."""
        if not self._uses_static(target) and not target.name:
            self.unit.fail(
                "[XFM-0010] cannot attach propTypes to a component with no name",
                target.node,
                declaration="<anonymous class>" if target.is_class else "<anonymous function>",
            )

        explicit = self._find_preset(target, PROP_TYPES)
        if explicit is not None and not isinstance(explicit[0], ObjectExpr):
            self.unit.error(
                f"[ANN-0010] explicit propTypes of '{target.name}' is not an object literal; "
                f"generated validators skipped",
                explicit[2],
            )
            return False

        attached = False
        if props is not None:
            if isinstance(props.validator, ShapeValidator):
                self._relax_defaults(target, props.validator)
            attached = self._attach(target, PROP_TYPES, props, explicit) or attached
        if context is not None:
            attached = self._attach(target, CONTEXT_TYPES, context, None) or attached
        return attached

    # --- steps ---

    def _uses_static(self, target: ComponentTarget) -> bool:
        return target.is_class and not self.options.no_static

    def _relax_defaults(self, target: ComponentTarget, shape: ShapeValidator) -> None:
        found = self._find_preset(target, DEFAULT_PROPS)
        if found is None or not isinstance(found[0], ObjectExpr):
            return
        defaults = {p.key for p in found[0].properties if isinstance(p, ObjectProp)}
        for f in shape.fields:
            if f.key in defaults:
                f.validator.required = False

    def _attach(
            self,
            target: ComponentTarget,
            attribute: str,
            source: PropsSource,
            explicit: Optional[_Preset],
    ) -> bool:
        value: Optional[Expr]
        if source.binding is not None:
            value = Identifier(source.binding)
        else:
            assert source.validator is not None
            value = self.builder.build_props_value(source.validator)
            if value is None:
                self.unit.note(
                    f"[ANN-0030] {attribute} type of '{target.name}' does not describe an object; nothing attached",
                    target.node,
                )
                return False

        if attribute == PROP_TYPES:
            if explicit is not None:
                value = self._merge_explicit(value, explicit)
            value = self.imports.wrap_in_dce_check(value)

        if self._uses_static(target):
            target.node.body.append(ClassProperty(attribute, value, static=True))
        else:
            stmt = ExpressionStmt(AssignmentExpr(MemberExpr(Identifier(target.name), attribute), value))
            insert_after(target.container, target.anchor, stmt)
            target.anchor = stmt
        log_debug(self.options, f"Attached {attribute} to '{target.name}'")
        return True

    def _merge_explicit(self, generated: Expr, explicit: _Preset) -> Expr:
        """
        Per-key merge. Hand-written entries replace generated ones in place;
        new hand-written keys are appended. The hand-written declaration is removed.
        """
        explicit_value, container, holder = explicit
        assert isinstance(explicit_value, ObjectExpr)

        entries: Dict[str, Union[ObjectProp, SpreadElement]] = {}
        if isinstance(generated, ObjectExpr):
            for p in generated.properties:
                entries[self._entry_key(p)] = p
        else:
            # A shared binding: keep its keys via spread, hand-written keys override.
            entries["..." + self._expr_key(generated)] = SpreadElement(generated)
        for p in explicit_value.properties:
            entries[self._entry_key(p)] = p

        remove(container, holder)
        return ObjectExpr(list(entries.values()))

    # --- lookups ---

    def _find_preset(self, target: ComponentTarget, member: str) -> Optional[_Preset]:
        """
        A hand-written `member` on the component: a class property, or a
        `Name.member = ...` statement in the declaration's statement list.
        """
        if isinstance(target.node, CLASS_NODES):
            for item in target.node.body:
                if isinstance(item, ClassProperty) and item.key == member and item.value is not None:
                    return item.value, target.node.body, item
        if not target.name:
            return None
        for stmt in target.container:
            if not isinstance(stmt, ExpressionStmt) or not isinstance(stmt.expr, AssignmentExpr):
                continue
            left = stmt.expr.target
            if isinstance(left, MemberExpr) and left.prop == member and \
                    isinstance(left.obj, Identifier) and left.obj.name == target.name:
                return stmt.expr.value, target.container, stmt
        return None

    def _entry_key(self, p: Union[ObjectProp, SpreadElement]) -> str:
        if isinstance(p, ObjectProp):
            return p.key
        return "..." + self._expr_key(p.argument)

    @staticmethod
    def _expr_key(e: Expr) -> str:
        if isinstance(e, Identifier):
            return e.name
        return f"<{id(e)}>"
