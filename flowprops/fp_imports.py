"""
Generated imports, exports and dead code guards.

Knows how to reference the runtime validation library and other units'
generated validators, but not when to do so; the annotator and the driver
make those decisions.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from typing import List, Optional

from fp_ast import (
    Node, Expr, Identifier, StringLit, BoolLit, NullLit, MemberExpr, CallExpr, ObjectExpr, ObjectProp,
    ConditionalExpr, BinaryExpr, LogicalExpr, UnaryExpr, ExpressionStmt, IfStmt, ImportDecl, ImportSpecifier,
    ImportDefaultSpecifier, ExportNamedDecl, ExportSpecifier,
)
from fp_expr_parser import parse_predicate
from fp_logger import log_debug
from fp_tree import insert_after
from fp_unit import UnitContext

PROP_TYPES_MODULE = "prop-types"
PROP_TYPES_BINDING = "PropTypes"
EXPORT_PREFIX = "babelPluginFlowReactPropTypes_proptype_"

_NON_IDENT_RE = re.compile(r"[^a-zA-Z0-9]+")


def sanitize_identifier(name: str) -> str:
    return _NON_IDENT_RE.sub("_", name)


def export_name_for_type(type_name: str) -> str:
    """Name of the binding under which a type's generated validator is shared."""
    return f"{EXPORT_PREFIX}{sanitize_identifier(type_name)}"


class ModuleImports:
    """
    Per-unit import/export emitter.

    Style is chosen once per unit from the options: static `import`/`export`
    declarations, or inline `require(...)` access with `exports` assignment.
    """

    def __init__(self, unit: UnitContext):
        self.unit = unit
        self.options = unit.options
        self.static = unit.options.uses_static_imports()

    # --- imports ---

    def get_from_module(self, kind: str, name: str, location: str, local: Optional[str] = None) -> Expr:
        """
        Reference `name` exported by `location`.

        kind is "default" or "named". With static imports, the first request
        for a (name, location) pair hoists an import declaration; later ones
        reuse its local binding.
        """
        if kind not in ("default", "named"):
            raise ValueError(f"unknown import kind '{kind}'")

        if not self.static:
            require = CallExpr(Identifier("require"), [StringLit(location)])
            if kind == "default":
                return require
            return MemberExpr(require, name)

        key = (name, location)
        existing = self.unit.added_imports.get(key)
        if existing is not None:
            return Identifier(existing)

        local_name = sanitize_identifier(local or name)
        source_name = sanitize_identifier(name)
        self.unit.added_imports[key] = local_name
        if kind == "default":
            spec: Node = ImportDefaultSpecifier(local_name)
        else:
            spec = ImportSpecifier(source_name, local_name)
        self._hoist_import(ImportDecl([spec], location))
        log_debug(self.options, f"Added import of '{name}' from '{location}' as '{local_name}'")
        return Identifier(local_name)

    def prop_types(self, name: Optional[str] = None, required: bool = False) -> Expr:
        """`PropTypes`, `PropTypes.<name>` or `PropTypes.<name>.isRequired`."""
        base = self.get_from_module("default", PROP_TYPES_BINDING, PROP_TYPES_MODULE)
        if not name:
            return base
        member: Expr = MemberExpr(base, name)
        if required:
            member = MemberExpr(member, "isRequired")
        return member

    def _hoist_import(self, decl: ImportDecl) -> None:
        body = self.unit.program.body
        position = 0
        while position < len(body) and isinstance(body[position], ImportDecl):
            position += 1
        body.insert(position, decl)

    # --- exports ---

    def add_export_binding(
            self,
            container: List[Node],
            anchor: Node,
            export_name: str,
            value: Optional[Expr] = None,
    ) -> None:
        """
        Make `export_name` visible to other units.

        Static style appends `export { value as export_name }` to the program
        body (only for top-level anchors). Require style inserts a guarded
        `Object.defineProperty(exports, ...)` right after `anchor`.
        """
        if value is None:
            value = Identifier(export_name)

        if self.static:
            if container is not self.unit.program.body:
                return
            if not isinstance(value, Identifier):
                self.unit.note(f"[ANN-0040] cannot re-export a non-identifier validator as '{export_name}'", anchor)
                return
            container.append(
                ExportNamedDecl(None, [ExportSpecifier(local=value.name, exported=export_name)], generated=True)
            )
            return

        define = ExpressionStmt(CallExpr(
            MemberExpr(Identifier("Object"), "defineProperty"),
            [
                Identifier("exports"),
                StringLit(export_name),
                ObjectExpr([ObjectProp("value", value), ObjectProp("configurable", BoolLit(True))]),
            ],
        ))
        test: Expr = BinaryExpr("!==", UnaryExpr("typeof", Identifier("exports")), StringLit("undefined"))
        predicate = self.dce_predicate()
        if predicate is not None:
            test = LogicalExpr("&&", UnaryExpr("!", predicate), test)
        insert_after(container, anchor, IfStmt(test, define))

    # --- dead code elimination ---

    def dce_predicate(self) -> Optional[Expr]:
        """The configured predicate, parsed once per distinct source string."""
        source = self.options.dce_predicate_source()
        if source is None:
            return None
        cached = self.unit.dce_predicates.get(source)
        if cached is None:
            cached = parse_predicate(source)
            self.unit.dce_predicates[source] = cached
        return cached

    def wrap_in_dce_check(self, expr: Expr) -> Expr:
        """`predicate ? null : expr`, or `expr` unchanged when wrapping is off."""
        predicate = self.dce_predicate()
        if predicate is None:
            return expr
        return ConditionalExpr(predicate, NullLit(), expr)
