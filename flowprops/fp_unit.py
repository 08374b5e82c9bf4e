#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Dict, List, NoReturn, Optional, Tuple

from fp_ast import Node, Program
from fp_context import LogLevel, TransformContext
from fp_diagnostics import Diagnostic, diag_from_node
from fp_errors import ErrorLocation, TransformError
from fp_logger import log_diagnostic
from fp_registry import TypeRegistry


@dataclass
class UnitContext:
    """
    All state for one compilation unit.

    Created when a unit starts and dropped when it ends; nothing here is
    shared between units.

      - program:          the unit's tree, mutated in place
      - options:          transform options
      - registry:         type names -> validators / access expressions / bindings
      - added_imports:    (symbol, location) -> local binding of a generated import
      - dce_predicates:   predicate source -> parsed predicate expression
      - diagnostics:      resolution gaps and approximations, in encounter order
    """
    program: Program
    options: TransformContext = field(default_factory=TransformContext.default)
    registry: TypeRegistry = field(default_factory=TypeRegistry)
    added_imports: Dict[Tuple[str, str], str] = field(default_factory=dict)
    dce_predicates: Dict[str, object] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    suppressed: bool = False

    @property
    def filename(self) -> Optional[str]:
        return self.program.filename

    def warn(self, message: str, node: Optional[Node] = None) -> None:
        """Record and log an approximation the user should know about."""
        self._record(message, node, LogLevel.WARNING)

    def note(self, message: str, node: Optional[Node] = None) -> None:
        """Record a skipped validator; only logged at debug level."""
        self._record(message, node, LogLevel.DEBUG)

    def error(self, message: str, node: Optional[Node] = None) -> None:
        """Record a declaration left unannotated because its hand-written code conflicts; the unit goes on."""
        self._record(message, node, LogLevel.ERROR, kind="error")

    def _record(self, message: str, node: Optional[Node], log_level: LogLevel, kind: str = "warning") -> None:
        diag = diag_from_node(kind, message, filename=self.filename, node=node)
        self.diagnostics.append(diag)
        log_diagnostic(self.options, diag, log_level)

    def fail(self, message: str, node: Optional[Node] = None, declaration: Optional[str] = None) -> NoReturn:
        span = getattr(node, "span", None) if node is not None else None
        raise TransformError(message, ErrorLocation(filename=self.filename, span=span), declaration)


@dataclass
class TransformResult:
    """Outcome of transforming one unit."""
    program: Program
    diagnostics: List[Diagnostic] = field(default_factory=list)
    changed: bool = False
    unit: Optional[UnitContext] = field(default=None, repr=False)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.diagnostics)
