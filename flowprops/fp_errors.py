#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# fp_errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fp_ast import Span


@dataclass(frozen=True)
class ErrorLocation:
    filename: Optional[str]
    span: Optional[Span]


class TransformError(RuntimeError):
    """
    Structural error: a declaration cannot be given a validator safely.
    Aborts the whole compilation unit. Resolution gaps and approximations
    are Diagnostics instead.
    """

    def __init__(self, message: str, loc: ErrorLocation | None = None, declaration: str | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc
        self.declaration = declaration

    def format(self) -> str:
        message = self.message
        if not "[XFM-" in message:
            message = f"[XFM-9999] {message}"
        if self.declaration:
            message = f"{message} (in declaration '{self.declaration}')"
        if self.loc and self.loc.filename:
            if self.loc.span is not None:
                return f"{self.loc.filename}:{self.loc.span.start_line}:{self.loc.span.start_column}: transform error: {message}"
            return f"{self.loc.filename}: transform error: {message}"
        return f"transform error: {message}"


class BabelFormatError(ValueError):
    """Raised when interchange input is not a well-formed Babel AST."""

    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{path}: {message}")
        self.message = message
        self.path = path
