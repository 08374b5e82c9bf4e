#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
import re
from dataclasses import dataclass
from typing import Optional

from fp_ast import Node


DIAGNOSTIC_CODE_FAMILIES = {
    # Resolution gaps: a referenced type could not be found.
    "RES": [
        "RES-0010",  # unknown type name
        "RES-0011",  # imported type used before its import was materialized
        "RES-0020",  # class props/context type argument not found
        "RES-0030",  # spread of a type that is not an object shape
    ],
    # Approximations: the generated validator is looser than the static type.
    "APX": [
        "APX-0010",  # tuple checked as array of element union
        "APX-0020",  # intersection of non-object members
        "APX-0030",  # index signature
        "APX-0040",  # unsupported type annotation
        "APX-0050",  # type arguments ignored
    ],
    # Annotation decisions on a component declaration.
    "ANN": [
        "ANN-0010",  # explicit propTypes is not an object literal
        "ANN-0020",  # component without a usable props annotation
        "ANN-0030",  # props type does not describe an object
        "ANN-0040",  # generated validator cannot be re-exported
    ],
}


_CODE_RE = re.compile(r"\[([A-Z]{3}-\d{4})\]")


@dataclass
class Diagnostic:
    """A non-fatal finding about one unit, reported with its source position."""
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def code(self) -> Optional[str]:
        """The bracketed code in the message, e.g. "APX-0010"."""
        match = _CODE_RE.search(self.message)
        return match.group(1) if match else None

    @property
    def family(self) -> Optional[str]:
        code = self.code
        return code.split("-", 1)[0] if code else None

    def format(self) -> str:
        parts = []
        if self.filename is not None:
            parts.append(os.path.abspath(self.filename))
            if self.line is not None:
                parts.append(str(self.line))
                if self.column is not None:
                    parts.append(str(self.column))
        prefix = ":".join(parts) + ": " if parts else ""
        return f"{prefix}{self.kind}: {self.message}"


def diag_from_node(kind: str, message: str, *, filename: Optional[str], node: Optional[Node]) -> Diagnostic:
    span = getattr(node, "span", None)
    if span is None:
        return Diagnostic(kind, message, filename)
    return Diagnostic(kind, message, filename, span.start_line, span.start_column, span.end_line, span.end_column)
