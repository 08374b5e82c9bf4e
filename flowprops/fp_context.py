"""
Transform context for cross-cutting plugin options.

This module defines the TransformContext dataclass which holds the options
that affect several stages of the transform (import style, dead code
wrapping, attachment style, logging).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Union


SUPPRESS_DIRECTIVE = "no babel-plugin-flow-react-proptypes"

# Default dead code elimination predicate: when it holds, validators are dropped.
DEFAULT_DCE_PREDICATE = "process.env.NODE_ENV === 'production'"


class LogLevel(IntEnum):
    """Hierarchical logging levels for the transform."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


# camelCase plugin option -> TransformContext field
_OPTION_FIELDS = {
    "useESModules": "use_es_modules",
    "deadCode": "dead_code",
    "noStatic": "no_static",
    "omitRuntimeTypeExport": "omit_runtime_type_export",
    "ignoreNodeModules": "ignore_node_modules",
}


@dataclass
class TransformContext:
    """
    Holds the plugin options that affect multiple transform stages.

    Attributes:
        use_es_modules:             Force static import/export syntax for generated references.
        dead_code:                  False, True (default production predicate) or predicate source.
        no_static:                  Never attach validators as static class members.
        omit_runtime_type_export:   Do not re-export generated bindings of exported types.
        ignore_node_modules:        Skip units whose filename lies under node_modules.
        log_rich_format:            If True, emit logs with timestamps and level tags.
        log_level:                  Current logging level.
    """
    use_es_modules: bool = False
    dead_code: Union[bool, str] = False
    no_static: bool = False
    omit_runtime_type_export: bool = False
    ignore_node_modules: bool = False
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'TransformContext':
        """Create a TransformContext with default settings."""
        return TransformContext(log_level=LogLevel.WARNING)

    @staticmethod
    def from_options(options: Mapping[str, Any]) -> 'TransformContext':
        """Build a context from plugin options spelled the way a babel config spells them."""
        kwargs = {}
        for key, value in options.items():
            if key not in _OPTION_FIELDS:
                raise ValueError(f"unknown option '{key}'")
            if key == "deadCode":
                if not isinstance(value, (bool, str)):
                    raise ValueError("option 'deadCode' must be a boolean or a predicate string")
            elif not isinstance(value, bool):
                raise ValueError(f"option '{key}' must be a boolean")
            kwargs[_OPTION_FIELDS[key]] = value
        return TransformContext(**kwargs)

    def uses_static_imports(self) -> bool:
        """Static import/export syntax is used unless require-style dead code output was asked for."""
        return self.use_es_modules or not self.dead_code

    def dce_predicate_source(self) -> str | None:
        if not self.dead_code:
            return None
        if isinstance(self.dead_code, str):
            return self.dead_code
        return DEFAULT_DCE_PREDICATE
