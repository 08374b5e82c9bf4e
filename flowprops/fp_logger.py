"""
Logging utilities for the transform.

Every function takes the TransformContext of the run and writes to stderr
when the context's log level admits the message.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from fp_context import TransformContext, LogLevel
from fp_diagnostics import Diagnostic

_LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def log(context: Optional[TransformContext], log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context's logging level admits it.

    Args:
        context:    The transform context; None falls back to the defaults.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context is None:
        context = TransformContext.default()
    if context.log_level < log_level:
        return
    if context.log_rich_format and log_level in _LEVEL_TAGS:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        message = f"{timestamp} [{_LEVEL_TAGS[log_level]}] {message}"
    print(message, file=sys.stderr)


def log_error(context: TransformContext, message: str) -> None:
    """Log an error-level message."""
    log(context, LogLevel.ERROR, message)


def log_warning(context: TransformContext, message: str) -> None:
    """Log a warning-level message."""
    log(context, LogLevel.WARNING, message)


def log_info(context: TransformContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: TransformContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_diagnostic(context: TransformContext, diag: Diagnostic, log_level: LogLevel = LogLevel.WARNING) -> None:
    """Log a recorded diagnostic as it happens, with its line when known."""
    where = f"line {diag.line}: " if diag.line is not None else ""
    log(context, log_level, f"{where}{diag.message}")


def log_stage(context: TransformContext, stage: str, unit: Optional[str] = None) -> None:
    """
    Log the start of a transform stage.

    Args:
        context: The transform context containing logging flags.
        stage: The name of the stage (e.g., "Transforming").
        unit: Optional filename of the compilation unit being processed.
    """
    if unit:
        log(context, LogLevel.INFO, f"{stage} unit '{unit}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
