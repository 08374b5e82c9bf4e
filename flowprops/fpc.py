#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from fp_ast import Program
from fp_babel_json import dump_program, load_program
from fp_context import TransformContext, LogLevel
from fp_diagnostics import Diagnostic
from fp_errors import BabelFormatError, TransformError
from fp_js_emitter import JsEmitter
from fp_logger import log_error, log_info, log_warning
from fp_transform import PropTypesTransformer
from fp_unit import TransformResult
from fp_validators import format_validator


def render_snippet(diag: Diagnostic, lines: List[str]) -> List[str]:
    """Source line of a diagnostic with a caret underline, or nothing when out of range."""
    if diag.line is None or not 0 < diag.line <= len(lines):
        return []
    text = lines[diag.line - 1]
    gutter = f"{diag.line:>5}"
    out = [f"{gutter} | {text}"]
    if diag.column is not None:
        start = max(1, diag.column)
        same_line = diag.end_line == diag.line and diag.end_column is not None
        stop = max(start, diag.end_column) if same_line else len(text) + 1
        out.append(f"{' ' * len(gutter)} | {' ' * (start - 1)}{'^' * max(1, stop - start)}")
    return out


def print_diagnostics(result: TransformResult, context: TransformContext, with_snippets: bool) -> None:
    file_cache: Dict[str, List[str]] = {}

    for diag in result.diagnostics:
        print_diagnostic_with_snippet(diag, file_cache, context, with_snippets)


def print_diagnostic_with_snippet(diag: Diagnostic, file_cache: Dict[str, List[str]], context: TransformContext,
                                  with_snippets: bool = True) -> None:
    log_warning(context, diag.format())
    if not with_snippets or not diag.filename:
        return
    if diag.filename not in file_cache:
        try:
            file_cache[diag.filename] = Path(diag.filename).read_text(encoding="utf-8").splitlines()
        except OSError:
            # header only
            file_cache[diag.filename] = []
    for line in render_snippet(diag, file_cache[diag.filename]):
        log_warning(context, line)


def build_transform_context(args: argparse.Namespace) -> TransformContext:
    """Build a TransformContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING

    return TransformContext(
        use_es_modules=getattr(args, 'es_modules', False),
        dead_code=getattr(args, 'dead_code', False),
        no_static=getattr(args, 'no_static', False),
        omit_runtime_type_export=getattr(args, 'omit_runtime_type_export', False),
        ignore_node_modules=getattr(args, 'ignore_node_modules', False),
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
    )


def _read_program(args: argparse.Namespace, context: TransformContext) -> Optional[Program]:
    try:
        if args.input == "-":
            data = json.load(sys.stdin)
        else:
            data = json.loads(Path(args.input).read_text(encoding="utf-8"))
    except OSError as e:
        log_error(context, f"cannot read '{args.input}': {e}")
        return None
    except json.JSONDecodeError as e:
        log_error(context, f"'{args.input}' is not valid JSON: {e}")
        return None
    filename = args.filename or (None if args.input == "-" else args.input)
    return load_program(data, filename=filename)


def _run_transform(args: argparse.Namespace):
    """Run the transform, returning (result, context, exit_code)."""
    context = build_transform_context(args)
    try:
        program = _read_program(args, context)
        if program is None:
            return None, context, 1
        result = PropTypesTransformer(context).transform(program)
    except BabelFormatError as e:
        log_error(context, f"malformed input: {e}")
        return None, context, 1
    except TransformError as e:
        log_error(context, e.format())
        return None, context, 1

    print_diagnostics(result, context, with_snippets=bool(args.filename))
    return result, context, 0


def cmd_gen(args: argparse.Namespace) -> int:
    """Transform a Babel JSON AST and print the result."""
    result, context, exit_code = _run_transform(args)
    if exit_code != 0:
        return exit_code

    if args.json:
        text = json.dumps(dump_program(result.program), indent=2) + "\n"
    else:
        text = JsEmitter().emit_program(result.program)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        log_info(context, f"Wrote '{args.output}'")
    else:
        sys.stdout.write(text)
    return 0


def _print_section(title: str, rows: List[str]) -> None:
    print(f"  {title}:")
    for row in rows or ["<none>"]:
        print(f"    {row}")


def cmd_types(args: argparse.Namespace) -> int:
    """
    Dump the type registry after a pass:

      - internal types and their validators
      - imported types and where they come from
      - exported bindings
      - classes usable with instanceOf
    """
    result, _, exit_code = _run_transform(args)
    if exit_code != 0:
        return exit_code

    unit = result.unit
    registry = unit.registry
    print(f"=== unit {unit.filename or '<stdin>'} ===")
    if unit.suppressed:
        print("  <suppressed>")
        return 0

    internal = []
    for name, entry in registry.internal.items():
        params = f"<{', '.join(entry.type_params)}>" if entry.type_params else ""
        internal.append(f"{name}{params}: {format_validator(entry.validator)}")
    _print_section("internal", internal)

    _print_section("imported", [
        f"{name}: '{imported.source_name}' from '{imported.location}' "
        f"({'bound' if imported.access is not None else 'pending'})"
        for name, imported in registry.imported.items()
    ])
    _print_section("exported", [f"{name} -> {binding}" for name, binding in registry.exported.items()])
    _print_section("classes", [
        name if shape is None else f"{name} or {format_validator(shape)}"
        for name, shape in registry.classes.items()
    ])
    return 0


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    """Add the input file argument."""
    parser.add_argument("input", help="Babel AST as JSON (from @babel/parser), or '-' for stdin")
    parser.add_argument(
        "--filename", "-f",
        help="Path of the original source file (used for node_modules checks and diagnostics)",
    )


def _add_option_args(parser: argparse.ArgumentParser) -> None:
    """Add the transform options."""
    parser.add_argument(
        "--es-modules",
        action="store_true",
        help="Always emit import/export declarations for generated references",
    )
    parser.add_argument(
        "--dead-code",
        nargs="?",
        const=True,
        default=False,
        metavar="PREDICATE",
        help="Wrap validators so they are dropped when PREDICATE holds "
             "(default: process.env.NODE_ENV === 'production')",
    )
    parser.add_argument(
        "--no-static",
        action="store_true",
        help="Attach validators by assignment instead of static class members",
    )
    parser.add_argument(
        "--omit-runtime-type-export",
        action="store_true",
        help="Do not re-export validators generated for exported types",
    )
    parser.add_argument(
        "--ignore-node-modules",
        action="store_true",
        help="Leave units under node_modules untouched",
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="fpc", description="Flow props to prop-types transform")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    ###########################
    # gen command
    ###########################
    p_gen = subparsers.add_parser("gen", help="Insert prop-types validators")
    p_gen.add_argument("--output", "-o", help="Output file (default: stdout)")
    p_gen.add_argument("--json", action="store_true", help="Print the transformed Babel AST as JSON")
    _add_option_args(p_gen)
    _add_input_args(p_gen)
    p_gen.set_defaults(func=cmd_gen)

    ###########################
    # types command
    ###########################
    p_types = subparsers.add_parser("types", help="Dump the type registry", aliases=["type"])
    _add_option_args(p_types)
    _add_input_args(p_types)
    p_types.set_defaults(func=cmd_types)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
