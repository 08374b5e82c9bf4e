#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import argparse
import json

import pytest

import fpc
from conftest import babel_class_component, babel_file, babel_function_component, babel_ident, \
    babel_props_alias
from fp_context import LogLevel
from fp_diagnostics import Diagnostic


def _patch_handlers(monkeypatch):
    calls = []

    def _mk_handler(name):
        def _handler(args):
            calls.append((name, args))
            return 0

        return _handler

    monkeypatch.setattr(fpc, "cmd_gen", _mk_handler("gen"))
    monkeypatch.setattr(fpc, "cmd_types", _mk_handler("types"))
    return calls


def _run_main(argv):
    with pytest.raises(SystemExit) as exc:
        fpc.main(argv)
    return exc.value.code


def test_gen_parses_transform_options(monkeypatch):
    calls = _patch_handlers(monkeypatch)

    rc = _run_main(["gen", "--es-modules", "--no-static", "-o", "out.js", "in.json", "--dead-code"])

    assert rc == 0
    name, args = calls[0]
    assert name == "gen"
    assert args.input == "in.json"
    assert args.es_modules and args.no_static
    assert args.dead_code is True
    assert args.output == "out.js"
    assert not args.json


def test_dead_code_takes_a_predicate(monkeypatch):
    calls = _patch_handlers(monkeypatch)

    rc = _run_main(["gen", "--dead-code=__PROD__", "in.json"])

    assert rc == 0
    assert calls[0][1].dead_code == "__PROD__"


def test_type_alias_selects_types_command(monkeypatch):
    calls = _patch_handlers(monkeypatch)

    rc = _run_main(["-v", "type", "in.json", "--filename", "src/Foo.js"])

    assert rc == 0
    name, args = calls[0]
    assert name == "types"
    assert args.filename == "src/Foo.js"
    assert args.verbosity == 1


def test_missing_command_is_usage_error(monkeypatch):
    calls = _patch_handlers(monkeypatch)

    rc = _run_main([])

    assert rc == 2
    assert calls == []


@pytest.mark.parametrize(
    "verbosity, level",
    [
        (0, LogLevel.WARNING),
        (1, LogLevel.INFO),
        (2, LogLevel.INFO),
        (3, LogLevel.DEBUG),
    ],
)
def test_verbosity_maps_to_log_level(verbosity, level):
    context = fpc.build_transform_context(argparse.Namespace(verbosity=verbosity))

    assert context.log_level is level
    assert not context.dead_code


def test_gen_prints_javascript(write_json, capsys):
    path = write_json("foo.json", babel_file(babel_props_alias(), babel_function_component()))

    rc = _run_main(["gen", str(path)])

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith('import PropTypes from "prop-types";\n')
    assert "Foo.propTypes = {\n  name: PropTypes.string.isRequired,\n  age: PropTypes.number\n};" in out


def test_gen_writes_json_output(write_json, tmp_path):
    path = write_json("foo.json", babel_file(babel_props_alias(), babel_class_component()))
    out_path = tmp_path / "out.json"

    rc = _run_main(["gen", "--json", "-o", str(out_path), str(path)])

    assert rc == 0
    data = json.loads(out_path.read_text())
    assert data["type"] == "File"
    body = data["program"]["body"]
    assert body[0]["type"] == "ImportDeclaration"
    assert body[2]["body"]["body"][-1]["key"] == babel_ident("propTypes")


def test_gen_rejects_invalid_json(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text("{not json")

    rc = _run_main(["gen", str(path)])

    assert rc == 1
    assert "is not valid JSON" in capsys.readouterr().err


def test_gen_reports_missing_file(tmp_path, capsys):
    rc = _run_main(["gen", str(tmp_path / "missing.json")])

    assert rc == 1
    assert "cannot read" in capsys.readouterr().err


def test_gen_reports_malformed_ast(write_json, capsys):
    path = write_json("bad.json", {"type": "File"})

    rc = _run_main(["gen", str(path)])

    assert rc == 1
    assert "malformed input" in capsys.readouterr().err


def test_gen_reports_transform_error(write_json, capsys):
    props = {
        "type": "ClassProperty",
        "key": babel_ident("props"),
        "value": None,
        "typeAnnotation": {"type": "TypeAnnotation", "typeAnnotation": {"type": "StringTypeAnnotation"}},
        "static": False,
        "computed": False,
    }
    cls = babel_class_component()
    cls["superTypeParameters"] = None
    cls["body"]["body"].insert(0, props)
    path = write_json("foo.json", babel_file(cls))

    rc = _run_main(["gen", str(path), "--filename", "src/Foo.js"])

    assert rc == 1
    err = capsys.readouterr().err
    assert "[XFM-0020]" in err
    assert "src/Foo.js" in err


def test_node_modules_unit_is_left_alone(write_json, capsys):
    path = write_json("foo.json", babel_file(babel_props_alias(), babel_function_component()))

    rc = _run_main(["gen", str(path), "--ignore-node-modules", "--filename", "node_modules/lib/Foo.js"])

    assert rc == 0
    assert "propTypes" not in capsys.readouterr().out


def test_types_dumps_registry(write_json, capsys):
    path = write_json("foo.json", babel_file(babel_props_alias(), babel_class_component()))

    rc = _run_main(["types", str(path)])

    out = capsys.readouterr().out
    assert rc == 0
    assert f"=== unit {path} ===" in out
    assert "Props: shape({name: string, age: number?})" in out
    assert "  imported:\n    <none>" in out
    assert "  classes:\n    Foo\n" in out


def test_types_reports_suppressed_unit(write_json, capsys):
    path = write_json("foo.json", babel_file(babel_props_alias(), babel_function_component()))

    rc = _run_main(["types", str(path), "--ignore-node-modules", "-f", "node_modules/x/Foo.js"])

    assert rc == 0
    assert "<suppressed>" in capsys.readouterr().out


def test_snippet_marks_the_reported_columns(tmp_path, capsys):
    src = tmp_path / "Foo.js"
    src.write_text("type P = {\n  t: [string],\n};\n")
    diag = Diagnostic("warning", "[APX-0010] tuple approximated", filename=str(src), line=2, column=6,
                      end_line=2, end_column=14)

    fpc.print_diagnostic_with_snippet(diag, {}, fpc.build_transform_context(argparse.Namespace()))

    lines = capsys.readouterr().err.splitlines()
    assert lines[1] == "    2 |   t: [string],"
    assert lines[2] == "      |      " + "^" * 8
