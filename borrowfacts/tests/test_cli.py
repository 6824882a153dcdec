# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line front end and environment-driven configuration.

The CLI is exercised in-process through `main(argv)`; output is captured with
pytest's `capsys`.
"""

import json

import pytest

from borrowfacts.cli import main
from borrowfacts.config import SIMPLE_NODES_ENV, EmitConfig
from borrowfacts.core.diagnostics import Diagnostic
from borrowfacts.core.errors import UnknownFieldError
from borrowfacts.nodes import NamingScheme

_SOURCE = "r = &'1 x;\nr;\n"


def _write_program(tmp_path, *, variables=None):
	doc = {
		"source": _SOURCE,
		"variables": variables or {"x": "i32", "r": "&'a i32"},
		"blocks": [
			{
				"name": "bb0",
				"statements": [
					{"assign": "r", "expr": {"borrow": "x", "origin": "'1"}, "text": "r = &'1 x;"},
					{"expr": {"copy": "r"}, "text": "r;"},
				],
			}
		],
	}
	path = tmp_path / "prog.json"
	path.write_text(json.dumps(doc), encoding="utf-8")
	return path


@pytest.fixture(autouse=True)
def _no_simple_nodes(monkeypatch):
	monkeypatch.delenv(SIMPLE_NODES_ENV, raising=False)


def test_prints_rendered_facts(tmp_path, capsys):
	assert main([str(_write_program(tmp_path))]) == 0
	out = capsys.readouterr().out
	assert out == (
		"bb0[0]: \"r = &'1 x\" {\n"
		"\tclear_origin('a)\n"
		"\tclear_origin('1)\n"
		"\tintroduce_subset('1, 'a)\n"
		"\tgoto bb0[1]\n"
		"}\n"
		"\n"
		"bb0[1]: \"r\" {\n"
		"\taccess_origin('a)\n"
		"\tgoto\n"
		"}\n"
	)


def test_simple_nodes_environment_selects_letters(tmp_path, capsys, monkeypatch):
	monkeypatch.setenv(SIMPLE_NODES_ENV, "1")
	assert main([str(_write_program(tmp_path))]) == 0
	out = capsys.readouterr().out
	assert out.startswith("a: \"r = &'1 x\" {")
	assert "\tgoto b\n" in out


def test_verbose_flag_overrides_environment(tmp_path, capsys, monkeypatch):
	monkeypatch.setenv(SIMPLE_NODES_ENV, "")
	assert main([str(_write_program(tmp_path)), "--verbose-nodes"]) == 0
	assert capsys.readouterr().out.startswith("bb0[0]: ")


def test_simple_nodes_flag(tmp_path, capsys):
	assert main([str(_write_program(tmp_path)), "--simple-nodes"]) == 0
	assert capsys.readouterr().out.startswith("a: ")


def test_json_output(tmp_path, capsys):
	assert main([str(_write_program(tmp_path)), "--json"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 0
	assert payload["facts"]["cfg_edge"] == [["bb0[0]", "bb0[1]"]]
	assert payload["facts"]["node_text"] == [["r = &'1 x", "bb0[0]"], ["r", "bb0[1]"]]


def test_source_file_override(tmp_path, capsys):
	program = _write_program(tmp_path)
	source = tmp_path / "prog.src"
	source.write_text("// header\n" + _SOURCE, encoding="utf-8")
	assert main([str(program), "--source", str(source), "--json"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["facts"]["node_text"][0] == ["r = &'1 x", "bb0[0]"]


def test_facts_dir(tmp_path, capsys):
	out_dir = tmp_path / "facts"
	assert main([str(_write_program(tmp_path)), "--facts-dir", str(out_dir)]) == 0
	assert (out_dir / "access_origin.facts").read_text() == "'a\tbb0[1]\n"
	assert (out_dir / "introduce_subset.facts").read_text() == "'1\t'a\tbb0[0]\n"


def test_malformed_program_reports_and_fails(tmp_path, capsys):
	path = _write_program(tmp_path, variables={"x": "i32"})
	assert main([str(path)]) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert "error[facts]: can't find variable `r`" in captured.err


def test_load_failure_reports_json_diagnostic(tmp_path, capsys):
	path = tmp_path / "prog.json"
	path.write_text("[]", encoding="utf-8")
	assert main([str(path), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "load"
	assert diag["code"] == "ProgramFormatError"


def test_missing_program_file(tmp_path, capsys):
	assert main([str(tmp_path / "missing.json")]) == 1
	assert "error[load]" in capsys.readouterr().err


def test_emit_config_from_env():
	assert EmitConfig.from_env({}) == EmitConfig(NamingScheme.VERBOSE)
	assert EmitConfig.from_env({SIMPLE_NODES_ENV: ""}).naming is NamingScheme.COMPACT_LETTERS


def test_diagnostic_from_fact_error():
	diag = Diagnostic.from_exception(UnknownFieldError("S", "g"), file="prog.json")
	assert diag.phase == "facts"
	assert diag.code == "UnknownFieldError"
	assert diag.format_human() == "prog.json: error[facts]: can't find field `g` in struct `S`"


def test_span_inside_a_character_reports_a_load_diagnostic(tmp_path, capsys):
	doc = {
		"source": "x = é\n",
		"variables": {"x": "i32"},
		"blocks": [{"name": "bb0", "statements": [{"assign": "x", "expr": {"number": 0}, "span": [0, 6]}]}],
	}
	path = tmp_path / "prog.json"
	path.write_text(json.dumps(doc), encoding="utf-8")
	assert main([str(path), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "load"
	assert diag["code"] == "ProgramFormatError"
