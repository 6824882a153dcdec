# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""JSON interchange loading: annotation grammar, statement spans, and malformed documents."""

import json

import pytest

from borrowfacts import emit_facts
from borrowfacts.ast import (
	I32,
	Access,
	AccessKind,
	Assign,
	Call,
	ExprStmt,
	GenericOrigin,
	GenericTy,
	Number,
	OriginParam,
	Place,
	Ref,
	RefMut,
	Struct,
	TyParam,
	Unit,
	UnitLit,
)
from borrowfacts.core.errors import ProgramFormatError
from borrowfacts.core.span import Span
from borrowfacts.program_io import (
	load_program,
	parse_generic_slot,
	parse_origin,
	parse_place,
	parse_ty,
	program_from_dict,
)


def test_parse_simple_types():
	assert parse_ty("i32") == I32()
	assert parse_ty("()") == Unit()
	assert parse_ty("&'a i32") == Ref("'a", I32())
	assert parse_ty("&'a mut ()") == RefMut("'a", Unit())


def test_parse_nested_struct_type():
	assert parse_ty("&'r mut S<'a, &'b Vec<i32>, T>") == RefMut(
		"'r",
		Struct(
			"S",
			(
				OriginParam("'a"),
				TyParam(Ref("'b", Struct("Vec", (TyParam(I32()),)))),
				TyParam(Struct("T")),
			),
		),
	)


def test_parse_places():
	assert parse_place("x") == Place("x")
	assert parse_place("*p") == Place("*p")
	assert parse_place("v.a.b") == Place("v", ("a", "b"))
	assert parse_place("*p.f") == Place("*p", ("f",))


def test_parse_origins_and_generic_slots():
	assert parse_origin("'1") == "'1"
	assert parse_generic_slot("'a") == GenericOrigin("'a")
	assert parse_generic_slot("T") == GenericTy("T")


@pytest.mark.parametrize("text", ["&a i32", "S<", "'a", "&'a"])
def test_bad_type_names_the_path(text):
	with pytest.raises(ProgramFormatError) as excinfo:
		parse_ty(text, "$.variables.x")
	assert excinfo.value.path == "$.variables.x"


def _document():
	source = "r = &'1 mut x;\nf(r, 0, ());\n"
	return {
		"source": source,
		"variables": {"x": "i32", "r": "&'a mut i32"},
		"structs": [{"name": "S", "generics": ["'a", "T"], "fields": {"f": "T", "n": "i32"}}],
		"blocks": [
			{
				"name": "bb0",
				"statements": [
					{"assign": "r", "expr": {"borrow_mut": "x", "origin": "'1"}, "span": [0, 14]},
					{
						"expr": {"call": "f", "args": [{"move": "r"}, {"number": 0}, {"unit": None}]},
						"text": "f(r, 0, ());",
					},
				],
				"successors": ["bb1"],
			},
			{"name": "bb1"},
		],
	}


def test_program_from_dict_builds_the_model():
	program, source = program_from_dict(_document())
	assert source.startswith("r = &'1 mut x;")
	assert [v.name for v in program.variables] == ["x", "r"]
	decl = program.struct_decls[0]
	assert decl.generic_decls == (GenericOrigin("'a"), GenericTy("T"))
	assert [(f.name, f.ty) for f in decl.field_decls] == [("f", Struct("T")), ("n", I32())]

	bb0, bb1 = program.basic_blocks
	assert bb0.successors == ("bb1",)
	assert bb0.statements[0] == Assign(Place("r"), Access(AccessKind.borrow_mut("'1"), Place("x")), Span(0, 14))
	call_stmt = bb0.statements[1]
	assert isinstance(call_stmt, ExprStmt)
	assert call_stmt.expr == Call("f", (Access(AccessKind.move(), Place("r")), Number(0), UnitLit()))
	assert call_stmt.span == Span(15, 27)
	assert bb1.statements == () and bb1.successors == ()


def test_loaded_program_emits_facts():
	program, source = program_from_dict(_document())
	facts = emit_facts(program, source)
	assert facts.node_text == [("r = &'1 mut x", "bb0[0]"), ("f(r, 0, ())", "bb0[1]")]
	assert facts.cfg_edge == [("bb0[0]", "bb0[1]"), ("bb0[1]", "bb1[0]")]
	assert facts.access_origin == [("'a", "bb0[1]")]
	assert facts.introduce_subset == [("'1", "'a", "bb0[0]")]


def test_source_override():
	doc = _document()
	doc["source"] = ""
	program, source = program_from_dict(doc, source="r = &'1 mut x;\nf(r, 0, ());\n")
	assert program.basic_blocks[0].statements[1].span == Span(15, 27)


def test_load_program_from_file(tmp_path):
	path = tmp_path / "prog.json"
	path.write_text(json.dumps(_document()), encoding="utf-8")
	program, _ = load_program(path)
	assert len(program.basic_blocks) == 2


def test_invalid_json_is_a_format_error(tmp_path):
	path = tmp_path / "prog.json"
	path.write_text("{not json", encoding="utf-8")
	with pytest.raises(ProgramFormatError):
		load_program(path)


@pytest.mark.parametrize(
	"statement, path",
	[
		({"expr": {"borrow": "x"}, "span": [0, 14]}, "$.blocks[0].statements[0].expr"),
		({"expr": {"copy": "x", "move": "x"}, "span": [0, 14]}, "$.blocks[0].statements[0].expr"),
		({"expr": {"copy": "x"}, "span": [0, 999]}, "$.blocks[0].statements[0].span"),
		({"expr": {"copy": "x"}, "span": [3, 3]}, "$.blocks[0].statements[0].span"),
		({"expr": {"copy": "x"}, "text": "nope;"}, "$.blocks[0].statements[0].text"),
		({"expr": {"copy": "x"}}, "$.blocks[0].statements[0]"),
		({"span": [0, 14]}, "$.blocks[0].statements[0]"),
		({"expr": {"number": "1"}, "span": [0, 14]}, "$.blocks[0].statements[0].expr.number"),
		({"expr": {"copy": "1x"}, "span": [0, 14]}, "$.blocks[0].statements[0].expr.copy"),
		({"assign": 3, "expr": {"number": 1}, "span": [0, 14]}, "$.blocks[0].statements[0].assign"),
	],
)
def test_malformed_statements(statement, path):
	doc = _document()
	doc["blocks"][0]["statements"] = [statement]
	with pytest.raises(ProgramFormatError) as excinfo:
		program_from_dict(doc)
	assert excinfo.value.path == path


def test_document_must_be_an_object():
	with pytest.raises(ProgramFormatError) as excinfo:
		program_from_dict([])
	assert excinfo.value.path == "$"


def test_successors_must_be_names():
	doc = _document()
	doc["blocks"][0]["successors"] = [1]
	with pytest.raises(ProgramFormatError) as excinfo:
		program_from_dict(doc)
	assert excinfo.value.path == "$.blocks[0].successors[0]"


def test_span_ending_inside_a_character_is_rejected():
	doc = _document()
	doc["source"] = "x = é\n"
	doc["blocks"] = [{"name": "bb0", "statements": [{"expr": {"number": 0}, "span": [0, 6]}]}]
	with pytest.raises(ProgramFormatError) as excinfo:
		program_from_dict(doc)
	assert excinfo.value.path == "$.blocks[0].statements[0].span"
