# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON interchange for already-parsed programs.

Parsing program source is someone else's job; this module loads the program
model it produces from a JSON document, so the emitter can be driven from the
command line and from fixture files:

	{
	  "source": "let r = &'1 mut x;\\n",
	  "variables": {"x": "i32", "r": "&'a mut i32"},
	  "structs": [{"name": "S", "generics": ["'a", "T"], "fields": {"f": "T"}}],
	  "blocks": [
	    {"name": "bb0",
	     "statements": [{"assign": "r", "expr": {"borrow_mut": "x", "origin": "'1"}, "span": [0, 18]}],
	     "successors": []}
	  ]
	}

Types, places, origins and generic slots are written in their surface syntax
and parsed with a small LALR grammar. Expressions and statements are JSON
objects keyed by their kind. Anything malformed raises `ProgramFormatError`
naming the offending JSON path.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from borrowfacts.ast import (
	Access,
	AccessKind,
	Assign,
	BasicBlock,
	Call,
	Expr,
	ExprStmt,
	FieldDecl,
	GenericDecl,
	GenericOrigin,
	GenericTy,
	I32,
	Number,
	OriginParam,
	Parameter,
	Place,
	Program,
	Ref,
	RefMut,
	Statement,
	Struct,
	StructDecl,
	Ty,
	TyParam,
	Unit,
	UnitLit,
	Variable,
)
from borrowfacts.core.errors import InvalidSpanError, ProgramFormatError
from borrowfacts.core.span import Span

_GRAMMAR = r"""
ty: "i32"                   -> i32
  | "(" ")"                 -> unit
  | "&" ORIGIN "mut" ty     -> ref_mut
  | "&" ORIGIN ty           -> ref
  | NAME [generic_args]     -> struct

generic_args: "<" param ("," param)* ">"
param: ORIGIN               -> origin_param
     | ty                   -> ty_param

place: [DEREF] NAME ("." NAME)*

origin: ORIGIN

generic_slot: ORIGIN | NAME

DEREF: "*"
ORIGIN: /'[A-Za-z0-9_]+/
NAME: /[A-Za-z_][A-Za-z0-9_]*/

%import common.WS
%ignore WS
"""

_PARSER = Lark(
	_GRAMMAR,
	parser="lalr",
	start=["ty", "place", "origin", "generic_slot"],
	maybe_placeholders=True,
)

_EXPR_KEYS = ("borrow", "borrow_mut", "copy", "move", "call", "number", "unit")


def _parse(text: Any, start: str, path: str) -> Tree:
	if not isinstance(text, str):
		raise ProgramFormatError(path, f"expected a string, got {type(text).__name__}")
	try:
		return _PARSER.parse(text, start=start)
	except UnexpectedInput as exc:
		raise ProgramFormatError(path, f"invalid {start.replace('_', ' ')} `{text}` (column {exc.column})") from exc


def _build_ty(tree: Tree) -> Ty:
	kind = tree.data
	if kind == "i32":
		return I32()
	if kind == "unit":
		return Unit()
	if kind in ("ref", "ref_mut"):
		origin, inner = tree.children
		cls = Ref if kind == "ref" else RefMut
		return cls(str(origin), _build_ty(inner))
	if kind == "struct":
		name, args = tree.children
		params: Tuple[Parameter, ...] = ()
		if args is not None:
			params = tuple(_build_param(child) for child in args.children)
		return Struct(str(name), params)
	raise TypeError(f"unexpected type node {kind}")


def _build_param(node: Tree) -> Parameter:
	if node.data == "origin_param":
		return OriginParam(str(node.children[0]))
	return TyParam(_build_ty(node.children[0]))


def parse_ty(text: str, path: str = "") -> Ty:
	"""Parse a type like `&'a mut S<'b, i32>`."""
	return _build_ty(_parse(text, "ty", path))


def parse_place(text: str, path: str = "") -> Place:
	"""Parse a place like `*p.f.g`."""
	deref, *names = _parse(text, "place", path).children
	base = str(names[0])
	if deref is not None:
		base = "*" + base
	return Place(base, tuple(str(n) for n in names[1:]))


def parse_origin(text: str, path: str = "") -> str:
	return str(_parse(text, "origin", path).children[0])


def parse_generic_slot(text: str, path: str = "") -> GenericDecl:
	tok: Token = _parse(text, "generic_slot", path).children[0]
	if tok.type == "ORIGIN":
		return GenericOrigin(str(tok))
	return GenericTy(str(tok))


def _expect(value: Any, kind: type, path: str) -> Any:
	if not isinstance(value, kind):
		raise ProgramFormatError(path, f"expected {kind.__name__}, got {type(value).__name__}")
	return value


def _build_expr(data: Any, path: str) -> Expr:
	_expect(data, dict, path)
	keys = [k for k in _EXPR_KEYS if k in data]
	if len(keys) != 1:
		raise ProgramFormatError(path, f"expression needs exactly one of {', '.join(_EXPR_KEYS)}")
	key = keys[0]
	if key in ("borrow", "borrow_mut"):
		if "origin" not in data:
			raise ProgramFormatError(path, f"`{key}` needs an `origin`")
		origin = parse_origin(data["origin"], f"{path}.origin")
		kind = AccessKind.borrow(origin) if key == "borrow" else AccessKind.borrow_mut(origin)
		return Access(kind, parse_place(data[key], f"{path}.{key}"))
	if key in ("copy", "move"):
		kind = AccessKind.copy() if key == "copy" else AccessKind.move()
		return Access(kind, parse_place(data[key], f"{path}.{key}"))
	if key == "call":
		callee = _expect(data["call"], str, f"{path}.call")
		args = _expect(data.get("args", []), list, f"{path}.args")
		return Call(callee, tuple(_build_expr(arg, f"{path}.args[{i}]") for i, arg in enumerate(args)))
	if key == "number":
		value = data["number"]
		if isinstance(value, bool) or not isinstance(value, int):
			raise ProgramFormatError(f"{path}.number", "expected an integer")
		return Number(value)
	return UnitLit()


class _SpanLocator:
	"""Finds statement spans, either given explicitly or by searching the source."""

	def __init__(self, source: str) -> None:
		self._source = source.encode("utf-8")
		self._cursor = 0

	def span_for(self, data: Mapping[str, Any], path: str) -> Span:
		if "span" in data:
			raw = _expect(data["span"], list, f"{path}.span")
			if len(raw) != 2 or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw):
				raise ProgramFormatError(f"{path}.span", "expected [start, end] byte offsets")
			start, end = raw
			if not 0 <= start < end <= len(self._source):
				raise ProgramFormatError(f"{path}.span", f"{start}..{end} is outside the source ({len(self._source)} bytes)")
			span = Span(start, end)
			try:
				span.text_in(self._source)
			except InvalidSpanError:
				raise ProgramFormatError(f"{path}.span", f"{start}..{end} splits a UTF-8 character") from None
			self._cursor = end
			return span
		if "text" in data:
			text = _expect(data["text"], str, f"{path}.text").encode("utf-8")
			start = self._source.find(text, self._cursor) if text else -1
			if start < 0:
				raise ProgramFormatError(f"{path}.text", f"statement text {data['text']!r} not found in source")
			self._cursor = start + len(text)
			return Span(start, self._cursor)
		raise ProgramFormatError(path, "statement needs a `span` or its `text`")


def _build_statement(data: Any, path: str, spans: _SpanLocator) -> Statement:
	_expect(data, dict, path)
	if "expr" not in data:
		raise ProgramFormatError(path, "statement needs an `expr`")
	expr = _build_expr(data["expr"], f"{path}.expr")
	span = spans.span_for(data, path)
	if "assign" in data:
		return Assign(parse_place(data["assign"], f"{path}.assign"), expr, span)
	return ExprStmt(expr, span)


def _build_struct(data: Any, path: str) -> StructDecl:
	_expect(data, dict, path)
	name = _expect(data.get("name"), str, f"{path}.name")
	generics = _expect(data.get("generics", []), list, f"{path}.generics")
	fields = _expect(data.get("fields", {}), dict, f"{path}.fields")
	return StructDecl(
		name=name,
		generic_decls=tuple(parse_generic_slot(g, f"{path}.generics[{i}]") for i, g in enumerate(generics)),
		field_decls=tuple(FieldDecl(fname, parse_ty(fty, f"{path}.fields.{fname}")) for fname, fty in fields.items()),
	)


def _build_block(data: Any, path: str, spans: _SpanLocator) -> BasicBlock:
	_expect(data, dict, path)
	name = _expect(data.get("name"), str, f"{path}.name")
	statements = _expect(data.get("statements", []), list, f"{path}.statements")
	successors = _expect(data.get("successors", []), list, f"{path}.successors")
	for i, succ in enumerate(successors):
		_expect(succ, str, f"{path}.successors[{i}]")
	return BasicBlock(
		name=name,
		statements=tuple(_build_statement(s, f"{path}.statements[{i}]", spans) for i, s in enumerate(statements)),
		successors=tuple(successors),
	)


def program_from_dict(data: Any, *, source: Optional[str] = None) -> Tuple[Program, str]:
	"""
	Build `(program, source)` from a decoded JSON document.

	`source` overrides the document's own `source` entry.
	"""
	_expect(data, dict, "$")
	if source is None:
		source = _expect(data.get("source", ""), str, "$.source")
	variables = _expect(data.get("variables", {}), dict, "$.variables")
	structs = _expect(data.get("structs", []), list, "$.structs")
	blocks = _expect(data.get("blocks", []), list, "$.blocks")

	spans = _SpanLocator(source)
	program = Program(
		variables=tuple(Variable(name, parse_ty(ty, f"$.variables.{name}")) for name, ty in variables.items()),
		struct_decls=tuple(_build_struct(s, f"$.structs[{i}]") for i, s in enumerate(structs)),
		basic_blocks=tuple(_build_block(b, f"$.blocks[{i}]", spans) for i, b in enumerate(blocks)),
	)
	return program, source


def load_program(path: Path, *, source: Optional[str] = None) -> Tuple[Program, str]:
	"""Load a program document from `path`."""
	path = Path(path)
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as exc:
		raise ProgramFormatError(str(path), f"invalid JSON: {exc}") from exc
	return program_from_dict(data, source=source)


__all__ = [
	"parse_ty",
	"parse_place",
	"parse_origin",
	"parse_generic_slot",
	"program_from_dict",
	"load_program",
]
