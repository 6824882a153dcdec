# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need whole programs.

`ProgramBuilder` lays statements out one per line in a synthetic source text
and gives each statement the matching byte span, so tests can spell the
statement text once and get consistent `node_text` facts. Types may be given
as surface syntax (`"&'a mut S<'b, i32>"`) and are parsed with the interchange
grammar.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Mapping, Sequence, Tuple, Union

from borrowfacts.ast import (
	Access,
	AccessKind,
	Assign,
	BasicBlock,
	Call,
	Expr,
	ExprStmt,
	FieldDecl,
	Place,
	Program,
	Statement,
	StructDecl,
	Ty,
	Variable,
)
from borrowfacts.core.span import Span
from borrowfacts.program_io import parse_generic_slot, parse_place, parse_ty

TyLike = Union[Ty, str]


def _ty(ty: TyLike) -> Ty:
	return parse_ty(ty) if isinstance(ty, str) else ty


def place(path: str) -> Place:
	return parse_place(path)


def borrow(origin: str, path: str) -> Access:
	return Access(AccessKind.borrow(origin), parse_place(path))


def borrow_mut(origin: str, path: str) -> Access:
	return Access(AccessKind.borrow_mut(origin), parse_place(path))


def copy(path: str) -> Access:
	return Access(AccessKind.copy(), parse_place(path))


def move(path: str) -> Access:
	return Access(AccessKind.move(), parse_place(path))


def call(callee: str, *args: Expr) -> Call:
	return Call(callee, tuple(args))


def assign(path: str, expr: Expr) -> Assign:
	return Assign(parse_place(path), expr)


def expr_stmt(expr: Expr) -> ExprStmt:
	return ExprStmt(expr)


class ProgramBuilder:
	"""Incrementally assemble a Program and its source text."""

	def __init__(self) -> None:
		self._variables: List[Variable] = []
		self._structs: List[StructDecl] = []
		self._blocks: List[BasicBlock] = []
		self._source: List[str] = []
		self._offset = 0

	def var(self, name: str, ty: TyLike) -> "ProgramBuilder":
		self._variables.append(Variable(name, _ty(ty)))
		return self

	def vars(self, decls: Mapping[str, TyLike]) -> "ProgramBuilder":
		for name, ty in decls.items():
			self.var(name, ty)
		return self

	def struct(
		self,
		name: str,
		generics: Sequence[str] = (),
		fields: Mapping[str, TyLike] | None = None,
	) -> "ProgramBuilder":
		self._structs.append(
			StructDecl(
				name=name,
				generic_decls=tuple(parse_generic_slot(g) for g in generics),
				field_decls=tuple(FieldDecl(fname, _ty(fty)) for fname, fty in (fields or {}).items()),
			)
		)
		return self

	def block(
		self,
		name: str,
		statements: Sequence[Tuple[str, Statement]] = (),
		successors: Sequence[str] = (),
	) -> "ProgramBuilder":
		"""
		Add a block. Each statement is `(text, stmt)` where `text` is its full
		source line including the terminating `;`.
		"""
		spanned: List[Statement] = []
		for text, stmt in statements:
			spanned.append(replace(stmt, span=self._append_line(text)))
		self._blocks.append(BasicBlock(name, tuple(spanned), tuple(successors)))
		return self

	def _append_line(self, text: str) -> Span:
		start = self._offset
		end = start + len(text.encode("utf-8"))
		self._source.append(text + "\n")
		self._offset = end + 1
		return Span(start, end)

	@property
	def source(self) -> str:
		return "".join(self._source)

	def build(self) -> Tuple[Program, str]:
		program = Program(
			variables=tuple(self._variables),
			struct_decls=tuple(self._structs),
			basic_blocks=tuple(self._blocks),
		)
		return program, self.source


__all__ = [
	"ProgramBuilder",
	"place",
	"borrow",
	"borrow_mut",
	"copy",
	"move",
	"call",
	"assign",
	"expr_stmt",
]
