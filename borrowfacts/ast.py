# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Program model consumed by the fact emitter.

Pipeline placement:
  source text → (external parser) → Program (this file) → facts → solver

A Program is a set of variable declarations, struct declarations and basic
blocks of statements. It is produced elsewhere and is read-only here: nothing
in borrowfacts mutates a Program once built.

Guiding rules:
- Types are a closed set of shapes (`I32`, `Unit`, `Ref`, `RefMut`, `Struct`).
  Every traversal over types handles all of them and raises `TypeError` on
  anything else, so a new shape forces each traversal to be revisited.
- Origins are plain names (`'a`); identity is string equality.
- Places name a variable, optionally dereferenced (`*p`), plus a field path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple

from borrowfacts.core.span import Span

# A lifetime/region variable name, e.g. `'a`.
Origin = str


# Types

class Ty:
	"""Base class for all types."""
	pass


@dataclass(frozen=True)
class I32(Ty):
	def __str__(self) -> str:
		return "i32"


@dataclass(frozen=True)
class Unit(Ty):
	def __str__(self) -> str:
		return "()"


@dataclass(frozen=True)
class Ref(Ty):
	"""Shared reference `&'origin ty`."""
	origin: Origin
	ty: Ty

	def __str__(self) -> str:
		return f"&{self.origin} {self.ty}"


@dataclass(frozen=True)
class RefMut(Ty):
	"""Mutable reference `&'origin mut ty`."""
	origin: Origin
	ty: Ty

	def __str__(self) -> str:
		return f"&{self.origin} mut {self.ty}"


class Parameter:
	"""Base class for struct type arguments: an origin or a type."""
	pass


@dataclass(frozen=True)
class OriginParam(Parameter):
	origin: Origin

	def __str__(self) -> str:
		return self.origin


@dataclass(frozen=True)
class TyParam(Parameter):
	ty: Ty

	def __str__(self) -> str:
		return str(self.ty)


@dataclass(frozen=True)
class Struct(Ty):
	"""
	Nominal struct type with its generic arguments, e.g. `S<'a, &'b i32>`.

	Inside a struct declaration, a field typed by one of the struct's generic
	type slots is written as a parameterless Struct named after the slot
	(`T` -> Struct("T")).
	"""
	name: str
	parameters: Tuple[Parameter, ...] = field(default_factory=tuple)

	def __str__(self) -> str:
		if not self.parameters:
			return self.name
		return f"{self.name}<{', '.join(str(p) for p in self.parameters)}>"


def is_ref(ty: Ty) -> bool:
	"""Return True for `&'a T` and `&'a mut T`."""
	return isinstance(ty, (Ref, RefMut))


def collect_origins(ty: Ty, origins: Optional[list[Origin]] = None) -> list[Origin]:
	"""
	Collect every origin textually present in `ty`, outermost first and
	left-to-right through struct parameters.

	Appends to `origins` when given, and returns the list either way.
	"""
	if origins is None:
		origins = []
	if isinstance(ty, (Ref, RefMut)):
		origins.append(ty.origin)
		collect_origins(ty.ty, origins)
	elif isinstance(ty, Struct):
		for param in ty.parameters:
			if isinstance(param, OriginParam):
				origins.append(param.origin)
			elif isinstance(param, TyParam):
				collect_origins(param.ty, origins)
			else:
				raise TypeError(f"unhandled struct parameter {param!r}")
	elif isinstance(ty, (I32, Unit)):
		pass
	else:
		raise TypeError(f"unhandled type shape {ty!r}")
	return origins


# Declarations

class GenericDecl:
	"""Base class for struct generic slots."""
	name: str


@dataclass(frozen=True)
class GenericOrigin(GenericDecl):
	name: Origin


@dataclass(frozen=True)
class GenericTy(GenericDecl):
	name: str


@dataclass(frozen=True)
class Variable:
	name: str
	ty: Ty


@dataclass(frozen=True)
class FieldDecl:
	name: str
	ty: Ty


@dataclass(frozen=True)
class StructDecl:
	"""`struct Name<generic_decls...> { field_decls... }`"""
	name: str
	generic_decls: Tuple[GenericDecl, ...] = field(default_factory=tuple)
	field_decls: Tuple[FieldDecl, ...] = field(default_factory=tuple)


# Places

@dataclass(frozen=True)
class Place:
	"""
	An access path: a variable, optionally dereferenced, plus field names.

	The deref marker is kept in `base` (`*p`), so `p` and `*p` are distinct
	places and distinct loan-index keys.
	"""
	base: str
	fields: Tuple[str, ...] = field(default_factory=tuple)

	def deref_base(self) -> Optional[str]:
		"""If the base is dereferenced, return its name without the `*`."""
		if self.base.startswith("*"):
			return self.base[1:]
		return None

	@property
	def variable(self) -> str:
		"""Name of the variable this place is rooted at."""
		deref = self.deref_base()
		return deref if deref is not None else self.base

	def __str__(self) -> str:
		return ".".join((self.base,) + self.fields)


# Expressions

class AccessMode(Enum):
	BORROW = auto()
	BORROW_MUT = auto()
	COPY = auto()
	MOVE = auto()


@dataclass(frozen=True)
class AccessKind:
	"""How a place is accessed; borrows carry the origin they introduce."""
	mode: AccessMode
	origin: Optional[Origin] = None

	def __post_init__(self) -> None:
		if self.is_borrow() and self.origin is None:
			raise ValueError(f"{self.mode.name} access needs an origin")
		if not self.is_borrow() and self.origin is not None:
			raise ValueError(f"{self.mode.name} access can't carry an origin")

	@classmethod
	def borrow(cls, origin: Origin) -> "AccessKind":
		return cls(AccessMode.BORROW, origin)

	@classmethod
	def borrow_mut(cls, origin: Origin) -> "AccessKind":
		return cls(AccessMode.BORROW_MUT, origin)

	@classmethod
	def copy(cls) -> "AccessKind":
		return cls(AccessMode.COPY)

	@classmethod
	def move(cls) -> "AccessKind":
		return cls(AccessMode.MOVE)

	def is_borrow(self) -> bool:
		return self.mode in (AccessMode.BORROW, AccessMode.BORROW_MUT)


class Expr:
	"""Base class for all expressions."""
	pass


@dataclass(frozen=True)
class Access(Expr):
	kind: AccessKind
	place: Place


@dataclass(frozen=True)
class Call(Expr):
	callee: str
	arguments: Tuple[Expr, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Number(Expr):
	value: int


@dataclass(frozen=True)
class UnitLit(Expr):
	pass


# Statements

class Statement:
	"""Base class for statements; every statement carries its source span."""
	span: Span


@dataclass(frozen=True)
class Assign(Statement):
	place: Place
	expr: Expr
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class ExprStmt(Statement):
	expr: Expr
	span: Span = field(default_factory=Span)


def statement_expr(stmt: Statement) -> Expr:
	"""The expression evaluated by a statement (the RHS for assignments)."""
	if isinstance(stmt, (Assign, ExprStmt)):
		return stmt.expr
	raise TypeError(f"unhandled statement {stmt!r}")


# Program

@dataclass(frozen=True)
class BasicBlock:
	name: str
	statements: Tuple[Statement, ...] = field(default_factory=tuple)
	successors: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Program:
	variables: Tuple[Variable, ...] = field(default_factory=tuple)
	struct_decls: Tuple[StructDecl, ...] = field(default_factory=tuple)
	basic_blocks: Tuple[BasicBlock, ...] = field(default_factory=tuple)

	def statement_count(self) -> int:
		return sum(len(bb.statements) for bb in self.basic_blocks)


__all__ = [
	"Origin",
	"Ty",
	"I32",
	"Unit",
	"Ref",
	"RefMut",
	"Struct",
	"Parameter",
	"OriginParam",
	"TyParam",
	"is_ref",
	"collect_origins",
	"GenericDecl",
	"GenericOrigin",
	"GenericTy",
	"Variable",
	"FieldDecl",
	"StructDecl",
	"Place",
	"AccessMode",
	"AccessKind",
	"Expr",
	"Access",
	"Call",
	"Number",
	"UnitLit",
	"Statement",
	"Assign",
	"ExprStmt",
	"statement_expr",
	"BasicBlock",
	"Program",
]
