# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fatal precondition errors raised during fact extraction.

These denote a program whose declared static shape does not match its usage
(missing variable, struct or field, a field access on a non-struct, ...). They
are not recoverable: nothing in the core catches them, and no partial facts
are returned when one is raised.

Input loading failures are a separate tier (`ProgramFormatError`): they happen
before extraction runs and are reported by the front end.
"""

from __future__ import annotations


class FactGenError(RuntimeError):
	"""Base class for malformed-program conditions found while emitting facts."""


class UnknownVariableError(FactGenError):
	def __init__(self, name: str, place: str | None = None) -> None:
		self.name = name
		self.place = place
		where = f" (in place `{place}`)" if place is not None and place != name else ""
		super().__init__(f"can't find variable `{name}`{where}")


class NotAStructError(FactGenError):
	def __init__(self, ty: object, field: str) -> None:
		self.ty = ty
		self.field = field
		super().__init__(f"type `{ty}` must be a struct to access its field `{field}`")


class UnknownStructError(FactGenError):
	def __init__(self, name: str, field: str) -> None:
		self.name = name
		self.field = field
		super().__init__(f"can't find struct `{name}` at field `{field}`")


class UnknownFieldError(FactGenError):
	def __init__(self, struct: str, field: str) -> None:
		self.struct = struct
		self.field = field
		super().__init__(f"can't find field `{field}` in struct `{struct}`")


class GenericArgumentError(FactGenError):
	"""A generic type slot whose actual argument is missing or is an origin."""

	def __init__(self, struct: str, slot: str, index: int, actual: object = None) -> None:
		self.struct = struct
		self.slot = slot
		self.index = index
		self.actual = actual
		if actual is None:
			detail = "is missing"
		else:
			detail = f"should be a type, got `{actual}`"
		super().__init__(f"generic argument {index} (`{slot}`) of struct `{struct}` {detail}")


class NodeNameOverflowError(FactGenError):
	def __init__(self, index: int, node: str) -> None:
		self.index = index
		self.node = node
		super().__init__(f"can't turn statement #{index} into a single letter name for node {node}")


class InvalidSpanError(FactGenError):
	def __init__(self, start: int, end: int, source_len: int) -> None:
		self.start = start
		self.end = end
		self.source_len = source_len
		super().__init__(f"span {start}..{end} does not cover a statement in a source of {source_len} bytes")


class ProgramFormatError(ValueError):
	"""Raised when a serialized program can't be loaded into the program model."""

	def __init__(self, path: str, message: str) -> None:
		self.path = path
		super().__init__(f"{path}: {message}" if path else message)


__all__ = [
	"FactGenError",
	"UnknownVariableError",
	"NotAStructError",
	"UnknownStructError",
	"UnknownFieldError",
	"GenericArgumentError",
	"NodeNameOverflowError",
	"InvalidSpanError",
	"ProgramFormatError",
]
