# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Place type resolution.

Given a place (`v`, `*p`, `v.a.b`), compute its static type and the origins
embedded in that type. Field accesses walk the struct declarations, and
generic type slots are substituted with the struct's actual arguments at each
step, so that for

	struct S<'a, T> { f: T }
	v: S<'a, &'b i32>

the place `v.f` resolves to `&'b i32`.

Origins are collected root-to-leaf: every intermediate struct type visited by
the field walk contributes its origins, then the final type contributes its
own. Lookups that fail are fatal (see `borrowfacts.core.errors`).
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from borrowfacts.ast import (
	FieldDecl,
	GenericTy,
	Origin,
	Place,
	Program,
	Struct,
	StructDecl,
	Ty,
	TyParam,
	collect_origins,
)
from borrowfacts.core.errors import (
	GenericArgumentError,
	NotAStructError,
	UnknownFieldError,
	UnknownStructError,
	UnknownVariableError,
)


class PlaceResolver:
	"""Resolves places against a program's variable and struct declarations."""

	def __init__(self, program: Program) -> None:
		self._variables: Dict[str, Ty] = {v.name: v.ty for v in program.variables}
		self._structs: Dict[str, StructDecl] = {s.name: s for s in program.struct_decls}
		self._fields: Dict[str, Dict[str, FieldDecl]] = {
			s.name: {f.name: f for f in s.field_decls} for s in program.struct_decls
		}

	def resolve(self, place: Place) -> Tuple[Ty, List[Origin]]:
		"""Return `(ty, origins)` for `place`."""
		origins: List[Origin] = []
		try:
			ty = self._variables[place.variable]
		except KeyError:
			raise UnknownVariableError(place.variable, str(place)) from None

		for field_name in place.fields:
			# The parent's origins are part of the place's origins.
			collect_origins(ty, origins)
			ty = self.field_ty(ty, field_name)

		collect_origins(ty, origins)
		return ty, origins

	def ty_of(self, place: Place) -> Ty:
		return self.resolve(place)[0]

	def field_ty(self, parent: Ty, field_name: str) -> Ty:
		"""Type of `parent.field_name`, with generic type slots substituted."""
		if not isinstance(parent, Struct):
			raise NotAStructError(parent, field_name)
		decl = self._structs.get(parent.name)
		if decl is None:
			raise UnknownStructError(parent.name, field_name)
		field = self._fields[decl.name].get(field_name)
		if field is None:
			raise UnknownFieldError(decl.name, field_name)

		declared = field.ty
		if not isinstance(declared, Struct):
			return declared
		# A field typed `T` where `T` is one of the struct's generic type slots
		# takes the actual argument at the same position.
		for idx, slot in enumerate(decl.generic_decls):
			if isinstance(slot, GenericTy) and slot.name == declared.name:
				if idx >= len(parent.parameters):
					raise GenericArgumentError(decl.name, slot.name, idx)
				actual = parent.parameters[idx]
				if not isinstance(actual, TyParam):
					raise GenericArgumentError(decl.name, slot.name, idx, actual)
				return actual.ty
		return declared


__all__ = ["PlaceResolver"]
