# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Loan index: every borrow expression in the program, keyed by borrowed place.

Built once before any fact is emitted, because invalidations look up borrows
anywhere in the program (loops make both earlier and later borrows relevant).

Limitations kept on purpose:
- Places are whole-place keys: a loan of `x.f` is not found when `x` is
  written, and vice versa.
- Only a statement's top-level expression is scanned; borrows nested inside
  call arguments are not recorded.
- Loans do not record their mode (shared/mutable).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from borrowfacts.ast import Access, Origin, Place, Program, statement_expr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
	"""
	A CFG point as indices: the block within the program and the statement
	within that block. Nodes are the user-facing names of locations.
	"""

	block_idx: int
	statement_idx: int


@dataclass(frozen=True)
class Loan:
	origin: Origin
	location: Location


class LoanIndex:
	"""Place -> loans of that place, in program order."""

	def __init__(self, loans: Dict[Place, List[Loan]] | None = None) -> None:
		self._loans: Dict[Place, Tuple[Loan, ...]] = {
			place: tuple(entries) for place, entries in (loans or {}).items()
		}

	@classmethod
	def build(cls, program: Program) -> "LoanIndex":
		loans: Dict[Place, List[Loan]] = {}
		for block_idx, bb in enumerate(program.basic_blocks):
			for statement_idx, stmt in enumerate(bb.statements):
				expr = statement_expr(stmt)
				if isinstance(expr, Access) and expr.kind.is_borrow():
					loan = Loan(expr.kind.origin, Location(block_idx, statement_idx))
					loans.setdefault(expr.place, []).append(loan)
					logger.debug("loan %s of `%s` at %s[%d]", loan.origin, expr.place, bb.name, statement_idx)
		return cls(loans)

	def loans_of(self, place: Place) -> Tuple[Loan, ...]:
		return self._loans.get(place, ())

	def __len__(self) -> int:
		return sum(len(entries) for entries in self._loans.values())


__all__ = ["Location", "Loan", "LoanIndex"]
