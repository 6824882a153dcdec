# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fact emission: turn a Program into the solver's input relations.

Scope:
- One pass over the blocks in declared order. Each block emits its CFG edges,
  then each statement emits `node_text` followed by the origin facts for its
  shape.
- Assignments clear every origin in the target's type. Writing to a
  non-reference place invalidates every loan of that place.
- Borrows clear the origin they introduce; mutable borrows also access the
  borrowed place's origins and invalidate its existing loans.
- Copies and moves access every origin of the place's type.
- Assigning to a reference introduces a subset from the RHS origin into the
  target origin (single-level correspondence only).

Invalidations are not pruned by reachability: a loan is invalidated even when
its borrow site can't reach the invalidating node. Call signatures are not
modelled (no subsets between arguments and results).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from borrowfacts.ast import (
	Access,
	AccessMode,
	Assign,
	BasicBlock,
	Call,
	Expr,
	ExprStmt,
	Place,
	Program,
	Ref,
	RefMut,
	Ty,
	is_ref,
)
from borrowfacts.cfg import block_edges
from borrowfacts.config import EmitConfig
from borrowfacts.facts import Facts
from borrowfacts.loans import LoanIndex
from borrowfacts.nodes import NamingScheme, Node, NodeNamer
from borrowfacts.type_resolver import PlaceResolver

logger = logging.getLogger(__name__)


class FactEmitter:
	"""Emits facts for one program and its source text."""

	def __init__(self, program: Program, source: str, config: Optional[EmitConfig] = None) -> None:
		self.program = program
		self.config = config or EmitConfig()
		self._source = source.encode("utf-8")
		self.resolver = PlaceResolver(program)
		self.namer = NodeNamer(program, self.config.naming)
		# Loans must be known up front: loops make later borrows relevant to
		# earlier statements.
		self.loans = LoanIndex.build(program)

	def emit(self) -> Facts:
		facts = Facts()
		self.emit_into(facts)
		return facts

	def emit_into(self, facts: Facts) -> None:
		logger.info(
			"Emitting facts for %d blocks, %d statements (%d loans)",
			len(self.program.basic_blocks),
			self.program.statement_count(),
			len(self.loans),
		)
		for bb in self.program.basic_blocks:
			self.emit_block_facts(bb, facts)
		logger.info("Emitted facts: %s", facts.relation_counts())

	def emit_block_facts(self, bb: BasicBlock, facts: Facts) -> None:
		logger.debug("block %s: %d statements, successors %s", bb.name, len(bb.statements), list(bb.successors))
		facts.cfg_edge.extend(block_edges(bb, self.namer))

		for idx, stmt in enumerate(bb.statements):
			node = self.namer.node_at(bb.name, idx)
			facts.node_text.append((stmt.span.text_in(self._source), node))

			if isinstance(stmt, Assign):
				self.emit_assign_facts(node, stmt.place, stmt.expr, facts)
			elif isinstance(stmt, ExprStmt):
				self.emit_expr_facts(node, stmt.expr, facts)
			else:
				raise TypeError(f"unhandled statement {stmt!r}")

	def emit_assign_facts(self, node: Node, place: Place, expr: Expr, facts: Facts) -> None:
		lhs_ty, lhs_origins = self.resolver.resolve(place)

		# The target is overwritten: all of its origins start over.
		for origin in lhs_origins:
			facts.clear_origin.append((origin, node))

		if not is_ref(lhs_ty):
			# Overwriting a non-reference invalidates the loans borrowing it.
			# Only complete places are matched.
			for loan in self.loans.loans_of(place):
				facts.invalidate_origin.append((loan.origin, node))

		self.emit_expr_facts(node, expr, facts)
		self.emit_subset_facts(node, lhs_ty, expr, facts)

	def emit_expr_facts(self, node: Node, expr: Expr, facts: Facts) -> None:
		if isinstance(expr, Access):
			kind = expr.kind
			if kind.is_borrow():
				# A borrow issues a fresh origin of the same name.
				facts.clear_origin.append((kind.origin, node))
				if kind.mode is AccessMode.BORROW_MUT:
					# A mutable borrow is a write to the place: it accesses
					# the origins in its type and invalidates its loans.
					_, origins = self.resolver.resolve(expr.place)
					for origin in origins:
						facts.access_origin.append((origin, node))
					for loan in self.loans.loans_of(expr.place):
						facts.invalidate_origin.append((loan.origin, node))
			else:
				# Copies and moves are reads of every origin in the type.
				_, origins = self.resolver.resolve(expr.place)
				for origin in origins:
					facts.access_origin.append((origin, node))
		elif isinstance(expr, Call):
			for arg in expr.arguments:
				self.emit_expr_facts(node, arg, facts)

	def emit_subset_facts(self, node: Node, lhs_ty: Ty, rhs: Expr, facts: Facts) -> None:
		"""
		Relate the RHS origin to the LHS origin when assigning to a reference.

		Both sides are assumed to have the same shape; only the outermost
		reference origin is related.
		"""
		if not isinstance(lhs_ty, (Ref, RefMut)):
			return
		target = lhs_ty.origin
		if not isinstance(rhs, Access):
			return
		if rhs.kind.is_borrow():
			facts.introduce_subset.append((rhs.kind.origin, target, node))
			return
		rhs_ty = self.resolver.ty_of(rhs.place)
		if isinstance(rhs_ty, (Ref, RefMut)):
			facts.introduce_subset.append((rhs_ty.origin, target, node))


def emit_facts(
	program: Program,
	source: str,
	config: Optional[EmitConfig] = None,
	*,
	naming: Optional[NamingScheme] = None,
) -> Facts:
	"""Emit all facts for `program`; `naming` overrides `config.naming`."""
	if config is None:
		config = EmitConfig()
	if naming is not None:
		config = replace(config, naming=naming)
	return FactEmitter(program, source, config).emit()


__all__ = ["FactEmitter", "emit_facts"]
