# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Node naming for CFG points.

Two schemes:
- VERBOSE: `<block>[<statement index>]`, e.g. `bb1[0]`.
- COMPACT_LETTERS: one letter per statement, counting statements across all
  blocks in declared order (`a`, `b`, ...). This only exists to compare
  against hand-written fact files that use letters; past `z` it is an error.

An empty block (a bare `goto`) still names its node 0 under either scheme.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict

from borrowfacts.ast import Program
from borrowfacts.core.errors import NodeNameOverflowError

# A user-readable CFG point, as it appears in facts.
Node = str

_LETTERS = "abcdefghijklmnopqrstuvwxyz"


class NamingScheme(Enum):
	VERBOSE = "verbose"
	COMPACT_LETTERS = "compact-letters"


class NodeNamer:
	"""Deterministic `(block, statement index) -> Node` naming for one program."""

	def __init__(self, program: Program, scheme: NamingScheme = NamingScheme.VERBOSE) -> None:
		self.scheme = scheme
		# Number of statements declared before each block.
		self._block_starts: Dict[str, int] = {}
		total = 0
		for bb in program.basic_blocks:
			self._block_starts.setdefault(bb.name, total)
			total += len(bb.statements)
		self._total = total

	def node_at(self, block: str, statement_idx: int) -> Node:
		node = f"{block}[{statement_idx}]"
		if self.scheme is NamingScheme.VERBOSE:
			return node
		# Undeclared blocks (e.g. a dangling successor) count after every
		# declared statement.
		idx = self._block_starts.get(block, self._total) + statement_idx
		if idx >= len(_LETTERS):
			raise NodeNameOverflowError(idx, node)
		return _LETTERS[idx]


__all__ = ["Node", "NamingScheme", "NodeNamer"]
