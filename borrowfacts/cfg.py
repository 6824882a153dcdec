# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
CFG edges, derived from statement counts and declared successors.

Within a block, each statement flows into the next one. A block's last node
flows into node 0 of each successor. `goto` is not a statement, so an empty
block still gets a node 0 to leave from.
"""

from __future__ import annotations

from typing import List, Tuple

from borrowfacts.ast import BasicBlock
from borrowfacts.nodes import Node, NodeNamer


def block_edges(bb: BasicBlock, namer: NodeNamer) -> List[Tuple[Node, Node]]:
	"""Intra-block edges in statement order, then one edge per successor."""
	statement_count = len(bb.statements)
	edges = [
		(namer.node_at(bb.name, idx - 1), namer.node_at(bb.name, idx))
		for idx in range(1, statement_count)
	]
	exit_node = namer.node_at(bb.name, max(statement_count - 1, 0))
	for succ in bb.successors:
		edges.append((exit_node, namer.node_at(succ, 0)))
	return edges


__all__ = ["block_edges"]
