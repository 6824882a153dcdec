# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fact base: the six relations handed to the downstream solver.

Each relation is a list of tuples in emission order (program traversal
order). Duplicates are kept; their multiplicity is meaningful.

The textual rendering groups facts per node, for reading and for golden-file
comparisons:

	bb0[0]: "let r = &'1 mut x" {
		clear_origin('1)
		goto bb0[1]
	}

Nodes are ordered by name, and each node lists its facts in the order the
solver rules consume them: access, invalidate, clear, introduce_subset.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from borrowfacts.ast import Origin
from borrowfacts.nodes import Node

RELATIONS: Tuple[str, ...] = (
	"access_origin",
	"cfg_edge",
	"clear_origin",
	"introduce_subset",
	"invalidate_origin",
	"node_text",
)

# Text shown for nodes that have no recorded statement.
PASS_TEXT = "(pass)"

_ESCAPES = {
	"\\": "\\\\",
	'"': '\\"',
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"\0": "\\0",
}


def quote_text(text: str) -> str:
	"""Double-quote `text`, escaping quotes, backslashes and non-printable characters."""
	out = []
	for ch in text:
		if ch in _ESCAPES:
			out.append(_ESCAPES[ch])
		elif not ch.isprintable():
			out.append(f"\\u{{{ord(ch):x}}}")
		else:
			out.append(ch)
	return '"' + "".join(out) + '"'


@dataclass
class Facts:
	access_origin: List[Tuple[Origin, Node]] = field(default_factory=list)
	cfg_edge: List[Tuple[Node, Node]] = field(default_factory=list)
	clear_origin: List[Tuple[Origin, Node]] = field(default_factory=list)
	introduce_subset: List[Tuple[Origin, Origin, Node]] = field(default_factory=list)
	invalidate_origin: List[Tuple[Origin, Node]] = field(default_factory=list)
	node_text: List[Tuple[str, Node]] = field(default_factory=list)

	def relation(self, name: str) -> list:
		if name not in RELATIONS:
			raise KeyError(f"unknown fact relation {name!r}")
		return getattr(self, name)

	def relation_counts(self) -> Dict[str, int]:
		return {name: len(self.relation(name)) for name in RELATIONS}

	def to_dict(self) -> Dict[str, List[List[str]]]:
		"""Relations as JSON-friendly lists, in emission order."""
		return {name: [list(row) for row in self.relation(name)] for name in RELATIONS}

	def write_relation_files(self, directory: Path) -> List[Path]:
		"""
		Write one tab-separated `<relation>.facts` file per relation, the input
		layout Soufflé expects. Returns the written paths in relation order.
		"""
		directory = Path(directory)
		directory.mkdir(parents=True, exist_ok=True)
		written: List[Path] = []
		for name in RELATIONS:
			path = directory / f"{name}.facts"
			lines = ["\t".join(_escape_column(col) for col in row) for row in self.relation(name)]
			path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
			written.append(path)
		return written

	def successors_of(self, node: Node) -> List[Node]:
		return [succ for pred, succ in self.cfg_edge if pred == node]

	def text_of(self, node: Node) -> str:
		for text, candidate in self.node_text:
			if candidate == node:
				return text
		return PASS_TEXT

	def facts_per_node(self) -> Dict[Node, List[str]]:
		"""Rendered facts grouped per node, nodes sorted by name."""
		per_node: Dict[Node, List[str]] = {}
		# Nodes with no facts (e.g. a lone `goto`) still show up through
		# their CFG edges.
		for pred, succ in self.cfg_edge:
			per_node.setdefault(pred, [])
			per_node.setdefault(succ, [])
		for origin, node in self.access_origin:
			per_node.setdefault(node, []).append(f"access_origin({origin})")
		for origin, node in self.invalidate_origin:
			per_node.setdefault(node, []).append(f"invalidate_origin({origin})")
		for origin, node in self.clear_origin:
			per_node.setdefault(node, []).append(f"clear_origin({origin})")
		for source, target, node in self.introduce_subset:
			per_node.setdefault(node, []).append(f"introduce_subset({source}, {target})")
		return {node: per_node[node] for node in sorted(per_node)}

	def render(self) -> str:
		chunks: List[str] = []
		for node, lines in self.facts_per_node().items():
			out = [f"{node}: {quote_text(self.text_of(node))} {{\n"]
			out.extend(f"\t{line}\n" for line in lines)
			# `goto` is always present, even without successors (exit node).
			out.append("\tgoto" + "".join(f" {succ}" for succ in self.successors_of(node)) + "\n}\n")
			chunks.append("".join(out))
		return "\n".join(chunks)

	def __str__(self) -> str:
		return self.render()


def _escape_column(value: Any) -> str:
	return str(value).replace("\\", "\\\\").replace("\t", "\\t").replace("\n", "\\n")


__all__ = ["Facts", "RELATIONS", "PASS_TEXT", "quote_text"]
