# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
borrowfacts: fact extraction for an origin-based borrow checker.

Given a parsed program and its source text, emit the relations a Datalog
solver consumes (`access_origin`, `cfg_edge`, `clear_origin`,
`introduce_subset`, `invalidate_origin`, `node_text`).
"""

from borrowfacts.config import EmitConfig
from borrowfacts.fact_emitter import FactEmitter, emit_facts
from borrowfacts.facts import Facts
from borrowfacts.nodes import NamingScheme

__all__ = ["EmitConfig", "FactEmitter", "Facts", "NamingScheme", "emit_facts"]
