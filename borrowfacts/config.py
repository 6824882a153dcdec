# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fact emission settings.

The core only ever receives an explicit `EmitConfig`; reading the process
environment happens here, and only when a front end asks for it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from borrowfacts.nodes import NamingScheme

# Presence (any value) selects single-letter node names.
SIMPLE_NODES_ENV = "SIMPLE_NODES"


@dataclass(frozen=True)
class EmitConfig:
	naming: NamingScheme = NamingScheme.VERBOSE

	@classmethod
	def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EmitConfig":
		env = os.environ if environ is None else environ
		if SIMPLE_NODES_ENV in env:
			return cls(naming=NamingScheme.COMPACT_LETTERS)
		return cls()


__all__ = ["EmitConfig", "SIMPLE_NODES_ENV"]
