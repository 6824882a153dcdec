"""
Diagnostic records reported by the command-line front end.

The core raises exceptions; this is where they turn into something a user (or
a tool reading `--json` output) can consume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import FactGenError, ProgramFormatError


@dataclass
class Diagnostic:
	"""Represents a front-end diagnostic (error/warning/etc.)."""

	message: str
	# "load" for interchange failures, "facts" for extraction failures.
	phase: str | None = None
	severity: str = "error"
	code: str | None = None
	file: str | None = None
	notes: list[str] = field(default_factory=list)

	@classmethod
	def from_exception(cls, exc: Exception, *, file: str | None = None) -> "Diagnostic":
		if isinstance(exc, (ProgramFormatError, OSError)):
			phase = "load"
		elif isinstance(exc, FactGenError):
			phase = "facts"
		else:
			phase = None
		return cls(message=str(exc), phase=phase, code=type(exc).__name__, file=file)

	def to_dict(self) -> dict[str, Any]:
		return {
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"code": self.code,
			"file": self.file,
			"notes": list(self.notes),
		}

	def format_human(self) -> str:
		parts: list[str] = []
		if self.file:
			parts.append(f"{self.file}:")
		parts.append(f"{self.severity}[{self.phase or 'internal'}]: {self.message}")
		text = " ".join(parts)
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


__all__ = ["Diagnostic"]
