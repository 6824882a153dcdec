# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation for statements.

Spans are UTF-8 byte offsets into the program source text. The only consumer
is `node_text`, which needs the literal text of a statement without its
trailing terminator.
"""

from __future__ import annotations

from dataclasses import dataclass

from borrowfacts.core.errors import InvalidSpanError


@dataclass(frozen=True)
class Span:
	"""Half-open byte range `[start, end)` into the source text."""

	start: int = 0
	end: int = 0

	def is_empty(self) -> bool:
		return self.end <= self.start

	def text_in(self, source: str | bytes) -> str:
		"""
		Return the spanned text, minus its last byte (the statement terminator).

		`source` may be given as text or as its UTF-8 encoding; callers slicing
		many spans should pass bytes to avoid re-encoding.
		"""
		data = source.encode("utf-8") if isinstance(source, str) else source
		if self.is_empty() or self.start < 0 or self.end > len(data):
			raise InvalidSpanError(self.start, self.end, len(data))
		try:
			return data[self.start : self.end - 1].decode("utf-8")
		except UnicodeDecodeError as exc:
			# The range cuts through a multi-byte character.
			raise InvalidSpanError(self.start, self.end, len(data)) from exc


__all__ = ["Span"]
