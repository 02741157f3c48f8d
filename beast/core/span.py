# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation used by diagnostics.

A Span carries the file plus line/column (1-based) and the character offset of
the start of the offending construct. Parser tokens, lark tree metadata and AST
`Located` values all convert through `Span.from_loc`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column/offset)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	offset: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a location-like object.

		Accepts an existing Span, an AST `Located`, a lark `Token` (which uses
		`start_pos` for the offset) or a lark tree `Meta`.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc if file is None else replace(loc, file=file)
		offset = getattr(loc, "offset", None)
		if offset is None:
			offset = getattr(loc, "start_pos", None)
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			offset=offset,
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
		)

	def with_file(self, file: Optional[str]) -> "Span":
		if file is None or self.file is not None:
			return self
		return replace(self, file=file)

	def describe(self) -> str:
		"""Render `line:column`, using `?` for unknown parts."""
		line = "?" if self.line is None else str(self.line)
		column = "?" if self.column is None else str(self.column)
		return f"{line}:{column}"


__all__ = ["Span"]
