"""
Common diagnostic structure for the scanner, parser and validator.

Every failure is reported as a Diagnostic: an `ErrorKind` (the taxonomy
family), a short `code` naming the specific failure inside that family, a
human-readable message and a Span. Lexical and syntax errors abort a module's
parse and yield a single diagnostic; validator diagnostics are aggregated.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

from .span import Span


class ErrorKind(Enum):
	"""Diagnostic families."""

	LEX = "LexError"
	SYNTAX = "SyntaxError"
	NAME = "NameError"
	TYPE = "TypeError"
	# Reserved: nothing in the current grammar reports it.
	STRUCTURE = "StructureError"


@dataclass
class Diagnostic:
	"""Represents a front-end diagnostic (error/note)."""

	message: str
	kind: Optional[ErrorKind] = None
	code: str | None = None
	# Pipeline phase that produced the diagnostic: "lexer", "parser", "validator"
	# or "loader". Used by the JSON renderer.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def label(self) -> str:
		"""`Kind::code` label, e.g. `TypeError::StackUnderflow`."""
		if self.kind is None:
			return self.code or ""
		if self.code is None:
			return self.kind.value
		return f"{self.kind.value}::{self.code}"

	def with_file(self, file: Optional[str]) -> "Diagnostic":
		return replace(self, span=self.span.with_file(file))

	def render(self) -> str:
		"""Format as `file:line:column: severity: [Kind::code] message`."""
		where = f"{self.span.file or '<input>'}:{self.span.describe()}"
		label = f"[{self.label}] " if self.label else ""
		text = f"{where}: {self.severity}: {label}{self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_json(self) -> dict:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"kind": self.kind.value if self.kind is not None else None,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"offset": self.span.offset,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "ErrorKind", "has_errors"]
