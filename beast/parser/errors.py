from __future__ import annotations

from beast.core.diagnostics import Diagnostic, ErrorKind
from beast.core.span import Span


class ParseError(ValueError):
	"""
	Fatal front-end error raised while scanning or parsing a module.

	This is a `ValueError` subclass so callers can treat it as a parse-time
	failure, but it carries a fully formed Diagnostic so drivers can report it
	with its position instead of crashing.
	"""

	kind: ErrorKind
	phase: str

	def __init__(self, message: str, *, code: str, span: Span) -> None:
		super().__init__(message)
		self.code = code
		self.span = span

	@property
	def diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=str(self),
			kind=self.kind,
			code=self.code,
			phase=self.phase,
			span=self.span,
		)


class LexError(ParseError):
	"""Unterminated string/comment, invalid escape or invalid character."""

	kind = ErrorKind.LEX
	phase = "lexer"


class BeastSyntaxError(ParseError):
	"""Unbalanced parentheses, unknown keyword, missing operand or trailing input."""

	kind = ErrorKind.SYNTAX
	phase = "parser"


__all__ = ["ParseError", "LexError", "BeastSyntaxError"]
