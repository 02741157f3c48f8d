# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Beast scanner: raw text -> list of lark Tokens.

Tokens are produced by the grammar's own basic lexer, so their `type` is the
terminal name the parser expects (`FUNC_ID`, `UNSIGNED`, `ADD`, `LPAR`, ...).
Whitespace, `;; line` comments and `(; block ;)` comments are skipped.

When the lexer gives up we re-inspect the text at the failure offset to tell an
unterminated string, a bad escape or an unterminated block comment apart from
a plain invalid character.
"""

from __future__ import annotations

import re
from typing import List

from lark import Token
from lark.exceptions import UnexpectedCharacters

from beast.core.span import Span
from .errors import LexError
from .grammar import BEAST_GRAMMAR

_ESCAPE_RE = re.compile(r"\\(u\{[0-9A-Fa-f]+\}|u[0-9A-Fa-f]{2}|[0-9A-Fa-f]{2}|[tnr\"'\\])")
_SIMPLE_ESCAPES = {
	"t": "\t",
	"n": "\n",
	"r": "\r",
	'"': '"',
	"'": "'",
	"\\": "\\",
}


def scan(text: str) -> List[Token]:
	"""Tokenize `text`, raising LexError on the first lexical failure."""
	tokens: List[Token] = []
	try:
		for token in BEAST_GRAMMAR.lex(text):
			if token.type == "STRING":
				_check_string(token)
			tokens.append(token)
	except UnexpectedCharacters as err:
		raise _lex_error(text, err.pos_in_stream) from err
	return tokens


def decode_string(raw: str) -> str:
	"""
	Decode a STRING token value (including its quotes).

	Supported escapes: `\\t \\n \\r \\" \\' \\\\`, `\\uXX`, `\\u{HEX}` and raw
	two-hex-digit byte escapes `\\XX`.
	"""
	return _ESCAPE_RE.sub(_unescape, raw[1:-1])


def _unescape(match: re.Match) -> str:
	body = match.group(1)
	if body.startswith("u{"):
		return chr(int(body[2:-1], 16))
	if body.startswith("u") and len(body) == 3:
		return chr(int(body[1:], 16))
	if len(body) == 2:
		return chr(int(body, 16))
	return _SIMPLE_ESCAPES[body]


def _check_string(token: Token) -> None:
	try:
		decode_string(token.value)
	except ValueError as err:
		# `\u{...}` beyond the Unicode range.
		raise LexError(
			f"invalid escape sequence in string literal: {err}",
			code="InvalidEscape",
			span=Span.from_loc(token),
		) from err


def _lex_error(text: str, pos: int) -> LexError:
	char = text[pos]
	if char == '"':
		return _string_error(text, pos)
	if char == ";" and pos > 0 and text[pos - 1] == "(":
		return LexError(
			"unterminated block comment: '(;' has no closing ';)'",
			code="UnterminatedComment",
			span=_span_at(text, pos - 1),
		)
	if char.isdigit() or char in "+-":
		return LexError(f"malformed numeral starting with {char!r}", code="InvalidCharacter", span=_span_at(text, pos))
	return LexError(f"invalid character {char!r}", code="InvalidCharacter", span=_span_at(text, pos))


def _string_error(text: str, start: int) -> LexError:
	i = start + 1
	while i < len(text):
		ch = text[i]
		if ch == '"':
			break
		if ch == "\\":
			match = _ESCAPE_RE.match(text, i)
			if match is None:
				return LexError(
					f"invalid escape sequence {text[i:i + 2]!r} in string literal",
					code="InvalidEscape",
					span=_span_at(text, i),
				)
			i = match.end()
			continue
		i += 1
	if i >= len(text):
		return LexError("unterminated string literal", code="UnterminatedString", span=_span_at(text, start))
	return LexError("malformed string literal", code="InvalidEscape", span=_span_at(text, start))


def undecodable_source(err: UnicodeDecodeError) -> LexError:
	"""LexError for source bytes that are not valid UTF-8, pinned to the first bad byte."""
	prefix = err.object[:err.start]
	line = prefix.count(b"\n") + 1
	column = len(prefix) - (prefix.rfind(b"\n") + 1) + 1
	return LexError(
		f"invalid character: byte 0x{err.object[err.start]:02x} is not valid UTF-8",
		code="InvalidCharacter",
		span=Span(line=line, column=column, offset=err.start),
	)


def _span_at(text: str, offset: int) -> Span:
	line = text.count("\n", 0, offset) + 1
	column = offset - (text.rfind("\n", 0, offset) + 1) + 1
	return Span(line=line, column=column, offset=offset)


__all__ = ["scan", "decode_string", "undecodable_source"]
