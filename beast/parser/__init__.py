# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Beast parser package: scanner, grammar-driven parser and AST builder.

  text -> scan() -> tokens -> parse() -> lark Tree -> build_module() -> Module

`parse_beast_source` runs all three stages and converts the fatal lexical or
syntax error (if any) into a diagnostic instead of raising.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from beast.core.diagnostics import Diagnostic
from . import ast
from .errors import BeastSyntaxError, LexError, ParseError
from .parser import build_module, parse, parse_module
from .scanner import decode_string, scan, undecodable_source


def parse_beast_source(source: str, path: Optional[str] = None) -> Tuple[Optional[ast.Module], List[Diagnostic]]:
	"""
	Parse one module.

	Returns `(module, [])` on success or `(None, [diagnostic])` on the first
	lexical/syntax error; parsing never resynchronizes past broken input.
	"""
	try:
		module = parse_module(source, path=path)
	except ParseError as err:
		return None, [err.diagnostic.with_file(path)]
	return module, []


__all__ = [
	"ast",
	"BeastSyntaxError",
	"LexError",
	"ParseError",
	"build_module",
	"decode_string",
	"parse",
	"parse_beast_source",
	"parse_module",
	"scan",
	"undecodable_source",
]
