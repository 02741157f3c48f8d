# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiled Beast grammar shared by the scanner and the parser.

The scanner uses the grammar's basic lexer (`Lark.lex`) and the parser feeds
the resulting tokens to the LALR interactive parser, so both stages agree on
terminal names by construction.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

BEAST_GRAMMAR = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="module",
	propagate_positions=True,
	maybe_placeholders=False,
)

# Terminal names used by the parser's error classification.
LPAR = "LPAR"
RPAR = "RPAR"
END = "$END"
WORD = "MODULE_PATH"
BLOCK_OPENERS = frozenset({"WHILE", "IF"})

__all__ = ["BEAST_GRAMMAR", "LPAR", "RPAR", "END", "WORD", "BLOCK_OPENERS"]
