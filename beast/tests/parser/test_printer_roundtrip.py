# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from beast.core.types import IntType
from beast.parser import ast, parse_module
from beast.printer import format_instr, format_module

SAMPLE = """
(import $print from std.io)
(import $open as $fopen from "vendor/fs\\tdir")
(const %limit u8 10)
(const %delta i8 -1)
(const %big 0xFFFF)
;; entry point
(func $main
	(push u8 %limit)
	(while (> u8)
		(push u8 1)
		(sub u8)
		(if (== u8) (call $print) (else (sys :yield))))
	(drop u8)
	(reg :sp)
	(load u8)
	(push u8 +3)
	(store u8 0x10)
	(alloc %big)
	(free)
	(u8_promote)
	(ret))
(export $main as $start)
"""


def test_canonical_layout():
	module = parse_module("(const %x u8 1)(func $f (push u8 %x) (while (< u8) (drop u8) (push u8 0)) (ret))")
	assert format_module(module) == (
		"(const %x u8 1)\n"
		"(func $f\n"
		"  (push u8 %x)\n"
		"  (while (< u8)\n"
		"    (drop u8)\n"
		"    (push u8 0))\n"
		"  (ret))\n"
	)


def test_if_else_layout():
	module = parse_module("(func $f (if (!= i16) (drop i16) (else (ret))))")
	assert format_module(module) == (
		"(func $f\n"
		"  (if (!= i16)\n"
		"    (drop i16)\n"
		"    (else\n"
		"      (ret))))\n"
	)


def test_empty_forms():
	assert format_module(parse_module("(func $f)")) == "(func $f)\n"
	assert format_module(ast.Module()) == "\n"


def test_signed_literals_keep_their_sign():
	assert format_instr(ast.Push(IntType.I8, ast.Literal(3, signed=True)), depth=0) == "(push i8 +3)"
	assert format_instr(ast.Alloc(ast.Literal(-2, signed=True)), depth=0) == "(alloc -2)"


def test_round_trip_preserves_structure():
	module = parse_module(SAMPLE)
	text = format_module(module)
	reparsed = parse_module(text)
	assert reparsed == module
	assert [type(f).__name__ for f in reparsed.fields] == [type(f).__name__ for f in module.fields]
	assert format_module(reparsed) == text


def test_quoted_origin_is_requoted():
	module = parse_module(SAMPLE)
	assert module.imports[1].origin == "vendor/fs\tdir"
	assert '(import $open as $fopen from "vendor/fs\\tdir")' in format_module(module)
