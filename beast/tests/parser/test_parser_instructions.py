# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from beast.core.types import IntType
from beast.parser import ast, parse_module

U8 = IntType.U8
U16 = IntType.U16


def _body(text: str):
	return parse_module(f"(func $f {text})").functions[0].body


def test_push_operands():
	assert _body("(push u8 5) (push i8 -3) (push u16 %k)") == [
		ast.Push(U8, ast.Literal(5)),
		ast.Push(IntType.I8, ast.Literal(-3, signed=True)),
		ast.Push(U16, ast.ConstRef("%k")),
	]


def test_arithmetic_and_conversions():
	body = _body("(add u8) (not u16) (xor i16) (u8_promote) (i16_demote)")
	assert body == [
		ast.Arith(ast.ArithOp.ADD, U8),
		ast.Arith(ast.ArithOp.NOT, U16),
		ast.Arith(ast.ArithOp.XOR, IntType.I16),
		ast.Convert(ast.ConvertOp.U8_PROMOTE),
		ast.Convert(ast.ConvertOp.I16_DEMOTE),
	]
	assert body[1].op.arity == 1
	assert body[0].op.arity == 2


def test_memory_instructions():
	body = _body("(reg :sp) (load u8) (load u16 0x100) (store u8 %addr) (store i8) (alloc 16) (free)")
	assert body == [
		ast.Reg(":sp"),
		ast.Load(U8),
		ast.Load(U16, ast.Literal(256)),
		ast.Store(U8, ast.ConstRef("%addr")),
		ast.Store(IntType.I8),
		ast.Alloc(ast.Literal(16)),
		ast.Free(),
	]
	assert body[1].indirect
	assert not body[2].indirect


def test_stack_and_control_instructions():
	assert _body("(dup u8) (drop u16) (call $g) (sys :print) (ret)") == [
		ast.Dup(U8),
		ast.Drop(U16),
		ast.Call("$g"),
		ast.Sys(":print"),
		ast.Ret(),
	]


def test_while_loop():
	(loop,) = _body("(while (> u8) (push u8 1) (drop u8))")
	assert loop == ast.While(
		ast.Condition(ast.CmpOp.GT, U8),
		[ast.Push(U8, ast.Literal(1)), ast.Drop(U8)],
	)


def test_if_with_and_without_else():
	with_else, without_else, empty_else = _body(
		"""
		(if (== u16) (drop u16) (else (push u8 0)))
		(if (!= i8) (ret))
		(if (<= u8) (else))
		"""
	)
	assert with_else.condition == ast.Condition(ast.CmpOp.EQ, U16)
	assert with_else.then_body == [ast.Drop(U16)]
	assert with_else.else_body == [ast.Push(U8, ast.Literal(0))]
	assert without_else.else_body is None
	assert without_else.then_body == [ast.Ret()]
	assert empty_else.then_body == []
	assert empty_else.else_body == []


def test_nested_blocks():
	(outer,) = _body("(while (< u8) (if (>= u8) (while (== u8))))")
	inner_if = outer.body[0]
	assert isinstance(inner_if, ast.If)
	assert isinstance(inner_if.then_body[0], ast.While)
	names = [type(i).__name__ for i in ast.walk_instructions([outer])]
	assert names == ["While", "If", "While"]


def test_mnemonics():
	push, add, conv, ret = _body("(push u8 1) (add u8) (u8_promote) (ret)")
	assert ast.mnemonic(push) == "push u8"
	assert ast.mnemonic(add) == "add u8"
	assert ast.mnemonic(conv) == "u8_promote"
	assert ast.mnemonic(ret) == "ret"
