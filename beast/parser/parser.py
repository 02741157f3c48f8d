from __future__ import annotations

from typing import List, Optional, Sequence

from lark import Token, Tree
from lark.exceptions import UnexpectedToken

from beast.core.span import Span
from beast.core.types import IntType
from .ast import (
	Alloc,
	Arith,
	ArithOp,
	Call,
	CmpOp,
	Condition,
	ConstRef,
	Constant,
	Convert,
	ConvertOp,
	Drop,
	Dup,
	Export,
	Free,
	Function,
	If,
	Import,
	Instr,
	Literal,
	Load,
	Located,
	Module,
	NOWHERE,
	Operand,
	Push,
	Reg,
	Ret,
	Store,
	Sys,
	While,
)
from .errors import BeastSyntaxError
from .grammar import BEAST_GRAMMAR, BLOCK_OPENERS, END, LPAR, RPAR, WORD
from .scanner import decode_string, scan


def parse_module(source: str, path: Optional[str] = None) -> Module:
	"""Scan, parse and build a Module; raises LexError / BeastSyntaxError."""
	module = build_module(parse(scan(source)))
	module.path = path
	return module


def parse(tokens: Sequence[Token]) -> Tree:
	"""
	Feed scanned tokens to the LALR parser and return the parse tree.

	Any token the grammar cannot accept, including input left over after the last
	complete file field, raises BeastSyntaxError.
	"""
	interactive = BEAST_GRAMMAR.parse_interactive()
	for index, token in enumerate(tokens):
		try:
			interactive.feed_token(token)
		except UnexpectedToken as err:
			raise _syntax_error(tokens, index, err.token) from err
	last = tokens[-1] if tokens else Token(END, "", 0, 1, 1)
	try:
		return interactive.feed_eof(last)
	except UnexpectedToken as err:
		raise _syntax_error(tokens, len(tokens), err.token) from err


def _syntax_error(tokens: Sequence[Token], index: int, token: Token) -> BeastSyntaxError:
	open_parens: List[int] = []
	for pos in range(index):
		if tokens[pos].type == LPAR:
			open_parens.append(pos)
		elif tokens[pos].type == RPAR and open_parens:
			open_parens.pop()

	if token.type == END:
		if open_parens:
			opener = tokens[open_parens[-1]]
			return BeastSyntaxError(
				f"unbalanced parentheses: '(' is never closed ({len(open_parens)} unclosed at end of input)",
				code="UnbalancedParens",
				span=Span.from_loc(opener),
			)
		return BeastSyntaxError("unexpected end of input", code="UnexpectedToken", span=Span.from_loc(token))
	span = Span.from_loc(token)
	if not open_parens:
		if token.type == RPAR:
			return BeastSyntaxError("unbalanced parentheses: unmatched ')'", code="UnbalancedParens", span=span)
		return BeastSyntaxError(
			f"unexpected {token.value!r} after the last complete form; expected '('",
			code="TrailingInput",
			span=span,
		)

	opener = open_parens[-1]
	in_condition = opener > 0 and tokens[opener - 1].type in BLOCK_OPENERS
	if in_condition:
		return BeastSyntaxError(
			f"malformed condition: unexpected {token.value!r}; expected '(<op> type)'",
			code="MalformedCondition",
			span=span,
		)
	if index == opener + 1:
		if token.type == WORD:
			return BeastSyntaxError(f"unknown keyword {token.value!r}", code="UnknownKeyword", span=span)
		return BeastSyntaxError(
			f"{token.value!r} is not valid in this position",
			code="UnknownKeyword",
			span=span,
		)
	keyword = tokens[opener + 1]
	if keyword.type in BLOCK_OPENERS and index == opener + 2:
		return BeastSyntaxError(
			f"malformed condition: '{keyword.value}' expects '(<op> type)', found {token.value!r}",
			code="MalformedCondition",
			span=span,
		)
	if token.type == RPAR:
		return BeastSyntaxError(f"missing operand for '{keyword.value}'", code="MissingOperand", span=span)
	return BeastSyntaxError(
		f"unexpected {token.value!r} in '{keyword.value}' form",
		code="UnexpectedToken",
		span=span,
	)


def build_module(tree: Tree) -> Module:
	module = Module()
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "import_field":
			item = _build_import(child)
			module.imports.append(item)
		elif kind == "export_field":
			item = _build_export(child)
			module.exports.append(item)
		elif kind == "const_field":
			item = _build_constant(child)
			module.constants.append(item)
		elif kind == "func_field":
			item = _build_function(child)
			module.functions.append(item)
		else:
			raise ValueError(f"unexpected file field: {kind}")
		module.fields.append(item)
	return module


def _build_import(tree: Tree) -> Import:
	name_token = tree.children[0]
	alias = _alias(tree)
	origin_node = next(c for c in tree.children if isinstance(c, Tree) and _name(c) in {"path_origin", "string_origin"})
	origin_token = origin_node.children[0]
	quoted = _name(origin_node) == "string_origin"
	origin = decode_string(origin_token.value) if quoted else origin_token.value
	return Import(name=name_token.value, alias=alias, origin=origin, quoted=quoted, loc=_loc(tree))


def _build_export(tree: Tree) -> Export:
	name_token = tree.children[0]
	return Export(name=name_token.value, alias=_alias(tree), loc=_loc(tree))


def _alias(tree: Tree) -> Optional[str]:
	alias_node = next((c for c in tree.children if isinstance(c, Tree) and _name(c) == "alias"), None)
	if alias_node is None:
		return None
	return alias_node.children[0].value


def _build_constant(tree: Tree) -> Constant:
	name_token = tree.children[0]
	type_node = next((c for c in tree.children if isinstance(c, Tree) and _name(c) == "int_type"), None)
	literal_node = tree.children[-1]
	return Constant(
		name=name_token.value,
		type=_int_type(type_node) if type_node is not None else None,
		value=_build_literal(literal_node),
		loc=_loc(tree),
	)


def _build_function(tree: Tree) -> Function:
	name_token = tree.children[0]
	body = [_build_instr(child) for child in tree.children[1:] if isinstance(child, Tree)]
	return Function(name=name_token.value, body=body, loc=_loc(tree))


def _build_instr(tree: Tree) -> Instr:
	kind = _name(tree)
	loc = _loc(tree)
	subtrees = [c for c in tree.children if isinstance(c, Tree)]
	tokens = [c for c in tree.children if isinstance(c, Token)]

	if kind == "push_instr":
		return Push(type=_int_type(subtrees[0]), operand=_build_operand(subtrees[1]), loc=loc)
	if kind == "arith_instr":
		op = ArithOp(subtrees[0].children[0].value)
		return Arith(op=op, type=_int_type(subtrees[1]), loc=loc)
	if kind == "convert_instr":
		return Convert(op=ConvertOp(subtrees[0].children[0].value), loc=loc)
	if kind == "reg_instr":
		return Reg(register=tokens[0].value, loc=loc)
	if kind in {"load_instr", "store_instr"}:
		address = _build_operand(subtrees[1]) if len(subtrees) > 1 else None
		cls = Load if kind == "load_instr" else Store
		return cls(type=_int_type(subtrees[0]), address=address, loc=loc)
	if kind == "dup_instr":
		return Dup(type=_int_type(subtrees[0]), loc=loc)
	if kind == "drop_instr":
		return Drop(type=_int_type(subtrees[0]), loc=loc)
	if kind == "call_instr":
		return Call(target=tokens[0].value, loc=loc)
	if kind == "ret_instr":
		return Ret(loc=loc)
	if kind == "alloc_instr":
		return Alloc(size=_build_operand(subtrees[0]), loc=loc)
	if kind == "free_instr":
		return Free(loc=loc)
	if kind == "sys_instr":
		return Sys(signal=tokens[0].value, loc=loc)
	if kind == "while_loop":
		condition = _build_condition(subtrees[0])
		return While(condition=condition, body=[_build_instr(c) for c in subtrees[1:]], loc=loc)
	if kind == "if_cond":
		condition = _build_condition(subtrees[0])
		then_body: List[Instr] = []
		else_body: Optional[List[Instr]] = None
		for child in subtrees[1:]:
			if _name(child) == "else_branch":
				else_body = [_build_instr(c) for c in child.children if isinstance(c, Tree)]
			else:
				then_body.append(_build_instr(child))
		return If(condition=condition, then_body=then_body, else_body=else_body, loc=loc)
	raise ValueError(f"Unsupported instruction node: {kind}")


def _build_condition(tree: Tree) -> Condition:
	op_token = next(c for c in tree.children if isinstance(c, Token))
	type_node = next(c for c in tree.children if isinstance(c, Tree))
	return Condition(op=CmpOp(op_token.value), type=_int_type(type_node), loc=_loc(tree))


def _build_operand(tree: Tree) -> Operand:
	if _name(tree) == "const_ref":
		token = tree.children[0]
		return ConstRef(name=token.value, loc=_loc_from_token(token))
	return _build_literal(tree)


def _build_literal(tree: Tree) -> Literal:
	token = tree.children[0]
	raw = token.value
	if _name(tree) == "signed_lit":
		magnitude = decode_unsigned(raw[1:])
		value = -magnitude if raw[0] == "-" else magnitude
		return Literal(value=value, signed=True, loc=_loc_from_token(token))
	return Literal(value=decode_unsigned(raw), loc=_loc_from_token(token))


def decode_unsigned(raw: str) -> int:
	"""Decode an unsigned numeral (`0x` hex or decimal, `_` separators allowed)."""
	digits = raw.replace("_", "")
	if digits.startswith("0x"):
		return int(digits[2:], 16)
	return int(digits, 10)


def _int_type(tree: Tree) -> IntType:
	return IntType.parse(tree.children[0].value)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return NOWHERE
	return Located(line=meta.line, column=meta.column, offset=meta.start_pos)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column, offset=token.start_pos)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["parse_module", "parse", "build_module", "decode_unsigned"]
