from __future__ import annotations

from typing import List, Optional

from beast.parser import ast

_INDENT = "  "


def format_operand(operand: ast.Operand) -> str:
	if isinstance(operand, ast.ConstRef):
		return operand.name
	if operand.signed:
		return f"{operand.value:+d}"
	return str(operand.value)


def format_condition(cond: ast.Condition) -> str:
	return f"({cond.op.value} {cond.type})"


def format_instr(instr: ast.Instr, depth: int = 1) -> str:
	pad = _INDENT * depth
	if isinstance(instr, ast.Push):
		return f"{pad}(push {instr.type} {format_operand(instr.operand)})"
	if isinstance(instr, ast.Arith):
		return f"{pad}({instr.op.value} {instr.type})"
	if isinstance(instr, ast.Convert):
		return f"{pad}({instr.op.value})"
	if isinstance(instr, ast.Reg):
		return f"{pad}(reg {instr.register})"
	if isinstance(instr, (ast.Load, ast.Store)):
		keyword = "load" if isinstance(instr, ast.Load) else "store"
		suffix = "" if instr.address is None else f" {format_operand(instr.address)}"
		return f"{pad}({keyword} {instr.type}{suffix})"
	if isinstance(instr, ast.Dup):
		return f"{pad}(dup {instr.type})"
	if isinstance(instr, ast.Drop):
		return f"{pad}(drop {instr.type})"
	if isinstance(instr, ast.Call):
		return f"{pad}(call {instr.target})"
	if isinstance(instr, ast.Ret):
		return f"{pad}(ret)"
	if isinstance(instr, ast.Alloc):
		return f"{pad}(alloc {format_operand(instr.size)})"
	if isinstance(instr, ast.Free):
		return f"{pad}(free)"
	if isinstance(instr, ast.Sys):
		return f"{pad}(sys {instr.signal})"
	if isinstance(instr, ast.While):
		return _format_block(f"while {format_condition(instr.condition)}", instr.body, depth)
	if isinstance(instr, ast.If):
		head = f"if {format_condition(instr.condition)}"
		lines = [f"{pad}({head}"]
		lines.extend(format_instr(child, depth + 1) for child in instr.then_body)
		if instr.else_body is not None:
			lines.append(_format_block("else", instr.else_body, depth + 1))
		lines[-1] += ")"
		return "\n".join(lines)
	return f"{pad}<invalid instr>"


def _format_block(head: str, body: List[ast.Instr], depth: int) -> str:
	pad = _INDENT * depth
	lines = [f"{pad}({head}"]
	lines.extend(format_instr(child, depth + 1) for child in body)
	lines[-1] += ")"
	return "\n".join(lines)


def _format_alias(alias: Optional[str]) -> str:
	return f" as {alias}" if alias else ""


def format_field(item: ast.FileField) -> str:
	if isinstance(item, ast.Import):
		origin = _quote(item.origin) if item.quoted else item.origin
		return f"(import {item.name}{_format_alias(item.alias)} from {origin})"
	if isinstance(item, ast.Export):
		return f"(export {item.name}{_format_alias(item.alias)})"
	if isinstance(item, ast.Constant):
		ty = f" {item.type}" if item.type is not None else ""
		return f"(const {item.name}{ty} {format_operand(item.value)})"
	if isinstance(item, ast.Function):
		return _format_block(f"func {item.name}", item.body, 0)
	return "<invalid field>"


def format_module(module: ast.Module) -> str:
	"""Render a Module as canonical Beast source (fields in source order)."""
	fields = module.fields or [*module.imports, *module.constants, *module.functions, *module.exports]
	return "\n".join(format_field(item) for item in fields) + "\n"


def _quote(text: str) -> str:
	out = []
	for ch in text:
		if ch == "\\":
			out.append("\\\\")
		elif ch == '"':
			out.append('\\"')
		elif ch == "\n":
			out.append("\\n")
		elif ch == "\t":
			out.append("\\t")
		elif ch == "\r":
			out.append("\\r")
		elif ord(ch) < 0x20 or ord(ch) > 0x7E:
			out.append(f"\\u{{{ord(ch):x}}}")
		else:
			out.append(ch)
	return '"' + "".join(out) + '"'


__all__ = ["format_module", "format_field", "format_instr", "format_operand", "format_condition"]
