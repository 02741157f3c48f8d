# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stack-effect simulation over the abstract operand stack.

Walks a function body keeping the type shape of the VM value stack. Each
instruction pops/pushes types according to its contract; structured blocks
are simulated as nested walks:

  - a `while` body starts from the loop-entry shape and must end in exactly
    that shape (the body runs any number of times);
  - an `if` leaves the shape produced by its branches, which must agree (a
    missing `else` behaves like an empty one);
  - a condition `(op T)` inspects the `T` operand on top of the stack without
    consuming it.

`ret` records the current shape but does not constrain it; the walk carries
on. `call`, `alloc`, `free` and `sys` have no checked stack effect because the
grammar carries no signatures for them.

The walk of one function stops at its first violation (StackEffectError).
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from beast.core.diagnostics import Diagnostic, ErrorKind
from beast.core.span import Span
from beast.core.types import ADDRESS_TYPE, CONVERSIONS, REGISTERS, IntType
from beast.parser import ast
from beast.parser.ast import mnemonic

StackShape = Tuple[IntType, ...]


class StackEffectError(Exception):
	"""First stack-effect violation found in a function."""

	def __init__(self, message: str, *, code: str, loc: ast.Located) -> None:
		super().__init__(message)
		self.code = code
		self.loc = loc

	@property
	def diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=str(self),
			kind=ErrorKind.TYPE,
			code=self.code,
			phase="validator",
			span=Span.from_loc(self.loc),
		)


def format_shape(stack: Sequence[IntType]) -> str:
	return "[" + ", ".join(str(t) for t in stack) + "]"


class StackSimulator:
	"""
	Simulate one function at a time.

	Entry point:
	  run(fn) -> tuple of stack shapes observed at each `ret`
	"""

	def __init__(self) -> None:
		self._exits: List[StackShape] = []

	def run(self, fn: ast.Function) -> Tuple[StackShape, ...]:
		self._exits = []
		self._walk(fn.body, [])
		return tuple(self._exits)

	def _walk(self, body: Sequence[ast.Instr], stack: List[IntType]) -> List[IntType]:
		for instr in body:
			self._step(instr, stack)
		return stack

	def _step(self, instr: ast.Instr, stack: List[IntType]) -> None:
		if isinstance(instr, ast.Push):
			stack.append(instr.type)
		elif isinstance(instr, ast.Arith):
			for _ in range(instr.op.arity):
				self._pop(stack, instr.type, instr)
			stack.append(instr.type)
		elif isinstance(instr, ast.Convert):
			source, dest = CONVERSIONS[instr.op.value]
			self._pop(stack, source, instr)
			stack.append(dest)
		elif isinstance(instr, ast.Reg):
			stack.append(REGISTERS.get(instr.register, ADDRESS_TYPE))
		elif isinstance(instr, ast.Load):
			if instr.indirect:
				self._pop(stack, ADDRESS_TYPE, instr)
			stack.append(instr.type)
		elif isinstance(instr, ast.Store):
			# Value on top, address (indirect only) beneath it.
			self._pop(stack, instr.type, instr)
			if instr.indirect:
				self._pop(stack, ADDRESS_TYPE, instr)
		elif isinstance(instr, ast.Dup):
			self._expect_top(stack, instr.type, instr, what=f"'{mnemonic(instr)}'")
			stack.append(instr.type)
		elif isinstance(instr, ast.Drop):
			self._pop(stack, instr.type, instr)
		elif isinstance(instr, ast.Ret):
			self._exits.append(tuple(stack))
		elif isinstance(instr, (ast.Call, ast.Alloc, ast.Free, ast.Sys)):
			pass
		elif isinstance(instr, ast.While):
			self._check_condition(instr.condition, stack, instr, "while")
			entry = list(stack)
			after = self._walk(instr.body, list(stack))
			if after != entry:
				raise StackEffectError(
					f"unbalanced loop stack: 'while' body changes the stack from {format_shape(entry)} to {format_shape(after)}",
					code="UnbalancedLoopStack",
					loc=instr.loc,
				)
		elif isinstance(instr, ast.If):
			self._check_condition(instr.condition, stack, instr, "if")
			then_stack = self._walk(instr.then_body, list(stack))
			if instr.else_body is not None:
				else_stack = self._walk(instr.else_body, list(stack))
				other = "'else' branch"
			else:
				else_stack = list(stack)
				other = "fall-through path"
			if then_stack != else_stack:
				raise StackEffectError(
					f"branch stack mismatch: 'if' branch leaves {format_shape(then_stack)} but the {other} leaves {format_shape(else_stack)}",
					code="BranchStackMismatch",
					loc=instr.loc,
				)
			stack[:] = then_stack
		else:
			raise TypeError(f"unsupported instruction node: {type(instr).__name__}")

	def _check_condition(self, cond: ast.Condition, stack: List[IntType], instr: ast.Instr, keyword: str) -> None:
		self._expect_top(stack, cond.type, instr, what=f"'{keyword}' condition '({cond.op.value} {cond.type})'")

	def _expect_top(self, stack: List[IntType], expected: IntType, instr: ast.Instr, *, what: str) -> None:
		if not stack:
			raise StackEffectError(
				f"stack underflow: {what} needs an operand of type {expected} but the stack is empty",
				code="StackUnderflow",
				loc=instr.loc,
			)
		if stack[-1] is not expected:
			raise StackEffectError(
				f"operand type mismatch: {what} expects {expected} on top of the stack, found {stack[-1]}",
				code="OperandTypeMismatch",
				loc=instr.loc,
			)

	def _pop(self, stack: List[IntType], expected: IntType, instr: ast.Instr) -> IntType:
		self._expect_top(stack, expected, instr, what=f"'{mnemonic(instr)}'")
		return stack.pop()


__all__ = ["StackSimulator", "StackEffectError", "StackShape", "format_shape"]
