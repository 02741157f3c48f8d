# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Semantic validator for one Beast module.

Passes, in order:

  1. namespaces: constants, functions + import bindings, exports; duplicates
  2. references: constant operands, call targets, export targets, register
     and (optionally) signal atoms
  3. literal ranges: constants, push literals, address/size operands
  4. stack effects: one StackSimulator walk per function

Name and range problems are all collected; the stack walk of a function stops
at its first violation but every function is walked. Diagnostics are reported
in source order; two problems at the same position keep pass order. All state
lives in the Validator instance for the duration of one `validate` call, so
independent modules can be validated concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from beast.core.diagnostics import Diagnostic, ErrorKind, has_errors
from beast.core.span import Span
from beast.core.types import ADDRESS_TYPE, REGISTERS, IntType, untyped_fits
from beast.parser import ast
from beast.parser.ast import walk_instructions
from .stack import StackEffectError, StackShape, StackSimulator


def _name_diag(message: str, code: str, loc: ast.Located, notes: Optional[List[str]] = None) -> Diagnostic:
	return Diagnostic(
		message=message,
		kind=ErrorKind.NAME,
		code=code,
		phase="validator",
		span=Span.from_loc(loc),
		notes=notes or [],
	)


def _type_diag(message: str, code: str, loc: ast.Located) -> Diagnostic:
	return Diagnostic(message=message, kind=ErrorKind.TYPE, code=code, phase="validator", span=Span.from_loc(loc))


@dataclass(frozen=True)
class FunctionSymbol:
	"""A name callable from this module: a local function or an import binding."""

	name: str
	node: Union[ast.Function, ast.Import]

	@property
	def imported(self) -> bool:
		return isinstance(self.node, ast.Import)


@dataclass(frozen=True)
class CheckedModule:
	"""A module that produced zero error diagnostics, with its resolved tables."""

	module: ast.Module
	constants: Dict[str, ast.Constant]
	functions: Dict[str, FunctionSymbol]
	# public export name -> function binding it refers to
	exports: Dict[str, str]
	# function name -> stack shapes observed at each `ret`
	exit_stacks: Dict[str, Tuple[StackShape, ...]]

	@property
	def imports(self) -> List[ast.Import]:
		"""Unresolved import names, for an external linker."""
		return list(self.module.imports)


@dataclass
class CheckResult:
	diagnostics: List[Diagnostic] = field(default_factory=list)
	checked: Optional[CheckedModule] = None

	@property
	def ok(self) -> bool:
		return self.checked is not None


class Validator:
	"""
	Validate a parsed Module.

	`signals`, when given, is the set of signal names (without the leading
	colon) that `sys` may use; otherwise `sys` atoms are not checked.
	"""

	def __init__(self, signals: Optional[Iterable[str]] = None) -> None:
		self.signals = frozenset(signals) if signals is not None else None
		self.constants: Dict[str, ast.Constant] = {}
		self.functions: Dict[str, FunctionSymbol] = {}
		self.exports: Dict[str, str] = {}
		self.diagnostics: List[Diagnostic] = []

	def validate(self, module: ast.Module) -> CheckResult:
		self.constants = {}
		self.functions = {}
		self.exports = {}
		self.diagnostics = []

		self._build_namespaces(module)
		self._resolve_references(module)
		self._check_literal_ranges(module)
		exit_stacks = self._check_stack_effects(module)
		self.diagnostics.sort(key=_source_position)

		if has_errors(self.diagnostics):
			return CheckResult(diagnostics=list(self.diagnostics))
		checked = CheckedModule(
			module=module,
			constants=dict(self.constants),
			functions=dict(self.functions),
			exports=dict(self.exports),
			exit_stacks=exit_stacks,
		)
		return CheckResult(diagnostics=list(self.diagnostics), checked=checked)

	# 1. namespaces

	def _build_namespaces(self, module: ast.Module) -> None:
		for const in module.constants:
			prev = self.constants.get(const.name)
			if prev is not None:
				self._duplicate("constant", const.name, const.loc, prev.loc)
				continue
			self.constants[const.name] = const

		# Imports and functions share one namespace; walk fields in source order
		# so the later declaration is the one reported.
		for item in module.fields or [*module.imports, *module.functions]:
			if isinstance(item, ast.Import):
				name, what = item.binding, "import binding"
			elif isinstance(item, ast.Function):
				name, what = item.name, "function"
			else:
				continue
			prev_sym = self.functions.get(name)
			if prev_sym is not None:
				self._duplicate(what, name, item.loc, prev_sym.node.loc)
				continue
			self.functions[name] = FunctionSymbol(name=name, node=item)

		exported_ids: Dict[str, ast.Export] = {}
		public: Dict[str, ast.Export] = {}
		for export in module.exports:
			if export.name in exported_ids:
				self._duplicate("export of", export.name, export.loc, exported_ids[export.name].loc)
				continue
			if export.public_name in public:
				self._duplicate("exported name", export.public_name, export.loc, public[export.public_name].loc)
				continue
			exported_ids[export.name] = export
			public[export.public_name] = export
			self.exports[export.public_name] = export.name

	def _duplicate(self, what: str, name: str, loc: ast.Located, prev: ast.Located) -> None:
		self.diagnostics.append(
			_name_diag(
				f"duplicate {what} '{name}'",
				"Duplicate",
				loc,
				notes=[f"previous definition of '{name}' is at {prev.line}:{prev.column}"],
			)
		)

	# 2. references

	def _resolve_references(self, module: ast.Module) -> None:
		for fn in module.functions:
			for instr in walk_instructions(fn.body):
				for ref in _const_refs(instr):
					if ref.name not in self.constants:
						self.diagnostics.append(
							_name_diag(f"undefined constant '{ref.name}'", "Undefined", instr.loc)
						)
				if isinstance(instr, ast.Call) and instr.target not in self.functions:
					self.diagnostics.append(
						_name_diag(f"undefined function '{instr.target}' in call", "Undefined", instr.loc)
					)
				elif isinstance(instr, ast.Reg) and instr.register not in REGISTERS:
					known = ", ".join(sorted(REGISTERS))
					self.diagnostics.append(
						_name_diag(
							f"unrecognized register identifier '{instr.register}' (expected one of {known})",
							"UnknownRegister",
							instr.loc,
						)
					)
				elif isinstance(instr, ast.Sys) and self.signals is not None and instr.signal[1:] not in self.signals:
					self.diagnostics.append(
						_name_diag(f"unknown signal '{instr.signal}'", "UnknownSignal", instr.loc)
					)
		for export in module.exports:
			if export.name not in self.functions:
				self.diagnostics.append(
					_name_diag(f"undefined function '{export.name}' in export", "Undefined", export.loc)
				)

	# 3. literal ranges

	def _check_literal_ranges(self, module: ast.Module) -> None:
		for const in module.constants:
			if const.type is None:
				if not untyped_fits(const.value.value):
					self.diagnostics.append(
						_type_diag(
							f"literal {_literal_text(const.value)} of constant '{const.name}' does not fit any integer type",
							"LiteralOutOfRange",
							const.loc,
						)
					)
				continue
			problem = _range_problem(const.value, const.type)
			if problem:
				self.diagnostics.append(
					_type_diag(f"{problem} in constant '{const.name}'", "LiteralOutOfRange", const.loc)
				)

		for fn in module.functions:
			for instr in walk_instructions(fn.body):
				if isinstance(instr, ast.Push):
					self._check_operand(instr.operand, instr.type, instr)
				elif isinstance(instr, (ast.Load, ast.Store)) and instr.address is not None:
					self._check_operand(instr.address, ADDRESS_TYPE, instr, role="address")
				elif isinstance(instr, ast.Alloc):
					self._check_operand(instr.size, ADDRESS_TYPE, instr, role="size")

	def _check_operand(self, operand: ast.Operand, ty: IntType, instr: ast.Instr, role: str = "operand") -> None:
		what = ast.mnemonic(instr)
		if isinstance(operand, ast.Literal):
			problem = _range_problem(operand, ty)
			if problem:
				self.diagnostics.append(_type_diag(f"{problem} ({role} of '{what}')", "LiteralOutOfRange", instr.loc))
			return
		const = self.constants.get(operand.name)
		if const is None:
			# Already reported as undefined.
			return
		if const.type is not None and const.type is not ty:
			self.diagnostics.append(
				_type_diag(
					f"constant '{const.name}' has type {const.type} but '{what}' needs a {ty} {role}",
					"OperandTypeMismatch",
					instr.loc,
				)
			)
			return
		if const.type is None:
			problem = _range_problem(const.value, ty)
			if problem:
				self.diagnostics.append(
					_type_diag(f"{problem} (constant '{const.name}' used as {role} of '{what}')", "LiteralOutOfRange", instr.loc)
				)

	# 4. stack effects

	def _check_stack_effects(self, module: ast.Module) -> Dict[str, Tuple[StackShape, ...]]:
		simulator = StackSimulator()
		exit_stacks: Dict[str, Tuple[StackShape, ...]] = {}
		for fn in module.functions:
			try:
				exits = simulator.run(fn)
			except StackEffectError as err:
				self.diagnostics.append(err.diagnostic)
				continue
			exit_stacks.setdefault(fn.name, exits)
		return exit_stacks


def _source_position(diag: Diagnostic) -> int:
	return diag.span.offset if diag.span.offset is not None else -1


def _const_refs(instr: ast.Instr) -> Iterator[ast.ConstRef]:
	if isinstance(instr, ast.Push):
		operand = instr.operand
	elif isinstance(instr, (ast.Load, ast.Store)):
		operand = instr.address
	elif isinstance(instr, ast.Alloc):
		operand = instr.size
	else:
		return
	if isinstance(operand, ast.ConstRef):
		yield operand


def _literal_text(literal: ast.Literal) -> str:
	return f"{literal.value:+d}" if literal.signed else str(literal.value)


def _range_problem(literal: ast.Literal, ty: IntType) -> Optional[str]:
	if literal.signed and not ty.signed:
		return f"signed literal {_literal_text(literal)} on unsigned type {ty}"
	if not ty.fits(literal.value):
		return f"literal {_literal_text(literal)} out of range for {ty} ({ty.min_value}..{ty.max_value})"
	return None


def validate(module: ast.Module, signals: Optional[Iterable[str]] = None) -> CheckResult:
	"""Validate `module`; `result.checked` is set only when no errors were found."""
	return Validator(signals=signals).validate(module)


__all__ = ["Validator", "validate", "CheckResult", "CheckedModule", "FunctionSymbol"]
