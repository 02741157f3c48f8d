from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Union

from beast.core.types import IntType


@dataclass(frozen=True)
class Located:
	line: int
	column: int
	offset: int = 0


NOWHERE = Located(line=1, column=1, offset=0)


def _loc_field():
	# Positions never take part in structural equality.
	return field(default=NOWHERE, compare=False, repr=False)


class ArithOp(Enum):
	ADD = "add"
	SUB = "sub"
	MUL = "mul"
	DIV = "div"
	SHR = "shr"
	SHL = "shl"
	AND = "and"
	OR = "or"
	XOR = "xor"
	NOT = "not"
	NEG = "neg"
	INC = "inc"
	DEC = "dec"

	@property
	def arity(self) -> int:
		return 1 if self in UNARY_OPS else 2


UNARY_OPS = frozenset({ArithOp.NOT, ArithOp.NEG, ArithOp.INC, ArithOp.DEC})


class ConvertOp(Enum):
	U8_PROMOTE = "u8_promote"
	U16_DEMOTE = "u16_demote"
	I8_PROMOTE = "i8_promote"
	I16_DEMOTE = "i16_demote"


class CmpOp(Enum):
	LT = "<"
	LE = "<="
	GT = ">"
	GE = ">="
	EQ = "=="
	NE = "!="


@dataclass
class Literal:
	value: int
	# True when the source spelled an explicit `+`/`-` sign.
	signed: bool = False
	loc: Located = _loc_field()


@dataclass
class ConstRef:
	name: str
	loc: Located = _loc_field()


Operand = Union[Literal, ConstRef]


@dataclass
class Condition:
	op: CmpOp
	type: IntType
	loc: Located = _loc_field()


class Instr:
	loc: Located


@dataclass
class Push(Instr):
	type: IntType
	operand: Operand
	loc: Located = _loc_field()


@dataclass
class Arith(Instr):
	op: ArithOp
	type: IntType
	loc: Located = _loc_field()


@dataclass
class Convert(Instr):
	op: ConvertOp
	loc: Located = _loc_field()


@dataclass
class Reg(Instr):
	register: str
	loc: Located = _loc_field()


@dataclass
class Load(Instr):
	type: IntType
	# None selects indirect addressing (address popped from the stack).
	address: Optional[Operand] = None
	loc: Located = _loc_field()

	@property
	def indirect(self) -> bool:
		return self.address is None


@dataclass
class Store(Instr):
	type: IntType
	address: Optional[Operand] = None
	loc: Located = _loc_field()

	@property
	def indirect(self) -> bool:
		return self.address is None


@dataclass
class Dup(Instr):
	type: IntType
	loc: Located = _loc_field()


@dataclass
class Drop(Instr):
	type: IntType
	loc: Located = _loc_field()


@dataclass
class Call(Instr):
	target: str
	loc: Located = _loc_field()


@dataclass
class Ret(Instr):
	loc: Located = _loc_field()


@dataclass
class Alloc(Instr):
	size: Operand
	loc: Located = _loc_field()


@dataclass
class Free(Instr):
	loc: Located = _loc_field()


@dataclass
class Sys(Instr):
	signal: str
	loc: Located = _loc_field()


@dataclass
class While(Instr):
	condition: Condition
	body: List[Instr]
	loc: Located = _loc_field()


@dataclass
class If(Instr):
	condition: Condition
	then_body: List[Instr]
	else_body: Optional[List[Instr]] = None
	loc: Located = _loc_field()


@dataclass
class Import:
	name: str
	alias: Optional[str]
	origin: str
	# True when the origin was written as a quoted string rather than a dotted path.
	quoted: bool = False
	loc: Located = _loc_field()

	@property
	def binding(self) -> str:
		return self.alias or self.name


@dataclass
class Export:
	name: str
	alias: Optional[str] = None
	loc: Located = _loc_field()

	@property
	def public_name(self) -> str:
		return self.alias or self.name


@dataclass
class Constant:
	name: str
	type: Optional[IntType]
	value: Literal
	loc: Located = _loc_field()


@dataclass
class Function:
	name: str
	body: List[Instr]
	loc: Located = _loc_field()


FileField = Union[Import, Export, Constant, Function]


@dataclass
class Module:
	imports: List[Import] = field(default_factory=list)
	constants: List[Constant] = field(default_factory=list)
	functions: List[Function] = field(default_factory=list)
	exports: List[Export] = field(default_factory=list)
	# All file fields in source order (diagnostics and printing follow it).
	fields: List[FileField] = field(default_factory=list, compare=False, repr=False)
	path: Optional[str] = field(default=None, compare=False)


def walk_instructions(body: Sequence[Instr]) -> Iterator[Instr]:
	"""Yield every instruction of `body` in source order, descending into blocks."""
	for instr in body:
		yield instr
		if isinstance(instr, While):
			yield from walk_instructions(instr.body)
		elif isinstance(instr, If):
			yield from walk_instructions(instr.then_body)
			if instr.else_body is not None:
				yield from walk_instructions(instr.else_body)


def mnemonic(instr: Instr) -> str:
	"""Short instruction name used in diagnostics (`add u8`, `load u16`, ...)."""
	if isinstance(instr, Arith):
		return f"{instr.op.value} {instr.type}"
	if isinstance(instr, Convert):
		return instr.op.value
	if isinstance(instr, (Push, Load, Store, Dup, Drop)):
		return f"{type(instr).__name__.lower()} {instr.type}"
	return type(instr).__name__.lower()
