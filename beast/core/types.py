# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Integer type core shared by the parser, validator and printer.

Beast has exactly four primitive types, all fixed-width integers. The
conversion instructions only move between adjacent widths of the same
signedness; there is no implicit signed/unsigned conversion.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class IntType(Enum):
	"""Fixed-width integer kinds understood by the VM."""

	U8 = "u8"
	U16 = "u16"
	I8 = "i8"
	I16 = "i16"

	@property
	def bits(self) -> int:
		return 8 if self in (IntType.U8, IntType.I8) else 16

	@property
	def signed(self) -> bool:
		return self in (IntType.I8, IntType.I16)

	@property
	def min_value(self) -> int:
		return -(1 << (self.bits - 1)) if self.signed else 0

	@property
	def max_value(self) -> int:
		return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

	def fits(self, value: int) -> bool:
		return self.min_value <= value <= self.max_value

	@classmethod
	def parse(cls, name: str) -> "IntType":
		return cls(name)

	def __str__(self) -> str:
		return self.value


# Addresses and allocation sizes are VM words.
ADDRESS_TYPE = IntType.U16

# conversion instruction -> (source type, destination type)
CONVERSIONS: Dict[str, Tuple[IntType, IntType]] = {
	"u8_promote": (IntType.U8, IntType.U16),
	"u16_demote": (IntType.U16, IntType.U8),
	"i8_promote": (IntType.I8, IntType.I16),
	"i16_demote": (IntType.I16, IntType.I8),
}

# Register atoms accepted by `reg`; registers hold addresses.
REGISTERS: Dict[str, IntType] = {
	":sp": ADDRESS_TYPE,
	":bp": ADDRESS_TYPE,
}


def untyped_fits(value: int) -> bool:
	"""An untyped constant must fit at least one Beast integer type."""
	return IntType.I16.min_value <= value <= IntType.U16.max_value


__all__ = ["IntType", "ADDRESS_TYPE", "CONVERSIONS", "REGISTERS", "untyped_fits"]
