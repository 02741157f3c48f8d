# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Project configuration (`Beast.toml`).

  [program]       target VM library version, system id, optional memory pages
  [compilation]   entry module and module search paths
  [signals]       name -> u16 signal id, the atom table for `sys`

All tables except `[program]` are optional.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from beast.core.types import IntType

CONFIG_FILE_NAME = "Beast.toml"
BEAST_DEFAULT_LIB_PATH = "lib"
BEAST_DEFAULT_INCLUDE_PATH = "src"
BEAST_DEFAULT_ENTRY_POINT_MODULE = "main"


class ConfigError(ValueError):
	"""Invalid or unreadable Beast.toml."""


@dataclass(frozen=True)
class ProgramConfig:
	target: str
	system_id: str
	mem_pages: Optional[int] = None


@dataclass(frozen=True)
class CompilationConfig:
	entry_point: Optional[str] = None
	absolute_module_paths: Optional[bool] = None
	lib: Optional[Tuple[str, ...]] = None
	include: Optional[Tuple[str, ...]] = None

	@property
	def entry_module(self) -> str:
		return self.entry_point or BEAST_DEFAULT_ENTRY_POINT_MODULE

	@property
	def lib_dirs(self) -> Tuple[str, ...]:
		return self.lib if self.lib is not None else (BEAST_DEFAULT_LIB_PATH,)

	@property
	def include_dirs(self) -> Tuple[str, ...]:
		return self.include if self.include is not None else (BEAST_DEFAULT_INCLUDE_PATH,)


@dataclass(frozen=True)
class BeastConfig:
	program: ProgramConfig
	compilation: CompilationConfig = field(default_factory=CompilationConfig)
	signals: Mapping[str, int] = field(default_factory=dict)


def load_config(path: Path) -> BeastConfig:
	try:
		text = path.read_text()
	except OSError as err:
		raise ConfigError(f"{path}: cannot read configuration: {err.strerror}") from err
	return parse_config(text, source=str(path))


def parse_config(text: str, source: str = "<string>") -> BeastConfig:
	try:
		raw = tomllib.loads(text)
	except tomllib.TOMLDecodeError as err:
		raise ConfigError(f"{source}: {err}") from err

	program_raw = _table(raw, "program", source, required=True)
	program = ProgramConfig(
		target=_string(program_raw, "target", source, required=True),
		system_id=_string(program_raw, "system_id", source, required=True),
		mem_pages=_integer(program_raw, "mem_pages", source, IntType.U8),
	)

	comp_raw = _table(raw, "compilation", source)
	compilation = CompilationConfig(
		entry_point=_string(comp_raw, "entry_point", source),
		absolute_module_paths=_boolean(comp_raw, "absolute_module_paths", source),
		lib=_string_list(comp_raw, "lib", source),
		include=_string_list(comp_raw, "include", source),
	)

	signals_raw = _table(raw, "signals", source)
	signals: Dict[str, int] = {}
	for name in signals_raw:
		signals[name] = _integer(signals_raw, name, source, IntType.U16, table_name="signals")

	return BeastConfig(program=program, compilation=compilation, signals=signals)


def _table(raw: Mapping[str, Any], key: str, source: str, required: bool = False) -> Mapping[str, Any]:
	value = raw.get(key)
	if value is None:
		if required:
			raise ConfigError(f"{source}: missing [{key}] table")
		return {}
	if not isinstance(value, dict):
		raise ConfigError(f"{source}: '{key}' must be a table")
	return value


def _string(table: Mapping[str, Any], key: str, source: str, required: bool = False) -> Optional[str]:
	value = table.get(key)
	if value is None:
		if required:
			raise ConfigError(f"{source}: missing required key '{key}'")
		return None
	if not isinstance(value, str):
		raise ConfigError(f"{source}: '{key}' must be a string")
	return value


def _boolean(table: Mapping[str, Any], key: str, source: str) -> Optional[bool]:
	value = table.get(key)
	if value is not None and not isinstance(value, bool):
		raise ConfigError(f"{source}: '{key}' must be a boolean")
	return value


def _string_list(table: Mapping[str, Any], key: str, source: str) -> Optional[Tuple[str, ...]]:
	value = table.get(key)
	if value is None:
		return None
	if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
		raise ConfigError(f"{source}: '{key}' must be a list of strings")
	return tuple(value)


def _integer(table: Mapping[str, Any], key: str, source: str, ty: IntType, table_name: str = "") -> Optional[int]:
	value = table.get(key)
	if value is None:
		return None
	where = f"{table_name}.{key}" if table_name else key
	# TOML booleans are Python ints.
	if isinstance(value, bool) or not isinstance(value, int):
		raise ConfigError(f"{source}: '{where}' must be an integer")
	if not ty.fits(value):
		raise ConfigError(f"{source}: '{where}' = {value} out of range for {ty}")
	return value


__all__ = [
	"BeastConfig",
	"CompilationConfig",
	"ConfigError",
	"ProgramConfig",
	"CONFIG_FILE_NAME",
	"load_config",
	"parse_config",
]
