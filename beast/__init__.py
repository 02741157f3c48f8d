# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Beast front end: scanner, parser, validator and pretty-printer for the Beast
VM assembly language, plus the project configuration, module loader and
`beastc` driver built on top of them.
"""

from beast.checker import CheckResult, validate
from beast.frontend import check_source
from beast.parser import parse_beast_source, parse_module
from beast.printer import format_module

__all__ = [
	"CheckResult",
	"check_source",
	"format_module",
	"parse_beast_source",
	"parse_module",
	"validate",
]
