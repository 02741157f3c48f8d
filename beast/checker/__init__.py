"""
Semantic validator for Beast modules.

Resolves every identifier reference against per-module symbol tables, checks
literal ranges, and proves each function body stack- and type-correct by
simulating the abstract operand stack (see `stack.py`).
"""

from .stack import StackEffectError, StackSimulator, format_shape
from .validator import CheckResult, CheckedModule, FunctionSymbol, Validator, validate

__all__ = [
	"CheckResult",
	"CheckedModule",
	"FunctionSymbol",
	"StackEffectError",
	"StackSimulator",
	"Validator",
	"format_shape",
	"validate",
]
