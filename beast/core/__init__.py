"""
beast.core: shared types/diagnostics used across the front end.

Modules:
  - diagnostics: Diagnostic + ErrorKind taxonomy
  - span: source positions
  - types: the four integer types and conversion/register tables
"""

__all__ = [
	"diagnostics",
	"span",
	"types",
]
