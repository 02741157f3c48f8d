"""
End-to-end front end for one module: text -> validated module or diagnostics.
"""

from __future__ import annotations

from typing import Iterable, Optional

from beast.checker import CheckResult, validate
from beast.parser import parse_beast_source


def check_source(source: str, path: Optional[str] = None, signals: Optional[Iterable[str]] = None) -> CheckResult:
	"""
	Scan, parse and validate `source`.

	A lexical or syntax error yields a result with exactly that diagnostic;
	otherwise the validator's aggregated diagnostics are returned. Diagnostics
	are stamped with `path` when given.
	"""
	module, parse_diags = parse_beast_source(source, path=path)
	if module is None:
		return CheckResult(diagnostics=parse_diags)
	result = validate(module, signals=signals)
	result.diagnostics = [d.with_file(path) for d in result.diagnostics]
	return result


__all__ = ["check_source"]
