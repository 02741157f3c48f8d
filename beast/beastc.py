# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
beastc: command line front end.

Two modes:

  beastc FILE...             scan, parse and validate each file independently
  beastc --project DIR       load DIR/Beast.toml and compile the configured
                             entry module together with everything it imports

Diagnostics go to stderr as `file:line:col: severity: [Kind::code] message`, or
to stdout as a single JSON object with `--json`. Exit status is 0 when no
errors were found, 1 when any diagnostic is an error and 2 for configuration or
usage problems.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from beast.config import CONFIG_FILE_NAME, ConfigError, load_config
from beast.core.diagnostics import Diagnostic, has_errors
from beast.frontend import check_source
from beast.loader import ModuleLoader
from beast.parser import undecodable_source
from beast.printer import format_module

logger = logging.getLogger(__name__)


def _emit(diagnostics: List[Diagnostic], as_json: bool) -> int:
	exit_code = 1 if has_errors(diagnostics) else 0
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json() for d in diagnostics],
		}
		print(json.dumps(payload))
	else:
		for d in diagnostics:
			print(d.render(), file=sys.stderr)
	return exit_code


def _check_files(paths: List[Path], args: argparse.Namespace) -> int:
	diagnostics: List[Diagnostic] = []
	for path in paths:
		try:
			source = path.read_text(encoding="utf-8")
		except UnicodeDecodeError as err:
			diagnostics.append(undecodable_source(err).diagnostic.with_file(str(path)))
			continue
		except OSError as err:
			print(f"{path}: error: cannot read file: {err.strerror}", file=sys.stderr)
			return 2
		logger.debug("checking %s", path)
		result = check_source(source, path=str(path))
		diagnostics.extend(result.diagnostics)
		if args.print and result.ok and not args.json:
			sys.stdout.write(format_module(result.checked.module))
	return _emit(diagnostics, args.json)


def _check_project(root: Path, args: argparse.Namespace) -> int:
	try:
		config = load_config(root / CONFIG_FILE_NAME)
	except ConfigError as err:
		print(f"error: {err}", file=sys.stderr)
		return 2
	logger.debug("project %s targets %s (system %s)", root, config.program.target, config.program.system_id)
	workspace = ModuleLoader(config, root).load()
	if args.print and workspace.ok and not args.json:
		for loaded in workspace.modules.values():
			if loaded.module is not None:
				sys.stdout.write(format_module(loaded.module))
	return _emit(workspace.diagnostics, args.json)


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="beastc", description="Beast front end: parse and validate Beast modules")
	parser.add_argument("source", type=Path, nargs="*", help="Path(s) to Beast source file(s)")
	parser.add_argument("--project", type=Path, help=f"Compile the project rooted at DIR (reads DIR/{CONFIG_FILE_NAME})")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/kind/code/message/severity/file/line/column)",
	)
	parser.add_argument("--print", action="store_true", help="Print the canonical form of each valid module")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")

	if args.project is not None and args.source:
		print("error: --project cannot be combined with source files", file=sys.stderr)
		return 2
	if args.project is not None:
		return _check_project(args.project, args)
	if not args.source:
		print("error: no input files", file=sys.stderr)
		return 2
	return _check_files(args.source, args)


if __name__ == "__main__":
	sys.exit(main())
