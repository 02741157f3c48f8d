# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module discovery for a Beast project.

Starting from the entry module, locate each module's file under the configured
search paths, parse and validate it, and queue the modules it imports (each
module once, breadth-first). Every module is validated on its own: the loader
does not check imports against the exporting module, that is the linker's job.

Lookup for a dotted module path `a.b.c`:
  <lib>/a/b/c.blib, <lib>/a/b/c.bl        (library modules, opaque here)
  <include>/a/b/c.beast, <include>/a/b/c.bst
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, Dict, List, Optional, Tuple

from beast.checker import CheckedModule, validate
from beast.config import BeastConfig
from beast.core.diagnostics import Diagnostic, ErrorKind, has_errors
from beast.core.span import Span
from beast.parser import ast, parse_beast_source, undecodable_source

logger = logging.getLogger(__name__)

BEAST_SOURCE_FILE_EXTENSIONS = ("beast", "bst")
BEAST_LIB_FILE_EXTENSIONS = ("blib", "bl")
BEAST_ENTRY_POINT_FUNC = "$main"


@dataclass
class LoadedModule:
	name: str
	path: Path
	is_lib: bool = False
	module: Optional[ast.Module] = None
	checked: Optional[CheckedModule] = None


@dataclass
class Workspace:
	entry: str
	modules: Dict[str, LoadedModule] = field(default_factory=dict)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


@dataclass
class _Request:
	name: str
	quoted: bool = False
	importer: Optional[str] = None
	site: Optional[ast.Import] = None


class ModuleLoader:
	def __init__(self, config: BeastConfig, root: Path) -> None:
		self.config = config
		self.root = root
		self.signals = set(config.signals) if config.signals else None

	def _search_dirs(self, dirs: Tuple[str, ...]) -> List[Path]:
		return [self.root / d for d in dirs]

	def discover(self, name: str, quoted: bool = False) -> Optional[Tuple[Path, bool]]:
		"""Return `(path, is_lib)` for module `name`, or None when no file exists."""
		rel = Path(name) if quoted else Path(*name.split("."))
		if rel.name in ("", ".", ".."):
			return None
		compilation = self.config.compilation
		if quoted and compilation.absolute_module_paths:
			lib_dirs = include_dirs = [self.root]
		else:
			lib_dirs = self._search_dirs(compilation.lib_dirs)
			include_dirs = self._search_dirs(compilation.include_dirs)
		for ext in BEAST_LIB_FILE_EXTENSIONS:
			for lib in lib_dirs:
				candidate = lib / rel.with_suffix("." + ext)
				if candidate.is_file():
					return candidate, True
		for ext in BEAST_SOURCE_FILE_EXTENSIONS:
			for include in include_dirs:
				candidate = include / rel.with_suffix("." + ext)
				if candidate.is_file():
					return candidate, False
		return None

	def load(self, entry: Optional[str] = None, require_entry: bool = True) -> Workspace:
		entry = entry or self.config.compilation.entry_module
		workspace = Workspace(entry=entry)
		queue: Deque[_Request] = deque([_Request(name=entry)])
		requested = {entry}

		while queue:
			request = queue.popleft()
			found = self.discover(request.name, request.quoted)
			if found is None:
				loc = request.site.loc if request.site is not None else None
				workspace.diagnostics.append(
					Diagnostic(
						message=f"unable to find module '{request.name}'",
						kind=ErrorKind.NAME,
						code="ModuleNotFound",
						phase="loader",
						span=Span.from_loc(loc, file=request.importer),
					)
				)
				continue
			path, is_lib = found
			if is_lib:
				logger.debug("module %s resolved to library %s", request.name, path)
				workspace.modules[request.name] = LoadedModule(name=request.name, path=path, is_lib=True)
				continue

			logger.debug("compiling module %s from %s", request.name, path)
			loaded = self._load_source(request.name, path, workspace)
			workspace.modules[request.name] = loaded
			if loaded.module is None:
				continue
			if require_entry and request.name == entry:
				self._check_entry_point(loaded, workspace)
			for imp in loaded.module.imports:
				if imp.origin in requested:
					continue
				requested.add(imp.origin)
				logger.debug("module %s imports %s", request.name, imp.origin)
				queue.append(_Request(name=imp.origin, quoted=imp.quoted, importer=str(path), site=imp))

		logger.debug("loaded %d module(s), %d diagnostic(s)", len(workspace.modules), len(workspace.diagnostics))
		return workspace

	def _load_source(self, name: str, path: Path, workspace: Workspace) -> LoadedModule:
		try:
			source = path.read_text(encoding="utf-8")
		except UnicodeDecodeError as err:
			workspace.diagnostics.append(undecodable_source(err).diagnostic.with_file(str(path)))
			return LoadedModule(name=name, path=path)
		except OSError as err:
			workspace.diagnostics.append(
				Diagnostic(
					message=f"cannot read module '{name}': {err.strerror}",
					code="ModuleUnreadable",
					phase="loader",
					span=Span(file=str(path)),
				)
			)
			return LoadedModule(name=name, path=path)
		module, parse_diags = parse_beast_source(source, path=str(path))
		if module is None:
			workspace.diagnostics.extend(parse_diags)
			return LoadedModule(name=name, path=path)
		result = validate(module, signals=self.signals)
		workspace.diagnostics.extend(d.with_file(str(path)) for d in result.diagnostics)
		return LoadedModule(name=name, path=path, module=module, checked=result.checked)

	def _check_entry_point(self, loaded: LoadedModule, workspace: Workspace) -> None:
		if any(fn.name == BEAST_ENTRY_POINT_FUNC for fn in loaded.module.functions):
			return
		workspace.diagnostics.append(
			Diagnostic(
				message=f"entry module '{loaded.name}' does not define {BEAST_ENTRY_POINT_FUNC}",
				kind=ErrorKind.NAME,
				code="MissingEntryPoint",
				phase="loader",
				span=Span(file=str(loaded.path), line=1, column=1, offset=0),
			)
		)


__all__ = [
	"BEAST_ENTRY_POINT_FUNC",
	"LoadedModule",
	"ModuleLoader",
	"Workspace",
]
