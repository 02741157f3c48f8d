# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path

from beast.config import load_config, parse_config
from beast.loader import ModuleLoader

MAIN = "(import $print from std.io)\n(func $main (call $print) (ret))\n"
IO = "(func $print (ret))\n(export $print)\n"


def _load(root: Path, **kwargs):
	return ModuleLoader(load_config(root / "Beast.toml"), root).load(**kwargs)


def test_follows_imports(project):
	root = project({"src/main.beast": MAIN, "src/std/io.beast": IO})
	workspace = _load(root)
	assert workspace.ok
	assert workspace.diagnostics == []
	assert set(workspace.modules) == {"main", "std.io"}
	io = workspace.modules["std.io"]
	assert io.path == root / "src" / "std" / "io.beast"
	assert io.checked.exports == {"$print": "$print"}


def test_short_source_extension(project):
	root = project({"src/main.bst": MAIN, "src/std/io.bst": IO})
	workspace = _load(root)
	assert workspace.ok
	assert workspace.modules["std.io"].path.suffix == ".bst"


def test_library_modules_win(project):
	root = project({"src/main.beast": MAIN, "src/std/io.beast": IO, "lib/std/io.blib": ""})
	workspace = _load(root)
	assert workspace.ok
	io = workspace.modules["std.io"]
	assert io.is_lib
	assert io.module is None
	assert io.path.name == "io.blib"


def test_missing_module_is_pinned_to_import(project):
	root = project({"src/main.beast": "(func $main (ret))\n(import $x from nope.mod)\n"})
	workspace = _load(root)
	assert not workspace.ok
	(diag,) = workspace.diagnostics
	assert diag.label == "NameError::ModuleNotFound"
	assert "nope.mod" in diag.message
	assert diag.span.file == str(root / "src" / "main.beast")
	assert diag.span.line == 2


def test_missing_entry_module(project):
	root = project({})
	(diag,) = _load(root).diagnostics
	assert diag.code == "ModuleNotFound"
	assert "'main'" in diag.message


def test_missing_entry_point(project):
	root = project({"src/main.beast": "(func $start (ret))\n"})
	(diag,) = _load(root).diagnostics
	assert diag.label == "NameError::MissingEntryPoint"
	assert _load(root, require_entry=False).ok


def test_imported_modules_need_no_entry_point(project):
	root = project({"src/main.beast": MAIN, "src/std/io.beast": IO})
	assert all(d.code != "MissingEntryPoint" for d in _load(root).diagnostics)


def test_cycles_load_each_module_once(project):
	root = project(
		{
			"src/main.beast": "(import $b from b)\n(func $main (call $b) (ret))\n",
			"src/b.beast": "(import $main from main)\n(func $b (ret))\n",
		}
	)
	workspace = _load(root)
	assert workspace.ok
	assert list(workspace.modules) == ["main", "b"]


def test_diagnostics_from_imported_modules_carry_their_path(project):
	root = project({"src/main.beast": MAIN, "src/std/io.beast": "(func $print (add u8))\n"})
	workspace = _load(root)
	(diag,) = workspace.diagnostics
	assert diag.code == "StackUnderflow"
	assert diag.span.file == str(root / "src" / "std" / "io.beast")


def test_syntax_errors_stop_import_following(project):
	root = project({"src/main.beast": "(import $x from nope)\n(func $main (ret)"})
	(diag,) = _load(root).diagnostics
	assert diag.code == "UnbalancedParens"


def test_quoted_origins(project):
	files = {
		"src/main.beast": '(import $u from "pkg/util")\n(func $main (call $u) (ret))\n',
		"src/pkg/util.beast": "(func $u (ret))\n",
	}
	workspace = _load(project(files))
	assert workspace.ok
	assert "pkg/util" in workspace.modules


def test_absolute_module_paths(project):
	config = """
[program]
target = "0.1"
system_id = "beast-vm"

[compilation]
absolute_module_paths = true
"""
	files = {
		"src/main.beast": '(import $u from "shared/util.beast")\n(func $main (call $u) (ret))\n',
		"shared/util.beast": "(func $u (ret))\n",
	}
	workspace = _load(project(files, config=config))
	assert workspace.ok
	assert workspace.modules["shared/util.beast"].path.parent.name == "shared"


def test_custom_search_paths_and_signals(tmp_path: Path):
	config = parse_config(
		"""
[program]
target = "0.1"
system_id = "beast-vm"

[compilation]
entry_point = "app"
include = ["code"]

[signals]
print = 1
"""
	)
	(tmp_path / "code").mkdir()
	(tmp_path / "code" / "app.beast").write_text("(func $main (sys :print) (sys :beep) (ret))\n")
	workspace = ModuleLoader(config, tmp_path).load()
	assert [d.code for d in workspace.diagnostics] == ["UnknownSignal"]
	assert workspace.entry == "app"


def test_empty_quoted_origin_is_not_found(project):
	root = project({"src/main.beast": '(func $main (ret))\n(import $f from "")\n(import $g from ".")\n'})
	workspace = _load(root)
	assert [d.code for d in workspace.diagnostics] == ["ModuleNotFound", "ModuleNotFound"]
	assert [d.span.line for d in workspace.diagnostics] == [2, 3]


def test_undecodable_module_is_reported(project):
	root = project({"src/main.beast": MAIN})
	(root / "src" / "std").mkdir(parents=True)
	(root / "src" / "std" / "io.beast").write_bytes(b"(func $print (ret))\n;; \xff\n")
	workspace = _load(root)
	(diag,) = workspace.diagnostics
	assert diag.label == "LexError::InvalidCharacter"
	assert diag.span.file == str(root / "src" / "std" / "io.beast")
	assert (diag.span.line, diag.span.column) == (2, 4)
	assert workspace.modules["main"].checked is not None
