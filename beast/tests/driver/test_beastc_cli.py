# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import json
from pathlib import Path

from beast.beastc import main


def _write(tmp_path: Path, name: str, text: str) -> Path:
	path = tmp_path / name
	path.write_text(text)
	return path


def test_valid_file_exits_zero(tmp_path: Path, capsys):
	src = _write(tmp_path, "ok.beast", "(func $main (push u8 5) (push u8 3) (add u8) (ret))")
	assert main([str(src)]) == 0
	captured = capsys.readouterr()
	assert captured.err == ""
	assert captured.out == ""


def test_errors_are_rendered_to_stderr(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.beast", "(func $f (push u8 300) (ret))")
	assert main([str(src)]) == 1
	err = capsys.readouterr().err
	assert f"{src}:1:10: error: [TypeError::LiteralOutOfRange]" in err


def test_json_output(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.beast", "(func $h (push u8 %y) (ret))")
	assert main(["--json", str(src)]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["kind"] == "NameError"
	assert diag["code"] == "Undefined"
	assert diag["phase"] == "validator"
	assert diag["file"] == str(src)
	assert (diag["line"], diag["column"]) == (1, 10)


def test_json_output_for_clean_file(tmp_path: Path, capsys):
	src = _write(tmp_path, "ok.beast", "(func $main (ret))")
	assert main(["--json", str(src)]) == 0
	assert json.loads(capsys.readouterr().out) == {"exit_code": 0, "diagnostics": []}


def test_syntax_error_json(tmp_path: Path, capsys):
	src = _write(tmp_path, "bad.beast", "(func $main (push u8 5)")
	assert main(["--json", str(src)]) == 1
	(diag,) = json.loads(capsys.readouterr().out)["diagnostics"]
	assert diag["phase"] == "parser"
	assert diag["code"] == "UnbalancedParens"


def test_print_canonical_form(tmp_path: Path, capsys):
	src = _write(tmp_path, "ok.beast", "(func   $main\n(push u8 1)   (drop u8) (ret))")
	assert main(["--print", str(src)]) == 0
	assert capsys.readouterr().out == "(func $main\n  (push u8 1)\n  (drop u8)\n  (ret))\n"


def test_multiple_files_aggregate(tmp_path: Path, capsys):
	good = _write(tmp_path, "good.beast", "(func $main (ret))")
	bad = _write(tmp_path, "bad.beast", "(func $i (add u8) (ret))")
	assert main([str(good), str(bad)]) == 1
	err = capsys.readouterr().err
	assert "StackUnderflow" in err
	assert str(good) not in err


def test_project_mode(project, capsys):
	root = project(
		{
			"src/main.beast": "(import $print from std.io)\n(func $main (call $print) (ret))\n",
			"src/std/io.beast": "(func $print (ret))\n(export $print)\n",
		}
	)
	assert main(["--project", str(root)]) == 0
	assert capsys.readouterr().err == ""


def test_project_mode_reports_missing_modules(project, capsys):
	root = project({"src/main.beast": "(import $print from std.io)\n(func $main (ret))\n"})
	assert main(["--project", str(root)]) == 1
	assert "[NameError::ModuleNotFound]" in capsys.readouterr().err


def test_bad_config_is_a_usage_error(tmp_path: Path, capsys):
	_write(tmp_path, "Beast.toml", "[program]\ntarget = 1\n")
	assert main(["--project", str(tmp_path)]) == 2
	assert "Beast.toml" in capsys.readouterr().err


def test_usage_errors(tmp_path: Path, capsys):
	assert main([]) == 2
	assert main(["--project", str(tmp_path), "x.beast"]) == 2
	assert main([str(tmp_path / "missing.beast")]) == 2
	err = capsys.readouterr().err
	assert "no input files" in err
	assert "cannot read" in err


def test_undecodable_file_is_a_diagnostic(tmp_path: Path, capsys):
	src = tmp_path / "latin.beast"
	src.write_bytes(b"(func $main (ret)) ;; \xff\xfe\n")
	good = _write(tmp_path, "good.beast", "(func $main (ret))")
	assert main(["--json", str(src), str(good)]) == 1
	(diag,) = json.loads(capsys.readouterr().out)["diagnostics"]
	assert diag["kind"] == "LexError"
	assert diag["code"] == "InvalidCharacter"
	assert diag["file"] == str(src)
	assert (diag["line"], diag["column"], diag["offset"]) == (1, 23, 22)
