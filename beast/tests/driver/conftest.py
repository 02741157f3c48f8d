# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path
from typing import Callable

import pytest

BEAST_TOML = """
[program]
target = "0.1"
system_id = "beast-vm"
"""


@pytest.fixture
def project(tmp_path: Path) -> Callable[..., Path]:
	"""
	Build a project tree under tmp_path.

	Usage: project({"src/main.beast": "...", ...}, config="...") -> root.
	A default Beast.toml is written unless `config` is given.
	"""

	def _make(files: dict, config: str = BEAST_TOML) -> Path:
		(tmp_path / "Beast.toml").write_text(config)
		for rel, text in files.items():
			path = tmp_path / rel
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(text)
		return tmp_path

	return _make
