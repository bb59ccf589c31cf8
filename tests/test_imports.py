from __future__ import annotations

import compileall
import importlib
from pathlib import Path


def test_compileall_package() -> None:
    src = Path(__file__).resolve().parents[1] / "ncxbacklight"
    ok = compileall.compile_dir(str(src), quiet=1)
    assert ok


def test_import_modules() -> None:
    importlib.import_module("ncxbacklight")
    importlib.import_module("ncxbacklight.__main__")
    importlib.import_module("ncxbacklight.app")
    importlib.import_module("ncxbacklight.backends")
    importlib.import_module("ncxbacklight.controller")
    importlib.import_module("ncxbacklight.render")
    importlib.import_module("ncxbacklight.terminal")
