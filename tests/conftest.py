"""Shared test fixtures for pyguard."""

from __future__ import annotations

import io
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.console import Console

from pyguard.registry import Namespace, namespace
from pyguard.ui import UI


class RecordingUI(UI):
    """UI that remembers what it was asked to report."""

    def __init__(self) -> None:
        super().__init__(console=Console(file=io.StringIO()), debug=True)
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def debug(self, message: str) -> None:
        self.messages.append(("debug", message))

    @property
    def errors(self) -> list[str]:
        return [m for level, m in self.messages if level == "error"]

    @property
    def infos(self) -> list[str]:
        return [m for level, m in self.messages if level == "info"]


@pytest.fixture()
def recording_ui() -> RecordingUI:
    return RecordingUI()


@pytest.fixture(autouse=True)
def isolated_namespace(monkeypatch: pytest.MonkeyPatch) -> Namespace:
    """Forget any plugin classes a test registers."""
    monkeypatch.setattr(namespace, "_descriptors", dict(namespace._descriptors))
    return namespace


def _forget_guard_modules() -> None:
    for name in [m for m in sys.modules if m == "guard" or m.startswith("guard.")]:
        del sys.modules[name]


@pytest.fixture()
def plugin_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """A fresh ``guard`` import namespace on sys.path.

    Tests write plugin modules into the returned directory and import them
    as ``guard.<module>``.
    """
    site = tmp_path / "site"
    guard_dir = site / "guard"
    guard_dir.mkdir(parents=True)

    _forget_guard_modules()
    monkeypatch.syspath_prepend(str(site))
    yield guard_dir
    _forget_guard_modules()


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory with a Guardfile, used as the working directory."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "Guardfile").write_text("Guardfile content", encoding="utf-8")
    monkeypatch.chdir(root)
    return root


@pytest.fixture()
def installed_plugin(tmp_path: Path) -> Path:
    """Install location of a ``guard-myguard`` package with a template."""
    location = tmp_path / "site-packages"
    templates = location / "guard" / "myguard" / "templates"
    templates.mkdir(parents=True)
    (templates / "Guardfile").write_text("Template content", encoding="utf-8")
    return location
