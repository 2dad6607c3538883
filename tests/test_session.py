"""Tests for pyguard.session."""

from __future__ import annotations

from pathlib import Path

from conftest import RecordingUI

from pyguard.guardfile import GuardfileEvaluator
from pyguard.packages import StaticPackageSystem
from pyguard.plugin import Plugin
from pyguard.session import Session
from pyguard.settings import Settings


def _session(ui: RecordingUI, guardfile: str = "Guardfile") -> Session:
    return Session(settings=Settings(guardfile=guardfile), ui=ui, packages=StaticPackageSystem())


class TestSession:
    def test_defaults(self) -> None:
        session = Session()
        assert session.ui is not None
        assert session.packages is not None
        assert session.plugins == []

    def test_add_plugin(self, recording_ui: RecordingUI) -> None:
        class Sessionplugin(Plugin):
            pass

        session = _session(recording_ui)
        plugin = session.add_plugin("sessionplugin", {"level": 2})
        assert isinstance(plugin, Sessionplugin)
        assert plugin.options == {"level": 2}
        assert session.plugins == [plugin]

    def test_add_unknown_plugin(self, plugin_path: Path, recording_ui: RecordingUI) -> None:
        session = _session(recording_ui)
        assert session.add_plugin("unknown") is None
        assert session.plugins == []
        assert len(recording_ui.errors) == 3

    def test_load_guardfile(self, plugin_path: Path, recording_ui: RecordingUI) -> None:
        class Loaded(Plugin):
            pass

        contents = (
            "- guard: loaded\n"
            "  group: ci\n"
            "  options: {level: 2}\n"
            "  watch: ['\\.py$']\n"
            "- ghost\n"
        )
        session = _session(recording_ui)
        results = session.load_guardfile(GuardfileEvaluator(contents=contents))

        assert [r.ok for r in results] == [True, False]
        loaded = results[0].plugin
        assert isinstance(loaded, Loaded)
        assert loaded.group == "ci"
        assert loaded.options == {"level": 2}
        assert len(loaded.watchers) == 1
        assert session.plugins == [loaded]
        assert ("debug", "Loading loaded in group ci") in recording_ui.messages

    def test_load_guardfile_from_settings(self, tmp_path: Path, recording_ui: RecordingUI) -> None:
        class Fromfile(Plugin):
            pass

        guardfile = tmp_path / "Guardfile.custom"
        guardfile.write_text("- guard: fromfile\n", encoding="utf-8")
        results = _session(recording_ui, str(guardfile)).load_guardfile()
        assert len(results) == 1
        assert isinstance(results[0].plugin, Fromfile)
