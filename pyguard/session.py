"""Session — the plugins declared in a project's Guardfile, instantiated."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pyguard.guardfile import GuardfileEvaluator, PluginSpec
from pyguard.packages import MetadataPackageSystem, PackageSystem
from pyguard.plugin_util import PluginUtil
from pyguard.settings import Settings
from pyguard.ui import UI


@dataclass
class LoadResult:
    """Outcome of loading one Guardfile declaration."""

    spec: PluginSpec
    plugin: Any = None

    @property
    def ok(self) -> bool:
        return self.plugin is not None


@dataclass
class Session:
    """Plugins for one project, built from its settings and Guardfile."""

    settings: Settings = field(default_factory=Settings)
    ui: UI | None = None
    packages: PackageSystem | None = None
    plugins: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.ui is None:
            self.ui = UI(quiet=self.settings.quiet, debug=self.settings.debug)
        if self.packages is None:
            self.packages = MetadataPackageSystem()

    def plugin_util(self, name: str) -> PluginUtil:
        return PluginUtil(
            name,
            packages=self.packages,
            ui=self.ui,
            guardfile=self.settings.guardfile_path(),
        )

    def add_plugin(self, name: str, options: dict[str, Any] | None = None) -> Any:
        """Instantiate plugin *name* and keep it if it loaded."""
        plugin = self.plugin_util(name).initialize_plugin(options or {})
        if plugin is not None:
            self.plugins.append(plugin)
        return plugin

    def load_guardfile(self, evaluator: GuardfileEvaluator | None = None) -> list[LoadResult]:
        """Evaluate the Guardfile and instantiate every plugin it declares."""
        evaluator = evaluator or GuardfileEvaluator(self.settings.guardfile_path())
        results: list[LoadResult] = []
        for spec in evaluator.evaluate():
            self.ui.debug(f"Loading {spec.name} in group {spec.group}")
            plugin = self.add_plugin(spec.name, spec.plugin_options())
            results.append(LoadResult(spec=spec, plugin=plugin))
        return results
