"""Guardfile evaluation — parses the project's Guardfile into plugin declarations.

A Guardfile is YAML: a list of plugin entries, read with ``yaml.safe_load``
and validated with Pydantic. Nothing in it is executed::

    - guard: pylint

    - guard: pytest
      group: backend
      options:
        cmd: pytest -x
        all_on_start: true
      watch:
        - pattern: '^src/(.+)\\.py$'
          action: 'tests/test_\\1.py'
        - '^tests/.+\\.py$'

``guard`` names the plugin, ``group`` defaults to ``default`` and ``options``
is handed to the plugin. Each ``watch`` item is a regex, optionally with an
``action`` template expanded against the match (``\\1``, ``\\g<name>``). A
bare string entry (``- pylint``) declares a plugin with no options.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from pyguard.plugin import DEFAULT_GROUP
from pyguard.plugin_util import short_name
from pyguard.watcher import Watcher

DEFAULT_GUARDFILE = """\
# A sample Guardfile
# More info: pyguard list / pyguard init <plugin>
"""


class GuardfileError(Exception):
    """Raised when the Guardfile cannot be evaluated."""


class GuardfileNotFoundError(GuardfileError):
    """Raised when there is no Guardfile to evaluate."""


# ---------------------------------------------------------------------------
# Guardfile schema
# ---------------------------------------------------------------------------


class WatchEntry(BaseModel):
    """One ``watch`` item of a guard entry."""

    pattern: str
    action: str | None = None

    @field_validator("pattern")
    @classmethod
    def _valid_regex(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid pattern {v!r}: {exc}") from exc
        return v


class GuardEntry(BaseModel):
    """One plugin declaration."""

    guard: str
    group: str = DEFAULT_GROUP
    options: dict[str, Any] = {}
    watch: list[WatchEntry] = []

    @field_validator("options", mode="before")
    @classmethod
    def _empty_options(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("watch", mode="before")
    @classmethod
    def _pattern_shorthand(cls, v: Any) -> Any:
        """Accept a single watch item, and plain strings as patterns."""
        if v is None:
            return []
        if isinstance(v, (str, dict)):
            v = [v]
        if not isinstance(v, list):
            return v
        return [{"pattern": item} if isinstance(item, str) else item for item in v]


@dataclass
class PluginSpec:
    """One plugin declared in the Guardfile."""

    name: str
    group: str = DEFAULT_GROUP
    options: dict[str, Any] = field(default_factory=dict)
    watchers: list[Watcher] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: GuardEntry) -> PluginSpec:
        return cls(
            name=entry.guard,
            group=entry.group,
            options=dict(entry.options),
            watchers=[Watcher(w.pattern, w.action) for w in entry.watch],
        )

    def plugin_options(self) -> dict[str, Any]:
        """Options dict for ``PluginUtil.initialize_plugin``."""
        return {**self.options, "watchers": list(self.watchers), "group": self.group}


def parse_guardfile(source: str, origin: str = "Guardfile") -> list[PluginSpec]:
    """Parse Guardfile *source* into plugin declarations.

    A Guardfile holding only comments declares nothing.

    Raises:
        GuardfileError: If the source is not valid YAML or does not match
            the Guardfile schema.
    """
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as exc:
        raise GuardfileError(f"Invalid Guardfile, original error is: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list):
        raise GuardfileError(f"Invalid Guardfile, original error is: {origin} must contain a YAML list")

    specs: list[PluginSpec] = []
    for position, item in enumerate(data, start=1):
        if isinstance(item, str):
            item = {"guard": item}
        if not isinstance(item, dict):
            raise GuardfileError(
                f"Invalid Guardfile, original error is: entry {position} must be a mapping or a plugin name"
            )
        try:
            entry = GuardEntry(**item)
        except ValidationError as exc:
            raise GuardfileError(f"Invalid Guardfile, original error is: entry {position}: {exc}") from exc
        specs.append(PluginSpec.from_entry(entry))
    return specs


class GuardfileEvaluator:
    """Evaluate a Guardfile and answer questions about the plugins it declares."""

    def __init__(self, path: Path | str = "Guardfile", contents: str | None = None) -> None:
        self.path = Path(path)
        self.contents = contents
        self.plugins: list[PluginSpec] = []

    def _read(self) -> str:
        if self.contents is not None:
            return self.contents
        if not self.path.is_file():
            raise GuardfileNotFoundError(f"No Guardfile found at {self.path}")
        return self.path.read_text(encoding="utf-8")

    def evaluate(self) -> list[PluginSpec]:
        """Parse the Guardfile and return the plugins it declares.

        Raises:
            GuardfileNotFoundError: If there is neither a file nor inline contents.
            GuardfileError: If the Guardfile is malformed.
        """
        self.plugins = parse_guardfile(self._read(), str(self.path))
        return self.plugins

    def guardfile_include(self, name: str) -> bool:
        """Return True if the evaluated Guardfile declares plugin *name*."""
        wanted = short_name(name)
        return any(short_name(spec.name) == wanted for spec in self.plugins)
