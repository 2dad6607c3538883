"""Plugin utilities — discover, resolve, instantiate and scaffold plugins."""

from __future__ import annotations

import importlib
import re
import traceback
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from pyguard.packages import (
    InstalledPackage,
    MetadataPackageSystem,
    PackageNotFoundError,
    PackageSystem,
    canonicalize_name,
)
from pyguard.plugin import Plugin, read_template
from pyguard.registry import Namespace, PluginDescriptor, namespace
from pyguard.ui import UI
from pyguard.ui import ui as default_ui

if TYPE_CHECKING:
    from pyguard.guardfile import GuardfileEvaluator

PACKAGE_PREFIX = "guard-"
NAMESPACE = "guard"
IGNORED_PACKAGES: tuple[str, ...] = ("guard-compat",)

ERROR_NO_GUARD_OR_CLASS = "Could not load '{key}' or find class {namespace}.{constant}"
INFO_ADDED_GUARD_TO_GUARDFILE = "{name} guard added to Guardfile, feel free to edit it"
INFO_ALREADY_IN_GUARDFILE = "Guardfile already includes {name} guard"


class ClassNotFoundError(LookupError):
    """Raised internally when a plugin module defines no matching class."""


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def short_name(raw_name: object) -> str:
    """Return the canonical short name for *raw_name* (``guard-rspec`` -> ``rspec``)."""
    if isinstance(raw_name, Enum):
        raw_name = raw_name.value
    text = str(raw_name)
    if text.startswith(PACKAGE_PREFIX):
        return text[len(PACKAGE_PREFIX) :]
    return text


def canonical_class_name(name: str) -> str:
    """Return the load key for a short name (``rspec`` -> ``guard/rspec``)."""
    return f"{NAMESPACE}/{name.lower()}"


def module_name(key: str) -> str:
    """Turn a load key into a dotted import path (``guard/a-b`` -> ``guard.a_b``)."""
    return key.replace("-", "_").replace("/", ".")


def _camelize(parts: Iterable[str]) -> str:
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def constant_candidates(name: str) -> list[str]:
    """Class names to try for *name*, in precedence order."""
    candidates = [
        name,
        _camelize(name.split("-")),
        _camelize(name.split("_")),
        name.capitalize(),
        _camelize(re.split(r"[-_]", name)),
    ]
    ordered: list[str] = []
    for candidate in candidates:
        if candidate not in ordered:
            ordered.append(candidate)
    return ordered


# ---------------------------------------------------------------------------
# Resolution results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Resolved:
    descriptor: PluginDescriptor

    @property
    def plugin_class(self) -> type:
        return self.descriptor.plugin_class


@dataclass(frozen=True)
class NotFound:
    diagnostics: tuple[str, ...]


Resolution = Resolved | NotFound


# ---------------------------------------------------------------------------
# PluginUtil
# ---------------------------------------------------------------------------


class PluginUtil:
    """Everything pyguard knows how to do with a plugin given its name.

    Collaborators (package system, diagnostics sink, namespace and Guardfile
    evaluator factory) default to the process-wide ones and can be injected.
    """

    def __init__(
        self,
        raw_name: object,
        *,
        packages: PackageSystem | None = None,
        ui: UI | None = None,
        registry: Namespace | None = None,
        guardfile: Path | str = "Guardfile",
        evaluator_factory: Callable[[Path], GuardfileEvaluator] | None = None,
    ) -> None:
        self.raw_name = str(raw_name.value if isinstance(raw_name, Enum) else raw_name)
        self.name = short_name(self.raw_name)
        self.packages = packages or MetadataPackageSystem()
        self.ui = ui or default_ui
        self.registry = registry if registry is not None else namespace
        self.guardfile = Path(guardfile)
        self._evaluator_factory = evaluator_factory

    def __repr__(self) -> str:
        return f"PluginUtil({self.name!r})"

    # --- discovery ---------------------------------------------------------

    @staticmethod
    def _package_valid(package: InstalledPackage, ignored: Iterable[str]) -> bool:
        """Package names are compared in their canonical form (``Guard_X`` is ``guard-x``)."""
        normalized = canonicalize_name(package.name)
        if normalized in {canonicalize_name(name) for name in ignored}:
            return False
        if normalized.startswith(PACKAGE_PREFIX):
            return True
        if package.install_path is None:
            return False
        base = Path(package.install_path) / NAMESPACE
        module = normalized.replace("-", "_")
        return (base / f"{module}.py").exists() or (base / module / "__init__.py").exists()

    @staticmethod
    def _discovered_name(package: InstalledPackage) -> str:
        normalized = canonicalize_name(package.name)
        if normalized.startswith(PACKAGE_PREFIX):
            return normalized[len(PACKAGE_PREFIX) :]
        return package.name

    @classmethod
    def plugin_names(
        cls,
        packages: PackageSystem | None = None,
        ignored: Iterable[str] = IGNORED_PACKAGES,
    ) -> set[str]:
        """Return the short names of all installed plugins.

        A package is a plugin if its canonical name starts with ``guard-``
        (recorded without the prefix, so ``guard_rspec`` gives ``rspec``), or
        if it embeds a ``guard/<name>.py`` module (recorded under its own
        name).
        """
        packages = packages or MetadataPackageSystem()
        ignored = set(ignored)
        return {cls._discovered_name(p) for p in packages.find_all() if cls._package_valid(p, ignored)}

    # --- naming ------------------------------------------------------------

    @property
    def load_key(self) -> str:
        return canonical_class_name(self.name)

    @property
    def constant_name(self) -> str:
        return _camelize(re.split(r"[-_]", self.name))

    # --- class loading -----------------------------------------------------

    def _require(self, key: str) -> ModuleType:
        """Import the plugin module for *key* and register its classes."""
        module = importlib.import_module(module_name(key))
        self.registry.register_module(module)
        return module

    def _not_found(self, error: BaseException) -> NotFound:
        return NotFound(
            diagnostics=(
                ERROR_NO_GUARD_OR_CLASS.format(
                    key=self.load_key, namespace=self.registry.name, constant=self.constant_name
                ),
                f"Error is: {error}",
                "".join(traceback.format_exception(error)).rstrip(),
            )
        )

    def resolve(self) -> Resolution:
        """Locate the plugin class, importing its module if needed."""
        candidates = constant_candidates(self.name)

        descriptor = self.registry.lookup(candidates)
        if descriptor is not None:
            return Resolved(descriptor)

        try:
            self._require(self.load_key)
            descriptor = self.registry.lookup(candidates)
            if descriptor is None:
                raise ClassNotFoundError(
                    f"no class matching {', '.join(candidates)} in {module_name(self.load_key)}"
                )
        except (ImportError, ClassNotFoundError) as exc:
            return self._not_found(exc)

        return Resolved(descriptor)

    def plugin_class(self, fail_gracefully: bool = False) -> type | None:
        """Return the plugin class, or None if it cannot be found.

        Unless *fail_gracefully* is set, the reasons are reported through
        the UI.
        """
        resolution = self.resolve()
        if isinstance(resolution, Resolved):
            return resolution.plugin_class
        if not fail_gracefully:
            for line in resolution.diagnostics:
                self.ui.error(line)
        return None

    # --- instantiation -----------------------------------------------------

    def initialize_plugin(self, options: dict[str, Any]) -> Any:
        """Construct the plugin with *options*.

        ``Plugin`` subclasses receive the options dict; legacy classes are
        called as ``cls(watchers, options)``.
        """
        resolution = self.resolve()
        if isinstance(resolution, NotFound):
            for line in resolution.diagnostics:
                self.ui.error(line)
            return None

        klass = resolution.plugin_class
        if resolution.descriptor.uses_modern_constructor:
            return klass(options)

        options = dict(options)
        watchers = options.pop("watchers", None) or []
        return klass(watchers, options)

    # --- Guardfile integration ---------------------------------------------

    def plugin_location(self) -> Path:
        """Return the install path of the ``guard-<name>`` package.

        Raises:
            PackageNotFoundError: If the package is not installed, or the
                package system does not know where it is installed.
        """
        package = self.packages.find_by_name(f"{PACKAGE_PREFIX}{self.name}")
        if package.install_path is None:
            raise PackageNotFoundError(f"Package '{package.name}' has no install location")
        return Path(package.install_path)

    def _evaluator(self) -> GuardfileEvaluator:
        if self._evaluator_factory is not None:
            return self._evaluator_factory(self.guardfile)

        from pyguard.guardfile import GuardfileEvaluator

        return GuardfileEvaluator(self.guardfile)

    def _template(self, klass: type | None) -> str:
        location = self.plugin_location()
        if isinstance(klass, type) and issubclass(klass, Plugin):
            return klass.template(location, self.name)
        template = getattr(klass, "template", None)
        if callable(template):
            return template(location)
        return read_template(location, self.name)

    def add_to_guardfile(self) -> bool:
        """Append the plugin's template to the Guardfile unless already present.

        Returns True if the Guardfile was rewritten.
        """
        klass = self.plugin_class()

        evaluator = self._evaluator()
        evaluator.evaluate()
        if evaluator.guardfile_include(self.name):
            self.ui.info(INFO_ALREADY_IN_GUARDFILE.format(name=self.name))
            return False

        content = self.guardfile.read_text(encoding="utf-8")
        template = self._template(klass)
        with self.guardfile.open("w", encoding="utf-8", newline="\n") as fh:
            _puts(fh, content)
            _puts(fh, "")
            _puts(fh, template)

        self.ui.info(INFO_ADDED_GUARD_TO_GUARDFILE.format(name=self.name))
        return True


def _puts(fh: Any, text: str) -> None:
    """Write *text* followed by a newline unless it already ends with one."""
    fh.write(text if text.endswith("\n") else text + "\n")
