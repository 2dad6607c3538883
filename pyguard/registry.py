"""Plugin namespace — maps class names to registered plugin classes."""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import ModuleType


@dataclass(frozen=True)
class PluginDescriptor:
    """A plugin class registered in a namespace.

    ``uses_modern_constructor`` is True for classes built on the shared
    ``Plugin`` contract (constructed with a single options dict) and False
    for legacy classes taking ``(watchers, options)``.
    """

    name: str
    plugin_class: type
    uses_modern_constructor: bool = False


class Namespace:
    """Registry of plugin classes, looked up by (case-insensitive) class name."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._descriptors: dict[str, PluginDescriptor] = {}

    def register(self, cls: type, modern: bool = False) -> type:
        """Register *cls* under its class name. Usable as a decorator."""
        self._descriptors[cls.__name__] = PluginDescriptor(
            name=cls.__name__,
            plugin_class=cls,
            uses_modern_constructor=modern,
        )
        return cls

    def register_module(self, module: ModuleType) -> list[PluginDescriptor]:
        """Register every class defined in *module* that is not already known.

        Classes carrying a true ``options_constructor`` attribute (every
        ``Plugin`` subclass) are tagged modern; the rest are legacy.
        """
        added: list[PluginDescriptor] = []
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            existing = self._descriptors.get(obj.__name__)
            if existing is not None and existing.plugin_class is obj:
                continue
            self.register(obj, modern=bool(getattr(obj, "options_constructor", False)))
            added.append(self._descriptors[obj.__name__])
        return added

    def unregister(self, name: str) -> None:
        self._descriptors.pop(name, None)

    def find(self, candidate: str) -> PluginDescriptor | None:
        """Return the descriptor whose name matches *candidate*, ignoring case."""
        if candidate in self._descriptors:
            return self._descriptors[candidate]
        folded = candidate.casefold()
        for name, descriptor in self._descriptors.items():
            if name.casefold() == folded:
                return descriptor
        return None

    def lookup(self, candidates: Iterable[str]) -> PluginDescriptor | None:
        """Return the first descriptor matching one of *candidates*, in order."""
        for candidate in candidates:
            descriptor = self.find(candidate)
            if descriptor is not None:
                return descriptor
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def __iter__(self) -> Iterator[PluginDescriptor]:
        return iter(list(self._descriptors.values()))

    def __len__(self) -> int:
        return len(self._descriptors)


# Default namespace plugins register into; mirrors the ``guard`` import package.
namespace = Namespace("guard")
