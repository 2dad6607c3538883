"""Plugin base contract.

Every pyguard plugin ("guard") lives in the ``guard`` import namespace and is
a class deriving from :class:`Plugin`::

    # guard/rspec.py, shipped by the ``guard-rspec`` distribution
    from pyguard.plugin import Plugin

    class RSpec(Plugin):
        def run_on_modifications(self, paths):
            ...

Deriving from ``Plugin`` registers the class in the default namespace, so
``PluginUtil("rspec").plugin_class()`` finds it as soon as the module is
imported. The plugin is constructed with a single options dict; the
``watchers``, ``group`` and ``callbacks`` keys are consumed by the base class
and everything else is kept in ``self.options``.

To ship a Guardfile template:

1. Add ``guard/<name>/templates/Guardfile`` to the distribution.
2. ``pyguard init <name>`` appends it to the project's Guardfile.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, ClassVar

from pyguard.registry import namespace
from pyguard.watcher import Watcher

DEFAULT_GROUP = "default"


def template_path(plugin_location: Path | str, name: str) -> Path:
    """Return the path of the Guardfile template bundled with a plugin."""
    module = name.lower().replace("-", "_")
    return Path(plugin_location) / "guard" / module / "templates" / "Guardfile"


def read_template(plugin_location: Path | str, name: str) -> str:
    return template_path(plugin_location, name).read_text(encoding="utf-8")


class Plugin:
    """Base class for plugins using the options-dict constructor."""

    # Read by Namespace.register_module, which tags the class as modern.
    options_constructor: ClassVar[bool] = True

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        namespace.register(cls, modern=True)

    def __init__(self, options: dict[str, Any] | None = None) -> None:
        options = dict(options or {})
        self.watchers: list[Watcher] = list(options.pop("watchers", None) or [])
        self.group: str = options.pop("group", None) or DEFAULT_GROUP
        self.callbacks: list[dict[str, Any]] = list(options.pop("callbacks", None) or [])
        self.options: dict[str, Any] = options

    @classmethod
    def non_namespaced_name(cls) -> str:
        return cls.__name__.lower()

    @classmethod
    def template(cls, plugin_location: Path | str, name: str | None = None) -> str:
        """Read this plugin's Guardfile template from its install location.

        *name* is the plugin's short name (``dashed-class-name``); it defaults
        to the lowercased class name.
        """
        return read_template(plugin_location, name or cls.non_namespaced_name())

    @property
    def name(self) -> str:
        return self.non_namespaced_name()

    @property
    def title(self) -> str:
        return type(self).__name__

    def hook(self, event: str, *args: Any) -> list[Any]:
        """Call every callback registered for *event*.

        Each callback is a dict with ``events`` (a name or list of names)
        and ``listener`` (called as ``listener(plugin, event, *args)``).
        Returns the listeners' results.
        """
        results: list[Any] = []
        for callback in self.callbacks:
            events = callback.get("events", [])
            if isinstance(events, str):
                events = [events]
            if event not in events:
                continue
            listener: Callable[..., Any] = callback["listener"]
            results.append(listener(self, event, *args))
        return results

    def __repr__(self) -> str:
        return (
            f"<{namespace.name}.{self.title} name={self.name!r} group={self.group!r} "
            f"watchers={self.watchers!r} callbacks={self.callbacks!r} options={self.options!r}>"
        )
