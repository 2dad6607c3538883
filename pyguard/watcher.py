"""Watchers — map changed paths to the work a plugin should do."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Any

Action = Callable[[re.Match[str]], Any] | str


class Watcher:
    """A path pattern plus an optional action.

    ``pattern`` is a regex (string or compiled). ``action`` is either a
    callable receiving the ``re.Match`` for a path, or a replacement template
    (``tests/test_\\1.py``) expanded against it. When it is omitted the
    matched path itself is used.
    """

    def __init__(self, pattern: str | re.Pattern[str], action: Action | None = None) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.action = action

    def match(self, path: str) -> re.Match[str] | None:
        return self.pattern.search(path)

    def call_action(self, m: re.Match[str]) -> Any:
        """Return what this watcher yields for match *m*."""
        if self.action is None:
            return m.string
        if isinstance(self.action, str):
            return m.expand(self.action)
        return self.action(m)

    def __repr__(self) -> str:
        return f"Watcher({self.pattern.pattern!r})"


def match_files(watchers: Iterable[Watcher], paths: Iterable[str]) -> list[Any]:
    """Return the deduplicated results of every watcher matching *paths*.

    Actions returning ``None`` contribute nothing; list results are flattened.
    Order follows the first occurrence of each result.
    """
    watchers = list(watchers)
    results: list[Any] = []

    for path in paths:
        for watcher in watchers:
            m = watcher.match(path)
            if m is None:
                continue
            result = watcher.call_action(m)
            if result is None:
                continue
            items = result if isinstance(result, list) else [result]
            for item in items:
                if item not in results:
                    results.append(item)

    return results
