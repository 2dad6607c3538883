"""Host package system — installed distributions as seen by plugin discovery."""

from __future__ import annotations

from collections.abc import Iterable
import re
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Protocol


class PackageNotFoundError(LookupError):
    """Raised when a distribution is not installed."""


def canonicalize_name(name: str) -> str:
    """Normalize a distribution name the way the package index does.

    Runs of ``-``, ``_`` and ``.`` collapse to a single dash and the result is
    lowercased, so ``Guard_RSpec`` and ``guard-rspec`` name the same package.
    """
    return re.sub(r"[-_.]+", "-", name).lower()


@dataclass(frozen=True)
class InstalledPackage:
    """An installed distribution candidate."""

    name: str
    install_path: Path | None = None


class PackageSystem(Protocol):
    """What plugin discovery needs from the package system."""

    def find_all(self) -> Iterable[InstalledPackage]: ...

    def find_by_name(self, name: str) -> InstalledPackage: ...


def _from_distribution(dist: metadata.Distribution) -> InstalledPackage | None:
    name = dist.metadata["Name"]
    if not name:
        return None
    try:
        install_path = Path(dist.locate_file(""))
    except (NotImplementedError, TypeError):
        install_path = None
    return InstalledPackage(name=name, install_path=install_path)


class MetadataPackageSystem:
    """Package system backed by ``importlib.metadata``."""

    def find_all(self) -> list[InstalledPackage]:
        packages: list[InstalledPackage] = []
        for dist in metadata.distributions():
            package = _from_distribution(dist)
            if package is not None:
                packages.append(package)
        return packages

    def find_by_name(self, name: str) -> InstalledPackage:
        try:
            dist = metadata.distribution(name)
        except metadata.PackageNotFoundError as exc:
            raise PackageNotFoundError(f"Could not find '{name}' among installed packages") from exc
        package = _from_distribution(dist)
        if package is None:
            raise PackageNotFoundError(f"Distribution '{name}' has no name metadata")
        return package


class StaticPackageSystem:
    """In-memory package system, for tests and embedding."""

    def __init__(self, packages: Iterable[InstalledPackage] = ()) -> None:
        self._packages = list(packages)

    def find_all(self) -> list[InstalledPackage]:
        return list(self._packages)

    def find_by_name(self, name: str) -> InstalledPackage:
        wanted = canonicalize_name(name)
        for package in self._packages:
            if canonicalize_name(package.name) == wanted:
                return package
        raise PackageNotFoundError(f"Could not find '{name}' among installed packages")
