"""Tests for pyguard.packages."""

from pathlib import Path

import pytest

from pyguard.packages import (
    InstalledPackage,
    MetadataPackageSystem,
    PackageNotFoundError,
    StaticPackageSystem,
    canonicalize_name,
)


class TestStaticPackageSystem:
    def test_find_all(self) -> None:
        packages = [InstalledPackage("a"), InstalledPackage("b", Path("/b"))]
        assert StaticPackageSystem(packages).find_all() == packages

    def test_find_by_name(self) -> None:
        system = StaticPackageSystem([InstalledPackage("guard-rspec", Path("/gems/guard-rspec"))])
        assert system.find_by_name("guard-rspec").install_path == Path("/gems/guard-rspec")

    def test_find_by_name_missing(self) -> None:
        with pytest.raises(PackageNotFoundError, match="guard-rspec"):
            StaticPackageSystem().find_by_name("guard-rspec")

    def test_find_by_name_normalizes(self) -> None:
        system = StaticPackageSystem([InstalledPackage("Guard_RSpec", Path("/gems/guard_rspec"))])
        assert system.find_by_name("guard-rspec").name == "Guard_RSpec"
        assert system.find_by_name("GUARD.rspec").name == "Guard_RSpec"


class TestCanonicalizeName:
    def test_collapses_separators_and_case(self) -> None:
        assert canonicalize_name("Guard__RSpec") == "guard-rspec"
        assert canonicalize_name("guard.-_minitest") == "guard-minitest"
        assert canonicalize_name("pyyaml") == "pyyaml"


class TestMetadataPackageSystem:
    def test_lists_installed_distributions(self) -> None:
        names = {p.name.lower() for p in MetadataPackageSystem().find_all()}
        assert "pytest" in names

    def test_find_by_name(self) -> None:
        package = MetadataPackageSystem().find_by_name("pytest")
        assert package.name.lower() == "pytest"
        assert package.install_path is not None
        assert package.install_path.exists()

    def test_find_by_name_missing(self) -> None:
        with pytest.raises(PackageNotFoundError):
            MetadataPackageSystem().find_by_name("guard-definitely-not-installed-xyz")
