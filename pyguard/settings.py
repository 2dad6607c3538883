"""Settings — loads and validates the optional pyguard YAML config with Pydantic."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    """Project-level settings for plugin discovery and Guardfile handling."""

    guardfile: str = "Guardfile"
    ignored_packages: list[str] = ["guard-compat"]
    quiet: bool = False
    debug: bool = False

    @field_validator("ignored_packages", mode="before")
    @classmethod
    def _deduplicate_packages(cls, v: list[str]) -> list[str]:
        """Remove duplicate package names while preserving order."""
        seen: set[str] = set()
        result: list[str] = []
        for name in v:
            if name not in seen:
                seen.add(name)
                result.append(name)
        return result

    def guardfile_path(self) -> Path:
        """Return the Guardfile path relative to the working directory."""
        return Path(self.guardfile)


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate a settings file.

    Args:
        path: Path to the YAML settings file, or ``None`` for defaults.

    Returns:
        A validated Settings instance.

    Raises:
        FileNotFoundError: If an explicit settings file does not exist.
        ValueError: If the settings file contains invalid configuration.
    """
    if path is None:
        return Settings()

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    data = yaml.safe_load(settings_path.read_text(encoding="utf-8"))

    if data is None:
        raise ValueError(f"Settings file is empty: {settings_path}")
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a YAML mapping: {settings_path}")

    return Settings(**data)
