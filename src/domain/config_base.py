"""Shared TOML config-loading utilities for ranking systems."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib


@dataclass(frozen=True)
class BaseSystemConfig:
    """Metadata shared by every ranking-system config file."""

    name: str
    description: str | None
    file_path: Path
    lookback_days: int

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class SystemSection:
    """Parsed ``[system]`` table."""

    name: str
    description: str | None
    lookback_days: int


T = TypeVar("T", bound=BaseSystemConfig)


def parse_system_section(
    raw: dict[str, Any],
    file_path: Path,
    *,
    default_lookback_days: int,
) -> SystemSection:
    system_raw = raw.get("system", {})
    if not isinstance(system_raw, dict):
        raise ValueError(f"{file_path}: [system] must be a table")

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    lookback_days = int(system_raw.get("lookback_days", default_lookback_days))
    if lookback_days <= 0:
        raise ValueError(f"{file_path}: [system].lookback_days must be > 0")

    return SystemSection(name=name, description=description, lookback_days=lookback_days)


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "ranking",
) -> list[T]:
    """Load all TOML files in a directory with duplicate-name validation."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    systems: list[T] = []
    for file_path in config_files:
        with file_path.open("rb") as file:
            raw = tomllib.load(file)
        systems.append(parser(raw, file_path))

    names = [system.name for system in systems]
    if len(names) != len(set(names)):
        raise ValueError(
            f"Duplicate {duplicate_name_label} system names found in {config_dir}: {names}"
        )

    return systems


__all__ = ["BaseSystemConfig", "SystemSection", "load_system_configs", "parse_system_section"]
