"""
Configuration.

Settings: persisted display/linking options (stored next to the graph
    snapshot in the data file).
ServerConfig: process configuration read from environment variables:

    VAULT_ROOT     vault directory (required)
    EXCLUDE_DIRS   comma-separated directory names to skip
    DATA_FILE      settings + snapshot JSON file
    SAVE_DEBOUNCE  seconds of quiet before a scheduled save is written
    API_ENABLED    start the REST API alongside the MCP server
    API_PORT       REST API port
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Set

LAYOUT_DIRECTIONS = ("Horizontal", "Vertical")
LINKING_STYLES = ("individual", "csv", "dataview")
TAG_COLOR_MODES = ("random", "static")

_DEFAULT_EXCLUDE_DIRS = ".git,.obsidian,node_modules,.trash"
_DEFAULT_API_PORT = 9410
_DEFAULT_SAVE_DEBOUNCE = 0.2


@dataclass
class Settings:
    show_priorities: bool = True
    show_tags: bool = True
    layout_direction: str = "Horizontal"
    linking_style: str = "csv"
    debug_visualization: bool = False
    tag_color_mode: str = "random"
    tag_color_seed: int = 42
    tag_static_color: str = "#3b82f6"
    tasks_folder: Optional[str] = None

    def __post_init__(self) -> None:
        if self.layout_direction not in LAYOUT_DIRECTIONS:
            raise ValueError(f"Invalid layout direction '{self.layout_direction}'")
        if self.linking_style not in LINKING_STYLES:
            raise ValueError(f"Invalid linking style '{self.linking_style}'")
        if self.tag_color_mode not in TAG_COLOR_MODES:
            raise ValueError(f"Invalid tag color mode '{self.tag_color_mode}'")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Settings:
        """Build settings from stored data, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


def _parse_exclude_dirs(raw: str) -> Set[str]:
    """Parse a comma-separated list of directory names to exclude."""
    return {part.strip() for part in raw.split(",") if part.strip()}


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes")


@dataclass
class ServerConfig:
    vault_root: Path
    exclude_dirs: Set[str]
    data_file: Path
    save_debounce: float = _DEFAULT_SAVE_DEBOUNCE
    api_enabled: bool = True
    api_port: int = _DEFAULT_API_PORT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
        """
        Read configuration from the environment.

        Raises:
            ValueError: VAULT_ROOT is unset or not a directory
        """
        env = os.environ if environ is None else environ

        vault_root_env = env.get("VAULT_ROOT", "")
        if not vault_root_env:
            raise ValueError("VAULT_ROOT environment variable is not set")
        vault_root = Path(vault_root_env)
        if not vault_root.is_dir():
            raise ValueError(f"VAULT_ROOT does not exist or is not a directory: {vault_root}")

        data_file = env.get("DATA_FILE") or str(vault_root / ".tasks-map" / "data.json")

        return cls(
            vault_root=vault_root,
            exclude_dirs=_parse_exclude_dirs(env.get("EXCLUDE_DIRS", _DEFAULT_EXCLUDE_DIRS)),
            data_file=Path(data_file),
            save_debounce=float(env.get("SAVE_DEBOUNCE", _DEFAULT_SAVE_DEBOUNCE)),
            api_enabled=_parse_bool(env.get("API_ENABLED", "true")),
            api_port=int(env.get("API_PORT", _DEFAULT_API_PORT)),
        )
