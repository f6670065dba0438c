"""
Plugin data file: settings plus the graph snapshot in one JSON object.

    {"settings": {...}, "graphData": {"nodes": [...], "edges": [...], "viewport": {...}}}

Older files hold the settings object alone; they load with an empty graph.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from tasks_map.config import Settings
from tasks_map.models.graph import GraphData

log = logging.getLogger(__name__)


@dataclass
class PluginData:
    settings: Settings = field(default_factory=Settings)
    graph_data: GraphData = field(default_factory=GraphData)

    def to_dict(self) -> Dict[str, Any]:
        return {"settings": self.settings.to_dict(), "graphData": self.graph_data.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> "PluginData":
        if not isinstance(data, dict):
            return cls()
        if "settings" not in data:
            # Legacy: settings only
            return cls(settings=Settings.from_dict(data))
        return cls(
            settings=Settings.from_dict(data.get("settings")),
            graph_data=GraphData.from_dict(data.get("graphData")),
        )


class SnapshotFile:
    """Loads and saves ``PluginData`` at a fixed path."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> PluginData:
        if not self.path.exists():
            log.info("No data file at %s; using defaults", self.path)
            return PluginData()
        with open(self.path, encoding="utf-8") as f:
            return PluginData.from_dict(json.load(f))

    def _save(self, data: PluginData) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data.to_dict(), f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    async def load(self) -> PluginData:
        return await asyncio.to_thread(self._load)

    async def save(self, data: PluginData) -> None:
        await asyncio.to_thread(self._save, data)
        log.debug(
            "Saved %d nodes, %d edges to %s",
            len(data.graph_data.nodes),
            len(data.graph_data.edges),
            self.path,
        )
