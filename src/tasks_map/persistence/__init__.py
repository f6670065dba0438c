from .saver import DebouncedSaver
from .snapshot import PluginData, SnapshotFile

__all__ = ["DebouncedSaver", "PluginData", "SnapshotFile"]
