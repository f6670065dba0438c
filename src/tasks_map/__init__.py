"""Task-document synchronization and dependency-graph engine."""

__version__ = "0.3.0"
