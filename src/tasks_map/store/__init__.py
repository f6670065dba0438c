from .base import DocumentHandle, DocumentStore
from .vault import VaultStore, parse_attributes

__all__ = ["DocumentHandle", "DocumentStore", "VaultStore", "parse_attributes"]
