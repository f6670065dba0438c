"""Document store interface used by the scanner, mutator and session."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class DocumentHandle:
    """A document in the store, addressed by its store-relative posix path."""

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        """File name without its extension (the wikilink title)."""
        return PurePosixPath(self.path).stem


class DocumentStore(ABC):
    @abstractmethod
    async def read_document(self, path: str) -> str:
        ...

    @abstractmethod
    def get_document(self, path: str) -> Optional[DocumentHandle]:
        ...

    @abstractmethod
    async def rewrite_document(self, handle: DocumentHandle, fn: Callable[[str], str]) -> bool:
        """
        Replace the document's content with ``fn(content)``.

        Returns True if the content changed. Rewrites of one path never
        interleave.
        """

    @abstractmethod
    async def list_documents(self) -> List[DocumentHandle]:
        ...

    @abstractmethod
    async def get_attributes(self, handle: DocumentHandle) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_cross_reference(self, name: str) -> Optional[DocumentHandle]:
        ...
