"""
Filesystem-backed document store over a markdown vault.

Disk access (including the vault walk) goes through ``asyncio.to_thread``
so the event loop never blocks on disk. Rewrites hold a per-path ``asyncio.Lock`` for the whole
read-modify-write cycle; two mutations of the same document are applied one
after the other instead of racing.
"""

import asyncio
import logging
from collections import defaultdict
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

import yaml

from tasks_map.store.base import DocumentHandle, DocumentStore
from tasks_map.utils.frontmatter import extract_frontmatter

log = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def parse_attributes(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse a document's frontmatter into a dict.

    Returns None when there is no frontmatter, when it is not a mapping, or
    when the YAML is malformed.
    """
    raw = extract_frontmatter(text)
    if raw is None:
        return None
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        log.warning("Malformed frontmatter: %s", e)
        return None
    return data if isinstance(data, dict) else None


class VaultStore(DocumentStore):
    """
    Document store rooted at a vault directory.

    Only ``.md`` files are documents. Directories named in ``exclude_dirs``
    are skipped at any depth.
    """

    def __init__(self, root: Path, exclude_dirs: Optional[Set[str]] = None) -> None:
        self._root = Path(root)
        self._exclude_dirs: Set[str] = set(exclude_dirs or ())
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        # basename -> first document with that basename, rebuilt on every listing
        self._by_basename: Optional[Dict[str, DocumentHandle]] = None

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _abs(self, path: str) -> Path:
        return self._root / path

    def _walk(self) -> Iterator[Path]:
        for path in sorted(self._root.rglob(f"*{MARKDOWN_SUFFIX}")):
            if not path.is_file():
                continue
            rel = path.relative_to(self._root)
            if any(part in self._exclude_dirs for part in rel.parts[:-1]):
                continue
            yield rel

    def _scan(self) -> List[DocumentHandle]:
        handles = [DocumentHandle(rel.as_posix()) for rel in self._walk()]
        index: Dict[str, DocumentHandle] = {}
        for handle in handles:
            index.setdefault(handle.basename, handle)
        self._by_basename = index
        return handles

    async def list_documents(self) -> List[DocumentHandle]:
        return await asyncio.to_thread(self._scan)

    def get_document(self, path: str) -> Optional[DocumentHandle]:
        if not path or not self._abs(path).is_file():
            return None
        return DocumentHandle(Path(path).as_posix())

    def get_cross_reference(self, name: str) -> Optional[DocumentHandle]:
        """
        Resolve a wikilink name to a document.

        ``name`` may be a path (with or without ``.md``) or a bare title; a
        bare title matches the first document with that basename as of the
        last listing.
        """
        candidate = name if name.endswith(MARKDOWN_SUFFIX) else name + MARKDOWN_SUFFIX
        handle = self.get_document(candidate)
        if handle is not None:
            return handle
        if self._by_basename is None:
            self._scan()
        return self._by_basename.get(PurePosixPath(candidate).stem)

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    def _read(self, path: str) -> str:
        with open(self._abs(path), encoding="utf-8", newline="") as f:
            return f.read()

    def _write(self, path: str, text: str) -> None:
        with open(self._abs(path), "w", encoding="utf-8", newline="") as f:
            f.write(text)

    async def read_document(self, path: str) -> str:
        return await asyncio.to_thread(self._read, path)

    async def get_attributes(self, handle: DocumentHandle) -> Optional[Dict[str, Any]]:
        text = await self.read_document(handle.path)
        return parse_attributes(text)

    async def rewrite_document(self, handle: DocumentHandle, fn: Callable[[str], str]) -> bool:
        async with self._locks[handle.path]:
            before = await asyncio.to_thread(self._read, handle.path)
            after = fn(before)
            if after == before:
                log.debug("No change to %s", handle.path)
                return False
            await asyncio.to_thread(self._write, handle.path, after)
            log.debug("Rewrote %s", handle.path)
            return True
