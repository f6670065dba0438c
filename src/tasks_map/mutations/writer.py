"""Writes mutations back through the document store."""

import logging
from typing import Optional

from tasks_map.models.task import Task
from tasks_map.mutations.document import apply_operation
from tasks_map.mutations.operations import Operation

log = logging.getLogger(__name__)


class DocumentMutator:
    """
    The only component that rewrites documents.

    Each call is one locked read-modify-write of the task's document.
    """

    def __init__(self, store) -> None:
        self._store = store

    def _resolve(self, name: str) -> Optional[str]:
        handle = self._store.get_cross_reference(name)
        return handle.path if handle is not None else None

    async def apply(self, task: Task, op: Operation) -> bool:
        """
        Apply ``op`` to the document holding ``task``.

        Returns True if the document changed. A missing document is a no-op
        (False); I/O errors from the store propagate.
        """
        handle = self._store.get_document(task.link)
        if handle is None:
            log.warning("Document not found for task %s: %s", task.id, task.link)
            return False
        changed = await self._store.rewrite_document(
            handle, lambda text: apply_operation(text, task, op, self._resolve)
        )
        log.debug("%s on %s: %s", type(op).__name__, task.id, "changed" if changed else "no-op")
        return changed
