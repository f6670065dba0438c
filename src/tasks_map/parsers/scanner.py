"""
Vault-wide task collection.

collect_tasks: every inline task plus every note task in the store
scan_folder: inline tasks under one folder, annotated with their project
"""

import logging
from typing import Any, Dict, List, Optional, Set

from tasks_map.models.task import Task
from tasks_map.parsers.task_parser import is_empty_task, is_note_task, parse_document, parse_note

log = logging.getLogger(__name__)


def _resolver(store):
    """Wrap the store's cross-reference lookup as ``name -> path``."""

    def resolve(name: str) -> Optional[str]:
        handle = store.get_cross_reference(name)
        return handle.path if handle is not None else None

    return resolve


def _project_of(attributes: Optional[Dict[str, Any]]) -> Optional[str]:
    if not attributes:
        return None
    project = attributes.get("Project", attributes.get("project"))
    return str(project) if project else None


def _in_folder(path: str, folder: str) -> bool:
    folder = folder.strip("/")
    return not folder or path.startswith(folder + "/")


async def collect_tasks(store) -> List[Task]:
    """
    Parse every document in the store into one task batch.

    Empty inline tasks are dropped. Ids are unique within the batch: a later
    task repeating an embedded id falls back to its ``path:line`` id.
    """
    resolve = _resolver(store)
    tasks: List[Task] = []
    seen: Set[str] = set()

    for handle in await store.list_documents():
        text = await store.read_document(handle.path)
        for task in parse_document(handle.path, text):
            if is_empty_task(task):
                continue
            if task.id in seen:
                fallback = f"{task.link}:{task.line}"
                log.warning("Duplicate task id %s in %s; using %s", task.id, handle.path, fallback)
                task.id = fallback
            seen.add(task.id)
            tasks.append(task)

        attributes = await store.get_attributes(handle)
        if is_note_task(attributes) and handle.path not in seen:
            seen.add(handle.path)
            tasks.append(parse_note(handle.path, attributes, resolve))

    log.info("Collected %d tasks", len(tasks))
    return tasks


async def scan_folder(store, folder: Optional[str] = None) -> List[Task]:
    """Inline tasks of the documents under ``folder`` (whole vault if None)."""
    tasks: List[Task] = []
    for handle in await store.list_documents():
        if folder and not _in_folder(handle.path, folder):
            continue
        text = await store.read_document(handle.path)
        parsed = [t for t in parse_document(handle.path, text) if not is_empty_task(t)]
        if not parsed:
            continue
        project = _project_of(await store.get_attributes(handle))
        for task in parsed:
            task.project = project
        tasks.extend(parsed)
    return tasks
