from .task_parser import (
    NOTE_STATUS_NAMES,
    STATUS_SYMBOLS,
    RawTask,
    is_empty_task,
    is_note_task,
    parse,
    parse_checklist_line,
    parse_document,
    parse_inline,
    parse_note,
)
from .scanner import collect_tasks, scan_folder

__all__ = [
    "NOTE_STATUS_NAMES",
    "STATUS_SYMBOLS",
    "RawTask",
    "is_empty_task",
    "is_note_task",
    "parse",
    "parse_checklist_line",
    "parse_document",
    "parse_inline",
    "parse_note",
    "collect_tasks",
    "scan_folder",
]
