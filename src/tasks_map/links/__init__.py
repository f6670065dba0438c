from .codec import (
    DecodedLinks,
    LinkDialect,
    add_dependency,
    add_own_id,
    decode,
    dependency_ids,
    encode,
    link_id_for,
    remove_dependency,
    remove_own_id,
)
from .note_links import add_blocked_by, note_title, remove_blocked_by

__all__ = [
    "DecodedLinks",
    "LinkDialect",
    "add_dependency",
    "add_own_id",
    "decode",
    "dependency_ids",
    "encode",
    "link_id_for",
    "remove_dependency",
    "remove_own_id",
    "add_blocked_by",
    "note_title",
    "remove_blocked_by",
]
