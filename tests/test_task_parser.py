"""
Tests for parsers/task_parser.py.

Covers:
- parse_inline: status chars, priority, star, own id (both forms), tags,
  dependencies in every dialect, positional fallback id
- parse_document: checklist detection and line numbers
- parse_note: frontmatter status/tags/priority/starred and blockedBy resolution
- is_empty_task
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from tasks_map.models.task import Task
from tasks_map.parsers.task_parser import (
    RawTask,
    is_empty_task,
    is_note_task,
    parse,
    parse_document,
    parse_note,
)


def _inline(text: str, status: str = " ", line: int = 3) -> Task:
    return parse(RawTask(status=status, text=text, path="notes/a.md", line=line))


# ---------------------------------------------------------------------------
# Inline tasks
# ---------------------------------------------------------------------------

class TestInlineStatus:
    @pytest.mark.parametrize(
        "char,status",
        [(" ", "todo"), ("/", "in_progress"), ("-", "canceled"), ("x", "done"), ("X", "done")],
    )
    def test_status_chars(self, char, status):
        assert _inline("Do it", status=char).status == status

    def test_unknown_char_is_todo(self):
        assert _inline("Do it", status="?").status == "todo"


class TestInlineMarkers:
    def test_all_markers_in_one_line(self):
        task = _inline("Ship it ⏫ 🆔 abc123 ⛔ def456 #work ⭐")
        assert task.id == "abc123"
        assert task.type == "inline"
        assert task.priority == "⏫"
        assert task.starred is True
        assert task.tags == ["work"]
        assert task.incoming_links == ["def456"]
        assert task.summary == "Ship it"
        assert task.link == "notes/a.md"
        assert task.line == 3

    def test_marker_order_does_not_matter(self):
        a = _inline("Ship it ⏫ 🆔 abc123 ⛔ def456 #work ⭐")
        b = _inline("⭐ #work ⛔ def456 🆔 abc123 ⏫ Ship it")
        assert (a.id, a.priority, a.starred, a.tags, a.incoming_links) == (
            b.id, b.priority, b.starred, b.tags, b.incoming_links
        )

    def test_dataview_id_and_depends(self):
        task = _inline("Write [[id:: xyz789]] [[dependsOn:: aaa111, bbb222]]")
        assert task.id == "xyz789"
        assert task.incoming_links == ["aaa111", "bbb222"]
        assert task.summary == "Write"

    def test_csv_dependencies(self):
        task = _inline("Deploy ⛔ aaa111,bbb222")
        assert task.incoming_links == ["aaa111", "bbb222"]

    def test_individual_dependencies(self):
        task = _inline("Deploy ⛔ aaa111 ⛔ bbb222")
        assert task.incoming_links == ["aaa111", "bbb222"]

    def test_positional_id_without_embedded_id(self):
        task = _inline("Plain task", line=7)
        assert task.id == "notes/a.md:7"
        assert task.is_positional

    def test_no_priority(self):
        assert _inline("Plain task").priority == ""

    def test_low_priority(self):
        assert _inline("Later 🔽").priority == "🔽"

    def test_tags_inside_wikilinks_ignored(self):
        task = _inline("See [[Page#Section]] #real")
        assert task.tags == ["real"]

    def test_numeric_hash_is_not_a_tag(self):
        assert _inline("Fix issue #123 #bug").tags == ["bug"]

    def test_punctuated_tags(self):
        assert _inline("Learn #c++ #foo.bar #v1.2").tags == ["c++", "foo.bar", "v1.2"]

    def test_nested_tag(self):
        assert _inline("Call #area/home").tags == ["area/home"]

    def test_text_kept_verbatim(self):
        text = "Ship it ⏫ 🆔 abc123"
        assert _inline(text).text == text


class TestParseDocument:
    def test_finds_checklist_lines(self):
        content = "# Heading\n- [ ] One 🆔 aaa111\nprose\n  - [x] Two\n* [/] Three\n"
        tasks = parse_document("doc.md", content)
        assert [t.text for t in tasks] == ["One 🆔 aaa111", "Two", "Three"]
        assert tasks[0].id == "aaa111"
        assert tasks[1].id == "doc.md:3"
        assert tasks[1].status == "done"
        assert tasks[2].status == "in_progress"

    def test_plain_bullets_ignored(self):
        assert parse_document("doc.md", "- not a task\n- [link](x)\n") == []


# ---------------------------------------------------------------------------
# Note tasks
# ---------------------------------------------------------------------------

_PATHS = {"Outline": "projects/Outline.md", "Research": "Research.md"}


class TestParseNote:
    def test_frontmatter_fields(self):
        attrs = {
            "tags": ["task", "#writing"],
            "status": "in-progress",
            "priority": "High",
            "starred": True,
            "blockedBy": [
                {"uid": "[[Outline]]", "relation": "FINISHTOSTART"},
                "[[Research]]",
            ],
        }
        task = parse_note("projects/Write book.md", attrs, _PATHS.get)
        assert task.id == "projects/Write book.md"
        assert task.type == "note"
        assert task.text == "Write book"
        assert task.tags == ["task", "writing"]
        assert task.status == "in_progress"
        assert task.priority == "⏫"
        assert task.starred is True
        assert task.incoming_links == ["projects/Outline.md", "Research.md"]

    @pytest.mark.parametrize(
        "value,status",
        [("open", "todo"), ("in-progress", "in_progress"), ("done", "done"), ("canceled", "canceled"), (None, "todo")],
    )
    def test_status_names(self, value, status):
        assert parse_note("n.md", {"tags": ["task"], "status": value}).status == status

    @pytest.mark.parametrize(
        "value,priority",
        [("high", "⏫"), ("normal", ""), ("none", ""), ("low", "🔽"), (None, "")],
    )
    def test_priority_names(self, value, priority):
        assert parse_note("n.md", {"priority": value}).priority == priority

    def test_unresolved_blocked_by_dropped(self):
        task = parse_note("n.md", {"blockedBy": ["[[Missing]]"]}, _PATHS.get)
        assert task.incoming_links == []

    def test_depends_on_merged_without_duplicates(self):
        attrs = {"blockedBy": ["[[Research]]"], "dependsOn": ["[[Research]]", "other.md"]}
        task = parse_note("n.md", attrs, _PATHS.get)
        assert task.incoming_links == ["Research.md", "other.md"]

    def test_starred_must_be_bool(self):
        assert parse_note("n.md", {"starred": "yes"}).starred is False

    def test_parse_with_note_kind(self):
        raw = RawTask(status="", text="", path="a/b.md")
        task = parse(raw, "note", {"status": "done"})
        assert task.id == "a/b.md"
        assert task.status == "done"


class TestIsNoteTask:
    def test_task_tag(self):
        assert is_note_task({"tags": ["project", "task"]})
        assert is_note_task({"tags": ["#task"]})
        assert is_note_task({"tags": "task"})

    def test_other(self):
        assert not is_note_task({"tags": ["project"]})
        assert not is_note_task(None)
        assert not is_note_task({})


class TestIsEmptyTask:
    def test_markers_only(self):
        assert is_empty_task(_inline("🆔 abc123 ⭐ ⏫ #tag ⛔ def456"))

    def test_blank(self):
        assert is_empty_task(_inline("   "))

    def test_has_content(self):
        assert not is_empty_task(_inline("Real work #tag"))
