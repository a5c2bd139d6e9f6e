"""Test manager plus the segment and question editors.

Both editors keep changes in memory until "Save All"; nothing is sent to the
exam API while the administrator adds, edits or deletes entries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from knowcode.client import AdminClient, ApiError, SessionExpired
from knowcode.models import AdminQuestion, QuestionInput, Segment, Test, TestUpdate
from knowcode.models.base import Identifier
from knowcode.services import segments as segment_utils

log = logging.getLogger(__name__)


def segment_from_form(
    name: str,
    start_time: object,
    end_time: object,
    enables_copy: bool = False,
    enables_questions: bool = False,
) -> Segment:
    """Build a segment from editor inputs (``mm:ss`` or seconds)."""
    return Segment(
        name=name.strip(),
        start_time=segment_utils.parse_time_to_seconds(start_time) or 0,
        end_time=segment_utils.parse_time_to_seconds(end_time),
        enables_copy=enables_copy,
        enables_questions=enables_questions,
    )


def _check_index(items: list, index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"No entry at index {index}")


class SegmentEditBuffer:
    def __init__(self, client: AdminClient, test_id: Identifier, segments: list[Segment]):
        self.client = client
        self.test_id = test_id
        self.segments = [seg.model_copy() for seg in segments]
        self.error: str | None = None
        self.saved = False

    def add(self, segment: Segment) -> None:
        self.segments.append(segment)

    def edit(self, index: int, segment: Segment) -> None:
        _check_index(self.segments, index)
        self.segments[index] = segment

    def delete(self, index: int) -> None:
        _check_index(self.segments, index)
        del self.segments[index]

    def sorted_entries(self) -> list[tuple[int, Segment]]:
        """Segments by start time, each with its index in the buffer."""
        return sorted(enumerate(self.segments), key=lambda pair: pair[1].start_time or 0)

    def timeline_preview(self) -> dict[str, object]:
        return {
            "duration": segment_utils.preview_duration(self.segments),
            "bars": segment_utils.preview_bars(self.segments),
        }

    def save_all(self) -> bool:
        self.error = None
        try:
            self.client.update_test(self.test_id, TestUpdate(segments=self.segments))
        except SessionExpired:
            raise
        except ApiError as exc:
            self.error = exc.message or "Failed to save segments"
            return False
        self.saved = True
        log.info("Saved %d segments for test %s", len(self.segments), self.test_id)
        return True

    def snapshot(self) -> dict[str, object]:
        return {
            "test_id": self.test_id,
            "error": self.error,
            "entries": [
                {
                    "index": index,
                    **seg.model_dump(mode="json"),
                    "start": segment_utils.format_seconds_to_time(seg.start_time or 0),
                    "end": (
                        segment_utils.format_seconds_to_time(seg.end_time)
                        if seg.end_time is not None
                        else "end"
                    ),
                    "color": segment_utils.segment_color(seg.name),
                }
                for index, seg in self.sorted_entries()
            ],
            "timeline": self.timeline_preview(),
        }


def _as_input(question: AdminQuestion) -> QuestionInput:
    return QuestionInput.model_validate(question.model_dump())


@dataclass
class QuestionEntry:
    """Buffered question; ``id`` is ``None`` until the question is created upstream."""

    id: Identifier | None
    data: QuestionInput


class QuestionEditBuffer:
    def __init__(self, client: AdminClient, test_id: Identifier):
        self.client = client
        self.test_id = test_id
        self.entries: list[QuestionEntry] = []
        self._loaded: dict[str, QuestionEntry] = {}
        self.error: str | None = None

    def load(self) -> None:
        try:
            questions = self.client.questions(self.test_id)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.error = exc.message
            return
        self.error = None
        self.entries = [QuestionEntry(q.id, _as_input(q)) for q in questions]
        self._loaded = {str(e.id): QuestionEntry(e.id, e.data) for e in self.entries}

    def add(self, data: QuestionInput) -> None:
        self.entries.append(QuestionEntry(None, data))

    def edit(self, index: int, data: QuestionInput) -> None:
        _check_index(self.entries, index)
        self.entries[index] = QuestionEntry(self.entries[index].id, data)

    def delete(self, index: int) -> None:
        _check_index(self.entries, index)
        del self.entries[index]

    def pending_changes(self) -> tuple[list[Identifier], list[QuestionInput], list[QuestionEntry]]:
        """``(deleted ids, created, updated)`` relative to the last load."""
        kept = {str(e.id) for e in self.entries if e.id is not None}
        deleted = [entry.id for key, entry in self._loaded.items() if key not in kept]
        created = [e.data for e in self.entries if e.id is None]
        updated = [
            e
            for e in self.entries
            if e.id is not None and self._loaded.get(str(e.id), e).data != e.data
        ]
        return deleted, created, updated

    @property
    def dirty(self) -> bool:
        return any(self.pending_changes())

    def save_all(self) -> bool:
        """Persist the difference from the loaded set, then reload.

        After a partial failure the buffer is reloaded and the changes that
        were not sent are applied again, so a retry sends only those.
        """
        deleted, created, updated = self.pending_changes()
        steps: list[tuple[str, Identifier | None, QuestionInput | None]] = (
            [("delete", question_id, None) for question_id in deleted]
            + [("create", None, data) for data in created]
            + [("update", entry.id, entry.data) for entry in updated]
        )
        self.error = None
        for sent, (action, question_id, data) in enumerate(steps):
            try:
                if action == "delete":
                    self.client.delete_question(question_id)
                elif action == "create":
                    self.client.create_question(self.test_id, data)
                else:
                    self.client.update_question(question_id, data)
            except SessionExpired:
                raise
            except ApiError as exc:
                log.warning(
                    "Saving questions for test %s failed after %d of %d changes: %s",
                    self.test_id,
                    sent,
                    len(steps),
                    exc.message,
                )
                if sent:
                    self._reload_with(steps[sent:])
                self.error = exc.message
                return False
        log.info(
            "Saved questions for test %s: %d deleted, %d created, %d updated",
            self.test_id,
            len(deleted),
            len(created),
            len(updated),
        )
        self.load()
        return self.error is None

    def _reload_with(
        self, unsent: list[tuple[str, Identifier | None, QuestionInput | None]]
    ) -> None:
        self.load()
        for action, question_id, data in unsent:
            if action == "create":
                self.add(data)
                continue
            for index, entry in enumerate(self.entries):
                if str(entry.id) != str(question_id):
                    continue
                if action == "delete":
                    del self.entries[index]
                else:
                    self.entries[index] = QuestionEntry(entry.id, data)
                break

    def snapshot(self) -> dict[str, object]:
        ordered = sorted(enumerate(self.entries), key=lambda pair: pair[1].data.question_number)
        return {
            "test_id": self.test_id,
            "error": self.error,
            "dirty": self.dirty,
            "entries": [
                {"index": index, "id": entry.id, **entry.data.model_dump()}
                for index, entry in ordered
            ],
        }


class TestManager:
    """Lists exams and opens the segment or question editor for one of them."""

    __test__ = False

    def __init__(self, client: AdminClient):
        self.client = client
        self.tests: list[Test] = []
        self.error: str | None = None
        self.segment_editor: SegmentEditBuffer | None = None
        self.question_editor: QuestionEditBuffer | None = None

    def refresh(self) -> None:
        try:
            self.tests = self.client.tests()
        except SessionExpired:
            raise
        except ApiError as exc:
            self.error = exc.message
            return
        self.error = None

    def find(self, test_id: Identifier) -> Test:
        for test in self.tests:
            if str(test.id) == str(test_id):
                return test
        raise KeyError(test_id)

    def toggle_active(self, test_id: Identifier) -> None:
        test = self.find(test_id)
        try:
            self.client.update_test(test.id, TestUpdate(active=not test.active))
        except SessionExpired:
            raise
        except ApiError as exc:
            self.error = exc.message
            return
        self.refresh()

    def open_segments(self, test_id: Identifier) -> SegmentEditBuffer:
        test = self.find(test_id)
        self.segment_editor = SegmentEditBuffer(self.client, test.id, test.segments)
        return self.segment_editor

    def save_segments(self) -> bool:
        editor = self.segment_editor
        if editor is None:
            raise KeyError("segments")
        if not editor.save_all():
            return False
        self.segment_editor = None
        self.refresh()
        return True

    def open_questions(self, test_id: Identifier) -> QuestionEditBuffer:
        test = self.find(test_id)
        self.question_editor = QuestionEditBuffer(self.client, test.id)
        self.question_editor.load()
        return self.question_editor

    def close_editors(self) -> None:
        self.segment_editor = None
        self.question_editor = None

    def snapshot(self) -> dict[str, object]:
        return {
            "error": self.error,
            "tests": [t.model_dump(mode="json") for t in self.tests],
            "segment_editor": self.segment_editor.snapshot() if self.segment_editor else None,
            "question_editor": self.question_editor.snapshot() if self.question_editor else None,
        }
