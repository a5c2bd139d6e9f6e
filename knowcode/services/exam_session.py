"""Exam flow for one visitor: pick a test, listen, copy, answer, submit."""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from enum import Enum

from knowcode.client import ApiError, PublicClient, SubmissionBlocked
from knowcode.config import COPY_PASS_HINT, QUESTIONS_PASS_HINT
from knowcode.models import (
    OPTIONS,
    AttemptRecord,
    LeaderboardEntry,
    Question,
    RosterEntry,
    Stats,
    Submission,
    SubmissionResult,
    Test,
)
from knowcode.models.base import Identifier
from knowcode.services import segments
from knowcode.services.certificate import timestamp_code
from knowcode.utils.time_utils import format_clock, format_long_date, utc_now

log = logging.getLogger(__name__)


class ExamView(str, Enum):
    HOME = "home"
    SELECT = "select"
    TEST = "test"
    RESULTS = "results"
    BLOCKED = "blocked"
    CERTIFICATE = "certificate"
    LEADERBOARD = "leaderboard"
    ROSTER = "roster"


_BROWSE = {ExamView.LEADERBOARD, ExamView.ROSTER}

TRANSITIONS: dict[ExamView, frozenset[ExamView]] = {
    ExamView.HOME: frozenset({ExamView.SELECT, *_BROWSE}),
    ExamView.SELECT: frozenset({ExamView.HOME, ExamView.TEST, *_BROWSE}),
    ExamView.TEST: frozenset({ExamView.SELECT, ExamView.RESULTS, ExamView.BLOCKED}),
    ExamView.RESULTS: frozenset({ExamView.CERTIFICATE, ExamView.SELECT, *_BROWSE}),
    ExamView.BLOCKED: frozenset({ExamView.HOME}),
    ExamView.CERTIFICATE: frozenset({ExamView.SELECT}),
    ExamView.LEADERBOARD: frozenset({ExamView.HOME, ExamView.SELECT, *_BROWSE}),
    ExamView.ROSTER: frozenset({ExamView.HOME, ExamView.SELECT, *_BROWSE}),
}


class ExamFlowError(ValueError):
    """Operation not allowed in the current view or state."""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ModalKind(str, Enum):
    START = "start"
    ABANDON = "abandon"


@dataclass(frozen=True)
class ExamModal:
    kind: ModalKind
    title: str
    message: str
    confirm_text: str
    cancel_text: str
    test_id: Identifier | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.kind.value,
            "title": self.title,
            "message": self.message,
            "confirm_text": self.confirm_text,
            "cancel_text": self.cancel_text,
            "test_id": self.test_id,
        }


def start_modal(test_id: Identifier) -> ExamModal:
    return ExamModal(
        kind=ModalKind.START,
        title="Begin Examination",
        message=(
            "Are you sure you want to start the test?\n\n"
            "You may only attempt this examination once per day. "
            "Once you begin, abandoning the test will count as a failed attempt."
        ),
        confirm_text="Start Test",
        cancel_text="Go Back",
        test_id=test_id,
    )


def abandon_modal() -> ExamModal:
    return ExamModal(
        kind=ModalKind.ABANDON,
        title="Abandon Test?",
        message=(
            "Are you sure you want to abandon this test?\n\n"
            "You may only attempt the test once per day. "
            "If you abandon now, you won't be able to try again until tomorrow."
        ),
        confirm_text="Abandon Test",
        cancel_text="Continue Test",
    )


def copy_char_count(text: str) -> int:
    """Copied characters, whitespace excluded."""
    return sum(1 for ch in text if not ch.isspace())


def describe_pass_reason(reason: str | None) -> str | None:
    return {"both": "Questions & Copy", "questions": "Questions", "copy": "Copy"}.get(
        reason or ""
    )


class ExamSession:
    """State machine behind the exam pages.

    Every public method is called with :attr:`lock` held by the route layer,
    so one visitor's requests never interleave.
    """

    def __init__(self, client: PublicClient, session_id: str | None = None):
        self.id = session_id or uuid.uuid4().hex
        self.client = client
        self.lock = threading.RLock()
        self.last_seen = utc_now()

        self.view = ExamView.HOME
        self.callsign = ""
        self.modal: ExamModal | None = None
        self.tests: list[Test] = []
        self.error: str | None = None

        self.current_test: Test | None = None
        self.questions: list[Question] = []
        self.answers: dict[str, str] = {}
        self.copy_text = ""
        self.test_complete = False

        self.is_playing = False
        self.audio_played = False
        self.audio_progress = 0.0
        self.audio_current_time = 0.0
        self.audio_duration = 0.0

        self.result: SubmissionResult | None = None
        self.certificate_number: str | None = None
        self.blocked_message: str | None = None

        self.leaderboard: list[LeaderboardEntry] = []
        self.stats: Stats | None = None
        self.roster: list[RosterEntry] = []

    def touch(self) -> None:
        self.last_seen = utc_now()

    # Navigation

    def _go(self, target: ExamView) -> None:
        if target not in TRANSITIONS[self.view]:
            raise ExamFlowError(f"Cannot go from {self.view.value} to {target.value}")
        log.debug("Exam session %s: %s -> %s", self.id, self.view.value, target.value)
        self.view = target
        self.error = None

    def _require(self, *views: ExamView) -> None:
        if self.view not in views:
            raise ExamFlowError(f"Not available on the {self.view.value} page")

    def load_tests(self) -> list[Test]:
        self.tests = self.client.list_tests()
        return self.tests

    def begin(self) -> None:
        """Open test selection (``Begin`` on home, ``Take the test`` elsewhere)."""
        self._go(ExamView.SELECT)
        try:
            self.load_tests()
        except ApiError as exc:
            log.warning("Failed to fetch tests: %s", exc.message)
            self.error = exc.message

    def go_home(self) -> None:
        self._go(ExamView.HOME)
        self.modal = None

    def show_leaderboard(self) -> None:
        self._go(ExamView.LEADERBOARD)
        try:
            self.leaderboard = self.client.leaderboard()
            self.stats = self.client.stats()
        except ApiError as exc:
            log.warning("Failed to fetch leaderboard: %s", exc.message)
            self.error = exc.message

    def show_roster(self) -> None:
        self._go(ExamView.ROSTER)
        try:
            self.roster = self.client.roster()
        except ApiError as exc:
            log.warning("Failed to fetch roster: %s", exc.message)
            self.error = exc.message

    def set_callsign(self, callsign: str) -> None:
        self._require(ExamView.HOME, ExamView.SELECT)
        self.callsign = callsign

    # Starting and abandoning

    def request_start(self, test_id: Identifier) -> ExamModal:
        self._require(ExamView.SELECT)
        if not self.callsign.strip():
            raise ExamFlowError("Please enter your callsign", status_code=400)
        if self._find_test(test_id) is None:
            raise ExamFlowError("Test not found", status_code=404)
        self.modal = start_modal(test_id)
        return self.modal

    def request_abandon(self) -> ExamModal:
        self._require(ExamView.TEST)
        if self.test_complete:
            raise ExamFlowError("Test already submitted")
        self.modal = abandon_modal()
        return self.modal

    def cancel_modal(self) -> None:
        self.modal = None

    def confirm_modal(self) -> None:
        modal = self.modal
        if modal is None:
            raise ExamFlowError("Nothing to confirm")
        self.modal = None
        if modal.kind is ModalKind.START:
            self._start_test(modal.test_id)
        else:
            self._abandon()

    def _find_test(self, test_id: Identifier) -> Test | None:
        if not self.tests:
            self.load_tests()
        for test in self.tests:
            if str(test.id) == str(test_id):
                return test
        return None

    def _start_test(self, test_id: Identifier) -> None:
        self._require(ExamView.SELECT)
        test = self._find_test(test_id)
        if test is None:
            raise ExamFlowError("Test not found", status_code=404)
        questions = self.client.get_questions(test.id)

        self.current_test = test
        self.questions = questions
        self._reset_attempt()
        self._go(ExamView.TEST)
        log.info("Exam session %s started test %s", self.id, test.id)

    def _reset_attempt(self) -> None:
        self.answers = {}
        self.copy_text = ""
        self.test_complete = False
        self.result = None
        self.certificate_number = None
        self.is_playing = False
        self.audio_played = False
        self.audio_progress = 0.0
        self.audio_current_time = 0.0
        self.audio_duration = 0.0

    def _abandon(self) -> None:
        self._require(ExamView.TEST)
        test = self.current_test
        if test is not None:
            record = AttemptRecord(
                callsign=self.callsign,
                test_speed=test.speed_wpm,
                questions_correct=0,
                copy_chars=0,
                passed=False,
                audio_progress=self.audio_progress,
            )
            try:
                self.client.record_attempt(record)
            except ApiError as exc:
                log.warning("Failed to record abandoned attempt: %s", exc.message)
        self.is_playing = False
        self._go(ExamView.SELECT)

    # Audio player

    def play(self) -> None:
        self._require(ExamView.TEST)
        if not self.audio_played:
            self.is_playing = True

    def pause(self) -> None:
        self._require(ExamView.TEST)
        if not self.audio_played:
            self.is_playing = False

    def loaded_metadata(self, duration: float) -> None:
        self._require(ExamView.TEST)
        self.audio_duration = duration or 0.0

    def time_update(self, current_time: float, duration: float | None = None) -> None:
        self._require(ExamView.TEST)
        if duration:
            self.audio_duration = duration
        self.audio_current_time = current_time
        if self.audio_duration:
            self.audio_progress = current_time / self.audio_duration * 100
        else:
            self.audio_progress = 0.0

    def ended(self) -> None:
        self._require(ExamView.TEST)
        self.is_playing = False
        self.audio_played = True

    @property
    def active_segments(self) -> list[segments.ActiveSegment]:
        return segments.active_segments(self.current_test)

    @property
    def current_segment(self) -> segments.ActiveSegment:
        return segments.current_segment(self.active_segments, self.audio_current_time)

    @property
    def show_copy_section(self) -> bool:
        return self.current_segment.enables_copy or self.audio_played

    @property
    def show_questions_section(self) -> bool:
        return self.current_segment.enables_questions or self.audio_played

    # Answering

    def answer(self, question_id: Identifier, option: str) -> None:
        self._require(ExamView.TEST)
        if self.test_complete:
            raise ExamFlowError("Test already submitted")
        option = (option or "").strip().upper()
        if option not in OPTIONS:
            raise ExamFlowError("Invalid option", status_code=400)
        key = str(question_id)
        if key not in {str(q.id) for q in self.questions}:
            raise ExamFlowError("Unknown question", status_code=400)
        self.answers[key] = option

    def set_copy_text(self, text: str) -> None:
        self._require(ExamView.TEST)
        if self.test_complete:
            raise ExamFlowError("Test already submitted")
        self.copy_text = text

    @property
    def can_submit(self) -> bool:
        """Audio has finished and every fetched question has exactly one answer."""
        if not self.audio_played:
            return False
        question_ids = {str(q.id) for q in self.questions}
        return set(self.answers) == question_ids and len(self.answers) == len(self.questions)

    def submit(self) -> SubmissionResult | None:
        """Send the attempt. A 400 means the callsign is blocked, not an error."""
        self._require(ExamView.TEST)
        if self.test_complete:
            raise ExamFlowError("Test already submitted")
        if not self.can_submit:
            raise ExamFlowError("Finish the audio and answer every question first")
        callsign = self.callsign.strip().upper()
        if not callsign:
            raise ExamFlowError("Please enter your callsign", status_code=400)

        submission = Submission(
            callsign=callsign,
            answers=dict(self.answers),
            copy_text=self.copy_text or None,
            audio_progress=self.audio_progress,
        )
        try:
            result = self.client.submit(self.current_test.id, submission)
        except SubmissionBlocked as exc:
            log.info("Submission for %s blocked: %s", callsign, exc.message)
            self.blocked_message = exc.message
            self._go(ExamView.BLOCKED)
            return None

        self.result = result
        self.test_complete = True
        if result.certificate_id is not None:
            self.certificate_number = str(result.certificate_id)
        self._go(ExamView.RESULTS)
        log.info(
            "Exam session %s submitted: passed=%s reason=%s",
            self.id,
            result.passed,
            result.pass_reason,
        )
        return result

    # Results

    @property
    def score(self) -> dict[str, object] | None:
        if self.result is None:
            return None
        consecutive = self.result.consecutive_correct or 0
        return {
            "correct": self.result.score,
            "total": len(self.questions),
            "copy_chars": copy_char_count(self.copy_text),
            "consecutive_correct": consecutive,
            "questions_hint": self.result.score >= QUESTIONS_PASS_HINT,
            "copy_hint": consecutive >= COPY_PASS_HINT,
        }

    def show_certificate(self) -> None:
        self._require(ExamView.RESULTS)
        if self.result is None or not self.result.passed:
            raise ExamFlowError("Certificate is only available for a passing result")
        if not self.certificate_number:
            self.certificate_number = f"{self.current_test.id}-{timestamp_code()}"
        self._go(ExamView.CERTIFICATE)

    def try_again(self) -> None:
        self._require(ExamView.RESULTS, ExamView.CERTIFICATE)
        self._go(ExamView.SELECT)
        self.current_test = None
        self.questions = []
        self._reset_attempt()

    # View model

    def snapshot(self) -> dict[str, object]:
        data: dict[str, object] = {
            "session_id": self.id,
            "view": self.view.value,
            "callsign": self.callsign,
            "modal": self.modal.to_dict() if self.modal else None,
            "error": self.error,
        }
        if self.view is ExamView.SELECT:
            data["tests"] = [t.model_dump(mode="json") for t in self.tests]
        elif self.view is ExamView.TEST:
            data.update(self._test_view())
        elif self.view is ExamView.RESULTS:
            data.update(self._results_view())
        elif self.view is ExamView.BLOCKED:
            data["blocked_message"] = self.blocked_message
        elif self.view is ExamView.CERTIFICATE:
            data["certificate"] = {
                "callsign": self.callsign.strip().upper(),
                "certificate_number": self.certificate_number,
                "date": format_long_date(),
                "speed_wpm": self.current_test.speed_wpm if self.current_test else None,
            }
        elif self.view is ExamView.LEADERBOARD:
            data["leaderboard"] = [e.model_dump(mode="json") for e in self.leaderboard]
            data["stats"] = self.stats.model_dump(mode="json") if self.stats else None
        elif self.view is ExamView.ROSTER:
            data["roster"] = [e.model_dump(mode="json") for e in self.roster]
        return data

    def _test_view(self) -> dict[str, object]:
        segs = self.active_segments
        return {
            "test": self.current_test.model_dump(mode="json") if self.current_test else None,
            "questions": [q.model_dump(mode="json") for q in self.questions],
            "answers": dict(self.answers),
            "copy_text": self.copy_text,
            "audio": {
                "is_playing": self.is_playing,
                "played": self.audio_played,
                "progress": self.audio_progress,
                "current_time": self.audio_current_time,
                "duration": self.audio_duration,
                "clock": f"{format_clock(self.audio_current_time)} / {format_clock(self.audio_duration)}",
            },
            "current_segment": self.current_segment.name,
            "timeline": segments.timeline(segs, self.audio_current_time, self.audio_duration),
            "show_copy_section": self.show_copy_section,
            "show_questions_section": self.show_questions_section,
            "can_submit": self.can_submit,
        }

    def _results_view(self) -> dict[str, object]:
        result = self.result
        passed = bool(result and result.passed)
        return {
            "passed": passed,
            "score": self.score,
            "pass_reason": result.pass_reason if result else None,
            "pass_reason_label": describe_pass_reason(result.pass_reason) if passed else None,
            "verification_pending": passed,
            "correct_answers": result.correct_answers if passed and result else None,
            "answers": dict(self.answers),
            "questions": [q.model_dump(mode="json") for q in self.questions] if passed else [],
        }
