"""Exam flow endpoints."""
from typing import Annotated, Callable

from fastapi import APIRouter, Depends

from knowcode.client import PublicClient, Transport
from knowcode.dependencies.sessions import exam_sessions, get_exam_session, get_transport
from knowcode.models.views import (
    AnswerRequest,
    AudioEvent,
    CallsignRequest,
    CopyRequest,
    StartRequest,
)
from knowcode.routes.errors import http_errors
from knowcode.services.exam_session import ExamSession

router = APIRouter(prefix="/exam/sessions", tags=["exam"])

Session = Annotated[ExamSession, Depends(get_exam_session)]


def _act(session: ExamSession, action: Callable[[], object]) -> dict[str, object]:
    with session.lock, http_errors():
        action()
        return session.snapshot()


@router.post("", status_code=201)
def create_session(transport: Annotated[Transport, Depends(get_transport)]) -> dict[str, object]:
    """Start a visitor session on the home page."""
    session = ExamSession(PublicClient(transport))
    exam_sessions.add(session.id, session)
    return session.snapshot()


@router.get("/{session_id}")
def get_view(session: Session) -> dict[str, object]:
    with session.lock:
        return session.snapshot()


@router.delete("/{session_id}", status_code=204)
def end_session(session: Session) -> None:
    exam_sessions.remove(session.id)


@router.post("/{session_id}/begin")
def begin(session: Session) -> dict[str, object]:
    return _act(session, session.begin)


@router.post("/{session_id}/home")
def home(session: Session) -> dict[str, object]:
    return _act(session, session.go_home)


@router.post("/{session_id}/leaderboard")
def leaderboard(session: Session) -> dict[str, object]:
    return _act(session, session.show_leaderboard)


@router.post("/{session_id}/roster")
def roster(session: Session) -> dict[str, object]:
    return _act(session, session.show_roster)


@router.put("/{session_id}/callsign")
def set_callsign(session: Session, payload: CallsignRequest) -> dict[str, object]:
    return _act(session, lambda: session.set_callsign(payload.callsign))


@router.post("/{session_id}/start")
def request_start(session: Session, payload: StartRequest) -> dict[str, object]:
    """Open the start confirmation for a test."""
    return _act(session, lambda: session.request_start(payload.test_id))


@router.post("/{session_id}/abandon")
def request_abandon(session: Session) -> dict[str, object]:
    return _act(session, session.request_abandon)


@router.post("/{session_id}/modal/confirm")
def confirm_modal(session: Session) -> dict[str, object]:
    return _act(session, session.confirm_modal)


@router.post("/{session_id}/modal/cancel")
def cancel_modal(session: Session) -> dict[str, object]:
    return _act(session, session.cancel_modal)


@router.post("/{session_id}/audio")
def audio_event(session: Session, payload: AudioEvent) -> dict[str, object]:
    """Player events: play, pause, loaded, timeupdate, ended."""
    handlers = {
        "play": session.play,
        "pause": session.pause,
        "loaded": lambda: session.loaded_metadata(payload.duration or 0),
        "timeupdate": lambda: session.time_update(payload.current_time, payload.duration),
        "ended": session.ended,
    }
    return _act(session, handlers[payload.event])


@router.put("/{session_id}/answers/{question_id}")
def answer(session: Session, question_id: str, payload: AnswerRequest) -> dict[str, object]:
    return _act(session, lambda: session.answer(question_id, payload.option))


@router.put("/{session_id}/copy")
def set_copy(session: Session, payload: CopyRequest) -> dict[str, object]:
    return _act(session, lambda: session.set_copy_text(payload.text))


@router.post("/{session_id}/submit")
def submit(session: Session) -> dict[str, object]:
    """Submit answers and copy; a blocked callsign lands on the blocked page."""
    return _act(session, session.submit)


@router.post("/{session_id}/certificate")
def certificate(session: Session) -> dict[str, object]:
    return _act(session, session.show_certificate)


@router.post("/{session_id}/try-again")
def try_again(session: Session) -> dict[str, object]:
    return _act(session, session.try_again)
