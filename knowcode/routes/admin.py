"""Admin portal endpoints. Every route except login takes the upstream bearer token."""
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, HTTPException, status

from knowcode.client import ApiError, Transport, login
from knowcode.dependencies.sessions import admin_portals, get_portal, get_transport
from knowcode.models import EmailTemplate, LoginRequest, QuestionInput, RejectRequest
from knowcode.models.views import (
    AttemptFiltersRequest,
    NavigateRequest,
    PageRequest,
    ReachedOutFilter,
    SearchRequest,
    SegmentForm,
)
from knowcode.routes.errors import http_errors
from knowcode.services.admin_portal import AdminPortal
from knowcode.services.admin_router import AdminPage
from knowcode.services.editors import QuestionEditBuffer, SegmentEditBuffer, segment_from_form

router = APIRouter(prefix="/admin", tags=["admin"])

Portal = Annotated[AdminPortal, Depends(get_portal)]


def _act(
    portal: AdminPortal, page: AdminPage | None, action: Callable[[], object]
) -> dict[str, object]:
    """Run ``action`` on ``page`` (or any page) and return the portal view."""
    with portal.lock, http_errors():
        if page is not None and portal.router.page is not page:
            raise HTTPException(status_code=409, detail=f"Not on the {page.value} page")
        portal.run(action)
        return portal.snapshot()


def _segment_editor(portal: AdminPortal) -> SegmentEditBuffer:
    editor = portal.tests.segment_editor
    if editor is None:
        raise HTTPException(status_code=409, detail="No segment editor open")
    return editor


def _question_editor(portal: AdminPortal) -> QuestionEditBuffer:
    editor = portal.tests.question_editor
    if editor is None:
        raise HTTPException(status_code=409, detail="No question editor open")
    return editor


@router.post("/login")
def admin_login(
    payload: LoginRequest, transport: Annotated[Transport, Depends(get_transport)]
) -> dict[str, object]:
    """Log in upstream and open a portal on the dashboard."""
    try:
        session = login(payload.username, payload.password, transport)
    except ApiError as exc:
        code = status.HTTP_401_UNAUTHORIZED if exc.status_code in (400, 401, 403) else 502
        raise HTTPException(status_code=code, detail=exc.message) from exc

    portal = AdminPortal(session, transport)
    admin_portals.add(session.token, portal)
    with portal.lock, http_errors():
        portal.navigate(AdminPage.DASHBOARD)
        return {
            "token": session.token,
            "expires_at": session.expires_at.isoformat() if session.expires_at else None,
            "view": portal.snapshot(),
        }


@router.post("/logout", status_code=204)
def admin_logout(portal: Portal) -> None:
    token = portal.session.token
    with portal.lock:
        portal.logout()
    admin_portals.remove(token)


@router.get("/view")
def get_view(portal: Portal) -> dict[str, object]:
    with portal.lock:
        return portal.snapshot()


@router.post("/navigate")
def navigate(portal: Portal, payload: NavigateRequest) -> dict[str, object]:
    return _act(portal, None, lambda: portal.navigate(payload.page))


@router.get("/toasts")
def list_toasts(portal: Portal) -> list[dict[str, object]]:
    with portal.lock:
        return [t.to_dict() for t in portal.toasts.active()]


@router.delete("/toasts/{toast_id}", status_code=204)
def dismiss_toast(portal: Portal, toast_id: int) -> None:
    with portal.lock:
        portal.toasts.dismiss(toast_id)


# Dashboard


@router.post("/dashboard/refresh")
def refresh_dashboard(portal: Portal) -> dict[str, object]:
    """Manual retry after a failed stats load."""
    return _act(portal, AdminPage.DASHBOARD, portal.dashboard.refresh)


# Queue


@router.post("/queue/refresh")
def refresh_queue(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.QUEUE, portal.queue.refresh)


@router.post("/queue/{attempt_id}/approve")
def approve(portal: Portal, attempt_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.QUEUE, lambda: portal.queue.approve(attempt_id))


@router.post("/queue/{attempt_id}/reject")
def reject(portal: Portal, attempt_id: str, payload: RejectRequest) -> dict[str, object]:
    return _act(portal, AdminPage.QUEUE, lambda: portal.queue.reject(attempt_id, payload.note))


@router.post("/queue/history/{callsign}")
def toggle_history(portal: Portal, callsign: str) -> dict[str, object]:
    return _act(portal, AdminPage.QUEUE, lambda: portal.queue.toggle_history(callsign))


# Approved


@router.post("/approved/page")
def approved_page(portal: Portal, payload: PageRequest) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, lambda: portal.approved.refresh(payload.page))


@router.put("/approved/filter")
def approved_filter(portal: Portal, payload: ReachedOutFilter) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, lambda: portal.approved.set_filter(payload.reached_out))


@router.post("/approved/select/{item_id}")
def toggle_select(portal: Portal, item_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, lambda: portal.approved.toggle_select(item_id))


@router.post("/approved/select-all")
def toggle_select_all(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, portal.approved.toggle_select_all)


@router.post("/approved/mark-reached-out")
def mark_reached_out(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, portal.approved.mark_reached_out)


@router.post("/approved/{member_id}/email")
def generate_email(portal: Portal, member_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, lambda: portal.approved.generate_email(member_id))


@router.delete("/approved/email")
def close_email(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.APPROVED, portal.approved.close_email)


# All attempts


@router.post("/attempts/page")
def attempts_page(portal: Portal, payload: PageRequest) -> dict[str, object]:
    return _act(portal, AdminPage.ATTEMPTS, lambda: portal.attempts.refresh(payload.page))


@router.put("/attempts/filters")
def attempts_filters(portal: Portal, payload: AttemptFiltersRequest) -> dict[str, object]:
    return _act(
        portal, AdminPage.ATTEMPTS, lambda: portal.attempts.set_filters(**payload.model_dump())
    )


@router.post("/attempts/{attempt_id}/toggle")
def toggle_attempt(portal: Portal, attempt_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.ATTEMPTS, lambda: portal.attempts.toggle_expanded(attempt_id))


# Search


@router.post("/search")
def search(portal: Portal, payload: SearchRequest) -> dict[str, object]:
    return _act(portal, AdminPage.SEARCH, lambda: portal.search.search(payload.query))


@router.post("/search/{attempt_id}/approve")
def search_approve(portal: Portal, attempt_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.SEARCH, lambda: portal.search.approve(attempt_id))


@router.post("/search/{attempt_id}/reject")
def search_reject(portal: Portal, attempt_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.SEARCH, lambda: portal.search.reject(attempt_id))


# Tests, segments and questions


@router.post("/tests/{test_id}/toggle-active")
def toggle_active(portal: Portal, test_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: portal.tests.toggle_active(test_id))


@router.post("/tests/{test_id}/segments")
def open_segments(portal: Portal, test_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: portal.tests.open_segments(test_id))


@router.post("/segments")
def add_segment(portal: Portal, payload: SegmentForm) -> dict[str, object]:
    return _act(
        portal,
        AdminPage.TESTS,
        lambda: _segment_editor(portal).add(segment_from_form(**payload.model_dump())),
    )


@router.put("/segments/{index}")
def edit_segment(portal: Portal, index: int, payload: SegmentForm) -> dict[str, object]:
    return _act(
        portal,
        AdminPage.TESTS,
        lambda: _segment_editor(portal).edit(index, segment_from_form(**payload.model_dump())),
    )


@router.delete("/segments/{index}")
def delete_segment(portal: Portal, index: int) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: _segment_editor(portal).delete(index))


@router.post("/segments/save")
def save_segments(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, portal.tests.save_segments)


@router.post("/tests/{test_id}/questions")
def open_questions(portal: Portal, test_id: str) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: portal.tests.open_questions(test_id))


@router.post("/questions")
def add_question(portal: Portal, payload: QuestionInput) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: _question_editor(portal).add(payload))


@router.put("/questions/{index}")
def edit_question(portal: Portal, index: int, payload: QuestionInput) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: _question_editor(portal).edit(index, payload))


@router.delete("/questions/{index}")
def delete_question(portal: Portal, index: int) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: _question_editor(portal).delete(index))


@router.post("/questions/save")
def save_questions(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, lambda: _question_editor(portal).save_all())


@router.post("/editors/close")
def close_editors(portal: Portal) -> dict[str, object]:
    return _act(portal, AdminPage.TESTS, portal.tests.close_editors)


# Settings


@router.put("/email-template")
def save_email_template(portal: Portal, payload: EmailTemplate) -> dict[str, object]:
    return _act(
        portal,
        AdminPage.SETTINGS,
        lambda: portal.email_template.save(payload.subject, payload.template),
    )
