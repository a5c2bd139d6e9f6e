"""Request bodies accepted by this front's own routes."""
from typing import Literal

from pydantic import BaseModel, Field

from knowcode.models.base import Identifier


class CallsignRequest(BaseModel):
    callsign: str = ""


class StartRequest(BaseModel):
    test_id: Identifier


class AudioEvent(BaseModel):
    """Player event reported by the browser."""

    event: Literal["play", "pause", "loaded", "timeupdate", "ended"]
    current_time: float = 0
    duration: float | None = None


class AnswerRequest(BaseModel):
    option: str


class CopyRequest(BaseModel):
    text: str = ""


class NavigateRequest(BaseModel):
    page: str


class PageRequest(BaseModel):
    page: int = Field(1, ge=1)


class ReachedOutFilter(BaseModel):
    reached_out: bool | None = None


class AttemptFiltersRequest(BaseModel):
    passed: bool | None = None
    callsign: str = ""
    date_from: str = ""
    date_to: str = ""


class SearchRequest(BaseModel):
    query: str = ""


class SegmentForm(BaseModel):
    """Segment editor form; times are ``mm:ss`` or seconds."""

    name: str = Field(..., min_length=1)
    start_time: str | float | None = None
    end_time: str | float | None = None
    enables_copy: bool = False
    enables_questions: bool = False
