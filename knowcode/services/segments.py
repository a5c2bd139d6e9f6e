"""Audio segments: which part of the exam is playing and what it unlocks."""
from __future__ import annotations

import math
from dataclasses import dataclass

from knowcode.config import DEFAULT_AUDIO_DURATION, SEGMENT_PREVIEW_DURATION
from knowcode.models import Segment, Test
from knowcode.utils.time_utils import format_clock

SEGMENT_COLORS = {
    "intro": "bg-amber-600",
    "outro": "bg-amber-600",
    "practice": "bg-amber-500",
    "copy": "bg-amber-500",
    "instructions": "bg-amber-400",
    "notes": "bg-amber-400",
    "test": "bg-green-600",
}
DEFAULT_SEGMENT_COLOR = "bg-gray-500"


def segment_color(name: str) -> str:
    return SEGMENT_COLORS.get(name.lower(), DEFAULT_SEGMENT_COLOR)


@dataclass(frozen=True)
class ActiveSegment:
    """Segment with its open end resolved to ``math.inf``."""

    name: str
    start: float
    end: float
    enables_copy: bool
    enables_questions: bool

    @property
    def color(self) -> str:
        return segment_color(self.name)

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end


FALLBACK_SEGMENT = ActiveSegment(
    name="Test", start=0, end=math.inf, enables_copy=True, enables_questions=True
)


def active_segments(test: Test | None) -> list[ActiveSegment]:
    """Segments of ``test``, or one segment covering the whole audio."""
    if test is None or not test.segments:
        return [FALLBACK_SEGMENT]
    return [
        ActiveSegment(
            name=seg.name,
            start=seg.start_time,
            end=math.inf if seg.end_time is None else seg.end_time,
            enables_copy=seg.enables_copy,
            enables_questions=seg.enables_questions,
        )
        for seg in test.segments
    ]


def current_segment(segments: list[ActiveSegment], t: float) -> ActiveSegment:
    """First segment containing ``t``; the first segment when none does."""
    for seg in segments:
        if seg.contains(t):
            return seg
    return segments[0]


def section_visibility(
    segments: list[ActiveSegment], t: float, audio_played: bool
) -> tuple[bool, bool]:
    """``(show_copy, show_questions)``; everything is shown once audio has ended."""
    seg = current_segment(segments, t)
    return seg.enables_copy or audio_played, seg.enables_questions or audio_played


def timeline(
    segments: list[ActiveSegment], current_time: float, duration: float | None
) -> list[dict[str, object]]:
    """Player timeline: one bar per segment sized as a share of the audio."""
    total = duration or DEFAULT_AUDIO_DURATION
    current = current_segment(segments, current_time)
    bars = []
    for seg in segments:
        end = total if math.isinf(seg.end) else seg.end
        length = end - seg.start
        is_current = seg.name == current.name
        fill = 0.0
        if is_current and length > 0:
            fill = (current_time - seg.start) / length * 100
        bars.append(
            {
                "name": seg.name,
                "color": seg.color,
                "width_percent": length / total * 100,
                "state": "current" if is_current else "past" if current_time >= end else "future",
                "fill_percent": fill,
                "title": f"{seg.name}: {format_clock(seg.start)} - {format_clock(end)}",
            }
        )
    return bars


def parse_time_to_seconds(value: object) -> float | None:
    """Editor time input: ``mm:ss`` or plain seconds. Blank means "unset"."""
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    if ":" in raw:
        minutes, _, rest = raw.partition(":")
        seconds = rest.split(":", 1)[0]
        return _leading_int(minutes) * 60 + _leading_int(seconds)
    try:
        parsed = float(raw)
    except ValueError:
        return 0
    return parsed if math.isfinite(parsed) else 0


def _leading_int(text: str) -> int:
    text = text.strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0


def format_seconds_to_time(seconds: float | None) -> str:
    """``M:SS`` for the editor; empty string when unset."""
    if seconds is None:
        return ""
    return f"{int(seconds // 60)}:{int(seconds % 60):02d}"


def preview_duration(segments: list[Segment]) -> float:
    """Timeline length for the segment editor preview."""
    longest = 0.0
    for seg in segments:
        end = seg.end_time if seg.end_time is not None else longest
        longest = max(longest, seg.start_time or 0, end)
    return longest or SEGMENT_PREVIEW_DURATION


def preview_bars(segments: list[Segment]) -> list[dict[str, object]]:
    """Editor preview bars, ordered by start time."""
    total = preview_duration(segments)
    bars = []
    for seg in sorted(segments, key=lambda s: s.start_time or 0):
        start = seg.start_time or 0
        end = seg.end_time if seg.end_time is not None else total
        bars.append(
            {
                "name": seg.name,
                "color": segment_color(seg.name),
                "left_percent": start / total * 100,
                "width_percent": (end - start) / total * 100,
                "title": "{}: {} - {}".format(
                    seg.name,
                    format_seconds_to_time(start),
                    format_seconds_to_time(end) if seg.end_time is not None else "end",
                ),
            }
        )
    return bars
