import math

from knowcode import models
from knowcode.services import segments


def _test_with(segs: list[dict]) -> models.Test:
    return models.Test.model_validate({"id": 1, "speed_wpm": 20, "segments": segs})


SEGMENTS = [
    {"name": "intro", "start_time": 0, "end_time": 30},
    {"name": "copy", "start_time": 30, "end_time": 300, "enables_copy": True},
    {"name": "test", "start_time": 300, "end_time": None, "enables_questions": True},
]


def test_fallback_segment_covers_whole_audio() -> None:
    for test in (None, _test_with([])):
        active = segments.active_segments(test)
        assert len(active) == 1
        only = active[0]
        assert only.name == "Test"
        assert only.start == 0 and math.isinf(only.end)
        assert only.enables_copy and only.enables_questions


def test_current_segment_is_first_match() -> None:
    active = segments.active_segments(_test_with(SEGMENTS))
    assert segments.current_segment(active, 0).name == "intro"
    assert segments.current_segment(active, 29.9).name == "intro"
    assert segments.current_segment(active, 30).name == "copy"
    assert segments.current_segment(active, 10_000).name == "test"


def test_current_segment_falls_back_to_first() -> None:
    active = segments.active_segments(
        _test_with(
            [
                {"name": "copy", "start_time": 10, "end_time": 20},
                {"name": "test", "start_time": 30, "end_time": 40},
            ]
        )
    )
    assert segments.current_segment(active, 5).name == "copy"
    assert segments.current_segment(active, 25).name == "copy"
    assert segments.current_segment(active, 45).name == "copy"


def test_overlapping_segments_prefer_earlier_entry() -> None:
    active = segments.active_segments(
        _test_with(
            [
                {"name": "a", "start_time": 0, "end_time": 100},
                {"name": "b", "start_time": 50, "end_time": 150},
            ]
        )
    )
    assert segments.current_segment(active, 75).name == "a"


def test_section_visibility_follows_segment_until_audio_ends() -> None:
    active = segments.active_segments(_test_with(SEGMENTS))
    assert segments.section_visibility(active, 10, audio_played=False) == (False, False)
    assert segments.section_visibility(active, 100, audio_played=False) == (True, False)
    assert segments.section_visibility(active, 400, audio_played=False) == (False, True)
    assert segments.section_visibility(active, 10, audio_played=True) == (True, True)


def test_timeline_uses_fallback_duration() -> None:
    active = segments.active_segments(_test_with(SEGMENTS))
    bars = segments.timeline(active, 60, None)
    assert [b["name"] for b in bars] == ["intro", "copy", "test"]
    assert math.isclose(sum(b["width_percent"] for b in bars), 100)
    assert math.isclose(bars[2]["width_percent"], (531 - 300) / 531 * 100)
    assert [b["state"] for b in bars] == ["past", "current", "future"]
    assert math.isclose(bars[1]["fill_percent"], 30 / 270 * 100)
    assert bars[0]["title"] == "intro: 0:00 - 0:30"


def test_parse_time_to_seconds() -> None:
    assert segments.parse_time_to_seconds("1:30") == 90
    assert segments.parse_time_to_seconds("0:05") == 5
    assert segments.parse_time_to_seconds("45") == 45
    assert segments.parse_time_to_seconds("12.5") == 12.5
    assert segments.parse_time_to_seconds(":30") == 30
    assert segments.parse_time_to_seconds("abc") == 0
    assert segments.parse_time_to_seconds("") is None
    assert segments.parse_time_to_seconds("   ") is None
    assert segments.parse_time_to_seconds(None) is None


def test_format_seconds_to_time() -> None:
    assert segments.format_seconds_to_time(None) == ""
    assert segments.format_seconds_to_time(0) == "0:00"
    assert segments.format_seconds_to_time(90) == "1:30"
    assert segments.format_seconds_to_time(605) == "10:05"


def test_preview_duration() -> None:
    assert segments.preview_duration([]) == 600
    segs = [models.Segment.model_validate(s) for s in SEGMENTS]
    assert segments.preview_duration(segs) == 300
    bars = segments.preview_bars(segs)
    assert bars[-1]["title"] == "test: 5:00 - end"


def test_segment_color() -> None:
    assert segments.segment_color("Intro") == "bg-amber-600"
    assert segments.segment_color("test") == "bg-green-600"
    assert segments.segment_color("mystery") == "bg-gray-500"
