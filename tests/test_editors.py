import pytest

from knowcode import models
from knowcode.services.editors import QuestionEditBuffer, TestManager, segment_from_form

from conftest import FakeResponse

TESTS = [
    {
        "id": "t20",
        "title": "20 WPM",
        "speed_wpm": 20,
        "active": True,
        "segments": [
            {"name": "Intro", "start_time": 0, "end_time": 30},
            {"name": "Test", "start_time": 30, "end_time": None, "enables_copy": True, "enables_questions": True},
        ],
    }
]

QUESTIONS = [
    {
        "id": f"q{n}",
        "question_number": n,
        "question_text": f"Question {n}?",
        "option_a": "a",
        "option_b": "b",
        "option_c": "c",
        "option_d": "d",
        "correct_option": "B",
    }
    for n in (1, 2, 3)
]


@pytest.fixture
def manager(admin_client, fake_session) -> TestManager:
    fake_session.routes[("GET", "/api/admin/tests")] = lambda call: FakeResponse(payload=TESTS)
    manager = TestManager(admin_client)
    manager.refresh()
    return manager


def question(n: int, text: str) -> models.QuestionInput:
    return models.QuestionInput(
        question_number=n,
        question_text=text,
        option_a="a",
        option_b="b",
        option_c="c",
        option_d="d",
        correct_option="C",
    )


def test_segment_form_parses_times() -> None:
    seg = segment_from_form(" Copy ", "1:30", "", enables_copy=True)
    assert seg.name == "Copy"
    assert seg.start_time == 90
    assert seg.end_time is None


def test_segment_edits_stay_local_until_save(manager, fake_session) -> None:
    editor = manager.open_segments("t20")
    before = len(fake_session.calls)

    editor.add(segment_from_form("Outro", "8:00", "8:51"))
    editor.edit(0, segment_from_form("Intro", "0", "0:45"))
    editor.delete(1)

    assert len(fake_session.calls) == before
    assert [s.name for s in manager.tests[0].segments] == ["Intro", "Test"]
    with pytest.raises(IndexError):
        editor.delete(5)


def test_segment_save_sends_null_end_time(manager, fake_session) -> None:
    fake_session.routes[("PUT", "/api/admin/tests/t20")] = FakeResponse(payload={})
    manager.open_segments("t20")

    assert manager.save_segments()

    body = fake_session.calls[-2].json
    assert body == {
        "segments": [
            {"name": "Intro", "start_time": 0, "end_time": 30, "enables_copy": False, "enables_questions": False},
            {"name": "Test", "start_time": 30, "end_time": None, "enables_copy": True, "enables_questions": True},
        ]
    }
    assert fake_session.paths()[-1] == "/api/admin/tests"
    assert manager.segment_editor is None


def test_segment_save_failure_keeps_buffer(manager, fake_session) -> None:
    fake_session.routes[("PUT", "/api/admin/tests/t20")] = FakeResponse(500, text="")
    editor = manager.open_segments("t20")
    editor.add(segment_from_form("Outro", "8:00", ""))

    assert not manager.save_segments()

    assert manager.segment_editor is editor
    assert [s.name for s in editor.segments] == ["Intro", "Test", "Outro"]
    assert editor.snapshot()["error"] == "Failed to update test"


def test_segment_snapshot_sorted_by_start(manager) -> None:
    editor = manager.open_segments("t20")
    editor.add(segment_from_form("Warmup", "0:10", "0:20"))
    entries = editor.snapshot()["entries"]
    assert [(e["index"], e["name"]) for e in entries] == [(0, "Intro"), (2, "Warmup"), (1, "Test")]
    assert entries[-1]["end"] == "end"


def test_toggle_active(manager, fake_session) -> None:
    fake_session.routes[("PUT", "/api/admin/tests/t20")] = FakeResponse(payload={})
    manager.toggle_active("t20")
    assert fake_session.calls[-2].json == {"active": False}
    with pytest.raises(KeyError):
        manager.toggle_active("missing")


def test_question_save_diff(admin_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/tests/t20/questions")] = lambda call: FakeResponse(payload=QUESTIONS)
    for method, path in [
        ("DELETE", "/api/admin/questions/q2"),
        ("POST", "/api/admin/tests/t20/questions"),
        ("PUT", "/api/admin/questions/q3"),
    ]:
        fake_session.routes[(method, path)] = FakeResponse(payload={})

    buffer = QuestionEditBuffer(admin_client, "t20")
    buffer.load()
    assert not buffer.dirty

    buffer.edit(2, question(3, "Reworded?"))
    buffer.delete(1)
    buffer.add(question(4, "New one?"))
    assert buffer.dirty
    assert len(fake_session.calls) == 1

    assert buffer.save_all()

    assert [(c.method, c.path) for c in fake_session.calls[1:]] == [
        ("DELETE", "/api/admin/questions/q2"),
        ("POST", "/api/admin/tests/t20/questions"),
        ("PUT", "/api/admin/questions/q3"),
        ("GET", "/api/admin/tests/t20/questions"),
    ]
    assert fake_session.calls[2].json["question_text"] == "New one?"
    assert fake_session.calls[3].json["question_text"] == "Reworded?"


def test_question_save_failure_keeps_edits(admin_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/tests/t20/questions")] = FakeResponse(payload=QUESTIONS)
    fake_session.routes[("POST", "/api/admin/tests/t20/questions")] = FakeResponse(422, text="Duplicate number")
    buffer = QuestionEditBuffer(admin_client, "t20")
    buffer.load()
    buffer.add(question(1, "Clash?"))

    assert not buffer.save_all()
    assert buffer.error == "Duplicate number"
    assert len(buffer.entries) == 4


def test_question_retry_after_partial_save_sends_only_unsent(admin_client, fake_session) -> None:
    fake_session.routes[("GET", "/api/admin/tests/t20/questions")] = lambda call: FakeResponse(payload=QUESTIONS)
    fake_session.routes[("POST", "/api/admin/tests/t20/questions")] = [
        FakeResponse(payload={}),
        FakeResponse(500, text=""),
        FakeResponse(payload={}),
    ]
    buffer = QuestionEditBuffer(admin_client, "t20")
    buffer.load()
    buffer.add(question(4, "One?"))
    buffer.add(question(5, "Two?"))

    assert not buffer.save_all()
    assert buffer.error == "Failed to create question"
    assert [e.data.question_text for e in buffer.entries if e.id is None] == ["Two?"]

    assert buffer.save_all()

    posted = [c.json["question_text"] for c in fake_session.calls if c.method == "POST"]
    assert posted == ["One?", "Two?", "Two?"]
    assert fake_session.calls[-1].method == "GET"
