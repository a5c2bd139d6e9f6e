from knowcode.services.toast import ToastCenter


def test_toasts_expire_after_three_seconds() -> None:
    now = [100.0]
    toasts = ToastCenter(clock=lambda: now[0])
    first = toasts.success("Approved - Certificate #7")
    now[0] = 102.0
    toasts.error("Failed to approve")
    assert [t.message for t in toasts.active()] == ["Approved - Certificate #7", "Failed to approve"]

    now[0] = 103.0
    assert [t.kind for t in toasts.active()] == ["error"]

    now[0] = 105.5
    assert toasts.active() == []
    assert first.to_dict() == {"id": 1, "message": "Approved - Certificate #7", "type": "success"}


def test_dismiss() -> None:
    toasts = ToastCenter(clock=lambda: 0.0)
    a = toasts.success("a")
    toasts.success("b")
    toasts.dismiss(a.id)
    assert [t.message for t in toasts.active()] == ["b"]
