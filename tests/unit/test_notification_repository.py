"""Tests for notification storage: visibility, pagination and read flags."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from arsana.notifications import NotificationCreate, NotificationRepository, NotificationType


def notify(title: str, user_id: str | None = None, type=NotificationType.INFO):
    return NotificationRepository.create(
        NotificationCreate(title=title, message=f"{title} message", type=type, user_id=user_id)
    )


def test_user_sees_own_and_global_notifications(db):
    notify("For alice", user_id="alice")
    notify("For bob", user_id="bob")
    notify("Global")

    page = NotificationRepository.list_for_user("alice")

    assert {n.title for n in page.notifications} == {"For alice", "Global"}
    assert page.total == 2
    assert page.unread_count == 2


def test_anonymous_caller_sees_only_global(db):
    notify("For alice", user_id="alice")
    notify("Global")

    page = NotificationRepository.list_for_user(None)

    assert [n.title for n in page.notifications] == ["Global"]


def test_pagination(db):
    for i in range(5):
        notify(f"N{i}", user_id="alice")

    first = NotificationRepository.list_for_user("alice", page=1, limit=2)
    last = NotificationRepository.list_for_user("alice", page=3, limit=2)

    assert len(first.notifications) == 2
    assert first.total == 5
    assert first.pages == 3
    assert len(last.notifications) == 1


def test_mark_as_read_and_unread_filter(db):
    first = notify("First", user_id="alice")
    notify("Second", user_id="alice")

    assert NotificationRepository.mark_as_read(first.id) is True
    assert NotificationRepository.mark_as_read("missing") is False

    unread = NotificationRepository.list_for_user("alice", unread_only=True)
    assert [n.title for n in unread.notifications] == ["Second"]
    assert unread.unread_count == 1
    assert NotificationRepository.get_by_id(first.id).is_read is True


def test_mark_all_as_read_leaves_other_users_alone(db):
    notify("For alice", user_id="alice")
    notify("Global")
    bobs = notify("For bob", user_id="bob")

    assert NotificationRepository.mark_all_as_read("alice") == 2

    assert NotificationRepository.list_for_user("alice").unread_count == 0
    assert NotificationRepository.get_by_id(bobs.id).is_read is False


def test_type_is_stored(db):
    created = notify("Oops", type=NotificationType.ERROR)

    assert NotificationRepository.get_by_id(created.id).type == "ERROR"


@pytest.mark.parametrize("field", ["title", "message"])
def test_blank_fields_rejected(field):
    values = {"title": "Hello", "message": "World", field: "   "}

    with pytest.raises(ValidationError):
        NotificationCreate(**values)
