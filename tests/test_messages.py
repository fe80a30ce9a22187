import pytest

import messages
from errors import NotFound, ValidationFailed


def submit(store, **overrides):
    data = {"name": "Ada", "email": "ada@example.com", "message": "Do you take bookings for 12?"}
    data.update(overrides)
    return messages.submit_contact_message(store, **data)


def test_submit_stores_new_message_and_logs(store):
    result = submit(store)
    assert result["success"] is True
    saved = messages.get_message(store, result["id"])
    assert saved["status"] == "new"
    assert saved["subject"] == messages.DEFAULT_SUBJECT
    activity = store.find("admin_activity_log")
    assert activity[0]["action_type"] == "message_received"
    assert activity[0]["target_id"] == result["id"]


def test_submit_requires_message(store):
    with pytest.raises(ValidationFailed):
        submit(store, message="")


def test_list_paginates_and_filters(store):
    for i in range(5):
        submit(store, subject=f"Question {i}")
    page = messages.list_messages(store, page=2, limit=2)
    assert page["total"] == 5
    assert len(page["data"]) == 2

    first = messages.list_messages(store, limit=1)["data"][0]
    messages.update_message(store, first["id"], status="archived", admin_email="manager@example.com")
    assert messages.list_messages(store, status="archived")["total"] == 1
    assert messages.list_messages(store, status="all")["total"] == 5


def test_reply_marks_replied(store):
    msg_id = submit(store)["id"]
    updated = messages.update_message(store, msg_id, reply_message="Yes we do.", admin_email="manager@example.com")
    assert updated["status"] == "replied"
    assert updated["replied_at"] is not None
    log = store.find("admin_activity_log", {"action_type": "message_replied"})
    assert log[0]["admin_email"] == "manager@example.com"


def test_update_needs_changes(store):
    msg_id = submit(store)["id"]
    with pytest.raises(ValidationFailed):
        messages.update_message(store, msg_id)


def test_unknown_message(store):
    with pytest.raises(NotFound):
        messages.get_message(store, 7)
    with pytest.raises(NotFound):
        messages.update_message(store, 7, status="read")
