# tests/test_ticket_service.py
"""Unit tests for the ticket lifecycle and billing on completion."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from app.models.notification import Notification
from app.services import slot_service, ticket_service
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed


@pytest.fixture
def holder(db, make_user, make_slot):
    user = make_user()
    slot_service.assign_slot(db, make_slot("A-01").id, user.id)
    return user


class TestCreateTicket:
    def test_requires_a_slot(self, db, make_user, window):
        with pytest.raises(NotFound):
            ticket_service.create_ticket(db, make_user(), *window)

    def test_creates_pending(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        assert ticket.status == "pending"
        assert ticket.slot_number == "A-01"
        assert ticket.amount is None and ticket.duration is None

    def test_one_open_ticket(self, db, holder, window):
        ticket_service.create_ticket(db, holder, *window)
        with pytest.raises(Conflict):
            ticket_service.create_ticket(db, holder, *window)

    def test_window_is_validated(self, db, holder):
        past = datetime.utcnow() - timedelta(hours=1)
        with pytest.raises(ValidationFailed, match="future"):
            ticket_service.create_ticket(db, holder, past, past + timedelta(hours=1))


class TestLifecycle:
    def test_activate_then_complete(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        start = datetime(2026, 10, 20, 8, 0, 0)

        active = ticket_service.activate_ticket(db, ticket.id, now=start)
        assert active.status == "active" and active.actual_entry_time == start

        done = ticket_service.complete_ticket(db, ticket.id, now=start + timedelta(minutes=150))
        assert done.status == "completed"
        assert done.duration == 150
        assert done.amount == 2500
        assert done.actual_exit_time == start + timedelta(minutes=150)

    def test_completion_releases_slot_and_notifies(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        ticket_service.activate_ticket(db, ticket.id)
        ticket_service.complete_ticket(db, ticket.id)

        slot = slot_service.get_slot(db, ticket.slot_id)
        assert slot.status == "available" and slot.user_id is None
        assert db.query(Notification).filter_by(user_id=holder.id, type="ticket_completed").count() == 1

    def test_one_minute_session(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        start = datetime(2026, 10, 20, 8, 0, 0)
        ticket_service.activate_ticket(db, ticket.id, now=start)
        done = ticket_service.complete_ticket(db, ticket.id, now=start + timedelta(minutes=1))
        assert (done.duration, done.amount) == (1, 17)

    def test_cannot_activate_twice(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        ticket_service.activate_ticket(db, ticket.id)
        with pytest.raises(InvalidState):
            ticket_service.activate_ticket(db, ticket.id)

    def test_cannot_complete_pending(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        with pytest.raises(InvalidState):
            ticket_service.complete_ticket(db, ticket.id)

    def test_cancel_only_pending(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        assert ticket_service.cancel_ticket(db, ticket.id).status == "cancelled"
        with pytest.raises(InvalidState):
            ticket_service.cancel_ticket(db, ticket.id)

    def test_cancel_frees_the_open_ticket_slot(self, db, holder, window):
        ticket = ticket_service.create_ticket(db, holder, *window)
        ticket_service.cancel_ticket(db, ticket.id)
        assert ticket_service.create_ticket(db, holder, *window).status == "pending"

    def test_unknown_ticket(self, db):
        with pytest.raises(NotFound):
            ticket_service.activate_ticket(db, 999)


class TestQueries:
    def test_active_for_user(self, db, holder, window):
        assert ticket_service.get_active_for_user(db, holder.id) is None
        ticket = ticket_service.create_ticket(db, holder, *window)
        assert ticket_service.get_active_for_user(db, holder.id).id == ticket.id

    def test_history_and_admin_filters(self, db, holder, window):
        first = ticket_service.create_ticket(db, holder, *window)
        ticket_service.cancel_ticket(db, first.id)
        ticket_service.create_ticket(db, holder, *window)

        assert ticket_service.history_for_user(db, holder.id)["total"] == 2
        assert ticket_service.admin_all(db, status="cancelled")["total"] == 1
        assert len(ticket_service.admin_active(db)) == 1
        with pytest.raises(ValidationFailed):
            ticket_service.admin_all(db, status="lost")
