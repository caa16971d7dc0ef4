# tests/test_slot_request_service.py
"""Unit tests for the slot request workflow."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from app.models.notification import Notification
from app.models.ticket import Ticket
from app.services import slot_request_service, slot_service, ticket_service
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed


class TestCreateRequest:
    def test_creates_pending(self, db, make_user, window):
        user = make_user()
        request = slot_request_service.create_request(db, user, *window, reason="office visit")
        assert request.status == "pending"
        assert request.reason == "office visit"

    def test_validation_runs_before_conflict_checks(self, db, make_user, window):
        user = make_user()
        entry, exit_ = window
        with pytest.raises(ValidationFailed, match="after entry"):
            slot_request_service.create_request(db, user, exit_, entry)

    def test_second_pending_request(self, db, make_user, window):
        user = make_user()
        slot_request_service.create_request(db, user, *window)
        with pytest.raises(Conflict):
            slot_request_service.create_request(db, user, *window)

    def test_blocked_while_holding_approved_slot(self, db, make_user, make_slot, window):
        user = make_user()
        request = slot_request_service.create_request(db, user, *window)
        slot_request_service.approve_request(db, request.id, make_slot("A-01").id)
        with pytest.raises(Conflict):
            slot_request_service.create_request(db, user, *window)

    def test_allowed_again_after_completion(self, db, make_user, make_slot, window):
        user = make_user()
        request = slot_request_service.create_request(db, user, *window)
        _, ticket, _ = slot_request_service.approve_request(db, request.id, make_slot("A-01").id)
        ticket_service.activate_ticket(db, ticket.id)
        ticket_service.complete_ticket(db, ticket.id)
        assert slot_request_service.create_request(db, user, *window).status == "pending"

    def test_blocked_by_open_ticket(self, db, make_user, make_slot, window):
        user = make_user()
        slot_service.assign_slot(db, make_slot("A-01").id, user.id)
        ticket_service.create_ticket(db, user, *window)
        slot_service.release_slot(db, user.id)
        with pytest.raises(Conflict, match="ticket"):
            slot_request_service.create_request(db, user, *window)


class TestApprove:
    def test_binds_slot_and_issues_ticket(self, db, make_user, make_slot, window):
        user = make_user()
        slot = make_slot("A-01")
        request = slot_request_service.create_request(db, user, *window)

        approved, ticket, emails = slot_request_service.approve_request(db, request.id, slot.id)

        db.refresh(slot)
        assert slot.status == "occupied" and slot.user_id == user.id
        assert approved.status == "approved" and approved.slot_id == slot.id
        assert approved.approved_at is not None
        assert ticket.status == "pending"
        assert ticket.request_id == request.id
        assert ticket.requested_entry_time == window[0]
        assert ticket.requested_exit_time == window[1]
        assert db.query(Notification).filter_by(user_id=user.id, type="slot_assigned").count() == 1
        assert emails[0].to == user.email

    def test_unknown_request(self, db, make_slot):
        with pytest.raises(NotFound):
            slot_request_service.approve_request(db, 999, make_slot("A-01").id)

    def test_slot_not_available(self, db, make_user, make_slot, window):
        request = slot_request_service.create_request(db, make_user(), *window)
        slot = make_slot("A-01", status="maintenance")
        with pytest.raises(InvalidState):
            slot_request_service.approve_request(db, request.id, slot.id)
        db.refresh(request)
        assert request.status == "pending"

    def test_second_approval_fails_and_leaves_slot(self, db, make_user, make_slot, window):
        user = make_user()
        request = slot_request_service.create_request(db, user, *window)
        slot_request_service.approve_request(db, request.id, make_slot("A-01").id)
        other = make_slot("A-02")
        with pytest.raises(InvalidState):
            slot_request_service.approve_request(db, request.id, other.id)
        db.refresh(other)
        assert other.status == "available" and other.user_id is None
        assert db.query(Ticket).count() == 1


class TestReject:
    def test_reason_required(self, db, make_user, window):
        request = slot_request_service.create_request(db, make_user(), *window)
        with pytest.raises(ValidationFailed):
            slot_request_service.reject_request(db, request.id, "  ")

    def test_reject(self, db, make_user, make_slot, window):
        user = make_user()
        slot = make_slot("A-01")
        request = slot_request_service.create_request(db, user, *window)
        rejected, emails = slot_request_service.reject_request(db, request.id, "Lot closed")
        assert rejected.status == "rejected"
        assert rejected.rejection_reason == "Lot closed"
        assert rejected.rejected_at is not None
        db.refresh(slot)
        assert slot.status == "available"
        assert db.query(Notification).filter_by(user_id=user.id, type="slot_request_rejected").count() == 1
        assert len(emails) == 1

    def test_reject_resolved(self, db, make_user, window):
        request = slot_request_service.create_request(db, make_user(), *window)
        slot_request_service.reject_request(db, request.id, "No")
        with pytest.raises(InvalidState):
            slot_request_service.reject_request(db, request.id, "Again")


class TestListing:
    def test_pending_ordered_by_entry(self, db, make_user, window):
        entry, exit_ = window
        late = slot_request_service.create_request(db, make_user(), entry + timedelta(hours=2),
                                                   exit_ + timedelta(hours=2))
        early = slot_request_service.create_request(db, make_user(), entry, exit_)
        assert [r.id for r in slot_request_service.list_pending(db)] == [early.id, late.id]

    def test_all_search_and_status(self, db, make_user, window):
        slot_request_service.create_request(db, make_user(name="Ada Lovelace"), *window)
        other = slot_request_service.create_request(db, make_user(name="Alan Turing"), *window)
        slot_request_service.reject_request(db, other.id, "No")

        assert slot_request_service.list_all(db, search="lovelace")["total"] == 1
        assert slot_request_service.list_all(db, status="rejected")["items"][0].id == other.id
        with pytest.raises(ValidationFailed):
            slot_request_service.list_all(db, status="maybe")

    def test_user_sees_only_own(self, db, make_user, window):
        mine = make_user()
        slot_request_service.create_request(db, mine, *window)
        slot_request_service.create_request(db, make_user(), *window)
        assert slot_request_service.list_for_user(db, mine.id)["total"] == 1
