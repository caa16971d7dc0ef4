# tests/test_slot_service.py
"""Unit tests for slot inventory, assignment and release."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.models.notification import Notification
from app.services import slot_service
from app.utils.exceptions import Conflict, InvalidState, NotFound, ValidationFailed


def assert_consistent(slot):
    assert (slot.status == "occupied") == (slot.user_id is not None)


class TestListing:
    def test_available_filters_and_orders(self, db, make_slot, make_user):
        make_slot("B-02")
        make_slot("A-01")
        make_slot("A-03", status="maintenance")
        taken = make_slot("A-02")
        slot_service.assign_slot(db, taken.id, make_user().id)

        page = slot_service.list_available(db)
        assert [s.slot_number for s in page["items"]] == ["A-01", "B-02"]
        assert page["total"] == 2

    def test_search_is_sanitized(self, db, make_slot):
        make_slot("A-01")
        make_slot("B-01")
        page = slot_service.list_available(db, search="A%';")
        assert [s.slot_number for s in page["items"]] == ["A-01"]

    def test_limit_is_clamped(self, db, make_slot):
        for i in range(3):
            make_slot(f"S-{i}")
        page = slot_service.list_available(db, page=0, limit=500)
        assert page["page"] == 1 and page["limit"] == 50

    def test_admin_search_by_holder(self, db, make_slot, make_user):
        slot = make_slot("A-01")
        make_slot("A-02")
        slot_service.assign_slot(db, slot.id, make_user(name="Grace Hopper").id)
        page = slot_service.list_slots(db, search="hopper")
        assert [s.slot_number for s in page["items"]] == ["A-01"]

    def test_admin_status_filter(self, db, make_slot):
        make_slot("A-01", status="maintenance")
        make_slot("A-02")
        assert slot_service.list_slots(db, status="maintenance")["total"] == 1
        with pytest.raises(ValidationFailed):
            slot_service.list_slots(db, status="broken")

    def test_my_slot(self, db, make_slot, make_user):
        user = make_user()
        with pytest.raises(NotFound):
            slot_service.get_my_slot(db, user.id)
        slot = make_slot("A-01")
        slot_service.assign_slot(db, slot.id, user.id)
        assert slot_service.get_my_slot(db, user.id).slot_number == "A-01"


class TestStats:
    def test_empty(self, db):
        stats = slot_service.slot_stats(db)
        assert stats["total"] == 0 and stats["utilization_rate"] == 0.0

    def test_utilization(self, db, make_slot, make_user):
        a = make_slot("A-01")
        make_slot("A-02")
        make_slot("A-03", status="maintenance")
        slot_service.assign_slot(db, a.id, make_user().id)
        stats = slot_service.slot_stats(db)
        assert stats["total"] == 3
        assert stats["occupied"] == 1 and stats["available"] == 1 and stats["maintenance"] == 1
        assert stats["utilization_rate"] == 33.33
        assert [s.slot_number for s in stats["recent_assignments"]] == ["A-01"]


class TestCrud:
    def test_duplicate_number(self, db):
        slot_service.create_slot(db, "A-01")
        with pytest.raises(Conflict):
            slot_service.create_slot(db, "A-01")

    def test_rename_to_existing(self, db, make_slot):
        make_slot("A-01")
        b = make_slot("A-02")
        with pytest.raises(Conflict):
            slot_service.update_slot(db, b.id, slot_number="A-01")

    def test_maintenance_toggle(self, db, make_slot):
        slot = make_slot("A-01")
        assert slot_service.update_slot(db, slot.id, status="maintenance").status == "maintenance"
        assert slot_service.update_slot(db, slot.id, status="available").status == "available"

    def test_cannot_set_occupied_directly(self, db, make_slot):
        slot = make_slot("A-01")
        with pytest.raises(ValidationFailed):
            slot_service.update_slot(db, slot.id, status="occupied")

    def test_cannot_change_status_of_occupied(self, db, make_slot, make_user):
        slot = make_slot("A-01")
        slot_service.assign_slot(db, slot.id, make_user().id)
        with pytest.raises(InvalidState):
            slot_service.update_slot(db, slot.id, status="maintenance")

    def test_delete_occupied(self, db, make_slot, make_user):
        slot = make_slot("A-01")
        slot_service.assign_slot(db, slot.id, make_user().id)
        with pytest.raises(InvalidState):
            slot_service.delete_slot(db, slot.id)

    def test_delete_missing(self, db):
        with pytest.raises(NotFound):
            slot_service.delete_slot(db, 999)


class TestAssignRelease:
    def test_assign_sets_status_and_owner_together(self, db, make_slot, make_user):
        user = make_user()
        slot = slot_service.assign_slot(db, make_slot("A-01").id, user.id)
        assert slot.status == "occupied" and slot.user_id == user.id
        assert slot.assigned_at is not None
        assert db.query(Notification).filter_by(user_id=user.id, type="slot_assigned").count() == 1

    def test_one_slot_per_user(self, db, make_slot, make_user):
        user = make_user()
        slot_service.assign_slot(db, make_slot("A-01").id, user.id)
        with pytest.raises(InvalidState):
            slot_service.assign_slot(db, make_slot("A-02").id, user.id)

    def test_slot_already_taken(self, db, make_slot, make_user):
        slot = make_slot("A-01")
        slot_service.assign_slot(db, slot.id, make_user().id)
        with pytest.raises(InvalidState):
            slot_service.assign_slot(db, slot.id, make_user().id)

    def test_maintenance_slot(self, db, make_slot, make_user):
        slot = make_slot("A-01", status="maintenance")
        with pytest.raises(InvalidState):
            slot_service.assign_slot(db, slot.id, make_user().id)

    def test_unknown_user(self, db, make_slot):
        with pytest.raises(NotFound):
            slot_service.assign_slot(db, make_slot("A-01").id, 999)

    def test_release_clears_everything(self, db, make_slot, make_user):
        user = make_user()
        slot = slot_service.assign_slot(db, make_slot("A-01").id, user.id)
        released = slot_service.release_slot(db, user.id)
        assert released.id == slot.id
        assert released.status == "available"
        assert released.user_id is None and released.assigned_at is None
        assert_consistent(released)
        assert db.query(Notification).filter_by(user_id=user.id, type="slot_released").count() == 1

    def test_release_drops_holder_details(self, db, make_slot, make_user):
        user = make_user(name="Grace Hopper")
        slot_service.assign_slot(db, make_slot("A-01").id, user.id)
        released = slot_service.release_slot(db, user.id)
        assert released.holder is None
        assert released.holder_name is None and released.holder_plate is None
        assert slot_service.list_slots(db, search="Grace")["total"] == 0

    def test_release_without_slot(self, db, make_user):
        with pytest.raises(NotFound):
            slot_service.release_slot(db, make_user().id)
