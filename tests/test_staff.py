"""
Tests for the staff roster pages and store functions.
"""
import pytest

from app.schemas.profile import TenantContext
from app.schemas.staff import StaffForm
from app.utils.database_manager import delete_staff_member, list_staff, save_staff_member
from app.utils.exceptions import BackendError, RecordNotFoundError

TENANT = TenantContext(user_id="user-1", restaurant_id="rest-1")


class TestRosterStore:
    """Roster reads and writes stay inside one restaurant."""

    def test_list_is_scoped_and_ordered(self, fake_db):
        staff = list_staff(fake_db, TENANT)
        assert [m.first_name for m in staff] == ["Amir", "Zoe"]
        assert all(m.restaurant_id == "rest-1" for m in staff)

    def test_shift_column_is_read(self, fake_db):
        zoe = next(m for m in list_staff(fake_db, TENANT) if m.id == "staff-zoe")
        assert zoe.shift == "evening"

    def test_insert_applies_defaults(self, fake_db):
        member = save_staff_member(fake_db, TENANT, StaffForm(first_name="Lin", last_name="Wu", position="", shift=""))
        row = next(r for r in fake_db.rows("staff") if r["id"] == member.id)
        assert row["position"] == "waiter"
        assert row["Shift"] == "morning"
        assert row["restaurant_id"] == "rest-1"
        assert row["phone"] is None and row["email"] is None

    def test_update_replaces_mutable_fields(self, fake_db):
        form = StaffForm(first_name="Zoe", last_name="Park", position="manager", shift="night", phone="555-0199")
        save_staff_member(fake_db, TENANT, form, staff_id="staff-zoe")
        row = next(r for r in fake_db.rows("staff") if r["id"] == "staff-zoe")
        assert row["position"] == "manager"
        assert row["Shift"] == "night"
        assert row["phone"] == "555-0199"

    def test_update_other_restaurant_fails(self, fake_db):
        with pytest.raises(RecordNotFoundError):
            save_staff_member(fake_db, TENANT, StaffForm(first_name="X", last_name="Y"), staff_id="staff-other")
        other = next(r for r in fake_db.rows("staff") if r["id"] == "staff-other")
        assert other["first_name"] == "Bea"

    def test_delete_removes_from_next_list(self, fake_db):
        assert any(m.id == "staff-amir" for m in list_staff(fake_db, TENANT))
        delete_staff_member(fake_db, TENANT, "staff-amir")
        assert not any(m.id == "staff-amir" for m in list_staff(fake_db, TENANT))

    def test_delete_unknown_member(self, fake_db):
        with pytest.raises(RecordNotFoundError):
            delete_staff_member(fake_db, TENANT, "staff-other")
        assert any(r["id"] == "staff-other" for r in fake_db.rows("staff"))

    def test_backend_failure(self, fake_db):
        fake_db.fail("staff", "insert")
        with pytest.raises(BackendError):
            save_staff_member(fake_db, TENANT, StaffForm(first_name="Lin", last_name="Wu"))


class TestStaffPages:
    """Staff management screens."""

    def test_list_page(self, client):
        response = client.get("/staff")
        assert response.status_code == 200
        assert "Amir Khan" in response.text
        assert "Zoe Park" in response.text
        assert "Bea Other" not in response.text

    def test_add_staff_member(self, client, fake_db):
        response = client.post(
            "/staff",
            data={"first_name": "Lin", "last_name": "Wu", "position": "host", "shift": "afternoon",
                  "phone": "", "email": "lin@example.com"},
        )
        assert response.status_code == 200
        assert "Staff member added successfully" in response.text
        assert "Lin Wu" in response.text
        row = next(r for r in fake_db.rows("staff") if r["first_name"] == "Lin")
        assert row["Shift"] == "afternoon"
        assert row["phone"] is None

    def test_add_requires_names(self, client, fake_db):
        before = len(fake_db.rows("staff"))
        response = client.post("/staff", data={"first_name": "", "last_name": "Wu"})
        assert response.status_code == 400
        assert "first_name" in response.text
        assert len(fake_db.rows("staff")) == before

    def test_edit_page_prefills(self, client):
        response = client.get("/staff/staff-amir/edit")
        assert response.status_code == 200
        assert 'value="Amir"' in response.text
        assert 'value="555-0100"' in response.text

    def test_edit_other_restaurant_redirects(self, client):
        response = client.get("/staff/staff-other/edit", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/staff"

    def test_update_staff_member(self, client, fake_db):
        response = client.post(
            "/staff/staff-zoe",
            data={"first_name": "Zoe", "last_name": "Lee", "position": "chef", "shift": "evening"},
        )
        assert response.status_code == 200
        assert "Staff member updated successfully" in response.text
        assert "Zoe Lee" in response.text

    def test_delete_staff_member(self, client, fake_db):
        client.get("/staff")
        response = client.post("/staff/staff-zoe/delete")
        assert response.status_code == 200
        assert "Staff member deleted successfully" in response.text
        assert "Zoe Park" not in response.text

    def test_flash_shows_once(self, client):
        client.post("/staff/staff-zoe/delete")
        response = client.get("/staff")
        assert "Staff member deleted successfully" not in response.text
