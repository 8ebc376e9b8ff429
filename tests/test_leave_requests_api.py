"""HTTP tests for the leave request, balance, holiday and team routes."""
from datetime import date

import jwt
import pytest

from api.v1.app import create_app
from api.v1.config import TestingConfig


def test_health(client):
    assert client.get("/health").get_json()["status"] == "ok"


def test_token_required(client):
    response = client.get("/api/v1/leave_requests")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Missing or invalid Authorization header"


def test_expired_token(client, make_token):
    token = make_token(expires_in=-60)
    response = client.get("/api/v1/leave_requests", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.get_json()["message"] == "Token has expired"


def test_leave_types(client, headers):
    types = {t["leave_type"]: t for t in client.get("/api/v1/leave_types", headers=headers()).get_json()}
    assert set(types) == {"annual", "sick", "maternity", "paternity", "unpaid", "compassionate", "study"}
    assert types["sick"]["requires_reason"] and types["sick"]["requires_document"]


class TestListing:

    def test_user_sees_only_own_requests(self, client, headers):
        response = client.get("/api/v1/leave_requests?employee_id=2", headers=headers("john"))
        assert response.status_code == 200
        assert {a["employee_id"] for a in response.get_json()} == {"1"}

    def test_status_filter(self, client, headers):
        data = client.get("/api/v1/leave_requests?status=approved", headers=headers("bob")).get_json()
        assert [a["id"] for a in data] == ["1"]

    def test_invalid_status_filter(self, client, headers):
        assert client.get("/api/v1/leave_requests?status=done", headers=headers("bob")).status_code == 400

    def test_manager_sees_department(self, client, headers):
        data = client.get("/api/v1/leave_requests", headers=headers("jane")).get_json()
        assert {a["department"] for a in data} == {"Engineering"}
        assert len(data) == 3

    def test_pending_approvals(self, client, headers):
        data = client.get("/api/v1/leave_requests/pending", headers=headers("jane")).get_json()
        assert [a["id"] for a in data] == ["3", "2"]

        assert client.get("/api/v1/leave_requests/pending", headers=headers("bob")).get_json() != []
        assert client.get("/api/v1/leave_requests/pending", headers=headers("john")).status_code == 403

    def test_single_request(self, client, headers, make_token):
        response = client.get("/api/v1/leave_requests/1", headers=headers("john"))
        assert response.status_code == 200
        assert response.get_json()["start_date"] == "2025-05-25"

        outsider = {"Authorization": f"Bearer {make_token(sub='3', role='user', department='HR')}"}
        assert client.get("/api/v1/leave_requests/1", headers=outsider).status_code == 403

    def test_unknown_request(self, client, headers):
        response = client.get("/api/v1/leave_requests/nope", headers=headers("bob"))
        assert response.status_code == 404
        assert response.get_json()["code"] == "not_found"


class TestSubmission:

    def test_submit_annual_leave(self, client, headers, store):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "leave_type": "annual", "start_date": "2025-06-30", "end_date": "2025-07-04",
            "reason": "Trip",
        })
        assert response.status_code == 201
        body = response.get_json()
        assert body["status"] == "pending"
        assert body["duration"] == 4
        assert body["employee_id"] == "1"
        assert body["employee_name"] == "John Doe"
        assert body["department"] == "Engineering"
        assert store.get_application(body["id"]).status.value == "pending"

    def test_user_cannot_submit_for_someone_else(self, client, headers):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "employee_id": "2", "leave_type": "paternity",
            "start_date": "2025-06-02", "end_date": "2025-06-02",
        })
        assert response.get_json()["employee_id"] == "1"

    def test_sick_leave_without_reason(self, client, headers):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "leave_type": "sick", "start_date": "2025-06-02", "end_date": "2025-06-03",
        })
        assert response.status_code == 400
        body = response.get_json()
        assert body["code"] == "missing_required_field"
        assert body["field"] == "reason"
        assert body["leave_type"] == "sick"

    def test_insufficient_annual_balance(self, client, headers):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "leave_type": "annual", "start_date": "2025-06-02", "end_date": "2025-06-27",
        })
        assert response.status_code == 400
        body = response.get_json()
        assert body["code"] == "insufficient_balance"
        assert (body["available"], body["requested"]) == (18, 20)

    def test_invalid_range(self, client, headers):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "leave_type": "annual", "start_date": "2025-06-06", "end_date": "2025-06-02",
        })
        assert response.status_code == 400
        assert response.get_json()["code"] == "invalid_range"

    def test_schema_errors(self, client, headers):
        response = client.post("/api/v1/leave_requests", headers=headers("john"), json={
            "leave_type": "holiday", "start_date": "2025-06-02", "end_date": "2025-06-02",
        })
        assert response.status_code == 400
        assert response.get_json()["error"] == "Validation failed"

        assert client.post("/api/v1/leave_requests", headers=headers("john")).status_code == 400

    def test_duration_preview(self, client, headers):
        response = client.post("/api/v1/leave_requests/duration", headers=headers("john"), json={
            "start_date": "2025-06-04", "end_date": "2025-06-10",
        })
        assert response.get_json()["duration"] == 5

        half = client.post("/api/v1/leave_requests/duration", headers=headers("john"), json={
            "start_date": "2025-06-04", "end_date": "2025-06-04", "is_half_day": True,
        })
        assert half.get_json()["duration"] == 0.5


class TestDecisions:

    def test_manager_approves_and_balance_is_debited(self, client, headers, store):
        response = client.put("/api/v1/leave_requests/2", headers=headers("jane"),
                              json={"status": "approved", "approver_notes": "Get well soon"})
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "approved"
        assert body["approver_notes"] == "Get well soon"
        assert body["approved_by"] == "2"
        assert store.get_balance("1").sick == 9

    def test_second_approval_is_invalid_transition(self, client, headers):
        client.put("/api/v1/leave_requests/2", headers=headers("jane"), json={"status": "approved"})
        response = client.put("/api/v1/leave_requests/2", headers=headers("jane"), json={"status": "approved"})
        assert response.status_code == 400
        body = response.get_json()
        assert body["code"] == "invalid_transition"
        assert (body["current"], body["attempted"]) == ("approved", "approved")

    def test_user_cannot_approve(self, client, headers):
        response = client.put("/api/v1/leave_requests/2", headers=headers("john"), json={"status": "approved"})
        assert response.status_code == 403

    def test_manager_limited_to_department(self, client, make_token):
        other = {"Authorization": f"Bearer {make_token(sub='5', role='manager', department='HR')}"}
        response = client.put("/api/v1/leave_requests/2", headers=other, json={"status": "rejected"})
        assert response.status_code == 403

    def test_user_cancels_own_pending_request(self, client, headers):
        response = client.put("/api/v1/leave_requests/2", headers=headers("john"), json={"status": "cancelled"})
        assert response.status_code == 200
        assert response.get_json()["status"] == "cancelled"

    def test_user_cannot_cancel_someone_elses_request(self, client, headers):
        response = client.put("/api/v1/leave_requests/3", headers=headers("john"), json={"status": "cancelled"})
        assert response.status_code == 403

    def test_cancel_after_approval_is_invalid(self, client, headers):
        response = client.put("/api/v1/leave_requests/1", headers=headers("john"), json={"status": "cancelled"})
        assert response.status_code == 400
        assert response.get_json()["code"] == "invalid_transition"

    def test_approval_without_balance_cover(self, client, headers, store):
        store.adjust_balance("2", "annual", -10)
        response = client.put("/api/v1/leave_requests/3", headers=headers("bob"), json={"status": "approved"})
        assert response.status_code == 400
        assert response.get_json()["code"] == "insufficient_balance"
        assert store.get_application("3").status.value == "pending"

    def test_unknown_status_value(self, client, headers):
        response = client.put("/api/v1/leave_requests/2", headers=headers("jane"), json={"status": "pending"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "Validation failed"


class TestCalendarAndSummary:

    def test_calendar_by_date(self, client, headers):
        body = client.get("/api/v1/leave_requests/calendar?date=2025-05-27", headers=headers()).get_json()
        assert [a["id"] for a in body["leave_requests"]] == ["1"]
        assert body["holiday"] is None

    def test_calendar_holiday_on_date(self, client, headers):
        body = client.get("/api/v1/leave_requests/calendar?date=2025-12-25", headers=headers()).get_json()
        assert body["holiday"]["name"] == "Christmas Day"

    def test_calendar_by_month(self, client, headers):
        body = client.get("/api/v1/leave_requests/calendar?month=2025-07", headers=headers()).get_json()
        assert (body["start"], body["end"]) == ("2025-07-01", "2025-07-31")
        assert [h["name"] for h in body["holidays"]] == ["Independence Day", "Liberation Day"]
        assert body["leave_requests"] == []

    def test_calendar_bad_input(self, client, headers):
        assert client.get("/api/v1/leave_requests/calendar?month=July", headers=headers()).status_code == 400
        assert client.get("/api/v1/leave_requests/calendar?date=27/05/2025", headers=headers()).status_code == 400
        assert client.get("/api/v1/leave_requests/calendar", headers=headers()).status_code == 400
        assert client.get("/api/v1/leave_requests/calendar?start=2025-06-02&end=2025-06-01",
                          headers=headers()).status_code == 400

    def test_summary(self, client, headers):
        body = client.get("/api/v1/leave_requests/summary", headers=headers()).get_json()
        assert body["counts"]["approved"] == 1
        assert body["balance"]["annual"] == 18
        assert client.get("/api/v1/leave_requests/summary?employee_id=2", headers=headers()).status_code == 403


class TestBalances:

    def test_my_balance(self, client, headers):
        body = client.get("/api/v1/leave_balances/me", headers=headers()).get_json()
        assert (body["employee_id"], body["annual"], body["carry_over"]) == ("1", 18, 2)

    def test_balance_visibility(self, client, headers):
        assert client.get("/api/v1/leave_balances/1", headers=headers("jane")).status_code == 200
        assert client.get("/api/v1/leave_balances/1", headers=headers("john")).status_code == 403
        assert client.get("/api/v1/leave_balances/404", headers=headers("bob")).status_code == 404

    def test_adjust(self, client, headers):
        response = client.patch("/api/v1/leave_balances/1", headers=headers("bob"),
                                json={"leave_type": "annual", "delta": 2.5})
        assert response.status_code == 200
        assert response.get_json()["annual"] == 20.5

        overdraw = client.patch("/api/v1/leave_balances/1", headers=headers("bob"),
                                json={"leave_type": "sick", "delta": -11})
        assert overdraw.status_code == 400
        assert overdraw.get_json()["code"] == "insufficient_balance"

    def test_replace_requires_super_admin(self, client, headers):
        payload = {"annual": 25, "sick": 12}
        assert client.put("/api/v1/leave_balances/3", headers=headers("bob"), json=payload).status_code == 403
        response = client.put("/api/v1/leave_balances/3", headers=headers("root"), json=payload)
        assert response.status_code == 200
        assert response.get_json()["annual"] == 25

        negative = client.put("/api/v1/leave_balances/3", headers=headers("root"), json={"annual": -1})
        assert negative.status_code == 400


class TestHolidaysAndTeam:

    def test_holiday_listing(self, client, headers):
        assert len(client.get("/api/v1/holidays", headers=headers()).get_json()) == 10
        july = client.get("/api/v1/holidays?start=2025-07-01&end=2025-07-31", headers=headers()).get_json()
        assert [h["date"] for h in july] == ["2025-07-01", "2025-07-04"]

    def test_upcoming(self, client, headers):
        body = client.get("/api/v1/holidays/upcoming?from=2025-12-01&limit=5", headers=headers()).get_json()
        assert [h["name"] for h in body] == ["Christmas Day", "Boxing Day"]

    def test_admin_adds_holiday(self, client, headers, store):
        payload = {"name": "Company Retreat", "date": "2025-06-04", "is_national": False}
        assert client.post("/api/v1/holidays", headers=headers("john"), json=payload).status_code == 403

        response = client.post("/api/v1/holidays", headers=headers("bob"), json=payload)
        assert response.status_code == 201
        assert response.get_json()["is_national"] is False
        assert store.calculate_duration(date(2025, 6, 2), date(2025, 6, 6)) == 4

    def test_holiday_needs_a_name(self, client, headers):
        response = client.post("/api/v1/holidays", headers=headers("bob"), json={"name": "", "date": "2025-06-04"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "name"

    def test_team_members(self, client, headers):
        body = client.get("/api/v1/team_members?department=Engineering", headers=headers()).get_json()
        assert [m["name"] for m in body] == ["John Doe", "Jane Smith"]


def test_wrong_secret_is_rejected(client):
    token = jwt.encode({"sub": "1", "aud": TestingConfig.JWT_AUDIENCE}, "another-secret-that-is-long-enough-too",
                       algorithm="HS256")
    response = client.get("/api/v1/leave_requests", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid signature"


def test_supabase_backend_requires_credentials():
    class MissingSupabase(TestingConfig):
        LMS_STORAGE_BACKEND = "supabase"
        SUPABASE_URL = None
        SUPABASE_SERVICE_KEY = None

    with pytest.raises(ValueError):
        create_app(MissingSupabase)


def test_token_verification_must_be_configured():
    class NoTokenSecret(TestingConfig):
        SUPABASE_JWT_SECRET = None

    with pytest.raises(ValueError):
        create_app(NoTokenSecret)


class TestRequestBodies:

    @pytest.mark.parametrize("body", ['{"leave_type": "annual", "delta": NaN}',
                                      '{"leave_type": "sick", "delta": Infinity}'])
    def test_non_finite_adjustment_is_rejected(self, client, headers, store, body):
        response = client.patch("/api/v1/leave_balances/1", headers=headers("bob"),
                                 data=body, content_type="application/json")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Validation failed"
        assert (store.get_balance("1").annual, store.get_balance("1").sick) == (18, 10)

    @pytest.mark.parametrize("method, url, who", [
        ("post", "/api/v1/leave_requests", "john"),
        ("post", "/api/v1/leave_requests/duration", "john"),
        ("put", "/api/v1/leave_requests/2", "jane"),
        ("patch", "/api/v1/leave_balances/1", "bob"),
        ("put", "/api/v1/leave_balances/1", "root"),
        ("post", "/api/v1/holidays", "bob"),
    ])
    @pytest.mark.parametrize("body", [["approved"], "approved", 5])
    def test_body_must_be_an_object(self, client, headers, method, url, who, body):
        response = getattr(client, method)(url, headers=headers(who), json=body)
        assert response.status_code == 400


def test_approvers_cannot_decide_their_own_request(client, headers, store):
    response = client.put("/api/v1/leave_requests/3", headers=headers("jane"), json={"status": "approved"})
    assert response.status_code == 403
    assert store.get_application("3").status.value == "pending"

    assert client.put("/api/v1/leave_requests/3", headers=headers("jane"),
                      json={"status": "cancelled"}).status_code == 200
