from datetime import timedelta

import pytest

import config
from models.history import HistoryEntry
from models.reminder import ReminderStatus
from tests.helpers import NOW, auth_headers


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com", push_token="fcm-token")


@pytest.fixture
def headers(owner):
    return auth_headers(owner)


def test_health(client):
    assert client.get("/").json()["status"] == "ok"
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


def test_requires_bearer_token(client):
    assert client.get("/pets/").status_code == 401
    assert client.get("/pets/", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_pet_limit_returns_403_with_details(client, headers):
    first = client.post("/pets/", json={"name": "Buddy", "species": "dog"}, headers=headers)
    assert first.status_code == 201
    assert first.json()["name"] == "Buddy"

    second = client.post("/pets/", json={"name": "Max", "species": "cat"}, headers=headers)
    assert second.status_code == 403
    assert second.json() == {
        "code": "plan_limit_exceeded",
        "detail": "Free plan allows only 1 pet. Please upgrade to add more pets.",
        "resource": "pet",
        "limit": 1,
    }


def test_pet_crud(client, headers, owner, make_user):
    pet_id = client.post("/pets/", json={"name": "Buddy", "species": "dog"}, headers=headers).json()["id"]

    updated = client.put(f"/pets/{pet_id}", json={"breed": "Beagle"}, headers=headers)
    assert updated.json()["breed"] == "Beagle"
    assert [p["id"] for p in client.get("/pets/", headers=headers).json()] == [pet_id]

    stranger = auth_headers(make_user())
    assert client.get(f"/pets/{pet_id}", headers=stranger).status_code == 404

    assert client.delete(f"/pets/{pet_id}", headers=headers).status_code == 200
    assert client.get(f"/pets/{pet_id}", headers=headers).json()["code"] == "not_found"


def test_medication_limit_and_listing(client, headers, owner, make_pet):
    pet = make_pet(owner)
    payload = {"pet_id": pet.id, "dosage": "1 tablet", "frequency": "daily", "timing": "08:00"}

    for name in ("Heartgard Plus", "Apoquel"):
        resp = client.post("/medications/", json={**payload, "name": name}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["pet_name"] == "Buddy"

    third = client.post("/medications/", json={**payload, "name": "Revolution"}, headers=headers)
    assert third.status_code == 403
    assert third.json()["resource"] == "medication"
    assert third.json()["limit"] == 2

    listed = client.get("/medications/", params={"pet_id": pet.id}, headers=headers).json()
    assert {m["name"] for m in listed} == {"Heartgard Plus", "Apoquel"}


def test_medication_timing_must_be_hh_mm(client, headers, owner, make_pet):
    pet = make_pet(owner)
    resp = client.post(
        "/medications/",
        json={"pet_id": pet.id, "name": "A", "dosage": "1", "frequency": "daily", "timing": "8am"},
        headers=headers,
    )
    assert resp.status_code == 422


def test_mark_given_flow(client, headers, owner, db_session, make_user, make_pet, make_medication, make_reminder):
    reminder = make_reminder(make_medication(make_pet(owner)), NOW - timedelta(minutes=10))
    url = f"/reminders/{reminder.id}/mark-given"

    first = client.patch(url, headers=headers)
    assert first.status_code == 200
    assert first.json()["status"] == "given"

    again = client.patch(url, headers=headers)
    assert again.status_code == 409
    assert again.json()["code"] == "already_completed"

    stranger = client.patch(url, headers=auth_headers(make_user()))
    assert stranger.status_code == 404

    assert db_session.query(HistoryEntry).count() == 1


def test_create_reminder(client, headers, owner, make_pet, make_medication):
    med = make_medication(make_pet(owner))
    resp = client.post(
        "/reminders/",
        json={"pet_id": med.pet_id, "medication_id": med.id, "scheduled_time": "2026-03-10T18:00:00Z"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"


def test_todays_reminders(client, headers, owner, make_pet, make_medication, make_reminder, monkeypatch):
    monkeypatch.setattr("routers.reminders.utcnow", lambda: NOW)
    med = make_medication(make_pet(owner))
    make_reminder(med, NOW - timedelta(minutes=10))
    make_reminder(med, NOW + timedelta(minutes=90))
    make_reminder(med, NOW - timedelta(hours=4), status=ReminderStatus.given)
    make_reminder(med, NOW + timedelta(days=1))

    body = client.get("/reminders/today", params={"tz": "UTC"}, headers=headers).json()

    assert body["timezone"] == "UTC"
    assert [r["derived_status"] for r in body["reminders"]] == ["given", "overdue", "due-soon"]
    overdue = body["reminders"][1]
    assert overdue["minutes_late"] == 10
    assert overdue["pet_name"] == "Buddy"
    assert overdue["medication_name"] == "Heartgard Plus"
    assert [r["derived_status"] for r in body["grouped"]["morning"]] == ["given", "overdue"]
    assert [r["derived_status"] for r in body["grouped"]["afternoon"]] == ["due-soon"]
    assert body["grouped"]["evening"] == []
    assert body["summary"]["total"] == 3
    assert body["summary"]["upcoming"] == 1


@pytest.mark.parametrize("tz", ["Mars/Olympus", "America", "Europe"])
def test_todays_reminders_unknown_timezone(client, headers, tz):
    resp = client.get("/reminders/today", params={"tz": tz}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == f"Unknown timezone '{tz}'"


def test_history_endpoint(client, headers, owner, make_pet, make_medication, make_reminder):
    pet = make_pet(owner)
    reminder = make_reminder(make_medication(pet), NOW)
    client.patch(f"/reminders/{reminder.id}/mark-given", headers=headers)

    rows = client.get("/history/", params={"pet_id": pet.id}, headers=headers).json()

    assert len(rows) == 1
    assert rows[0]["status"] == "given"
    assert rows[0]["medication_name"] == "Heartgard Plus"
    assert client.get("/history/", params={"pet_id": pet.id + 1}, headers=headers).json() == []


def test_plan_summary_endpoint(client, headers, owner, make_pet):
    make_pet(owner)
    body = client.get("/subscription/plan", headers=headers).json()
    assert body["tier"] == "free"
    assert body["usage"]["pets"] == 1
    assert body["limits"]["pets"] == 1


def test_notification_preferences(client, headers):
    assert client.get("/notifications/preferences", headers=headers).json() == {
        "email_enabled": True,
        "push_enabled": True,
    }
    saved = client.put(
        "/notifications/preferences", json={"email_enabled": False, "push_enabled": True}, headers=headers
    )
    assert saved.status_code == 200
    assert client.get("/notifications/preferences", headers=headers).json()["email_enabled"] is False


def test_trigger_sends_to_notification_log(
    client, headers, owner, make_pet, make_medication, make_reminder, notification_log
):
    reminder = make_reminder(make_medication(make_pet(owner)), NOW)

    resp = client.post(f"/notifications/reminders/{reminder.id}/trigger", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["email_sent"] is True
    assert resp.json()["push_sent"] is True
    assert notification_log.count() == 2
    assert client.post("/notifications/reminders/9999/trigger", headers=headers).status_code == 404


def test_jobs_require_configured_key(client, monkeypatch):
    monkeypatch.setattr(config, "JOB_RUN_KEY", "")
    assert client.get("/jobs/run-reminder-notifications", params={"key": "x"}).status_code == 503

    monkeypatch.setattr(config, "JOB_RUN_KEY", "s3cret")
    assert client.get("/jobs/run-reminder-notifications", params={"key": "wrong"}).status_code == 401

    ok = client.get("/jobs/run-reminder-notifications", params={"key": "s3cret"})
    assert ok.status_code == 200
    assert ok.json()["ok"] is True
    assert client.get("/jobs/run-missed-sweep", params={"key": "s3cret"}).json() == {"ok": True, "missed": 0}


def test_sandbox_log(client):
    payload = {"type": "email", "recipient": "owner@example.com", "subject": "Hi", "message": "Time for meds"}

    created = client.post("/dev/notifications", json=payload)
    assert created.json()["notification_id"].startswith("notif_")
    assert client.get("/dev/notifications", params={"action": "count"}).json()["count"] == 1
    listed = client.get("/dev/notifications").json()
    assert listed["notifications"][0]["recipient"] == "owner@example.com"

    client.get("/dev/notifications", params={"action": "clear"})
    assert client.get("/dev/notifications", params={"action": "count"}).json()["count"] == 0

    client.post("/dev/notifications", json=payload)
    assert client.delete("/dev/notifications").json()["success"] is True
    assert client.get("/dev/notifications").json()["count"] == 0


def test_sandbox_disabled_in_production(client, monkeypatch):
    monkeypatch.setattr(config, "APP_ENV", "production")
    assert client.get("/dev/notifications").status_code == 403
