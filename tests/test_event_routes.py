from datetime import date, timedelta

from conftest import auth_headers, make_profile


def _create_event(client, headers, **overrides):
    payload = {
        "name": "Redwood Region Logging Conference",
        "description": "Annual conference and equipment show",
        "event_date": (date.today() + timedelta(days=14)).isoformat(),
        "event_type": "conference",
        "capacity": 2,
        "location": "Eureka, CA",
    }
    payload.update(overrides)
    response = client.post("/admin/events/", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_admin_creates_event(client, admin_user, admin_headers):
    event = _create_event(client, admin_headers)
    assert event["current_registrations"] == 0
    assert event["status"] == "active"
    assert event["created_by"] == admin_user.id


def test_public_list_hides_past_and_cancelled(client, admin_headers):
    upcoming = _create_event(client, admin_headers, name="Upcoming Workshop")
    _create_event(client, admin_headers, name="Last Year", event_date=(date.today() - timedelta(days=30)).isoformat())
    cancelled = _create_event(client, admin_headers, name="Called Off")
    assert client.delete(f"/admin/events/{cancelled['id']}", headers=admin_headers).status_code == 200

    response = client.get("/events/")
    assert [e["id"] for e in response.json()] == [upcoming["id"]]
    assert len(client.get("/admin/events/", headers=admin_headers).json()) == 3


def test_register_and_duplicate(client, admin_headers, applicant_headers):
    event = _create_event(client, admin_headers)
    response = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={"notes": "Vegetarian"})
    assert response.status_code == 201
    assert response.json()["registration_status"] == "registered"
    assert response.json()["payment_status"] == "pending"

    duplicate = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "User is already registered for this event"

    assert client.get(f"/events/{event['id']}").json()["current_registrations"] == 1


def test_full_event_rejects_registration(client, db, admin_headers, applicant_headers):
    event = _create_event(client, admin_headers, capacity=1)
    assert client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={}).status_code == 201

    other = make_profile(db, "second@example.com")
    response = client.post(f"/events/{event['id']}/register", headers=auth_headers(other), json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Event is full"


def test_cancel_registration_frees_a_seat(client, admin_headers, applicant_headers):
    event = _create_event(client, admin_headers)
    registration = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={}).json()

    mine = client.get("/events/registrations/me", headers=applicant_headers).json()
    assert [r["id"] for r in mine] == [registration["id"]]

    response = client.delete(f"/events/registrations/{registration['id']}", headers=applicant_headers)
    assert response.status_code == 200
    assert response.json()["registration_status"] == "cancelled"
    assert client.get(f"/events/{event['id']}").json()["current_registrations"] == 0

    again = client.delete(f"/events/registrations/{registration['id']}", headers=applicant_headers)
    assert again.status_code == 400

    # Registering again reuses the cancelled row
    response = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={})
    assert response.status_code == 201
    assert response.json()["id"] == registration["id"]


def test_cannot_cancel_someone_elses_registration(client, db, admin_headers, applicant_headers):
    event = _create_event(client, admin_headers)
    registration = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={}).json()
    other = make_profile(db, "second@example.com")
    response = client.delete(f"/events/registrations/{registration['id']}", headers=auth_headers(other))
    assert response.status_code == 403


def test_admin_marks_attendance(client, admin_headers, applicant_headers):
    event = _create_event(client, admin_headers)
    registration = client.post(f"/events/{event['id']}/register", headers=applicant_headers, json={}).json()

    response = client.put(f"/admin/events/registrations/{registration['id']}", headers=admin_headers,
                          json={"registration_status": "attended", "payment_status": "paid"})
    assert response.status_code == 200
    assert response.json()["registration_status"] == "attended"
    assert response.json()["payment_status"] == "paid"

    listed = client.get(f"/admin/events/{event['id']}/registrations", headers=admin_headers).json()
    assert [r["registration_status"] for r in listed] == ["attended"]


def test_event_stats(client, admin_headers, applicant_headers):
    first = _create_event(client, admin_headers, capacity=10)
    _create_event(client, admin_headers, capacity=5, status="inactive")
    client.post(f"/events/{first['id']}/register", headers=applicant_headers, json={})

    stats = client.get("/admin/events/stats", headers=admin_headers).json()
    assert stats == {
        "total": 2,
        "active": 1,
        "upcoming": 1,
        "total_registrations": 1,
        "total_capacity": 15,
    }
