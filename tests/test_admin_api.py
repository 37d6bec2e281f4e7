from campus_events.models import Event, EventStatus, Organization, OrganizerStatus, Ticket, User, UserRole

API = "/api/v1/admin"


def _claim(client, headers, event_id):
    return client.post("/api/v1/tickets/claim", json={"event_id": event_id}, headers=headers)


class TestAccess:
    def test_dashboard_requires_admin(self, client, auth_headers, organizer, student):
        for user in (organizer, student):
            response = client.get(f"{API}/dashboard", headers=auth_headers(user))
            assert response.status_code == 403
            assert response.json()["message"] == "Admin access required"

    def test_dashboard_requires_token(self, client):
        assert client.get(f"{API}/dashboard").status_code == 401

    def test_dashboard(self, client, auth_headers, admin, student, organizer, event):
        _claim(client, auth_headers(student), event.id)

        response = client.get(f"{API}/dashboard", headers=auth_headers(admin))
        assert response.status_code == 200
        body = response.json()
        assert body["users"]["by_role"] == {"student": 1, "organizer": 1, "admin": 1}
        assert body["users"]["total"] == 3
        assert body["events"]["by_status"]["published"] == 1
        assert body["tickets"]["by_status"]["active"] == 1
        assert body["organizations"]["total"] == 1


class TestUsers:
    def test_list_and_filter(self, client, auth_headers, admin, student, organizer):
        headers = auth_headers(admin)

        everyone = client.get(f"{API}/users", headers=headers).json()
        assert everyone["pagination"]["total_items"] == 3

        organizers = client.get(f"{API}/users", params={"role": "organizer"}, headers=headers).json()
        assert [u["id"] for u in organizers["users"]] == [organizer.id]

        found = client.get(f"{API}/users", params={"search": student.last_name}, headers=headers).json()
        assert [u["id"] for u in found["users"]] == [student.id]

    def test_approve_pending_organizer(self, client, auth_headers, admin, make_user, organization):
        pending = make_user(
            UserRole.ORGANIZER,
            organization_id=organization.id,
            organizer_status=OrganizerStatus.PENDING,
            is_approved=False,
        )
        listed = client.get(
            f"{API}/users", params={"organizer_status": "pending"}, headers=auth_headers(admin)
        ).json()
        assert [u["id"] for u in listed["users"]] == [pending.id]

        response = client.put(
            f"{API}/users/{pending.id}/approve",
            json={"is_approved": True, "organizer_notes": "Verified with the dean"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["is_approved"] is True
        assert body["organizer_status"] == "approved"
        assert body["organizer_notes"] == "Verified with the dean"

    def test_reject_organizer(self, client, auth_headers, admin, organizer):
        response = client.put(
            f"{API}/users/{organizer.id}/approve", json={"is_approved": False}, headers=auth_headers(admin)
        )
        assert response.json()["organizer_status"] == "rejected"

        # A rejected organizer loses organizer capabilities straight away
        events = client.get("/api/v1/events/organizer", headers=auth_headers(organizer))
        assert events.status_code == 403

    def test_approve_missing_user(self, client, auth_headers, admin):
        response = client.put(f"{API}/users/999/approve", json={"is_approved": True}, headers=auth_headers(admin))
        assert response.status_code == 404

    def test_promote_student_to_organizer(self, client, auth_headers, admin, student, organization):
        response = client.put(
            f"{API}/users/{student.id}/role",
            json={"role": "organizer", "organization_id": organization.id},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "organizer"
        assert body["organizer_status"] == "pending"
        assert body["is_approved"] is False
        assert body["organization_id"] == organization.id

    def test_promote_without_organization(self, client, auth_headers, admin, student):
        response = client.put(f"{API}/users/{student.id}/role", json={"role": "organizer"}, headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_demote_organizer(self, client, auth_headers, admin, organizer):
        response = client.put(f"{API}/users/{organizer.id}/role", json={"role": "student"}, headers=auth_headers(admin))
        body = response.json()
        assert body["role"] == "student"
        assert body["organizer_status"] is None
        assert body["is_approved"] is True

    def test_cannot_delete_self(self, client, auth_headers, admin):
        response = client.delete(f"{API}/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account"

    def test_delete_user_releases_seats(self, client, db, auth_headers, admin, student, other_student, event):
        student_id, event_id = student.id, event.id
        _claim(client, auth_headers(student), event_id)
        _claim(client, auth_headers(other_student), event_id)

        response = client.delete(f"{API}/users/{student_id}", headers=auth_headers(admin))
        assert response.status_code == 200

        db.expire_all()
        assert db.get(User, student_id) is None
        assert db.get(Event, event_id).registrations == 1
        assert db.query(Ticket).filter(Ticket.event_id == event_id).count() == 1


class TestEvents:
    def test_list_with_filters(self, client, auth_headers, admin, organizer, make_event):
        pending = make_event(organizer, title="Pending", is_approved=False, status=EventStatus.DRAFT)
        make_event(organizer, title="Live")

        body = client.get(f"{API}/events", params={"is_approved": "false"}, headers=auth_headers(admin)).json()
        assert [e["id"] for e in body["events"]] == [pending.id]

        drafts = client.get(f"{API}/events", params={"status": "draft"}, headers=auth_headers(admin)).json()
        assert [e["id"] for e in drafts["events"]] == [pending.id]

        everything = client.get(f"{API}/events", headers=auth_headers(admin)).json()
        assert everything["pagination"]["total_items"] == 2

    def test_approve_makes_event_public(self, client, auth_headers, admin, organizer, make_event):
        candidate = make_event(organizer, is_approved=False)
        assert client.get("/api/v1/events").json()["events"] == []

        response = client.put(
            f"{API}/events/{candidate.id}/approve",
            json={"is_approved": True, "reason": "Looks good"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["approval_reason"] == "Looks good"
        assert [e["id"] for e in client.get("/api/v1/events").json()["events"]] == [candidate.id]

    def test_change_status(self, client, auth_headers, admin, event):
        response = client.put(
            f"{API}/events/{event.id}/status", json={"status": "completed"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_change_status_rejects_unknown(self, client, auth_headers, admin, event):
        response = client.put(
            f"{API}/events/{event.id}/status", json={"status": "archived"}, headers=auth_headers(admin)
        )
        assert response.status_code == 422

    def test_delete_event(self, client, db, auth_headers, admin, event):
        event_id = event.id
        assert client.delete(f"{API}/events/{event_id}", headers=auth_headers(admin)).status_code == 200
        db.expire_all()
        assert db.get(Event, event_id) is None
        assert client.delete(f"{API}/events/{event_id}", headers=auth_headers(admin)).status_code == 404


class TestOrganizations:
    def test_create_and_list(self, client, auth_headers, admin):
        headers = auth_headers(admin)
        response = client.post(
            f"{API}/organizations",
            json={"name": "Chess Club", "contact_email": "chess@campus.edu"},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["created_by_id"] == admin.id
        assert response.json()["is_active"] is True

        listed = client.get(f"{API}/organizations", params={"search": "chess"}, headers=headers).json()
        assert [o["name"] for o in listed] == ["Chess Club"]

    def test_duplicate_name(self, client, auth_headers, admin, organization):
        response = client.post(f"{API}/organizations", json={"name": organization.name}, headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["kind"] == "conflict"

    def test_rename_to_taken_name(self, client, auth_headers, admin, organization, make_organization):
        other = make_organization()
        response = client.put(
            f"{API}/organizations/{other.id}", json={"name": organization.name}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    def test_update(self, client, auth_headers, admin, organization):
        response = client.put(
            f"{API}/organizations/{organization.id}",
            json={"description": "Robotics and more"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Robotics and more"
        assert response.json()["name"] == organization.name

    def test_toggle_status(self, client, auth_headers, admin, organization):
        url = f"{API}/organizations/{organization.id}/toggle-status"
        assert client.put(url, headers=auth_headers(admin)).json()["is_active"] is False
        assert client.put(url, headers=auth_headers(admin)).json()["is_active"] is True

    def test_delete_with_members_is_blocked(self, client, auth_headers, admin, organizer, organization):
        response = client.delete(f"{API}/organizations/{organization.id}", headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["member_count"] == 1

    def test_delete_empty(self, client, db, auth_headers, admin, make_organization):
        empty_id = make_organization().id
        response = client.delete(f"{API}/organizations/{empty_id}", headers=auth_headers(admin))
        assert response.status_code == 200
        db.expire_all()
        assert db.get(Organization, empty_id) is None
