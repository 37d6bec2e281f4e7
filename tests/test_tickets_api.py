from campus_events.models import Event, Ticket, TicketStatus, UserRole

API = "/api/v1/tickets"


def _claim(client, headers, event_id):
    return client.post(f"{API}/claim", json={"event_id": event_id}, headers=headers)


def test_claim_returns_ticket_with_qr(client, auth_headers, student, event):
    response = _claim(client, auth_headers(student), event.id)
    assert response.status_code == 201
    ticket = response.json()["ticket"]
    assert ticket["status"] == "active"
    assert ticket["event_id"] == event.id
    assert ticket["user_id"] == student.id
    assert ticket["qr_code_image"].startswith("data:image/png;base64,")
    assert ticket["event"]["title"] == event.title


def test_claim_requires_token(client, event):
    response = client.post(f"{API}/claim", json={"event_id": event.id})
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthorized"


def test_claim_with_bad_token(client, event):
    response = _claim(client, {"Authorization": "Bearer not-a-token"}, event.id)
    assert response.status_code == 401


def test_duplicate_claim_is_rejected(client, auth_headers, student, event):
    headers = auth_headers(student)
    assert _claim(client, headers, event.id).status_code == 201

    response = _claim(client, headers, event.id)
    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "conflict"
    assert body["message"] == "You already have a ticket for this event"
    assert body["detail"] == body["message"]


def test_sold_out(client, auth_headers, student, other_student, make_event, organizer):
    single = make_event(organizer, capacity=1)
    assert _claim(client, auth_headers(student), single.id).status_code == 201

    response = _claim(client, auth_headers(other_student), single.id)
    assert response.status_code == 400
    assert response.json()["message"] == "Event is sold out"


def test_claim_missing_event(client, auth_headers, student):
    response = _claim(client, auth_headers(student), 4242)
    assert response.status_code == 404
    assert response.json()["message"] == "Event not found"


def test_organizer_cannot_claim(client, auth_headers, organizer, event):
    response = _claim(client, auth_headers(organizer), event.id)
    assert response.status_code == 403
    assert response.json()["kind"] == "forbidden"


def test_claim_body_validation_is_422(client, auth_headers, student):
    response = client.post(f"{API}/claim", json={}, headers=auth_headers(student))
    assert response.status_code == 422


def test_my_tickets(client, auth_headers, student, event):
    headers = auth_headers(student)
    _claim(client, headers, event.id)

    response = client.get(f"{API}/my", headers=headers)
    assert response.status_code == 200
    tickets = response.json()
    assert len(tickets) == 1
    assert tickets[0]["qr_code_image"].startswith("data:image/png;base64,")


def test_validate_then_use(client, db, auth_headers, student, organizer, event):
    ticket = _claim(client, auth_headers(student), event.id).json()["ticket"]
    organizer_headers = auth_headers(organizer)

    response = client.post(f"{API}/validate", json={"qr_data": ticket["qr_code"]}, headers=organizer_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["ticket"]["ticket_id"] == ticket["ticket_id"]
    assert body["ticket"]["user"]["email"] == student.email

    response = client.post(f"{API}/{ticket['ticket_id']}/use", headers=organizer_headers)
    assert response.status_code == 200
    assert response.json()["ticket"]["status"] == "used"
    assert response.json()["ticket"]["used_at"] is not None

    response = client.post(f"{API}/{ticket['ticket_id']}/use", headers=organizer_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Ticket cannot be used"
    assert body["status"] == "used"
    assert body["used_at"] is not None

    response = client.post(f"{API}/validate", json={"qr_data": ticket["qr_code"]}, headers=organizer_headers)
    assert response.json()["valid"] is False


def test_validate_invalid_qr(client, auth_headers, organizer):
    response = client.post(f"{API}/validate", json={"qr_data": "nope"}, headers=auth_headers(organizer))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid QR format"


def test_validate_requires_qr_data(client, auth_headers, organizer):
    response = client.post(f"{API}/validate", json={}, headers=auth_headers(organizer))
    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_student_cannot_validate(client, auth_headers, student, event):
    ticket = _claim(client, auth_headers(student), event.id).json()["ticket"]
    response = client.post(f"{API}/validate", json={"qr_data": ticket["qr_code"]}, headers=auth_headers(student))
    assert response.status_code == 403


def test_use_from_other_organization(client, auth_headers, student, event, make_user, make_organization):
    ticket = _claim(client, auth_headers(student), event.id).json()["ticket"]
    outsider = make_user(UserRole.ORGANIZER, organization_id=make_organization().id)

    response = client.post(f"{API}/{ticket['ticket_id']}/use", headers=auth_headers(outsider))
    assert response.status_code == 403
    assert response.json()["message"] == "Ticket does not belong to your organization"


def test_use_unknown_ticket(client, auth_headers, organizer):
    response = client.post(f"{API}/does-not-exist/use", headers=auth_headers(organizer))
    assert response.status_code == 404


def test_return_ticket(client, db, auth_headers, student, event):
    headers = auth_headers(student)
    ticket = _claim(client, headers, event.id).json()["ticket"]

    response = client.post(
        f"{API}/{ticket['ticket_id']}/return",
        json={"reason": "schedule_conflict", "comment": "Exam moved"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Ticket returned successfully"
    assert response.json()["ticket"]["status"] == "cancelled"

    db.expire_all()
    stored = db.query(Ticket).filter(Ticket.ticket_id == ticket["ticket_id"]).one()
    assert stored.status == TicketStatus.CANCELLED
    assert stored.return_comment == "Exam moved"
    assert db.get(Event, event.id).registrations == 0


def test_return_with_unknown_reason(client, auth_headers, student, event):
    headers = auth_headers(student)
    ticket = _claim(client, headers, event.id).json()["ticket"]

    response = client.post(f"{API}/{ticket['ticket_id']}/return", json={"reason": "meh"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_return_someone_elses_ticket(client, auth_headers, student, other_student, event):
    ticket = _claim(client, auth_headers(student), event.id).json()["ticket"]
    response = client.post(
        f"{API}/{ticket['ticket_id']}/return",
        json={"reason": "other"},
        headers=auth_headers(other_student),
    )
    assert response.status_code == 403


def test_ticket_details(client, auth_headers, student, organizer, other_student, event):
    ticket = _claim(client, auth_headers(student), event.id).json()["ticket"]
    url = f"{API}/ticket-details/{ticket['ticket_id']}"

    owner_view = client.get(url, headers=auth_headers(student))
    assert owner_view.status_code == 200
    assert owner_view.json()["qr_code_image"].startswith("data:image/png;base64,")

    assert client.get(url, headers=auth_headers(organizer)).status_code == 200
    assert client.get(url, headers=auth_headers(other_student)).status_code == 403
    assert client.get(f"{API}/ticket-details/missing", headers=auth_headers(student)).status_code == 404
