from campus_events.core.security import decode_token, get_password_hash, verify_password
from campus_events.models import User, UserRole

API = "/api/v1/auth"


def _registration(**overrides):
    payload = {
        "email": "Ada@Campus.edu",
        "password": "longenough",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "student_id": "S-42",
    }
    payload.update(overrides)
    return payload


class TestRegister:
    def test_student(self, client, db):
        response = client.post(f"{API}/register", json=_registration())
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["role"] == "student"
        assert decode_token(body["access_token"])["sub"] == str(body["user_id"])

        stored = db.get(User, body["user_id"])
        assert stored.email == "ada@campus.edu"
        assert stored.is_approved is True
        assert stored.organizer_status is None

    def test_organizer_starts_pending(self, client, db, organization):
        response = client.post(
            f"{API}/register",
            json=_registration(role="organizer", organization_id=organization.id),
        )
        assert response.status_code == 201

        stored = db.get(User, response.json()["user_id"])
        assert stored.role == UserRole.ORGANIZER
        assert stored.organizer_status.value == "pending"
        assert stored.is_approved is False

    def test_organizer_needs_organization(self, client):
        response = client.post(f"{API}/register", json=_registration(role="organizer"))
        assert response.status_code == 400
        assert response.json()["message"] == "Organizers must select an organization"

    def test_organizer_needs_active_organization(self, client, make_organization):
        closed = make_organization(is_active=False)
        response = client.post(
            f"{API}/register", json=_registration(role="organizer", organization_id=closed.id)
        )
        assert response.status_code == 400

    def test_admin_cannot_self_register(self, client):
        assert client.post(f"{API}/register", json=_registration(role="admin")).status_code == 422

    def test_short_password(self, client):
        assert client.post(f"{API}/register", json=_registration(password="abc")).status_code == 422

    def test_duplicate_email_any_case(self, client):
        client.post(f"{API}/register", json=_registration())
        response = client.post(f"{API}/register", json=_registration(email="ADA@campus.edu"))
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists with this email"


class TestLogin:
    def test_success(self, client, student, password):
        response = client.post(f"{API}/login", json={"email": student.email, "password": password})
        assert response.status_code == 200
        assert response.json()["user_id"] == student.id

        me = client.get(
            f"{API}/me", headers={"Authorization": f"Bearer {response.json()['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == student.email

    def test_wrong_password(self, client, student):
        response = client.post(f"{API}/login", json={"email": student.email, "password": "nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unknown_email(self, client, password):
        response = client.post(f"{API}/login", json={"email": "ghost@campus.edu", "password": password})
        assert response.status_code == 401

    def test_deactivated_account(self, client, make_user, password):
        user = make_user(is_active=False)
        response = client.post(f"{API}/login", json={"email": user.email, "password": password})
        assert response.status_code == 403

    def test_deactivated_token_rejected(self, client, auth_headers, make_user):
        user = make_user(is_active=False)
        response = client.get(f"{API}/me", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["message"] == "Account is deactivated"

    def test_token_for_deleted_user(self, client, db, auth_headers, student):
        headers = auth_headers(student)
        db.delete(student)
        db.commit()
        response = client.get(f"{API}/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestPasswords:
    def test_hash_round_trip(self):
        hashed = get_password_hash("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_salted(self):
        assert get_password_hash("same") != get_password_hash("same")

    def test_malformed_hash(self):
        assert not verify_password("x", "not-a-hash")
        assert not verify_password("x", None)


class TestProfile:
    def test_update_profile(self, client, auth_headers, student):
        response = client.put(
            "/api/v1/users/profile",
            json={"first_name": "  Grace ", "phone_number": "+1 555 0100"},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Grace"
        assert response.json()["phone_number"] == "+1 555 0100"

    def test_read_user(self, client, auth_headers, student, organizer):
        response = client.get(f"/api/v1/users/{student.id}", headers=auth_headers(organizer))
        assert response.status_code == 200
        assert client.get("/api/v1/users/999", headers=auth_headers(organizer)).status_code == 404


class TestService:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_process_time_header(self, client):
        assert "X-Process-Time" in client.get("/health").headers
