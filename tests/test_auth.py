from conftest import PASSWORD, auth_headers, signup
from teamboard.models import Project, ProjectMember, User
from teamboard.services.accounts import DEFAULT_PROJECT_NAME


class TestSignup:

    def test_creates_default_project_owned_by_user(self, client, session_factory):
        response = signup(client, "Carol@Example.com", "Carol")

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["email"] == "carol@example.com"
        assert body["user"]["timezone"] == "UTC"
        assert body["user"]["notifications"] == {"email": True, "push": False}
        assert body["default_project"]["name"] == DEFAULT_PROJECT_NAME
        assert body["joined_project_id"] is None

        with session_factory() as db:
            members = db.query(ProjectMember).filter_by(project_id=body["default_project"]["id"]).all()
            assert [(m.user_id, m.role) for m in members] == [(body["user"]["id"], "owner")]

    def test_password_is_hashed(self, client, session_factory):
        signup(client, "carol@example.com")
        with session_factory() as db:
            user = db.query(User).filter_by(email="carol@example.com").one()
            assert user.hashed_password != PASSWORD
            assert user.hashed_password.startswith("$2")

    def test_duplicate_email_conflicts(self, client, session_factory):
        signup(client, "carol@example.com")
        response = signup(client, "CAROL@example.com")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"
        with session_factory() as db:
            assert db.query(User).count() == 1
            assert db.query(Project).count() == 1

    def test_short_password_is_rejected(self, client):
        response = client.post("/auth/signup", json={"email": "c@x.com", "password": "123", "name": "C"})
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"]

    def test_invalid_email_is_rejected(self, client):
        response = client.post("/auth/signup", json={"email": "nope", "password": PASSWORD, "name": "C"})
        assert response.status_code == 422


class TestLogin:

    def test_valid_credentials(self, client, alice):
        response = client.post("/auth/login", json={"email": "Alice@Example.com", "password": PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "alice@example.com"

        me = client.get("/users/me", headers=auth_headers(response))
        assert me.status_code == 200
        assert me.json()["name"] == "Alice"

    def test_wrong_password(self, client, alice):
        response = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-one"})
        assert response.status_code == 401
        assert response.json()["error"] == {"code": "UNAUTHENTICATED", "message": "Invalid credentials"}

    def test_unknown_email(self, client):
        response = client.post("/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
        assert response.status_code == 401


class TestProfile:

    def test_requires_authentication(self, client):
        assert client.get("/users/me").status_code == 401

    def test_rejects_garbage_token(self, client):
        response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_update_profile(self, client, alice):
        headers, _, _ = alice
        response = client.put(
            "/users/me",
            json={
                "name": "Alice Smith",
                "timezone": "Europe/Paris",
                "notifications": {"email": False, "push": True},
            },
            headers=headers,
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["name"] == "Alice Smith"
        assert body["timezone"] == "Europe/Paris"
        assert body["notifications"] == {"email": False, "push": True}

    def test_partial_update_keeps_other_fields(self, client, alice):
        headers, _, _ = alice
        client.put("/users/me", json={"timezone": "Asia/Tokyo"}, headers=headers)
        response = client.put("/users/me", json={"profile_picture_url": "https://img.example/a.png"}, headers=headers)

        body = response.json()
        assert body["timezone"] == "Asia/Tokyo"
        assert body["name"] == "Alice"
        assert body["profile_picture_url"] == "https://img.example/a.png"

    def test_clear_profile_picture(self, client, alice):
        headers, _, _ = alice
        client.put("/users/me", json={"profile_picture_url": "https://img.example/a.png"}, headers=headers)
        response = client.put("/users/me", json={"profile_picture_url": None, "name": None}, headers=headers)

        body = response.json()
        assert body["profile_picture_url"] is None
        assert body["name"] == "Alice"
