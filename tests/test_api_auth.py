"""API tests for signup, signin and profile changes."""
from app.models.subscription import Subscription
from app.models.user import User
from app.utils.auth import create_access_token, hash_password


def signup(client, email="new@example.com", password="secret123", **extra):
    return client.post("/api/auth/signup", json={"email": email, "password": password, **extra})


class TestSignup:
    def test_creates_account_with_inactive_subscription(self, client, db_session):
        response = signup(client, first_name="Ada", last_name="Lovelace")
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["display_name"] == "Ada Lovelace"

        user = db_session.query(User).filter(User.email == "new@example.com").one()
        subscription = db_session.query(Subscription).filter(Subscription.user_id == user.id).one()
        assert subscription.active is False

    def test_new_account_is_free_tier(self, client):
        token = signup(client).json()["token"]
        usage = client.get("/api/resumes/usage", headers={"Authorization": f"Bearer {token}"}).json()
        assert usage["daily_limit"] == 5

    def test_duplicate_email_is_case_insensitive(self, client):
        assert signup(client, email="Dup@Example.com").status_code == 201
        response = signup(client, email="dup@example.com")
        assert response.status_code == 409

    def test_underscore_is_not_a_wildcard(self, client):
        assert signup(client, email="axb@example.com").status_code == 201
        response = signup(client, email="a_b@example.com")
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "a_b@example.com"

    def test_invalid_email(self, client):
        assert signup(client, email="not-an-email").status_code == 422

    def test_short_password(self, client):
        assert signup(client, password="123").status_code == 422


class TestSignin:
    def test_valid_credentials(self, client):
        signup(client)
        response = client.post("/api/auth/signin", json={"email": "new@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["message"] == "Login successful"

    def test_wrong_password(self, client):
        signup(client)
        response = client.post("/api/auth/signin", json={"email": "new@example.com", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_unknown_email(self, client):
        response = client.post("/api/auth/signin", json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 401

    def test_percent_in_email_does_not_match_other_accounts(self, client):
        signup(client, email="victim@example.com")
        response = client.post("/api/auth/signin", json={"email": "%@example.com", "password": "secret123"})
        assert response.status_code in (401, 422)
        assert "token" not in response.json()

    def test_email_is_case_insensitive(self, client):
        signup(client, email="new@example.com")
        response = client.post("/api/auth/signin", json={"email": "NEW@example.com", "password": "secret123"})
        assert response.status_code == 200

    def test_deactivated_account(self, client, db_session):
        db_session.add(User(email="gone@example.com", hashed_password=hash_password("secret123"), is_active=False))
        db_session.commit()
        response = client.post("/api/auth/signin", json={"email": "gone@example.com", "password": "secret123"})
        assert response.status_code == 401


class TestMe:
    def test_me(self, client, make_user, auth_headers):
        user = make_user(email="me@example.com")
        body = client.get("/api/auth/me", headers=auth_headers(user)).json()
        assert body["id"] == user.id
        assert body["email"] == "me@example.com"

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_token_without_subject(self, client):
        token = create_access_token({"email": "x@example.com"})
        assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401

    def test_null_token_value(self, client):
        assert client.get("/api/auth/me", headers={"Authorization": "Bearer null"}).status_code == 401


class TestProfile:
    def test_update_names(self, client, make_user, auth_headers):
        user = make_user()
        response = client.put("/api/profile", json={"first_name": "Grace", "last_name": "Hopper"}, headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json()["display_name"] == "Grace Hopper"

    def test_change_password(self, client):
        token = signup(client).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = client.put(
            "/api/profile/password",
            json={"old_password": "secret123", "new_password": "better456"},
            headers=headers,
        )
        assert response.status_code == 200
        signin = client.post("/api/auth/signin", json={"email": "new@example.com", "password": "better456"})
        assert signin.status_code == 200

    def test_change_password_rejects_wrong_current(self, client):
        token = signup(client).json()["token"]
        response = client.put(
            "/api/profile/password",
            json={"old_password": "nope", "new_password": "better456"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 400

    def test_change_password_rejects_same_password(self, client):
        token = signup(client).json()["token"]
        response = client.put(
            "/api/profile/password",
            json={"old_password": "secret123", "new_password": "secret123"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 400


def test_health(client):
    assert client.get("/api/health").json() == {"status": "OK", "message": "Server is running"}
