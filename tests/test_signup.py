"""
tests/test_signup.py -- Integration tests for POST /signup.

Coverage:
  - Successful signup returns the public view with a store-assigned id
  - password_hash and salt never appear in the response
  - The stored record holds a salted hash, not the cleartext password
  - Duplicate username -> 412 and the existing record is untouched
  - Two different usernames both succeed
  - Malformed bodies -> 422, without echoing the submitted values
  - Passwords are hashed exactly as sent; username and email are stripped
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from auth.store import UserStore
from auth.tokens import hash_password


def _signup(client: TestClient, username: str = "scipi", email: str = "scipi@example.com", password: str = "password1234"):
    return client.post("/signup", json={"username": username, "email": email, "password": password})


class TestSignup:
    def test_signup_returns_public_view(self, client: TestClient) -> None:
        resp = _signup(client)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["id"]
        assert data["username"] == "scipi"
        assert data["email"] == "scipi@example.com"
        assert data["auth_token"] is None
        assert data["created_at"] == data["updated_at"] == data["last_login"]

    def test_signup_hides_secrets(self, client: TestClient) -> None:
        data = _signup(client).json()
        assert "password_hash" not in data
        assert "salt" not in data
        assert "password" not in data

    def test_signup_stores_salted_hash(self, client: TestClient, user_store: UserStore) -> None:
        _signup(client)
        stored = user_store.get_by_username("scipi")
        assert stored.password_hash != "password1234"
        assert stored.password_hash == hash_password(stored.salt, "password1234")

    def test_each_account_gets_its_own_salt(self, client: TestClient, user_store: UserStore) -> None:
        _signup(client, username="a")
        _signup(client, username="b")
        a = user_store.get_by_username("a")
        b = user_store.get_by_username("b")
        assert a.salt != b.salt
        assert a.password_hash != b.password_hash

    def test_same_username_rejected(self, client: TestClient, user_store: UserStore) -> None:
        assert _signup(client).status_code == 200
        before = user_store.get_by_username("scipi")

        resp = _signup(client, email="other@example.com", password="different")
        assert resp.status_code == 412
        assert resp.json()["error"]["code"] == "username_taken"

        after = user_store.get_by_username("scipi")
        assert after == before

    def test_multi_signup(self, client: TestClient) -> None:
        assert _signup(client, username="scipi").status_code == 200
        assert _signup(client, username="scipi_2").status_code == 200


class TestSignupValidation:
    def test_missing_field(self, client: TestClient) -> None:
        resp = client.post("/signup", json={"username": "scipi", "email": "scipi@example.com"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_colon_in_username(self, client: TestClient) -> None:
        resp = _signup(client, username="sci:pi")
        assert resp.status_code == 422

    def test_empty_password(self, client: TestClient) -> None:
        resp = _signup(client, password="")
        assert resp.status_code == 422

    def test_password_too_long_not_echoed(self, client: TestClient) -> None:
        secret = "hunter2-" + "x" * 1024
        resp = _signup(client, password=secret)
        assert resp.status_code == 422
        assert secret not in resp.text
        assert "hunter2-" not in resp.text


class TestSignupWhitespace:
    def test_password_whitespace_kept(self, client: TestClient, user_store: UserStore) -> None:
        """Password is hashed exactly as sent; login must accept the same bytes."""
        assert _signup(client, username="ws", password="  secret pw").status_code == 200
        stored = user_store.get_by_username("ws")
        assert stored.password_hash == hash_password(stored.salt, "  secret pw")

        resp = client.post("/login", headers={"Authorization": "ws:  secret pw"})
        assert resp.status_code == 200, resp.text
        assert client.post("/login", headers={"Authorization": "ws:secret pw"}).status_code == 401

    def test_username_and_email_stripped(self, client: TestClient, user_store: UserStore) -> None:
        resp = _signup(client, username="  scipi ", email=" scipi@example.com ")
        assert resp.status_code == 200
        assert resp.json()["username"] == "scipi"
        assert resp.json()["email"] == "scipi@example.com"
        assert user_store.get_by_username("scipi") is not None
