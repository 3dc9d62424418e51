"""
tests/test_auth_routes.py -- Integration tests for the /auth endpoints.

These tests exercise the full stack: FastAPI routing -> request validation ->
AuthGuardMiddleware -> AuthService -> CredentialStore/bcrypt/JWT -> cookie ->
response model serialization.

Coverage:
  - signup: 201 + cookie + {user}; duplicate 409; validation 400
  - signin: 200 + cookie; wrong password and unknown email give identical 401
  - check: 401 without cookie; 200 with the cookie from signin; tampered 401;
    deleted user 401
  - logout: 200 + cleared cookie; check afterwards 401
  - /protected: guarded like /auth/check
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from api.main import app, init_auth_state
from auth.store import CredentialStore
from core.config import Settings

ANN = {"email": "a@x.com", "name": "Ann Lee", "password": "Passw0rd!"}


def _set_cookie_headers(resp) -> list[str]:
    return resp.headers.get_list("set-cookie")


def _signup(client: TestClient, body: dict = ANN):
    return client.post("/auth/signup", json=body)


class TestSignUp:
    def test_signup_created_with_cookie(self, client: TestClient) -> None:
        resp = _signup(client)
        assert resp.status_code == 201, resp.text
        assert resp.json() == {"user": {"email": "a@x.com", "name": "Ann Lee"}}
        headers = _set_cookie_headers(resp)
        assert len(headers) == 1
        assert headers[0].startswith("access_token=")
        attrs = {part.strip().split("=")[0].lower(): part.strip() for part in headers[0].split(";")[1:]}
        assert "httponly" in attrs
        assert attrs["samesite"].lower() == "samesite=lax"
        assert attrs["max-age"] == "Max-Age=86400"
        assert attrs["path"] == "Path=/"
        assert "secure" not in attrs
        assert resp.headers["cache-control"] == "no-store"

    def test_body_never_contains_password_material(self, client: TestClient) -> None:
        body = _signup(client).text
        assert "Passw0rd!" not in body
        assert "$2b$" not in body

    def test_repeat_signup_conflicts(self, client: TestClient) -> None:
        assert _signup(client).status_code == 201
        resp = _signup(client, {**ANN, "name": "Someone Else", "password": "Other123$"})
        assert resp.status_code == 409
        data = resp.json()
        assert data["code"] == "conflict"
        assert data["message"] == "User with this email already exists"
        assert not _set_cookie_headers(resp)

    @pytest.mark.parametrize(
        "override,field",
        [
            ({"email": "not-an-email"}, "email"),
            ({"name": "Al"}, "name"),
            ({"password": "Sh0rt!"}, "password"),
            ({"password": "NoDigits!!"}, "password"),
            ({"password": "NoSpecial123"}, "password"),
            ({"password": "12345678!"}, "password"),
            ({"password": "Bad^Chars1!"}, "password"),
            ({"password": "Passwd!٣"}, "password"),
            ({"password": "Passw0rd!\n"}, "password"),
        ],
    )
    def test_validation_errors(self, client: TestClient, override: dict, field: str) -> None:
        resp = _signup(client, {**ANN, **override})
        assert resp.status_code == 400, resp.text
        data = resp.json()
        assert data["code"] == "validation_error"
        assert any(err["field"] == field for err in data["detail"])

    def test_non_ascii_digits_are_400_not_500(self, client: TestClient) -> None:
        # 72 characters but 135 UTF-8 bytes, past what bcrypt accepts.
        password = "Passw0rd!" + "٣" * 63
        resp = _signup(client, {**ANN, "password": password})
        assert resp.status_code == 400, resp.text
        assert resp.json()["code"] == "validation_error"
        assert client.post("/auth/signin", json={"email": ANN["email"], "password": ANN["password"]}).status_code == 401

    def test_missing_field(self, client: TestClient) -> None:
        resp = client.post("/auth/signup", json={"email": "a@x.com", "password": "Passw0rd!"})
        assert resp.status_code == 400

    def test_unknown_field_rejected(self, client: TestClient) -> None:
        resp = _signup(client, {**ANN, "role": "admin"})
        assert resp.status_code == 400


class TestSignIn:
    def test_signin_ok(self, client: TestClient) -> None:
        _signup(client)
        client.cookies.clear()
        resp = client.post("/auth/signin", json={"email": "a@x.com", "password": "Passw0rd!"})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"user": {"email": "a@x.com", "name": "Ann Lee"}}
        assert _set_cookie_headers(resp)[0].startswith("access_token=")
        assert resp.headers["cache-control"] == "no-store"

    def test_wrong_password(self, client: TestClient) -> None:
        _signup(client)
        resp = client.post("/auth/signin", json={"email": "a@x.com", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid credentials"
        assert not _set_cookie_headers(resp)

    def test_wrong_password_and_unknown_email_identical(self, client: TestClient) -> None:
        _signup(client)
        wrong_pw = client.post("/auth/signin", json={"email": "a@x.com", "password": "wrong"})
        unknown = client.post("/auth/signin", json={"email": "nobody@x.com", "password": "Passw0rd!"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()

    def test_signin_validation(self, client: TestClient) -> None:
        resp = client.post("/auth/signin", json={"email": "nope", "password": "x"})
        assert resp.status_code == 400

    def test_overlong_password_is_400_not_500(self, client: TestClient) -> None:
        resp = client.post("/auth/signin", json={"email": "a@x.com", "password": "x" * 100})
        assert resp.status_code == 400


class TestCheck:
    def test_no_cookie(self, client: TestClient) -> None:
        resp = client.get("/auth/check")
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthenticated"

    def test_cookie_from_signin(self, client: TestClient) -> None:
        _signup(client)
        client.cookies.clear()
        client.post("/auth/signin", json={"email": "a@x.com", "password": "Passw0rd!"})
        resp = client.get("/auth/check")
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"user": {"email": "a@x.com", "name": "Ann Lee"}}

    def test_tampered_cookie(self, client: TestClient) -> None:
        _signup(client)
        token = client.cookies.get("access_token")
        client.cookies.clear()
        client.cookies.set("access_token", token[:-4] + "AAAA")
        resp = client.get("/auth/check")
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthenticated"

    @pytest.mark.parametrize("value", ["garbage", "a.b.c", "%00%ff"])
    def test_garbage_cookie(self, client: TestClient, value: str) -> None:
        client.cookies.set("access_token", value)
        assert client.get("/auth/check").status_code == 401

    def test_deleted_user(self, client: TestClient, store: CredentialStore) -> None:
        _signup(client)
        with store.engine.connect() as conn:
            conn.execute(text("DELETE FROM users WHERE email = :e"), {"e": "a@x.com"})
            conn.commit()
        assert client.get("/auth/check").status_code == 401

    def test_all_failures_share_one_body(self, client: TestClient) -> None:
        no_cookie = client.get("/auth/check").json()
        client.cookies.set("access_token", "garbage")
        bad_cookie = client.get("/auth/check").json()
        assert no_cookie == bad_cookie


class TestLogout:
    def test_logout_clears_cookie(self, client: TestClient) -> None:
        _signup(client)
        resp = client.post("/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"message": "User successfully signed out"}
        cookie = _set_cookie_headers(resp)[0].lower()
        assert cookie.startswith("access_token=")
        assert "max-age=0" in cookie
        assert "httponly" in cookie

    def test_check_after_logout(self, client: TestClient) -> None:
        _signup(client)
        assert client.get("/auth/check").status_code == 200
        client.post("/auth/logout")
        assert client.get("/auth/check").status_code == 401

    def test_logout_without_session(self, client: TestClient) -> None:
        assert client.post("/auth/logout").status_code == 200


class TestProtected:
    def test_requires_auth(self, client: TestClient) -> None:
        assert client.get("/protected").status_code == 401

    def test_with_session(self, client: TestClient) -> None:
        _signup(client)
        resp = client.get("/protected")
        assert resp.status_code == 200
        assert resp.json() == {
            "message": "This is a protected endpoint",
            "user": {"email": "a@x.com", "name": "Ann Lee"},
        }

    def test_public_root(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "Hello World!"


class TestProductionCookies:
    """APP_ENV=production switches the session cookie to Secure + SameSite=Strict."""

    @pytest.fixture
    def prod_client(self, store: CredentialStore):
        settings = Settings(environment="production", secret_key="p" * 40, cookie_name="sid")

        @asynccontextmanager
        async def prod_lifespan(app):
            init_auth_state(app, settings, store=store)
            yield

        original = app.router.lifespan_context
        app.router.lifespan_context = prod_lifespan
        try:
            with TestClient(app, base_url="https://testserver") as c:
                yield c
        finally:
            app.router.lifespan_context = original

    def test_signup_sets_strict_secure_cookie(self, prod_client: TestClient) -> None:
        resp = _signup(prod_client)
        assert resp.status_code == 201
        header = _set_cookie_headers(resp)[0]
        assert header.startswith("sid=")
        attrs = {part.strip().split("=")[0].lower(): part.strip() for part in header.split(";")[1:]}
        assert "secure" in attrs
        assert "httponly" in attrs
        assert attrs["samesite"].lower() == "samesite=strict"

    def test_check_reads_configured_cookie_name(self, prod_client: TestClient) -> None:
        _signup(prod_client)
        assert prod_client.get("/auth/check").status_code == 200
        token = prod_client.cookies.get("sid")
        prod_client.cookies.clear()
        prod_client.cookies.set("access_token", token)
        assert prod_client.get("/auth/check").status_code == 401
