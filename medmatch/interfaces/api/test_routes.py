"""Tests for API Routes."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import jwt
import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from medmatch.domains.accounts import AuthService, TokenIssuer

from . import middleware
from .auth import authenticate
from .deps import get_auth_service, get_token_issuer
from .main import create_app
from .middleware import RateLimitMiddleware

CREDENTIALS = {"email": "doctor@medmatch.org", "password": "s3cret"}


@pytest.fixture
def client(auth_service: AuthService, issuer: TokenIssuer) -> Generator[TestClient, None, None]:
    """Create a test client backed by the in-memory credential store."""
    app = create_app()

    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_token_issuer] = lambda: issuer

    yield TestClient(app)

    app.dependency_overrides.clear()


def _signup(client: TestClient, credentials: dict = CREDENTIALS) -> dict:
    response = client.post("/api/accounts/signup", json=credentials)
    assert response.status_code == 201
    return response.json()["data"]


def _assert_http_error(response, status: int, code: str) -> dict:
    assert response.status_code == status
    body = response.json()
    assert body["status"] == "error"
    assert len(body["errors"]) >= 1
    error = body["errors"][0]
    assert error["type"] == "http"
    assert error["code"] == code
    return error


# --- Health ---


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_header(client: TestClient) -> None:
    response = client.get("/health")
    assert "x-request-id" in response.headers


# --- Signup ---


def test_signup_normalizes_email(client: TestClient, memory_store) -> None:
    response = client.post(
        "/api/accounts/signup", json={"email": "A@Test.com", "password": "pw"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["email"] == "a@test.com"
    assert "a@test.com" in memory_store.accounts
    assert body["data"]["password"] != "pw"
    assert {"id", "entryDate", "accessToken", "refreshToken"} <= set(body["data"])


def test_signup_conflict(client: TestClient) -> None:
    client.post("/api/accounts/signup", json={"email": "A@Test.com", "password": "pw"})

    response = client.post(
        "/api/accounts/signup", json={"email": "a@test.com", "password": "pw2"}
    )

    error = _assert_http_error(response, 409, "ACCOUNT_CONFLICT")
    assert error["details"] == "Account with email a@test.com already exists"


# --- Login ---


def test_login_issues_tokens_and_cookie(client: TestClient, issuer: TokenIssuer) -> None:
    account = _signup(client)
    client.cookies.clear()

    response = client.post("/api/accounts/login", json=CREDENTIALS)

    assert response.status_code == 200
    data = response.json()["data"]
    claims = jwt.decode(data["accessToken"], issuer.access_secret, algorithms=["HS256"])
    assert claims["email"] == account["email"]
    assert claims["id"] == account["id"]

    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"refreshToken={data['refreshToken']};")
    assert "Path=/" in cookie
    assert "HttpOnly" in cookie
    assert "Max-Age=604800" in cookie
    assert "SameSite=strict" in cookie
    assert "; Secure" not in cookie


def test_login_failures_are_identical(client: TestClient) -> None:
    _signup(client)

    wrong_password = client.post(
        "/api/accounts/login", json={**CREDENTIALS, "password": "wrong"}
    )
    unknown_email = client.post(
        "/api/accounts/login", json={**CREDENTIALS, "email": "nobody@medmatch.org"}
    )

    _assert_http_error(wrong_password, 401, "UNAUTHORIZED")
    assert wrong_password.content == unknown_email.content
    assert wrong_password.json()["errors"][0]["details"] == "Invalid email or password"


@pytest.mark.parametrize(
    ("override", "field"),
    [
        ({"email": 123}, "email"),
        ({"email": "not-an-email"}, "email"),
        ({"email": ""}, "email"),
        ({"password": 12345}, "password"),
        ({"password": ""}, "password"),
    ],
)
def test_login_validation(client: TestClient, override: dict, field: str) -> None:
    response = client.post("/api/accounts/login", json={**CREDENTIALS, **override})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [e["field"] for e in errors] == [field]
    assert errors[0]["type"] == "validation"
    assert errors[0]["loc"] == "body"


# --- Logout ---


def test_logout_expires_cookie(client: TestClient) -> None:
    _signup(client)

    response = client.post("/api/accounts/logout")

    assert response.status_code == 200
    assert response.json()["data"] is None
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("refreshToken=")
    assert "Max-Age=0" in cookie
    assert "01 Jan 1970" in cookie
    assert "Path=/" in cookie
    assert "HttpOnly" in cookie
    assert "SameSite=strict" in cookie


# --- Token refresh ---


def test_token_from_cookie(client: TestClient) -> None:
    account = _signup(client)

    response = client.post("/api/accounts/token")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["refreshToken"] == account["refreshToken"]
    assert jwt.decode(data["accessToken"], options={"verify_signature": False})["id"] == account["id"]


def test_token_from_body(client: TestClient) -> None:
    account = _signup(client)
    client.cookies.clear()

    response = client.post(
        "/api/accounts/token", json={"refreshToken": account["refreshToken"]}
    )

    assert response.status_code == 200
    assert response.json()["data"]["refreshToken"] == account["refreshToken"]


def test_token_cookie_takes_precedence(client: TestClient) -> None:
    account = _signup(client)

    response = client.post("/api/accounts/token", json={"refreshToken": "bogus"})

    assert response.status_code == 200
    assert response.json()["data"]["refreshToken"] == account["refreshToken"]


def test_token_missing_from_both_sources(client: TestClient) -> None:
    response = client.post("/api/accounts/token", json={"refreshToken": ""})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {e["loc"] for e in errors} == {"cookies", "body"}
    assert all(e["type"] == "validation" for e in errors)


def test_token_invalid(client: TestClient) -> None:
    response = client.post("/api/accounts/token", json={"refreshToken": "not-a-token"})

    error = _assert_http_error(response, 401, "UNAUTHORIZED")
    assert error["details"] == "Invalid refresh token"


# --- Request gate ---


def test_me_requires_authentication(client: TestClient) -> None:
    _assert_http_error(client.get("/api/accounts/me"), 401, "UNAUTHORIZED")


@pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer not-a-token"])
def test_me_rejects_bad_headers(client: TestClient, header: str) -> None:
    response = client.get("/api/accounts/me", headers={"Authorization": header})
    _assert_http_error(response, 401, "UNAUTHORIZED")


def test_me_returns_identity(client: TestClient) -> None:
    account = _signup(client)

    response = client.get(
        "/api/accounts/me", headers={"Authorization": f"Bearer {account['accessToken']}"}
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"email": account["email"], "id": account["id"]}


def test_me_rejects_refresh_token(client: TestClient) -> None:
    account = _signup(client)

    response = client.get(
        "/api/accounts/me", headers={"Authorization": f"Bearer {account['refreshToken']}"}
    )
    _assert_http_error(response, 401, "UNAUTHORIZED")


def test_me_rejects_expired_access_token(client: TestClient, clock) -> None:
    account = _signup(client)
    clock.advance(minutes=15, seconds=1)

    response = client.get(
        "/api/accounts/me", headers={"Authorization": f"Bearer {account['accessToken']}"}
    )
    _assert_http_error(response, 401, "UNAUTHORIZED")


def test_gate_applied_by_protected_router() -> None:
    app = create_app()
    me = next(route for route in app.routes if getattr(route, "path", "") == "/api/accounts/me")
    assert any(dep.dependency is authenticate for dep in me.dependencies)

    public = [
        route
        for route in app.routes
        if getattr(route, "path", "").startswith("/api/accounts/") and route is not me
    ]
    assert public
    assert not any(dep.dependency is authenticate for r in public for dep in r.dependencies)


# --- Error boundary ---


def test_unexpected_errors_become_500(client: TestClient) -> None:
    broken = AsyncMock(spec=AuthService)
    broken.login.side_effect = RuntimeError("boom")
    client.app.dependency_overrides[get_auth_service] = lambda: broken

    response = client.post("/api/accounts/login", json=CREDENTIALS)

    error = _assert_http_error(response, 500, "INTERNAL_SERVER_ERROR")
    assert error["details"] == "Internal server error"


def test_404_for_unknown_routes(client: TestClient) -> None:
    response = client.get("/api/nonexistent")
    assert response.status_code == 404


# --- Rate limiting ---


def _request_from(host: str) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/api",
            "headers": [],
            "query_string": b"",
            "client": (host, 50000),
        }
    )


async def test_rate_limit_drops_stale_buckets(monkeypatch: pytest.MonkeyPatch) -> None:
    limiter = RateLimitMiddleware(FastAPI(), requests_per_minute=5)

    async def call_next(request: Request) -> Response:
        return Response("ok")

    monkeypatch.setattr(middleware.time, "time", lambda: 600.0)
    for host in ("10.0.0.1", "10.0.0.2"):
        assert (await limiter.dispatch(_request_from(host), call_next)).status_code == 200
    assert set(limiter.buckets) == {"10.0.0.1", "10.0.0.2"}

    monkeypatch.setattr(middleware.time, "time", lambda: 660.0)
    await limiter.dispatch(_request_from("10.0.0.3"), call_next)

    assert set(limiter.buckets) == {"10.0.0.3"}
    assert limiter.buckets["10.0.0.3"]["tokens"] == 4


async def test_rate_limit_exhausted_within_window(monkeypatch: pytest.MonkeyPatch) -> None:
    limiter = RateLimitMiddleware(FastAPI(), requests_per_minute=2)

    async def call_next(request: Request) -> Response:
        return Response("ok")

    monkeypatch.setattr(middleware.time, "time", lambda: 600.0)
    statuses = [
        (await limiter.dispatch(_request_from("10.0.0.1"), call_next)).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]
