from __future__ import annotations

from bunko.services.admin_session import AdminSessionService, SessionNotConfigured

COOKIE = "bunkopdf-admin-session"


def _cookie(client):
    return client.get_cookie(COOKIE)


def test_login_check_logout_cycle(client) -> None:
    assert client.get("/api/auth/check").get_json() == {"authenticated": False}

    response = client.post("/api/auth/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    assert response.get_json() == {"success": True}
    set_cookie = response.headers["Set-Cookie"]
    assert "HttpOnly" in set_cookie
    assert "SameSite=Lax" in set_cookie
    assert "Max-Age=86400" in set_cookie
    assert client.get("/api/auth/check").get_json() == {"authenticated": True}

    client.post("/api/auth/logout")
    assert client.get("/api/auth/check").get_json() == {"authenticated": False}


def test_login_rejects_bad_credentials(client) -> None:
    response = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid credentials"}
    assert _cookie(client) is None


def test_login_without_configured_credentials(app, client) -> None:
    app.config["ADMIN_PASSWORD"] = None
    response = client.post("/api/auth/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "Admin credentials not configured"}


def test_forged_cookie_is_not_a_session(client) -> None:
    client.set_cookie(COOKIE, "YWRtaW46MTIzOmFiYw==")
    assert client.get("/api/auth/check").get_json() == {"authenticated": False}


def test_session_service_tokens() -> None:
    service = AdminSessionService("key", "admin", "secret", max_age=60)
    token = service.login("admin", "secret")
    assert token and service.check(token)
    assert service.login("admin", "wrong") is None
    assert service.login(None, "secret") is None
    assert not service.check(None)
    assert not service.check(token + "x")

    other_key = AdminSessionService("other", "admin", "secret")
    assert not other_key.check(token)


def test_session_service_requires_credentials() -> None:
    service = AdminSessionService("key", "", "")
    try:
        service.login("admin", "secret")
    except SessionNotConfigured:
        pass
    else:
        raise AssertionError("expected SessionNotConfigured")


def test_admin_page_redirects_home(client) -> None:
    response = client.get("/admin")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/")
