import pytest

from storefront.core.errors import AuthenticationRequired, Unauthorized
from storefront.services.profile import EMAIL_IN_USE_MESSAGE, UPDATE_FAILED_MESSAGE
from storefront.services.session import TOKEN_KEY, USER_ID_KEY, USERNAME_KEY, SessionGuard, SessionStore

from conftest import DEFAULT_PASSWORD


@pytest.fixture
def guard(services, storage):
    return SessionGuard(SessionStore(storage), services.auth)


def test_sign_in_persists_session(guard, storage):
    session = guard.sign_in("alice", DEFAULT_PASSWORD)
    assert storage.get_item(TOKEN_KEY) == session.token
    assert storage.get_item(USER_ID_KEY) == "1"
    assert storage.get_item(USERNAME_KEY) == "alice"
    assert guard.username == "alice"


def test_session_survives_a_new_guard(guard, services, storage):
    guard.sign_in("alice", DEFAULT_PASSWORD)
    other = SessionGuard(SessionStore(storage), services.auth)
    assert other.current().username == "alice"


def test_bad_credentials_store_nothing(guard, storage):
    with pytest.raises(Unauthorized):
        guard.sign_in("alice", "wrong")
    assert storage.items() == {}


def test_require_without_session_redirects(guard, backend):
    with pytest.raises(AuthenticationRequired) as exc:
        guard.require()
    assert exc.value.redirect_to == "/auth/signin"
    assert backend.calls == []


def test_401_clears_session(guard, backend, services, storage):
    guard.sign_in("alice", DEFAULT_PASSWORD)
    backend.revoke_all()
    with pytest.raises(AuthenticationRequired):
        guard.call(services.auth.get_profile)
    assert guard.current() is None
    assert storage.get_item(TOKEN_KEY) is None


def test_sign_out_clears_even_if_server_logout_fails(guard, backend, storage):
    guard.sign_in("alice", DEFAULT_PASSWORD)
    backend.fail("POST", "/api/auth/logout", 500)
    guard.sign_out()
    assert guard.current() is None
    assert backend.count("POST", "/api/auth/logout") == 1


# through the routes


def test_signin_route(client, storage):
    r = client.post("/auth/signin", json={"username": "alice", "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    assert r.json() == {"user_id": "1", "username": "alice"}
    assert storage.get_item(USERNAME_KEY) == "alice"

    r = client.get("/auth/session")
    assert r.json()["username"] == "alice"


def test_signin_route_rejects_bad_password(client):
    r = client.post("/auth/signin", json={"username": "alice", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_signin_route_rate_limited(client, backend):
    backend.fail("POST", "/api/auth/login", 429, "Too many login attempts. Please try again later.")
    r = client.post("/auth/signin", json={"username": "alice", "password": DEFAULT_PASSWORD})
    assert r.status_code == 429
    assert "Too many" in r.json()["detail"]


def test_profile_without_session_redirects_without_network(client, backend):
    r = client.get("/profile")
    assert r.status_code == 303
    assert r.headers["location"] == "/auth/signin"
    assert backend.calls_to("/api/auth") == []


def test_profile_401_clears_session_and_redirects(client, backend, storage, signed_in):
    signed_in()
    backend.revoke_all()

    r = client.get("/profile")

    assert r.status_code == 303
    assert r.headers["location"] == "/auth/signin"
    assert storage.get_item(TOKEN_KEY) is None
    # the next protected view goes straight to sign-in
    backend.calls.clear()
    assert client.get("/profile").status_code == 303
    assert backend.calls == []


def test_profile_view_and_update(client, signed_in, backend):
    signed_in()
    r = client.get("/profile")
    assert r.status_code == 200
    assert r.json()["profile"]["email"] == "alice@example.com"

    r = client.put("/profile", json={"email": "alice@new.example", "first_name": "Alice", "last_name": "Liddell"})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"]
    assert body["profile"]["first_name"] == "Alice"
    assert backend.users["alice"]["email"] == "alice@new.example"


def test_profile_conflict_message_differs_from_generic(client, signed_in, backend):
    signed_in()
    r = client.put("/profile", json={"email": "bob@example.com"})
    assert r.status_code == 409
    assert r.json()["message"] == EMAIL_IN_USE_MESSAGE
    assert r.json()["errors"]["email"] == EMAIL_IN_USE_MESSAGE

    backend.fail("PUT", "/api/auth/profile", 500)
    r = client.put("/profile", json={"email": "alice@example.com"})
    assert r.status_code == 502
    assert r.json()["message"] == UPDATE_FAILED_MESSAGE
    assert UPDATE_FAILED_MESSAGE != EMAIL_IN_USE_MESSAGE


def test_signout_route(client, signed_in, storage):
    signed_in()
    r = client.post("/auth/signout")
    assert r.status_code == 303
    assert r.headers["location"] == "/auth/signin"
    assert storage.items() == {}


def test_profile_update_401_clears_session_and_redirects(client, backend, storage, signed_in):
    signed_in()
    backend.revoke_all()

    r = client.put("/profile", json={"email": "alice@new.example"})

    assert r.status_code == 303
    assert r.headers["location"] == "/auth/signin"
    assert storage.get_item(TOKEN_KEY) is None
    assert backend.users["alice"]["email"] == "alice@example.com"


def test_signin_without_token_in_response(client, backend, storage):
    backend.fail("POST", "/api/auth/login", 200, "")
    r = client.post("/auth/signin", json={"username": "alice", "password": DEFAULT_PASSWORD})
    assert r.status_code == 502
    assert r.json()["detail"] == "Sign-in failed. Please try again."
    assert storage.get_item(TOKEN_KEY) is None
