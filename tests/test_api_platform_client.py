from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from apiplatform_sdk.clients import ApiPlatformClient, AuthStrategy, SQLiteTokenStore
from apiplatform_sdk.models import ApiToken, AuthMethod, ProviderConfig, QueryString

try:
    from ._fakes import FakeTokenStore, RecordingTransport, json_response
except ImportError:  # pragma: no cover - fallback for direct execution
    from _fakes import FakeTokenStore, RecordingTransport, json_response  # type: ignore

JWT_CONFIG = ProviderConfig(
    name="demo",
    base_url="https://api.example.com",
    has_authentication=True,
    auth_method=AuthMethod.JWT,
    auth_uri="/auth/",
    login="alice@example.com",
    password="pw",
    token_lifetime_minutes=60,
)


def _jwt_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth":
        return json_response(200, {"token": "jwt-token"})
    return json_response(200, {"ok": True})


def _routed(handler):
    """Answer the login endpoint, delegate everything else to ``handler``."""

    def route(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth":
            return json_response(200, {"token": "jwt-token"})
        return handler(request)

    return route


def test_no_authentication_skips_auth_call(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_jwt_handler)
    config = JWT_CONFIG.model_copy(update={"has_authentication": False})

    client = ApiPlatformClient(config, fake_store, http_client=transport.client())

    assert transport.requests == []
    assert client.token is None
    assert client.authenticated
    assert client.authenticate() is True
    assert transport.requests == []


def test_construction_sweeps_with_provider_lifetime(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_jwt_handler)

    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())
    client.close()

    assert fake_store.swept == [timedelta(minutes=60), timedelta(minutes=60)]


def test_context_manager_leaves_injected_http_client_open(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_jwt_handler)
    http_client = transport.client()

    with ApiPlatformClient(JWT_CONFIG, fake_store, http_client=http_client) as client:
        assert client.token == "jwt-token"

    assert len(fake_store.swept) == 2
    assert not http_client.is_closed


def test_jwt_login_posts_credentials_and_persists_token(
    sqlite_store: SQLiteTokenStore,
) -> None:
    transport = RecordingTransport(_jwt_handler)

    client = ApiPlatformClient(JWT_CONFIG, sqlite_store, http_client=transport.client())

    assert client.token == "jwt-token"
    (login,) = transport.requests
    assert login.method == "POST"
    assert str(login.url) == "https://api.example.com/auth"
    assert json.loads(login.content) == {"email": "alice@example.com", "password": "pw"}
    assert "authorization" not in login.headers
    stored = sqlite_store.find("alice@example.com", "https://api.example.com/")
    assert stored is not None
    assert stored.token == "jwt-token"


def test_second_client_reuses_cached_token(sqlite_store: SQLiteTokenStore) -> None:
    first = RecordingTransport(_jwt_handler)
    ApiPlatformClient(JWT_CONFIG, sqlite_store, http_client=first.client())
    before = sqlite_store.find("alice@example.com", "https://api.example.com/")

    second = RecordingTransport(_jwt_handler)
    client = ApiPlatformClient(JWT_CONFIG, sqlite_store, http_client=second.client())

    assert client.token == "jwt-token"
    assert second.requests == []
    after = sqlite_store.find("alice@example.com", "https://api.example.com/")
    assert after.id == before.id
    assert after.updated_at > before.updated_at


def test_expired_token_is_swept_and_replaced(sqlite_store: SQLiteTokenStore) -> None:
    old = datetime.now(timezone.utc) - timedelta(minutes=120)
    sqlite_store.save(
        ApiToken(
            user="alice@example.com",
            domain="https://api.example.com/",
            token="expired",
            created_at=old,
            updated_at=old,
        )
    )
    transport = RecordingTransport(_jwt_handler)

    client = ApiPlatformClient(JWT_CONFIG, sqlite_store, http_client=transport.client())

    assert client.token == "jwt-token"
    assert len(transport.requests) == 1


def test_failed_authentication_returns_false(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(lambda request: json_response(401, {"message": "bad"}))

    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    assert client.token is None
    assert not client.authenticated
    assert fake_store.tokens == []


def test_authenticate_with_overridden_credentials(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_jwt_handler)
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    assert client.authenticate("bob@example.com", "secret") is True

    assert client.config.login == "bob@example.com"
    assert json.loads(transport.requests[-1].content) == {
        "email": "bob@example.com",
        "password": "secret",
    }
    assert fake_store.find("bob@example.com", "https://api.example.com/") is not None


def _per_user_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth":
        if json.loads(request.content)["email"] == "alice@example.com":
            return json_response(200, {"token": "alice-token"})
        return json_response(401, {"message": "Invalid credentials."})
    if request.headers.get("authorization") == "Bearer alice-token":
        return json_response(200, {"ok": True})
    return json_response(401, {"code": 401})


def test_failed_reauthentication_drops_the_held_token(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_per_user_handler)
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())
    assert client.token == "alice-token"

    assert client.authenticate("bob@example.com", "wrong") is False

    assert client.token is None
    assert not client.authenticated
    assert client.config.login == "alice@example.com"

    response = client.get("products")

    assert response.status_code == 401
    assert "authorization" not in transport.requests[-1].headers
    assert fake_store.find("alice@example.com", "https://api.example.com/") is None


def test_authenticate_after_unauthorized_requests_a_fresh_token(
    fake_store: FakeTokenStore,
) -> None:
    issued = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth":
            issued.append(f"token-{len(issued) + 1}")
            return json_response(200, {"token": issued[-1]})
        if request.headers["authorization"] == "Bearer token-1":
            return json_response(401, {"code": 401})
        return json_response(200, {"ok": True})

    transport = RecordingTransport(handler)
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    assert client.get("products").status_code == 401
    assert fake_store.find("alice@example.com", "https://api.example.com/") is None

    assert client.authenticate() is True
    assert client.token == "token-2"
    assert issued == ["token-1", "token-2"]
    assert fake_store.find("alice@example.com", "https://api.example.com/").token == "token-2"

    assert client.get("products").status_code == 200
    assert transport.requests[-1].headers["authorization"] == "Bearer token-2"


class _UnreachableAuth(AuthStrategy):
    def _send(self, http: httpx.Client, config: ProviderConfig) -> httpx.Response:
        raise httpx.ConnectError("auth endpoint unreachable")


def test_owned_http_client_is_closed_when_construction_fails(
    fake_store: FakeTokenStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    created = []
    real_client = httpx.Client

    def make_client(**kwargs) -> httpx.Client:
        created.append(real_client(**kwargs))
        return created[-1]

    monkeypatch.setattr(httpx, "Client", make_client)

    with pytest.raises(httpx.ConnectError):
        ApiPlatformClient(JWT_CONFIG, fake_store, strategy=_UnreachableAuth())

    (owned,) = created
    assert owned.is_closed


def test_injected_http_client_survives_failed_construction(fake_store: FakeTokenStore) -> None:
    http_client = RecordingTransport(_jwt_handler).client()

    with pytest.raises(httpx.ConnectError):
        ApiPlatformClient(
            JWT_CONFIG, fake_store, http_client=http_client, strategy=_UnreachableAuth()
        )

    assert not http_client.is_closed


@pytest.mark.parametrize(
    "call",
    [
        lambda client: client.get("products"),
        lambda client: client.get_single("products", 3),
        lambda client: client.post("products", {"name": "x"}),
        lambda client: client.put("products/3", {"name": "x"}),
        lambda client: client.patch("products/3", {"name": "x"}),
        lambda client: client.delete("products", 3),
    ],
)
def test_unauthorized_response_evicts_cached_token(fake_store: FakeTokenStore, call) -> None:
    fake_store.save(
        ApiToken(user="alice@example.com", domain="https://api.example.com/", token="cached")
    )
    transport = RecordingTransport(lambda request: json_response(401, {"code": 401}))
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    response = call(client)

    assert response.status_code == 401
    assert len(transport.requests) == 1
    assert fake_store.find("alice@example.com", "https://api.example.com/") is None


def test_get_builds_url_with_format_and_query(fake_store: FakeTokenStore) -> None:
    body = {
        "hydra:member": [{"@id": "/products/1"}],
        "hydra:totalItems": 31,
        "hydra:view": {"hydra:last": "/products.jsonld?page=4"},
    }
    transport = RecordingTransport(_routed(lambda request: json_response(200, body)))
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())
    query = QueryString().with_page(2).add("tags[]", "a").add("tags[]", "b")

    response = client.get("products", query)

    request = transport.requests[-1]
    assert request.url.path == "/products.jsonld"
    assert request.url.params["page"] == "2"
    assert request.url.params.get_list("tags[]") == ["a", "b"]
    assert request.headers["authorization"] == "Bearer jwt-token"
    assert request.headers["accept"] == "application/ld+json"
    assert response.data == [{"@id": "/products/1"}]
    assert response.max_page == 4
    assert response.total_items == 31


def test_get_without_format_concatenation(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_jwt_handler)
    config = JWT_CONFIG.model_copy(update={"concat_format": False})
    client = ApiPlatformClient(config, fake_store, http_client=transport.client())

    client.get("products")
    client.get_single("products/", 9)

    assert transport.requests[-2].url.path == "/products"
    assert transport.requests[-1].url.path == "/products/9"


def test_post_sends_json_for_json_family_content_types(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(lambda request: json_response(201, {"id": 7}))
    client = ApiPlatformClient(
        JWT_CONFIG.model_copy(update={"has_authentication": False}),
        fake_store,
        http_client=transport.client(),
    )

    response = client.post("orders", {"orderNumber": "A1"})

    request = transport.requests[-1]
    assert request.headers["content-type"] == "application/ld+json"
    assert json.loads(request.content) == {"orderNumber": "A1"}
    assert "authorization" not in request.headers
    assert response.status_code == 201
    assert response.body == {"id": 7}


def test_post_to_absolute_url_with_form_headers(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_routed(lambda request: json_response(200, {})))
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    client.post(
        "https://files.example.com/upload",
        {"field": "value"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    request = transport.requests[-1]
    assert str(request.url) == "https://files.example.com/upload"
    assert request.content == b"field=value"
    assert request.headers["authorization"] == "Bearer jwt-token"


def test_post_with_files_is_multipart(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_routed(lambda request: json_response(201, {"id": 1})))
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    client.post("media_objects", {"alt": "logo"}, files={"file": ("logo.png", b"PNG", "image/png")})

    request = transport.requests[-1]
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b"logo.png" in request.content
    assert b'name="alt"' in request.content


def test_patch_uses_merge_patch_content_type(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(_routed(lambda request: json_response(200, {"id": 3})))
    client = ApiPlatformClient(JWT_CONFIG, fake_store, http_client=transport.client())

    response = client.patch("products/3", {"name": "renamed"})

    request = transport.requests[-1]
    assert request.method == "PATCH"
    assert request.headers["content-type"] == "application/merge-patch+json"
    assert json.loads(request.content) == {"name": "renamed"}
    assert response.body == {"id": 3}


def test_write_errors_and_delete_have_no_body(fake_store: FakeTokenStore) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(204)
        return json_response(422, {"violations": []})

    transport = RecordingTransport(handler)
    client = ApiPlatformClient(
        JWT_CONFIG.model_copy(update={"has_authentication": False}),
        fake_store,
        http_client=transport.client(),
    )

    put_response = client.put("products/3", {"name": ""})
    delete_response = client.delete("/products/", 3)

    assert put_response.status_code == 422
    assert put_response.body is None
    assert delete_response.status_code == 204
    assert delete_response.body is None
    assert transport.requests[-1].url.path == "/products/3"


def test_non_json_body_decodes_to_none(fake_store: FakeTokenStore) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(500, text="<html>oops</html>"))
    client = ApiPlatformClient(
        JWT_CONFIG.model_copy(update={"has_authentication": False}),
        fake_store,
        http_client=transport.client(),
    )

    response = client.get("products")

    assert response.status_code == 500
    assert response.body is None
    assert response.max_page == 1
    assert response.total_items == 0


def test_empty_uri_is_rejected(fake_store: FakeTokenStore) -> None:
    client = ApiPlatformClient(
        JWT_CONFIG.model_copy(update={"has_authentication": False}),
        fake_store,
        http_client=RecordingTransport(_jwt_handler).client(),
    )

    with pytest.raises(ValueError):
        client.get("")
    with pytest.raises(ValueError):
        client.post("", {})


def test_transport_errors_propagate(fake_store: FakeTokenStore) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = ApiPlatformClient(
        JWT_CONFIG.model_copy(update={"has_authentication": False}),
        fake_store,
        http_client=RecordingTransport(handler).client(),
    )

    with pytest.raises(httpx.ConnectError):
        client.get("products")
