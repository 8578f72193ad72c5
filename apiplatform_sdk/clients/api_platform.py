"""
Generic client for API Platform style REST / JSON-LD APIs.

Provider specifics (base URL, format, headers, credentials) come from a
``ProviderConfig``; the client handles bearer tokens, query strings and
Hydra pagination metadata for every provider alike.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional

import httpx

from apiplatform_sdk.clients.auth import AuthStrategy, strategy_for
from apiplatform_sdk.clients.token_store import TokenStore
from apiplatform_sdk.models import ApiResponse, ProviderConfig, QueryString
from apiplatform_sdk.models.provider import MERGE_PATCH_MIME_TYPE
from apiplatform_sdk.services.tokens import TokenService

logger = logging.getLogger(__name__)

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def _is_json_content_type(content_type: str) -> bool:
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime == "application/json" or mime.endswith("+json")


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


def _without_header(headers: Mapping[str, str], name: str) -> Dict[str, str]:
    return {key: value for key, value in headers.items() if key.lower() != name.lower()}


def _require_uri(uri: str) -> None:
    if not uri:
        raise ValueError("A request URI is required.")


class ApiPlatformClient:
    """Authenticated access to one provider's API.

    Construction sweeps expired tokens from the store and, when the provider
    requires it, authenticates right away. Check ``authenticated`` before
    issuing calls: a failed credential exchange does not raise.
    """

    def __init__(
        self,
        config: ProviderConfig,
        token_store: TokenStore,
        *,
        http_client: httpx.Client | None = None,
        strategy: AuthStrategy | None = None,
    ) -> None:
        self._config = config
        self._tokens = TokenService(token_store)
        self._strategy = strategy or strategy_for(config.auth_method)
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            verify=config.verify_tls, timeout=config.timeout_seconds
        )
        self._token: Optional[str] = None

        try:
            self._tokens.sweep(config.token_lifetime_minutes)
            if config.base_url:
                self.authenticate()
        except Exception:
            if self._owns_http:
                self._http.close()
            raise

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def authenticated(self) -> bool:
        return not self._config.has_authentication or self._token is not None

    def authenticate(self, login: str | None = None, password: str | None = None) -> bool:
        """Obtain a bearer token, reusing the cached one when present.

        Passing ``login`` or ``password`` replaces the configured credentials
        once the exchange succeeds. On failure the held token is dropped, the
        previous credentials are kept and ``False`` is returned.
        """
        if not self._config.has_authentication:
            return True

        config = self._config
        if login or password:
            config = config.with_credentials(login or "", password or "")

        self._token = None
        token = self._tokens.resolve(self._http, config, self._strategy)
        if token is None:
            logger.warning("Authentication failed for %s as %s", config.name, config.login)
            return False
        self._config = config
        self._token = token
        return True

    def close(self) -> None:
        self._tokens.sweep(self._config.token_lifetime_minutes)
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> ApiPlatformClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------- Request plumbing -------------

    def _url(self, uri: str, query: QueryString | None = None) -> str:
        url = uri if _ABSOLUTE_URL.match(uri) else f"{self._config.api_url}{uri.lstrip('/')}"
        if query:
            url = f"{url}?{query.encode()}"
        return url

    def _is_auth_uri(self, uri: str) -> bool:
        return uri.strip("/") == self._config.normalized_auth_uri or uri == self._config.auth_url

    def _authorize(self, headers: Dict[str, str], uri: str) -> Dict[str, str]:
        if self._token and not self._is_auth_uri(uri):
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _send(
        self,
        method: str,
        uri: str,
        *,
        query: QueryString | None,
        headers: Dict[str, str],
        **kwargs: Any,
    ) -> httpx.Response:
        response = self._http.request(method, self._url(uri, query), headers=headers, **kwargs)
        if response.status_code == 401:
            logger.warning(
                "%s %s returned 401; evicting cached token for %s",
                method,
                uri,
                self._config.name,
            )
            self._tokens.evict(self._config)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning(
                "Response from %s is not valid JSON (HTTP %s)",
                response.request.url,
                response.status_code,
            )
            return None

    @staticmethod
    def _body(
        headers: Dict[str, str],
        data: Any,
        files: Mapping[str, Any] | None,
    ) -> tuple[Dict[str, str], Dict[str, Any]]:
        """Pick the payload encoding from the Content-Type header.

        Files force multipart/form-data; httpx then writes the boundary header.
        """
        if files is not None:
            return _without_header(headers, "Content-Type"), {"data": data or {}, "files": files}
        if data is None:
            return headers, {}
        content_type = _header(headers, "Content-Type") or ""
        if _is_json_content_type(content_type):
            return headers, {"json": data}
        return headers, {"data": data}

    def _write(
        self,
        method: str,
        uri: str,
        data: Any,
        *,
        headers: Dict[str, str],
        files: Mapping[str, Any] | None = None,
        query: QueryString | None = None,
    ) -> ApiResponse:
        headers, payload = self._body(self._authorize(headers, uri), data, files)
        response = self._send(method, uri, query=query, headers=headers, **payload)
        body = self._decode(response) if response.is_success else None
        return ApiResponse(status_code=response.status_code, body=body)

    # ------------- Verbs -------------

    def get(self, uri: str, query: QueryString | None = None) -> ApiResponse:
        """GET a collection, parsing Hydra pagination hints."""
        _require_uri(uri)
        if self._config.concat_format:
            uri = f"{uri}.{self._config.format}"
        headers = self._authorize({"Accept": self._config.accept}, uri)
        response = self._send("GET", uri, query=query, headers=headers)
        return ApiResponse.collection(response.status_code, self._decode(response))

    def get_single(
        self, uri: str, item_id: Any, query: QueryString | None = None
    ) -> ApiResponse:
        """GET ``<uri>/<item_id>``."""
        _require_uri(uri)
        path = f"{uri.rstrip('/')}/{item_id}"
        headers = self._authorize({"Accept": self._config.accept}, path)
        response = self._send("GET", path, query=query, headers=headers)
        return ApiResponse(status_code=response.status_code, body=self._decode(response))

    def post(
        self,
        uri: str,
        data: Any = None,
        *,
        files: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        query: QueryString | None = None,
    ) -> ApiResponse:
        """POST a payload; ``uri`` may also be an absolute URL.

        ``headers`` replaces the default Accept / Content-Type pair.
        """
        _require_uri(uri)
        request_headers = dict(headers) if headers else self._config.default_headers()
        return self._write("POST", uri, data, headers=request_headers, files=files, query=query)

    def put(self, uri: str, data: Any = None, query: QueryString | None = None) -> ApiResponse:
        _require_uri(uri)
        return self._write("PUT", uri, data, headers=self._config.default_headers(), query=query)

    def patch(self, uri: str, data: Any = None, query: QueryString | None = None) -> ApiResponse:
        _require_uri(uri)
        headers = {"Accept": self._config.accept, "Content-Type": MERGE_PATCH_MIME_TYPE}
        return self._write("PATCH", uri, data, headers=headers, query=query)

    def delete(self, uri: str, item_id: Any = "") -> ApiResponse:
        _require_uri(uri)
        path = f"{uri.strip('/')}/{item_id}"
        headers = self._authorize({"Accept": self._config.accept}, path)
        response = self._send("DELETE", path, query=None, headers=headers)
        return ApiResponse(status_code=response.status_code)


__all__ = ["ApiPlatformClient"]
