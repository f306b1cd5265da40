"""Arobid backend (tradexpo) HTTP client.

Thin async wrapper over httpx: base URL and auth headers, JSON decoding, and
normalization of non-success responses into ``ArobidError``.

Configuration comes from the caller or from the environment:
AROBID_BACKEND_URL (required), AROBID_API_KEY, AROBID_TENANT_ID,
AROBID_TIMEOUT_SECONDS.
"""

from __future__ import annotations

import logging
import os
from http import HTTPStatus
from typing import Any, Optional

import httpx

from ..errors import ArobidError, ConfigurationError
from ..records import first_string
from ..validation import DEFAULT_CURRENCY_ID, DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

ACCEPT_LANGUAGE_EN = "en-US,en;q=0.9,vi;q=0.8"
ACCEPT_LANGUAGE_VI = "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7"


def describe_status(status_code: int) -> str:
    """'404' -> '404 Not Found'."""
    try:
        return f"{status_code} {HTTPStatus(status_code).phrase}"
    except ValueError:
        return str(status_code)


def build_tradexpo_headers(
    currency_id: Optional[int] = None,
    language: Optional[str] = None,
) -> dict[str, str]:
    """Localization headers expected by the tradexpo endpoints."""
    language = language or DEFAULT_LANGUAGE
    headers = {
        "accept": "application/json",
        "accept-language": ACCEPT_LANGUAGE_VI if language == "vi" else ACCEPT_LANGUAGE_EN,
        "currencyid": str(currency_id or DEFAULT_CURRENCY_ID),
        "language": language,
    }
    return headers


def error_from_response(response: httpx.Response) -> ArobidError:
    """Convert a non-success response into an ``ArobidError``."""
    status = describe_status(response.status_code)
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        message = f"{text} ({status})" if text else f"HTTP {status}"
        return ArobidError(message, status_code=response.status_code)

    api_message = first_string(body, ("message", "error"))
    message = f"{api_message} ({status})" if api_message else status
    return ArobidError(message, code=first_string(body, ("code", "errorCode")), status_code=response.status_code)


class ArobidClient:
    """Async client for the Arobid backend.

    Use as an async context manager so one connection pool serves every
    request of a lookup::

        async with create_arobid_client() as client:
            data = await client.get("/tradexpo/api/events", params={"pageIndex": 1})
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        tenant_id: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.tenant_id = tenant_id
        self._timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ArobidClient":
        self._client()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.tenant_id:
            headers["X-Tenant-ID"] = self.tenant_id
        if extra:
            headers.update(extra)
        return headers

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        url = self.build_url(path)
        logger.debug("%s %s params=%s", method, url, params)
        response = await self._client().request(
            method,
            url,
            params=params,
            json=json,
            headers=self._headers(headers),
        )
        if not response.is_success:
            raise error_from_response(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ArobidError(
                f"Invalid JSON in response ({describe_status(response.status_code)})",
                code="INVALID_JSON",
                status_code=response.status_code,
            ) from exc

    async def get(
        self,
        path: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        return await self._request("GET", path, params=params, headers=headers)

    async def post(self, path: str, json: Any = None, headers: Optional[dict[str, str]] = None) -> Any:
        """POST a JSON body to ``path`` and return the decoded JSON body."""
        return await self._request("POST", path, json=json, headers=headers)


def create_arobid_client(
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    tenant_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ArobidClient:
    """Build a client from explicit settings, falling back to the environment."""
    base_url = base_url or os.environ.get("AROBID_BACKEND_URL", "")
    if not base_url:
        raise ConfigurationError(
            "AROBID_BACKEND_URL is required. Set the environment variable or pass base_url."
        )

    if timeout is None:
        raw_timeout = os.environ.get("AROBID_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"AROBID_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}") from exc

    return ArobidClient(
        base_url=base_url,
        api_key=api_key or os.environ.get("AROBID_API_KEY") or None,
        tenant_id=tenant_id or os.environ.get("AROBID_TENANT_ID") or None,
        timeout=timeout,
    )
