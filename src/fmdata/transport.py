"""HTTP transport for the FileMaker Data API.

``DataAPITransport`` owns the ``httpx.AsyncClient`` and the session token.
It sends a ``WireRequest`` and reads the Data API envelope::

    {"response": {...}, "messages": [{"code": "0", "message": "OK"}]}

A ``"0"`` code becomes ``Ok(response)``; any other code becomes
``Err(ServerError(code, message))`` with the server's text untouched.
Transport failures (timeouts, refused connections, bodies that are not
JSON) raise instead, since there is no server answer to pass along.

Sessions are opened lazily with HTTP basic auth on the first request and
closed by ``close()``.  Expired tokens are not renewed.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import httpx

from fmdata.core.errors import (
    AuthenticationError,
    ErrorContext,
    MissingConfigError,
    NetworkError,
    ParseError,
    ServerError,
    TransportTimeoutError,
)
from fmdata.core.logging import get_logger
from fmdata.core.result import Err, Ok, Result
from fmdata.core.settings import FileMakerSettings
from fmdata.records.request import WireRequest

logger = get_logger(__name__)

TOKEN_HEADER = "X-FM-Data-Access-Token"
OK_CODE = "0"


class Operation(str, Enum):
    """Record operation kinds the transport knows how to send."""

    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


_METHODS = {
    Operation.CREATE: "POST",
    Operation.EDIT: "PATCH",
    Operation.DELETE: "DELETE",
}


class DataAPITransport:
    """Send record requests to one hosted database."""

    def __init__(
        self,
        settings: FileMakerSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.timeout,
            verify=settings.verify_ssl,
        )
        self._token: str | None = None
        self._login_lock = asyncio.Lock()

    @property
    def has_session(self) -> bool:
        return self._token is not None

    # ── Session ──────────────────────────────────────────────────

    async def _session_token(self) -> str:
        if self._token is None:
            async with self._login_lock:
                if self._token is None:
                    self._token = await self._login()
        return self._token

    async def _login(self) -> str:
        settings = self._settings
        if not settings.user:
            raise MissingConfigError("user")
        if settings.password is None:
            raise MissingConfigError("password")

        response = await self._request(
            "POST",
            "sessions",
            auth=(settings.user, settings.password.get_secret_value()),
            json={},
        )
        envelope = self._read_envelope(response)
        code, message = _first_message(envelope)
        if code != OK_CODE:
            raise AuthenticationError(
                message,
                context=ErrorContext(
                    url=str(response.url),
                    http_status=response.status_code,
                    metadata={"code": code},
                ),
            )

        token = response.headers.get(TOKEN_HEADER) or (envelope.get("response") or {}).get("token")
        if not token:
            raise ParseError(
                "Session reply carried no access token",
                context=ErrorContext(url=str(response.url), http_status=response.status_code),
            )
        logger.info("session_opened", database=settings.database)
        return token

    async def close(self) -> None:
        """Log out of the session (if any) and close an owned HTTP client."""
        token, self._token = self._token, None
        try:
            if token is not None:
                await self._request(
                    "DELETE",
                    f"sessions/{token}",
                    headers={"Authorization": f"Bearer {token}"},
                )
                logger.info("session_closed", database=self._settings.database)
        finally:
            if self._owns_client:
                await self._http.aclose()

    # ── Records ──────────────────────────────────────────────────

    async def send(self, operation: Operation, request: WireRequest) -> Result[dict[str, Any]]:
        """Send one record request and return the reply or the server failure."""
        token = await self._session_token()
        kwargs: dict[str, Any] = {"headers": {"Authorization": f"Bearer {token}"}}
        if operation is Operation.DELETE:
            kwargs["params"] = request.to_query()
        else:
            kwargs["json"] = request.to_body()

        response = await self._request(_METHODS[operation], request.records_path(), **kwargs)
        envelope = self._read_envelope(response)
        code, message = _first_message(envelope)

        if code != OK_CODE:
            logger.info("server_error", code=code, http_status=response.status_code)
            return Err(
                ServerError(
                    code,
                    message,
                    context=ErrorContext(
                        operation=operation.value,
                        layout=request.layout,
                        record_id=request.record_id,
                        http_status=response.status_code,
                    ),
                )
            )

        reply = envelope.get("response") or {}
        logger.debug("reply_received", keys=sorted(reply))
        return Ok(dict(reply))

    # ── HTTP helpers ─────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self._settings.base_url + path
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(
                f"{method} {path} timed out", cause=exc
            ).with_context(url=url) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"{method} {path} failed: {exc}", cause=exc
            ).with_context(url=url) from exc

    @staticmethod
    def _read_envelope(response: httpx.Response) -> dict[str, Any]:
        context = ErrorContext(url=str(response.url), http_status=response.status_code)
        try:
            envelope = response.json()
        except ValueError as exc:
            raise ParseError(
                f"Data API returned a non-JSON body (HTTP {response.status_code})",
                context=context,
                cause=exc,
            ) from exc
        if not isinstance(envelope, dict):
            raise ParseError("Data API reply is not a JSON object", context=context)
        messages = envelope.get("messages")
        if not isinstance(messages, list) or not messages:
            raise ParseError("Data API reply has no messages envelope", context=context)
        if not isinstance(messages[0], dict):
            raise ParseError("Data API message is not a JSON object", context=context)
        if not isinstance(envelope.get("response") or {}, dict):
            raise ParseError("Data API response is not a JSON object", context=context)
        return envelope


def _first_message(envelope: dict[str, Any]) -> tuple[str, str]:
    first = envelope["messages"][0]
    return str(first.get("code", "")), str(first.get("message", ""))


__all__ = ["DataAPITransport", "Operation"]
