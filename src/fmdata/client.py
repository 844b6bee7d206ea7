"""
FileMaker Data API client facade.

``FileMakerClient`` exposes the record operations and runs each call through
the same pipeline::

    sanitize(field_data, options)          strip options, normalize scripts
        ↓
    build_request(layout, record_id, ...)  WireRequest
        ↓
    transport.send(operation, request)     Result[reply]   (network round trip)
        ↓
    shape_response(result, merge=...)      Result[object]
        ↓
    unwrap()                               object, or raise ServerError

The client holds no per-call state; concurrent calls share only the
transport's session.

Examples:
    >>> async with FileMakerClient(FileMakerSettings(
    ...     server="https://fms.example.com", database="Heroes",
    ...     user="admin", password="secret",
    ... )) as client:
    ...     created = await client.create("Heroes", {"name": "Obi-Wan"})
    ...     await client.edit("Heroes", created["recordId"], {"name": "Luke"}, {"merge": True})
    {'modId': '1', 'name': 'Luke', 'recordId': '147'}

    Running scripts in several phases:

    >>> await client.edit("Heroes", "147", {"name": "Han Solo"}, {
    ...     "script": "Log Edit",
    ...     "scripts": [{"name": "Audit", "phase": "prerequest", "param": {"data": 2}}],
    ... })
    {'modId': '2', 'scriptResult': '', 'scriptError': '0',
     'scriptResult.prerequest': '', 'scriptError.prerequest': '0'}

Tags:
    client, facade, data-api, async, fmdata

Doc-Types:
    - API Reference
    - Usage Guide
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fmdata.core.errors import MissingConfigError
from fmdata.core.logging import LogContext, get_logger
from fmdata.core.settings import FileMakerSettings, get_settings
from fmdata.records.request import build_request
from fmdata.records.response import shape_response
from fmdata.records.sanitize import sanitize
from fmdata.transport import DataAPITransport, Operation

logger = get_logger(__name__)


class FileMakerClient:
    """Create, edit and delete records in one hosted database."""

    def __init__(
        self,
        settings: FileMakerSettings | None = None,
        *,
        transport: DataAPITransport | None = None,
    ):
        self.settings = settings or get_settings()
        if not self.settings.server:
            raise MissingConfigError("server")
        if not self.settings.database:
            raise MissingConfigError("database")
        self._transport = transport or DataAPITransport(self.settings)

    async def __aenter__(self) -> FileMakerClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        await self._transport.close()

    async def create(
        self,
        layout: str,
        field_data: Any,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a record.

        Returns ``recordId`` and ``modId`` plus any script result/error keys;
        with ``{"merge": True}`` the submitted field data is included too.
        """
        return await self._execute(Operation.CREATE, layout, None, field_data, options)

    async def edit(
        self,
        layout: str,
        record_id: str | int,
        field_data: Any,
        options: Mapping[str, Any] | None = None,
        *,
        mod_id: str | int | None = None,
    ) -> dict[str, Any]:
        """Edit a record; ``mod_id`` makes the server reject stale edits."""
        return await self._execute(
            Operation.EDIT, layout, record_id, field_data, options, mod_id=mod_id
        )

    async def delete(
        self,
        layout: str,
        record_id: str | int,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Delete a record; the result carries only script keys (and recordId on merge)."""
        return await self._execute(Operation.DELETE, layout, record_id, {}, options)

    async def _execute(
        self,
        operation: Operation,
        layout: str,
        record_id: str | int | None,
        field_data: Any,
        options: Mapping[str, Any] | None,
        *,
        mod_id: str | int | None = None,
    ) -> dict[str, Any]:
        params = sanitize(field_data, options)
        request = build_request(
            layout,
            record_id,
            params.field_data,
            params.scripts,
            mod_id=mod_id,
        )

        async with LogContext(operation=operation.value, layout=layout):
            result = await self._transport.send(operation, request)
            shaped = shape_response(
                result,
                merge=params.merge,
                field_data=params.field_data,
                record_id=request.record_id,
            )
            if shaped.is_ok():
                logger.debug(
                    "record_operation_completed",
                    record_id=shaped.value.get("recordId", request.record_id),
                    scripts=len(params.scripts),
                )
        return shaped.unwrap()


__all__ = ["FileMakerClient"]
