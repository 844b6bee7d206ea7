"""Assemble the Data API request for a record operation.

``build_request()`` only places already-sanitized pieces into a
``WireRequest``; it holds no business rules and produces the same request
for the same inputs.  The encoding helpers on ``WireRequest`` turn it into
the body (create/edit) or query string (delete) the Data API expects.

Wire shape::

    {
        "fieldData": {"name": "Han Solo", "array": "[\\"ben\\"]"},
        "portalData": {...},                  # lifted from field data
        "modId": "3",                         # edit guard, optional
        "script": "Log Edit",
        "script.param": "1",
        "script.prerequest": "Audit",
        "script.prerequest.param": "{\\"data\\": 2}",
        "script.presort": ...,
        "script.presort.param": ...
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from fmdata.core.errors import ValidationError
from fmdata.records.scripts import ScriptSpec

PORTAL_DATA_KEY = "portalData"


def encode_param(param: Any) -> str:
    """Script parameters are text on the server; JSON-encode anything else."""
    if isinstance(param, str):
        return param
    return json.dumps(param)


def _encode_field(value: Any) -> Any:
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value)
    return value


@dataclass(frozen=True)
class WireRequest:
    """Canonical outbound request for one record operation."""

    layout: str
    record_id: str | None = None
    field_data: Any = field(default_factory=dict)
    scripts: tuple[ScriptSpec, ...] = ()
    mod_id: str | None = None

    def records_path(self) -> str:
        """Path relative to the database root, e.g. ``layouts/Heroes/records/7``."""
        path = f"layouts/{quote(self.layout, safe='')}/records"
        if self.record_id is not None:
            path = f"{path}/{quote(self.record_id, safe='')}"
        return path

    def script_fields(self) -> dict[str, str]:
        fields: dict[str, str] = {}
        for spec in self.scripts:
            key = f"script{spec.phase.suffix}"
            fields[key] = spec.name
            if spec.param is not None:
                fields[f"{key}.param"] = encode_param(spec.param)
        return fields

    def to_body(self) -> dict[str, Any]:
        """JSON body for create (POST) and edit (PATCH)."""
        body: dict[str, Any] = {}
        if isinstance(self.field_data, Mapping):
            body["fieldData"] = {
                key: _encode_field(value)
                for key, value in self.field_data.items()
                if key != PORTAL_DATA_KEY
            }
            if PORTAL_DATA_KEY in self.field_data:
                body[PORTAL_DATA_KEY] = self.field_data[PORTAL_DATA_KEY]
        else:
            body["fieldData"] = self.field_data
        if self.mod_id is not None:
            body["modId"] = self.mod_id
        body.update(self.script_fields())
        return body

    def to_query(self) -> dict[str, str]:
        """Query parameters for delete, which carries no body."""
        return self.script_fields()


def build_request(
    layout: str,
    record_id: str | int | None,
    field_data: Any,
    scripts: tuple[ScriptSpec, ...] | list[ScriptSpec] = (),
    *,
    mod_id: str | int | None = None,
) -> WireRequest:
    """Place sanitized inputs into a ``WireRequest``.

    Record ids and mod ids are sent as text, which is how the Data API
    returns them.
    """
    if not isinstance(layout, str) or not layout:
        raise ValidationError("Layout must be a non-empty string", field="layout", value=layout)
    return WireRequest(
        layout=layout,
        record_id=None if record_id is None else str(record_id),
        field_data=field_data,
        scripts=tuple(scripts),
        mod_id=None if mod_id is None else str(mod_id),
    )


__all__ = ["PORTAL_DATA_KEY", "WireRequest", "build_request", "encode_param"]
