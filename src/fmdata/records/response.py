"""
Response shaping for record operations.

Turns the Data API's reply into the object handed back to the caller.

Manifesto:
    - **Mirror, don't fabricate:** Without merge the result is the server
      reply as received; script keys appear only when the server sent them
    - **Merge is additive:** With merge the result is the submitted field data
      plus every server field; nothing the server reported is filtered out
    - **Failures pass through:** An ``Err`` from the transport is returned
      untouched, never merged or enriched
    - **Script failure is data:** A non-zero ``scriptError`` is logged and
      returned, never raised

Architecture:
    ::

        Result[reply] ──► Err? ──────────────────────────────► Err (unchanged)
                     └──► Ok  ──► script_outcomes() (log failures)
                                 ├── merge=False ──► dict(reply)
                                 └── merge=True  ──► field data
                                                     ◄ server keys overlay
                                                     ◄ recordId

Precedence under merge:
    Server keys (``recordId``, ``modId``, ``scriptResult*``, ``scriptError*``)
    win over a submitted field with the same name; every other key keeps the
    submitted value.

Examples:
    >>> shape_reply({"modId": "2"}, merge=True, field_data={"name": "Luke"}, record_id="7")
    {'modId': '2', 'name': 'Luke', 'recordId': '7'}
    >>> outcomes = script_outcomes({"modId": "2", "scriptError": "0", "scriptResult": ""})
    >>> outcomes[Phase.AFTER].failed
    False

Tags:
    response-shaping, merge, scripts, fmdata

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fmdata.core.logging import get_logger
from fmdata.core.result import Result
from fmdata.records.scripts import PHASE_ORDER, Phase

logger = get_logger(__name__)

RECORD_ID_KEY = "recordId"
MOD_ID_KEY = "modId"


def result_key(phase: Phase) -> str:
    return f"scriptResult{phase.suffix}"


def error_key(phase: Phase) -> str:
    return f"scriptError{phase.suffix}"


SERVER_KEYS: frozenset[str] = frozenset(
    {RECORD_ID_KEY, MOD_ID_KEY}
    | {result_key(phase) for phase in PHASE_ORDER}
    | {error_key(phase) for phase in PHASE_ORDER}
)


@dataclass(frozen=True)
class ScriptOutcome:
    """What the server reported for one phase.

    ``None`` means the key was absent from the reply; an empty string means
    it was present and empty.
    """

    phase: Phase
    result: Any = None
    error: Any = None

    @property
    def failed(self) -> bool:
        return self.error is not None and str(self.error) != "0"


def script_outcomes(reply: Mapping[str, Any]) -> dict[Phase, ScriptOutcome]:
    """Outcomes for the phases that appear in ``reply``, in execution order."""
    outcomes = {}
    for phase in PHASE_ORDER:
        rkey, ekey = result_key(phase), error_key(phase)
        if rkey in reply or ekey in reply:
            outcomes[phase] = ScriptOutcome(
                phase=phase,
                result=reply.get(rkey),
                error=reply.get(ekey),
            )
    return outcomes


def shape_reply(
    reply: Mapping[str, Any],
    *,
    merge: bool = False,
    field_data: Any = None,
    record_id: str | int | None = None,
) -> dict[str, Any]:
    """Build the caller-facing object from a successful reply."""
    for outcome in script_outcomes(reply).values():
        if outcome.failed:
            logger.warning(
                "script_error",
                phase=outcome.phase.value,
                script_error=outcome.error,
            )

    if not merge:
        return dict(reply)

    merged = dict(reply)
    if isinstance(field_data, Mapping):
        merged.update(field_data)
        merged.update({key: value for key, value in reply.items() if key in SERVER_KEYS})

    if RECORD_ID_KEY in reply:
        merged[RECORD_ID_KEY] = reply[RECORD_ID_KEY]
    elif record_id is not None:
        merged[RECORD_ID_KEY] = str(record_id)
    return merged


def shape_response(
    result: Result[dict[str, Any]],
    *,
    merge: bool = False,
    field_data: Any = None,
    record_id: str | int | None = None,
) -> Result[dict[str, Any]]:
    """Shape an ``Ok`` reply; return an ``Err`` exactly as received."""
    return result.map(
        lambda reply: shape_reply(
            reply,
            merge=merge,
            field_data=field_data,
            record_id=record_id,
        )
    )


__all__ = [
    "SERVER_KEYS",
    "ScriptOutcome",
    "error_key",
    "result_key",
    "script_outcomes",
    "shape_reply",
    "shape_response",
]
