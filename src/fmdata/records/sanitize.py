"""Split caller input into field data and request options.

``merge``, ``script``, ``script.param`` and ``scripts`` are request options.
They never reach the server as field values, whether the caller passed them
in ``options`` or by mistake inside the field data.  Everything else in the
field data is forwarded untouched; the server is the judge of field names
and values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from fmdata.core.errors import ValidationError
from fmdata.core.logging import get_logger
from fmdata.records.scripts import ScriptSpec, normalize_scripts

logger = get_logger(__name__)

RESERVED_KEYS: frozenset[str] = frozenset({"merge", "script", "script.param", "scripts"})


@dataclass(frozen=True)
class SanitizedParams:
    """Field data with reserved keys removed, plus the parsed options."""

    field_data: Any
    scripts: tuple[ScriptSpec, ...] = field(default_factory=tuple)
    merge: bool = False


def strip_reserved(field_data: Any) -> Any:
    """Return ``field_data`` without reserved keys.

    Anything that is not a mapping is returned as-is so the server can
    reject it with its own error.
    """
    if not isinstance(field_data, Mapping):
        return field_data
    dropped = sorted(key for key in field_data if key in RESERVED_KEYS)
    if dropped:
        logger.debug("reserved_keys_dropped", keys=dropped)
    return {key: value for key, value in field_data.items() if key not in RESERVED_KEYS}


def _merge_flag(value: Any) -> bool:
    """``merge`` must be a real boolean; ``None`` counts as not set."""
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError("merge must be true or false", field="merge", value=value)
    return value


def sanitize(field_data: Any, options: Mapping[str, Any] | None = None) -> SanitizedParams:
    """Produce the clean field data and normalized scripts for one request."""
    options = options or {}
    unknown = sorted(key for key in options if key not in RESERVED_KEYS)
    if unknown:
        logger.debug("unknown_options_ignored", keys=unknown)

    return SanitizedParams(
        field_data=strip_reserved(field_data),
        scripts=tuple(normalize_scripts(options)),
        merge=_merge_flag(options.get("merge")),
    )


__all__ = ["RESERVED_KEYS", "SanitizedParams", "sanitize", "strip_reserved"]
