"""
Script normalization for record requests.

Callers can ask the Data API to run scripts in two overlapping shapes:

- the legacy pair ``{"script": name, "script.param": value}``, which always
  targets the default phase (after the record operation), and
- a ``scripts`` array of ``{"name", "phase", "param"}`` entries, one per
  phase (``prerequest``, ``presort`` or the default).

``normalize_scripts()`` reconciles both into one ordered list of
``ScriptSpec`` with at most one entry per phase.

Manifesto:
    - **Declare once per phase:** The phase is the key; every source writes
      into the same slot
    - **Augment, don't replace:** A later declaration only overwrites the
      attributes it supplies, so ``{"phase": "prerequest"}`` keeps the name
      declared elsewhere
    - **Nothing invented:** The phases in the output are exactly the phases
      named by the inputs
    - **Params are opaque:** Any JSON-serializable value passes through; the
      server decides what it means

Architecture:
    ::

        options ──► legacy source ──┐
                                    ├──► {Phase: slot} ──► [ScriptSpec, ...]
        options["scripts"] ─────────┘     merge by key       prerequest, after, presort

Examples:
    >>> specs = normalize_scripts({
    ...     "script": "Log Edit",
    ...     "script.param": 1,
    ...     "scripts": [{"name": "Audit", "phase": "prerequest", "param": 2}],
    ... })
    >>> [(s.phase.value, s.name, s.param) for s in specs]
    [('prerequest', 'Audit', 2), ('after', 'Log Edit', 1)]

    An entry without a name inherits the legacy name:

    >>> [s.name for s in normalize_scripts({"script": "Log Edit", "scripts": [{"phase": "presort"}]})]
    ['Log Edit', 'Log Edit']

Guardrails:
    ❌ DON'T: Let a ``scripts`` entry wipe the legacy param by omitting ``param``
    ✅ DO: Overwrite only the attributes an entry actually carries

    ❌ DON'T: Validate script params locally
    ✅ DO: Leave params to the server

Tags:
    scripts, normalization, data-api, fmdata

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fmdata.core.errors import ScriptSpecError
from fmdata.core.logging import get_logger

logger = get_logger(__name__)


class Phase(str, Enum):
    """When the server runs a script relative to the record operation."""

    PREREQUEST = "prerequest"
    AFTER = "after"
    PRESORT = "presort"

    @classmethod
    def parse(cls, value: Any) -> Phase:
        """Read a caller-supplied phase; ``None`` and ``""`` mean the default phase."""
        if value is None or value == "":
            return cls.AFTER
        try:
            return cls(value)
        except ValueError:
            raise ScriptSpecError(
                f"Unknown script phase: {value!r}",
                field="phase",
                value=value,
            ) from None

    @property
    def suffix(self) -> str:
        """Key suffix the Data API uses for this phase (``""`` for the default)."""
        if self is Phase.AFTER:
            return ""
        return f".{self.value}"


# Server-side execution order
PHASE_ORDER: tuple[Phase, ...] = (Phase.PREREQUEST, Phase.AFTER, Phase.PRESORT)


@dataclass(frozen=True)
class ScriptSpec:
    """One script to run in one phase."""

    name: str
    phase: Phase = Phase.AFTER
    param: Any = None


def _script_entries(scripts: Any) -> list[Mapping[str, Any]]:
    if scripts is None:
        return []
    if isinstance(scripts, Mapping):
        return [scripts]
    if isinstance(scripts, Sequence) and not isinstance(scripts, (str, bytes)):
        entries = list(scripts)
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise ScriptSpecError(
                    "Each scripts entry must be a mapping",
                    field="scripts",
                    value=entry,
                )
        return entries
    raise ScriptSpecError(
        "scripts must be a list of mappings",
        field="scripts",
        value=scripts,
    )


def _apply(slot: dict[str, Any], name: Any, param: Any) -> None:
    if name is not None:
        if not isinstance(name, str) or not name:
            raise ScriptSpecError(
                "Script name must be a non-empty string",
                field="name",
                value=name,
            )
        slot["name"] = name
    if param is not None:
        slot["param"] = param


def normalize_scripts(options: Mapping[str, Any] | None) -> list[ScriptSpec]:
    """Reconcile legacy and array script options into one spec per phase.

    Args:
        options: Request options; only ``script``, ``script.param`` and
            ``scripts`` are read.

    Returns:
        ScriptSpec list ordered prerequest, after, presort.

    Raises:
        ScriptSpecError: Unknown phase, malformed entry, or a phase that
            ends up without a script name.
    """
    if not options:
        return []

    declared: dict[Phase, dict[str, Any]] = {}

    legacy_name = options.get("script")
    legacy_param = options.get("script.param")
    if legacy_name is not None or legacy_param is not None:
        _apply(declared.setdefault(Phase.AFTER, {}), legacy_name, legacy_param)

    for entry in _script_entries(options.get("scripts")):
        phase = Phase.parse(entry.get("phase"))
        _apply(declared.setdefault(phase, {}), entry.get("name"), entry.get("param"))

    specs = []
    for phase in PHASE_ORDER:
        slot = declared.get(phase)
        if slot is None:
            continue
        name = slot.get("name", legacy_name)
        if name is None:
            raise ScriptSpecError(
                f"No script name declared for phase {phase.value!r}",
                field="scripts",
                value=phase.value,
            )
        specs.append(ScriptSpec(name=name, phase=phase, param=slot.get("param")))

    if specs:
        logger.debug(
            "scripts_normalized",
            phases=[spec.phase.value for spec in specs],
        )
    return specs


__all__ = ["Phase", "PHASE_ORDER", "ScriptSpec", "normalize_scripts"]
