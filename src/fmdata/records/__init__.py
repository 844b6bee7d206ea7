"""Record request/response engine.

Modules
-------
scripts     normalize_scripts() -- one ScriptSpec per phase
sanitize    sanitize() -- strip request options out of field data
request     build_request() -- WireRequest and its Data API encoding
response    shape_response() -- merge policy and script outcomes

Data flow::

    options ──► normalize_scripts ──► sanitize ──► build_request ──► transport
                                                                       │
    caller ◄──────────────────────── shape_response ◄──── Result[reply] ┘
"""

from fmdata.records.request import WireRequest, build_request
from fmdata.records.response import ScriptOutcome, script_outcomes, shape_reply, shape_response
from fmdata.records.sanitize import RESERVED_KEYS, SanitizedParams, sanitize
from fmdata.records.scripts import Phase, ScriptSpec, normalize_scripts

__all__ = [
    "Phase",
    "RESERVED_KEYS",
    "SanitizedParams",
    "ScriptOutcome",
    "ScriptSpec",
    "WireRequest",
    "build_request",
    "normalize_scripts",
    "sanitize",
    "script_outcomes",
    "shape_reply",
    "shape_response",
]
