"""
fmdata - Async client for the FileMaker Data API record endpoints.

- fmdata.client: FileMakerClient facade (create / edit / delete)
- fmdata.records: script normalization, sanitizing, request building, response shaping
- fmdata.transport: httpx transport and Data API envelope handling
- fmdata.core: errors, result envelope, logging, settings
"""

__version__ = "0.1.0"

from fmdata.client import FileMakerClient
from fmdata.core.errors import FMDataError, ServerError
from fmdata.core.settings import FileMakerSettings
from fmdata.records.scripts import Phase, ScriptSpec

__all__ = [
    "FileMakerClient",
    "FileMakerSettings",
    "FMDataError",
    "Phase",
    "ScriptSpec",
    "ServerError",
    "__version__",
]
