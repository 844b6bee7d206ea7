"""fmdata command line interface (``fmdata`` console script)."""

from fmdata.cli.app import app

__all__ = ["app"]
