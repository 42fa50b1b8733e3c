"""sitewatch: lightweight change detection for monitored web pages."""

from __future__ import annotations

import warnings
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sitewatch")
except PackageNotFoundError:
    # Running from a source checkout that was never pip-installed.
    warnings.warn(
        "Package metadata for 'sitewatch' not found; using fallback version '0.0.0+unknown'.",
        RuntimeWarning,
        stacklevel=2,
    )
    __version__ = "0.0.0+unknown"
