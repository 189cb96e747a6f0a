"""
Module to support aioalpaca testing without real devices.

This support package is version-locked to the main aioalpaca package.
The version is sourced from aioalpaca.const.VERSION.
"""

from __future__ import annotations

from aioalpaca.const import VERSION as _AIOALPACA_VERSION

# Public version of this package, intentionally identical to aioalpaca
__version__ = _AIOALPACA_VERSION

__dependencies__ = [f"aioalpaca=={__version__}"]
