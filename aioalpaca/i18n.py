# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Localized messages for exceptions and user facing log lines.

Catalogs are packaged JSON files below aioalpaca/translations:
- strings.json holds the base (english) catalog
- <locale>.json overrides single keys for a locale

Lookup falls back from the active locale to the base catalog and finally to
the key itself.
"""

from __future__ import annotations

import asyncio
import json
import logging
import pkgutil
from threading import RLock
from typing import Any, Final

from aioalpaca.const import DEFAULT_LOCALE

_LOGGER: Final = logging.getLogger(__name__)

_TRANSLATIONS_PKG: Final = "aioalpaca"
_LOCK: Final = RLock()
_CATALOGS: dict[str, dict[str, str]] = {}
_BASE_CATALOG: dict[str, str] = {}
_CURRENT_LOCALE: str = DEFAULT_LOCALE


class _SafeDict(dict[str, str]):
    """Keep unknown placeholders untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _normalize(*, locale: str | None) -> str:
    return (locale or DEFAULT_LOCALE).strip().lower() or DEFAULT_LOCALE


def _load_json_resource(*, resource: str) -> dict[str, str]:
    """Load a packaged catalog with pkgutil, so wheels and editable installs behave alike."""
    try:
        if not (data := pkgutil.get_data(_TRANSLATIONS_PKG, f"translations/{resource}")):
            return {}
        return {str(k): str(v) for k, v in json.loads(data.decode("utf-8")).items()}
    except (OSError, ValueError) as exc:
        _LOGGER.debug("Failed to load translation resource %s: %s", resource, exc)
        return {}


def _base_catalog() -> dict[str, str]:
    global _BASE_CATALOG  # noqa: PLW0603  # pylint: disable=global-statement
    if not _BASE_CATALOG:
        with _LOCK:
            if not _BASE_CATALOG:
                _BASE_CATALOG = _load_json_resource(resource="strings.json")
    return _BASE_CATALOG


def _get_catalog(*, locale: str) -> dict[str, str]:
    if (catalog := _CATALOGS.get(locale)) is not None:
        return catalog
    with _LOCK:
        if locale not in _CATALOGS:
            _CATALOGS[locale] = {**_base_catalog(), **_load_json_resource(resource=f"{locale}.json")}
        return _CATALOGS[locale]


def set_locale(*, locale: str | None) -> None:
    """Set the active locale. None or empty selects the default."""
    global _CURRENT_LOCALE  # noqa: PLW0603  # pylint: disable=global-statement
    with _LOCK:
        _CURRENT_LOCALE = _normalize(locale=locale)


def get_locale() -> str:
    """Return the active locale code."""
    return _CURRENT_LOCALE


def tr(key: str, /, **kwargs: Any) -> str:
    """Translate key with the active locale and format it with kwargs."""
    template = _get_catalog(locale=_CURRENT_LOCALE).get(key) or _base_catalog().get(key, key)
    try:
        return template.format_map(_SafeDict({str(k): str(v) for k, v in kwargs.items()}))
    except (ValueError, IndexError):
        return template


async def preload_locale(*, locale: str) -> None:
    """Load a locale catalog in a worker thread so the event loop never reads package data."""
    await asyncio.to_thread(_get_catalog, locale=_normalize(locale=locale))
