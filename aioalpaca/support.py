# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Helper functions used within aioalpaca."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import math
import secrets
from typing import Any, Final
from urllib.parse import urlsplit

import orjson
from slugify import slugify

from aioalpaca import i18n
from aioalpaca.const import API_PATH, CLIENT_ID_MAX, CLIENT_ID_MIN, DeviceType
from aioalpaca.exceptions import BaseAlpacaException, ValidationException

_LOGGER: Final = logging.getLogger(__name__)

_SENSITIVE_KEYS: Final = frozenset({"password", "token", "secret", "authorization"})


def extract_exc_args(*, exc: Exception) -> tuple[Any, ...] | Any:
    """Return the first arg, if there is only one arg."""
    if exc.args:
        return exc.args[0] if len(exc.args) == 1 else exc.args
    return exc


def generate_client_id() -> int:
    """Return a random client id for one session."""
    return CLIENT_ID_MIN + secrets.randbelow(CLIENT_ID_MAX - CLIENT_ID_MIN + 1)


def build_device_id(*, base_url: str, device_type: DeviceType | str, device_number: int) -> str:
    """Return a stable id for a device endpoint, e.g. 'localhost-11111-telescope-0'."""
    parts = urlsplit(base_url)
    host = parts.netloc or parts.path
    return slugify(f"{host} {device_type} {device_number}")


def build_device_url(*, base_url: str, device_type: DeviceType | str, device_number: int, action: str) -> str:
    """
    Return the url of one Alpaca member.

    Type and action are always lowercase on the wire. A base url that already
    ends with the api path is accepted as well.
    """
    base = base_url.rstrip("/")
    if base.lower().endswith(API_PATH):
        base = base[: -len(API_PATH)]
    return f"{base}{API_PATH}/{str(device_type).lower()}/{device_number}/{action.lower()}"


def to_alpaca_value(*, value: Any) -> str:
    """Convert a python value to its form-encoded wire representation."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationException(i18n.tr("exception.support.value.not_finite", value=value))
        return repr(value)
    if isinstance(value, int | str):
        return str(value)
    raise ValidationException(i18n.tr("exception.support.value.unsupported_type", type=type(value).__name__))


def to_alpaca_params(*, params: Mapping[str, Any] | None) -> dict[str, str]:
    """Convert all parameter values to their wire representation. Keys keep their casing."""
    return {key: to_alpaca_value(value=value) for key, value in (params or {}).items()}


def _redact(*, context: Mapping[str, Any]) -> dict[str, Any]:
    return {key: ("***" if key.lower() in _SENSITIVE_KEYS else value) for key, value in context.items()}


def log_boundary_error(
    logger: logging.Logger,
    *,
    boundary: str,
    action: str,
    err: Exception,
    log_context: Mapping[str, Any] | None = None,
    message: str | None = None,
) -> None:
    """
    Log an error that crossed a public boundary exactly once.

    Library errors are logged at WARNING, everything else at ERROR.
    """
    level = logging.WARNING if isinstance(err, BaseAlpacaException) else logging.ERROR
    text = f"[boundary={boundary} action={action} err={err.__class__.__name__}: {err}]"
    if message:
        text = f"{text} {message}"
    if log_context:
        ctx = orjson.dumps(_redact(context=log_context), default=str, option=orjson.OPT_SORT_KEYS).decode()
        text = f"{text} ctx={ctx}"
    logger.log(level, text)
