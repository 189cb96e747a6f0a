# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""Common decorators used within aioalpaca."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from functools import wraps
import logging
import time
from typing import Any, Final, ParamSpec, TypeVar, cast

from aioalpaca.exceptions import BaseAlpacaException
from aioalpaca.support import log_boundary_error

P = ParamSpec("P")
R = TypeVar("R")

_LOGGER: Final = logging.getLogger(__name__)
_LOGGER_PERFORMANCE: Final = logging.getLogger(f"{__package__}.performance")

# set while a user initiated write or command is running
IN_SERVICE_VAR: ContextVar[bool] = ContextVar("in_service_var", default=False)


def is_in_service() -> bool:
    """Return True if called from within a service call."""
    return IN_SERVICE_VAR.get()


def inspector(
    *,
    re_raise: bool = True,
    no_raise_return: Any = None,
    measure_performance: bool = False,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """
    Guard a public write or command coroutine.

    The outermost service call logs a library error once and either re-raises
    it or returns no_raise_return. Nested service calls leave logging to the
    outermost one. Exceptions that are not library errors always propagate.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            token = None if IN_SERVICE_VAR.get() else IN_SERVICE_VAR.set(True)
            start = time.monotonic() if measure_performance else 0.0
            try:
                return await func(*args, **kwargs)
            except BaseAlpacaException as bae:
                if token is not None:
                    log_boundary_error(
                        _LOGGER,
                        boundary="service",
                        action=func.__name__,
                        err=bae,
                        log_context={"target": str(args[0])} if args else None,
                    )
                if re_raise or token is None:
                    raise
                return cast(R, no_raise_return)
            finally:
                if token is not None:
                    IN_SERVICE_VAR.reset(token)
                if measure_performance and _LOGGER_PERFORMANCE.isEnabledFor(logging.DEBUG):
                    _LOGGER_PERFORMANCE.debug(
                        "Execution of %s took %.3fs", func.__name__.upper(), time.monotonic() - start
                    )

        setattr(wrapper, "lib_service", True)
        return wrapper

    return decorator
