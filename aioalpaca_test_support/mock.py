# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Scripted transport for tests that need no HTTP server.

ScriptedTransport answers every (device, action) pair from a script:

    transport = ScriptedTransport()
    transport.set_value(device_id=device_id, action="altitude", value=42.0)
    transport.set_responses(device_id=device_id, action="azimuth", responses=[NetworkException("down"), 180.0])
    gate = transport.hold_next(device_id=device_id, action="altitude")
    ...
    gate.set()

A script entry is either a value, an exception instance (raised) or a list
of them, consumed one per request with the last one repeating. Unscripted
GETs answer "not implemented", unscripted PUTs succeed.

hold_next makes the next request of a pair wait until the returned event is
set. The response is chosen when the request starts, so responses of held
requests keep the start order of their requests.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from aioalpaca.const import AlpacaErrorCode, HttpVerb
from aioalpaca.exceptions import NotImplementedException
from aioalpaca.model import DeviceDescriptor
from aioalpaca.type_aliases import AlpacaValue


@dataclass(frozen=True, kw_only=True, slots=True)
class TransportCall:
    """One request seen by the transport."""

    device_id: str
    verb: HttpVerb
    action: str
    params: Mapping[str, Any] = field(default_factory=dict)


class ScriptedTransport:
    """TransportProtocol double driven by per-action scripts."""

    def __init__(self) -> None:
        """Init the transport with empty scripts."""
        self.calls: Final[list[TransportCall]] = []
        self._scripts: Final[dict[tuple[str, str, HttpVerb], deque[Any]]] = {}
        self._gates: Final[dict[tuple[str, str, HttpVerb], deque[asyncio.Event]]] = defaultdict(deque)
        self.closed = False

    def set_value(
        self, *, device_id: str, action: str, value: AlpacaValue | BaseException, verb: HttpVerb = HttpVerb.GET
    ) -> None:
        """Answer every request of the pair with value."""
        self._scripts[(device_id, action.lower(), verb)] = deque([value])

    def set_responses(
        self, *, device_id: str, action: str, responses: list[Any], verb: HttpVerb = HttpVerb.GET
    ) -> None:
        """Answer the requests of the pair in order, repeating the last response."""
        self._scripts[(device_id, action.lower(), verb)] = deque(responses)

    def hold_next(self, *, device_id: str, action: str, verb: HttpVerb = HttpVerb.GET) -> asyncio.Event:
        """Make the next request of the pair wait for the returned event."""
        gate = asyncio.Event()
        self._gates[(device_id, action.lower(), verb)].append(gate)
        return gate

    def get_calls(self, *, action: str | None = None, verb: HttpVerb | None = None) -> list[TransportCall]:
        """Return the recorded requests, optionally filtered."""
        return [
            call
            for call in self.calls
            if (action is None or call.action == action.lower()) and (verb is None or call.verb == verb)
        ]

    def call_count(self, *, action: str | None = None, verb: HttpVerb | None = None) -> int:
        """Return how many requests matched."""
        return len(self.get_calls(action=action, verb=verb))

    async def wait_for_calls(self, *, action: str, count: int, timeout: float = 1.0) -> None:
        """Wait until count requests of action were issued."""
        async with asyncio.timeout(timeout):
            while self.call_count(action=action) < count:
                await asyncio.sleep(0.001)

    def _next_response(self, *, key: tuple[str, str, HttpVerb]) -> Any:
        if (script := self._scripts.get(key)) is None:
            if key[2] == HttpVerb.PUT:
                return None
            return NotImplementedException(code=AlpacaErrorCode.NOT_IMPLEMENTED, message=f"{key[1]} not implemented")
        return script.popleft() if len(script) > 1 else script[0]

    async def invoke(
        self,
        *,
        device: DeviceDescriptor,
        verb: HttpVerb,
        action: str,
        params: Mapping[str, Any] | None = None,
    ) -> AlpacaValue:
        """Answer one request from the script."""
        key = (device.device_id, action.lower(), verb)
        self.calls.append(TransportCall(device_id=device.device_id, verb=verb, action=key[1], params=dict(params or {})))
        response = self._next_response(key=key)
        if gates := self._gates.get(key):
            await gates.popleft().wait()
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self) -> None:
        """Record that the transport was closed."""
        self.closed = True
