"""Lightweight aiohttp-based Alpaca device server used in tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Final

from aiohttp import web

from aioalpaca.const import API_PATH, AlpacaErrorCode


@dataclass(frozen=True, kw_only=True, slots=True)
class RecordedRequest:
    """One request received by the mock server."""

    method: str
    device_type: str
    device_number: int
    action: str
    params: dict[str, str] = field(default_factory=dict)


class MockAlpacaServer:
    """
    Minimal Alpaca server for transport tests.

    Every member answers from a table keyed by (device_type, device_number,
    action):
    - set_value: GET answers with the value in the envelope
    - set_error: the envelope carries ErrorNumber and ErrorMessage
    - set_status: a raw HTTP status with a text body
    - set_raw: a raw body, e.g. malformed JSON
    - set_delay: wait before answering
    Unknown GETs answer "not implemented" in the envelope. PUTs store the
    parameter named like the action, so a later GET reads it back.
    """

    SERVER_TRANSACTION_START: Final = 1000

    def __init__(self) -> None:
        """Initialize the aiohttp app."""
        self._app = web.Application()
        self._app.router.add_route("*", API_PATH + "/{device_type}/{device_number}/{action}", self._handle)
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._values: dict[tuple[str, int, str], Any] = {}
        self._errors: dict[tuple[str, int, str], tuple[int, str]] = {}
        self._statuses: dict[tuple[str, int, str], tuple[int, str]] = {}
        self._raw: dict[tuple[str, int, str], str] = {}
        self._delays: dict[tuple[str, int, str], float] = {}
        self._server_transaction_id = self.SERVER_TRANSACTION_START
        self.requests: list[RecordedRequest] = []

    async def start(self, host: str = "127.0.0.1", port: int = 0) -> str:
        """Start the server and return its base URL."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=host, port=port)
        await self._site.start()
        assert self._runner.addresses
        bound = self._runner.addresses[0]
        return f"http://{bound[0]}:{bound[1]}"

    async def stop(self) -> None:
        """Stop the server."""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()

    def set_value(self, *, device_type: str, device_number: int = 0, action: str, value: Any) -> None:
        """Answer GET requests of a member with value."""
        self._values[(device_type, device_number, action)] = value

    def set_error(
        self, *, device_type: str, device_number: int = 0, action: str, error_number: int, message: str = ""
    ) -> None:
        """Answer requests of a member with an Alpaca error."""
        self._errors[(device_type, device_number, action)] = (error_number, message)

    def set_status(self, *, device_type: str, device_number: int = 0, action: str, status: int, text: str = "") -> None:
        """Answer requests of a member with a raw HTTP status."""
        self._statuses[(device_type, device_number, action)] = (status, text)

    def set_raw(self, *, device_type: str, device_number: int = 0, action: str, body: str) -> None:
        """Answer requests of a member with a raw body."""
        self._raw[(device_type, device_number, action)] = body

    def set_delay(self, *, device_type: str, device_number: int = 0, action: str, seconds: float) -> None:
        """Delay the answers of a member."""
        self._delays[(device_type, device_number, action)] = seconds

    def get_value(self, *, device_type: str, device_number: int = 0, action: str) -> Any:
        """Return the stored value of a member."""
        return self._values.get((device_type, device_number, action))

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        device_type = request.match_info["device_type"]
        device_number = int(request.match_info["device_number"])
        action = request.match_info["action"]
        key = (device_type, device_number, action)
        if request.method == "PUT":
            params = {k: str(v) for k, v in (await request.post()).items()}
        else:
            params = dict(request.query)
        self.requests.append(
            RecordedRequest(
                method=request.method,
                device_type=device_type,
                device_number=device_number,
                action=action,
                params=params,
            )
        )

        if (delay := self._delays.get(key)) is not None:
            await asyncio.sleep(delay)
        if (status := self._statuses.get(key)) is not None:
            return web.Response(status=status[0], text=status[1])
        if (raw := self._raw.get(key)) is not None:
            return web.Response(text=raw, content_type="application/json")

        self._server_transaction_id += 1
        envelope: dict[str, Any] = {
            "ClientTransactionID": int(params.get("ClientTransactionID", 0)),
            "ServerTransactionID": self._server_transaction_id,
            "ErrorNumber": 0,
            "ErrorMessage": "",
        }
        if (error := self._errors.get(key)) is not None:
            envelope["ErrorNumber"], envelope["ErrorMessage"] = error
        elif request.method == "PUT":
            for name, value in params.items():
                if name.lower() == action:
                    self._values[key] = value
        elif key in self._values:
            envelope["Value"] = self._values[key]
        else:
            envelope["ErrorNumber"] = int(AlpacaErrorCode.NOT_IMPLEMENTED)
            envelope["ErrorMessage"] = f"{action} is not implemented"
        return web.json_response(envelope)
