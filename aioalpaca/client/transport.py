# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
HTTP transport for the Alpaca REST protocol.

One call is one request and one response. There is no caching, retrying or
deduplication at this level.

Wire rules:
- urls are {base}/api/v1/{device type}/{device number}/{action}, lowercase
- GET sends parameters as query string, PUT as form encoded body
- parameter names keep the exact casing the protocol defines
- every request carries ClientID and the next ClientTransactionID
- a response with a nonzero ErrorNumber is a protocol error, even with HTTP 200

Failure mapping:
- timeout, refused or unreachable host, HTTP 5xx, unusable body -> NetworkException
- HTTP 404 (the member does not exist on this server) -> NotImplementedException
- HTTP 400 -> InvalidValueException
- nonzero ErrorNumber -> protocol_exception_from_code
"""

from __future__ import annotations

from itertools import count
import logging
from typing import TYPE_CHECKING, Any, Final

from aiohttp import ClientError, ClientSession, ClientTimeout
import orjson
import voluptuous as vol

from aioalpaca import i18n
from aioalpaca.const import DEFAULT_REQUEST_TIMEOUT, AlpacaErrorCode, HttpVerb, WireKey
from aioalpaca.exceptions import (
    InvalidValueException,
    NetworkException,
    NotImplementedException,
    ProtocolException,
    protocol_exception_from_code,
)
from aioalpaca.schemas import RESPONSE_ENVELOPE_SCHEMA
from aioalpaca.support import build_device_url, generate_client_id, to_alpaca_params

if TYPE_CHECKING:
    from aioalpaca.model import DeviceDescriptor
    from aioalpaca.type_aliases import AlpacaValue, ParamMap

_LOGGER: Final = logging.getLogger(__name__)


class TransactionCounter:
    """Fixed client id of a session plus a monotonically increasing transaction number."""

    __slots__ = ("_client_id", "_counter", "_last")

    def __init__(self, *, client_id: int | None = None) -> None:
        """Init the counter."""
        self._client_id: Final = client_id if client_id is not None else generate_client_id()
        self._counter: Final = count(1)
        self._last = 0

    @property
    def client_id(self) -> int:
        """Return the client id."""
        return self._client_id

    @property
    def last_transaction_id(self) -> int:
        """Return the most recently issued transaction id."""
        return self._last

    def next_transaction_id(self) -> int:
        """Return the next transaction id."""
        self._last = next(self._counter)
        return self._last


class AlpacaTransport:
    """Single request/response primitive against Alpaca device endpoints."""

    __slots__ = ("_counter", "_own_session", "_request_timeout", "_session")

    def __init__(
        self,
        *,
        session: ClientSession | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        counter: TransactionCounter | None = None,
    ) -> None:
        """Init the transport. Without a session, one is created on first use and owned by the transport."""
        self._session = session
        self._own_session = session is None
        self._request_timeout: Final = request_timeout
        self._counter: Final = counter or TransactionCounter()

    @property
    def counter(self) -> TransactionCounter:
        """Return the transaction counter."""
        return self._counter

    @property
    def request_timeout(self) -> float:
        """Return the timeout of a single request in seconds."""
        return self._request_timeout

    async def close(self) -> None:
        """Close the session if the transport created it."""
        if self._own_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._own_session:
            self._session = None

    def _get_session(self) -> ClientSession:
        if self._session is None or (self._own_session and self._session.closed):
            self._session = ClientSession()
        return self._session

    async def invoke(
        self,
        *,
        device: DeviceDescriptor,
        verb: HttpVerb,
        action: str,
        params: ParamMap | None = None,
    ) -> AlpacaValue:
        """Issue one request and return the Value of the response envelope."""
        url = build_device_url(
            base_url=device.base_url,
            device_type=device.device_type,
            device_number=device.device_number,
            action=action,
        )
        payload = to_alpaca_params(params=params)
        payload[str(WireKey.CLIENT_ID)] = str(self._counter.client_id)
        payload[str(WireKey.CLIENT_TRANSACTION_ID)] = str(transaction_id := self._counter.next_transaction_id())

        _LOGGER.debug("INVOKE: %s %s [%i] %s", verb, url, transaction_id, params or "")
        try:
            async with self._get_session().request(
                str(verb),
                url,
                params=payload if verb == HttpVerb.GET else None,
                data=payload if verb == HttpVerb.PUT else None,
                timeout=ClientTimeout(total=self._request_timeout),
            ) as response:
                status = response.status
                body = await response.read()
        except TimeoutError as terr:
            raise NetworkException(
                i18n.tr("exception.transport.timeout", url=url, timeout=self._request_timeout)
            ) from terr
        except (ClientError, OSError) as cerr:
            raise NetworkException(
                i18n.tr("exception.transport.request_failed", url=url, reason=f"{cerr.__class__.__name__}: {cerr}")
            ) from cerr

        envelope = _check_response(url=url, status=status, body=body)
        _LOGGER.debug(
            "INVOKE: %s [%i] -> %s",
            url,
            transaction_id,
            envelope.get(str(WireKey.VALUE)),
        )
        return envelope.get(str(WireKey.VALUE))  # type: ignore[no-any-return]


def _check_response(*, url: str, status: int, body: bytes) -> dict[str, Any]:
    """Map status and body to the validated envelope or raise the matching exception."""
    text = body[:200].decode("utf-8", errors="replace").strip()
    if status == 404:
        raise NotImplementedException(code=AlpacaErrorCode.NOT_IMPLEMENTED, message=text or f"{url} not found")
    if status == 400:
        raise InvalidValueException(code=AlpacaErrorCode.INVALID_VALUE, message=text)
    if status >= 500:
        raise NetworkException(i18n.tr("exception.transport.http_status", url=url, status=status, reason=text))
    if status >= 300:
        raise ProtocolException(code=AlpacaErrorCode.UNSPECIFIED, message=f"HTTP {status}: {text}")

    try:
        envelope: dict[str, Any] = RESPONSE_ENVELOPE_SCHEMA(orjson.loads(body))
    except (orjson.JSONDecodeError, vol.Invalid) as err:
        raise NetworkException(
            i18n.tr("exception.transport.malformed_response", url=url, reason=str(err))
        ) from err

    if (error_number := envelope[str(WireKey.ERROR_NUMBER)]) != 0:
        raise protocol_exception_from_code(code=error_number, message=envelope[str(WireKey.ERROR_MESSAGE)] or "")
    return envelope

