# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Base class of the typed Alpaca device clients.

A client exposes exactly the members the Alpaca standard defines for its
device type. Every call goes through _invoke, which consults the capability
cache first: a member known to be unsupported raises UnsupportedException
without touching the network. A "not implemented" answer resolves the member
to unsupported, any successful answer resolves it to supported.

Writes and commands are never coalesced. Their outcome is reported to the
write observer, which updates the property cache right away.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Final

import voluptuous as vol

from aioalpaca import i18n
from aioalpaca.client.members import AlpacaProperty, as_bool, as_int, as_list, as_str
from aioalpaca.const import (
    COMMON_STATIC_PROPERTIES,
    CONNECTED_ACTION,
    DEVICE_STATE_ACTION,
    DeviceType,
    HttpVerb,
    WireKey,
)
from aioalpaca.decorators import inspector
from aioalpaca.exceptions import (
    AlpacaException,
    BaseAlpacaException,
    NotConnectedException,
    NotImplementedException,
    UnsupportedException,
    ValidationException,
)
from aioalpaca.schemas import DEVICE_STATE_SCHEMA

if TYPE_CHECKING:
    from aioalpaca.client.capabilities import CapabilityCache
    from aioalpaca.interfaces import TransportProtocol, WriteObserverProtocol
    from aioalpaca.model import DeviceDescriptor
    from aioalpaca.type_aliases import AlpacaValue, ParamMap

_LOGGER: Final = logging.getLogger(__name__)


class AlpacaClient:
    """Typed access to one Alpaca device."""

    DEVICE_TYPE: ClassVar[DeviceType]
    # read on every poll tick
    POLLED_PROPERTIES: ClassVar[tuple[str, ...]] = ()
    # read once after connect
    STATIC_PROPERTIES: ClassVar[tuple[str, ...]] = COMMON_STATIC_PROPERTIES
    _PROPERTIES: ClassVar[Mapping[str, AlpacaProperty[Any]]] = {}

    connected = AlpacaProperty("connected", as_bool, param="Connected")
    description = AlpacaProperty("description", as_str)
    driverinfo = AlpacaProperty("driverinfo", as_str)
    driverversion = AlpacaProperty("driverversion", as_str)
    interfaceversion = AlpacaProperty("interfaceversion", as_int)
    name = AlpacaProperty("name", as_str)
    supportedactions = AlpacaProperty("supportedactions", as_list)

    __slots__ = ("_capabilities", "_device", "_transport", "_write_observer")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Collect the properties declared along the class hierarchy."""
        super().__init_subclass__(**kwargs)
        properties: dict[str, AlpacaProperty[Any]] = {}
        for klass in reversed(cls.__mro__):
            for value in vars(klass).values():
                if isinstance(value, AlpacaProperty):
                    properties[value.name] = value
        cls._PROPERTIES = properties

    def __init__(
        self,
        *,
        device: DeviceDescriptor,
        transport: TransportProtocol,
        capabilities: CapabilityCache,
        write_observer: WriteObserverProtocol | None = None,
    ) -> None:
        """Init the client."""
        self._device: Final = device
        self._transport: Final = transport
        self._capabilities: Final = capabilities
        self._write_observer: Final = write_observer

    def __str__(self) -> str:
        """Return the device id."""
        return self._device.device_id

    @property
    def capabilities(self) -> CapabilityCache:
        """Return the capability cache of the connection."""
        return self._capabilities

    @property
    def device_id(self) -> str:
        """Return the device id."""
        return self._device.device_id

    @classmethod
    def is_readable(cls, *, name: str) -> bool:
        """Return True if name is a standard property of this device type."""
        return name.lower() in cls._PROPERTIES

    @classmethod
    def is_writable(cls, *, name: str) -> bool:
        """Return True if name is a standard writable property of this device type."""
        return (member := cls._PROPERTIES.get(name.lower())) is not None and member.writable

    @classmethod
    def readable_properties(cls) -> frozenset[str]:
        """Return the names of all standard properties of this device type."""
        return frozenset(cls._PROPERTIES)

    async def _invoke(
        self,
        *,
        verb: HttpVerb,
        action: str,
        params: ParamMap | None = None,
        track_capability: bool = True,
    ) -> AlpacaValue:
        """Issue one standard member call while maintaining the capability cache."""
        member = action.lower()
        if track_capability and self._capabilities.is_unsupported(member=member):
            raise UnsupportedException(
                i18n.tr("exception.client.member.unsupported", member=member, device_id=self.device_id)
            )
        try:
            value = await self._transport.invoke(device=self._device, verb=verb, action=member, params=params)
        except NotImplementedException as nie:
            if not track_capability:
                raise
            self._capabilities.mark_unsupported(member=member)
            raise UnsupportedException(
                i18n.tr(
                    "exception.client.member.not_implemented",
                    member=member,
                    device_id=self.device_id,
                    reason=nie.message,
                )
            ) from nie
        if track_capability:
            self._capabilities.mark_supported(member=member)
        return value

    async def _invoke_write(
        self, *, action: str, params: ParamMap | None, track_capability: bool = True
    ) -> AlpacaValue:
        """Issue a PUT. A NotConnected answer is reported to the write observer before it is raised."""
        try:
            return await self._invoke(
                verb=HttpVerb.PUT, action=action, params=params, track_capability=track_capability
            )
        except NotConnectedException as nce:
            if self._write_observer is not None:
                await self._write_observer.handle_not_connected(device_id=self.device_id, error=nce)
            raise

    def _validate_name(self, *, name: str) -> str:
        if not self.is_readable(name=name):
            raise ValidationException(
                i18n.tr("exception.client.property.unknown", name=name, device_type=self.DEVICE_TYPE)
            )
        return name.lower()

    async def get_property(self, *, name: str) -> AlpacaValue:
        """Read one standard property."""
        return await self._invoke(verb=HttpVerb.GET, action=self._validate_name(name=name))

    async def read_property(self, *, name: str) -> AlpacaValue:
        """
        Read one standard property for an operation of this client.

        With a write observer the read joins the coalesced read path of the
        poll loop and its result lands in the property cache.
        """
        key = self._validate_name(name=name)
        if self._write_observer is None:
            return await self.get_property(name=key)
        return await self._write_observer.read_property(device_id=self.device_id, name=key)

    async def get_properties(self, *, names: Collection[str]) -> dict[str, AlpacaValue | BaseAlpacaException]:
        """Read several properties one by one. Failures are returned in place of the value."""
        result: dict[str, AlpacaValue | BaseAlpacaException] = {}
        for name in names:
            try:
                result[name.lower()] = await self.get_property(name=name)
            except BaseAlpacaException as bae:
                result[name.lower()] = bae
        return result

    @inspector()
    async def set_property(self, *, name: str, value: Any) -> None:
        """Write one standard writable property and report it to the write observer."""
        key = self._validate_name(name=name)
        if (member := self._PROPERTIES[key]).param is None:
            raise ValidationException(
                i18n.tr("exception.client.property.read_only", name=key, device_type=self.DEVICE_TYPE)
            )
        request_seq = self._write_observer.begin_request() if self._write_observer else 0
        await self._invoke_write(action=key, params={member.param: value})
        if self._write_observer is not None:
            self._write_observer.handle_property_written(
                device_id=self.device_id, name=key, value=value, request_seq=request_seq
            )

    async def fetch_device_state(self) -> dict[str, AlpacaValue]:
        """
        Read all operational properties with one DeviceState request.

        Names are returned lowercase.
        """
        raw = await self._invoke(verb=HttpVerb.GET, action=DEVICE_STATE_ACTION)
        try:
            items = DEVICE_STATE_SCHEMA(raw)
        except vol.Invalid as err:
            raise AlpacaException(
                i18n.tr("exception.client.device_state.malformed", device_id=self.device_id, reason=str(err))
            ) from err
        return {str(item[str(WireKey.NAME)]).lower(): item[str(WireKey.VALUE)] for item in items}

    async def _query(self, *, action: str, params: ParamMap) -> AlpacaValue:
        """Read a standard member that takes parameters."""
        return await self._invoke(verb=HttpVerb.GET, action=action, params=params)

    async def _command(self, *, action: str, params: ParamMap | None = None) -> AlpacaValue:
        """Issue a standard command and report its success to the write observer."""
        value = await self._invoke_write(action=action, params=params)
        if self._write_observer is not None:
            self._write_observer.handle_command_completed(device_id=self.device_id, action=action.lower())
        return value

    async def set_connected(self, *, connected: bool) -> None:
        """Set the standard Connected property without going through the write observer."""
        await self._invoke(
            verb=HttpVerb.PUT,
            action=CONNECTED_ACTION,
            params={"Connected": connected},
            track_capability=False,
        )

    @inspector()
    async def action(self, *, action_name: str, parameters: str = "") -> str:
        """Invoke a device specific action listed in supportedactions."""
        return as_str(
            await self._invoke_write(
                action="action",
                params={"Action": action_name, "Parameters": parameters},
                track_capability=False,
            )
        )

    @inspector()
    async def command_blind(self, *, command: str, raw: bool = False) -> None:
        """Send a raw command without a reply."""
        await self._command(action="commandblind", params={"Command": command, "Raw": raw})

    @inspector()
    async def command_bool(self, *, command: str, raw: bool = False) -> bool:
        """Send a raw command with a boolean reply."""
        return as_bool(await self._command(action="commandbool", params={"Command": command, "Raw": raw}))

    @inspector()
    async def command_string(self, *, command: str, raw: bool = False) -> str:
        """Send a raw command with a string reply."""
        return as_str(await self._command(action="commandstring", params={"Command": command, "Raw": raw}))
