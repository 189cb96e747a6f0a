# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Declarative description of the Alpaca properties of a device type.

A client class declares each standard property once:

    class FocuserClient(AlpacaClient):
        position = AlpacaProperty("position", as_int)
        tempcomp = AlpacaProperty("tempcomp", as_bool, param="TempComp")

Accessing the attribute on a client returns a bound accessor:

    position = await focuser.position.get()
    await focuser.tempcomp.set(True)

The class collects all declared names, so the client can reject reads and
writes of names the protocol does not define for this device type.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, Generic, TypeVar, overload

from aioalpaca import i18n
from aioalpaca.exceptions import AlpacaException

if TYPE_CHECKING:
    from aioalpaca.client.base import AlpacaClient

T = TypeVar("T")


def _convert(value: Any, kind: type, converter: Callable[[Any], Any]) -> Any:
    try:
        return converter(value)
    except (TypeError, ValueError) as err:
        raise AlpacaException(
            i18n.tr("exception.client.value.unexpected_type", value=value, type=kind.__name__)
        ) from err


def as_bool(value: Any) -> bool:
    """Return a device value as bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return bool(_convert(value, int, int))


def as_float(value: Any) -> float:
    """Return a device value as float."""
    return float(_convert(value, float, float))


def as_int(value: Any) -> int:
    """Return a device value as int."""
    return int(_convert(value, int, int))


def as_str(value: Any) -> str:
    """Return a device value as str."""
    return "" if value is None else str(value)


def as_list(value: Any) -> list[Any]:
    """Return a device value as list."""
    if isinstance(value, list):
        return value
    raise AlpacaException(i18n.tr("exception.client.value.unexpected_type", value=value, type="list"))


class AlpacaProperty(Generic[T]):
    """Descriptor of one standard Alpaca property."""

    __slots__ = ("attr_name", "converter", "name", "param")

    def __init__(self, name: str, converter: Callable[[Any], T], *, param: str | None = None) -> None:
        """Init the descriptor. param is the exact PUT parameter name of a writable property."""
        self.name: Final = name.lower()
        self.converter: Final = converter
        self.param: Final = param
        self.attr_name = self.name

    @property
    def writable(self) -> bool:
        """Return True if the property can be set."""
        return self.param is not None

    def __set_name__(self, owner: type, attr_name: str) -> None:
        self.attr_name = attr_name

    @overload
    def __get__(self, instance: None, owner: type) -> AlpacaProperty[T]: ...

    @overload
    def __get__(self, instance: AlpacaClient, owner: type) -> BoundProperty[T]: ...

    def __get__(self, instance: AlpacaClient | None, owner: type) -> AlpacaProperty[T] | BoundProperty[T]:
        if instance is None:
            return self
        return BoundProperty(client=instance, member=self)


class BoundProperty(Generic[T]):
    """Accessor of one property on one client."""

    __slots__ = ("_client", "_member")

    def __init__(self, *, client: AlpacaClient, member: AlpacaProperty[T]) -> None:
        """Init the accessor."""
        self._client: Final = client
        self._member: Final = member

    @property
    def name(self) -> str:
        """Return the wire name of the property."""
        return self._member.name

    async def get(self) -> T:
        """Read the property through the client, joining a read already in flight."""
        return self._member.converter(await self._client.read_property(name=self._member.name))

    async def set(self, value: T) -> None:
        """Write the property to the device."""
        await self._client.set_property(name=self._member.name, value=value)
