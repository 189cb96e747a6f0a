# SPDX-License-Identifier: MIT
# Copyright (c) 2021-2025
"""
Capability cache of one device connection.

Every optional member (property, command or the DeviceState bulk read) is
unknown until the first probe answers. A successful probe marks it supported,
a "not implemented" answer marks it unsupported. An unsupported member stays
unsupported until the cache is discarded; a new connection starts with a new
cache where everything is unknown again.

A supported property can still become unsupported when it keeps failing.
The bulk read is the exception: it leaves unknown once and then stays.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging
from types import MappingProxyType
from typing import Final

from aioalpaca.const import DEVICE_STATE_ACTION, CapabilityState

_LOGGER: Final = logging.getLogger(__name__)

type CapabilityResolvedCallback = Callable[[str, CapabilityState], None]


@dataclass(frozen=True, kw_only=True, slots=True)
class CapabilityRecord:
    """Immutable snapshot of the capabilities known for a device."""

    device_id: str
    bulk_read: CapabilityState = CapabilityState.UNKNOWN
    members: Mapping[str, CapabilityState] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def unsupported(self) -> frozenset[str]:
        """Return the members known to be unsupported."""
        return frozenset(name for name, state in self.members.items() if state == CapabilityState.UNSUPPORTED)

    def get_state(self, *, member: str) -> CapabilityState:
        """Return the state of a member."""
        return self.members.get(member.lower(), CapabilityState.UNKNOWN)


class CapabilityCache:
    """Three-valued capability knowledge of a single connection session."""

    __slots__ = ("_device_id", "_members", "_on_resolved")

    def __init__(self, *, device_id: str, on_resolved: CapabilityResolvedCallback | None = None) -> None:
        """Init the capability cache."""
        self._device_id: Final = device_id
        self._members: Final[dict[str, CapabilityState]] = {}
        self._on_resolved = on_resolved

    @property
    def bulk_read(self) -> CapabilityState:
        """Return the state of the DeviceState bulk read."""
        return self.get_state(member=DEVICE_STATE_ACTION)

    @property
    def device_id(self) -> str:
        """Return the device id."""
        return self._device_id

    def get_state(self, *, member: str) -> CapabilityState:
        """Return the state of a member."""
        return self._members.get(member.lower(), CapabilityState.UNKNOWN)

    def is_unsupported(self, *, member: str) -> bool:
        """Return True if the member must not be probed again."""
        return self.get_state(member=member) == CapabilityState.UNSUPPORTED

    def mark_supported(self, *, member: str) -> bool:
        """Mark a member supported. Return True on a transition out of unknown."""
        key = member.lower()
        if self._members.get(key, CapabilityState.UNKNOWN) != CapabilityState.UNKNOWN:
            return False
        self._members[key] = CapabilityState.SUPPORTED
        self._resolved(member=key, state=CapabilityState.SUPPORTED)
        return True

    def mark_unsupported(self, *, member: str) -> bool:
        """Mark a member unsupported for the rest of the session. Return True on a transition."""
        key = member.lower()
        current = self._members.get(key, CapabilityState.UNKNOWN)
        if current == CapabilityState.UNSUPPORTED:
            return False
        # the bulk read resolves exactly once per session
        if key == DEVICE_STATE_ACTION and current != CapabilityState.UNKNOWN:
            return False
        self._members[key] = CapabilityState.UNSUPPORTED
        _LOGGER.info(  # i18n-log: ignore
            "CAPABILITY: %s: %s is not supported", self._device_id, key
        )
        self._resolved(member=key, state=CapabilityState.UNSUPPORTED)
        return True

    def clear(self) -> None:
        """Forget everything and stop notifying."""
        self._members.clear()
        self._on_resolved = None

    def snapshot(self) -> CapabilityRecord:
        """Return an immutable snapshot."""
        members = dict(self._members)
        return CapabilityRecord(
            device_id=self._device_id,
            bulk_read=members.pop(DEVICE_STATE_ACTION, CapabilityState.UNKNOWN),
            members=MappingProxyType(members),
        )

    def _resolved(self, *, member: str, state: CapabilityState) -> None:
        if self._on_resolved is not None:
            self._on_resolved(member, state)
