# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/bus.py

"""Registered signal bus shared by drivers, responders and monitors.

The bus keeps two images of every wire. Readers always see the committed
image of the current tick; drives land in a pending image which becomes the
committed one when the simulator calls ``commit()`` at the tick boundary.
Signals nobody drives during a tick hold their value.

Each signal has one owning side (``Role``). A component attaches to the bus
with ``attach(role, name)`` and gets a ``BusPort``; the first port to drive a
signal claims it, so a second writer on the same wire is a ``BusContentionError``
and a port driving the other side's wire is a ``BusOwnershipError``. Monitors
read the bus directly and never attach.

``None`` models an unknown (X/Z) level.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping

from .config import BusConfig


class BusError(RuntimeError):
    """Misuse of the signal bus."""


class BusOwnershipError(BusError):
    """A port drove a signal owned by the other side of the bus."""


class BusContentionError(BusError):
    """Two writers drove the same signal."""


class Role(str, enum.Enum):
    """Side of the bus a signal belongs to."""

    INITIATOR = "initiator"
    RESPONDER = "responder"


class Channel(str, enum.Enum):
    """The five independently handshaked channels."""

    AW = "aw"
    W = "w"
    B = "b"
    AR = "ar"
    R = "r"

    @property
    def valid(self) -> str:
        return f"{self.value}valid"

    @property
    def ready(self) -> str:
        return f"{self.value}ready"


@dataclass(frozen=True)
class SignalSpec:
    """Static description of one wire."""

    name: str
    channel: Channel
    owner: Role
    width: Callable[[BusConfig], int]


def _one(_: BusConfig) -> int:
    return 1


def _two(_: BusConfig) -> int:
    return 2


def _addr(c: BusConfig) -> int:
    return c.address_width


def _data(c: BusConfig) -> int:
    return c.data_width


def _ident(c: BusConfig) -> int:
    return c.id_width


def _strb(c: BusConfig) -> int:
    return c.strobe_width


_I = Role.INITIATOR
_R = Role.RESPONDER

SIGNALS: tuple[SignalSpec, ...] = (
    SignalSpec("awaddr", Channel.AW, _I, _addr),
    SignalSpec("awid", Channel.AW, _I, _ident),
    SignalSpec("awburst", Channel.AW, _I, _two),
    SignalSpec("awvalid", Channel.AW, _I, _one),
    SignalSpec("awready", Channel.AW, _R, _one),
    SignalSpec("wdata", Channel.W, _I, _data),
    SignalSpec("wstrb", Channel.W, _I, _strb),
    SignalSpec("wlast", Channel.W, _I, _one),
    SignalSpec("wvalid", Channel.W, _I, _one),
    SignalSpec("wready", Channel.W, _R, _one),
    SignalSpec("bready", Channel.B, _I, _one),
    SignalSpec("bid", Channel.B, _R, _ident),
    SignalSpec("bresp", Channel.B, _R, _two),
    SignalSpec("bvalid", Channel.B, _R, _one),
    SignalSpec("araddr", Channel.AR, _I, _addr),
    SignalSpec("arid", Channel.AR, _I, _ident),
    SignalSpec("arburst", Channel.AR, _I, _two),
    SignalSpec("arvalid", Channel.AR, _I, _one),
    SignalSpec("arready", Channel.AR, _R, _one),
    SignalSpec("rready", Channel.R, _I, _one),
    SignalSpec("rdata", Channel.R, _R, _data),
    SignalSpec("rid", Channel.R, _R, _ident),
    SignalSpec("rresp", Channel.R, _R, _two),
    SignalSpec("rlast", Channel.R, _R, _one),
    SignalSpec("rvalid", Channel.R, _R, _one),
)

SIGNALS_BY_NAME: Dict[str, SignalSpec] = {s.name: s for s in SIGNALS}


def signals_owned_by(role: Role) -> list[str]:
    """Names of the wires driven by one side."""
    return [s.name for s in SIGNALS if s.owner is role]


class SignalBus:
    """All wires of one AXI-style interface."""

    def __init__(self, config: BusConfig | None = None, name: str = "bus"):
        self.config = config or BusConfig()
        self.name = name
        self._widths = {s.name: s.width(self.config) for s in SIGNALS}
        self._cur: Dict[str, int | None] = {s.name: 0 for s in SIGNALS}
        self._next: Dict[str, int | None] = {}
        self._claims: Dict[str, str] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

    def attach(self, role: Role, writer: str) -> BusPort:
        """Return a port that drives signals of ``role`` on behalf of ``writer``."""
        return BusPort(self, Role(role), writer)

    def width(self, name: str) -> int:
        return self._widths[self._spec(name).name]

    def get(self, name: str) -> int | None:
        """Committed value of a signal for the current tick."""
        return self._cur[self._spec(name).name]

    def __getitem__(self, name: str) -> int | None:
        return self.get(name)

    def handshake(self, channel: Channel) -> bool:
        """True iff valid and ready are both asserted in the committed image."""
        ch = Channel(channel)
        return self._cur[ch.valid] == 1 and self._cur[ch.ready] == 1

    def snapshot(self) -> Mapping[str, int | None]:
        """Read-only copy of the committed image."""
        return MappingProxyType(dict(self._cur))

    def pending(self) -> Mapping[str, int | None]:
        """Read-only copy of the values driven so far this tick."""
        return MappingProxyType(dict(self._next))

    def drive(self, port: BusPort, name: str, value: int | None) -> None:
        """Schedule ``value`` on ``name`` for the next tick. Used by ``BusPort``."""
        spec = self._spec(name)
        if spec.owner is not port.role:
            raise BusOwnershipError(
                f"{self.name}: {port.writer} ({port.role.value}) "
                f"may not drive {name} (owned by {spec.owner.value})"
            )
        holder = self._claims.setdefault(name, port.writer)
        if holder != port.writer:
            raise BusContentionError(
                f"{self.name}: {port.writer} drives {name} already driven by {holder}"
            )
        self._check_value(name, value)
        self._next[name] = value

    def sample(self, values: Mapping[str, int | None]) -> None:
        """Load externally observed levels straight into the committed image.

        Used by the co-simulation bridge for wires driven by HDL.
        """
        for name, value in values.items():
            self._check_value(self._spec(name).name, value)
            self._cur[name] = value

    def claimed_by(self, name: str) -> str | None:
        """Writer that owns ``name``, or None if nobody has driven it yet."""
        return self._claims.get(self._spec(name).name)

    def commit(self) -> None:
        """Tick boundary: pending drives become the committed image."""
        if self._next:
            self._cur.update(self._next)
            self._next.clear()

    def reset(self) -> None:
        """Force every signal to 0 and drop pending drives."""
        self._next.clear()
        for name in self._cur:
            self._cur[name] = 0

    def _spec(self, name: str) -> SignalSpec:
        try:
            return SIGNALS_BY_NAME[name]
        except KeyError as exc:
            raise KeyError(f"{self.name}: no signal named {name!r}") from exc

    def _check_value(self, name: str, value: int | None) -> None:
        if value is None:
            return
        width = self._widths[name]
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"{self.name}.{name} must be int, got {value!r}")
        if not 0 <= value < (1 << width):
            raise ValueError(
                f"{self.name}.{name}=0x{value:x} does not fit in {width} bits"
            )


class BusPort:
    """A writer's handle on a ``SignalBus``."""

    def __init__(self, bus: SignalBus, role: Role, writer: str):
        self.bus = bus
        self.role = role
        self.writer = writer

    def drive(self, **values: int | None) -> None:
        """Drive one or more signals for the next tick."""
        for name, value in values.items():
            self.bus.drive(self, name, value)

    def __getitem__(self, name: str) -> int | None:
        return self.bus.get(name)

    def handshake(self, channel: Channel) -> bool:
        return self.bus.handshake(channel)

    def release(self) -> None:
        """Drive every valid/ready line this port owns back to 0."""
        for spec in SIGNALS:
            if spec.owner is self.role and spec.name.endswith(("valid", "ready")):
                if self.bus.claimed_by(spec.name) == self.writer:
                    self.bus.drive(self, spec.name, 0)
