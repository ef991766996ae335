# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/txn.py

"""Transaction, observation and completion records.

A transaction is a tagged variant: ``WriteTxn`` or ``ReadTxn``. Both are
frozen dataclasses, so the copy a sequencer hands to a driver can never be
altered by the driver, the monitor or the scoreboard. Components are
specialised per kind when they are constructed; the ``kind`` tag exists for
keying ledgers and for serialization, not for dispatch.
"""

from __future__ import annotations

import enum
import json
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .config import BusConfig


class TxnKind(str, enum.Enum):
    """Direction of a transaction."""

    WRITE = "write"
    READ = "read"


class BurstKind(enum.IntEnum):
    """Addressing mode carried on ``awburst``/``arburst``."""

    FIXED = 0
    INCR = 1
    WRAP = 2


class Resp(enum.IntEnum):
    """Two-bit response code on ``bresp``/``rresp``."""

    OKAY = 0
    EXOKAY = 1
    SLVERR = 2
    DECERR = 3

    @classmethod
    def decode(cls, value: int | None) -> Resp | None:
        """Return the response for a raw wire value, or None if malformed."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


def _check_field(name: str, value: int, width: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if not 0 <= value < (1 << width):
        raise ValueError(f"{name}=0x{value:x} does not fit in {width} bits")


@dataclass(frozen=True)
class WriteTxn:
    """Single-beat write request."""

    address: int
    data: int
    identifier: int = 0
    burst: BurstKind = BurstKind.INCR
    # None means every byte lane is enabled
    strobe: int | None = None

    kind = TxnKind.WRITE

    def check(self, config: BusConfig) -> None:
        """Raise ValueError if any field does not fit the bus widths."""
        _check_field("address", self.address, config.address_width)
        _check_field("data", self.data, config.data_width)
        _check_field("identifier", self.identifier, config.id_width)
        if self.strobe is not None:
            _check_field("strobe", self.strobe, config.strobe_width)

    def observed_fields(self) -> tuple:
        """Fields a write monitor reconstructs from AW and W."""
        return (self.address, self.identifier, self.burst, self.data)

    def strobe_for(self, config: BusConfig) -> int:
        """Return the byte strobe to drive on ``wstrb``."""
        return config.strobe_mask if self.strobe is None else self.strobe

    def to_dict(self) -> dict[str, object]:
        """Structured view for logging/JSON."""
        d = asdict(self)
        d["kind"] = self.kind.value
        d["burst"] = self.burst.name
        return d

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass(frozen=True)
class ReadTxn:
    """Single-beat read request."""

    address: int
    identifier: int = 0
    burst: BurstKind = BurstKind.INCR

    kind = TxnKind.READ

    def check(self, config: BusConfig) -> None:
        """Raise ValueError if any field does not fit the bus widths."""
        _check_field("address", self.address, config.address_width)
        _check_field("identifier", self.identifier, config.id_width)

    def observed_fields(self) -> tuple:
        """Fields a read monitor reconstructs from AR."""
        return (self.address, self.identifier, self.burst)

    def to_dict(self) -> dict[str, object]:
        """Structured view for logging/JSON."""
        d = asdict(self)
        d["kind"] = self.kind.value
        d["burst"] = self.burst.name
        return d

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


Transaction = Union[WriteTxn, ReadTxn]


@dataclass(frozen=True)
class Observation:  # pylint: disable=too-many-instance-attributes
    """A transaction as reconstructed by a monitor from bus handshakes.

    ``tick`` is the completion tick (the tick of the joining handshake) and
    ``addr_tick`` the tick of the address handshake. ``data`` is the write
    payload for writes and the read payload for reads. ``response`` is None
    when no response phase was observed or the wire value was malformed.
    """

    kind: TxnKind
    address: int
    identifier: int
    burst: BurstKind | None
    tick: int
    addr_tick: int
    data: int | None = None
    strobe: int | None = None
    response: Resp | None = None
    last: bool | None = None

    def matches(self, txn: Transaction) -> bool:
        """Return True if the observed request fields equal those of ``txn``."""
        return txn.kind is self.kind and txn.observed_fields() == self.request_fields()

    def request_fields(self) -> tuple:
        """Observed counterpart of ``Transaction.observed_fields``."""
        fields = (self.address, self.identifier, self.burst)
        if self.kind is TxnKind.WRITE:
            return fields + (self.data,)
        return fields

    def to_dict(self) -> dict[str, object]:
        """Structured view for logging/JSON."""
        d = asdict(self)
        d["kind"] = self.kind.value
        d["burst"] = None if self.burst is None else self.burst.name
        d["response"] = None if self.response is None else self.response.name
        return d

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass(frozen=True)
class Completion:
    """What a driver reports once it has finished a request."""

    txn: Transaction
    issue_tick: int
    done_tick: int
    response: Resp | None = None
    data: int | None = None
    last: bool | None = None

    @property
    def ok(self) -> bool:
        """True if the responder answered OKAY or EXOKAY."""
        return self.response in (Resp.OKAY, Resp.EXOKAY)


@dataclass(frozen=True)
class Issue:
    """A request as announced by a driver when its address phase starts."""

    txn: Transaction
    tick: int
    source: str


@dataclass(frozen=True)
class Withdrawal:
    """A request abandoned by its driver before completion.

    ``address_accepted`` and ``data_accepted`` tell which request handshakes
    the bus had already seen, and so which partial state observers hold.
    """

    issue: Issue
    tick: int
    address_accepted: bool
    data_accepted: bool = False

    @property
    def txn(self) -> Transaction:
        return self.issue.txn
