# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_item.py

"""Sequence item carrying one model transaction through pyuvm."""

from __future__ import annotations

import json
from typing import Iterable

import pyuvm

from axivip.model import (
    BurstKind,
    Completion,
    Observation,
    ReadTxn,
    Transaction,
    TxnKind,
    WriteTxn,
)


class AxiItem(pyuvm.uvm_sequence_item):
    """Request fields (inputs) plus what came back (outputs).

    Sequences fill the inputs; the driver fills the outputs from the model
    ``Completion``. Monitors publish items built from an ``Observation``,
    which they keep in ``observation``.
    """

    def __init__(self, name: str = "axi_item") -> None:
        super().__init__(name)
        self.kind: str = TxnKind.WRITE.value
        self.address: int = 0
        self.data: int | None = None
        self.identifier: int = 0
        self.burst: str | None = BurstKind.INCR.name
        self.strobe: int | None = None
        self.response: str | None = None
        self.issue_tick: int | None = None
        self.done_tick: int | None = None
        self.observation: Observation | None = None

    @staticmethod
    def _in_fields() -> Iterable[str]:
        return ("kind", "address", "data", "identifier", "burst", "strobe")

    @staticmethod
    def _out_fields() -> Iterable[str]:
        return ("response", "issue_tick", "done_tick")

    @classmethod
    def from_txn(cls, name: str, txn: Transaction) -> AxiItem:
        item = cls(name)
        item.kind = txn.kind.value
        item.address = txn.address
        item.identifier = txn.identifier
        item.burst = txn.burst.name
        if isinstance(txn, WriteTxn):
            item.data = txn.data
            item.strobe = txn.strobe
        return item

    @classmethod
    def from_observation(cls, name: str, obs: Observation) -> AxiItem:
        item = cls(name)
        item.kind = obs.kind.value
        item.address = obs.address
        item.identifier = obs.identifier
        item.burst = None if obs.burst is None else obs.burst.name
        item.data = obs.data
        item.strobe = obs.strobe
        item.response = None if obs.response is None else obs.response.name
        item.issue_tick = obs.addr_tick
        item.done_tick = obs.tick
        item.observation = obs
        return item

    def to_txn(self) -> Transaction:
        """Build the frozen model request from the input fields."""
        burst = BurstKind[self.burst or BurstKind.INCR.name]
        if TxnKind(self.kind) is TxnKind.WRITE:
            if self.data is None:
                raise ValueError(f"{self.get_name()}: write without data")
            return WriteTxn(
                self.address, self.data, self.identifier, burst, self.strobe
            )
        return ReadTxn(self.address, self.identifier, burst)

    def set_completion(self, done: Completion) -> None:
        """Copy the driver's result into the output fields."""
        self.response = None if done.response is None else done.response.name
        self.issue_tick = done.issue_tick
        self.done_tick = done.done_tick
        if TxnKind(self.kind) is TxnKind.READ:
            self.data = done.data

    def to_dict(self) -> dict[str, object]:
        return {f: getattr(self, f) for f in (*self._in_fields(), *self._out_fields())}

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
