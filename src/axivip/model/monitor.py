# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/monitor.py

"""Passive reconstruction of transactions from bus handshakes.

A monitor samples the committed image every tick and never drives. Partial
transactions live in pending records keyed by identifier until every phase
required for their kind has been seen; the joined record is then published
on ``ap`` within the same tick. Reset discards pending records unemitted,
and ``withdraw`` discards those of a request its driver abandoned.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, get_args

from .anomalies import AnomalyKind, AnomalyLog
from .bus import Channel, SignalBus
from .component import Component
from .config import ReusePolicy, WriteCompletion
from .ports import AnalysisPort
from .txn import BurstKind, Observation, Resp, TxnKind, Withdrawal


def _burst(value: int | None) -> BurstKind | None:
    if value is None:
        return None
    try:
        return BurstKind(value)
    except ValueError:
        return None


@dataclass(eq=False)
class _Pending:  # pylint: disable=too-many-instance-attributes
    identifier: int
    address: int
    burst: BurstKind | None
    addr_tick: int
    rejected: bool = False
    has_data: bool = False
    data: int | None = None
    strobe: int | None = None
    last: bool | None = None
    data_tick: int = 0


@dataclass(frozen=True)
class _Beat:
    data: int | None
    strobe: int | None
    last: bool
    tick: int


class Monitor(Component):
    """Shared plumbing of the per-kind monitors."""

    kind: TxnKind

    def __init__(
        self,
        name: str,
        bus: SignalBus,
        anomalies: AnomalyLog | None = None,
        reuse_policy: ReusePolicy = "queue",
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        if reuse_policy not in get_args(ReusePolicy):
            raise ValueError(f"{reuse_policy=}")
        self.bus = bus
        self.anomalies = anomalies if anomalies is not None else AnomalyLog(self.logger)
        self.reuse_policy = reuse_policy
        self.ap: AnalysisPort[Observation] = AnalysisPort(f"{name}.ap")
        self.emitted = 0
        self.orphan_count = 0
        self._pending: Dict[int, Deque[_Pending]] = defaultdict(deque)

    def pending(self, identifier: int | None = None) -> int:
        """Number of pending records, for one identifier or overall."""
        if identifier is not None:
            return len(self._pending.get(identifier, ()))
        return sum(len(q) for q in self._pending.values())

    def reset(self) -> None:
        dropped = self.pending()
        if dropped:
            self.logger.info("reset: discarding %d pending records", dropped)
        self._pending.clear()

    def withdraw(self, withdrawal: Withdrawal) -> None:
        """Forget the partial record of an abandoned request, if any."""
        raise NotImplementedError

    def _find(self, withdrawal: Withdrawal, has_data: bool) -> _Pending | None:
        """Newest pending record with the abandoned request's id and address."""
        txn = withdrawal.txn
        for rec in reversed(self._pending.get(txn.identifier, ())):
            if rec.address == txn.address and rec.has_data is has_data:
                return rec
        return None

    def _drop(self, rec: _Pending) -> None:
        queue = self._pending[rec.identifier]
        queue.remove(rec)
        if not queue:
            del self._pending[rec.identifier]

    def _open(
        self,
        tick: int,
        identifier: int | None,
        address: int | None,
        burst: int | None,
    ) -> _Pending | None:
        """Record an address handshake; returns None for an unusable address phase."""
        if identifier is None or address is None:
            self.logger.warning("address handshake with unknown id/address @%d", tick)
            return None
        rec = _Pending(identifier, address, _burst(burst), tick)
        if self._pending.get(identifier):
            self.anomalies.report(
                AnomalyKind.IDENTIFIER_REUSE,
                tick,
                self.name,
                f"{self.kind.value} id {identifier} reissued while pending",
                identifier,
            )
            if self.reuse_policy == "reject":
                rec.rejected = True
                return rec
        self._pending[identifier].append(rec)
        return rec

    def _decode_resp(self, tick: int, raw: int | None, identifier: int) -> Resp | None:
        resp = Resp.decode(raw)
        if resp is None:
            self.anomalies.report(
                AnomalyKind.MALFORMED_RESPONSE,
                tick,
                self.name,
                f"{self.kind.value} id {identifier} response {raw!r}",
                identifier,
            )
        return resp

    def _emit(self, rec: _Pending, tick: int, response: Resp | None = None) -> None:
        self._drop(rec)
        obs = Observation(
            kind=self.kind,
            address=rec.address,
            identifier=rec.identifier,
            burst=rec.burst,
            tick=tick,
            addr_tick=rec.addr_tick,
            data=rec.data,
            strobe=rec.strobe,
            response=response,
            last=rec.last,
        )
        self.emitted += 1
        self.logger.debug("observed %s", obs)
        self.ap.write(obs)


class WriteMonitor(Monitor):
    """Joins AW and W handshakes (and optionally B) into write observations.

    W beats carry no identifier, so they are paired with address records in
    address-handshake order. A beat seen before its address phase waits in
    an orphan queue until the address arrives.
    """

    kind = TxnKind.WRITE

    def __init__(
        self,
        name: str,
        bus: SignalBus,
        anomalies: AnomalyLog | None = None,
        reuse_policy: ReusePolicy = "queue",
        completion: WriteCompletion = "data",
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, bus, anomalies, reuse_policy, logger)
        if completion not in get_args(WriteCompletion):
            raise ValueError(f"{completion=}")
        self.completion = completion
        self._awaiting_data: Deque[_Pending] = deque()
        self._early_beats: Deque[_Beat] = deque()

    def reset(self) -> None:
        super().reset()
        self._awaiting_data.clear()
        self._early_beats.clear()

    def withdraw(self, withdrawal: Withdrawal) -> None:
        txn = withdrawal.txn
        if withdrawal.address_accepted:
            for rec in reversed(self._awaiting_data):
                if (rec.identifier, rec.address) == (txn.identifier, txn.address):
                    self._awaiting_data.remove(rec)
                    if not rec.rejected:
                        self._drop(rec)
                    self.logger.debug("withdrew address phase of %s", txn)
                    return
            rec = self._find(withdrawal, has_data=True)
            if rec is not None:
                self._drop(rec)
                self.logger.debug("withdrew %s awaiting its response", txn)
        elif withdrawal.data_accepted:
            # W went first; its beat is still waiting for an address
            for beat in reversed(self._early_beats):
                if beat.data == txn.data:
                    self._early_beats.remove(beat)
                    self.logger.debug("withdrew data beat of %s", txn)
                    return

    def step(self, tick: int) -> None:
        bus = self.bus
        if bus.handshake(Channel.AW):
            rec = self._open(tick, bus["awid"], bus["awaddr"], bus["awburst"])
            if rec is not None:
                self._awaiting_data.append(rec)
        if bus.handshake(Channel.W):
            self._early_beats.append(
                _Beat(bus["wdata"], bus["wstrb"], bus["wlast"] == 1, tick)
            )
        while self._awaiting_data and self._early_beats:
            self._join_data(self._awaiting_data.popleft(), self._early_beats.popleft())
        if bus.handshake(Channel.B):
            self._on_response(tick, bus["bid"], bus["bresp"])

    def _join_data(self, rec: _Pending, beat: _Beat) -> None:
        rec.has_data = True
        rec.data = beat.data
        rec.strobe = beat.strobe
        rec.last = beat.last
        rec.data_tick = beat.tick
        if rec.rejected:
            self.logger.debug("discarding data of rejected id %d", rec.identifier)
            return
        if self.completion == "data":
            self._emit(rec, max(beat.tick, rec.addr_tick))

    def _on_response(self, tick: int, bid: int | None, bresp: int | None) -> None:
        if bid is None:
            self.orphan_count += 1
            self.logger.warning("write response with unknown id @%d", tick)
            return
        resp = self._decode_resp(tick, bresp, bid)
        if self.completion != "response":
            return
        for rec in self._pending.get(bid, ()):
            if rec.has_data:
                self._emit(rec, tick, resp)
                return
        self.orphan_count += 1
        self.logger.warning("write response for id %d with nothing pending", bid)


class ReadMonitor(Monitor):
    """Joins AR and R handshakes (by identifier) into read observations."""

    kind = TxnKind.READ

    def withdraw(self, withdrawal: Withdrawal) -> None:
        if not withdrawal.address_accepted:
            return
        rec = self._find(withdrawal, has_data=False)
        if rec is not None:
            self._drop(rec)
            self.logger.debug("withdrew address phase of %s", withdrawal.txn)

    def step(self, tick: int) -> None:
        bus = self.bus
        if bus.handshake(Channel.AR):
            self._open(tick, bus["arid"], bus["araddr"], bus["arburst"])
        if bus.handshake(Channel.R):
            self._on_data(tick)

    def _on_data(self, tick: int) -> None:
        bus = self.bus
        rid = bus["rid"]
        queue = self._pending.get(rid) if rid is not None else None
        if not queue:
            self.orphan_count += 1
            self.logger.warning(
                "read data for id %s with nothing pending @%d", rid, tick
            )
            return
        rec = queue[0]
        resp = self._decode_resp(tick, bus["rresp"], rec.identifier)
        rec.data = bus["rdata"]
        rec.last = bus["rlast"] == 1
        self._emit(rec, tick, resp)
