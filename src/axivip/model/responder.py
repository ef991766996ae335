# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/responder.py

"""Stub responder.

Enough of a subordinate to exercise the initiator side: configurable ready
latency per request channel, a fixed response latency, and response codes
and read data supplied by the caller. It is not a memory model.

``ready_delay`` counts ticks of a pending valid before ready is raised;
0 keeps ready asserted permanently. ``resp_delay`` counts ticks between the
joining handshake and raising ``bvalid``/``rvalid``. Response valid is held
until its handshake. ``withdraw`` forgets an accepted request whose
initiator gave up on it, as long as its response has not been driven.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Union

from .bus import BusPort, Channel, Role, SignalBus
from .component import Component
from .txn import Resp, TxnKind, Withdrawal

# (address, identifier) -> response code; None drives an unknown level
RespSource = Union[int, Callable[[int, int], Optional[int]]]
# address -> read payload
DataSource = Callable[[int], Optional[int]]


def _zero(_: int) -> int:
    return 0


class _ReadyGate:
    """Ready generation for one request channel."""

    def __init__(self, port: BusPort, channel: Channel, delay: int):
        self.port = port
        self.channel = channel
        self.delay = delay
        self.waited = 0

    def reset(self) -> None:
        self.waited = 0

    def step(self) -> None:
        ready = self.channel.ready
        if self.delay == 0:
            if self.port[ready] != 1:
                self.port.drive(**{ready: 1})
            return
        if self.port.handshake(self.channel):
            self.port.drive(**{ready: 0})
            self.waited = 0
        elif self.port[self.channel.valid] == 1 and self.port[ready] != 1:
            self.waited += 1
            if self.waited >= self.delay:
                self.port.drive(**{ready: 1})


@dataclass(frozen=True)
class _Response:
    identifier: int
    address: int
    due: int


class Responder(Component):  # pylint: disable=too-many-instance-attributes
    """Answers every write with B and every read with a single R beat."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        name: str,
        bus: SignalBus,
        *,
        ready_delay: int = 0,
        resp_delay: int = 0,
        bresp: RespSource = Resp.OKAY,
        rresp: RespSource = Resp.OKAY,
        read_data: DataSource = _zero,
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        if ready_delay < 0 or resp_delay < 0:
            raise ValueError(f"{ready_delay=} {resp_delay=}")
        self.bus = bus
        self.port = bus.attach(Role.RESPONDER, name)
        self.resp_delay = resp_delay
        self.bresp = bresp
        self.rresp = rresp
        self.read_data = read_data
        self._gates = [
            _ReadyGate(self.port, ch, ready_delay)
            for ch in (Channel.AW, Channel.W, Channel.AR)
        ]
        self._aw: Deque[tuple[int, int]] = deque()
        self._w = 0
        self._b: Deque[_Response] = deque()
        self._r: Deque[_Response] = deque()
        self._b_active = False
        self._r_active = False
        self.writes = 0
        self.reads = 0

    def reset(self) -> None:
        for gate in self._gates:
            gate.reset()
        self._aw.clear()
        self._w = 0
        self._b.clear()
        self._r.clear()
        self._b_active = False
        self._r_active = False

    def withdraw(self, withdrawal: Withdrawal) -> None:
        txn = withdrawal.txn
        key = (txn.address, txn.identifier)
        if txn.kind is TxnKind.READ:
            if withdrawal.address_accepted:
                self._forget(self._r, key)
            return
        if withdrawal.address_accepted:
            if key in self._aw:
                self._aw.remove(key)
                self.logger.debug("dropped unpaired address of %s", txn)
            elif withdrawal.data_accepted:
                self._forget(self._b, key)
        elif withdrawal.data_accepted and self._w:
            self._w -= 1

    def _forget(self, queue: Deque[_Response], key: tuple[int, int]) -> None:
        for rsp in reversed(queue):
            if (rsp.address, rsp.identifier) == key:
                queue.remove(rsp)
                self.logger.debug("dropped queued response %s", rsp)
                return

    @staticmethod
    def _code(source: RespSource, address: int, identifier: int) -> int | None:
        if callable(source):
            return source(address, identifier)
        return int(source)

    def step(self, tick: int) -> None:
        bus = self.bus
        for gate in self._gates:
            gate.step()
        if bus.handshake(Channel.AW):
            self._aw.append((bus["awaddr"] or 0, bus["awid"] or 0))
        if bus.handshake(Channel.W):
            self._w += 1
        while self._aw and self._w:
            address, identifier = self._aw.popleft()
            self._w -= 1
            self._b.append(_Response(identifier, address, tick + self.resp_delay))
        if bus.handshake(Channel.AR):
            self._r.append(
                _Response(bus["arid"] or 0, bus["araddr"] or 0, tick + self.resp_delay)
            )
        self._step_b(tick)
        self._step_r(tick)

    def _step_b(self, tick: int) -> None:
        if self._b_active:
            if self.port.handshake(Channel.B):
                self.port.drive(bvalid=0)
                self._b_active = False
                self.writes += 1
            return
        if self._b and self._b[0].due <= tick:
            rsp = self._b.popleft()
            self.port.drive(
                bid=rsp.identifier,
                bresp=self._code(self.bresp, rsp.address, rsp.identifier),
                bvalid=1,
            )
            self._b_active = True

    def _step_r(self, tick: int) -> None:
        if self._r_active:
            if self.port.handshake(Channel.R):
                self.port.drive(rvalid=0)
                self._r_active = False
                self.reads += 1
            return
        if self._r and self._r[0].due <= tick:
            rsp = self._r.popleft()
            self.port.drive(
                rid=rsp.identifier,
                rdata=self.read_data(rsp.address),
                rresp=self._code(self.rresp, rsp.address, rsp.identifier),
                rlast=1,
                rvalid=1,
            )
            self._r_active = True
