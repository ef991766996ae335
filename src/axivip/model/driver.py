# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/driver.py

"""Initiator-side state machines.

A driver takes one request at a time from its sequencer and walks it through
the channel handshakes of its kind. Every decision is made on the committed
bus image, every drive lands in the pending image, so a handshake seen at
tick ``t`` is answered at ``t + 1``.

Write, serial policy::

    IDLE -> ADDR_PHASE -> DATA_PHASE -> RESP_WAIT -> RESP_ACK -> IDLE

Write, overlapped policy (address and data driven together, each released
on its own handshake)::

    IDLE -> ADDR_DATA_PHASE -> RESP_WAIT -> RESP_ACK -> IDLE

Read::

    IDLE -> ADDR_PHASE -> DATA_WAIT -> DATA_ACK -> IDLE

A driver has no failure mode: if ready never rises it waits, and its
``stall_ticks`` grows for an external watchdog to act on. ``abort()``
abandons the request and announces a ``Withdrawal`` on ``abort_port`` so
observers can drop whatever partial state the request left behind.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, Generic, TypeVar, get_args

from .bus import Channel, Role, SignalBus
from .component import Component
from .config import WritePolicy
from .ports import AnalysisPort
from .sequencer import Sequencer
from .txn import Completion, Issue, ReadTxn, Resp, TxnKind, Withdrawal, WriteTxn


T = TypeVar("T", WriteTxn, ReadTxn)


class DriverState(str, enum.Enum):
    """Driver FSM states."""

    IDLE = "IDLE"
    ADDR_PHASE = "ADDR_PHASE"
    ADDR_DATA_PHASE = "ADDR_DATA_PHASE"
    DATA_PHASE = "DATA_PHASE"
    RESP_WAIT = "RESP_WAIT"
    RESP_ACK = "RESP_ACK"
    DATA_WAIT = "DATA_WAIT"
    DATA_ACK = "DATA_ACK"


class Driver(Component, Generic[T]):  # pylint: disable=too-many-instance-attributes
    """Shared plumbing of the per-kind drivers."""

    kind: TxnKind

    def __init__(
        self,
        name: str,
        bus: SignalBus,
        sequencer: Sequencer,
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        self.bus = bus
        self.port = bus.attach(Role.INITIATOR, name)
        self.sequencer = sequencer
        self.issue_port: AnalysisPort[Issue] = AnalysisPort(f"{name}.issue_port")
        self.done_port: AnalysisPort[Completion] = AnalysisPort(f"{name}.done_port")
        self.abort_port: AnalysisPort[Withdrawal] = AnalysisPort(f"{name}.abort_port")
        self.state = DriverState.IDLE
        self.txn: T | None = None
        self.issue: Issue | None = None
        self.issue_tick = 0
        self.tick = 0
        self.stall_ticks = 0
        self.completed = 0
        self._handlers: Dict[DriverState, Callable[[int], None]] = {}

    @property
    def busy(self) -> bool:
        """True while a request is in flight."""
        return self.state is not DriverState.IDLE

    def step(self, tick: int) -> None:
        self.tick = tick
        before = self.state
        self._handlers[self.state](tick)
        if self.state is before and self.state is not DriverState.IDLE:
            self.stall_ticks += 1
        else:
            self.stall_ticks = 0

    def abort(self, tick: int | None = None) -> None:
        """Abandon the request in flight and release every line this driver owns.

        Call from inside a tick, after the monitors have stepped (the watchdog
        does), so that no handshake the driver has not acted on is observed.
        """
        withdrawal = None
        if self.txn is not None:
            self.logger.warning("abandoning %s in %s", self.txn, self.state.value)
            if self.issue is not None:
                address, data = self._accepted()
                withdrawal = Withdrawal(
                    self.issue, self.tick if tick is None else tick, address, data
                )
            self.sequencer.item_done(self.txn)
        self.port.release()
        self._enter_idle()
        if withdrawal is not None:
            self.abort_port.write(withdrawal)

    def _accepted(self) -> tuple[bool, bool]:
        """Whether the address and the data of the request have handshaken."""
        raise NotImplementedError

    def reset(self) -> None:
        if self.txn is not None:
            self.sequencer.item_done(self.txn)
        self._enter_idle()

    def _enter_idle(self) -> None:
        self.state = DriverState.IDLE
        self.txn = None
        self.issue = None
        self.stall_ticks = 0

    def _goto(self, state: DriverState) -> None:
        self.logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    def _pull(self, tick: int) -> T | None:
        txn = self.sequencer.try_next_item(tick)
        if txn is None:
            return None
        if txn.kind is not self.kind:
            raise TypeError(f"{self.name}: {self.kind.value} driver got {txn}")
        self.txn = txn
        self.issue_tick = tick
        self.issue = Issue(txn, tick, self.name)
        self.issue_port.write(self.issue)
        self.logger.debug("issue @%d %s", tick, txn)
        return txn

    def _finish(self, tick: int, completion: Completion) -> None:
        assert self.txn is not None
        self.sequencer.item_done(self.txn)
        self.completed += 1
        self.logger.debug("done @%d %s", tick, self.txn)
        self._enter_idle()
        self.done_port.write(completion)


class WriteDriver(Driver[WriteTxn]):
    """Drives AW, W and acknowledges B."""

    kind = TxnKind.WRITE

    def __init__(
        self,
        name: str,
        bus: SignalBus,
        sequencer: Sequencer,
        policy: WritePolicy = "serial",
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, bus, sequencer, logger)
        if policy not in get_args(WritePolicy):
            raise ValueError(f"{policy=}")
        self.policy = policy
        self._aw_done = False
        self._w_done = False
        self._handlers = {
            DriverState.IDLE: self._idle,
            DriverState.ADDR_PHASE: self._addr_phase,
            DriverState.ADDR_DATA_PHASE: self._addr_data_phase,
            DriverState.DATA_PHASE: self._data_phase,
            DriverState.RESP_WAIT: self._resp_wait,
            DriverState.RESP_ACK: self._resp_ack,
        }

    def _accepted(self) -> tuple[bool, bool]:
        if self.state is DriverState.ADDR_DATA_PHASE:
            return self._aw_done, self._w_done
        if self.state is DriverState.DATA_PHASE:
            return True, False
        done = self.state in (DriverState.RESP_WAIT, DriverState.RESP_ACK)
        return done, done

    def _drive_addr(self, txn: WriteTxn) -> None:
        self.port.drive(
            awaddr=txn.address, awid=txn.identifier, awburst=int(txn.burst), awvalid=1
        )

    def _drive_data(self, txn: WriteTxn) -> None:
        self.port.drive(
            wdata=txn.data,
            wstrb=txn.strobe_for(self.bus.config),
            wlast=1,
            wvalid=1,
        )

    def _idle(self, tick: int) -> None:
        txn = self._pull(tick)
        if txn is None:
            return
        self._drive_addr(txn)
        if self.policy == "overlapped":
            self._drive_data(txn)
            self._aw_done = False
            self._w_done = False
            self._goto(DriverState.ADDR_DATA_PHASE)
        else:
            self._goto(DriverState.ADDR_PHASE)

    def _addr_phase(self, tick: int) -> None:
        assert self.txn is not None
        if self.port.handshake(Channel.AW):
            self.port.drive(awvalid=0)
            self._drive_data(self.txn)
            self._goto(DriverState.DATA_PHASE)

    def _addr_data_phase(self, tick: int) -> None:
        if not self._aw_done and self.port.handshake(Channel.AW):
            self.port.drive(awvalid=0)
            self._aw_done = True
        if not self._w_done and self.port.handshake(Channel.W):
            self.port.drive(wvalid=0, wlast=0)
            self._w_done = True
        if self._aw_done and self._w_done:
            self._goto(DriverState.RESP_WAIT)

    def _data_phase(self, tick: int) -> None:
        if self.port.handshake(Channel.W):
            self.port.drive(wvalid=0, wlast=0)
            self._goto(DriverState.RESP_WAIT)

    def _resp_wait(self, tick: int) -> None:
        if self.port["bvalid"] == 1:
            self.port.drive(bready=1)
            self._goto(DriverState.RESP_ACK)

    def _resp_ack(self, tick: int) -> None:
        assert self.txn is not None
        if not self.port.handshake(Channel.B):
            return
        self.port.drive(bready=0)
        bid = self.port["bid"]
        resp = Resp.decode(self.port["bresp"])
        if bid != self.txn.identifier:
            self.logger.warning(
                "response id %s does not match request id %d", bid, self.txn.identifier
            )
        if resp is None:
            self.logger.warning("malformed bresp %s", self.port["bresp"])
        self._finish(
            tick,
            Completion(self.txn, self.issue_tick, tick, response=resp, last=True),
        )


class ReadDriver(Driver[ReadTxn]):
    """Drives AR and acknowledges R."""

    kind = TxnKind.READ

    def __init__(
        self,
        name: str,
        bus: SignalBus,
        sequencer: Sequencer,
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, bus, sequencer, logger)
        self._handlers = {
            DriverState.IDLE: self._idle,
            DriverState.ADDR_PHASE: self._addr_phase,
            DriverState.DATA_WAIT: self._data_wait,
            DriverState.DATA_ACK: self._data_ack,
        }

    def _accepted(self) -> tuple[bool, bool]:
        return self.state in (DriverState.DATA_WAIT, DriverState.DATA_ACK), False

    def _idle(self, tick: int) -> None:
        txn = self._pull(tick)
        if txn is None:
            return
        self.port.drive(
            araddr=txn.address, arid=txn.identifier, arburst=int(txn.burst), arvalid=1
        )
        self._goto(DriverState.ADDR_PHASE)

    def _addr_phase(self, tick: int) -> None:
        if self.port.handshake(Channel.AR):
            self.port.drive(arvalid=0)
            self._goto(DriverState.DATA_WAIT)

    def _data_wait(self, tick: int) -> None:
        if self.port["rvalid"] == 1:
            self.port.drive(rready=1)
            self._goto(DriverState.DATA_ACK)

    def _data_ack(self, tick: int) -> None:
        assert self.txn is not None
        if not self.port.handshake(Channel.R):
            return
        self.port.drive(rready=0)
        rid = self.port["rid"]
        resp = Resp.decode(self.port["rresp"])
        last = self.port["rlast"] == 1
        if rid != self.txn.identifier:
            self.logger.warning(
                "response id %s does not match request id %d", rid, self.txn.identifier
            )
        if not last:
            self.logger.warning("read data without rlast for %s", self.txn)
        if resp is None:
            self.logger.warning("malformed rresp %s", self.port["rresp"])
        self._finish(
            tick,
            Completion(
                self.txn,
                self.issue_tick,
                tick,
                response=resp,
                data=self.port["rdata"],
                last=last,
            ),
        )
