# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/bench.py

"""Single-bus environment: the usual wiring of every model component.

One write driver and one read driver share the bus with a stub responder;
one monitor per kind feeds the scoreboard, which also receives every issue.
A request abandoned by a driver is withdrawn from the scoreboard, the
monitor of its kind and the responder.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable

from .anomalies import AnomalyLog
from .bus import SignalBus
from .config import BenchModel, resp_from_name
from .driver import Driver, ReadDriver, WriteDriver
from .monitor import ReadMonitor, WriteMonitor
from .responder import Responder
from .scoreboard import PredictorCheck, Scoreboard
from .sequencer import IdentifierGuard, Sequencer
from .sim import Simulator
from .txn import Observation, Transaction, TxnKind
from .watchdog import Watchdog


class Bench:  # pylint: disable=too-many-instance-attributes
    """Builds and connects the components described by a ``BenchModel``."""

    def __init__(
        self, model: BenchModel | None = None, logger: logging.Logger | None = None
    ):
        self.model = model or BenchModel()
        self.logger = logger or logging.getLogger("axivip.bench")
        m = self.model
        self.anomalies = AnomalyLog(self.logger)
        self.bus = SignalBus(m.bus, "axi")
        self.sim = Simulator()

        self.write_seqr = Sequencer(
            "write_seqr",
            m.bus,
            IdentifierGuard(TxnKind.WRITE, m.reuse_policy, self.anomalies),
        )
        self.read_seqr = Sequencer(
            "read_seqr",
            m.bus,
            IdentifierGuard(TxnKind.READ, m.reuse_policy, self.anomalies),
        )
        self.write_driver = WriteDriver(
            "write_driver", self.bus, self.write_seqr, policy=m.write_policy
        )
        self.read_driver = ReadDriver("read_driver", self.bus, self.read_seqr)

        read_data = dict(m.responder.read_data)
        self.responder = Responder(
            "responder",
            self.bus,
            ready_delay=m.responder.ready_delay,
            resp_delay=m.responder.resp_delay,
            bresp=resp_from_name(m.responder.bresp),
            rresp=resp_from_name(m.responder.rresp),
            read_data=lambda address: read_data.get(address, 0),
        )

        self.write_monitor = WriteMonitor(
            "write_monitor",
            self.bus,
            self.anomalies,
            reuse_policy=m.reuse_policy,
            completion=m.write_completion,
        )
        self.read_monitor = ReadMonitor(
            "read_monitor", self.bus, self.anomalies, reuse_policy=m.reuse_policy
        )
        self.scoreboard = Scoreboard("sb", self.anomalies)
        self.scoreboard.connect(self.write_monitor.ap, self.read_monitor.ap)
        expected = dict(m.expected_read_data)
        if expected:
            self.scoreboard.add_check(PredictorCheck(self._expected_read(expected)))
        for drv in self.drivers:
            drv.issue_port.connect(self.scoreboard.issue_export)
            drv.abort_port.connect(self.scoreboard.withdraw_export)
            drv.abort_port.connect(self.responder.withdraw)
        self.write_driver.abort_port.connect(self.write_monitor.withdraw)
        self.read_driver.abort_port.connect(self.read_monitor.withdraw)

        self.sim.add(
            self.write_seqr,
            self.read_seqr,
            self.write_driver,
            self.read_driver,
            self.responder,
            self.write_monitor,
            self.read_monitor,
            self.scoreboard,
        )
        self.watchdog: Watchdog | None = None
        if m.stall_limit:
            self.watchdog = Watchdog(
                "watchdog", self.drivers, m.stall_limit, self.anomalies, m.stall_action
            )
            self.sim.add(self.watchdog)

    @staticmethod
    def _expected_read(expected: Dict[int, int]) -> Callable[[Observation], int | None]:
        def predict(obs: Observation) -> int | None:
            if obs.kind is not TxnKind.READ:
                return None
            return expected.get(obs.address)

        return predict

    @property
    def drivers(self) -> list[Driver]:
        return [self.write_driver, self.read_driver]

    @property
    def sequencers(self) -> Dict[TxnKind, Sequencer]:
        return {TxnKind.WRITE: self.write_seqr, TxnKind.READ: self.read_seqr}

    def put(self, txn: Transaction) -> None:
        """Queue a request on the sequencer of its kind."""
        self.sequencers[txn.kind].put(txn)

    def load(self, txns: Iterable[Transaction] | None = None) -> int:
        """Queue ``txns`` (default: the model's stimulus); returns how many."""
        if txns is None:
            txns = [s.to_txn() for s in self.model.stimulus]
        n = 0
        for txn in txns:
            self.put(txn)
            n += 1
        return n

    def idle(self) -> bool:
        """True when no request is queued or in flight."""
        return not any(len(s) for s in self.sequencers.values()) and not any(
            d.busy for d in self.drivers
        )

    def run(self, max_ticks: int | None = None) -> bool:
        """Step until every request has completed; False on timeout."""
        limit = max_ticks or self.model.max_ticks
        done = self.sim.run_until(self.idle, limit)
        # Let the last response valid and ready drop
        self.sim.run(2)
        return done
