# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/watchdog.py

"""Bounded-wait policy for drivers, which wait forever on their own."""

from __future__ import annotations

import logging
from typing import Iterable, get_args

from .anomalies import AnomalyKind, AnomalyLog
from .component import Component
from .config import StallAction
from .driver import Driver


class Watchdog(Component):
    """Reports ``PROTOCOL_STALL`` when a driver waits ``limit`` ticks in one state.

    With ``action="abort"`` the stalled driver is also returned to idle and
    its lines released. A report is raised once per stall; the driver must
    make progress before it can be reported again.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        name: str,
        drivers: Iterable[Driver],
        limit: int,
        anomalies: AnomalyLog,
        action: StallAction = "report",
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        if limit <= 0:
            raise ValueError(f"{limit=}")
        if action not in get_args(StallAction):
            raise ValueError(f"{action=}")
        self.drivers = list(drivers)
        self.limit = limit
        self.anomalies = anomalies
        self.action = action
        self._flagged: set[str] = set()

    def step(self, tick: int) -> None:
        for drv in self.drivers:
            if drv.stall_ticks < self.limit:
                self._flagged.discard(drv.name)
                continue
            if drv.name in self._flagged:
                continue
            self.anomalies.report(
                AnomalyKind.PROTOCOL_STALL,
                tick,
                drv.name,
                f"{drv.stall_ticks} ticks in {drv.state.value} for {drv.txn}",
                None if drv.txn is None else drv.txn.identifier,
            )
            if self.action == "abort":
                drv.abort(tick)
            else:
                self._flagged.add(drv.name)

    def reset(self) -> None:
        self._flagged.clear()
