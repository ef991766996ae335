# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/sequencer.py

"""Request queue feeding one driver, plus the optional identifier guard.

In the tick model a blocking pull is a poll: the driver calls
``try_next_item()`` from its idle state every tick and stays idle while
nothing is available.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Iterable, get_args

from .anomalies import AnomalyKind, AnomalyLog
from .component import Component
from .config import BusConfig, ReusePolicy
from .txn import Transaction, TxnKind


class IdentifierGuard:
    """Tracks identifiers in flight across the drivers of one direction.

    ``queue``: a request whose identifier is in flight waits at the head of its
    sequencer until the identifier frees. ``reject``: such a request is dropped
    and reported as ``IDENTIFIER_REUSE``.
    """

    def __init__(
        self,
        kind: TxnKind,
        policy: ReusePolicy = "queue",
        anomalies: AnomalyLog | None = None,
    ):
        if policy not in get_args(ReusePolicy):
            raise ValueError(f"{policy=}")
        self.kind = kind
        self.policy = policy
        self.anomalies = anomalies
        self._in_flight: Counter[int] = Counter()

    def busy(self, identifier: int) -> bool:
        return self._in_flight[identifier] > 0

    def acquire(self, identifier: int) -> None:
        self._in_flight[identifier] += 1

    def release(self, identifier: int) -> None:
        if self._in_flight[identifier] > 0:
            self._in_flight[identifier] -= 1

    def clear(self) -> None:
        self._in_flight.clear()


class Sequencer(Component):
    """FIFO of fully specified requests for one driver."""

    def __init__(
        self,
        name: str,
        config: BusConfig,
        guard: IdentifierGuard | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        self.config = config
        self.guard = guard
        self._queue: deque[Transaction] = deque()
        self.rejected: list[Transaction] = []

    def __len__(self) -> int:
        return len(self._queue)

    def put(self, txn: Transaction) -> None:
        """Append a request; raises ValueError if it does not fit the bus."""
        txn.check(self.config)
        self._queue.append(txn)

    def extend(self, txns: Iterable[Transaction]) -> None:
        for txn in txns:
            self.put(txn)

    def try_next_item(self, tick: int) -> Transaction | None:
        """Hand the next request to the driver, or None if there is nothing to do."""
        while self._queue:
            txn = self._queue[0]
            if self.guard is None:
                return self._queue.popleft()
            if not self.guard.busy(txn.identifier):
                self.guard.acquire(txn.identifier)
                return self._queue.popleft()
            if self.guard.policy == "queue":
                return None
            self._queue.popleft()
            self.rejected.append(txn)
            msg = f"identifier {txn.identifier} in flight, dropped {txn}"
            if self.guard.anomalies is not None:
                self.guard.anomalies.report(
                    AnomalyKind.IDENTIFIER_REUSE,
                    tick,
                    self.name,
                    msg,
                    txn.identifier,
                )
            else:
                self.logger.warning(msg)
        return None

    def item_done(self, txn: Transaction) -> None:
        """Called by the driver once ``txn`` has completed or been abandoned."""
        if self.guard is not None:
            self.guard.release(txn.identifier)

    def reset(self) -> None:
        # Queued stimulus survives reset; in-flight identifiers do not
        if self.guard is not None:
            self.guard.clear()
