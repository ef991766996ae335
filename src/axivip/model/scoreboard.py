# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/scoreboard.py

"""Terminal consumer of observations.

The scoreboard keeps an ordering ledger per ``(kind, identifier)`` and runs
every registered check on each observation as it arrives. It never blocks
and never raises for protocol anomalies; those go to the ``AnomalyLog``.

Checks:

* ordering. When drivers announce their requests on ``issue_export``, each
  observation is matched against the outstanding issues of its
  ``(kind, identifier)``. Matching an issue other than the oldest one is an
  ``ORDER_VIOLATION``; matching none while issues are outstanding is an
  ``UNEXPECTED_OBSERVATION``. Without issues, an observation whose address
  phase precedes that of an earlier completion with the same identifier is
  an ``ORDER_VIOLATION``. A request its driver abandons arrives on
  ``withdraw_export`` and stops being outstanding.
* audit. Every observation is logged at info level.
* pluggable checks added with ``add_check``. A check is a callable
  ``(observation, expected_txn_or_None) -> str | None``; a returned message
  is reported as ``DATA_MISMATCH``.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from axivip.utils import hex_or_none

from .anomalies import AnomalyKind, AnomalyLog
from .component import Component
from .ports import AnalysisPort
from .txn import Issue, Observation, Transaction, TxnKind, Withdrawal

Key = Tuple[TxnKind, int]
Check = Callable[[Observation, Optional[Transaction]], Optional[str]]


class Export:  # pylint: disable=too-few-public-methods
    """Receiving end for an ``AnalysisPort`` that forwards to a callable."""

    def __init__(self, write: Callable[[Any], None]):
        self.write = write


class PredictorCheck:  # pylint: disable=too-few-public-methods
    """Compare observed data with a user predictor.

    ``predict(observation)`` returns the expected payload, or None to skip.
    """

    def __init__(self, predict: Callable[[Observation], Optional[int]]):
        self.predict = predict

    def __call__(
        self, obs: Observation, expected: Optional[Transaction]
    ) -> Optional[str]:
        want = self.predict(obs)
        if want is None or obs.data == want:
            return None
        return (
            f"{obs.kind.value} id {obs.identifier} @0x{obs.address:x}: "
            f"data {hex_or_none(obs.data)} != expected 0x{want:x}"
        )


class Scoreboard(Component):  # pylint: disable=too-many-instance-attributes
    """Per-identifier ordering checks and issued-vs-observed matching."""

    def __init__(
        self,
        name: str = "sb",
        anomalies: AnomalyLog | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(name, logger)
        self.anomalies = anomalies if anomalies is not None else AnomalyLog(self.logger)
        self.issue_export = Export(self._write_issue)
        self.withdraw_export = Export(self._withdraw_issue)
        self._observations: List[Observation] = []
        # (addr_tick, tick) of each completion, in arrival order
        self._ledger: Dict[Key, List[Tuple[int, int]]] = defaultdict(list)
        self._issued: Dict[Key, List[Issue]] = defaultdict(list)
        self._outstanding: Dict[Key, Deque[Issue]] = defaultdict(deque)
        self._checks: List[Check] = []
        self.matched = 0
        self.withdrawn = 0

    def connect(self, *ports: AnalysisPort) -> None:
        """Subscribe to monitor analysis ports."""
        for port in ports:
            port.connect(self)

    def add_check(self, check: Check) -> None:
        self._checks.append(check)

    def write(self, obs: Observation) -> None:
        """Consume one observation."""
        key = (obs.kind, obs.identifier)
        self._observations.append(obs)
        self.logger.info("%s", obs)
        expected = self._match(key, obs)
        self._ledger[key].append((obs.addr_tick, obs.tick))
        for check in self._checks:
            msg = check(obs, expected)
            if msg:
                self.anomalies.report(
                    AnomalyKind.DATA_MISMATCH, obs.tick, self.name, msg, obs.identifier
                )

    def _write_issue(self, issue: Issue) -> None:
        key = (issue.txn.kind, issue.txn.identifier)
        self._issued[key].append(issue)
        self._outstanding[key].append(issue)

    def _withdraw_issue(self, withdrawal: Withdrawal) -> None:
        issue = withdrawal.issue
        outstanding = self._outstanding.get((issue.txn.kind, issue.txn.identifier))
        if not outstanding or issue not in outstanding:
            # Already observed before it was abandoned
            return
        outstanding.remove(issue)
        self.withdrawn += 1
        self.logger.info("withdrawn @%d %s", withdrawal.tick, issue.txn)

    def _match(self, key: Key, obs: Observation) -> Optional[Transaction]:
        outstanding = self._outstanding.get(key)
        if not outstanding:
            self._check_passive_order(key, obs)
            return None
        for i, issue in enumerate(outstanding):
            if obs.matches(issue.txn):
                if i:
                    self._report_order(
                        obs,
                        f"completed {issue.txn} ahead of {i} earlier "
                        f"{obs.kind.value} request(s) with id {obs.identifier}",
                    )
                del outstanding[i]
                self.matched += 1
                return issue.txn
        self.anomalies.report(
            AnomalyKind.UNEXPECTED_OBSERVATION,
            obs.tick,
            self.name,
            f"{obs} matches none of {len(outstanding)} outstanding request(s)",
            obs.identifier,
        )
        return None

    def _check_passive_order(self, key: Key, obs: Observation) -> None:
        ledger = self._ledger.get(key)
        if not ledger:
            return
        last_addr_tick, last_tick = ledger[-1]
        if obs.addr_tick < last_addr_tick or obs.tick < last_tick:
            self._report_order(
                obs,
                f"address @{obs.addr_tick} completes @{obs.tick} after a later "
                f"request (address @{last_addr_tick}, completed @{last_tick})",
            )

    def _report_order(self, obs: Observation, msg: str) -> None:
        self.anomalies.report(
            AnomalyKind.ORDER_VIOLATION, obs.tick, self.name, msg, obs.identifier
        )

    def reset(self) -> None:
        dropped = sum(len(q) for q in self._outstanding.values())
        if dropped:
            self.logger.info("reset: discarding %d outstanding requests", dropped)
        self._outstanding.clear()

    @property
    def observations(self) -> List[Observation]:
        return list(self._observations)

    def completions_for(self, kind: TxnKind, identifier: int) -> List[int]:
        """Completion ticks for one identifier, in arrival order."""
        return [tick for _, tick in self._ledger.get((kind, identifier), [])]

    def issues_for(self, kind: TxnKind, identifier: int) -> List[Issue]:
        return list(self._issued.get((kind, identifier), []))

    def outstanding(self) -> Dict[Key, int]:
        """Number of announced requests not yet observed, per key."""
        return {k: len(q) for k, q in self._outstanding.items() if q}

    def summary(self) -> Dict[str, int]:
        """Counters for the end-of-run report."""
        writes = sum(1 for o in self._observations if o.kind is TxnKind.WRITE)
        return {
            "observations": len(self._observations),
            "writes": writes,
            "reads": len(self._observations) - writes,
            "matched": self.matched,
            "withdrawn": self.withdrawn,
            "outstanding": sum(self.outstanding().values()),
            "anomalies": len(self.anomalies),
        }
