# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/anomalies.py

"""Protocol anomaly taxonomy and the log that collects them.

Components never raise for protocol anomalies. They record an ``Anomaly``
in a shared ``AnomalyLog`` (which also logs it at error level) and carry on.
The harness decides whether to stop, typically with ``raise_if_any()``.
"""

from __future__ import annotations

import enum
import json
import logging
from collections import Counter
from dataclasses import dataclass


class AnomalyKind(str, enum.Enum):
    """Reportable protocol events."""

    PROTOCOL_STALL = "PROTOCOL_STALL"
    ORDER_VIOLATION = "ORDER_VIOLATION"
    IDENTIFIER_REUSE = "IDENTIFIER_REUSE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    DATA_MISMATCH = "DATA_MISMATCH"
    UNEXPECTED_OBSERVATION = "UNEXPECTED_OBSERVATION"


@dataclass(frozen=True)
class Anomaly:
    """One reported event."""

    kind: AnomalyKind
    tick: int
    source: str
    message: str
    identifier: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Structured view for logging/JSON."""
        return {
            "kind": self.kind.value,
            "tick": self.tick,
            "source": self.source,
            "message": self.message,
            "identifier": self.identifier,
        }

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


class ProtocolCheckError(AssertionError):
    """Raised by ``AnomalyLog.raise_if_any`` when anomalies were reported."""

    def __init__(self, anomalies: list[Anomaly]):
        self.anomalies = list(anomalies)
        counts = Counter(a.kind.value for a in self.anomalies)
        detail = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
        super().__init__(f"{len(self.anomalies)} protocol anomalies ({detail})")


class AnomalyLog:
    """Shared sink for anomalies from every component of one bench."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self._items: list[Anomaly] = []

    def report(
        self,
        kind: AnomalyKind,
        tick: int,
        source: str,
        message: str,
        identifier: int | None = None,
    ) -> Anomaly:
        """Record an anomaly, log it at error level and return it."""
        anomaly = Anomaly(kind, tick, source, message, identifier)
        self._items.append(anomaly)
        self.logger.error("[%s] @%d %s: %s", source, tick, kind.value, message)
        return anomaly

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    @property
    def items(self) -> list[Anomaly]:
        """Copy of every recorded anomaly in report order."""
        return list(self._items)

    def of_kind(self, kind: AnomalyKind) -> list[Anomaly]:
        """Recorded anomalies of one kind."""
        return [a for a in self._items if a.kind is kind]

    def counts(self) -> dict[str, int]:
        """Number of anomalies per kind, every kind listed."""
        c = Counter(a.kind for a in self._items)
        return {k.value: c.get(k, 0) for k in AnomalyKind}

    def clear(self) -> None:
        self._items.clear()

    def raise_if_any(self) -> None:
        """Raise ``ProtocolCheckError`` if anything has been reported."""
        if self._items:
            raise ProtocolCheckError(self._items)
