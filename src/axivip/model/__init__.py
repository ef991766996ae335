# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/__init__.py

"""Pure-Python tick engine: bus, drivers, monitors, scoreboard, simulator."""

from __future__ import annotations

from .anomalies import Anomaly, AnomalyKind, AnomalyLog, ProtocolCheckError
from .bench import Bench
from .bus import (
    BusContentionError,
    BusError,
    BusOwnershipError,
    BusPort,
    Channel,
    Role,
    SignalBus,
)
from .config import BenchModel, BusConfig, load_bench
from .driver import DriverState, ReadDriver, WriteDriver
from .monitor import ReadMonitor, WriteMonitor
from .ports import AnalysisPort
from .responder import Responder
from .scoreboard import PredictorCheck, Scoreboard
from .sequencer import IdentifierGuard, Sequencer
from .sim import Simulator
from .txn import (
    BurstKind,
    Completion,
    Issue,
    Observation,
    ReadTxn,
    Resp,
    Transaction,
    TxnKind,
    Withdrawal,
    WriteTxn,
)
from .watchdog import Watchdog

__all__ = [
    "AnalysisPort",
    "Anomaly",
    "AnomalyKind",
    "AnomalyLog",
    "Bench",
    "BenchModel",
    "BurstKind",
    "BusConfig",
    "BusContentionError",
    "BusError",
    "BusOwnershipError",
    "BusPort",
    "Channel",
    "Completion",
    "DriverState",
    "IdentifierGuard",
    "Issue",
    "Observation",
    "PredictorCheck",
    "ProtocolCheckError",
    "ReadDriver",
    "ReadMonitor",
    "ReadTxn",
    "Resp",
    "Responder",
    "Role",
    "Scoreboard",
    "Sequencer",
    "SignalBus",
    "Simulator",
    "Transaction",
    "TxnKind",
    "Watchdog",
    "Withdrawal",
    "WriteDriver",
    "WriteMonitor",
    "WriteTxn",
    "load_bench",
]
