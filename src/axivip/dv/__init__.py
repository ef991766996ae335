# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/__init__.py

"""cocotb/pyuvm layer binding the axivip model to an HDL simulation.

Components:
- AxiBridge: Steps the model once per clock and moves wires in and out
- AxiDriver: Queues items on a model driver and waits for completion
- AxiMonitor: Publishes model observations as items
- AxiSb: Model scoreboard plus end-of-test verdict
- AxiCoverage: Functional coverage of observed items
- AxiAgent, AxiEnv, AxiBaseTest: UVM structure
- AxiSequence, AxiRandomSequence: Stimulus
- AxiClockDriver, AxiResetDriver: Clock and reset generation

Utilities:
- utils_dv: config_db and signal helpers
- utils_cli: Settings from environment variables and plusargs
"""

from __future__ import annotations

from . import utils_cli, utils_dv
from .axi_agent import AxiAgent
from .axi_bridge import AxiBridge
from .axi_clock_driver import AxiClockDriver
from .axi_coverage import AxiCoverage
from .axi_driver import AxiDriver
from .axi_env import AxiEnv
from .axi_item import AxiItem
from .axi_monitor import AxiMonitor
from .axi_reset_driver import AxiResetDriver
from .axi_sb import AxiSb
from .axi_sequence import AxiRandomSequence, AxiSequence
from .axi_test import AxiBaseTest

__all__ = (
    "AxiAgent",
    "AxiBaseTest",
    "AxiBridge",
    "AxiClockDriver",
    "AxiCoverage",
    "AxiDriver",
    "AxiEnv",
    "AxiItem",
    "AxiMonitor",
    "AxiRandomSequence",
    "AxiResetDriver",
    "AxiSb",
    "AxiSequence",
    "utils_cli",
    "utils_dv",
)
