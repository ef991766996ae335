# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/__init__.py

"""axivip: a handshake-synchronized verification engine for AXI-style buses.

Main Components:

model:
    Pure-Python tick engine. A registered signal bus, per-kind drivers and
    monitors, a scoreboard with per-identifier ordering checks, a stub
    responder and a simulator loop. Runs without an HDL simulator.
    - ``axivip-run`` executes a YAML scenario against the model

dv:
    cocotb/pyuvm layer that binds the model to an HDL simulation through a
    bridge that samples and drives the DUT wires every clock.
    - ``dv`` builds and runs the bench with cocotb's runner

utils:
    Common utilities used across the package
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

try:
    __version__ = pkg_version("axivip")
except PackageNotFoundError:
    __version__ = "0+local"
