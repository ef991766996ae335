# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_clock_mixin.py

"""Clock config and handle binding shared by the clock, reset and bridge."""

from __future__ import annotations

from typing import Any, cast

import pyuvm
from cocotb.handle import SimHandleBase

from . import utils_dv


class AxiClockMixin:
    """Binds ``dut`` and ``dut.<clock_name>`` and waits for the drive edge.

    The bench drives on the falling edge and the DUT samples on the rising
    edge, so every DUT input has half a period of setup and hold.

    Configuration (via config_db):
        clock_name (str): Name of clock signal (default: "clk")
        clock_period_ps (int): Clock period in picoseconds (default: 1000)

    Reference:
        C.E. Cummings, "Applying Stimulus & Sampling Outputs," SNUG 2016
    """

    def _clock_init_defaults(self) -> None:
        self.clock_name: str = "clk"
        self.clock_period_ps: int = 1_000
        self._dut: Any | None = None
        self._clk: SimHandleBase | None = None

    def _clock_bind(self) -> None:
        """Pull clock config and bind handles (EoE)."""
        comp = cast(pyuvm.uvm_component, self)
        utils_dv.pull_config(
            comp,
            {"clock_name": self.clock_name, "clock_period_ps": self.clock_period_ps},
        )
        if self.clock_period_ps <= 0:
            raise ValueError(f"clock_period_ps must be > 0, got {self.clock_period_ps}")
        self._dut = utils_dv.uvm_config_db_get(comp, "dut")
        self._clk = utils_dv.get_signal(self._dut, self.clock_name)

    async def clock_drive_edge(self) -> None:
        assert self._clk is not None, "clock_drive_edge called before _clock_bind"
        await self._clk.falling_edge
