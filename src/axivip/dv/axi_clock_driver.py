# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_clock_driver.py

"""Bench clock (config_db-driven)."""

from __future__ import annotations

from typing import cast

import cocotb
import pyuvm
from cocotb.clock import Clock
from cocotb.handle import LogicObject
from cocotb.task import Task

from . import utils_dv
from .axi_clock_mixin import AxiClockMixin


class AxiClockDriver(AxiClockMixin, pyuvm.uvm_component):
    """Starts a cocotb ``Clock`` on ``dut.<clock_name>``.

    Configuration (via config_db):
        clock_enable (bool): Drive the clock (default: True); False when the
                             HDL generates it
        clock_start_high (bool): Start with the high phase (default: False)

    Reference:
        https://github.com/advanced-uvm/second_edition/blob/master/recipes/2.clk_drv.sv
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self._clock_init_defaults()
        self.clock_enable: bool = True
        self.clock_start_high: bool = False
        self._task: Task | None = None

    def end_of_elaboration_phase(self) -> None:
        super().end_of_elaboration_phase()
        self._clock_bind()
        utils_dv.pull_config(
            self,
            {
                "clock_enable": self.clock_enable,
                "clock_start_high": self.clock_start_high,
            },
        )

    def start_of_simulation_phase(self) -> None:
        super().start_of_simulation_phase()
        if not self.clock_enable:
            self.logger.debug("Clock '%s' driven in HDL", self.clock_name)
            return
        clk = cast(LogicObject, self._clk)
        self._task = cocotb.start_soon(
            Clock(clk, self.clock_period_ps, unit="ps").start(
                start_high=self.clock_start_high
            )
        )
        self.logger.debug(
            "Started clock: dut.%s period=%d ps", self.clock_name, self.clock_period_ps
        )

    def final_phase(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        super().final_phase()
