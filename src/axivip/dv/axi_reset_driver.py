# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_reset_driver.py

"""Bench reset pulse."""

from __future__ import annotations

import pyuvm
from cocotb.triggers import NextTimeStep, ReadWrite

from . import utils_dv
from .axi_clock_mixin import AxiClockMixin


class AxiResetDriver(AxiClockMixin, pyuvm.uvm_component):
    """Asserts reset at time 0 and releases it on a drive edge.

    Configuration (via config_db):
        reset_enable (bool): Drive reset (default: True)
        reset_name (str): Name of reset signal (default: "rst_n")
        reset_active_low (bool): True for active-low reset (default: True)
        reset_cycles (int): Drive edges to hold reset (default: 5)

    Reference:
        https://github.com/advanced-uvm/second_edition/blob/master/recipes/3.rst_drv.sv
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self._clock_init_defaults()
        self.reset_enable: bool = True
        self.reset_name: str = "rst_n"
        self.reset_active_low: bool = True
        self.reset_cycles: int = 5

    def end_of_elaboration_phase(self) -> None:
        super().end_of_elaboration_phase()
        self._clock_bind()
        utils_dv.pull_config(
            self,
            {
                "reset_enable": self.reset_enable,
                "reset_name": self.reset_name,
                "reset_active_low": self.reset_active_low,
                "reset_cycles": self.reset_cycles,
            },
        )
        if self.reset_cycles < 0:
            raise ValueError("reset_cycles must be >= 0")

    async def run_phase(self) -> None:
        if not self.reset_enable:
            self.logger.debug("Reset '%s' driven in HDL", self.reset_name)
            return
        await self.pulse_reset()

    async def pulse_reset(self) -> None:
        """Assert now, hold for ``reset_cycles`` drive edges, then release."""
        rst = utils_dv.get_signal(self._dut, self.reset_name)
        active = 0 if self.reset_active_low else 1
        rst.value = active
        await ReadWrite()
        await NextTimeStep()
        for _ in range(self.reset_cycles):
            await self.clock_drive_edge()
        rst.value = 1 - active
        self.logger.debug("reset released after %d cycles", self.reset_cycles)
