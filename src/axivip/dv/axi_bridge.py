# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_bridge.py

"""Clock-edge bridge between the HDL wires and the model signal bus."""

from __future__ import annotations

from typing import Any

import pyuvm
from cocotb.triggers import Event, NextTimeStep, ReadWrite

from axivip.model import AnomalyLog, BusConfig, Role, SignalBus, Simulator
from axivip.model.bus import signals_owned_by
from axivip.model.component import Component

from . import utils_dv
from .axi_clock_mixin import AxiClockMixin


class AxiBridge(AxiClockMixin, pyuvm.uvm_component):
    """Runs the model ``Simulator`` one tick per clock.

    Every falling edge:

    1. reset is sampled; a change of level asserts or releases reset in
       the model;
    2. the simulator steps once, so the model components see the committed
       image and their drives are committed;
    3. the committed initiator-owned wires are driven onto the DUT (an
       unknown level is driven as 0);
    4. the responder-owned DUT wires are sampled into the committed image
       for the next step.

    The DUT registers its outputs on the rising edge, so at a falling edge
    they are stable.

    Configuration (via config_db):
        bus_config (BusConfig): Wire widths (default: BusConfig())
        wire_prefix (str): Prefix of the DUT port names (default: "")
        reset_name (str): Name of reset signal (default: "rst_n")
        reset_active_low (bool): True for active-low reset (default: True)

    Attributes:
        bus: The model ``SignalBus`` shared by every model component
        sim: The model ``Simulator``
        anomalies: Anomaly log shared by monitors and scoreboard
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self._clock_init_defaults()
        cfg = utils_dv.uvm_config_db_get_try(self, "bus_config")
        self.bus_config: BusConfig = cfg if isinstance(cfg, BusConfig) else BusConfig()
        self.bus = SignalBus(self.bus_config, "axi")
        self.sim = Simulator(f"{name}.sim")
        self.sim.add_bus(self.bus)
        self.anomalies = AnomalyLog(self.logger)
        self.wire_prefix: str = ""
        self.reset_name: str = "rst_n"
        self.reset_active_low: bool = True
        self._to_dut: dict[str, Any] = {}
        self._from_dut: dict[str, Any] = {}
        self._rst: Any | None = None
        # Level-triggered events reflect current reset state
        self._rst_asserted: Event = Event()
        self._rst_deasserted: Event = Event()

    def register(self, *components: Component) -> None:
        """Schedule model components; they step in registration order."""
        self.sim.add(*components)

    def end_of_elaboration_phase(self) -> None:
        super().end_of_elaboration_phase()
        self._clock_bind()
        utils_dv.pull_config(
            self,
            {
                "wire_prefix": self.wire_prefix,
                "reset_name": self.reset_name,
                "reset_active_low": self.reset_active_low,
            },
        )
        self._rst = utils_dv.get_signal(self._dut, self.reset_name)
        prefix = self.wire_prefix
        self._to_dut = utils_dv.bind_wires(
            self._dut, signals_owned_by(Role.INITIATOR), prefix
        )
        self._from_dut = utils_dv.bind_wires(
            self._dut, signals_owned_by(Role.RESPONDER), prefix
        )
        self.logger.debug("bus config: %s", self.bus_config)

    async def run_phase(self) -> None:
        utils_dv.drive_wires(self._to_dut, {name: 0 for name in self._to_dut})
        await ReadWrite()
        await NextTimeStep()
        self.bus.sample(utils_dv.read_wires(self._from_dut))
        while True:
            await self.clock_drive_edge()
            self._track_reset()
            self.sim.step()
            snap = self.bus.snapshot()
            utils_dv.drive_wires(
                self._to_dut, {name: snap[name] for name in self._to_dut}
            )
            self.bus.sample(utils_dv.read_wires(self._from_dut))

    def _track_reset(self) -> None:
        assert self._rst is not None
        level = utils_dv.get_signal_value_int(self._rst.value)
        if level is None:
            return
        active = (level == 0) if self.reset_active_low else (level != 0)
        if active and not self.sim.in_reset:
            self.sim.assert_reset()
            self._rst_deasserted.clear()
            self._rst_asserted.set()
            self.logger.debug("reset asserted at tick %d", self.sim.tick)
        elif not active and self.sim.in_reset:
            self.sim.release_reset()
            self._rst_asserted.clear()
            self._rst_deasserted.set()
            self.logger.debug("reset released at tick %d", self.sim.tick)
        elif not active and not self._rst_deasserted.is_set():
            # Reset never asserted (driven in HDL or disabled)
            self._rst_deasserted.set()

    async def wait_for_reset_inactive(self) -> None:
        """Block until reset has been sampled inactive."""
        await self._rst_deasserted.wait()
