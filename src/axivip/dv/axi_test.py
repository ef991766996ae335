# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_test.py

"""Base test: config, clock, reset and environment."""

from __future__ import annotations

import logging
import os

import cocotb
import pyuvm
from cocotb.triggers import Timer
from pyuvm import ConfigDB

from axivip.model import BusConfig

from . import utils_cli, utils_dv
from .axi_clock_driver import AxiClockDriver
from .axi_env import AxiEnv
from .axi_reset_driver import AxiResetDriver
from .axi_sequence import AxiSequence


class AxiBaseTest(pyuvm.uvm_test):
    """Builds the bench from settings and runs the write and read sequences.

    Subclasses fill the two sequences in ``make_sequences``; they run
    concurrently on the write and read agents, then the test drains.

    Configuration Sources (precedence: env > plusargs > defaults):
        Bus: ADDRESS_WIDTH, DATA_WIDTH, ID_WIDTH, WIRE_PREFIX
        Clock: CLOCK_ENABLE, CLOCK_NAME, CLOCK_PERIOD_PS
        Reset: RESET_ENABLE, RESET_NAME, RESET_ACTIVE_LOW, RESET_CYCLES
        Model: WRITE_POLICY, REUSE_POLICY, WRITE_COMPLETION
        Environment: COVERAGE_EN, CHECK_EN, SB_FAIL_ON_ERROR, READ_DATA_KEY
        Test: DRAIN_TIME_PS

    Factory Overrides:
        +uvm_set_type_override and +uvm_set_inst_override plusargs.
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.clock_driver: AxiClockDriver
        self.reset_driver: AxiResetDriver
        self.env: AxiEnv

    def build_phase(self) -> None:
        utils_dv.uvm_config_db_set(self, "*", "dut", cocotb.top)
        utils_cli.apply_factory_overrides_from_plusargs(self.logger)
        super().build_phase()
        self.build_config()
        self.build_clocks()
        self.build_resets()
        self.build_env()

    def end_of_elaboration_phase(self) -> None:
        super().end_of_elaboration_phase()
        self.set_logging_level_hier(utils_dv.desired_log_level())

    def start_of_simulation_phase(self) -> None:
        super().start_of_simulation_phase()
        if self.logger.isEnabledFor(logging.DEBUG):
            print(ConfigDB())
            pyuvm.uvm_factory().print(debug_level=1)
        seed = os.getenv("COCOTB_RANDOM_SEED") or os.getenv("RANDOM_SEED")
        self.logger.info("Run seed: %s", seed or "(unset)")

    def build_config(self) -> None:
        """Bus widths, model policies and drain time."""
        bus_config = BusConfig(
            address_width=utils_cli.get_int_setting("ADDRESS_WIDTH", 32),
            data_width=utils_cli.get_int_setting("DATA_WIDTH", 32),
            id_width=utils_cli.get_int_setting("ID_WIDTH", 4),
        )
        settings = {
            "bus_config": bus_config,
            "wire_prefix": utils_cli.get_str_setting("WIRE_PREFIX", ""),
            "write_policy": utils_cli.get_str_setting("WRITE_POLICY", "serial"),
            "reuse_policy": utils_cli.get_str_setting("REUSE_POLICY", "queue"),
            "write_completion": utils_cli.get_str_setting("WRITE_COMPLETION", "data"),
            "drain_time_ps": utils_cli.get_int_setting("DRAIN_TIME_PS", 10_000),
        }
        for key, value in settings.items():
            utils_dv.uvm_config_db_set(self, "", key, value)
            utils_dv.uvm_config_db_set(self, "*", key, value)

    def build_clocks(self) -> None:
        utils_dv.uvm_config_db_set(
            self, "*", "clock_enable", utils_cli.get_bool_setting("CLOCK_ENABLE", True)
        )
        utils_dv.uvm_config_db_set(
            self, "*", "clock_name", utils_cli.get_str_setting("CLOCK_NAME", "clk")
        )
        utils_dv.uvm_config_db_set(
            self,
            "*",
            "clock_period_ps",
            utils_cli.get_int_setting("CLOCK_PERIOD_PS", 1_000),
        )
        self.clock_driver = pyuvm.uvm_factory().create_component_by_type(
            AxiClockDriver,
            parent_inst_path=self.get_full_name(),
            name="clock_driver",
            parent=self,
        )

    def build_resets(self) -> None:
        settings = {
            "reset_enable": utils_cli.get_bool_setting("RESET_ENABLE", True),
            "reset_name": utils_cli.get_str_setting("RESET_NAME", "rst_n"),
            "reset_active_low": utils_cli.get_bool_setting("RESET_ACTIVE_LOW", True),
            "reset_cycles": utils_cli.get_int_setting("RESET_CYCLES", 5),
        }
        for key, value in settings.items():
            utils_dv.uvm_config_db_set(self, "*", key, value)
        self.reset_driver = pyuvm.uvm_factory().create_component_by_type(
            AxiResetDriver,
            parent_inst_path=self.get_full_name(),
            name="reset_driver",
            parent=self,
        )

    def build_env(self) -> None:
        settings = {
            "coverage_en": utils_cli.get_bool_setting("COVERAGE_EN", True),
            "check_en": utils_cli.get_bool_setting("CHECK_EN", True),
            "sb_fail_on_error": utils_cli.get_bool_setting("SB_FAIL_ON_ERROR", True),
            "read_data_key": utils_cli.get_int_setting("READ_DATA_KEY", 0xA5A5_A5A5),
        }
        for key, value in settings.items():
            utils_dv.uvm_config_db_set(self, "env*", key, value)
        self.env = pyuvm.uvm_factory().create_component_by_type(
            AxiEnv, parent_inst_path=self.get_full_name(), name="env", parent=self
        )

    def make_sequences(self) -> tuple[AxiSequence, AxiSequence]:
        """Return (write sequence, read sequence)."""
        raise NotImplementedError("Implement make_sequences here")

    async def run_phase(self) -> None:
        self.raise_objection()
        write_seq, read_seq = self.make_sequences()
        env = self.env
        assert env.write_agent.sqr is not None and env.read_agent.sqr is not None
        write_task = cocotb.start_soon(write_seq.start(env.write_agent.sqr))
        read_task = cocotb.start_soon(read_seq.start(env.read_agent.sqr))
        await write_task
        await read_task
        await self.drain()
        self.drop_objection()

    async def drain(self) -> None:
        """Wait drain_time_ps so the last responses settle on the bus."""
        dt = utils_dv.uvm_config_db_get_try(self, "drain_time_ps")
        if isinstance(dt, int) and dt > 0:
            await Timer(dt, unit="ps")
