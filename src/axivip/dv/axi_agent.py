# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_agent.py

"""Agent wiring sequencer, driver and monitor for one transaction kind."""

from __future__ import annotations

import pyuvm

from . import utils_dv
from .axi_driver import AxiDriver
from .axi_monitor import AxiMonitor


class AxiAgent(pyuvm.uvm_agent):
    """Sequencer, driver and monitor of one kind (set by config_db "kind").

    A passive agent builds the monitor only.

    Components:
        sqr: Sequencer (active only)
        drv: Driver (active only)
        mon: Monitor

    Analysis Ports:
        ap: Observed items from the monitor

    Reference:
        https://github.com/paradigm-works/uvmtb_template/blob/main/tb_agent.svh
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.ap: pyuvm.uvm_analysis_port
        self.drv: AxiDriver | None = None
        self.sqr: pyuvm.uvm_sequencer | None = None
        self.mon: AxiMonitor

    def build_phase(self) -> None:
        super().build_phase()
        create = pyuvm.uvm_factory().create_component_by_type
        parent_inst_path = self.get_full_name()
        if self.is_active == pyuvm.uvm_active_passive_enum.UVM_ACTIVE:
            self.sqr = create(
                pyuvm.uvm_sequencer,
                parent_inst_path=parent_inst_path,
                name="sqr",
                parent=self,
            )
            self.drv = create(
                AxiDriver, parent_inst_path=parent_inst_path, name="drv", parent=self
            )
        self.mon = create(
            AxiMonitor, parent_inst_path=parent_inst_path, name="mon", parent=self
        )
        self.ap = pyuvm.uvm_analysis_port("ap", self)

    def connect_phase(self) -> None:
        super().connect_phase()
        if self.drv is not None and self.sqr is not None:
            self.drv.seq_item_port.connect(self.sqr.seq_item_export)
            self.drv.model.abort_port.connect(self.mon.model.withdraw)
        self.mon.ap.connect(self.ap)
