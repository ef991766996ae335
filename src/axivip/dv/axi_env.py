# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_env.py

"""Environment: bridge, write agent, read agent, coverage and scoreboard."""

from __future__ import annotations

import pyuvm

from axivip.model import TxnKind

from . import utils_dv
from .axi_agent import AxiAgent
from .axi_bridge import AxiBridge
from .axi_coverage import AxiCoverage
from .axi_sb import AxiSb


class AxiEnv(pyuvm.uvm_env):
    """Builds and connects every bench component around one bridge.

    The bridge is published to every descendant as config_db "bridge".
    In connect_phase the model halves are registered with the bridge so
    they step in a fixed order: sequencers, drivers, monitors, scoreboard.

    Components:
        bridge: Clock-edge bridge owning the model bus and simulator
        write_agent: Agent of kind "write"
        read_agent: Agent of kind "read"
        cov: Coverage collector (optional, controlled by coverage_en config)
        sb: Scoreboard (optional, controlled by check_en config)

    Configuration (via config_db):
        coverage_en (bool): Enable coverage collection (default: True)
        check_en (bool): Enable the scoreboard (default: True)
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.bridge: AxiBridge
        self.write_agent: AxiAgent
        self.read_agent: AxiAgent
        self.cov: AxiCoverage | None = None
        self.sb: AxiSb | None = None
        self.coverage_en: bool = True
        self.check_en: bool = True

    @property
    def agents(self) -> list[AxiAgent]:
        return [self.write_agent, self.read_agent]

    def build_phase(self) -> None:
        super().build_phase()
        create = pyuvm.uvm_factory().create_component_by_type
        parent_inst_path = self.get_full_name()

        self.bridge = create(
            AxiBridge, parent_inst_path=parent_inst_path, name="bridge", parent=self
        )
        utils_dv.uvm_config_db_set(self, "*", "bridge", self.bridge)
        utils_dv.uvm_config_db_set(self, "write_agent*", "kind", TxnKind.WRITE.value)
        utils_dv.uvm_config_db_set(self, "read_agent*", "kind", TxnKind.READ.value)
        self.write_agent = create(
            AxiAgent, parent_inst_path=parent_inst_path, name="write_agent", parent=self
        )
        self.read_agent = create(
            AxiAgent, parent_inst_path=parent_inst_path, name="read_agent", parent=self
        )

        utils_dv.pull_config(
            self, {"coverage_en": self.coverage_en, "check_en": self.check_en}
        )
        if self.coverage_en:
            self.cov = create(
                AxiCoverage,
                parent_inst_path=parent_inst_path,
                name="coverage",
                parent=self,
            )
        if self.check_en:
            self.sb = create(
                AxiSb, parent_inst_path=parent_inst_path, name="sb", parent=self
            )

    def connect_phase(self) -> None:
        super().connect_phase()
        drivers = [a.drv for a in self.agents if a.drv is not None]
        self.bridge.register(*(d.model_seqr for d in drivers))
        self.bridge.register(*(d.model for d in drivers))
        self.bridge.register(*(a.mon.model for a in self.agents))
        if self.cov is not None:
            for agent in self.agents:
                agent.ap.connect(self.cov.analysis_export)
        if self.sb is not None:
            for agent in self.agents:
                agent.ap.connect(self.sb.analysis_export)
            for drv in drivers:
                drv.model.issue_port.connect(self.sb.model.issue_export)
                drv.model.abort_port.connect(self.sb.model.withdraw_export)
            self.bridge.register(self.sb.model)
