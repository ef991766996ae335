# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_sb.py

"""pyuvm scoreboard around the model ``Scoreboard``."""

from __future__ import annotations

import pyuvm

from axivip.model import Observation, PredictorCheck, Scoreboard, TxnKind

from . import utils_dv
from .axi_bridge import AxiBridge
from .axi_item import AxiItem


class AxiSb(pyuvm.uvm_subscriber):
    """Forwards monitor items to the model scoreboard and reports the verdict.

    Monitors connect to ``analysis_export``; drivers announce their requests
    straight to ``model.issue_export``. Anomalies go to the bridge's log.

    Configuration (via config_db):
        bridge (AxiBridge): Required
        sb_fail_on_error (bool): Raise in final_phase on any anomaly or
                                 unobserved request (default: True)
        read_data_key (int): Expected read data is ``araddr ^ read_data_key``,
                             as returned by the HDL responder; -1 disables
                             the check (default: 0xA5A5_A5A5)

    Reference:
        C.E. Cummings, "OVM/UVM Scoreboards - Fundamental Architectures,"
        SNUG 2013 (Silicon Valley)
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.sb_fail_on_error: bool = True
        self.read_data_key: int = 0xA5A5_A5A5
        self.bridge: AxiBridge
        self.model: Scoreboard
        self.unobserved: int = 0

    def build_phase(self) -> None:
        super().build_phase()
        utils_dv.pull_config(
            self,
            {
                "sb_fail_on_error": self.sb_fail_on_error,
                "read_data_key": self.read_data_key,
            },
        )
        self.bridge = utils_dv.uvm_config_db_get(self, "bridge")
        self.model = Scoreboard(self.get_full_name(), self.bridge.anomalies)
        if self.read_data_key >= 0:
            self.model.add_check(PredictorCheck(self.predict))

    def predict(self, obs: Observation) -> int | None:
        """Expected read payload; writes are not predicted."""
        if obs.kind is not TxnKind.READ:
            return None
        mask = (1 << self.bridge.bus_config.data_width) - 1
        return (obs.address ^ self.read_data_key) & mask

    def write(self, tt: AxiItem) -> None:
        assert tt.observation is not None, f"{tt.get_name()} has no observation"
        self.model.write(tt.observation)

    def check_phase(self) -> None:
        super().check_phase()
        for (kind, identifier), n in sorted(self.model.outstanding().items()):
            self.logger.error(
                "%d %s request(s) with id %d never observed", n, kind.value, identifier
            )
            self.unobserved += n

    def report_phase(self) -> None:
        summary = self.model.summary()
        counts = {k: v for k, v in self.bridge.anomalies.counts().items() if v}
        if self.passed:
            self.logger.info(
                "*** TEST PASSED - %d observed, %d matched ***",
                summary["observations"],
                summary["matched"],
            )
        else:
            self.logger.error(
                "*** TEST FAILED - %d observed, %d matched, %d unobserved, "
                "anomalies %s ***",
                summary["observations"],
                summary["matched"],
                self.unobserved,
                counts,
            )

    @property
    def passed(self) -> bool:
        return (
            bool(self.model.observations)
            and not self.unobserved
            and not len(self.bridge.anomalies)
        )

    def final_phase(self) -> None:
        if not self.sb_fail_on_error:
            return
        self.bridge.anomalies.raise_if_any()
        if self.unobserved:
            raise AssertionError(
                f"{self.unobserved} request(s) never observed; "
                "sb_fail_on_error is enabled"
            )
