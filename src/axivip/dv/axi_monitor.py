# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_monitor.py

"""pyuvm monitor publishing model observations as items."""

from __future__ import annotations

import pyuvm

from axivip.model import Observation, ReadMonitor, TxnKind, WriteMonitor
from axivip.model.monitor import Monitor

from . import utils_dv
from .axi_bridge import AxiBridge
from .axi_item import AxiItem


class AxiMonitor(pyuvm.uvm_monitor):
    """Wraps a ``WriteMonitor`` or ``ReadMonitor`` stepped by the bridge.

    Each observation is converted to an ``AxiItem`` and written to ``ap``
    within the tick it was reconstructed.

    Configuration (via config_db):
        bridge (AxiBridge): Required
        kind (str): "write" or "read" (default: "write")
        reuse_policy (str): "queue" or "reject" (default: "queue")
        write_completion (str): "data" or "response" (default: "data")
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.kind: str = TxnKind.WRITE.value
        self.reuse_policy: str = "queue"
        self.write_completion: str = "data"
        self.ap: pyuvm.uvm_analysis_port
        self.bridge: AxiBridge
        self.model: Monitor
        self.item_count: int = 0

    def build_phase(self) -> None:
        super().build_phase()
        self.ap = pyuvm.uvm_analysis_port("ap", self)
        utils_dv.pull_config(
            self,
            {
                "kind": self.kind,
                "reuse_policy": self.reuse_policy,
                "write_completion": self.write_completion,
            },
        )
        self.bridge = utils_dv.uvm_config_db_get(self, "bridge")
        name = self.get_full_name()
        bus, anomalies = self.bridge.bus, self.bridge.anomalies
        if TxnKind(self.kind) is TxnKind.WRITE:
            self.model = WriteMonitor(
                name,
                bus,
                anomalies,
                reuse_policy=self.reuse_policy,
                completion=self.write_completion,
            )
        else:
            self.model = ReadMonitor(
                name, bus, anomalies, reuse_policy=self.reuse_policy
            )
        self.model.ap.connect(self._publish)

    def _publish(self, obs: Observation) -> None:
        item = AxiItem.from_observation(f"obs{self.item_count}", obs)
        self.item_count += 1
        self.ap.write(item)
