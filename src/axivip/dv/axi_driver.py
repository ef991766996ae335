# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_driver.py

"""pyuvm driver that hands items to a model driver."""

from __future__ import annotations

import pyuvm
from cocotb.triggers import Event

from axivip.model import (
    Completion,
    IdentifierGuard,
    ReadDriver,
    Sequencer,
    TxnKind,
    WriteDriver,
)
from axivip.model.driver import Driver

from . import utils_dv
from .axi_bridge import AxiBridge
from .axi_item import AxiItem


class AxiDriver(pyuvm.uvm_driver):
    """Feeds sequence items to a ``WriteDriver`` or ``ReadDriver``.

    The model driver does the pin wiggling, one tick per clock, inside the
    bridge. This component queues each item's transaction on the model
    sequencer and completes the item when the model driver reports it done.

    Configuration (via config_db):
        bridge (AxiBridge): Required
        kind (str): "write" or "read" (default: "write")
        write_policy (str): "serial" or "overlapped" (default: "serial")
        reuse_policy (str): "queue" or "reject" (default: "queue")

    Attributes:
        model_seqr: Model sequencer the items are queued on
        model: The model driver
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.kind: str = TxnKind.WRITE.value
        self.write_policy: str = "serial"
        self.reuse_policy: str = "queue"
        self.bridge: AxiBridge
        self.model_seqr: Sequencer
        self.model: Driver
        self._done: Event = Event()
        self._completion: Completion | None = None

    def build_phase(self) -> None:
        super().build_phase()
        utils_dv.pull_config(
            self,
            {
                "kind": self.kind,
                "write_policy": self.write_policy,
                "reuse_policy": self.reuse_policy,
            },
        )
        self.bridge = utils_dv.uvm_config_db_get(self, "bridge")
        kind = TxnKind(self.kind)
        name = self.get_full_name()
        bus = self.bridge.bus
        guard = IdentifierGuard(kind, self.reuse_policy, self.bridge.anomalies)
        self.model_seqr = Sequencer(f"{name}.seqr", bus.config, guard)
        if kind is TxnKind.WRITE:
            self.model = WriteDriver(
                name, bus, self.model_seqr, policy=self.write_policy
            )
        else:
            self.model = ReadDriver(name, bus, self.model_seqr)
        self.model.done_port.connect(self._on_done)

    def _on_done(self, completion: Completion) -> None:
        self._completion = completion
        self._done.set()

    async def run_phase(self) -> None:
        await self.bridge.wait_for_reset_inactive()
        while True:
            item: AxiItem = await self.seq_item_port.get_next_item()
            await self.drive_item(item)
            self.seq_item_port.item_done()

    async def drive_item(self, item: AxiItem) -> None:
        """Queue the item's transaction and wait until it completes."""
        self._done.clear()
        self._completion = None
        self.model_seqr.put(item.to_txn())
        await self._done.wait()
        assert self._completion is not None
        item.set_completion(self._completion)
        self.logger.debug("done %s", item)
