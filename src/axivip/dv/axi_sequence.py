# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_sequence.py

"""Item-generating sequences for the write and read agents."""

from __future__ import annotations

import logging
import random
from typing import Iterable

import pyuvm

from axivip.model import BusConfig, ReadTxn, Transaction, TxnKind, WriteTxn

from . import utils_cli, utils_dv
from .axi_item import AxiItem


class AxiSequence(pyuvm.uvm_sequence):
    """Sends a fixed list of transactions, one item each, in order.

    After ``start()`` returns, ``items`` holds the completed items with
    their response fields filled in by the driver.
    """

    def __init__(self, name: str = "axi_seq") -> None:
        super().__init__(name)
        self.logger: logging.Logger = logging.getLogger(f"uvm.{name}")
        utils_dv.configure_non_component_logger(self.logger)
        self.txns: list[Transaction] = []
        self.items: list[AxiItem] = []

    def extend(self, txns: Iterable[Transaction]) -> AxiSequence:
        self.txns.extend(txns)
        return self

    async def body_pre(self) -> None:
        """Hook run before any item is sent."""

    async def body(self) -> None:
        await self.body_pre()
        self.logger.debug("%s: %d items", self.get_name(), len(self.txns))
        for i, txn in enumerate(self.txns):
            item = AxiItem.from_txn(f"tr{i}", txn)
            await self.start_item(item)
            await self.finish_item(item)
            self.items.append(item)


class AxiRandomSequence(AxiSequence):
    """Random single-beat requests of one kind.

    Identifiers, addresses and data are drawn from the widths in the
    sequencer's ``bus_config``; addresses are word aligned. The count comes
    from the <KIND>_SEQ_LEN setting (default 20).
    """

    def __init__(self, name: str = "axi_random_seq") -> None:
        super().__init__(name)
        self.kind: TxnKind = TxnKind.WRITE
        self.seq_len: int = 20

    async def body_pre(self) -> None:
        self.seq_len = utils_cli.get_int_setting(
            f"{self.kind.value.upper()}_SEQ_LEN", self.seq_len
        )
        cfg = utils_dv.uvm_config_db_get_try(self.sequencer, "bus_config")
        config = cfg if isinstance(cfg, BusConfig) else BusConfig()
        self.txns = [self.make_txn(config) for _ in range(max(0, self.seq_len))]

    def make_txn(self, config: BusConfig) -> Transaction:
        lanes = config.strobe_width
        address = random.randrange(0, 1 << config.address_width, lanes)
        identifier = random.getrandbits(config.id_width)
        if self.kind is TxnKind.READ:
            return ReadTxn(address, identifier)
        return WriteTxn(address, random.getrandbits(config.data_width), identifier)
