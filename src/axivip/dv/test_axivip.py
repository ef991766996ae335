# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/test_axivip.py

"""cocotb/pyuvm tests against the axivip_tb responder."""

from __future__ import annotations

import pyuvm

from axivip.model import ReadTxn, TxnKind, WriteTxn

from .axi_sequence import AxiRandomSequence, AxiSequence
from .axi_test import AxiBaseTest


@pyuvm.test()
class AxivipScenarioTest(AxiBaseTest):
    """One write and one read issued concurrently on the two agents."""

    def make_sequences(self) -> tuple[AxiSequence, AxiSequence]:
        create = pyuvm.uvm_factory().create_object_by_type
        write_seq = create(AxiSequence, name="write_seq")
        read_seq = create(AxiSequence, name="read_seq")
        write_seq.extend([WriteTxn(0x1000_0000, 0xDEAD_BEEF, identifier=0)])
        read_seq.extend([ReadTxn(0x2000_0000, identifier=1)])
        return write_seq, read_seq

    def check_phase(self) -> None:
        super().check_phase()
        sb = self.env.sb
        if sb is None:
            return
        summary = sb.model.summary()
        assert summary["writes"] == 1, summary
        assert summary["reads"] == 1, summary


@pyuvm.test()
class AxivipRandomTest(AxiBaseTest):
    """WRITE_SEQ_LEN random writes and READ_SEQ_LEN random reads."""

    def make_sequences(self) -> tuple[AxiSequence, AxiSequence]:
        create = pyuvm.uvm_factory().create_object_by_type
        write_seq = create(AxiRandomSequence, name="write_seq")
        read_seq = create(AxiRandomSequence, name="read_seq")
        write_seq.kind = TxnKind.WRITE
        read_seq.kind = TxnKind.READ
        return write_seq, read_seq
