# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_monitor.py

from __future__ import annotations

import pytest

from axivip.model import (
    AnomalyKind,
    BurstKind,
    Issue,
    ReadMonitor,
    ReadTxn,
    Resp,
    TxnKind,
    Withdrawal,
    WriteMonitor,
    WriteTxn,
)


@pytest.fixture
def write_mon(bus, anomalies):
    mon = WriteMonitor("wmon", bus, anomalies)
    mon.seen = []
    mon.ap.connect(mon.seen.append)
    return mon


@pytest.fixture
def read_mon(bus, anomalies):
    mon = ReadMonitor("rmon", bus, anomalies)
    mon.seen = []
    mon.ap.connect(mon.seen.append)
    return mon


def test_write_join_keeps_fields(bus, wires, write_mon):
    wires(awready=1, wready=1)
    wires(awaddr=0x1000_0000, awid=5, awburst=int(BurstKind.INCR), awvalid=1)
    write_mon.step(1)
    assert write_mon.pending(5) == 1
    assert write_mon.seen == []
    wires(awvalid=0, wdata=0xDEAD_BEEF, wstrb=0xF, wlast=1, wvalid=1)
    write_mon.step(2)
    (obs,) = write_mon.seen
    assert obs.kind is TxnKind.WRITE
    assert (obs.address, obs.data, obs.identifier) == (0x1000_0000, 0xDEAD_BEEF, 5)
    assert obs.burst is BurstKind.INCR
    assert obs.strobe == 0xF
    assert obs.last is True
    assert (obs.addr_tick, obs.tick) == (1, 2)
    assert write_mon.pending() == 0


def test_no_transfer_without_both_valid_and_ready(bus, wires, write_mon):
    wires(awaddr=0x10, awvalid=1)
    write_mon.step(0)
    wires(awvalid=0, awready=1)
    write_mon.step(1)
    wires(wvalid=1)
    write_mon.step(2)
    assert write_mon.pending() == 0
    assert write_mon.seen == []


def test_handshake_held_two_ticks_counts_twice(bus, wires, write_mon, anomalies):
    wires(awready=1, awaddr=0x10, awid=1, awvalid=1)
    write_mon.step(0)
    write_mon.step(1)
    assert write_mon.pending(1) == 2
    assert len(anomalies.of_kind(AnomalyKind.IDENTIFIER_REUSE)) == 1


def test_data_before_address_waits_as_orphan(bus, wires, write_mon):
    wires(wready=1, awready=1)
    wires(wdata=0x77, wstrb=0xF, wlast=1, wvalid=1)
    write_mon.step(0)
    assert write_mon.seen == []
    wires(wvalid=0, awaddr=0x20, awid=2, awvalid=1)
    write_mon.step(1)
    (obs,) = write_mon.seen
    assert (obs.address, obs.data, obs.identifier) == (0x20, 0x77, 2)
    assert obs.tick == 1


def test_simultaneous_address_and_data(bus, wires, write_mon):
    wires(awready=1, wready=1)
    wires(awaddr=0x30, awid=3, awvalid=1, wdata=0x99, wvalid=1, wlast=1)
    write_mon.step(4)
    (obs,) = write_mon.seen
    assert (obs.addr_tick, obs.tick) == (4, 4)


def test_distinct_identifiers_are_independent(bus, wires, write_mon, anomalies):
    wires(awready=1, wready=1)
    wires(awaddr=0x100, awid=1, awvalid=1)
    write_mon.step(0)
    wires(awaddr=0x200, awid=2)
    write_mon.step(1)
    wires(awvalid=0, wdata=0xA, wvalid=1)
    write_mon.step(2)
    wires(wdata=0xB)
    write_mon.step(3)
    assert [(o.identifier, o.address, o.data) for o in write_mon.seen] == [
        (1, 0x100, 0xA),
        (2, 0x200, 0xB),
    ]
    assert len(anomalies) == 0


def test_reused_identifier_queue_policy(bus, wires, write_mon, anomalies):
    wires(awready=1, wready=1)
    wires(awaddr=0x100, awid=3, awvalid=1)
    write_mon.step(0)
    wires(awaddr=0x200)
    write_mon.step(1)
    assert write_mon.pending(3) == 2
    wires(awvalid=0, wdata=0xA, wvalid=1)
    write_mon.step(2)
    wires(wdata=0xB)
    write_mon.step(3)
    assert [(o.address, o.data) for o in write_mon.seen] == [
        (0x100, 0xA),
        (0x200, 0xB),
    ]
    (a,) = anomalies.of_kind(AnomalyKind.IDENTIFIER_REUSE)
    assert a.identifier == 3
    assert a.tick == 1


def test_reused_identifier_reject_policy(bus, wires, anomalies):
    mon = WriteMonitor("wmon", bus, anomalies, reuse_policy="reject")
    seen = []
    mon.ap.connect(seen.append)
    wires(awready=1, wready=1)
    wires(awaddr=0x100, awid=3, awvalid=1)
    mon.step(0)
    wires(awaddr=0x200)
    mon.step(1)
    assert mon.pending(3) == 1
    wires(awvalid=0, wdata=0xA, wvalid=1)
    mon.step(2)
    wires(wdata=0xB)
    mon.step(3)
    assert [(o.address, o.data) for o in seen] == [(0x100, 0xA)]
    assert len(anomalies.of_kind(AnomalyKind.IDENTIFIER_REUSE)) == 1


def test_response_completion_policy(bus, wires, anomalies):
    mon = WriteMonitor("wmon", bus, anomalies, completion="response")
    seen = []
    mon.ap.connect(seen.append)
    wires(awready=1, wready=1)
    wires(awaddr=0x40, awid=6, awvalid=1, wdata=0x5, wvalid=1, wlast=1)
    mon.step(0)
    wires(awvalid=0, wvalid=0)
    mon.step(1)
    assert seen == []
    wires(bid=6, bresp=int(Resp.SLVERR), bvalid=1, bready=1)
    mon.step(2)
    (obs,) = seen
    assert obs.response is Resp.SLVERR
    assert (obs.addr_tick, obs.tick) == (0, 2)
    assert mon.pending() == 0


def test_write_response_with_nothing_pending_is_orphan(bus, wires, anomalies):
    mon = WriteMonitor("wmon", bus, anomalies, completion="response")
    wires(bid=2, bresp=0, bvalid=1, bready=1)
    mon.step(0)
    assert mon.orphan_count == 1
    assert mon.emitted == 0


def test_read_join_by_identifier(bus, wires, read_mon):
    wires(arready=1)
    wires(araddr=0x2000_0000, arid=1, arburst=int(BurstKind.FIXED), arvalid=1)
    read_mon.step(0)
    wires(araddr=0x3000_0000, arid=2)
    read_mon.step(1)
    wires(arvalid=0, rid=2, rdata=0xB, rresp=0, rlast=1, rvalid=1, rready=1)
    read_mon.step(2)
    wires(rid=1, rdata=0xA, rresp=int(Resp.EXOKAY))
    read_mon.step(3)
    first, second = read_mon.seen
    assert (first.identifier, first.address, first.data) == (2, 0x3000_0000, 0xB)
    assert (second.identifier, second.address, second.data) == (1, 0x2000_0000, 0xA)
    assert second.burst is BurstKind.FIXED
    assert second.response is Resp.EXOKAY
    assert second.last is True
    assert read_mon.pending() == 0


def test_read_unknown_response_is_malformed(bus, wires, read_mon, anomalies):
    wires(arready=1)
    wires(araddr=0x10, arid=1, arvalid=1)
    read_mon.step(0)
    wires(arvalid=0, rid=1, rdata=0, rresp=None, rlast=1, rvalid=1, rready=1)
    read_mon.step(1)
    (obs,) = read_mon.seen
    assert obs.response is None
    (a,) = anomalies.of_kind(AnomalyKind.MALFORMED_RESPONSE)
    assert a.identifier == 1


def test_read_data_for_unknown_identifier_is_orphan(bus, wires, read_mon):
    wires(rid=4, rvalid=1, rready=1)
    read_mon.step(0)
    assert read_mon.orphan_count == 1
    assert read_mon.seen == []


def test_reset_discards_pending_without_emission(bus, wires, write_mon):
    wires(awready=1, wready=1)
    wires(awaddr=0x10, awid=1, awvalid=1)
    write_mon.step(0)
    assert write_mon.pending() == 1
    write_mon.reset()
    assert write_mon.pending() == 0
    wires(awvalid=0, wdata=0x1, wvalid=1)
    write_mon.step(1)
    assert write_mon.seen == []


def test_monitor_never_drives(bus, wires, write_mon, read_mon):
    wires(awready=1, wready=1, arready=1)
    wires(awaddr=0x10, awid=1, awvalid=1, araddr=0x20, arid=1, arvalid=1)
    write_mon.step(0)
    read_mon.step(0)
    assert not bus.pending()
    writers = {bus.claimed_by(n) for n in bus.snapshot()}
    assert writers <= {None, "tb_initiator", "tb_responder"}


def _withdrawal(txn, address_accepted=True, data_accepted=False):
    return Withdrawal(Issue(txn, 0, "drv"), 5, address_accepted, data_accepted)


def test_withdrawn_address_does_not_join_later_data(
    bus, wires, write_mon, anomalies
):
    wires(awready=1, wready=1)
    wires(awaddr=0x20, awid=1, awvalid=1)
    write_mon.step(1)
    write_mon.withdraw(_withdrawal(WriteTxn(0x20, 2, identifier=1)))
    assert write_mon.pending() == 0
    wires(awaddr=0x40, awid=3)
    write_mon.step(6)
    wires(awvalid=0, wdata=4, wstrb=0xF, wlast=1, wvalid=1)
    write_mon.step(7)
    (obs,) = write_mon.seen
    assert (obs.address, obs.identifier, obs.data) == (0x40, 3, 4)
    assert len(anomalies) == 0


def test_withdrawn_address_awaiting_response(bus, wires, anomalies):
    mon = WriteMonitor("wmon", bus, anomalies, completion="response")
    wires(awready=1, wready=1)
    wires(awaddr=0x40, awid=6, awvalid=1, wdata=0x5, wvalid=1, wlast=1)
    mon.step(0)
    assert mon.pending(6) == 1
    mon.withdraw(_withdrawal(WriteTxn(0x40, 5, identifier=6), data_accepted=True))
    assert mon.pending() == 0


def test_withdrawn_early_data_beat_is_dropped(bus, wires, write_mon):
    wires(wready=1, awready=1)
    wires(wdata=0x77, wstrb=0xF, wlast=1, wvalid=1)
    write_mon.step(0)
    write_mon.withdraw(
        _withdrawal(WriteTxn(0x10, 0x77), address_accepted=False, data_accepted=True)
    )
    wires(wvalid=0, awaddr=0x30, awid=2, awvalid=1)
    write_mon.step(1)
    assert write_mon.seen == []
    assert write_mon.pending(2) == 1


def test_withdrawal_before_address_keeps_other_records(bus, wires, write_mon):
    wires(awready=1, wready=1)
    wires(awaddr=0x20, awid=1, awvalid=1)
    write_mon.step(1)
    write_mon.withdraw(_withdrawal(WriteTxn(0x20, 2, identifier=1), False))
    assert write_mon.pending(1) == 1


def test_withdrawn_read_leaves_its_data_orphaned(bus, wires, read_mon):
    wires(arready=1)
    wires(araddr=0x40, arid=2, arvalid=1)
    read_mon.step(0)
    read_mon.withdraw(_withdrawal(ReadTxn(0x40, identifier=2)))
    assert read_mon.pending() == 0
    wires(arvalid=0, rid=2, rdata=0x1, rresp=0, rlast=1, rvalid=1, rready=1)
    read_mon.step(1)
    assert read_mon.seen == []
    assert read_mon.orphan_count == 1


def test_empty_shared_log_is_kept(bus, anomalies):
    assert len(anomalies) == 0
    assert WriteMonitor("wmon", bus, anomalies).anomalies is anomalies
    assert ReadMonitor("rmon", bus, anomalies).anomalies is anomalies
