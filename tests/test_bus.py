# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_bus.py

from __future__ import annotations

import pytest

from axivip.model import (
    BusConfig,
    BusContentionError,
    BusOwnershipError,
    Channel,
    Role,
    SignalBus,
)
from axivip.model.bus import SIGNALS, signals_owned_by


def test_wire_set_and_widths():
    bus = SignalBus(BusConfig(address_width=40, data_width=64, id_width=6))
    assert len(SIGNALS) == 25
    assert bus.width("awaddr") == 40
    assert bus.width("rdata") == 64
    assert bus.width("wstrb") == 8
    assert bus.width("bid") == 6
    assert bus.width("bresp") == 2
    assert bus.width("rlast") == 1


def test_ownership_split():
    ini = set(signals_owned_by(Role.INITIATOR))
    rsp = set(signals_owned_by(Role.RESPONDER))
    assert not ini & rsp
    assert {"awvalid", "wvalid", "arvalid", "bready", "rready"} <= ini
    assert {"awready", "wready", "arready", "bvalid", "rvalid"} <= rsp
    assert {"bresp", "rresp", "rdata", "rlast"} <= rsp


def test_drive_is_not_visible_until_commit(bus):
    ini = bus.attach(Role.INITIATOR, "drv")
    ini.drive(awaddr=0x40, awvalid=1)
    assert bus["awvalid"] == 0
    assert bus.pending()["awaddr"] == 0x40
    bus.commit()
    assert bus["awvalid"] == 1
    assert bus["awaddr"] == 0x40
    assert not bus.pending()


def test_undriven_signals_hold(bus):
    ini = bus.attach(Role.INITIATOR, "drv")
    ini.drive(araddr=0x1234)
    bus.commit()
    bus.commit()
    bus.commit()
    assert bus["araddr"] == 0x1234


def test_driving_other_side_is_ownership_error(bus):
    ini = bus.attach(Role.INITIATOR, "drv")
    rsp = bus.attach(Role.RESPONDER, "rsp")
    with pytest.raises(BusOwnershipError):
        ini.drive(awready=1)
    with pytest.raises(BusOwnershipError):
        rsp.drive(wdata=0)


def test_second_writer_is_contention_error(bus):
    a = bus.attach(Role.INITIATOR, "a")
    b = bus.attach(Role.INITIATOR, "b")
    a.drive(awvalid=1)
    bus.commit()
    with pytest.raises(BusContentionError):
        b.drive(awvalid=0)
    assert bus.claimed_by("awvalid") == "a"
    # Other wires are still free to claim
    b.drive(arvalid=1)
    assert bus.claimed_by("arvalid") == "b"


def test_value_range_is_checked(bus):
    ini = bus.attach(Role.INITIATOR, "drv")
    with pytest.raises(ValueError):
        ini.drive(awaddr=1 << 32)
    with pytest.raises(ValueError):
        ini.drive(awid=16)
    with pytest.raises(ValueError):
        ini.drive(awvalid=-1)
    with pytest.raises(ValueError):
        ini.drive(awvalid=True)


def test_unknown_level(bus):
    rsp = bus.attach(Role.RESPONDER, "rsp")
    rsp.drive(bresp=None)
    bus.commit()
    assert bus["bresp"] is None


def test_unknown_signal(bus):
    with pytest.raises(KeyError):
        bus.get("awlen")


def test_handshake_requires_valid_and_ready_on_same_tick(bus, wires):
    wires(awvalid=1)
    assert not bus.handshake(Channel.AW)
    wires(awvalid=0, awready=1)
    assert not bus.handshake(Channel.AW)
    wires(awvalid=1)
    assert bus.handshake(Channel.AW)
    assert not bus.handshake(Channel.W)
    wires(awvalid=0)
    assert not bus.handshake(Channel.AW)


def test_snapshot_is_a_read_only_copy(bus, wires):
    wires(wdata=7)
    snap = bus.snapshot()
    with pytest.raises(TypeError):
        snap["wdata"] = 1  # type: ignore[index]
    wires(wdata=8)
    assert snap["wdata"] == 7
    assert bus["wdata"] == 8


def test_sample_loads_committed_image(bus):
    bus.sample({"awready": 1, "bid": 3, "rdata": None})
    assert bus["awready"] == 1
    assert bus["bid"] == 3
    assert bus["rdata"] is None
    with pytest.raises(ValueError):
        bus.sample({"bid": 99})


def test_reset_zeroes_everything_and_drops_pending(bus, wires):
    wires(awvalid=1, awaddr=0x10, bvalid=1)
    ini = bus.attach(Role.INITIATOR, "tb_initiator")
    ini.drive(arvalid=1)
    bus.reset()
    assert all(v == 0 for v in bus.snapshot().values())
    assert not bus.pending()
    bus.commit()
    assert bus["arvalid"] == 0


def test_release_only_touches_own_valid_and_ready_lines(bus):
    drv = bus.attach(Role.INITIATOR, "drv")
    other = bus.attach(Role.INITIATOR, "other")
    drv.drive(awaddr=0x10, awvalid=1, wvalid=1)
    other.drive(arvalid=1)
    bus.commit()
    drv.release()
    bus.commit()
    assert bus["awvalid"] == 0
    assert bus["wvalid"] == 0
    assert bus["awaddr"] == 0x10
    assert bus["arvalid"] == 1
