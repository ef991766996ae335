# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_txn_config.py

from __future__ import annotations

import dataclasses
import json

import pytest
from pydantic import ValidationError

from axivip.model import (
    BenchModel,
    BurstKind,
    BusConfig,
    Completion,
    Observation,
    ReadTxn,
    Resp,
    TxnKind,
    WriteTxn,
    load_bench,
)


def test_txn_kinds_and_defaults():
    w = WriteTxn(0x1000_0000, 0xDEAD_BEEF)
    r = ReadTxn(0x2000_0000, identifier=1)
    assert w.kind is TxnKind.WRITE
    assert r.kind is TxnKind.READ
    assert w.burst is BurstKind.INCR
    assert w.identifier == 0


def test_txn_is_immutable():
    w = WriteTxn(0x10, 0x20)
    with pytest.raises(dataclasses.FrozenInstanceError):
        w.data = 0x30  # type: ignore[misc]


def test_txn_fields_checked_against_widths():
    cfg = BusConfig(address_width=16, data_width=32, id_width=2)
    WriteTxn(0xFFFF, 0xFFFF_FFFF, identifier=3).check(cfg)
    with pytest.raises(ValueError, match="address"):
        WriteTxn(0x1_0000, 0).check(cfg)
    with pytest.raises(ValueError, match="data"):
        WriteTxn(0, 1 << 32).check(cfg)
    with pytest.raises(ValueError, match="identifier"):
        ReadTxn(0, identifier=4).check(cfg)
    with pytest.raises(ValueError, match="strobe"):
        WriteTxn(0, 0, strobe=0x1F).check(cfg)


def test_full_strobe_by_default():
    cfg = BusConfig(data_width=64)
    assert WriteTxn(0, 0).strobe_for(cfg) == 0xFF
    assert WriteTxn(0, 0, strobe=0x0F).strobe_for(cfg) == 0x0F


def test_txn_str_is_json():
    d = json.loads(str(WriteTxn(0x10, 0x20, identifier=2, burst=BurstKind.WRAP)))
    assert d == {
        "address": 0x10,
        "burst": "WRAP",
        "data": 0x20,
        "identifier": 2,
        "kind": "write",
        "strobe": None,
    }


@pytest.mark.parametrize(
    "raw, expected",
    [(0, Resp.OKAY), (1, Resp.EXOKAY), (2, Resp.SLVERR), (3, Resp.DECERR)],
)
def test_resp_decode(raw, expected):
    assert Resp.decode(raw) is expected


def test_resp_decode_malformed():
    assert Resp.decode(None) is None
    assert Resp.decode(4) is None


def test_observation_matches_request_fields():
    obs = Observation(
        TxnKind.WRITE, 0x10, 1, BurstKind.INCR, tick=5, addr_tick=3, data=0xAB
    )
    assert obs.matches(WriteTxn(0x10, 0xAB, identifier=1))
    assert not obs.matches(WriteTxn(0x10, 0xAC, identifier=1))
    assert not obs.matches(WriteTxn(0x14, 0xAB, identifier=1))
    assert not obs.matches(ReadTxn(0x10, identifier=1))


def test_read_observation_ignores_payload():
    obs = Observation(
        TxnKind.READ, 0x10, 2, BurstKind.WRAP, tick=7, addr_tick=3, data=0x55
    )
    assert obs.request_fields() == ReadTxn(0x10, 2, BurstKind.WRAP).observed_fields()
    assert obs.matches(ReadTxn(0x10, identifier=2, burst=BurstKind.WRAP))
    assert not obs.matches(ReadTxn(0x10, identifier=2))
    assert not obs.matches(WriteTxn(0x10, 0x55, identifier=2, burst=BurstKind.WRAP))


def test_completion_ok():
    txn = ReadTxn(0)
    assert Completion(txn, 0, 3, response=Resp.EXOKAY).ok
    assert not Completion(txn, 0, 3, response=Resp.SLVERR).ok
    assert not Completion(txn, 0, 3, response=None).ok


def test_bus_config_defaults():
    cfg = BusConfig()
    assert (cfg.address_width, cfg.data_width, cfg.id_width) == (32, 32, 4)
    assert cfg.strobe_width == 4
    assert cfg.strobe_mask == 0xF


@pytest.mark.parametrize("data_width", [0, 12, 48, 2048])
def test_bus_config_rejects_bad_data_width(data_width):
    with pytest.raises(ValidationError):
        BusConfig(data_width=data_width)


def test_bus_config_is_frozen():
    cfg = BusConfig()
    with pytest.raises(ValidationError):
        cfg.data_width = 64  # type: ignore[misc]


def test_bench_model_rejects_unknown_policy():
    with pytest.raises(ValidationError):
        BenchModel.model_validate({"write_policy": "pipelined"})
    with pytest.raises(ValidationError):
        BenchModel.model_validate({"responder": {"bresp": "RETRY"}})


def test_load_bench_yaml(tmp_path):
    spec = tmp_path / "scenario.yaml"
    spec.write_text(
        """
bus:
  address_width: 32
  data_width: 64
write_policy: overlapped
stall_limit: 20
stimulus:
  - {kind: write, address: 0x100, data: 0xCAFE, identifier: 2}
  - {kind: read, address: 0x200, identifier: 3, burst: FIXED}
""",
        encoding="utf-8",
    )
    model = load_bench(spec)
    assert model.bus.data_width == 64
    assert model.write_policy == "overlapped"
    assert model.stall_limit == 20
    txns = [s.to_txn() for s in model.stimulus]
    assert txns == [
        WriteTxn(0x100, 0xCAFE, identifier=2),
        ReadTxn(0x200, identifier=3, burst=BurstKind.FIXED),
    ]


def test_load_bench_empty_file_gives_defaults(tmp_path):
    spec = tmp_path / "empty.yaml"
    spec.write_text("", encoding="utf-8")
    model = load_bench(spec)
    assert model == BenchModel()
    assert model.reuse_policy == "queue"
    assert model.write_completion == "data"
