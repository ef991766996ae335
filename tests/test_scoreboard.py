# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_scoreboard.py

from __future__ import annotations

import pytest

from axivip.model import (
    AnalysisPort,
    AnomalyKind,
    BurstKind,
    Issue,
    Observation,
    PredictorCheck,
    ReadTxn,
    Scoreboard,
    TxnKind,
    Withdrawal,
    WriteTxn,
)


def _obs(txn, tick, addr_tick=None, data=None):
    if isinstance(txn, WriteTxn):
        data = txn.data if data is None else data
    return Observation(
        kind=txn.kind,
        address=txn.address,
        identifier=txn.identifier,
        burst=txn.burst,
        tick=tick,
        addr_tick=tick - 1 if addr_tick is None else addr_tick,
        data=data,
    )


@pytest.fixture
def sb(anomalies):
    return Scoreboard("sb", anomalies)


def test_in_order_completions_are_clean(sb, anomalies):
    a = WriteTxn(0x10, 1, identifier=1)
    b = WriteTxn(0x20, 2, identifier=1)
    sb.issue_export.write(Issue(a, 0, "drv"))
    sb.issue_export.write(Issue(b, 5, "drv"))
    sb.write(_obs(a, 3))
    sb.write(_obs(b, 8))
    assert len(anomalies) == 0
    assert sb.matched == 2
    assert sb.completions_for(TxnKind.WRITE, 1) == [3, 8]
    assert sb.outstanding() == {}


def test_same_identifier_out_of_order_is_violation(sb, anomalies):
    a = ReadTxn(0x10, identifier=4)
    b = ReadTxn(0x20, identifier=4)
    sb.issue_export.write(Issue(a, 0, "drv0"))
    sb.issue_export.write(Issue(b, 1, "drv1"))
    sb.write(_obs(b, 6))
    sb.write(_obs(a, 7))
    (v,) = anomalies.of_kind(AnomalyKind.ORDER_VIOLATION)
    assert v.identifier == 4
    assert v.tick == 6
    assert sb.matched == 2


@pytest.mark.parametrize("first", [1, 2])
def test_distinct_identifiers_complete_in_any_order(sb, anomalies, first):
    txns = {i: WriteTxn(0x100 * i, i, identifier=i) for i in (1, 2)}
    for i in (1, 2):
        sb.issue_export.write(Issue(txns[i], i, "drv"))
    second = 3 - first
    sb.write(_obs(txns[first], 10))
    sb.write(_obs(txns[second], 11))
    assert len(anomalies) == 0


def test_reads_and_writes_keep_separate_ledgers(sb, anomalies):
    w = WriteTxn(0x10, 1, identifier=0)
    r = ReadTxn(0x10, identifier=0)
    sb.issue_export.write(Issue(w, 0, "wdrv"))
    sb.issue_export.write(Issue(r, 0, "rdrv"))
    sb.write(_obs(r, 3, data=0x5))
    sb.write(_obs(w, 4))
    assert len(anomalies) == 0
    assert sb.issues_for(TxnKind.READ, 0)[0].txn == r


def test_observation_matching_no_issue_is_unexpected(sb, anomalies):
    sb.issue_export.write(Issue(WriteTxn(0x10, 1, identifier=2), 0, "drv"))
    sb.write(_obs(WriteTxn(0x10, 0xBAD, identifier=2), 4))
    (u,) = anomalies.of_kind(AnomalyKind.UNEXPECTED_OBSERVATION)
    assert u.identifier == 2
    assert sb.outstanding() == {(TxnKind.WRITE, 2): 1}


def test_passive_ordering_without_issues(sb, anomalies):
    txn = WriteTxn(0x10, 1, identifier=5)
    sb.write(_obs(txn, tick=12, addr_tick=10))
    sb.write(_obs(txn, tick=14, addr_tick=8))
    (v,) = anomalies.of_kind(AnomalyKind.ORDER_VIOLATION)
    assert v.tick == 14
    sb.write(_obs(txn, tick=20, addr_tick=18))
    assert len(anomalies) == 1


def test_predictor_check_reports_data_mismatch(sb, anomalies):
    sb.add_check(PredictorCheck(lambda o: o.address ^ 0xFF))
    good = ReadTxn(0x100, identifier=1)
    bad = ReadTxn(0x200, identifier=1)
    sb.write(_obs(good, 3, data=0x1FF))
    sb.write(_obs(bad, 6, data=0x1))
    (m,) = anomalies.of_kind(AnomalyKind.DATA_MISMATCH)
    assert "0x1 != expected 0x2ff" in m.message


def test_predictor_check_skips_when_predictor_returns_none(sb, anomalies):
    sb.add_check(PredictorCheck(lambda o: None))
    sb.write(_obs(ReadTxn(0x100), 3, data=None))
    assert len(anomalies) == 0


def test_custom_check_gets_expected_request(sb, anomalies):
    seen = []

    def check(obs, expected):
        seen.append(expected)
        return None

    sb.add_check(check)
    txn = WriteTxn(0x10, 1)
    sb.issue_export.write(Issue(txn, 0, "drv"))
    sb.write(_obs(txn, 4))
    sb.write(_obs(WriteTxn(0x30, 3, identifier=3), 5))
    assert seen == [txn, None]


def test_connect_subscribes_to_ports(sb):
    port: AnalysisPort[Observation] = AnalysisPort("mon.ap")
    sb.connect(port)
    port.write(_obs(ReadTxn(0x40), 2))
    assert len(sb.observations) == 1


def test_reset_drops_outstanding_issues(sb, anomalies):
    sb.issue_export.write(Issue(WriteTxn(0x10, 1), 0, "drv"))
    assert sb.outstanding() == {(TxnKind.WRITE, 0): 1}
    sb.reset()
    assert sb.outstanding() == {}
    assert len(anomalies) == 0


def test_summary(sb):
    w = WriteTxn(0x10, 1, burst=BurstKind.FIXED)
    sb.issue_export.write(Issue(w, 0, "drv"))
    sb.issue_export.write(Issue(ReadTxn(0x20), 0, "drv"))
    sb.write(_obs(w, 4))
    assert sb.summary() == {
        "observations": 1,
        "writes": 1,
        "reads": 0,
        "matched": 1,
        "withdrawn": 0,
        "outstanding": 1,
        "anomalies": 0,
    }


def test_withdrawn_request_is_no_longer_outstanding(sb, anomalies):
    lost = WriteTxn(0x20, 2, identifier=1)
    nxt = WriteTxn(0x40, 4, identifier=1)
    issue = Issue(lost, 3, "drv")
    sb.issue_export.write(issue)
    sb.withdraw_export.write(Withdrawal(issue, 9, address_accepted=True))
    assert sb.outstanding() == {}
    assert sb.withdrawn == 1
    sb.issue_export.write(Issue(nxt, 10, "drv"))
    sb.write(_obs(nxt, 14))
    assert len(anomalies) == 0
    assert sb.matched == 1


def test_withdrawal_after_observation_is_ignored(sb, anomalies):
    txn = ReadTxn(0x20, identifier=3)
    issue = Issue(txn, 0, "drv")
    sb.issue_export.write(issue)
    sb.write(_obs(txn, 4))
    sb.withdraw_export.write(Withdrawal(issue, 6, address_accepted=True))
    assert sb.withdrawn == 0
    assert sb.matched == 1
    assert len(anomalies) == 0


def test_empty_shared_log_is_kept(anomalies):
    assert len(anomalies) == 0
    assert Scoreboard("sb", anomalies).anomalies is anomalies
