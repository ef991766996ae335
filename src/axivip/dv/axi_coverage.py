# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/axi_coverage.py

"""Functional coverage of observed transactions (cocotb-coverage + pyuvm)."""

from __future__ import annotations

import os
from collections import Counter
from typing import Callable

import pyuvm
from cocotb_coverage.coverage import CoverCross, CoverPoint, coverage_db

from axivip.model import BurstKind, BusConfig, Resp, TxnKind

from . import utils_dv
from .axi_item import AxiItem

# Identifiers wider than this are covered on their low values only
MAX_ID_BIN_BITS = 8


def identifier_bins(config: BusConfig) -> list[int]:
    """One bin per identifier value the bus can carry, capped at 256."""
    return list(range(1 << min(config.id_width, MAX_ID_BIN_BITS)))


def build_sampler(id_bins: list[int]) -> Callable[[AxiItem], None]:
    """Sampling function whose decorators fill the coverage database."""

    @CoverPoint(
        "top.axivip.kind",
        xf=lambda tt: tt.kind,
        bins=[k.value for k in TxnKind],
    )
    @CoverPoint(
        "top.axivip.burst",
        xf=lambda tt: tt.burst,
        bins=[b.name for b in BurstKind],
    )
    @CoverPoint(
        "top.axivip.response",
        xf=lambda tt: tt.response,
        bins=[r.name for r in Resp],
    )
    @CoverPoint(
        "top.axivip.identifier",
        xf=lambda tt: tt.identifier,
        bins=id_bins,
    )
    @CoverCross(
        "top.axivip.kind_x_burst",
        items=["top.axivip.kind", "top.axivip.burst"],
    )
    @CoverCross(
        "top.axivip.kind_x_identifier",
        items=["top.axivip.kind", "top.axivip.identifier"],
    )
    def sample(tt: AxiItem) -> None:
        """Bins are filled by the decorators."""

    return sample


class AxiCoverage(pyuvm.uvm_subscriber):
    """Samples every monitor item into the coverage database.

    Cover points: kind, burst, response and identifier of each observation,
    plus kind x burst and kind x identifier crosses. Identifier bins follow
    the id width of the bridge's bus. The database is reported in
    report_phase and exported to YAML when COV_YAML is set.

    Configuration (via config_db):
        coverage_en (bool): Enable coverage collection (default: True)
        bridge (AxiBridge): Source of the bus widths
    """

    def __init__(self, name: str, parent: pyuvm.uvm_component | None) -> None:
        super().__init__(name, parent)
        utils_dv.configure_component_logger(self)
        self.yaml_path: str | None = os.getenv("COV_YAML")
        self.coverage_en: bool = True
        self.counts: Counter[str] = Counter()
        self.id_bins: list[int] = []
        self.sample: Callable[[AxiItem], None] | None = None

    def end_of_elaboration_phase(self) -> None:
        super().end_of_elaboration_phase()
        utils_dv.pull_config(self, {"coverage_en": self.coverage_en})
        bridge = utils_dv.uvm_config_db_get(self, "bridge")
        self.id_bins = identifier_bins(bridge.bus.config)
        self.sample = build_sampler(self.id_bins)

    def write(self, tt: AxiItem) -> None:
        if not self.coverage_en or self.sample is None:
            return
        self.counts[tt.kind] += 1
        self.sample(tt)

    def report_phase(self) -> None:
        super().report_phase()
        if not self.coverage_en or self.sample is None:
            return
        coverage_db.report_coverage(self.logger.debug)
        self.logger.info(
            "AxiCoverage summary: writes=%d reads=%d ids=%d kind_x_burst=%.1f%%",
            self.counts[TxnKind.WRITE.value],
            self.counts[TxnKind.READ.value],
            len(self.id_bins),
            coverage_db["top.axivip.kind_x_burst"].cover_percentage,
        )
        if self.yaml_path:
            coverage_db.export_to_yaml(self.yaml_path)
            self.logger.debug("Coverage YAML written to %s", self.yaml_path)
