# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/config.py

"""Validated configuration models.

``BusConfig`` carries the wire widths shared by every component bound to one
bus. ``BenchModel`` describes a complete scenario (bus, component policies,
responder timing and stimulus) and is what ``axivip-run`` validates a YAML
spec against.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
)

from .txn import BurstKind, ReadTxn, Resp, Transaction, TxnKind, WriteTxn

WritePolicy = Literal["serial", "overlapped"]
WriteCompletion = Literal["data", "response"]
ReusePolicy = Literal["queue", "reject"]
StallAction = Literal["report", "abort"]
RespName = Literal["OKAY", "EXOKAY", "SLVERR", "DECERR"]
BurstName = Literal["FIXED", "INCR", "WRAP"]


class BusConfig(BaseModel):
    """Wire widths of one bus instance."""

    model_config = ConfigDict(frozen=True)

    address_width: int = Field(32, ge=1, le=64)
    data_width: int = Field(32, ge=8, le=1024)
    id_width: int = Field(4, ge=1, le=32)

    @field_validator("data_width")
    @classmethod
    def _data_width_bytes(cls, v: int) -> int:
        if v % 8 or v & (v - 1):
            raise ValueError(f"data_width must be a power of two >= 8, got {v}")
        return v

    @property
    def strobe_width(self) -> int:
        """Width of ``wstrb``: one bit per data byte."""
        return self.data_width // 8

    @property
    def strobe_mask(self) -> int:
        """Strobe with every byte lane enabled."""
        return (1 << self.strobe_width) - 1

    def __str__(self) -> str:
        return f"{self.__class__.__name__}:\n" + json.dumps(
            self.model_dump(), indent=2
        )


class ResponderModel(BaseModel):
    """Timing and answers of the stub responder used by the scenario runner."""

    ready_delay: NonNegativeInt = 0
    resp_delay: NonNegativeInt = 0
    bresp: RespName = "OKAY"
    rresp: RespName = "OKAY"
    read_data: dict[int, int] = Field(default_factory=dict)


class StimulusModel(BaseModel):
    """One request handed to a driver."""

    kind: Literal["write", "read"]
    address: NonNegativeInt
    data: NonNegativeInt = 0
    identifier: NonNegativeInt = 0
    burst: BurstName = "INCR"

    def to_txn(self) -> Transaction:
        """Return the immutable transaction this stimulus describes."""
        burst = BurstKind[self.burst]
        if self.kind == TxnKind.WRITE.value:
            return WriteTxn(
                address=self.address,
                data=self.data,
                identifier=self.identifier,
                burst=burst,
            )
        return ReadTxn(address=self.address, identifier=self.identifier, burst=burst)


class BenchModel(BaseModel):
    """A complete single-bus scenario."""

    bus: BusConfig = Field(default_factory=BusConfig)
    write_policy: WritePolicy = "serial"
    write_completion: WriteCompletion = "data"
    reuse_policy: ReusePolicy = "queue"
    stall_limit: NonNegativeInt = 0
    stall_action: StallAction = "report"
    max_ticks: PositiveInt = 10_000
    responder: ResponderModel = Field(default_factory=ResponderModel)
    # address -> read payload the scoreboard expects to observe
    expected_read_data: dict[int, int] = Field(default_factory=dict)
    stimulus: List[StimulusModel] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}:\n" + json.dumps(
            self.model_dump(), indent=2
        )


def resp_from_name(name: str) -> Resp:
    """Map a response name from a spec file to its code."""
    return Resp[name]


def load_bench(path: str | Path) -> BenchModel:
    """Load and validate a YAML (or JSON) scenario file."""
    with open(path, encoding="utf-8") as f:
        spec = yaml.safe_load(f)
    if spec is None:
        spec = {}
    return BenchModel.model_validate(spec)
