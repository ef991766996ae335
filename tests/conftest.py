# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/conftest.py

"""Shared fixtures for the model tests."""

from __future__ import annotations

from typing import Callable

import pytest

from axivip.model import AnomalyLog, BusConfig, Role, SignalBus
from axivip.model.bus import SIGNALS_BY_NAME


@pytest.fixture
def config() -> BusConfig:
    return BusConfig()


@pytest.fixture
def bus(config: BusConfig) -> SignalBus:
    return SignalBus(config, "axi")


@pytest.fixture
def anomalies() -> AnomalyLog:
    return AnomalyLog()


@pytest.fixture
def wires(bus: SignalBus) -> Callable[..., None]:
    """Drive any mix of wires from the testbench, then commit the tick.

    Each wire goes through a port of its owning side, so the bus rules still
    apply. Wires not named hold their value.
    """
    ports = {role: bus.attach(role, f"tb_{role.value}") for role in Role}

    def drive(**values: int | None) -> None:
        for name, value in values.items():
            ports[SIGNALS_BY_NAME[name].owner].drive(**{name: value})
        bus.commit()

    return drive
