# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/sim.py

"""Clock/reset domain and the cooperative scheduling loop.

One call to ``step()`` is one clock tick:

1. every registered component steps once, in registration order, reading
   the committed bus image and driving the pending one;
2. every bus commits, so this tick's drives become visible to the next tick;
3. the tick counter advances.

Reset is asynchronous: ``assert_reset()`` immediately resets every component
and forces every bus to 0. While reset is held the clock keeps counting but
nothing steps. ``release_reset()`` lets components run again from the next
``step()``.
"""

from __future__ import annotations

import logging
from typing import Callable

from .bus import SignalBus
from .component import Component

logger = logging.getLogger(__name__)


class Simulator:
    """Tick counter plus the list of components it schedules."""

    def __init__(self, name: str = "sim"):
        self.name = name
        self.tick = 0
        self.in_reset = False
        self.components: list[Component] = []
        self.buses: list[SignalBus] = []

    def add(self, *components: Component) -> None:
        """Register components; any bus they hold in ``.bus`` is registered too."""
        for c in components:
            if c in self.components:
                raise ValueError(f"{self.name}: {c!r} registered twice")
            self.components.append(c)
            bus = getattr(c, "bus", None)
            if isinstance(bus, SignalBus):
                self.add_bus(bus)

    def add_bus(self, bus: SignalBus) -> None:
        if bus not in self.buses:
            self.buses.append(bus)

    def step(self) -> None:
        """Advance one tick."""
        if not self.in_reset:
            for c in self.components:
                c.step(self.tick)
        for bus in self.buses:
            bus.commit()
        self.tick += 1

    def run(self, ticks: int) -> None:
        """Advance ``ticks`` ticks."""
        for _ in range(ticks):
            self.step()

    def run_until(self, predicate: Callable[[], bool], limit: int) -> bool:
        """Step until ``predicate()`` holds, for at most ``limit`` ticks.

        Returns True if the predicate was satisfied.
        """
        for _ in range(limit):
            if predicate():
                return True
            self.step()
        done = predicate()
        if not done:
            logger.warning(
                "%s: gave up after %d ticks at tick %d", self.name, limit, self.tick
            )
        return done

    def assert_reset(self) -> None:
        """Drive reset: components re-enter their idle state, buses go to 0."""
        logger.debug("%s: reset asserted at tick %d", self.name, self.tick)
        self.in_reset = True
        for c in self.components:
            c.reset()
        for bus in self.buses:
            bus.reset()

    def release_reset(self) -> None:
        logger.debug("%s: reset released at tick %d", self.name, self.tick)
        self.in_reset = False

    def pulse_reset(self, ticks: int = 1) -> None:
        """Hold reset for ``ticks`` ticks, then release it."""
        self.assert_reset()
        self.run(ticks)
        self.release_reset()

