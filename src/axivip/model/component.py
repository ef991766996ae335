# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/component.py

"""Base class for everything the simulator steps."""

from __future__ import annotations

import logging


class Component:
    """A named participant in the tick loop.

    ``step(tick)`` is called once per tick with the committed bus image
    visible; ``reset()`` is called when reset is asserted. Both default to
    doing nothing so passive consumers can register for reset alone.
    """

    def __init__(self, name: str, logger: logging.Logger | None = None):
        self.name = name
        self.logger = logger or logging.getLogger(f"axivip.{name}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

    def step(self, tick: int) -> None:
        """Advance by one tick."""

    def reset(self) -> None:
        """Return to the post-reset state."""
