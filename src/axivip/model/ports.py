# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/ports.py

"""Synchronous analysis port.

Mirrors the ``uvm_analysis_port``/``write`` contract used by the pyuvm layer:
``write(item)`` calls every connected subscriber in connection order before
returning, so an observation is delivered within the tick it was produced.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Protocol, TypeVar, Union

T = TypeVar("T")


class Subscriber(Protocol[T]):  # pylint: disable=too-few-public-methods
    """Anything with a ``write(item)`` method."""

    def write(self, item: T) -> None: ...


class AnalysisPort(Generic[T]):
    """One-to-many broadcast of items to subscribers."""

    def __init__(self, name: str):
        self.name = name
        self._subscribers: list[Callable[[T], Any]] = []

    def connect(self, subscriber: Union[Subscriber[T], Callable[[T], Any]]) -> None:
        """Attach an object with ``write`` or a plain callable."""
        write = getattr(subscriber, "write", subscriber)
        if not callable(write):
            raise TypeError(f"{self.name}: {subscriber!r} is not a subscriber")
        self._subscribers.append(write)

    def write(self, item: T) -> None:
        for write in self._subscribers:
            write(item)

    def __len__(self) -> int:
        return len(self._subscribers)
