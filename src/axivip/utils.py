# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/utils.py

"""Utility functions for the scenario runner, dv.py and tests."""

from __future__ import annotations

import json
import logging
import random
import re
import time
from os import PathLike
from pathlib import Path
from typing import Any, Union

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RESET = "\033[0m"


class NoColorFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""

    ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and strip ANSI codes."""
        formatted = super().format(record)
        return self.ANSI_ESCAPE.sub("", formatted)


def configure_logger(
    verbosity: str = "info", log_file: Path | None = None
) -> logging.Logger:
    """Configure and return a logger with console and optional file handlers.

    Args:
        verbosity: Log level (critical, error, warning, info, debug, notset)
        log_file: Optional path to log file. If provided, logs to both console and file.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger()
    logger.setLevel(verbosity.upper())

    # Avoid duplicate output when called more than once
    logger.handlers.clear()

    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    console_handler = logging.StreamHandler()
    console_handler.setLevel(verbosity.upper())
    console_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    logger.addHandler(console_handler)

    # Files never get colour codes
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(verbosity.upper())
        file_handler.setFormatter(NoColorFormatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(file_handler)

    return logging.getLogger("axivip")


def ensure_dir(
    d: Union[str, Path, PathLike[str]], make_if_not_exists: bool = False
) -> Path:
    """Return absolute path if directory exists, optionally create it."""
    path = Path(d)
    if not path.exists():
        if make_if_not_exists:
            path.mkdir(parents=True, exist_ok=True)
            logging.info("Created directory: %s", path)
        else:
            raise FileNotFoundError(f"Directory does not exist: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    return path.resolve()


def get_repo_root() -> Path:
    """Return the root of the repo (where pyproject.toml lives)."""
    here = Path(__file__).resolve()
    for p in [here] + list(here.parents):
        if (p / "pyproject.toml").exists():
            return p
    for p in here.parents:
        if p.name == "src":
            return p.parent
    return here.parents[-1]


def green(s: str) -> str:
    """Wrap text in green ANSI escape codes."""
    return f"{GREEN}{s}{RESET}"


def hex_or_none(value: int | None) -> str:
    """Format a wire value for log lines; unknown levels print as X."""
    return "X" if value is None else f"0x{value:x}"


def iso_utc() -> str:
    """Return current time in ISO8601 Z format (UTC)."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def normalize_seed(rng: random.Random, s: str) -> int:
    """
    Normalize a seed string to an integer.
    Supports 'rand'/'random'/'auto' and 0x... hex.
    Raises SystemExit on invalid input.
    """
    low = s.lower()
    if low in {"rand", "random", "auto"}:
        return rng.getrandbits(32)
    try:
        return int(s, 0) & 0xFFFF_FFFF
    except ValueError as exc:
        raise SystemExit(
            f"[dv] Invalid seed '{s}'. Use decimal, 0x..., or 'random'."
        ) from exc


def red(s: str) -> str:
    """Wrap text in red ANSI escape codes."""
    return f"{RED}{s}{RESET}"


def save_json(path: Union[str, Path], payload: Any) -> Path:
    """Write ``payload`` as indented JSON and return the path."""
    out = Path(path)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    logging.debug("Saved %s", out)
    return out


def yellow(s: str) -> str:
    """Wrap text in yellow ANSI escape codes."""
    return f"{YELLOW}{s}{RESET}"
