# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/utils_cli.py

"""Bench settings from environment variables and plusargs.

Precedence:
    1. Environment variables (NAME or AXIVIP_NAME)
    2. Plusargs (+NAME or +NAME=value)
    3. Default values

Plusargs are read from PLUSARGS, COCOTB_PLUSARGS or AXIVIP_PLUSARGS
(space separated). A bare +NAME reads as "1". Integers accept 0x prefixes.

Factory overrides follow uvm_cmdline_processor:
    +uvm_set_type_override=req,over[,replace]
    +uvm_set_inst_override=req,over,path
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Iterator, Tuple, TypeVar

import pyuvm

T = TypeVar("T")

PREFIX = "AXIVIP_"

_TRUE_SET = {"1", "true", "yes", "y", "on"}
_FALSE_SET = {"0", "false", "no", "n", "off"}

# pyuvm throws lookup/value/type errors on bad overrides
_FACTORY_EXC: Tuple[type[BaseException], ...] = (KeyError, ValueError, TypeError)


def _parse_bool(s: str) -> bool:
    v = s.strip().lower()
    if v in _TRUE_SET:
        return True
    if v in _FALSE_SET:
        return False
    raise ValueError(f"not a boolean: {s!r}")


def _parse_int(s: str) -> int:
    return int(s, 0)


def iter_plusargs() -> list[str]:
    """Return the +args from the first non-empty plusarg variable."""
    s = (
        os.environ.get("PLUSARGS", "")
        or os.environ.get("COCOTB_PLUSARGS", "")
        or os.environ.get(f"{PREFIX}PLUSARGS", "")
    )
    return s.split()


def _get_plusarg(name: str) -> str | None:
    prefix = f"+{name}="
    for tok in iter_plusargs():
        if tok.startswith(prefix):
            return tok[len(prefix) :]
        if tok == f"+{name}":
            return "1"
    return None


def _candidates(name: str) -> Iterator[str]:
    """Raw values for ``name`` in precedence order."""
    for key in (name, f"{PREFIX}{name}"):
        v = os.environ.get(key)
        if v is not None:
            yield v
    v = _get_plusarg(name)
    if v is not None:
        yield v


def _resolve(name: str, default: T, parse: Callable[[str], T]) -> T:
    for raw in _candidates(name):
        try:
            return parse(raw)
        except ValueError:
            continue
    return default


def get_bool_setting(name: str, default: bool) -> bool:
    return _resolve(name, default, _parse_bool)


def get_str_setting(name: str, default: str) -> str:
    return _resolve(name, default, str)


def get_int_setting(name: str, default: int) -> int:
    return _resolve(name, default, _parse_int)


def apply_factory_overrides_from_plusargs(logger: logging.Logger | None = None) -> int:
    """Apply +uvm_set_type_override / +uvm_set_inst_override; return how many."""
    log = logger or logging.getLogger("axivip.dv.utils_cli")
    f = pyuvm.uvm_factory()
    applied = 0
    for tok in iter_plusargs():
        if not tok.startswith(("+uvm_set_type_override=", "+uvm_set_inst_override=")):
            continue
        opt, body = tok[1:].split("=", 1)
        parts = [p.strip() for p in body.split(",")]
        try:
            if opt == "uvm_set_type_override" and len(parts) in (2, 3):
                replace = len(parts) == 2 or parts[2] != "0"
                f.set_type_override_by_name(parts[0], parts[1], replace=replace)
            elif opt == "uvm_set_inst_override" and len(parts) == 3:
                f.set_inst_override_by_name(parts[0], parts[1], parts[2])
            else:
                log.warning("Bad +%s: %s", opt, tok)
                continue
        except _FACTORY_EXC as e:  # pragma: no cover
            log.warning("Override failed (%s): %s", tok, e)
            continue
        log.debug("Factory: %s", tok)
        applied += 1
    return applied
