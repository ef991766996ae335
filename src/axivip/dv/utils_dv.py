# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/dv/utils_dv.py

"""pyuvm config_db and cocotb signal helpers for the axivip bench.

Config DB:
    uvm_config_db(): Return cached config DB instance
    uvm_config_db_get_try(): Get config value or None if missing
    uvm_config_db_get(): Get config value or raise ConfigKeyError
    uvm_config_db_set(): Set config value
    pull_config(): Copy typed config_db values onto component attributes

Signal Access:
    get_signal(): Get signal handle from DUT with validation
    get_signal_value_int(): Integer from Logic/LogicArray, or None if X/Z
    read_wires(): Sample a set of DUT wires into a {name: int | None} mapping
    drive_wires(): Deposit a {name: int | None} mapping onto DUT wires

Logging:
    desired_log_level(): Level from COCOTB_LOG_LEVEL
    configure_component_logger(): Level for a uvm_component
    configure_non_component_logger(): Level for sequences and helpers
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Iterable, Mapping, Union, cast

import pyuvm
from cocotb.handle import SimHandleBase
from cocotb.types import Logic, LogicArray
from pyuvm import error_classes


class ConfigKeyError(KeyError):
    """Raised when a required key is missing from pyuvm's config_db."""


def desired_log_level(default: int = logging.INFO) -> int:
    """Return desired log level from COCOTB_LOG_LEVEL or default."""
    name = (os.getenv("COCOTB_LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, default)


def configure_component_logger(comp: pyuvm.uvm_component) -> None:
    comp.set_logging_level(desired_log_level())


def configure_non_component_logger(logger: logging.Logger) -> None:
    logger.setLevel(desired_log_level())
    # Bubble up to the root/cocotb handlers
    logger.propagate = True


@lru_cache(maxsize=1)
def uvm_config_db() -> Any:
    """Return pyuvm's config DB object (cached)."""
    return pyuvm.ConfigDB()


def uvm_config_db_get_try(comp: pyuvm.uvm_component, key: str) -> Any | None:
    """Return the value for ``key`` as seen from ``comp``, or None if unset."""
    try:
        return cast(Any, uvm_config_db().get(comp, "", key))
    except error_classes.UVMConfigItemNotFound:
        return None


def uvm_config_db_get(comp: pyuvm.uvm_component, key: str) -> Any:
    """Like uvm_config_db_get_try but raises if key is missing."""
    val = uvm_config_db_get_try(comp, key)
    if val is not None:
        return val
    raise ConfigKeyError(
        f"config_db[{key!r}] missing for component '{comp.get_full_name()}'"
    )


def uvm_config_db_set(
    ctx: pyuvm.uvm_component | None, inst_name: str, key: str, value: Any
) -> None:
    """Set a key in the config DB (inst_name like '' or '*' etc.)."""
    uvm_config_db().set(ctx, inst_name, key, value)


def pull_config(comp: pyuvm.uvm_component, defaults: Mapping[str, Any]) -> None:
    """For each ``key: default``, set ``comp.<key>`` from config_db.

    A config_db value replaces the attribute only if it has the default's
    type; anything else is ignored with a warning.
    """
    for key, default in defaults.items():
        v = uvm_config_db_get_try(comp, key)
        if v is None:
            setattr(comp, key, default)
        elif type(v) is type(default):  # pylint: disable=unidiomatic-typecheck
            setattr(comp, key, v)
        else:
            comp.logger.warning(
                "config_db[%r]=%r is not %s; using %r",
                key,
                v,
                type(default).__name__,
                default,
            )
            setattr(comp, key, default)


def get_signal(dut: Any, signal_name: str) -> SimHandleBase:
    """Return dut.<signal_name> or raise a clear error."""
    signal = getattr(dut, signal_name, None)
    if signal is None:
        raise RuntimeError(f"Signal '{signal_name}' not found on DUT")
    if not hasattr(signal, "value"):
        raise TypeError(f"Signal '{signal_name}' has no .value property")
    return cast(SimHandleBase, signal)


def get_signal_value_int(sig: Union[Logic, LogicArray]) -> int | None:
    """Return integer value if resolvable (no X/Z), else None."""
    if isinstance(sig, Logic):
        return int(sig) if sig.is_resolvable else None
    return sig.to_unsigned() if sig.is_resolvable else None


def bind_wires(dut: Any, names: Iterable[str], prefix: str = "") -> dict[str, Any]:
    """Resolve ``prefix + name`` for every wire name, keyed by the bare name."""
    return {name: get_signal(dut, f"{prefix}{name}") for name in names}


def read_wires(handles: Mapping[str, Any]) -> dict[str, int | None]:
    """Sample every handle; unknown levels come back as None."""
    return {name: get_signal_value_int(h.value) for name, h in handles.items()}


def drive_wires(handles: Mapping[str, Any], values: Mapping[str, int | None]) -> None:
    """Deposit values on the handles; an unknown level is driven as 0."""
    for name, value in values.items():
        handles[name].value = 0 if value is None else value
