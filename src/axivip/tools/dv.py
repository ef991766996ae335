# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/tools/dv.py

"""Build and run the axivip cocotb/pyuvm bench through pytest.

The HDL responder ``src/axivip/rtl/<design>.sv`` is compiled with the cocotb
runner (Verilator or Icarus) using the bus widths given on the command line,
then ``axivip.dv.<test>`` runs once per seed with the same widths and the
driver/monitor policies handed to the bench as plusargs. One build serves
every seed; a different width set gets its own build directory.

Each seed gets its own test directory holding ``manifest.json`` (status,
replay command, bench knobs) and, with ``--coverage=1``, ``coverage.yaml``.

Command-line interface:
    dv [--design=axivip_tb] [--test=test_axivip] [OPTIONS]

Typical usage:
    # Build and run every test in axivip.dv.test_axivip
    dv

    # Only the concrete write/read scenario
    dv --testcase AxivipScenarioTest

    # Overlapped writes on a 64-bit data bus, 10 seeds
    dv --testcase AxivipRandomTest --data-width 64 --write-policy overlapped \\
       --nseeds=10

    # Longer random sequences
    dv --testcase AxivipRandomTest --plusarg=+WRITE_SEQ_LEN=100
"""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import os
import random
import shlex
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Sequence

import pytest
from cocotb_tools.runner import get_runner
from pydantic import ValidationError

from axivip import utils
from axivip.model import BusConfig

PROJ_DIR: Final[Path] = utils.get_repo_root()
RTL_DIR: Final[Path] = Path(__file__).resolve().parent.parent / "rtl"
DEFAULT_OUT_DIR = "out_dv"
DEFAULT_BUILDS_SUBDIR = "builds"
DEFAULT_TESTS_SUBDIR = "tests"
DEFAULT_FRAMEWORK = f"{Path(__file__).resolve()}::test_framework"
DEFAULT_PYTEST_OPTS: tuple[str, ...] = ("-vv", "-s", "-ra", "-x")
DEFAULT_DESIGN = "axivip_tb"
DEFAULT_TEST = "test_axivip"
DEFAULT_SEED = 42

# HDL parameter name for each BusConfig field
HDL_PARAMS: Final[dict[str, str]] = {
    "address_width": "A",
    "data_width": "D",
    "id_width": "I",
}

logger = logging.getLogger(__name__)


@dataclass
class _ContextBox:
    value: dict[str, Any] | None = None


@dataclass(frozen=True)
class BenchKnobs:
    """Everything the bench is told about the bus and its policies."""

    bus: BusConfig = field(default_factory=BusConfig)
    write_policy: str = "serial"
    write_completion: str = "data"
    reuse_policy: str = "queue"
    check_en: bool = True
    coverage_en: bool = True

    @classmethod
    def from_ctx(cls, ctx: dict) -> BenchKnobs:
        return cls(
            bus=BusConfig(**ctx.get("bus", {})),
            write_policy=str(ctx.get("write_policy", "serial")),
            write_completion=str(ctx.get("write_completion", "data")),
            reuse_policy=str(ctx.get("reuse_policy", "queue")),
            check_en=bool(ctx.get("check_en", True)),
            coverage_en=bool(ctx.get("coverage_en", True)),
        )

    def hdl_parameters(self) -> dict[str, int]:
        """Toplevel parameters; these change the build."""
        widths = self.bus.model_dump()
        return {hdl: widths[name] for name, hdl in HDL_PARAMS.items()}

    def plusargs(self) -> list[str]:
        """Bench-side settings; these only change the run."""
        return [
            f"+ADDRESS_WIDTH={self.bus.address_width}",
            f"+DATA_WIDTH={self.bus.data_width}",
            f"+ID_WIDTH={self.bus.id_width}",
            f"+WRITE_POLICY={self.write_policy}",
            f"+WRITE_COMPLETION={self.write_completion}",
            f"+REUSE_POLICY={self.reuse_policy}",
            f"+CHECK_EN={int(self.check_en)}",
            f"+COVERAGE_EN={int(self.coverage_en)}",
        ]


@dataclass(frozen=True)
class BuildCfg:  # pylint: disable=too-many-instance-attributes
    """Build configuration."""

    sim: str
    waves: bool
    design: str
    sources: list[Path]
    parameters: dict[str, int]
    build_dir: Path
    build_args: list[str]
    build_log_file: Path
    build_force: bool


@dataclass(frozen=True)
class TestCfg:  # pylint: disable=too-many-instance-attributes
    """Test configuration for one seed."""

    sim: str
    waves: bool
    design: str
    build_dir: Path
    test_module: str
    testcase: str | None
    seed: int
    test_dir: Path
    test_log_file: Path
    test_args: list[str]
    plusargs: list[str]
    extra_env: dict[str, str]
    results_xml: Path | None


# === CLI ===


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the ``dv`` command line."""
    ap = argparse.ArgumentParser(
        description="Build and run the axivip cocotb/pyuvm bench",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    run = ap.add_argument_group("run")
    run.add_argument(
        "--cmd",
        choices=["build", "test", "both"],
        default=os.getenv("CMD", "both"),
        help="run only build, only test, or both",
    )
    run.add_argument(
        "--sim",
        choices=["verilator", "icarus"],
        default=os.getenv("SIM", "verilator"),
        help="simulator",
    )
    run.add_argument("--outdir", default=DEFAULT_OUT_DIR, help="output directory")
    run.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug"],
        default=os.getenv("VERBOSITY", "info"),
        help="logging level for Python/pyuvm/cocotb",
    )
    run.add_argument(
        "--waves",
        choices=["0", "1"],
        default=os.getenv("WAVES", "0"),
        help="enable FST waveforms",
    )

    build = ap.add_argument_group("build")
    build.add_argument("--design", default=DEFAULT_DESIGN, help="HDL toplevel")
    build.add_argument("--build-force", action="store_true", help="force a build")
    build.add_argument(
        "--build-arg",
        dest="build_args",
        action="append",
        default=[],
        help="extra build arg passed verbatim to the simulator (repeatable)",
    )

    bus = ap.add_argument_group("bus (HDL parameters and bench config)")
    bus.add_argument("--address-width", type=int, default=32, help="awaddr/araddr")
    bus.add_argument("--data-width", type=int, default=32, help="wdata/rdata")
    bus.add_argument("--id-width", type=int, default=4, help="awid/bid/arid/rid")

    bench = ap.add_argument_group("bench")
    bench.add_argument(
        "--write-policy", choices=["serial", "overlapped"], default="serial"
    )
    bench.add_argument(
        "--write-completion",
        choices=["data", "response"],
        default="data",
        help="emit write observations on the W handshake or on B",
    )
    bench.add_argument("--reuse-policy", choices=["queue", "reject"], default="queue")
    bench.add_argument(
        "--check-en",
        choices=["0", "1"],
        default=os.getenv("CHECK_EN", "1"),
        help="enable the scoreboard",
    )
    bench.add_argument(
        "--coverage",
        choices=["0", "1"],
        default=os.getenv("COVERAGE_EN", "1"),
        help="collect functional coverage into <test_dir>/coverage.yaml",
    )

    test = ap.add_argument_group("test")
    test.add_argument("--test", default=DEFAULT_TEST, help="axivip.dv.<test_module>")
    test.add_argument("--testcase", default=None, help="run only this test class")
    test.add_argument(
        "--plusarg",
        dest="plusargs",
        action="append",
        default=[],
        help="extra +NAME=value passed to the bench (repeatable, wins)",
    )
    test.add_argument(
        "--expect",
        choices=["PASS", "FAIL"],
        default="PASS",
        help="expected result for this test",
    )
    test.add_argument(
        "--seeds",
        nargs="+",
        metavar="SEED",
        help="explicit seed list (decimal, 0x... or 'random'); overrides --nseeds",
    )
    test.add_argument(
        "--nseeds", type=int, default=0, help="generate N seeds if --seeds not given"
    )
    test.add_argument(
        "--seed-base", type=int, default=1999, help="base for generated seeds"
    )

    return ap.parse_args(argv)


def validate_args(args: argparse.Namespace) -> BusConfig:
    """Fail fast on invalid arguments; return the validated bus widths."""
    if not (RTL_DIR / f"{args.design}.sv").is_file():
        raise SystemExit(f"[dv]: error: no RTL for --design={args.design}")
    if args.cmd in {"both", "test"} and not args.test:
        raise SystemExit(f"[dv]: error: argument --test required for {args.cmd=}")
    for p in args.plusargs:
        if not p.startswith("+"):
            raise SystemExit(f"[dv]: error: plusarg must start with '+': {p!r}")
    try:
        return BusConfig(
            address_width=args.address_width,
            data_width=args.data_width,
            id_width=args.id_width,
        )
    except ValidationError as exc:
        raise SystemExit(f"[dv]: error: invalid bus widths:\n{exc}") from exc


def _strip_seed_args(argv: list[str]) -> list[str]:
    """Drop --nseeds/--seeds (both '--opt val' and '--opt=val') for replay."""
    out: list[str] = []
    it = iter(argv)
    for tok in it:
        if tok == "--nseeds":
            next(it, None)
        elif tok == "--seeds":
            # Values run up to the next option
            for val in it:
                if val.startswith("-"):
                    out.append(val)
                    break
        elif not tok.startswith(("--nseeds=", "--seeds=")):
            out.append(tok)
    return out


def _pretty(argv: list[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


# === Context ===

_CTX = _ContextBox()


def _ctx() -> dict[str, Any]:
    """In-process context handed from ``main`` to ``test_framework``."""
    if _CTX.value is None:
        raise RuntimeError("[dv] internal context not set")
    return _CTX.value


# === Seeds ===


def _derive_seeds(args: argparse.Namespace) -> list[int]:
    rng = random.Random(args.seed_base & 0xFFFF_FFFF)
    if args.seeds:
        seeds = [utils.normalize_seed(rng, s) for s in args.seeds]
    elif args.nseeds > 0:
        seeds = [utils.normalize_seed(rng, "random") for _ in range(args.nseeds)]
    else:
        seeds = [DEFAULT_SEED]
    logger.info("using seeds: %s", seeds)
    return seeds


# === Build/Test Config ===


def _build_dir_for_ctx(ctx: dict) -> Path:
    """<outdir>/builds/<design>.<hash10>, hashed over what changes the build."""
    knobs = BenchKnobs.from_ctx(ctx)
    fingerprint = {
        "sim": str(ctx.get("sim", "verilator")),
        "waves": bool(ctx.get("waves", False)),
        "parameters": knobs.hdl_parameters(),
        "user_build_args": [str(x) for x in ctx.get("user_build_args", [])],
    }
    raw = json.dumps(fingerprint, sort_keys=True, separators=(",", ":")).encode()
    leaf = f"{ctx.get('design', DEFAULT_DESIGN)}.{hashlib.sha1(raw).hexdigest()[:10]}"
    outdir = str(ctx.get("outdir", DEFAULT_OUT_DIR))
    return (PROJ_DIR / outdir / DEFAULT_BUILDS_SUBDIR / leaf).resolve()


def _make_build_cfg(ctx: dict) -> BuildCfg:
    sim = str(ctx.get("sim", "verilator"))
    waves = bool(ctx.get("waves", False))
    design = str(ctx.get("design", DEFAULT_DESIGN))
    build_dir = _build_dir_for_ctx(ctx)

    build_args: list[str] = []
    if sim == "verilator":
        build_args += ["--timing", "-Wno-fatal"]
        if waves:
            build_args.append("--trace-fst")
    # User build args last so they override
    build_args += [str(x) for x in ctx.get("user_build_args", [])]

    return BuildCfg(
        sim=sim,
        waves=waves,
        design=design,
        sources=[RTL_DIR / f"{design}.sv"],
        parameters=BenchKnobs.from_ctx(ctx).hdl_parameters(),
        build_dir=build_dir,
        build_args=build_args,
        build_log_file=build_dir / "build.log",
        build_force=bool(ctx.get("build_force", False)),
    )


def _make_test_cfg(ctx: dict) -> TestCfg:
    sim = str(ctx.get("sim", "verilator"))
    waves = bool(ctx.get("waves", False))
    seed = int(ctx.get("seed", DEFAULT_SEED))
    test = str(ctx.get("test", DEFAULT_TEST))
    knobs = BenchKnobs.from_ctx(ctx)
    build_dir = _build_dir_for_ctx(ctx)

    test_dir = Path(ctx["test_dir"]).resolve()
    test_dir.mkdir(parents=True, exist_ok=True)
    wave_file = test_dir / "waves.fst"

    test_args: list[str] = []
    # Later plusargs win, so user plusargs come after the knobs
    plusargs = knobs.plusargs() + [str(p) for p in ctx.get("plusargs", [])]
    if waves and sim == "verilator":
        test_args = ["--trace-file", str(wave_file)]
    elif waves and sim == "icarus":
        plusargs.append(f"+dumpfile_path={wave_file}")

    extra_env: dict[str, str] = {
        "RANDOM_SEED": str(seed),
        "COCOTB_RANDOM_SEED": str(seed),
        "COCOTB_LOG_LEVEL": str(ctx.get("verbosity", "info")).upper(),
        "COCOTB_PLUSARGS": " ".join(plusargs),
    }
    if knobs.coverage_en:
        extra_env["COV_YAML"] = str(test_dir / "coverage.yaml")

    results_xml: Path | None = None
    if os.getenv("PYTEST_CURRENT_TEST") is None:
        results_xml = test_dir / "results.xml"

    return TestCfg(
        sim=sim,
        waves=waves,
        design=str(ctx.get("design", DEFAULT_DESIGN)),
        build_dir=build_dir,
        test_module=f"axivip.dv.{test}",
        testcase=ctx.get("testcase"),
        seed=seed,
        test_dir=test_dir,
        test_log_file=test_dir / "test.log",
        test_args=test_args,
        plusargs=plusargs,
        extra_env=extra_env,
        results_xml=results_xml,
    )


# === Actions ===


def run_build(cfg: BuildCfg) -> None:
    """Compile the HDL toplevel with the cocotb runner."""
    logger.info("building %s %s in %s", cfg.design, cfg.parameters, cfg.build_dir)
    cfg.build_dir.mkdir(parents=True, exist_ok=True)
    utils.save_json(
        cfg.build_dir / "manifest.json",
        {
            "updated_at": utils.iso_utc(),
            "sim": cfg.sim,
            "design": cfg.design,
            "parameters": cfg.parameters,
            "build_args": cfg.build_args,
        },
    )
    get_runner(cfg.sim).build(
        sources=cfg.sources,
        hdl_toplevel=cfg.design,
        parameters=cfg.parameters,
        timescale=("1ns", "1ps"),
        waves=cfg.waves,
        build_dir=cfg.build_dir,
        build_args=cfg.build_args,
        log_file=str(cfg.build_log_file),
        always=cfg.build_force,
    )


def run_test(cfg: TestCfg) -> None:
    """Run the pyuvm test module against a finished build."""
    logger.info("running %s seed=%d", cfg.test_module, cfg.seed)
    get_runner(cfg.sim).test(
        hdl_toplevel_lang="verilog",
        hdl_toplevel=cfg.design,
        waves=cfg.waves,
        build_dir=str(cfg.build_dir),
        test_module=cfg.test_module,
        test_filter=cfg.testcase,
        seed=cfg.seed,
        log_file=str(cfg.test_log_file),
        test_args=cfg.test_args,
        plusargs=cfg.plusargs,
        extra_env=cfg.extra_env,
        test_dir=str(cfg.test_dir),
        results_xml=str(cfg.results_xml) if cfg.results_xml else None,
    )


# === Pytest Entrypoint ===


def test_framework() -> None:
    """Build and/or test according to the in-process context."""
    ctx = _ctx()
    cmd = str(ctx.get("cmd", "both")).lower()
    bcfg = _make_build_cfg(ctx)

    if cmd in {"both", "build"}:
        run_build(bcfg)
    elif not bcfg.build_dir.exists():
        raise RuntimeError(
            f"[dv] build dir missing: {bcfg.build_dir}. Run with --cmd build first."
        )

    if cmd in {"both", "test"}:
        run_test(_make_test_cfg(ctx))


# === Per-seed Runs ===


def _run_seed(seed: int, test_dir: Path, ctx_base: dict) -> int:
    """Run the framework for one seed; 0 if the result matches --expect."""
    ctx = {**ctx_base, "seed": seed, "test_dir": str(test_dir)}
    test_dir.mkdir(parents=True, exist_ok=True)
    _CTX.value = ctx

    # pytest imports this file by path; share the context with that import
    sys.modules.setdefault("axivip.tools.dv", sys.modules[__name__])

    t0 = time.time()
    framework_rc = pytest.main([*DEFAULT_PYTEST_OPTS, DEFAULT_FRAMEWORK])
    status = "PASS" if framework_rc == 0 else "FAIL"
    elapsed = time.time() - t0
    expect = str(ctx.get("expect", "PASS")).upper()

    replay_argv = _strip_seed_args(list(ctx.get("orig_argv", [])))
    replay_cmd = _pretty(["dv", *replay_argv, "--seeds", str(seed)])
    utils.save_json(
        test_dir / "manifest.json",
        {
            "status": status,
            "expect": expect,
            "seed": seed,
            "duration_s": round(elapsed, 3),
            "replay_cmd": replay_cmd,
            "build_dir": str(_build_dir_for_ctx(ctx)),
            "plusargs": BenchKnobs.from_ctx(ctx).plusargs() + list(ctx["plusargs"]),
        },
    )

    met = status == expect
    label = f"{status} ({'EXPECTED' if met else 'UNEXPECTED'})"
    print(f"{(utils.green if met else utils.red)(label)} {elapsed:.2f}s: {replay_cmd}")
    return 0 if met else 1


# === Main ===


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``dv``; 0 if every seed met its expectation."""
    orig_argv = list(sys.argv[1:] if argv is None else argv)
    args = parse_args(argv)
    bus = validate_args(args)
    utils.configure_logger(args.verbosity)

    ctx_base: dict = {
        "orig_argv": orig_argv,
        "cmd": args.cmd,
        "sim": args.sim,
        "outdir": args.outdir,
        "verbosity": args.verbosity,
        "waves": args.waves == "1",
        "design": args.design,
        "build_force": bool(args.build_force),
        "user_build_args": list(args.build_args),
        "bus": bus.model_dump(),
        "write_policy": args.write_policy,
        "write_completion": args.write_completion,
        "reuse_policy": args.reuse_policy,
        "check_en": args.check_en == "1",
        "coverage_en": args.coverage == "1",
        "test": args.test,
        "testcase": args.testcase,
        "plusargs": list(args.plusargs),
        "expect": args.expect,
    }
    tests_root = (PROJ_DIR / args.outdir / DEFAULT_TESTS_SUBDIR).resolve()
    build_name = _build_dir_for_ctx(ctx_base).name

    if args.cmd == "build":
        return _run_seed(0, tests_root / f"{build_name}.build_only", ctx_base)

    rc = 0
    for idx, seed in enumerate(_derive_seeds(args)):
        # First seed builds; the rest reuse it
        cmd = "test" if args.cmd == "both" and idx > 0 else args.cmd
        test_dir = tests_root / f"{build_name}.{args.test}.{seed}"
        rc |= _run_seed(seed, test_dir, {**ctx_base, "cmd": cmd})
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
