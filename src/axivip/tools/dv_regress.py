# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/tools/dv_regress.py

"""axivip DV: YAML-driven regression runner.

Every job is one ``dv`` invocation. Only the YAML path and the output
directory come from the command line; everything else lives in the file.

YAML Schema:
    defaults:
      args: ["--sim=verilator"]          # prepended to every job

    jobs:
      - name: scenario
        args: ["--testcase=AxivipScenarioTest"]
      - name: random_overlapped
        args: "--testcase=AxivipRandomTest --write-policy=overlapped"

Usage:
    dv-regress [--file=src/axivip/dv/dv_regress.yaml] [--outdir=out_dv]

A PASS/FAIL line with a copy-pasteable command is printed per job and the
same report is saved as ``<outdir>/regress.json``.
"""

from __future__ import annotations

import argparse
import shlex
import subprocess
import sys
import time
from pathlib import Path
from typing import List, Sequence, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from axivip import utils

DEFAULT_OUT_DIR = "out_dv"
DEFAULT_FILE = Path(__file__).resolve().parent.parent / "dv" / "dv_regress.yaml"


def _as_str_list(x: Union[None, str, List[object]]) -> list[str]:
    """A YAML list, or one shell-style string, as a list of arguments."""
    if x is None:
        return []
    if isinstance(x, str):
        return shlex.split(x)
    return [str(t) for t in x]


class JobModel(BaseModel):
    """One ``dv`` run."""

    name: str
    args: List[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def _split(cls, v: Union[None, str, List[object]]) -> list[str]:
        return _as_str_list(v)


class DefaultsModel(BaseModel):
    args: List[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def _split(cls, v: Union[None, str, List[object]]) -> list[str]:
        return _as_str_list(v)


class RegressModel(BaseModel):
    """Whole regression file."""

    defaults: DefaultsModel = Field(default_factory=DefaultsModel)
    jobs: List[JobModel] = Field(min_length=1)

    @field_validator("jobs", mode="before")
    @classmethod
    def _name_jobs(cls, v: object) -> object:
        if isinstance(v, list):
            for idx, j in enumerate(v):
                if isinstance(j, dict) and not j.get("name"):
                    j["name"] = f"job{idx}"
        return v


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="axivip DV YAML regression",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--file", type=Path, default=DEFAULT_FILE, help="regression YAML")
    ap.add_argument("--outdir", default=DEFAULT_OUT_DIR, help="output directory")
    return ap.parse_args(argv)


def load_regress(path: Path) -> RegressModel:
    """Load and validate a regression file."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return RegressModel.model_validate(data or {})


def job_command(model: RegressModel, job: JobModel, outdir: str) -> list[str]:
    """Full ``dv`` command line for one job; job args follow the defaults."""
    return ["dv", *model.defaults.args, *job.args, f"--outdir={outdir}"]


def _pretty_cmd(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(x) for x in cmd)


def run_regress(args: argparse.Namespace) -> int:
    """Run every job in order; 0 if all of them passed."""
    yaml_path = args.file.resolve()
    if not yaml_path.is_file():
        print(f"\n[dv_regress] No file found at {yaml_path}", file=sys.stderr)
        return 1
    print(f"\n[dv_regress] spec: {yaml_path}")
    model = load_regress(yaml_path)

    report: list[dict[str, object]] = []
    for job in model.jobs:
        cmd = job_command(model, job, args.outdir)
        cmd_str = _pretty_cmd(cmd)
        print(f"\n[dv_regress] job: {job.name}")
        print(f"[dv_regress] cmd: {cmd_str}\n")
        t0 = time.time()
        rc = subprocess.run(cmd, check=False).returncode
        report.append(
            {
                "name": job.name,
                "status": "PASS" if rc == 0 else "FAIL",
                "duration_s": round(time.time() - t0, 3),
                "cmd": cmd_str,
            }
        )

    print("\n[dv_regress] JOBS REPORT\n")
    for r in report:
        color = utils.green if r["status"] == "PASS" else utils.red
        print(f"{color(str(r['status']))}: {r['cmd']}")
    outdir = utils.ensure_dir(args.outdir, True)
    path = utils.save_json(outdir / "regress.json", report)
    print(f"\n[dv_regress] report saved to {utils.yellow(str(path))}")

    if any(r["status"] != "PASS" for r in report):
        print(f"\n[dv_regress] SUMMARY: {utils.red('FAIL')}")
        return 1
    print(f"\n[dv_regress] SUMMARY: {utils.green('PASS')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``dv-regress``."""
    return run_regress(parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
