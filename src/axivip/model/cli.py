# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/axivip/model/cli.py

"""Scenario runner: ``axivip-run SPEC.yaml``.

Loads a YAML scenario, validates it against ``BenchModel``, runs the model
bench until every request has completed, logs a summary and saves
``<name>_observations.json``, ``<name>_anomalies.json`` and
``<name>_scalars.json`` plus an ``<name>_anomalies.txt`` table into the
output directory. Exit status is 1 when any anomaly was reported or the run
timed out.
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Sequence

import yaml
from tabulate import tabulate

from axivip.model.bench import Bench
from axivip.model.config import BenchModel
from axivip.utils import configure_logger, ensure_dir, green, iso_utc, red, save_json

logger = logging.getLogger(__name__)


def get_args(
    argv: Sequence[str] | None = None, description: str = ""
) -> argparse.Namespace:
    """Parse command line arguments for the scenario runner."""
    ap = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("spec", help="YAML/JSON scenario file path")
    ap.add_argument("--outdir", help="output directory (default: next to the spec)")
    ap.add_argument("--results-name", default="results", help="results name prefix")
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug"],
        default="info",
        help="logging level",
    )
    ap.add_argument(
        "--max-ticks", type=int, default=None, help="override the spec's max_ticks"
    )
    return ap.parse_args(argv)


class ScenarioResults:
    """What a run produced."""

    def __init__(self, bench: Bench, finished: bool, elapsed_s: float) -> None:
        self.finished = finished
        self.ticks = bench.sim.tick
        self.elapsed_s = round(elapsed_s, 6)
        self.completed_writes = bench.write_driver.completed
        self.completed_reads = bench.read_driver.completed
        self.orphan_responses = (
            bench.write_monitor.orphan_count + bench.read_monitor.orphan_count
        )
        for key, value in bench.scoreboard.summary().items():
            setattr(self, key, value)
        for key, value in bench.anomalies.counts().items():
            setattr(self, key.lower(), value)
        self.timestamp = iso_utc()
        self._observations = [o.to_dict() for o in bench.scoreboard.observations]
        self._anomalies = [a.to_dict() for a in bench.anomalies]

    @property
    def passed(self) -> bool:
        return self.finished and not self._anomalies

    def scalars_to_dict(self) -> dict[str, int | float | str | bool]:
        """Scalar attributes only, excluding private ones."""
        result: dict[str, int | float | str | bool] = {}
        for key, value in vars(self).items():
            if key.startswith("_"):
                continue
            if isinstance(value, (int, float, str, bool)):
                result[key] = value
        return result

    def scalars_to_str(self) -> str:
        return json.dumps(self.scalars_to_dict(), indent=2)

    def anomaly_table(self) -> str:
        """Every reported anomaly as a github-style table."""
        rows = [
            [a["kind"], a["tick"], a["source"], a["message"]] for a in self._anomalies
        ]
        headers = ["Kind", "Tick", "Source", "Message"]
        return tabulate(rows, headers=headers, tablefmt="github")

    def save(self, outdir: Path, name: str) -> None:
        """Write observations, anomalies and scalars as JSON, plus the anomaly table."""
        save_json(outdir / f"{name}_observations.json", self._observations)
        save_json(outdir / f"{name}_anomalies.json", self._anomalies)
        save_json(outdir / f"{name}_scalars.json", self.scalars_to_dict())
        path = outdir / f"{name}_anomalies.txt"
        with open(path, "w", encoding="utf-8") as f:
            print(self.anomaly_table(), file=f)
        logger.info("Saved table: %s", path)


class ScenarioRunner:  # pylint: disable=too-many-instance-attributes
    """Orchestrates one scenario from spec file to saved results."""

    def __init__(self) -> None:
        self.args: argparse.Namespace | None = None
        self.outdir: Path | None = None
        self.spec: dict = {}
        self.model: BenchModel | None = None
        self.bench: Bench | None = None
        self.results: ScenarioResults | None = None

    def run(self, argv: Sequence[str] | None = None) -> int:
        """Execute the complete workflow; returns the process exit status."""
        self.get_cli(argv)
        self.get_spec()
        self.get_model()
        self.log_model()
        self.get_bench()
        self.get_results()
        self.log_results()
        self.save_results()
        return self.handle_results()

    def get_cli(self, argv: Sequence[str] | None = None) -> None:
        """Parse arguments, set up logging and the output directory."""
        self.args = get_args(argv, "Run a scenario against the axivip model bench")
        spec_path = Path(self.args.spec)
        outdir = self.args.outdir or spec_path.parent / spec_path.stem
        self.outdir = ensure_dir(outdir, True)
        configure_logger(
            self.args.verbosity, self.outdir / f"{self.args.results_name}.log"
        )

    def get_spec(self) -> None:
        """Load the YAML scenario file."""
        assert self.args is not None, "Must call get_cli() first"
        with open(self.args.spec, encoding="utf-8") as f:
            self.spec = yaml.safe_load(f) or {}

    def get_model(self) -> None:
        """Validate the scenario against the pydantic schema."""
        assert self.args is not None, "Must call get_cli() first"
        self.model = BenchModel.model_validate(self.spec)
        if self.args.max_ticks is not None:
            self.model = self.model.model_copy(
                update={"max_ticks": self.args.max_ticks}
            )

    def log_model(self) -> None:
        assert self.model is not None, "Must call get_model() first"
        logger.info(self.model)

    def get_bench(self) -> None:
        """Build the bench and queue the stimulus."""
        assert self.model is not None, "Must call get_model() first"
        self.bench = Bench(self.model)
        n = self.bench.load()
        logger.info("queued %d requests", n)

    def get_results(self) -> None:
        """Reset the bench, run it to completion and collect results."""
        assert self.bench is not None, "Must call get_bench() first"
        start = time.time()
        self.bench.sim.pulse_reset(2)
        finished = self.bench.run()
        if not finished:
            logger.error(red(f"timed out after {self.bench.model.max_ticks} ticks"))
        self.results = ScenarioResults(self.bench, finished, time.time() - start)

    def log_results(self) -> None:
        assert self.results is not None, "Must call get_results() first"
        assert self.args is not None, "Must call get_cli() first"
        logger.info("%s:\n%s", self.args.results_name, self.results.scalars_to_str())
        if not self.results.passed:
            logger.info("anomalies:\n%s", self.results.anomaly_table())

    def save_results(self) -> None:
        assert self.results is not None, "Must call get_results() first"
        assert self.outdir is not None, "Must call get_cli() first"
        assert self.args is not None, "Must call get_cli() first"
        self.results.save(self.outdir, self.args.results_name)

    def handle_results(self) -> int:
        """Log the verdict and return the exit status."""
        assert self.results is not None, "Must call get_results() first"
        if self.results.passed:
            logger.info(green("PASS"))
            return 0
        logger.error(red("FAIL"))
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``axivip-run``."""
    return ScenarioRunner().run(argv)


if __name__ == "__main__":
    raise SystemExit(main())
