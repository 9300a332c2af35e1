import argparse
import csv
import logging
import os
import sys
import time
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from joltage.evaluation.metrics import total_presses  # noqa: E402
from joltage.machine import parse_machines  # noqa: E402
from joltage.runner import solve_all  # noqa: E402
from joltage.solvers import SolverConfig  # noqa: E402


def load_config(path: str | None) -> dict:
    if path is None:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def main():
    n_cpus = os.cpu_count() or 1

    ap = argparse.ArgumentParser(
        description="Minimum button presses for every machine in a puzzle input"
    )
    ap.add_argument("input", help="Puzzle input, one machine per line")
    ap.add_argument(
        "--config",
        default=str(ROOT / "configs" / "default.yaml"),
    )
    ap.add_argument("--part", type=int, choices=(1, 2), default=None)
    ap.add_argument(
        "--workers", type=int, default=None, help=f"Number of workers (<= {n_cpus})"
    )
    ap.add_argument("--out", default=None, help="Per-machine CSV path")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(message)s")

    cfg = load_config(args.config)
    run_cfg = cfg.get("run", {}) or {}
    part = args.part or int(run_cfg.get("part", 2))
    workers = args.workers or int(run_cfg.get("workers", 1))
    solver_cfg = SolverConfig.from_dict(cfg.get("solver"))

    machines = parse_machines(Path(args.input).read_text(encoding="utf-8"))
    print(f"\nSolving {len(machines):,} machines (part {part}) with {workers} workers...\n")

    start_time = time.time()
    results = solve_all(
        machines,
        part=part,
        config=solver_cfg,
        workers=workers,
        batch_size=int(run_cfg.get("batch_size", 16)),
    )
    elapsed = time.time() - start_time

    if args.out:
        with open(args.out, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["index", "presses", "time_ms"])
            writer.writeheader()
            for r in results:
                writer.writerow(
                    {"index": r.index, "presses": r.presses, "time_ms": r.time_ms}
                )
        print(f"Output: {args.out}")

    print(f"Done in {elapsed:.2f}s")
    print(total_presses(results))


if __name__ == "__main__":
    main()
