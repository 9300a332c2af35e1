from __future__ import annotations

import logging
import multiprocessing as mp
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import asdict, dataclass

from .machine import Machine
from .solvers import JoltageExact, LightsMinWeight, SolverConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineResult:
    index: int
    presses: int
    time_ms: float


def make_solver(part: int, config: SolverConfig | None = None):
    if part == 1:
        return LightsMinWeight(config)
    if part == 2:
        return JoltageExact(config)
    raise ValueError(f"Unknown part: {part}")


def make_batches(machines: list[Machine], batch_size: int):
    for lo in range(0, len(machines), batch_size):
        hi = min(lo + batch_size, len(machines))
        yield {
            "idx_lo": lo,
            "machines": [
                (m.lights, m.buttons, m.joltages, m.width) for m in machines[lo:hi]
            ],
        }


def _run_batch(job) -> list[MachineResult]:
    """Solve one batch of machines; runs inside a worker process."""
    solver = make_solver(job["part"], SolverConfig(**job["config"]))
    rows = []
    for offset, fields in enumerate(job["machines"]):
        machine = Machine(*fields)
        start_time = time.perf_counter()
        presses = solver.solve(machine)
        time_ms = (time.perf_counter() - start_time) * 1000
        rows.append(MachineResult(job["idx_lo"] + offset, int(presses), time_ms))
    return rows


def solve_all(
    machines: list[Machine],
    part: int = 2,
    config: SolverConfig | None = None,
    workers: int = 1,
    batch_size: int = 16,
) -> list[MachineResult]:
    """Solve every machine and return the results in input order.

    Machines share nothing, so with workers > 1 batches are spread over a
    process pool and simply collected.
    """
    config = config or SolverConfig()
    jobs = []
    for job in make_batches(machines, batch_size):
        job.update({"part": part, "config": asdict(config)})
        jobs.append(job)

    results: list[MachineResult] = []
    if workers <= 1:
        for job in jobs:
            results.extend(_run_batch(job))
    else:
        ctx = mp.get_context("spawn")
        with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as ex:
            futures = [ex.submit(_run_batch, job) for job in jobs]
            for done, fut in enumerate(as_completed(futures), start=1):
                results.extend(fut.result())
                logger.info("[progress] %d/%d batches", done, len(jobs))

    results.sort(key=lambda r: r.index)
    for r in results:
        logger.debug("machine %d: %d presses (%.1f ms)", r.index, r.presses, r.time_ms)
    return results
