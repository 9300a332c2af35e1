from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..integer.errors import NoPlanError, SolverError
from ..machine import Machine

__all__ = ["NoPlanError", "Solver", "SolverConfig", "SolverError"]


@dataclass
class SolverConfig:
    max_assignments: int | None = 5_000_000
    bound_passes: int = 2
    verify: bool = True
    seed_caps: bool = True

    @staticmethod
    def from_dict(params: dict | None) -> "SolverConfig":
        params = dict(params or {})
        unknown = set(params) - {"max_assignments", "bound_passes", "verify", "seed_caps"}
        if unknown:
            raise ValueError(f"Unknown solver settings: {sorted(unknown)}")
        return SolverConfig(**params)


class Solver(Protocol):
    def solve(self, machine: Machine) -> int: ...
