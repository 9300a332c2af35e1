from joltage.solvers.base import NoPlanError, Solver, SolverConfig, SolverError
from joltage.solvers.joltage_exact import JoltageExact
from joltage.solvers.lights_minweight import LightsMinWeight
