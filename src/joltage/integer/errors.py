from __future__ import annotations


class SolverError(Exception):
    """Base class for fatal conditions while solving a machine."""

    pass


class InconsistentSystemError(SolverError):
    """A reduced row reads 0 = c with c != 0."""

    pass


class UnboundedVariableError(SolverError):
    """A free variable has no finite upper bound, so the search cannot terminate."""

    pass


class NoFeasibleAssignmentError(SolverError):
    """No assignment inside the bounds satisfies every constraint."""

    pass


class SearchLimitExceeded(SolverError):
    """The bounded search space is larger than the configured cap."""

    pass


class NoPlanError(SolverError):
    """Raised by a solver when no valid plan exists for the given machine."""

    pass
