from __future__ import annotations


class ReactorSimError(Exception):
    """Base class for errors raised by the simulator."""


class ConfigurationError(ReactorSimError, ValueError):
    """A reactor description was rejected before any simulation ran."""


class SimulationInvariantError(ReactorSimError, RuntimeError):
    """The classifier reached a stop reason its current branch never asked for."""

    def __init__(self, branch: str, stop_reason: object) -> None:
        super().__init__(f"unexpected stop reason {stop_reason!r} in {branch} branch")
        self.branch = branch
        self.stop_reason = stop_reason
