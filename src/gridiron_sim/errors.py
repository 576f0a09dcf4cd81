from __future__ import annotations


class SimulationError(Exception):
    """Base class for simulation core failures."""


class ConfigurationError(SimulationError):
    """Raised when a required collaborator or constant table is missing."""


class ScheduleError(SimulationError):
    """Raised when a schedule or pairing has an invalid shape."""
