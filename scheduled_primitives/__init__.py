"""Movement primitives with gain schedules and tasks for their optimization."""

__version__ = "0.1.0"
