"""Exceptions and warnings raised by scheduled_primitives."""


class ConfigurationError(ValueError):
    """Inconsistent configuration of a primitive, approximator or task.

    Raised before any state is modified, e.g., when dimensionalities of
    demonstration, approximators and primitive do not agree.
    """


class MissingFunctionApproximatorWarning(UserWarning):
    """A function approximator slot is empty and has been skipped."""
