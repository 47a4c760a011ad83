"""Tasks that define cost functions for rollouts of movement primitives."""
from ._base import Task
from ._viapoint import TaskViapoint, first_index_at_or_after


__all__ = ["Task", "TaskViapoint", "first_index_at_or_after"]
