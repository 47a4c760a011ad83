"""Dynamical movement primitive (DMP)."""
from ._base import DMPBase, WeightParametersMixin
from ._canonical_system import canonical_system_alpha, phase
from ._state import StateLayout
from ._dmp import DMP, DMP_STEP_FUNCTIONS
from ._gain_schedules import DMPWithGainSchedules


__all__ = [
    "DMPBase", "WeightParametersMixin", "canonical_system_alpha", "phase",
    "StateLayout", "DMP", "DMP_STEP_FUNCTIONS", "DMPWithGainSchedules"]
