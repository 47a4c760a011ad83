"""Time-indexed trajectories and polynomial trajectory synthesis."""
import numpy as np
from scipy.linalg import solve
from .exceptions import ConfigurationError
from .utils import ensure_2d_array


class Trajectory:
    """Trajectory with positions, velocities, accelerations and misc data.

    The misc channel holds additional per-sample quantities, e.g., gains
    that should be learned alongside the trajectory.

    Parameters
    ----------
    ts : array-like, shape (n_steps,)
        Time of each step.

    ys : array-like, shape (n_steps, n_dims)
        Position at each step.

    yds : array-like, shape (n_steps, n_dims), optional (default: None)
        Velocity at each step. Estimated from ys by finite differences if
        not given.

    ydds : array-like, shape (n_steps, n_dims), optional (default: None)
        Acceleration at each step. Estimated from yds by finite differences
        if not given.

    misc : array-like, shape (n_steps, n_dims_misc), optional (default: None)
        Additional per-sample data.

    Raises
    ------
    ConfigurationError
        If the shapes of the arguments are not consistent.
    """
    def __init__(self, ts, ys, yds=None, ydds=None, misc=None):
        self.ts = np.asarray(ts, dtype=float).ravel()
        n_steps = len(self.ts)
        if n_steps < 2:
            raise ConfigurationError("Trajectory needs at least two steps.")

        self.ys = ensure_2d_array(ys, "ys")
        n_dims = self.ys.shape[1]
        self._check_n_steps(self.ys, "ys")

        if yds is None:
            yds = _time_derivative(self.ts, self.ys)
        self.yds = ensure_2d_array(yds, "yds", n_dims)
        self._check_n_steps(self.yds, "yds")

        if ydds is None:
            ydds = _time_derivative(self.ts, self.yds)
        self.ydds = ensure_2d_array(ydds, "ydds", n_dims)
        self._check_n_steps(self.ydds, "ydds")

        self._misc = None
        self.misc = misc

    def _check_n_steps(self, values, var_name):
        if values.shape[0] != len(self.ts):
            raise ConfigurationError(
                f"{var_name} has {values.shape[0]} rows, expected "
                f"{len(self.ts)} (one per time step).")

    @property
    def length(self):
        """Number of time steps."""
        return len(self.ts)

    @property
    def n_dims(self):
        """Number of position dimensions."""
        return self.ys.shape[1]

    @property
    def n_dims_misc(self):
        """Number of misc columns (0 if there is no misc data)."""
        if self._misc is None:
            return 0
        return self._misc.shape[1]

    @property
    def duration(self):
        """Time between first and last step."""
        return self.ts[-1] - self.ts[0]

    def get_misc(self):
        """Get misc data.

        Returns
        -------
        misc : array, shape (n_steps, n_dims_misc) or None
            Additional per-sample data.
        """
        return self._misc

    def set_misc(self, misc):
        """Set misc data.

        Parameters
        ----------
        misc : array-like, shape (n_steps, n_dims_misc) or None
            Additional per-sample data. None removes the misc data.
        """
        if misc is None:
            self._misc = None
            return
        misc = ensure_2d_array(misc, "misc")
        self._check_n_steps(misc, "misc")
        self._misc = misc

    misc = property(get_misc, set_misc)


def _time_derivative(ts, values):
    return np.gradient(values, ts, axis=0)


def _quintic_coefficients(duration, y_from, yd_from, ydd_from,
                          y_to, yd_to, ydd_to):
    """Coefficients a_0..a_5 of y(t) = sum_k a_k t^k for t in [0, duration]."""
    d = duration
    M = np.array([
        [1.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 2.0, 0.0, 0.0, 0.0],
        [1.0, d, d ** 2, d ** 3, d ** 4, d ** 5],
        [0.0, 1.0, 2.0 * d, 3.0 * d ** 2, 4.0 * d ** 3, 5.0 * d ** 4],
        [0.0, 0.0, 2.0, 6.0 * d, 12.0 * d ** 2, 20.0 * d ** 3],
    ])
    B = np.vstack((y_from, yd_from, ydd_from, y_to, yd_to, ydd_to))
    return solve(M, B)  # 6 x n_dims


def _evaluate_quintic(coefficients, t):
    t = t[:, np.newaxis]
    a = coefficients
    ys = a[0] + a[1] * t + a[2] * t ** 2 + a[3] * t ** 3 + a[4] * t ** 4 \
        + a[5] * t ** 5
    yds = a[1] + 2.0 * a[2] * t + 3.0 * a[3] * t ** 2 + 4.0 * a[4] * t ** 3 \
        + 5.0 * a[5] * t ** 4
    ydds = 2.0 * a[2] + 6.0 * a[3] * t + 12.0 * a[4] * t ** 2 \
        + 20.0 * a[5] * t ** 3
    return ys, yds, ydds


def generate_polynomial_trajectory(
        ts, y_from, yd_from, ydd_from, y_to, yd_to, ydd_to):
    """Generate a fifth order polynomial trajectory.  # 五次多项式轨迹

    Position, velocity and acceleration at the first and last time step
    are matched exactly.

    Parameters
    ----------
    ts : array-like, shape (n_steps,)
        Time of each step.

    y_from, yd_from, ydd_from : array-like, shape (n_dims,)
        Position, velocity and acceleration at ts[0].

    y_to, yd_to, ydd_to : array-like, shape (n_dims,)
        Position, velocity and acceleration at ts[-1].

    Returns
    -------
    trajectory : Trajectory
        Polynomial trajectory.
    """
    ts = np.asarray(ts, dtype=float)
    coefficients = _quintic_coefficients(
        ts[-1] - ts[0], y_from, yd_from, ydd_from, y_to, yd_to, ydd_to)
    ys, yds, ydds = _evaluate_quintic(coefficients, ts - ts[0])
    return Trajectory(ts, ys, yds, ydds)


def generate_polynomial_trajectory_through_viapoint(
        ts, y_from, y_yd_ydd_viapoint, viapoint_time, y_to):
    """Generate a trajectory that passes through a viapoint.

    The trajectory consists of two fifth order polynomials. It starts and
    ends at rest (zero velocity and acceleration) and has the given
    position, velocity and acceleration at the viapoint time.

    Parameters
    ----------
    ts : array-like, shape (n_steps,)
        Time of each step.

    y_from : array-like, shape (n_dims,)
        Start position.

    y_yd_ydd_viapoint : array-like, shape (3 * n_dims,)
        Position, velocity and acceleration at the viapoint (concatenated).

    viapoint_time : float
        Time at which the viapoint is passed.

    y_to : array-like, shape (n_dims,)
        Final position.

    Returns
    -------
    trajectory : Trajectory
        Trajectory through the viapoint.

    Raises
    ------
    ConfigurationError
        If the viapoint time is not within the time range or dimensions
        do not match.
    """
    ts = np.asarray(ts, dtype=float)
    y_from = np.asarray(y_from, dtype=float)
    y_to = np.asarray(y_to, dtype=float)
    n_dims = len(y_from)
    y_yd_ydd_viapoint = np.asarray(y_yd_ydd_viapoint, dtype=float)
    if len(y_yd_ydd_viapoint) != 3 * n_dims or len(y_to) != n_dims:
        raise ConfigurationError(
            f"Expected viapoint with {3 * n_dims} and goal with {n_dims} "
            f"elements, got {len(y_yd_ydd_viapoint)} and {len(y_to)}.")
    if not ts[0] < viapoint_time < ts[-1]:
        raise ConfigurationError(
            f"Viapoint time {viapoint_time} must be between {ts[0]} and "
            f"{ts[-1]}.")

    y_via = y_yd_ydd_viapoint[:n_dims]
    yd_via = y_yd_ydd_viapoint[n_dims:2 * n_dims]
    ydd_via = y_yd_ydd_viapoint[2 * n_dims:]
    zeros = np.zeros(n_dims)

    before = ts < viapoint_time
    after = ~before

    coefficients = _quintic_coefficients(
        viapoint_time - ts[0], y_from, zeros, zeros, y_via, yd_via, ydd_via)
    ys1, yds1, ydds1 = _evaluate_quintic(coefficients, ts[before] - ts[0])

    coefficients = _quintic_coefficients(
        ts[-1] - viapoint_time, y_via, yd_via, ydd_via, y_to, zeros, zeros)
    ys2, yds2, ydds2 = _evaluate_quintic(
        coefficients, ts[after] - viapoint_time)

    return Trajectory(ts, np.vstack((ys1, ys2)), np.vstack((yds1, yds2)),
                      np.vstack((ydds1, ydds2)))
