import copy
import os
import numpy as np
from ..exceptions import ConfigurationError
from ..function_approximators import FunctionApproximatorRBFN
from ..trajectory import Trajectory
from ..utils import check_1d_array_length, ensure_1d_array
from ._base import DMPBase, WeightParametersMixin
from ._canonical_system import canonical_system_alpha, phase, phase_derivative


def dmp_step_euler(dt, x, x_updated, xd_updated, differential_equation):
    """Integrate DMP state for one step with Euler integration.

    Parameters
    ----------
    dt : float
        Time step.

    x : array, shape (n_state_dims,)
        Current state.

    x_updated : array, shape (n_state_dims,)
        Next state. Will be modified.

    xd_updated : array, shape (n_state_dims,)
        Time derivative of the next state. Will be modified.

    differential_equation : callable
        Computes the time derivative of a state: f(x, xd=None) -> xd.
    """
    differential_equation(x, xd_updated)
    x_updated[:] = x + dt * xd_updated
    differential_equation(x_updated, xd_updated)


def dmp_step_rk4(dt, x, x_updated, xd_updated, differential_equation):
    """Integrate DMP state for one step with 4th order Runge-Kutta.

    See :func:`dmp_step_euler` for parameters.
    """
    k1 = differential_equation(x)
    k2 = differential_equation(x + 0.5 * dt * k1)
    k3 = differential_equation(x + 0.5 * dt * k2)
    k4 = differential_equation(x + dt * k3)
    x_updated[:] = x + dt / 6.0 * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
    differential_equation(x_updated, xd_updated)


DMP_STEP_FUNCTIONS = {
    "euler": dmp_step_euler,
    "rk4": dmp_step_rk4,
}
DEFAULT_DMP_STEP_FUNCTION = "rk4"

FORCING_TERM_SCALINGS = ("none", "amplitude")


class DMP(WeightParametersMixin, DMPBase):
    r"""Dynamical movement primitive (DMP).

    The state of the DMP consists of position y, scaled velocity z, goal g
    and phase s (see :class:`StateLayout`). With :math:`\tau` being the
    execution time, the system evolves according to

    .. math::

        \tau \dot{y} &= z \\
        \tau \dot{z} &= \alpha_y (\beta_y (g - y) - z) + f(s) \\
        \tau \dot{g} &= \alpha_g (y_{attr} - g) \\
        \tau \dot{s} &= -\alpha_s s

    where the forcing term :math:`f(s) = s \cdot \text{fa}(s)` is gated by
    the phase and fa is one function approximator per dimension. Without
    goal system (alpha_goal=None), g is constant and equal to the
    attractor :math:`y_{attr}`.

    Parameters
    ----------
    n_dims : int
        State space dimensions.  # 状态空间维数

    execution_time : float, optional (default: 1)
        Execution time of the DMP.

    y_init : array-like, shape (n_dims,), optional (default: zeros)
        Initial position.

    y_attr : array-like, shape (n_dims,), optional (default: ones)
        Attractor (goal) position.

    function_approximators : list, optional (default: RBFNs)
        One function approximator per dimension for the forcing term. Will
        be cloned.

    alpha_spring_damper : float, optional (default: 20)
        Parameter of the transformation system. beta is alpha / 4
        (critical damping).

    alpha_goal : float, optional (default: None)
        Parameter of the goal system. The goal is constant if None.

    final_phase : float, optional (default: 0.01)
        Value of the phase at the end of the execution.

    forcing_term_scaling : str, optional (default: 'none')
        Scaling of the forcing term: 'none' or 'amplitude', in which case
        it is multiplied by y_attr - y_init.

    step_function : str, optional (default: 'rk4')
        Integration function used in integrate_step: 'euler' or 'rk4'.

    Attributes
    ----------
    execution_time_ : float
        Execution time of the DMP. Set from the demonstration by train().
    """
    def __init__(self, n_dims, execution_time=1.0, y_init=None, y_attr=None,
                 function_approximators=None, alpha_spring_damper=20.0,
                 alpha_goal=None, final_phase=0.01,
                 forcing_term_scaling="none",
                 step_function=DEFAULT_DMP_STEP_FUNCTION):
        super(DMP, self).__init__(n_dims)

        if execution_time <= 0.0:
            raise ValueError("Execution time must be > 0!")
        self.execution_time_ = execution_time

        if y_init is None:
            y_init = np.zeros(n_dims)
        if y_attr is None:
            y_attr = np.ones(n_dims)
        self.y_init = ensure_1d_array(y_init, n_dims, "y_init")
        self.y_attr = ensure_1d_array(y_attr, n_dims, "y_attr")

        if function_approximators is None:
            function_approximators = [
                FunctionApproximatorRBFN() for _ in range(n_dims)]
        check_1d_array_length(
            function_approximators, "function_approximators", n_dims)
        if any(fa is None for fa in function_approximators):
            raise ConfigurationError(
                "Each dimension of the DMP requires a function approximator.")
        self.function_approximators = [
            fa.clone() for fa in function_approximators]

        self.alpha_spring_damper = alpha_spring_damper
        self.beta_spring_damper = alpha_spring_damper / 4.0
        self.alpha_goal = alpha_goal
        self.final_phase = final_phase
        self.alpha_phase = canonical_system_alpha(
            final_phase, self.execution_time_, 0.0)

        if forcing_term_scaling not in FORCING_TERM_SCALINGS:
            raise ValueError(
                f"Forcing term scaling must be in {FORCING_TERM_SCALINGS}.")
        self.forcing_term_scaling = forcing_term_scaling

        if step_function not in DMP_STEP_FUNCTIONS:
            raise ValueError(
                f"Step function must be in {list(DMP_STEP_FUNCTIONS.keys())}.")
        self.step_function = step_function

        # 预分配: buffers for the forcing term of a single state
        self._fa_output_one = np.empty((1, 1))
        self._forcing_term_one = np.empty(n_dims)

    def configure(self, y_init=None, y_attr=None, execution_time=None):
        """Set meta parameters.  # 设置元参数

        Parameters
        ----------
        y_init : array-like, shape (n_dims,), optional
            Initial position.

        y_attr : array-like, shape (n_dims,), optional
            Attractor position.

        execution_time : float, optional
            Execution time.
        """
        if y_init is not None:
            self.y_init = ensure_1d_array(y_init, self.n_dims, "y_init")
        if y_attr is not None:
            self.y_attr = ensure_1d_array(y_attr, self.n_dims, "y_attr")
        if execution_time is not None:
            if execution_time <= 0.0:
                raise ValueError("Execution time must be > 0!")
            self.execution_time_ = execution_time

    def _forcing_term_scale(self):
        if self.forcing_term_scaling == "amplitude":
            amplitude = self.y_attr - self.y_init
            return np.where(np.abs(amplitude) < 1e-10, 1.0, amplitude)
        return 1.0

    def forcing_terms(self, phases):
        """Compute forcing terms for a batch of phase values.

        Dimensions with untrained function approximators do not contribute.

        Parameters
        ----------
        phases : array, shape (n_steps, 1)
            Phase values.

        Returns
        -------
        forcing_terms : array, shape (n_steps, n_dims)
            Forcing terms, i.e., gated and scaled function approximator
            outputs.

        fa_outputs : array, shape (n_steps, n_dims)
            Function approximator outputs.
        """
        fa_outputs = np.zeros((phases.shape[0], self.n_dims))
        for d, fa in enumerate(self.function_approximators):
            if fa.is_trained():
                fa_outputs[:, d] = fa.predict(phases)[:, 0]
        forcing_terms = fa_outputs * phases * self._forcing_term_scale()
        return forcing_terms, fa_outputs

    def _forcing_term_for_state(self, x):
        s = self.layout.phase(x)
        forcing_term = self._forcing_term_one
        for d, fa in enumerate(self.function_approximators):
            if fa.is_trained():
                fa.predict(s, out=self._fa_output_one)
                forcing_term[d] = self._fa_output_one[0, 0]
            else:
                forcing_term[d] = 0.0
        forcing_term *= s[0, 0]
        forcing_term *= self._forcing_term_scale()
        return forcing_term

    def differential_equation(self, x, xd=None):
        """Time derivative of a DMP state.

        Parameters
        ----------
        x : array, shape (n_state_dims,)
            State.

        xd : array, shape (n_state_dims,), optional (default: None)
            Output array. Will be modified.

        Returns
        -------
        xd : array, shape (n_state_dims,)
            Time derivative of the state.
        """
        if xd is None:
            xd = np.empty_like(x)
        layout = self.layout
        tau = self.execution_time_
        y, z, g = layout.y(x), layout.z(x), layout.goal(x)
        s = x[layout.phase_index]

        layout.y(xd)[:] = z / tau
        layout.z(xd)[:] = (
            self.alpha_spring_damper * (self.beta_spring_damper * (g - y) - z)
            + self._forcing_term_for_state(x)) / tau
        if self.alpha_goal is None:
            layout.goal(xd)[:] = 0.0
        else:
            layout.goal(xd)[:] = self.alpha_goal * (self.y_attr - g) / tau
        xd[layout.phase_index] = phase_derivative(s, self.alpha_phase, tau)
        return xd

    def integrate_start(self, x=None, xd=None):
        """Initial state of the DMP and its time derivative.

        Parameters
        ----------
        x : array, shape (n_state_dims,), optional (default: None)
            Output array for the state. Will be modified.

        xd : array, shape (n_state_dims,), optional (default: None)
            Output array for the time derivative. Will be modified.

        Returns
        -------
        x : array, shape (n_state_dims,)
            Initial state.

        xd : array, shape (n_state_dims,)
            Time derivative of the initial state.
        """
        if x is None:
            x = np.empty(self.n_state_dims)
        layout = self.layout
        layout.y(x)[:] = self.y_init
        layout.z(x)[:] = 0.0
        if self.alpha_goal is None:
            layout.goal(x)[:] = self.y_attr
        else:
            layout.goal(x)[:] = self.y_init
        x[layout.phase_index] = 1.0
        xd = self.differential_equation(x, xd)
        return x, xd

    def integrate_step(self, dt, x, x_updated=None, xd_updated=None):
        """Integrate DMP state for one step.  # DMP 单步积分

        Parameters
        ----------
        dt : float
            Time step (> 0).

        x : array, shape (n_state_dims,)
            Current state.

        x_updated : array, shape (n_state_dims,), optional (default: None)
            Output array for the next state. Will be modified.

        xd_updated : array, shape (n_state_dims,), optional (default: None)
            Output array for the time derivative. Will be modified.

        Returns
        -------
        x_updated : array, shape (n_state_dims,)
            Next state.

        xd_updated : array, shape (n_state_dims,)
            Time derivative of the next state.

        Raises
        ------
        ValueError
            If dt is not positive.

        ConfigurationError
            If the state has the wrong length.
        """
        if dt <= 0.0:
            raise ValueError("Integration time step must be > 0!")
        check_1d_array_length(x, "x", self.n_state_dims)
        if x_updated is None:
            x_updated = np.empty(self.n_state_dims)
        if xd_updated is None:
            xd_updated = np.empty(self.n_state_dims)
        DMP_STEP_FUNCTIONS[self.step_function](
            dt, x, x_updated, xd_updated, self.differential_equation)
        return x_updated, xd_updated

    def _goal_trajectory(self, ts):
        if self.alpha_goal is None:
            return np.tile(self.y_attr, (len(ts), 1))
        decay = np.exp(-self.alpha_goal * ts / self.execution_time_)
        return self.y_attr + (self.y_init - self.y_attr) * decay[:, np.newaxis]

    def analytical_solution(self, ts):
        """Compute states of the DMP for the given time points.

        Phase and goal are computed in closed form. The spring-damper system
        is integrated with Euler integration along the time points.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points, starting at 0.

        Returns
        -------
        xs : array, shape (n_steps, n_state_dims)
            States.

        xds : array, shape (n_steps, n_state_dims)
            Time derivatives of states.

        forcing_terms : array, shape (n_steps, n_dims)
            Forcing terms.

        fa_outputs : array, shape (n_steps, n_dims)
            Outputs of the function approximators.
        """
        ts = np.asarray(ts, dtype=float).ravel()
        layout = self.layout
        tau = self.execution_time_
        alpha = self.alpha_spring_damper
        beta = self.beta_spring_damper

        xs = np.empty((len(ts), self.n_state_dims))
        xds = np.empty_like(xs)

        xs[:, layout.phase_index] = phase(ts, self.alpha_phase, tau, 0.0)
        xds[:, layout.phase_index] = phase_derivative(
            xs[:, layout.phase_index], self.alpha_phase, tau)
        goals = self._goal_trajectory(ts)
        layout.goal(xs)[:, :] = goals
        if self.alpha_goal is None:
            layout.goal(xds)[:, :] = 0.0
        else:
            layout.goal(xds)[:, :] = self.alpha_goal * (self.y_attr - goals) / tau

        forcing_terms, fa_outputs = self.forcing_terms(layout.phase(xs))

        y = np.copy(self.y_init)
        z = np.zeros(self.n_dims)
        for i in range(len(ts)):
            if i > 0:
                dt = ts[i] - ts[i - 1]
                y = y + dt * layout.y(xds[i - 1])
                z = z + dt * layout.z(xds[i - 1])
            layout.y(xs[i])[:] = y
            layout.z(xs[i])[:] = z
            layout.y(xds[i])[:] = z / tau
            layout.z(xds[i])[:] = (
                alpha * (beta * (goals[i] - y) - z) + forcing_terms[i]) / tau

        return xs, xds, forcing_terms, fa_outputs

    def states_as_trajectory(self, ts, xs, xds):
        """Convert DMP states to a trajectory.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points.

        xs : array, shape (n_steps, n_state_dims)
            States.

        xds : array, shape (n_steps, n_state_dims)
            Time derivatives of states.

        Returns
        -------
        trajectory : Trajectory
            Positions, velocities and accelerations.
        """
        tau = self.execution_time_
        layout = self.layout
        return Trajectory(ts, np.copy(layout.y(xs)), layout.z(xs) / tau,
                          layout.z(xds) / tau)

    def analytical_trajectory(self, ts):
        """Compute trajectory of the DMP for the given time points.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points, starting at 0.

        Returns
        -------
        trajectory : Trajectory
            Trajectory of the DMP.
        """
        xs, xds, _, _ = self.analytical_solution(ts)
        return self.states_as_trajectory(ts, xs, xds)

    def rollout(self, ts):
        """Compute cost variables of a rollout for the given time points.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points, starting at 0.

        Returns
        -------
        cost_vars : array, shape (n_steps, 1 + 4 * n_dims)
            Each row contains t, y, yd, ydd and the forcing term.
        """
        ts = np.asarray(ts, dtype=float).ravel()
        xs, xds, forcing_terms, _ = self.analytical_solution(ts)
        trajectory = self.states_as_trajectory(ts, xs, xds)
        return np.column_stack((ts, trajectory.ys, trajectory.yds,
                                trajectory.ydds, forcing_terms))

    def train(self, trajectory, save_directory=None, overwrite=False):
        """Imitate demonstration.  # 模仿示范。

        Execution time, initial and attractor position are taken from the
        demonstration. Target forcing terms are computed from the
        demonstrated positions, velocities and accelerations and each
        function approximator is trained (or trained again) on them.

        Parameters
        ----------
        trajectory : Trajectory
            Demonstration. Time should start at 0.

        save_directory : str, optional (default: None)
            Directory to which the function approximators will be saved,
            one subdirectory 'dim<d>' per dimension.

        overwrite : bool, optional (default: False)
            Overwrite existing files.

        Raises
        ------
        ConfigurationError
            If the dimensions of the demonstration do not match.
        """
        if trajectory.n_dims != self.n_dims:
            raise ConfigurationError(
                f"Demonstration has {trajectory.n_dims} dimensions, DMP "
                f"has {self.n_dims}.")
        ts = trajectory.ts
        if trajectory.duration <= 0.0:
            raise ValueError("Demonstration must have a positive duration!")

        self.execution_time_ = trajectory.duration
        self.y_init = np.copy(trajectory.ys[0])
        self.y_attr = np.copy(trajectory.ys[-1])
        tau = self.execution_time_

        # 目标力
        goals = self._goal_trajectory(ts)
        F = tau ** 2 * trajectory.ydds - self.alpha_spring_damper * (
            self.beta_spring_damper * (goals - trajectory.ys)
            - tau * trajectory.yds)
        phases = phase(ts, self.alpha_phase, tau, 0.0)[:, np.newaxis]
        targets = F / (phases * self._forcing_term_scale())

        for d, fa in enumerate(self.function_approximators):
            save_directory_dim = None
            if save_directory:
                save_directory_dim = os.path.join(save_directory, f"dim{d}")
            if fa.is_trained():
                fa.re_train(phases, targets[:, d], save_directory_dim,
                            overwrite)
            else:
                fa.train(phases, targets[:, d], save_directory_dim, overwrite)

    def clone(self):
        """Independent copy of this DMP."""
        return copy.deepcopy(self)
