import os
import warnings
import numpy as np
from ..exceptions import ConfigurationError, MissingFunctionApproximatorWarning


class DMPWithGainSchedules:
    """DMP that additionally outputs a gain schedule per dimension.

    Each dimension has a function approximator that maps the phase of the
    DMP to an additional scalar, e.g., a stiffness gain of a controller
    that tracks the DMP. The gains are learned from the misc channel of a
    demonstrated trajectory and are computed in every integration step
    from the phase of the DMP.

    Integration and training of the trajectory itself are delegated to the
    wrapped DMP.

    Parameters
    ----------
    dmp : DMPBase
        The DMP. Will be cloned.

    function_approximators_gains : list, optional (default: [])
        One function approximator per dimension of the DMP, None marks an
        absent approximator whose gains will always be 0. All present
        function approximators will be cloned. If empty, no gains are
        computed.

    Raises
    ------
    ConfigurationError
        If the number of function approximators is neither 0 nor the
        number of dimensions of the DMP.
    """
    def __init__(self, dmp, function_approximators_gains=()):
        function_approximators_gains = list(function_approximators_gains)
        if (function_approximators_gains
                and len(function_approximators_gains) != dmp.n_dims):
            raise ConfigurationError(
                f"Expected {dmp.n_dims} function approximators for gains, "
                f"got {len(function_approximators_gains)}.")

        self.dmp = dmp.clone()
        self._function_approximators_gains = [
            None if fa is None else fa.clone()
            for fa in function_approximators_gains]

        # Buffers for function approximator outputs, reused in every step
        self._gains_outputs_one_prealloc = np.empty((1, 1))
        self._gains_outputs_prealloc = np.empty((1, 1))
        self._gains_output_one_prealloc = np.zeros((1, self.n_dims))

    @property
    def n_dims(self):
        """Number of dimensions of the DMP."""
        return self.dmp.n_dims

    @property
    def n_gains(self):
        """Number of configured function approximator slots (0 or n_dims)."""
        return len(self._function_approximators_gains)

    @property
    def function_approximators_gains(self):
        """Function approximators of the gain schedules (None if absent)."""
        return tuple(self._function_approximators_gains)

    def phase(self, x):
        """Phase column of state(s), see :func:`StateLayout.phase`."""
        return self.dmp.phase(x)

    def compute_gain_outputs(self, phase_state, out=None):
        """Compute gains for a batch of phase values.

        Parameters
        ----------
        phase_state : array, shape (n_steps, 1)
            Phase values.

        out : array, shape (n_steps, n_dims), optional (default: None)
            Output array. Will be modified.

        Returns
        -------
        gains : array, shape (n_steps, n_dims)
            Gains. Columns of absent or untrained function approximators
            are 0.
        """
        n_steps = phase_state.shape[0]
        if out is None:
            out = np.zeros((n_steps, self.n_dims))
        else:
            out.fill(0.0)

        if n_steps == 1:
            fa_outputs = self._gains_outputs_one_prealloc
        else:
            if self._gains_outputs_prealloc.shape[0] != n_steps:
                self._gains_outputs_prealloc = np.empty((n_steps, 1))
            fa_outputs = self._gains_outputs_prealloc

        for d, fa in enumerate(self._function_approximators_gains):
            if fa is not None and fa.is_trained():
                fa.predict(phase_state, out=fa_outputs)
                out[:, d] = fa_outputs[:, 0]
        return out

    def _gains_from_state(self, x, gains):
        gains_one = self.compute_gain_outputs(
            self.dmp.phase(x), out=self._gains_output_one_prealloc)
        if gains is None:
            gains = np.empty(self.n_dims)
        gains[:] = gains_one[0]
        return gains

    def integrate_start(self, x=None, xd=None, gains=None):
        """Initial state, its time derivative and initial gains.

        Parameters
        ----------
        x : array, shape (n_state_dims,), optional (default: None)
            Output array for the state. Will be modified.

        xd : array, shape (n_state_dims,), optional (default: None)
            Output array for the time derivative. Will be modified.

        gains : array, shape (n_dims,), optional (default: None)
            Output array for the gains. Will be modified.

        Returns
        -------
        x : array, shape (n_state_dims,)
            Initial state.

        xd : array, shape (n_state_dims,)
            Time derivative of the initial state.

        gains : array, shape (n_dims,)
            Gains at the initial phase.
        """
        x, xd = self.dmp.integrate_start(x, xd)
        gains = self._gains_from_state(x, gains)
        return x, xd, gains

    def integrate_step(self, dt, x, x_updated=None, xd_updated=None,
                       gains=None):
        """Integrate for one step and compute gains of the next state.

        Gains are computed from the phase of the updated state. Pass
        preallocated output arrays to avoid allocating new arrays in a
        control loop.

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

        gains : array, shape (n_dims,), optional (default: None)
            Output array for the gains. Will be modified.

        Returns
        -------
        x_updated : array, shape (n_state_dims,)
            Next state.

        xd_updated : array, shape (n_state_dims,)
            Time derivative of the next state.

        gains : array, shape (n_dims,)
            Gains at the phase of the next state.
        """
        x_updated, xd_updated = self.dmp.integrate_step(
            dt, x, x_updated, xd_updated)
        gains = self._gains_from_state(x_updated, gains)
        return x_updated, xd_updated, gains

    def analytical_solution(self, ts):
        """Compute states and gains for the given time points.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points.

        Returns
        -------
        xs : array, shape (n_steps, n_state_dims)
            States.

        xds : array, shape (n_steps, n_state_dims)
            Time derivatives of states.

        forcing_terms : array, shape (n_steps, n_dims)
            Forcing terms.

        fa_outputs : array, shape (n_steps, n_dims)
            Outputs of the forcing term function approximators.

        gains : array, shape (n_steps, n_dims)
            Gains.
        """
        xs, xds, forcing_terms, fa_outputs = self.dmp.analytical_solution(ts)
        gains = self.compute_gain_outputs(self.dmp.phase(xs))
        return xs, xds, forcing_terms, fa_outputs, gains

    def analytical_trajectory(self, ts):
        """Compute trajectory for the given time points.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time points.

        Returns
        -------
        trajectory : Trajectory
            Trajectory with gains stored in its misc channel.
        """
        xs, xds, _, _ = self.dmp.analytical_solution(ts)
        trajectory = self.dmp.states_as_trajectory(ts, xs, xds)
        trajectory.misc = self.compute_gain_outputs(self.dmp.phase(xs))
        return trajectory

    def rollout(self, ts):
        """Cost variables of a rollout, see :func:`DMP.rollout`."""
        return self.dmp.rollout(ts)

    def train(self, trajectory, save_directory=None, overwrite=False):
        """Train DMP and gain schedules from a demonstration.

        The DMP is trained on the positions of the trajectory, the gain
        schedules on its misc channel (one column per dimension).

        Parameters
        ----------
        trajectory : Trajectory
            Demonstration with gains in the misc channel.

        save_directory : str, optional (default: None)
            Directory to which results will be saved. With more than one
            gain schedule, each one is saved in the subdirectory
            'gains<d>'.

        overwrite : bool, optional (default: False)
            Overwrite existing files.

        Raises
        ------
        ConfigurationError
            If no function approximators for gains are configured or the
            misc channel does not have one column per function
            approximator.
        """
        if not self._function_approximators_gains:
            raise ConfigurationError(
                "Cannot train gain schedules without function approximators.")
        targets = trajectory.misc
        if targets is None or targets.shape[1] != self.n_gains:
            raise ConfigurationError(
                f"Expected {self.n_gains} columns of gains in misc channel "
                f"of trajectory, got {trajectory.n_dims_misc}.")

        self.dmp.train(trajectory, save_directory, overwrite)

        # The demonstration does not contain the phase, hence we compute it.
        xs, _, _, _ = self.dmp.analytical_solution(trajectory.ts)
        phases = np.copy(self.dmp.phase(xs))

        for d, fa in enumerate(self._function_approximators_gains):
            save_directory_dim = None
            if save_directory:
                if self.n_gains == 1:
                    save_directory_dim = save_directory
                else:
                    save_directory_dim = os.path.join(
                        save_directory, f"gains{d}")

            if fa is None:
                warnings.warn(
                    f"Function approximator for gains of dimension {d} "
                    f"cannot be trained because it is None.",
                    MissingFunctionApproximatorWarning)
            elif fa.is_trained():
                fa.re_train(phases, targets[:, d], save_directory_dim,
                            overwrite)
            else:
                fa.train(phases, targets[:, d], save_directory_dim, overwrite)

    def clone(self):
        """Independent copy with cloned DMP and function approximators."""
        return DMPWithGainSchedules(
            self.dmp, self._function_approximators_gains)
