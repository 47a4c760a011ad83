import warnings
import numpy as np
from ..exceptions import ConfigurationError
from ..trajectory import generate_polynomial_trajectory_through_viapoint
from ..utils import ensure_2d_array
from ._base import Task


N_COST_COMPONENTS = 3


def first_index_at_or_after(ts, t):
    """Index of the first time step that is not before t.

    Parameters
    ----------
    ts : array, shape (n_steps,)
        Time points, sorted in ascending order. The order is not checked.

    t : float
        Query time.

    Returns
    -------
    index : int
        First index i with ts[i] >= t. Equals n_steps if t is after the last
        time step.
    """
    return int(np.searchsorted(ts, t, side="left"))


class TaskViapoint(Task):
    """Pass through a viapoint and reach a goal in time with smooth motion.

    The costs consist of three weighted components:

    * viapoint: distance to the viapoint at viapoint_time, or the minimum
      distance over the whole trajectory if viapoint_time is None. Distances
      within viapoint_radius are free.
    * acceleration: sum of squared accelerations divided by the number of
      time steps.
    * goal: sum of squared distances to the goal from goal_time onwards.

    Parameters
    ----------
    viapoint : array-like, shape (n_dims,)
        Position of the viapoint.

    viapoint_time : float, optional (default: None)
        Time at which the viapoint should be passed. None: use the minimum
        distance between trajectory and viapoint instead.

    viapoint_radius : float, optional (default: 0)
        Distance to the viapoint below which no costs occur.

    goal : array-like, shape (n_dims,), optional (default: ones)
        Goal position.

    goal_time : float, optional (default: None)
        Time at which the goal should be reached. Required if goal_weight
        is not 0.

    viapoint_weight : float, optional (default: 1)
        Weight of the viapoint cost component.

    acceleration_weight : float, optional (default: 0.0001)
        Weight of the acceleration cost component.

    goal_weight : float, optional (default: 1 if goal is given, 0 otherwise)
        Weight of the goal cost component.

    Raises
    ------
    ValueError
        If the radius or a weight is negative.

    ConfigurationError
        If viapoint and goal have different dimensions or the goal is
        weighted without a goal time.
    """
    def __init__(self, viapoint, viapoint_time=None, viapoint_radius=0.0,
                 goal=None, goal_time=None, viapoint_weight=1.0,
                 acceleration_weight=0.0001, goal_weight=None):
        self.viapoint = np.array(viapoint, dtype=float, ndmin=1)
        if self.viapoint.ndim != 1:
            raise ConfigurationError("Viapoint must be a 1D array.")
        n_dims = len(self.viapoint)

        if goal is None:
            self.goal = np.ones(n_dims)
            if goal_weight is None:
                goal_weight = 0.0
        else:
            self.goal = np.array(goal, dtype=float, ndmin=1)
            if goal_weight is None:
                goal_weight = 1.0
        if self.goal.shape != self.viapoint.shape:
            raise ConfigurationError(
                f"Viapoint and goal must have the same dimensions, got "
                f"{self.viapoint.shape} and {self.goal.shape}.")

        if viapoint_radius < 0.0:
            raise ValueError("Viapoint radius must be >= 0!")

        self.viapoint_time = viapoint_time
        self.viapoint_radius = viapoint_radius
        self.goal_time = goal_time
        self.set_cost_function_weighting(
            viapoint_weight, acceleration_weight, goal_weight)

    @property
    def n_dims(self):
        return len(self.viapoint)

    @property
    def n_cost_components(self):
        return N_COST_COMPONENTS

    def set_cost_function_weighting(self, viapoint_weight,
                                    acceleration_weight, goal_weight):
        """Set weights of the cost components.

        Parameters
        ----------
        viapoint_weight : float
            Weight of the viapoint cost component.

        acceleration_weight : float
            Weight of the acceleration cost component.

        goal_weight : float
            Weight of the goal cost component.

        Raises
        ------
        ValueError
            If a weight is negative.

        ConfigurationError
            If the goal is weighted but no goal time is defined.
        """
        if min(viapoint_weight, acceleration_weight, goal_weight) < 0.0:
            raise ValueError("Weights of cost components must be >= 0!")
        if goal_weight != 0.0 and self.goal_time is None:
            raise ConfigurationError(
                "Goal cost component requires a goal time.")
        self.viapoint_weight = viapoint_weight
        self.acceleration_weight = acceleration_weight
        self.goal_weight = goal_weight

    def _distance_to_viapoint(self, ts, y):
        if self.viapoint_time is None:
            return np.sqrt(np.min(np.sum((y - self.viapoint) ** 2, axis=1)))

        viapoint_time_step = first_index_at_or_after(ts, self.viapoint_time)
        if viapoint_time_step >= len(ts):
            raise ConfigurationError(
                f"Viapoint time {self.viapoint_time} is after the last time "
                f"step {ts[-1]}.")
        return np.linalg.norm(y[viapoint_time_step] - self.viapoint)

    def compute_costs(self, ts, y, ydd):
        """Compute costs of a trajectory.

        Parameters
        ----------
        ts : array-like, shape (n_steps,)
            Time of each step.

        y : array-like, shape (n_steps, n_dims)
            Position at each step.

        ydd : array-like, shape (n_steps, n_dims)
            Acceleration at each step.

        Returns
        -------
        costs : array, shape (4,)
            Total costs, viapoint costs, acceleration costs and goal costs.

        Raises
        ------
        ConfigurationError
            If the viapoint time is after the last time step, the
            rollout is empty or ts, y and ydd differ in their number of
            steps.
        """
        ts = np.asarray(ts, dtype=float).ravel()
        y = ensure_2d_array(y, "y", self.n_dims)
        ydd = ensure_2d_array(ydd, "ydd", self.n_dims)
        n_time_steps = len(ts)
        if n_time_steps == 0:
            raise ConfigurationError(
                "Cannot compute costs of an empty rollout.")
        if y.shape[0] != n_time_steps or ydd.shape[0] != n_time_steps:
            raise ConfigurationError(
                f"Expected {n_time_steps} steps of positions and "
                f"accelerations, got {y.shape[0]} and {ydd.shape[0]}.")

        dist_to_viapoint = 0.0
        if self.viapoint_weight != 0.0:
            dist_to_viapoint = self._distance_to_viapoint(ts, y)
            if self.viapoint_radius > 0.0:
                # no costs within the radius
                dist_to_viapoint = max(
                    0.0, dist_to_viapoint - self.viapoint_radius)

        mean_ydd = 0.0
        if self.acceleration_weight != 0.0:
            mean_ydd = np.sum(ydd ** 2) / n_time_steps

        delay_cost = 0.0
        if self.goal_weight != 0.0:
            goal_time_step = first_index_at_or_after(ts, self.goal_time)
            y_after_goal = y[goal_time_step:]
            delay_cost = np.sum((y_after_goal - self.goal) ** 2)

        costs = np.empty(1 + N_COST_COMPONENTS)
        costs[1] = self.viapoint_weight * dist_to_viapoint
        costs[2] = self.acceleration_weight * mean_ydd
        costs[3] = self.goal_weight * delay_cost
        costs[0] = costs[1] + costs[2] + costs[3]
        return costs

    def evaluate_rollout(self, cost_vars, sample=None, task_parameters=None):
        """Compute costs of a rollout.

        Parameters
        ----------
        cost_vars : array-like, shape (n_steps, 1 + 4 * n_dims)
            Each row contains t, y, yd, ydd and the forcing term, e.g., the
            result of :func:`DMP.rollout`.

        sample : array, optional (default: None)
            Not used.

        task_parameters : array, optional (default: None)
            Not used.

        Returns
        -------
        costs : array, shape (4,)
            Total costs, viapoint costs, acceleration costs and goal costs.

        Raises
        ------
        ConfigurationError
            If cost_vars does not have 1 + 4 * n_dims columns.
        """
        n_dims = self.n_dims
        cost_vars = ensure_2d_array(cost_vars, "cost_vars", 1 + 4 * n_dims)
        ts = cost_vars[:, 0]
        y = cost_vars[:, 1:1 + n_dims]
        ydd = cost_vars[:, 1 + 2 * n_dims:1 + 3 * n_dims]
        return self.compute_costs(ts, y, ydd)

    def generate_demonstration(self, task_parameters, ts):
        """Generate a demonstration that passes through a point.

        The demonstration starts at rest at the origin, passes through the
        given position at the viapoint time with velocity 1 and
        acceleration 0, and ends at rest at the goal.

        Parameters
        ----------
        task_parameters : array-like, shape (1, n_dims)
            Position that should be passed at the viapoint time.

        ts : array-like, shape (n_steps,)
            Time of each step.

        Returns
        -------
        demonstration : Trajectory
            Demonstrated trajectory.

        Raises
        ------
        ConfigurationError
            If task parameters have the wrong shape or the task has no
            viapoint time.
        """
        task_parameters = np.asarray(task_parameters, dtype=float)
        if task_parameters.shape != (1, self.n_dims):
            raise ConfigurationError(
                f"Expected task parameters of shape (1, {self.n_dims}), got "
                f"{task_parameters.shape}.")
        if self.viapoint_time is None:
            raise ConfigurationError(
                "Cannot generate a demonstration without viapoint time.")

        y_from = np.zeros(self.n_dims)
        y_yd_ydd_viapoint = np.concatenate((
            task_parameters[0], np.ones(self.n_dims), np.zeros(self.n_dims)))
        return generate_polynomial_trajectory_through_viapoint(
            ts, y_from, y_yd_ydd_viapoint, self.viapoint_time, self.goal)

    def to_array(self):
        """Task parameters as one row.

        Returns
        -------
        values : array, shape (2 * n_dims + 6,)
            Viapoint, viapoint time, viapoint radius, goal, goal time,
            viapoint weight, acceleration weight, goal weight. Undefined
            times are stored as -1.
        """
        viapoint_time = -1.0 if self.viapoint_time is None \
            else self.viapoint_time
        goal_time = -1.0 if self.goal_time is None else self.goal_time
        return np.hstack((
            self.viapoint, [viapoint_time, self.viapoint_radius], self.goal,
            [goal_time, self.viapoint_weight, self.acceleration_weight,
             self.goal_weight]))

    @classmethod
    def from_array(cls, values):
        """Create task from one row of parameters, see :func:`to_array`.

        Raises
        ------
        ConfigurationError
            If the number of values does not correspond to a task.
        """
        values = np.asarray(values, dtype=float).ravel()
        n_dims, remainder = divmod(len(values) - 6, 2)
        if n_dims < 1 or remainder != 0:
            raise ConfigurationError(
                f"Cannot interpret {len(values)} values as viapoint task.")
        viapoint_time = values[n_dims]
        goal_time = values[2 * n_dims + 2]
        goal_weight = values[2 * n_dims + 5]
        if goal_time < 0.0 and goal_weight == 0.0:
            # unused goal time
            goal_time = None
        return cls(
            viapoint=values[:n_dims],
            viapoint_time=None if viapoint_time < 0.0 else viapoint_time,
            viapoint_radius=values[n_dims + 1],
            goal=values[n_dims + 2:2 * n_dims + 2],
            goal_time=goal_time,
            viapoint_weight=values[2 * n_dims + 3],
            acceleration_weight=values[2 * n_dims + 4],
            goal_weight=goal_weight)

    def write_to_file(self, filename):
        """Write task to a text file (one row).

        Parameters
        ----------
        filename : str
            Name of the file.

        Returns
        -------
        success : bool
            Whether the file could be written.
        """
        try:
            with open(filename, "w") as f:
                np.savetxt(f, self.to_array()[np.newaxis])
        except OSError as e:
            warnings.warn(f"Couldn't open file '{filename}' for writing: {e}")
            return False
        return True

    @classmethod
    def read_from_file(cls, filename):
        """Read task from a text file, see :func:`write_to_file`.

        Parameters
        ----------
        filename : str
            Name of the file.

        Returns
        -------
        task : TaskViapoint
            Task.
        """
        return cls.from_array(np.loadtxt(filename, ndmin=2)[0])

    def __repr__(self):
        return (f"TaskViapoint(viapoint={self.viapoint.tolist()}, "
                f"viapoint_time={self.viapoint_time}, "
                f"viapoint_radius={self.viapoint_radius}, "
                f"goal={self.goal.tolist()}, goal_time={self.goal_time}, "
                f"viapoint_weight={self.viapoint_weight}, "
                f"acceleration_weight={self.acceleration_weight}, "
                f"goal_weight={self.goal_weight})")
