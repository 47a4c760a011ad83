import numpy as np
from ._state import StateLayout


class DMPBase:
    """Base class of Dynamical Movement Primitives (DMPs).  # 动态运动基元的基类

    Defines the interface that is used by extensions of a DMP, e.g.,
    :class:`DMPWithGainSchedules`, which hold a DMP and call through to it.

    Parameters
    ----------
    n_dims : int
        Number of dimensions of the position that will be controlled.
    """
    def __init__(self, n_dims):
        self.layout = StateLayout(n_dims)

    @property
    def n_dims(self):
        """Number of position dimensions."""
        return self.layout.n_dims

    @property
    def n_state_dims(self):
        """Length of the state vector."""
        return self.layout.n_state_dims

    def phase(self, x):
        """Extract phase column from state(s), see :func:`StateLayout.phase`."""
        return self.layout.phase(x)

    def integrate_start(self, x=None, xd=None):
        raise NotImplementedError()

    def integrate_step(self, dt, x, x_updated=None, xd_updated=None):
        raise NotImplementedError()

    def analytical_solution(self, ts):
        raise NotImplementedError()

    def analytical_trajectory(self, ts):
        raise NotImplementedError()

    def train(self, trajectory, save_directory=None, overwrite=False):
        raise NotImplementedError()

    def clone(self):
        raise NotImplementedError()


class WeightParametersMixin:
    """Mixin class providing common access methods to forcing term weights.

    This can be used, for instance, for black-box optimization of the weights
    with respect to some cost / objective function in a reinforcement learning
    setting. 例如，可用于根据成本函数对权重进行黑盒优化。

    Requires an attribute function_approximators with one trained
    function approximator per dimension that exposes weights_.
    """
    def get_weights(self):
        """Get weight vector of DMP.

        Returns
        -------
        weights : array, shape (n_weights,)
            Current weights of all function approximators, concatenated.
        """
        return np.concatenate(
            [fa.weights_ for fa in self.function_approximators])

    def set_weights(self, weights):
        """Set weight vector of DMP.

        Parameters
        ----------
        weights : array, shape (n_weights,)
            New weights of the DMP.

        Raises
        ------
        ValueError
            If the number of weights is wrong.
        """
        weights = np.asarray(weights, dtype=float)
        if len(weights) != self.n_weights:
            raise ValueError(
                f"Expected {self.n_weights} weights, got {len(weights)}.")
        offset = 0
        for fa in self.function_approximators:
            n = len(fa.weights_)
            fa.weights_ = weights[offset:offset + n]
            offset += n

    @property
    def n_weights(self):
        """Total number of weights configuring the forcing term."""
        return sum(len(fa.weights_) for fa in self.function_approximators)
