import numpy as np


class StateLayout:
    """Layout of the flat DMP state vector.

    The state of a DMP with n_dims dimensions is the concatenation

    ::

        [ y (n_dims) | z (n_dims) | goal (n_dims) | phase (1) ]

    where y is the position, z = tau * yd the scaled velocity, goal the
    state of the goal system and phase the state of the canonical system.
    The phase therefore always lives at offset 3 * n_dims and is exactly one
    scalar wide.

    All accessors return views, so writing to them modifies the state.
    They work for a single state (shape (n_state_dims,)) as well as for a
    batch of states (shape (n_steps, n_state_dims)).

    Parameters
    ----------
    n_dims : int
        Number of position dimensions.
    """
    def __init__(self, n_dims):
        if n_dims < 1:
            raise ValueError("DMP needs at least one dimension!")
        self.n_dims = n_dims

    @property
    def n_state_dims(self):
        """Length of the state vector."""
        return 3 * self.n_dims + 1

    @property
    def phase_index(self):
        """Offset of the phase in the state vector."""
        return 3 * self.n_dims

    def y(self, x):
        return x[..., :self.n_dims]

    def z(self, x):
        return x[..., self.n_dims:2 * self.n_dims]

    def goal(self, x):
        return x[..., 2 * self.n_dims:3 * self.n_dims]

    def phase(self, x):
        """Phase as a column.

        Parameters
        ----------
        x : array, shape (n_state_dims,) or (n_steps, n_state_dims)
            State(s).

        Returns
        -------
        phase : array, shape (1, 1) or (n_steps, 1)
            View of the phase segment.
        """
        i = self.phase_index
        return np.atleast_2d(x[..., i:i + 1])
