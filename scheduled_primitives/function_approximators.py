"""Function approximators that map a scalar phase to a scalar output."""
import copy
import os
import warnings
import numpy as np
from .utils import ensure_2d_array


def ridge_regression(X, F, regularization_coefficient):
    r"""Ridge regression: linear least squares with L2 penalty.

    .. math::

        w = (X X^T + \lambda I)^{-1} X F

    Parameters
    ----------
    X : array, shape (n_features, n_samples)
        Design matrix.

    F : array, shape (n_samples,) or (n_samples, n_outputs)
        Targets.

    regularization_coefficient : float
        Regularization coefficient (>= 0).

    Returns
    -------
    weights : array, shape (n_features,) or (n_outputs, n_features)
        Weights of the linear model.

    Raises
    ------
    ValueError
        If regularization coefficient is negative.
    """
    if regularization_coefficient < 0.0:
        raise ValueError("Regularization coefficient must be >= 0!")
    return np.linalg.pinv(
        X.dot(X.T) + regularization_coefficient * np.eye(X.shape[0])
    ).dot(X).dot(F).T


class FunctionApproximatorRBFN:
    r"""Radial basis function network with normalized Gaussian kernels.

    .. math::

        f(s) = \frac{\sum_i \psi_i(s) w_i}{\sum_i \psi_i(s)}, \quad
        \psi_i(s) = \exp(-h_i (s - c_i)^2)

    Centers :math:`c_i` are distributed linearly over the range of inputs
    seen during training. The widths :math:`h_i` are chosen such that
    neighbouring kernels intersect at the value ``overlap``.

    Parameters
    ----------
    n_basis_functions : int, optional (default: 10)
        Number of Gaussian kernels.  # 基函数数量

    overlap : float, optional (default: 0.8)
        Value at which neighbouring kernels intersect, in (0, 1).

    regularization_coefficient : float, optional (default: 0)
        Regularization coefficient for ridge regression.

    Attributes
    ----------
    centers_ : array, shape (n_basis_functions,)
        Kernel centers. None before training.

    widths_ : array, shape (n_basis_functions,)
        Kernel widths. None before training.

    weights_ : array, shape (n_basis_functions,)
        Kernel weights. None before training.
    """
    def __init__(self, n_basis_functions=10, overlap=0.8,
                 regularization_coefficient=0.0):
        if n_basis_functions < 1:
            raise ValueError("At least one basis function is required!")
        if not 0.0 < overlap < 1.0:
            raise ValueError("Overlap must be in (0, 1)!")
        if regularization_coefficient < 0.0:
            raise ValueError("Regularization coefficient must be >= 0!")
        self.n_basis_functions = n_basis_functions
        self.overlap = overlap
        self.regularization_coefficient = regularization_coefficient

        self.centers_ = None
        self.widths_ = None
        self._weights = None

    def is_trained(self):
        """Whether the model has been trained."""
        return self._weights is not None

    @property
    def weights_(self):
        return self._weights

    @weights_.setter
    def weights_(self, weights):
        weights = np.asarray(weights, dtype=float).ravel()
        if len(weights) != self.n_basis_functions:
            raise ValueError(
                f"Expected {self.n_basis_functions} weights, "
                f"got {len(weights)}.")
        if not self.is_trained():
            raise ValueError(
                "Weights can only be set after centers and widths have "
                "been determined by training.")
        self._weights[:] = weights

    def _init_kernels(self, inputs):
        s_min = np.min(inputs)
        s_max = np.max(inputs)
        if self.n_basis_functions == 1 or s_max <= s_min:
            self.centers_ = np.full(
                self.n_basis_functions, 0.5 * (s_min + s_max))
            self.widths_ = np.ones(self.n_basis_functions)
            return
        self.centers_ = np.linspace(s_min, s_max, self.n_basis_functions)
        spacing = self.centers_[1] - self.centers_[0]
        self.widths_ = np.full(
            self.n_basis_functions, -np.log(self.overlap) / spacing ** 2)

    def activations(self, inputs):
        """Normalized kernel activations.

        Parameters
        ----------
        inputs : array-like, shape (n_samples, 1) or (n_samples,)
            Input values.

        Returns
        -------
        activations : array, shape (n_samples, n_basis_functions)
            Normalized activations; each row sums to one.
        """
        s = np.asarray(inputs, dtype=float).reshape(-1, 1)
        activations = np.exp(-self.widths_ * (s - self.centers_) ** 2)
        activations /= np.sum(activations, axis=1)[:, np.newaxis] + 1e-10
        return activations

    def train(self, inputs, targets, save_directory=None, overwrite=False):
        """Train function approximator.

        Parameters
        ----------
        inputs : array-like, shape (n_samples, 1) or (n_samples,)
            Input values, e.g., phase.

        targets : array-like, shape (n_samples,) or (n_samples, 1)
            Target values.

        save_directory : str, optional (default: None)
            Directory to which the model will be saved.

        overwrite : bool, optional (default: False)
            Overwrite existing files in save_directory.

        Raises
        ------
        ValueError
            If the model has already been trained or inputs and targets
            do not match.
        """
        if self.is_trained():
            raise ValueError(
                "Function approximator has already been trained, "
                "use re_train().")
        inputs = ensure_2d_array(inputs, "inputs", 1)
        targets = np.asarray(targets, dtype=float).ravel()
        if len(targets) != inputs.shape[0]:
            raise ValueError(
                f"Got {inputs.shape[0]} inputs but {len(targets)} targets.")

        self._init_kernels(inputs)
        X = self.activations(inputs).T  # n_basis_functions x n_samples
        self._weights = ridge_regression(
            X, targets, self.regularization_coefficient)

        if save_directory:
            self.save(save_directory, overwrite)

    def re_train(self, inputs, targets, save_directory=None, overwrite=False):
        """Discard the current model and train again.

        See :func:`train` for parameters.
        """
        self.centers_ = None
        self.widths_ = None
        self._weights = None
        self.train(inputs, targets, save_directory, overwrite)

    def predict(self, inputs, out=None):
        """Predict outputs.

        Parameters
        ----------
        inputs : array-like, shape (n_samples, 1) or (n_samples,)
            Input values.

        out : array, shape (n_samples, 1), optional (default: None)
            Output array. Will be modified.

        Returns
        -------
        outputs : array, shape (n_samples, 1)
            Predictions.

        Raises
        ------
        ValueError
            If the model has not been trained yet.
        """
        if not self.is_trained():
            raise ValueError("Function approximator has not been trained.")
        activations = self.activations(inputs)
        if out is None:
            out = np.empty((activations.shape[0], 1))
        np.sum(activations * self._weights, axis=1, out=out[:, 0])
        return out

    def save(self, directory, overwrite=False):
        """Save model parameters as text files.

        Parameters
        ----------
        directory : str
            Target directory. Will be created if it does not exist.

        overwrite : bool, optional (default: False)
            Replace existing files.
        """
        os.makedirs(directory, exist_ok=True)
        arrays = {"centers.txt": self.centers_, "widths.txt": self.widths_,
                  "weights.txt": self._weights}
        for filename, values in arrays.items():
            path = os.path.join(directory, filename)
            if os.path.exists(path) and not overwrite:
                warnings.warn(f"Not overwriting existing file '{path}'.")
                continue
            np.savetxt(path, values)

    def clone(self):
        """Independent copy of this function approximator."""
        return copy.deepcopy(self)
