"""
工具类函数: validation of array-like arguments.
"""

import numpy as np
from .exceptions import ConfigurationError


def check_1d_array_length(var, var_name, expected_length):
    """Check length of 1D array.

    Parameters
    ----------
    var : array-like
        1D array to be checked.

    var_name : str
        Name of the variable. To be used in the error message.

    expected_length : int
        Expected length of the array.

    Raises
    ------
    ConfigurationError
        If the length of the array is not correct.
    """
    actual_length = len(var)
    if actual_length != expected_length:
        s = "s" if expected_length > 1 else ""
        raise ConfigurationError(
            f"Expected {var_name} with {expected_length} element{s}, "
            f"got {actual_length}.")


def ensure_1d_array(value, n_dims, var_name):
    """Process scalar or array-like input to ensure it is a 1D numpy array.  # 确保其为 1D numpy 数组。

    Parameters
    ----------
    value : float or array-like, shape (n_dims,)
        Argument to be processed. A scalar will be repeated n_dims times.

    n_dims : int
        Expected length of the 1d array.

    var_name : str
        Name of the variable in case an exception has to be raised.

    Returns
    -------
    value : array, shape (n_dims,)
        1D numpy array with dtype float (always a copy).

    Raises
    ------
    ConfigurationError
        If the argument is not compatible.
    """
    value = np.array(value, dtype=float, ndmin=1)
    if value.ndim == 1 and value.shape[0] == 1:
        value = np.repeat(value, n_dims)
    if value.ndim > 1 or value.shape[0] != n_dims:
        raise ConfigurationError(
            f"{var_name} has incorrect shape, expected ({n_dims},) "
            f"got {value.shape}")
    return value


def ensure_2d_array(value, var_name, n_cols=None):
    """Convert input to a 2D float array with one sample per row.

    A 1D input of length n is interpreted as a column, i.e., n samples of a
    scalar quantity.

    Parameters
    ----------
    value : array-like, shape (n_samples,) or (n_samples, n_cols)
        Argument to be processed.

    var_name : str
        Name of the variable in case an exception has to be raised.

    n_cols : int, optional (default: None)
        Expected number of columns. Not checked if None.

    Returns
    -------
    value : array, shape (n_samples, n_cols)
        2D numpy array with dtype float.

    Raises
    ------
    ConfigurationError
        If the argument is not compatible.
    """
    value = np.asarray(value, dtype=float)
    if value.ndim == 1:
        value = value[:, np.newaxis]
    if value.ndim != 2:
        raise ConfigurationError(
            f"{var_name} must be a 2D array, got shape {value.shape}")
    if n_cols is not None and value.shape[1] != n_cols:
        raise ConfigurationError(
            f"{var_name} must have {n_cols} columns, got {value.shape[1]}")
    return value
