import os
import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal
from scheduled_primitives.function_approximators import (
    FunctionApproximatorRBFN, ridge_regression)


def test_predict_before_training():
    fa = FunctionApproximatorRBFN()
    assert not fa.is_trained()
    with pytest.raises(ValueError, match="not been trained"):
        fa.predict(np.zeros((1, 1)))


def test_constant_is_reproduced():
    inputs = np.linspace(0.01, 1.0, 50)[:, np.newaxis]
    fa = FunctionApproximatorRBFN(n_basis_functions=7)
    fa.train(inputs, 3.0 * np.ones(50))
    assert fa.is_trained()
    assert_array_almost_equal(fa.predict(inputs), 3.0 * np.ones((50, 1)))


def test_sine_is_approximated():
    inputs = np.linspace(0.0, 1.0, 200)
    targets = np.sin(2.0 * np.pi * inputs)
    fa = FunctionApproximatorRBFN(n_basis_functions=20)
    fa.train(inputs, targets)
    outputs = fa.predict(inputs)
    assert outputs.shape == (200, 1)
    assert np.max(np.abs(outputs[:, 0] - targets)) < 0.1


def test_predict_into_output_array():
    inputs = np.linspace(0.0, 1.0, 10)[:, np.newaxis]
    fa = FunctionApproximatorRBFN(n_basis_functions=5)
    fa.train(inputs, inputs[:, 0])
    out = np.empty((10, 1))
    result = fa.predict(inputs, out=out)
    assert result is out
    assert_array_equal(out, fa.predict(inputs))


def test_train_twice_requires_re_train():
    inputs = np.linspace(0.0, 1.0, 10)
    fa = FunctionApproximatorRBFN(n_basis_functions=5)
    fa.train(inputs, np.ones(10))
    with pytest.raises(ValueError, match="re_train"):
        fa.train(inputs, np.ones(10))
    fa.re_train(inputs, 2.0 * np.ones(10))
    assert_array_almost_equal(fa.predict([[0.5]]), [[2.0]])


def test_mismatching_targets():
    fa = FunctionApproximatorRBFN()
    with pytest.raises(ValueError):
        fa.train(np.zeros(10), np.zeros(9))


def test_clone_is_independent():
    inputs = np.linspace(0.0, 1.0, 10)
    fa = FunctionApproximatorRBFN(n_basis_functions=5)
    fa.train(inputs, np.ones(10))
    fa_clone = fa.clone()
    fa_clone.re_train(inputs, -np.ones(10))
    assert_array_almost_equal(fa.predict([[0.5]]), [[1.0]])
    assert_array_almost_equal(fa_clone.predict([[0.5]]), [[-1.0]])


def test_weights():
    inputs = np.linspace(0.0, 1.0, 10)
    fa = FunctionApproximatorRBFN(n_basis_functions=4)
    with pytest.raises(ValueError):
        fa.weights_ = np.zeros(4)
    fa.train(inputs, np.ones(10))
    fa.weights_ = np.full(4, 5.0)
    assert_array_almost_equal(fa.predict([[0.3]]), [[5.0]])
    with pytest.raises(ValueError):
        fa.weights_ = np.zeros(3)


def test_save(tmp_path):
    directory = str(tmp_path / "fa")
    inputs = np.linspace(0.0, 1.0, 10)
    fa = FunctionApproximatorRBFN(n_basis_functions=4)
    fa.train(inputs, np.ones(10), save_directory=directory)
    for filename in ["centers.txt", "widths.txt", "weights.txt"]:
        assert os.path.exists(os.path.join(directory, filename))
    assert_array_almost_equal(
        np.loadtxt(os.path.join(directory, "weights.txt")), fa.weights_)

    with pytest.warns(UserWarning, match="Not overwriting"):
        fa.re_train(inputs, 2.0 * np.ones(10), save_directory=directory)
    assert_array_almost_equal(
        np.loadtxt(os.path.join(directory, "weights.txt")), np.ones(4))

    fa.re_train(inputs, 2.0 * np.ones(10), save_directory=directory,
                overwrite=True)
    assert_array_almost_equal(
        np.loadtxt(os.path.join(directory, "weights.txt")), 2.0 * np.ones(4))


def test_ridge_regression():
    X = np.eye(3)
    F = np.array([1.0, 2.0, 3.0])
    assert_array_almost_equal(ridge_regression(X, F, 0.0), F)
    assert_array_almost_equal(ridge_regression(X, F, 1.0), 0.5 * F)
    with pytest.raises(ValueError):
        ridge_regression(X, F, -1.0)


def test_invalid_parameters():
    with pytest.raises(ValueError):
        FunctionApproximatorRBFN(n_basis_functions=0)
    with pytest.raises(ValueError):
        FunctionApproximatorRBFN(overlap=1.0)
    with pytest.raises(ValueError):
        FunctionApproximatorRBFN(regularization_coefficient=-1.0)
