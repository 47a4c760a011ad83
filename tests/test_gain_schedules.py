import os
import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal
from scheduled_primitives.dmp import DMP, DMPWithGainSchedules
from scheduled_primitives.exceptions import (
    ConfigurationError, MissingFunctionApproximatorWarning)
from scheduled_primitives.function_approximators import (
    FunctionApproximatorRBFN)
from scheduled_primitives.trajectory import generate_polynomial_trajectory


def trained_gain_approximator(gain_of_phase):
    phases = np.linspace(0.01, 1.0, 50)[:, np.newaxis]
    fa = FunctionApproximatorRBFN(n_basis_functions=8)
    fa.train(phases, gain_of_phase(phases[:, 0]))
    return fa


def demonstration_with_gains(gains, n_steps=101):
    gains = np.asarray(gains, dtype=float)
    n_dims = len(gains)
    ts = np.linspace(0.0, 1.0, n_steps)
    zeros = np.zeros(n_dims)
    trajectory = generate_polynomial_trajectory(
        ts, zeros, zeros, zeros, np.ones(n_dims), zeros, zeros)
    trajectory.misc = np.tile(gains, (n_steps, 1))
    return trajectory


def test_empty_bank():
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=3))
    assert dmp_gains.n_gains == 0
    assert dmp_gains.n_dims == 3
    for n_steps in [1, 7]:
        gains = dmp_gains.compute_gain_outputs(np.ones((n_steps, 1)))
        assert_array_equal(gains, np.zeros((n_steps, 3)))
    x, xd, gains = dmp_gains.integrate_start()
    assert_array_equal(gains, np.zeros(3))
    _, _, gains = dmp_gains.integrate_step(0.01, x)
    assert_array_equal(gains, np.zeros(3))


def test_bank_with_approximators():
    fas = [FunctionApproximatorRBFN() for _ in range(3)]
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=3), fas)
    assert dmp_gains.n_gains == 3
    for fa, fa_gains in zip(fas, dmp_gains.function_approximators_gains):
        assert fa_gains is not fa


@pytest.mark.parametrize("n_dims", [1, 2, 4])
def test_all_absent_bank(n_dims):
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=n_dims), [None] * n_dims)
    assert dmp_gains.n_gains == n_dims
    for n_steps in [1, 5, 20]:
        phases = np.linspace(1.0, 0.01, n_steps)[:, np.newaxis]
        assert_array_equal(dmp_gains.compute_gain_outputs(phases),
                           np.zeros((n_steps, n_dims)))


def test_bank_size_must_match_dimensions():
    with pytest.raises(ConfigurationError):
        DMPWithGainSchedules(DMP(n_dims=2), [FunctionApproximatorRBFN()])


def test_untrained_and_absent_slots_yield_zero():
    fa = trained_gain_approximator(lambda s: 5.0 + s)
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=3), [fa, None, FunctionApproximatorRBFN()])
    phases = np.linspace(1.0, 0.01, 10)[:, np.newaxis]
    gains = dmp_gains.compute_gain_outputs(phases)
    assert_array_almost_equal(gains[:, 0], fa.predict(phases)[:, 0])
    assert_array_equal(gains[:, 1:], np.zeros((10, 2)))


def test_batch_and_single_phase_are_consistent():
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=2), [
        trained_gain_approximator(lambda s: 10.0 * s),
        trained_gain_approximator(lambda s: np.cos(3.0 * s))])
    phases = np.linspace(1.0, 0.01, 13)[:, np.newaxis]
    batch = dmp_gains.compute_gain_outputs(phases)
    for i in range(len(phases)):
        single = dmp_gains.compute_gain_outputs(phases[i:i + 1])
        assert_array_equal(single[0], batch[i])


def test_compute_gain_outputs_into_output_array():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [trained_gain_approximator(lambda s: s), None])
    out = np.full((4, 2), np.nan)
    result = dmp_gains.compute_gain_outputs(np.ones((4, 1)), out=out)
    assert result is out
    assert_array_equal(out[:, 1], np.zeros(4))
    assert not np.any(np.isnan(out))


def test_scratch_buffers_are_reused():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=1), [trained_gain_approximator(lambda s: s)])
    x, xd, gains = dmp_gains.integrate_start()
    buffer_one = dmp_gains._gains_outputs_one_prealloc
    x_updated = np.empty_like(x)
    for _ in range(10):
        dmp_gains.integrate_step(0.01, x, x_updated, xd, gains)
        x[:] = x_updated
    assert dmp_gains._gains_outputs_one_prealloc is buffer_one

    dmp_gains.compute_gain_outputs(np.ones((5, 1)))
    buffer_batch = dmp_gains._gains_outputs_prealloc
    dmp_gains.compute_gain_outputs(np.zeros((5, 1)))
    assert dmp_gains._gains_outputs_prealloc is buffer_batch
    dmp_gains.compute_gain_outputs(np.zeros((6, 1)))
    assert dmp_gains._gains_outputs_prealloc.shape == (6, 1)


def test_integrate_start_and_step():
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=2), [
        trained_gain_approximator(lambda s: 100.0 * s),
        trained_gain_approximator(lambda s: 1.0 - s)])
    x, xd, gains = dmp_gains.integrate_start()
    assert x[-1] == 1.0
    assert_array_equal(
        gains, dmp_gains.compute_gain_outputs(np.ones((1, 1)))[0])

    x_updated, xd_updated, gains_updated = dmp_gains.integrate_step(0.1, x)
    assert x_updated[-1] < x[-1]
    expected = dmp_gains.compute_gain_outputs(dmp_gains.phase(x_updated))[0]
    assert_array_equal(gains_updated, expected)
    assert gains_updated[0] < gains[0]

    reference_x, reference_xd = dmp_gains.dmp.integrate_step(0.1, x)
    assert_array_equal(x_updated, reference_x)
    assert_array_equal(xd_updated, reference_xd)


def test_integrate_step_into_output_arrays():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [trained_gain_approximator(lambda s: s), None])
    x, _, _ = dmp_gains.integrate_start()
    x_updated = np.empty_like(x)
    xd_updated = np.empty_like(x)
    gains = np.empty(2)
    result = dmp_gains.integrate_step(0.01, x, x_updated, xd_updated, gains)
    assert result[0] is x_updated
    assert result[1] is xd_updated
    assert result[2] is gains


def test_analytical_solution():
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=2), [
        trained_gain_approximator(lambda s: 2.0 * s), None])
    ts = np.linspace(0.0, 1.0, 51)
    xs, xds, forcing_terms, fa_outputs, gains = \
        dmp_gains.analytical_solution(ts)
    assert xs.shape == (51, 7)
    assert gains.shape == (51, 2)
    assert_array_equal(
        gains, dmp_gains.compute_gain_outputs(dmp_gains.phase(xs)))
    assert_array_equal(gains[:, 1], np.zeros(51))

    reference = dmp_gains.dmp.analytical_solution(ts)
    assert_array_equal(xs, reference[0])
    assert_array_equal(forcing_terms, reference[2])

    trajectory = dmp_gains.analytical_trajectory(ts)
    assert trajectory.n_dims == 2
    assert_array_equal(trajectory.misc, gains)


def test_train():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [FunctionApproximatorRBFN() for _ in range(2)])
    demonstration = demonstration_with_gains([10.0, 20.0])
    dmp_gains.train(demonstration)

    assert all(fa.is_trained() for fa in dmp_gains.dmp.function_approximators)
    assert all(fa.is_trained()
               for fa in dmp_gains.function_approximators_gains)
    trajectory = dmp_gains.analytical_trajectory(demonstration.ts)
    assert_array_almost_equal(trajectory.misc, demonstration.misc)

    dmp_gains.train(demonstration_with_gains([5.0, 1.0]))
    _, _, gains = dmp_gains.integrate_start()
    assert_array_almost_equal(gains, [5.0, 1.0])


def test_train_with_absent_slot():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [None, FunctionApproximatorRBFN()])
    with pytest.warns(MissingFunctionApproximatorWarning):
        dmp_gains.train(demonstration_with_gains([10.0, 20.0]))
    assert dmp_gains.function_approximators_gains[0] is None
    _, _, gains = dmp_gains.integrate_start()
    assert_array_almost_equal(gains, [0.0, 20.0])


def test_train_preconditions():
    demonstration = demonstration_with_gains([10.0, 20.0])

    dmp_gains = DMPWithGainSchedules(DMP(n_dims=2))
    with pytest.raises(ConfigurationError):
        dmp_gains.train(demonstration)

    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [FunctionApproximatorRBFN() for _ in range(2)])
    demonstration.misc = np.ones((demonstration.length, 3))
    with pytest.raises(ConfigurationError):
        dmp_gains.train(demonstration)
    demonstration.misc = None
    with pytest.raises(ConfigurationError):
        dmp_gains.train(demonstration)

    # nothing has been trained
    assert not any(
        fa.is_trained() for fa in dmp_gains.dmp.function_approximators)
    assert dmp_gains.dmp.execution_time_ == 1.0


def test_train_saves_one_directory_per_gain(tmp_path):
    directory = str(tmp_path)
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [FunctionApproximatorRBFN() for _ in range(2)])
    dmp_gains.train(demonstration_with_gains([1.0, 2.0]),
                    save_directory=directory)
    for d in range(2):
        assert os.path.exists(
            os.path.join(directory, f"gains{d}", "weights.txt"))


def test_train_saves_single_gain_in_directory(tmp_path):
    directory = str(tmp_path)
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=1), [FunctionApproximatorRBFN()])
    dmp_gains.train(demonstration_with_gains([1.0]), save_directory=directory)
    assert os.path.exists(os.path.join(directory, "weights.txt"))
    assert not os.path.exists(os.path.join(directory, "gains0"))


def test_clones_are_independent():
    dmp_gains = DMPWithGainSchedules(
        DMP(n_dims=2), [FunctionApproximatorRBFN() for _ in range(2)])
    dmp_gains.train(demonstration_with_gains([10.0, 20.0]))
    dmp_gains_clone = dmp_gains.clone()

    assert dmp_gains_clone.dmp is not dmp_gains.dmp
    for fa, fa_clone in zip(dmp_gains.function_approximators_gains,
                            dmp_gains_clone.function_approximators_gains):
        assert fa is not fa_clone

    phases = np.linspace(1.0, 0.01, 10)[:, np.newaxis]
    gains = np.copy(dmp_gains.compute_gain_outputs(phases))
    assert_array_equal(dmp_gains_clone.compute_gain_outputs(phases), gains)

    dmp_gains_clone.train(demonstration_with_gains([-1.0, -2.0]))
    assert_array_equal(dmp_gains.compute_gain_outputs(phases), gains)
    assert_array_almost_equal(
        dmp_gains_clone.compute_gain_outputs(phases),
        np.tile([-1.0, -2.0], (10, 1)))


def test_constructor_clones_arguments():
    dmp = DMP(n_dims=1)
    fa = FunctionApproximatorRBFN()
    dmp_gains = DMPWithGainSchedules(dmp, [fa])
    dmp_gains.train(demonstration_with_gains([3.0]))
    assert not fa.is_trained()
    assert not dmp.function_approximators[0].is_trained()


def test_rollout():
    dmp_gains = DMPWithGainSchedules(DMP(n_dims=2))
    ts = np.linspace(0.0, 1.0, 11)
    assert_array_equal(dmp_gains.rollout(ts), dmp_gains.dmp.rollout(ts))
