"""Tests for ricedebias.denoise.rice_debias."""

import numpy as np
import numpy.testing as npt
import pytest

from ricedebias.denoise.rice_debias import NOISE_FLOOR, rice_debias, rice_mean


def test_rice_mean_zero_amplitude():
    # A pure noise magnitude follows a Rayleigh distribution
    npt.assert_allclose(rice_mean(0.0, 1.0), np.sqrt(np.pi / 2))
    npt.assert_allclose(rice_mean(0.0, 3.0), 3.0 * np.sqrt(np.pi / 2))


def test_rice_mean_high_snr():
    # At high SNR the expectation approaches sqrt(A**2 + sigma**2)
    amplitude = np.array([50.0, 200.0, 1e4])
    npt.assert_allclose(
        rice_mean(amplitude, 1.0), np.sqrt(amplitude**2 + 1.0), rtol=1e-4
    )
    assert np.all(rice_mean(amplitude, 1.0) > amplitude)
    assert np.isfinite(rice_mean(1e8, 1.0))


def test_rice_mean_monte_carlo():
    rng = np.random.default_rng(1234)
    amplitude, sigma = 2.0, 1.5
    n = 400000
    magnitude = np.abs(
        amplitude + rng.normal(0, sigma, n) + 1j * rng.normal(0, sigma, n)
    )
    npt.assert_allclose(magnitude.mean(), rice_mean(amplitude, sigma), rtol=5e-3)


def test_rice_debias_scalar():
    corrected = rice_debias(10.0, 1.0)
    assert isinstance(corrected, float)
    assert 0.0 <= corrected < 10.0
    npt.assert_allclose(rice_mean(corrected, 1.0), 10.0, rtol=1e-8)


def test_rice_debias_nonnegative():
    rng = np.random.default_rng(0)
    signal = np.concatenate([rng.normal(0, 5, 1000), [-np.inf, np.inf, np.nan]])
    sigma = rng.uniform(0.1, 4.0, signal.size)
    corrected = rice_debias(signal, sigma)
    assert corrected.shape == signal.shape
    assert np.all(corrected >= 0)


def test_rice_debias_below_noise_floor():
    sigma = 2.0
    signal = np.array([-1.0, 0.0, 1.0, sigma * NOISE_FLOOR])
    npt.assert_array_equal(rice_debias(signal, sigma), 0.0)


@pytest.mark.parametrize("sigma", [0.5, 1.0, 7.0])
def test_rice_debias_monotonic(sigma):
    signal = np.linspace(0, 20 * sigma, 2001)
    corrected = rice_debias(signal, sigma)
    assert np.all(np.diff(corrected) >= 0)
    assert np.all(corrected <= signal)


@pytest.mark.parametrize("sigma", [0.3, 1.0, 25.0])
def test_rice_debias_inverts_rice_mean(sigma):
    amplitude = sigma * np.array([1.0, 2.0, 5.0, 10.0, 100.0])
    recovered = rice_debias(rice_mean(amplitude, sigma), sigma)
    npt.assert_allclose(recovered, amplitude, rtol=1e-6)


def test_rice_debias_nonpositive_sigma_passthrough():
    signal = np.array([3.0, -2.0, 10.0])
    npt.assert_array_equal(rice_debias(signal, 0.0), signal)
    npt.assert_array_equal(rice_debias(signal, -1.0), signal)
    npt.assert_array_equal(rice_debias(signal, np.nan), signal)
    assert rice_debias(4.0, 0.0) == 4.0


def test_rice_debias_broadcast_sigma_map():
    signal = np.full((2, 3, 4), 10.0)
    sigma = np.ones((2, 3, 4))
    sigma[0] = 0.0
    corrected = rice_debias(signal, sigma)
    npt.assert_array_equal(corrected[0], 10.0)
    npt.assert_allclose(corrected[1], rice_debias(10.0, 1.0))


def test_rice_debias_pure():
    signal = np.array([5.0, 6.0, 7.0])
    sigma = np.array([1.0, 1.0, 1.0])
    first = rice_debias(signal, sigma)
    npt.assert_array_equal(signal, [5.0, 6.0, 7.0])
    npt.assert_array_equal(rice_debias(signal, sigma), first)


def test_rice_debias_independent_of_other_elements():
    # A slowly converging neighbour must not refine the other results
    alone = rice_debias(5.0, 1.0)
    assert rice_debias(np.array([5.0, 1e6]), 1.0)[0] == alone
    assert rice_debias(np.array([1e6, 5.0, 1.3]), 1.0)[1] == alone
    signal = np.array([2.0, 7.0, 40.0, 3e5])
    sigma = np.array([1.0, 0.5, 3.0, 2.0])
    together = rice_debias(signal, sigma)
    for s, sg, c in zip(signal, sigma, together):
        assert rice_debias(s, sg) == c


def test_rice_debias_max_iter():
    # One step narrows [0, 10] to [5, 10] since rice_mean(5, 1) < 10
    npt.assert_allclose(rice_debias(10.0, 1.0, max_iter=1), 7.5)
    npt.assert_allclose(rice_debias(10.0, 1.0, max_iter=0), 5.0)
