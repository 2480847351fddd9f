r"""Rician bias removal for magnitude MR signals.

A magnitude signal measured under Gaussian noise of standard deviation
``sigma`` in each of the real and imaginary channels follows a Rice
distribution. Its expectation exceeds the underlying amplitude ``A``:

.. math::

   E[M] = \sigma \sqrt{\pi / 2} \; L_{1/2}\left(-\frac{A^2}{2\sigma^2}\right)

where :math:`L_{1/2}` is the Laguerre polynomial of order 1/2, expressible
with the modified Bessel functions :math:`I_0` and :math:`I_1`. The bias is
removed by inverting this expectation for ``A``
:footcite:p:`Gudbjartsson1995`, :footcite:p:`Koay2006`.

References
----------
.. footbibliography::
"""

import numpy as np
from scipy.special import i0e, i1e

NOISE_FLOOR = np.sqrt(np.pi / 2)


def rice_mean(amplitude, sigma):
    """Expected magnitude of a Rician variable.

    Parameters
    ----------
    amplitude : float or ndarray
        Underlying noise-free amplitude ``A >= 0``.
    sigma : float or ndarray
        Gaussian noise standard deviation, ``sigma > 0``.

    Returns
    -------
    mean : float or ndarray
        ``sigma * sqrt(pi/2) * L_{1/2}(-A**2 / (2 sigma**2))``.
    """
    amplitude = np.asarray(amplitude, dtype=np.float64)
    sigma = np.asarray(sigma, dtype=np.float64)
    # Exponentially scaled Bessel functions absorb the exp(-t) factor of
    # L_{1/2} and stay finite at high SNR.
    t = amplitude**2 / (4.0 * sigma**2)
    mean = sigma * NOISE_FLOOR * ((1.0 + 2.0 * t) * i0e(t) + 2.0 * t * i1e(t))
    return mean if mean.ndim else float(mean)


def rice_debias(signal, sigma, *, rtol=1e-10, max_iter=200):
    """Remove the Rician bias from magnitude signals.

    Solves ``rice_mean(A, sigma) == signal`` for ``A`` by bisection on
    ``[0, signal]``. The forward model is increasing in ``A`` and always
    above ``A``, so the root lies in that interval whenever the signal
    exceeds the noise floor ``sigma * sqrt(pi/2)``.

    Parameters
    ----------
    signal : float or ndarray
        Observed magnitude signal.
    sigma : float or ndarray
        Noise standard deviation, broadcast against `signal`. Elements with
        ``sigma <= 0`` (or NaN) are returned unmodified.
    rtol : float, optional
        Bisection of an element stops once its bracket is narrower than
        ``rtol * (upper + sigma)``.
    max_iter : int, optional
        Maximum number of bisection steps.

    Returns
    -------
    amplitude : float or ndarray
        Bias-corrected signal, float64. Signals at or below the noise floor,
        negative or non-finite, are clamped to 0.
    """
    signal, sigma = np.broadcast_arrays(
        np.asarray(signal, dtype=np.float64), np.asarray(sigma, dtype=np.float64)
    )
    amplitude = np.array(signal, dtype=np.float64, copy=True)

    with np.errstate(invalid="ignore"):
        active = sigma > 0
        solvable = active & np.isfinite(signal) & (signal > sigma * NOISE_FLOOR)
    amplitude[active & ~solvable] = 0.0

    target = signal[solvable]
    scale = sigma[solvable]
    lower = np.zeros_like(target)
    upper = target.copy()
    for _ in range(max_iter):
        # Converged brackets are frozen so each element only depends on its
        # own signal and sigma.
        pending = np.flatnonzero(upper - lower > rtol * (upper + scale))
        if pending.size == 0:
            break
        lo, hi = lower[pending], upper[pending]
        middle = 0.5 * (lo + hi)
        above = rice_mean(middle, scale[pending]) > target[pending]
        upper[pending] = np.where(above, middle, hi)
        lower[pending] = np.where(above, lo, middle)
    amplitude[solvable] = 0.5 * (lower + upper)

    return amplitude if amplitude.ndim else float(amplitude)
