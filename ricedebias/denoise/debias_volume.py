from concurrent.futures import ThreadPoolExecutor

import numpy as np

from ricedebias.denoise.rice_debias import rice_debias
from ricedebias.utils.logging import logger
from ricedebias.utils.multiproc import determine_num_processes

BACKGROUND_MODES = ("input", "zero")


def _volume_batches(n_volumes, chunk_size):
    """Split ``range(n_volumes)`` into contiguous ``(start, stop)`` ranges."""
    return [
        (start, min(start + chunk_size, n_volumes))
        for start in range(0, n_volumes, chunk_size)
    ]


def _debias_batch(data, out, *, start, stop, sigma, mask, debias):
    """Correct volumes ``start`` to ``stop`` of `data` into `out`.

    Only the ``out[..., start:stop]`` slice is written.
    """
    if mask is not None and isinstance(sigma, np.ndarray):
        sigma = sigma[mask]

    for vol in range(start, stop):
        values = data[..., vol] if mask is None else data[..., vol][mask]
        if sigma is not None:
            values = debias(values, sigma)
        if mask is None:
            out[..., vol] = values
        else:
            out[..., vol][mask] = values

    logger.debug(f"Corrected volumes {start} to {stop - 1}")


def debias_dwi(
    data,
    noise,
    *,
    mask=None,
    background="input",
    out=None,
    num_threads=None,
    chunk_size=10,
    out_dtype=np.float32,
    debias=rice_debias,
):
    """Remove the Rician bias from every volume of a DWI dataset.

    Parameters
    ----------
    data : ndarray
        3D or 4D diffusion-weighted data (X, Y, Z[, N]).
    noise : NoNoise, ScalarNoise or NoiseMap
        Noise model. Its ``sigma_field()`` gives None (no correction), a
        float, or a 3D array matching the spatial shape of `data`.
    mask : ndarray, optional
        3D mask. Voxels with values greater than zero are corrected, the
        others keep their initial output value.
    background : {'input', 'zero'}, optional
        Initial value of a newly allocated output: a copy of the input or
        zeros. Ignored when `out` is given.
    out : ndarray, optional
        Preallocated output with the shape of `data`.
    num_threads : int, optional
        Number of worker threads. None or -1 use all cores, negative values
        count back from the number of cores.
    chunk_size : int, optional
        Number of consecutive volumes handled by one task.
    out_dtype : data-type, optional
        Data type of a newly allocated output.
    debias : callable, optional
        ``debias(signal, sigma)`` applied to foreground voxels.

    Returns
    -------
    out : ndarray
        Corrected data, same shape as `data`.
    """
    data = np.asarray(data)
    if data.ndim not in (3, 4):
        raise ValueError(f"data must be 3D or 4D, got {data.ndim}D")
    if chunk_size < 1:
        raise ValueError("chunk_size must be a positive integer")

    spatial_shape = data.shape[:3]
    if mask is not None:
        mask = np.asarray(mask)
        if mask.shape != spatial_shape:
            raise ValueError(
                f"mask shape {mask.shape} does not match data shape {spatial_shape}"
            )
        mask = mask > 0

    sigma = noise.sigma_field()
    if isinstance(sigma, np.ndarray) and sigma.shape != spatial_shape:
        raise ValueError(
            f"noise map shape {sigma.shape} does not match data shape "
            f"{spatial_shape}"
        )

    if out is None:
        if background == "input":
            out = data.astype(out_dtype, copy=True)
        elif background == "zero":
            out = np.zeros(data.shape, dtype=out_dtype)
        else:
            raise ValueError(
                f"background must be one of {BACKGROUND_MODES}, got '{background}'"
            )
    elif out.shape != data.shape:
        raise ValueError(f"out shape {out.shape} does not match data {data.shape}")

    data4d = data[..., None] if data.ndim == 3 else data
    out4d = out[..., None] if out.ndim == 3 else out

    batches = _volume_batches(data4d.shape[-1], chunk_size)
    num_threads = min(determine_num_processes(num_threads), max(len(batches), 1))
    logger.debug(
        f"Processing {data4d.shape[-1]} volumes in {len(batches)} batches "
        f"on {num_threads} threads"
    )

    kwargs = {"sigma": sigma, "mask": mask, "debias": debias}
    if num_threads == 1:
        for start, stop in batches:
            _debias_batch(data4d, out4d, start=start, stop=stop, **kwargs)
    else:
        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = [
                executor.submit(
                    _debias_batch, data4d, out4d, start=start, stop=stop, **kwargs
                )
                for start, stop in batches
            ]
            for future in futures:
                future.result()

    return out
