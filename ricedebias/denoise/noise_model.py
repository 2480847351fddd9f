"""Noise models and resolution of the correction settings.

The noise level is given either as a number, used for the whole volume, or
as the path of a 3D map holding one value per voxel. Exactly one of
:class:`NoNoise`, :class:`ScalarNoise` and :class:`NoiseMap` describes a run.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ricedebias.io.image import NiftiVolume
from ricedebias.utils.logging import logger

NONE_SENTINEL = "none"
DEFAULT_MAXDIFF = 3.05e-3


class ConfigurationError(ValueError):
    """A configuration value could not be interpreted."""


@dataclass(frozen=True)
class NoNoise:
    """No noise level: signals pass through unmodified."""

    def sigma_field(self):
        return None

    def __str__(self):
        return "none"


@dataclass(frozen=True)
class ScalarNoise:
    """A single noise standard deviation shared by every voxel."""

    sigma: float

    def sigma_field(self):
        # Non-positive values disable the correction instead of failing.
        if not self.sigma > 0:
            return None
        return float(self.sigma)

    def __str__(self):
        return f"scalar sigma={self.sigma:g}"


@dataclass(frozen=True)
class NoiseMap:
    """One noise standard deviation per spatial voxel."""

    volume: NiftiVolume

    def sigma_field(self):
        return np.asarray(self.volume.data, dtype=np.float64)

    def __str__(self):
        return f"map '{self.volume.name}'"


@dataclass(frozen=True)
class DebiasConfig:
    """Resolved settings of a correction run."""

    noise: object
    mask: Optional[NiftiVolume] = None
    maxdiff: float = DEFAULT_MAXDIFF


def _is_none(value):
    return value is None or (isinstance(value, str) and value == NONE_SENTINEL)


def _parse_float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def read_mask(mask):
    """Open the mask volume.

    Parameters
    ----------
    mask : str, Path or None
        Path of a 3D mask, or None / ``"none"`` for no mask.

    Returns
    -------
    mask : NiftiVolume or None
    """
    if _is_none(mask):
        return None
    return NiftiVolume.from_file(mask, ndim=3)


def read_rician(rician):
    """Turn the Rician noise setting into a noise model.

    A value that parses as a number gives a :class:`ScalarNoise`, even when
    it is not positive. Any other value is the path of a 3D noise map.

    Parameters
    ----------
    rician : str, Path, float or None

    Returns
    -------
    noise : NoNoise, ScalarNoise or NoiseMap
    """
    if _is_none(rician):
        return NoNoise()
    sigma = _parse_float(rician)
    if sigma is not None:
        return ScalarNoise(sigma)
    return NoiseMap(NiftiVolume.from_file(rician, ndim=3))


def read_maxdiff(maxdiff):
    """Parse the maximum diffusivity in mm^2/s.

    Raises
    ------
    ConfigurationError
        If `maxdiff` is not a number.
    """
    if maxdiff is None:
        return DEFAULT_MAXDIFF
    value = _parse_float(maxdiff)
    if value is None:
        raise ConfigurationError(f"Unable to parse '{maxdiff}'.")
    return value


def resolve_debias_config(*, mask=None, rician=None, maxdiff=None):
    """Resolve raw mask, noise and diffusivity settings.

    Parameters
    ----------
    mask : str, Path or None
        Mask path, or None / ``"none"``.
    rician : str, Path, float or None
        Noise standard deviation or noise map path, or None / ``"none"``.
    maxdiff : str, float or None
        Maximum diffusivity. Defaults to 3.05e-3 mm^2/s.

    Returns
    -------
    config : DebiasConfig
    """
    maxdiff = read_maxdiff(maxdiff)
    mask_volume = read_mask(mask)
    noise = read_rician(rician)
    logger.info(f"Rician noise: {noise}")
    if mask_volume is not None:
        logger.info(f"Mask: {mask_volume.name}")
    logger.debug(f"Maximum diffusivity: {maxdiff:g} mm^2/s")
    return DebiasConfig(noise=noise, mask=mask_volume, maxdiff=maxdiff)
