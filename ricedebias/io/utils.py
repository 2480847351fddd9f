"""Geometry compatibility checks between volumes sharing a voxel grid."""

import numpy as np


class GeometryMismatchError(ValueError):
    """Two volumes do not share the same voxel grid.

    Attributes
    ----------
    prop : str
        The failing property: ``"shape"``, ``"pixel size"`` or
        ``"coordinate system"``.
    """

    def __init__(self, message, prop):
        super().__init__(message)
        self.prop = prop


def geometry_key(volume):
    """Return ``(shape, pixel sizes, affine)`` of the three spatial axes."""
    return (
        tuple(volume.size(a) for a in range(3)),
        tuple(volume.pixsize(a) for a in range(3)),
        tuple(map(tuple, np.asarray(volume.affine))),
    )


def check_geometry(reference, other, *, ref_name=None, other_name=None):
    """Raise if `other` is not on the same spatial grid as `reference`.

    Shape, pixel size and coordinate system are checked in this order, all
    with exact equality.

    Parameters
    ----------
    reference : NiftiVolume
        Primary volume (3D or 4D).
    other : NiftiVolume
        Auxiliary 3D volume such as a mask or a noise map.
    ref_name, other_name : str, optional
        Names used in the error message. Default to the file names.

    Raises
    ------
    GeometryMismatchError
    """
    ref_name = reference.name if ref_name is None else ref_name
    other_name = other.name if other_name is None else other_name

    if any(reference.size(a) != other.size(a) for a in range(3)):
        raise GeometryMismatchError(
            f"'{ref_name}' and '{other_name}' do not match.", "shape"
        )
    if any(reference.pixsize(a) != other.pixsize(a) for a in range(3)):
        raise GeometryMismatchError(
            f"The pixel sizes of '{ref_name}' and '{other_name}' do not match.",
            "pixel size",
        )
    if not reference.has_equal_spatial_coords(other):
        raise GeometryMismatchError(
            f"The coordinate systems of '{ref_name}' and '{other_name}' "
            "do not match.",
            "coordinate system",
        )


def is_geometry_compatible(reference, other):
    """Whether both volumes have equal geometry keys."""
    return geometry_key(reference) == geometry_key(other)


def validate_auxiliary_volumes(reference, *volumes):
    """Check every volume that is not None against `reference`."""
    for volume in volumes:
        if volume is not None:
            check_geometry(reference, volume)
