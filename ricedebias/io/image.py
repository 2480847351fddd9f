import nibabel as nib
import numpy as np
from nibabel.affines import voxel_sizes


def load_nifti(fname, *, return_img=False):
    """Load data and other information from a nifti file.

    Parameters
    ----------
    fname : str or Path
        Full path to a nifti file.
    return_img : bool, optional
        Whether to return the nibabel nifti img object.

    Returns
    -------
    A tuple (data, img.affine), with img appended if `return_img` is set.
    """
    img = nib.load(fname)
    data = np.asarray(img.dataobj)

    ret_val = [data, img.affine]

    if return_img:
        ret_val.append(img)

    return tuple(ret_val)


def save_nifti(fname, data, affine, *, hdr=None, dtype=None):
    """Save a data array into a nifti file.

    Parameters
    ----------
    fname : str or Path
        The full path to the file to be saved.
    data : ndarray
        The array with the data to save.
    affine : 4 x 4 array
        The affine transform associated with the file.
    hdr : nifti header, optional
        May contain additional information to store in the file header.
    dtype : data-type, optional
        On-disk data type. Defaults to the dtype of `data`.

    Returns
    -------
    None
    """
    data = np.asarray(data)
    if dtype is not None:
        data = data.astype(dtype, copy=False)
    result_img = nib.Nifti1Image(data, affine, header=hdr)
    result_img.set_data_dtype(data.dtype)
    result_img.to_filename(str(fname))


class NiftiVolume:
    """A loaded NIfTI volume with its voxel grid metadata.

    Parameters
    ----------
    data : ndarray
        Voxel values. Indexed as ``data[i, j, k]`` or ``data[i, j, k, v]``.
    affine : array (4, 4)
        Voxel to world transform.
    header : nibabel header, optional
        Source header. Voxel sizes are read from its zooms when present,
        otherwise they are derived from `affine`.
    fname : str, optional
        File the volume was read from, used in messages.
    """

    def __init__(self, data, affine, *, header=None, fname=None):
        self.data = np.asarray(data)
        self.affine = np.asarray(affine, dtype=np.float64)
        self.header = header
        self.fname = None if fname is None else str(fname)

    @classmethod
    def from_file(cls, fname, *, ndim=None):
        """Open an existing NIfTI file for reading.

        Parameters
        ----------
        fname : str or Path
            Path of the file.
        ndim : int or tuple of int, optional
            Accepted dimensionalities. ``ValueError`` is raised on mismatch.
        """
        data, affine, img = load_nifti(fname, return_img=True)
        if ndim is not None:
            accepted = (ndim,) if isinstance(ndim, int) else tuple(ndim)
            if data.ndim not in accepted:
                names = " or ".join(f"{n}D" for n in accepted)
                raise ValueError(
                    f"'{fname}' is a {data.ndim}D volume, expected {names}."
                )
        return cls(data, affine, header=img.header, fname=fname)

    @property
    def shape(self):
        return self.data.shape

    @property
    def ndim(self):
        return self.data.ndim

    @property
    def name(self):
        return self.fname if self.fname is not None else "<array>"

    def size(self, axis):
        """Number of voxels along `axis`."""
        return self.data.shape[axis]

    def pixsize(self, axis):
        """Physical voxel size along `axis`."""
        if self.header is not None:
            return float(self.header.get_zooms()[axis])
        return float(voxel_sizes(self.affine)[axis])

    def has_equal_spatial_coords(self, other):
        """Whether both volumes share exactly the same voxel to world map."""
        return np.array_equal(self.affine, other.affine)

    def __getitem__(self, index):
        return self.data[index]

    def __repr__(self):
        return f"NiftiVolume({self.name!r}, shape={self.shape})"
