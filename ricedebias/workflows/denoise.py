import numpy as np

from ricedebias.denoise.debias_volume import debias_dwi
from ricedebias.denoise.noise_model import NoiseMap, resolve_debias_config
from ricedebias.io.image import NiftiVolume, save_nifti
from ricedebias.io.utils import validate_auxiliary_volumes
from ricedebias.utils.logging import logger
from ricedebias.workflows.workflow import Workflow


class RiceDebiasFlow(Workflow):
    last_config = None

    @classmethod
    def get_short_name(cls):
        return "ricedebias"

    def run(
        self,
        input_file,
        output_file,
        mask="none",
        rician="none",
        maxdiff=None,
        background="input",
        num_threads=None,
        chunk_size=10,
    ):
        """Remove the Rician bias from magnitude diffusion-weighted data.

        Parameters
        ----------
        input_file : string or Path
            Path to the 4D diffusion-weighted volume.
        output_file : string or Path
            Path of the corrected volume to be saved.
        mask : string or Path, optional
            Path to a 3D foreground mask, or 'none'.
        rician : string or float, optional
            Noise standard deviation, path to a 3D noise map, or 'none'.
        maxdiff : string or float, optional
            Maximum diffusivity in mm^2/s (default 3.05e-3).
        background : string, optional
            Value of voxels outside the mask: 'input' keeps the input value,
            'zero' writes zeros.
        num_threads : int, optional
            Number of threads. If None (default) then all available threads
            will be used.
        chunk_size : int, optional
            Number of volumes processed per task.

        Returns
        -------
        output_file : string or None
            The written file, or None when an existing output stopped the
            workflow.
        """
        if not self.manage_output_overwrite([output_file]):
            return None

        logger.info(f"Loading {input_file}")
        dwi = NiftiVolume.from_file(input_file, ndim=(3, 4))
        config = resolve_debias_config(mask=mask, rician=rician, maxdiff=maxdiff)
        noise_map = config.noise.volume if isinstance(config.noise, NoiseMap) else None
        validate_auxiliary_volumes(dwi, config.mask, noise_map)
        self.last_config = config

        logger.info(f"Applying Rician bias correction on {input_file}")
        corrected = debias_dwi(
            dwi.data,
            config.noise,
            mask=None if config.mask is None else config.mask.data,
            background=background,
            num_threads=num_threads,
            chunk_size=int(chunk_size),
        )

        save_nifti(output_file, corrected, dwi.affine, hdr=dwi.header, dtype=np.float32)
        logger.info(f"Corrected volume saved as {output_file}")
        return str(output_file)
