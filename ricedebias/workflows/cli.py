"""Command line entry point of the Rician bias correction."""

import argparse
import sys

from nibabel.filebasedimages import ImageFileError

from ricedebias import LICENSE, __version__
from ricedebias.denoise.debias_volume import BACKGROUND_MODES
from ricedebias.denoise.noise_model import DEFAULT_MAXDIFF, ConfigurationError
from ricedebias.io.utils import GeometryMismatchError
from ricedebias.utils.logging import logger, set_log_level
from ricedebias.workflows.config import load_config, merge_options
from ricedebias.workflows.denoise import RiceDebiasFlow

DESCRIPTION = """\
Rician bias correction of magnitude diffusion-weighted MRI.

If you use this software, please cite:
  Kaden E, Kelm ND, Carson RP, Does MD, and Alexander DC: Multi-
  compartment microscopic diffusion imaging. NeuroImage, 139:346-359,
  2016.  http://dx.doi.org/10.1016/j.neuroimage.2016.06.002
"""

DEFAULTS = {
    "mask": "none",
    "rician": "none",
    "maxdiff": DEFAULT_MAXDIFF,
    "background": "input",
    "num_threads": None,
    "chunk_size": 10,
}


class _InfoAction(argparse.Action):
    """Print a text and exit, bypassing the required arguments."""

    def __init__(self, option_strings, dest, text, **kwargs):
        super().__init__(option_strings, dest, nargs=0, **kwargs)
        self.text = text

    def __call__(self, parser, namespace, values, option_string=None):
        print(self.text)
        parser.exit()


def build_parser():
    p = argparse.ArgumentParser(
        prog="ricedebias",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("input", help="4D diffusion-weighted NIfTI volume")
    p.add_argument("output", help="Corrected NIfTI volume")

    # Defaults are None so that values from --config are only overridden by
    # options actually given.
    p.add_argument("--mask", help="Foreground mask [default: none]")
    p.add_argument(
        "--rician",
        help="Rician noise: standard deviation or noise map [default: none]",
    )
    p.add_argument(
        "--maxdiff",
        help=f"Maximum diffusivity (mm^2/s) [default: {DEFAULT_MAXDIFF:g}]",
    )
    p.add_argument(
        "--background",
        choices=BACKGROUND_MODES,
        help="Output value outside the mask [default: input]",
    )
    p.add_argument(
        "--num_threads",
        type=int,
        help="Number of threads, -1 for all cores [default: all cores]",
    )
    p.add_argument(
        "--chunk_size", type=int, help="Volumes per parallel task [default: 10]"
    )
    p.add_argument("--config", help="TOML file with a [ricedebias] table")
    p.add_argument(
        "--force", action="store_true", help="Overwrite an existing output file"
    )
    p.add_argument(
        "--log_level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log messages display level",
    )
    p.add_argument("--license", action=_InfoAction, text=LICENSE,
                   help="License information")
    p.add_argument("--version", action="version",
                   version=f"ricedebias {__version__}", help="Software version")
    return p


def main(argv=None):
    """Run the command line; return the process exit status."""
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)

    cli_options = {key: getattr(args, key) for key in DEFAULTS}
    try:
        file_options = load_config(args.config) if args.config else {}
        options = {**DEFAULTS, **merge_options(file_options, cli_options)}

        flow = RiceDebiasFlow(force=args.force)
        written = flow.run(args.input, args.output, **options)
    except (ConfigurationError, GeometryMismatchError, ImageFileError,
            OSError, TypeError, ValueError) as e:
        logger.error(str(e))
        return 1
    return 0 if written is not None else 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
