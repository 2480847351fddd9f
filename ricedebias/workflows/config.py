"""Defaults for the command line read from a TOML file.

Example::

    [ricedebias]
    mask = "brain_mask.nii.gz"
    rician = "sigma.nii.gz"
    maxdiff = 3.05e-3
    num_threads = 4
"""

try:  # standard module since Python 3.11
    import tomllib as toml
except ImportError:
    # available for older Python via pip
    import tomli as toml

from ricedebias.denoise.noise_model import ConfigurationError

SECTION = "ricedebias"
CONFIG_KEYS = ("mask", "rician", "maxdiff", "background", "num_threads", "chunk_size")
INT_KEYS = ("num_threads", "chunk_size")


def load_config(config_file):
    """Read the ``[ricedebias]`` table of a TOML file.

    Parameters
    ----------
    config_file : str or Path
        Path to the configuration file.

    Returns
    -------
    options : dict
        Values for the keys in ``CONFIG_KEYS`` found in the file.

    Raises
    ------
    ConfigurationError
        If the file cannot be decoded or holds unknown keys, or if
        ``num_threads`` or ``chunk_size`` is not an integer.
    """
    try:
        with open(config_file, "rb") as f:
            config = toml.load(f)
    except toml.TOMLDecodeError as e:
        raise ConfigurationError(f"Error decoding '{config_file}': {e}") from e

    options = config.get(SECTION, {})
    if not isinstance(options, dict):
        raise ConfigurationError(f"'{SECTION}' in '{config_file}' must be a table.")
    unknown = sorted(set(options) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in '{config_file}': {', '.join(unknown)}."
        )
    for key in INT_KEYS:
        value = options.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(
                f"'{key}' in '{config_file}' must be an integer, got {value!r}."
            )
    return dict(options)


def merge_options(file_options, cli_options):
    """Overlay the command line values that were given on file values."""
    merged = dict(file_options)
    merged.update({k: v for k, v in cli_options.items() if v is not None})
    return merged
