import logging


def get_logger(name="ricedebias", *, format="%(levelname)s:%(message)s"):
    """Return a logger with a single stream handler attached.

    Parameters
    ----------
    name : str, optional
        Name of the logger.
    format : str, optional
        Format string passed to the handler's formatter.

    Returns
    -------
    logger : logging.Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format))
        logger.addHandler(handler)
    return logger


def set_log_level(level):
    """Set the package logger level from a name such as ``"DEBUG"``."""
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    logger.setLevel(level)


logger = get_logger()
