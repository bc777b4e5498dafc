import logging
import sys

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logger(name: str = "worldsim", level_name: str = "INFO"):
    """Configure the simulation root logger; unknown level names fall back to INFO."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)

    return logger


def get_logger(module: str) -> logging.Logger:
    """Child logger under the simulation root, e.g. worldsim.combat."""
    return logging.getLogger(f"worldsim.{module}")
