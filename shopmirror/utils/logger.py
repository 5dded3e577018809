"""
Logging configuration

Modules log through `log`; `setup_logger` is called once by each entry
point (server and CLI) with the loaded settings.
"""
from loguru import logger
import os
import sys

log = logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _log_path(log_dir: str, stem: str) -> str:
    # One file per day; loguru fills in {time}
    return os.path.join(log_dir, stem + "_{time:YYYY-MM-DD}.log")


def setup_logger(settings):
    """Replace every sink with the ones `settings` asks for"""
    logger.remove()

    logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level=settings.log_level)

    if not settings.log_dir:
        return logger

    stem = settings.app_name.lower().replace(" ", "_")
    logger.add(
        _log_path(settings.log_dir, stem),
        rotation="00:00",
        retention=settings.log_retention,
        compression="zip",
        level="INFO"
    )
    logger.add(
        _log_path(settings.log_dir, f"{stem}_errors"),
        rotation="00:00",
        retention=settings.error_log_retention,
        level="ERROR"
    )

    return logger
