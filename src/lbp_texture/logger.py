import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def setup_logging(level="INFO", log_file=None, rotation="10 MB", retention="30 days"):
    """
    Configure the global loguru logger once per process.

    Removes the default sink, logs to stderr and optionally to a rotating file.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level=level,
            format=LOG_FORMAT,
            rotation=rotation,
            retention=retention,
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"Logger initialized (level={level}, file={log_file})")
    return logger
