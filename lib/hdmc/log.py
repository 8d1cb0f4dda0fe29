import logging
import os

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level="INFO", log_file=None, fmt=DEFAULT_FORMAT):
    """
    Configure the dedicated ``hdmc`` logger, the root logger is left alone.

    Args:
        level (str or int): the logging level, e.g. "INFO"
        log_file (str): if given, the messages are also written to this file
        fmt (str): the format of the log messages

    Return:
        logging.Logger: the configured logger
    """
    logger = logging.getLogger("hdmc")
    logger.setLevel(level)
    logger.propagate = False

    # calling it twice should not duplicate the messages
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(fmt)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Logging to {log_file}")
    return logger
