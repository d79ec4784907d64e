from logging import FileHandler, Formatter, StreamHandler, getLogger

__all__ = [
    "logger_name",
    "get_logger",
    "create_logger",
]

logger_name = "olapclient"
logger = None


def get_logger(path=None):
    """Get the olapclient default logger"""
    global logger

    if logger:
        return logger
    else:
        return create_logger(path)


def create_logger(path=None):
    """Create a default logger. Level and log file are taken from the
    settings when not given."""
    from .settings import get_settings

    global logger
    settings = get_settings()
    path = path or settings.log_path

    logger = getLogger(logger_name)
    logger.setLevel(settings.log_level.upper())
    formatter = Formatter(fmt="%(asctime)s %(levelname)s %(message)s")

    if path:
        # create a logger which logs to a file
        handler = FileHandler(path)
    else:
        # create a default logger
        handler = StreamHandler()

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
