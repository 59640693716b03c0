"""Logging setup shared by the scripts and the HTTP handler."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
HANDLER_NAME = "fanvote-console"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a console handler to the ``fanvote`` logger namespace.

    Calling this more than once does not stack handlers; handlers added by
    anything else are left alone.
    """
    logger = logging.getLogger("fanvote")
    logger.setLevel(level)
    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        console = logging.StreamHandler()
        console.set_name(HANDLER_NAME)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console)
    logger.propagate = False
    return logger
