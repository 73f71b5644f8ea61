import logging

import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = None):
    """Root logger -> stderr at LOG_LEVEL. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel((level or config.LOG_LEVEL).upper())
    if not any(getattr(h, "_booking_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._booking_handler = True
        root.addHandler(handler)
