"""Logging setup for ``App.run()``.

Library code only creates named loggers under ``roomgate``. Handlers are
installed here, once, when the app is served.
"""

import logging

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> logging.Logger:
    """Attach a stream handler to the ``roomgate`` logger at *level*.

    Calling it again only updates the level.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        msg = f"Unknown log level: {level!r}"
        raise ValueError(msg)

    logger = logging.getLogger("roomgate")
    logger.setLevel(numeric)
    if not any(getattr(h, "_roomgate", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._roomgate = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
