"""Logging setup.

Every module logs to a child of the ``htmplx`` logger
(``htmplx.server``, ``htmplx.assembler``, ``htmplx.matcher``). Nothing
is configured on import; applications either configure ``logging``
themselves or call ``configure_logging()``.

The level comes from the argument, else ``HTMPLX_LOGLEVEL``, else INFO::

    HTMPLX_LOGLEVEL=debug uvicorn site:app
"""

import logging
import os
import sys

ENV_LOGLEVEL = "HTMPLX_LOGLEVEL"

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"


def resolve_level(level: str | int | None = None) -> int:
    """Turn a level name, number, or ``None`` into a logging level.

    Unknown names fall back to INFO.
    """
    if level is None:
        level = os.environ.get(ENV_LOGLEVEL, "")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stdout handler to the ``htmplx`` logger and set its level.

    Calling it again replaces the handler rather than adding another.
    """
    logger = logging.getLogger("htmplx")
    logger.setLevel(resolve_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_htmplx", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._htmplx = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
