"""
Logging helpers.

Every dagtensor module logs through ``logging.getLogger(__name__)``; the
package root logger only carries a `NullHandler` so that nothing is printed
unless the application opts in, either with its own logging setup or with
`configure_logging`.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from ._config import get_config

ROOT_LOGGER_NAME = "dagtensor"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Attach a stream handler to the ``dagtensor`` logger.

    Calling this more than once replaces the handler installed by a previous
    call instead of stacking duplicates.

    Parameters
    ----------
    level : int | str, optional
        Logging level. Defaults to the configured ``log_level``.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if level is None:
        level = get_config().log_level
    if isinstance(level, str):
        level = level.upper()

    for handler in list(root.handlers):
        if getattr(handler, "_dagtensor_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._dagtensor_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return root
