from __future__ import annotations

import logging
import sys


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger with a single stderr handler.

    Pre-existing root handlers are removed first, so calling this more than
    once (e.g. when the app module is re-imported under a reloader) does not
    duplicate output.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    logging.captureWarnings(True)
