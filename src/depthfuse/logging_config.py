"""Root logger setup used by the fusion CLI."""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that flood DEBUG output while decoding or writing volumes
_QUIET_LOGGERS = ("PIL", "h5py", "matplotlib")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Route depthfuse log records to stdout and, optionally, a file.

    Args:
        level: Root logging level, e.g. logging.DEBUG for ``--verbose`` runs
        log_file: Extra file to mirror the console output into
        format_string: Record format; defaults to DEFAULT_FORMAT
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
