"""Log output for the catalogsync command line."""

from __future__ import annotations

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Route records to stderr at INFO, or DEBUG with ``verbose``.

    ``force=True`` replaces handlers installed earlier, which the CLI needs
    when ``--verbose`` is only known after argument parsing.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
