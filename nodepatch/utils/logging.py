from __future__ import annotations

import logging
from typing import Optional, Union

from nodepatch.config import get_log_level

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None, *, force: bool = False) -> None:
    # Level defaults to NODEPATCH_LOG_LEVEL. Unknown level names raise ValueError.
    logging.basicConfig(
        level=get_log_level() if level is None else level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
