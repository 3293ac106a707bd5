"""Root logger configuration for applications embedding physcurate."""

import logging
from pathlib import Path
from typing import Optional, Union

from physcurate.schemas.internal import InternalConfig

logger = logging.getLogger(__name__)


def configure_logging(config: InternalConfig, log_path: Optional[Union[str, Path]] = None) -> None:
    """Configure the root logger from `config.logging.level`.

    Replaces existing root handlers with a console handler and, when
    `log_path` is given, a file handler.
    """
    log_level = getattr(logging, config.logging.level, logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", config.logging.level, log_path)
