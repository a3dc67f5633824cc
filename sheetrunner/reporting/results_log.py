"""Appends one line per run to the shared CSV results log."""

import csv
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..core.exceptions import ConfigurationError
from ..core.logging_config import get_logger


RESULT_LABEL = "Nuclear IT"

logger = get_logger(__name__)


def append_result(
    path: Optional[Union[str, Path]],
    application: str,
    result: str,
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Append ``label, result, timestamp, application`` to the CSV log.

    Raises:
        ConfigurationError: If no log path is configured
    """
    if path is None or not str(path).strip():
        logger.error("CSV log path is not configured")
        raise ConfigurationError("CSV log path is not configured", key="csv_log_path")

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    stamp = (timestamp or datetime.now()).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    with open(target, "a", newline="", encoding="utf-8") as f:
        csv.writer(f).writerow([RESULT_LABEL, result, stamp, application])

    logger.info(f"Wrote log entry for application: {application}")
    return target
