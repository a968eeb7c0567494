"""Per-file JSON run reports."""

import json
import logging
from pathlib import Path
from typing import Union

from .models import RunStats

logger = logging.getLogger(__name__)

REPORT_FILE = "report.json"


def write_report(report_dir: Union[str, Path], file_name: str, stats: RunStats) -> Path:
    """
    Write ``report.json`` for one test file.

    Returns:
        Path of the written report
    """
    report_dir = Path(report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)

    report = {
        "file": file_name,
        "stats": stats.to_dict(),
        "tests": [outcome.to_dict() for outcome in stats.outcomes],
    }

    path = report_dir / REPORT_FILE
    with open(path, "w") as f:
        json.dump(report, f, indent=2)

    logger.debug(f"Report written: {path}")
    return path
