from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping, Optional, TextIO

import pandas as pd

from .logging_utils import configure_logger

ANSI_ESCAPE = re.compile(r"\x1b\[[;\d]*m")

REPORT_COLUMNS = ["record_type", "label", "id", "field", "kind", "reason"]


def strip_ansi(text: Optional[str]) -> str:
    """Remove terminal colour sequences such as ESC[31m from `text`."""
    if text is None:
        return ""
    return ANSI_ESCAPE.sub("", text)


def write_recommendation(stream: TextIO, name: str, user_id: str, titles: Iterable[str]) -> None:
    """
    Write one accepted user as two lines:

        name,id
        Title One,Title Two

    Titles are sorted so repeated runs produce identical files. An empty
    recommendation set produces a blank second line.
    """
    stream.write(f"{name},{user_id}\n")
    stream.write(",".join(sorted(titles)) + "\n")


def write_error(stream: TextIO, name: str, user_id: str, message: str) -> None:
    """Write a single `name,id,message` line with colour codes removed."""
    stream.write(f"{name},{user_id},{strip_ansi(message)}\n")


def write_first_error(stream: TextIO, name: str, user_id: str, *errors: Optional[str]) -> bool:
    """
    Write only the first non-empty error, in the order given.

    Callers pass errors by priority: name, id, then the empty-recommendation
    condition.

    Returns:
        True if an error line was written.
    """
    for error in errors:
        if error:
            write_error(stream, name, user_id, error)
            return True
    return False


def build_validation_report(rows: Iterable[Mapping[str, object]]) -> pd.DataFrame:
    """
    Build a tabular audit of failed validations.

    Each row holds record_type ("movie" / "user"), label (title or name),
    id, field, kind and reason. Missing keys are left empty.
    """
    df = pd.DataFrame(list(rows), columns=REPORT_COLUMNS)
    return df.fillna("")


def save_validation_report_to_csv(
    report_df: pd.DataFrame,
    output_path: Path,
    logger: logging.Logger | None = None,
) -> None:
    """
    Save the validation report to a CSV file.
    Ensures the output folder exists and logs the operation using JSON logs.
    """
    _logger = logger or configure_logger()

    _logger.info(
        "Saving validation report to CSV",
        extra={
            "event": "save_validation_report",
            "count": len(report_df),
            "path": str(output_path),
        },
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    report_df.to_csv(output_path, index=False, encoding="utf-8-sig")

    _logger.info(
        "Validation report saved",
        extra={"event": "save_validation_report_success", "path": str(output_path)},
    )
