from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict

# Metadata keys forwarded from logger.info(..., extra={...})
STRUCTURED_FIELDS = ("event", "record_id", "field", "reason", "count", "path", "exception_type")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per log line for the recommendation pipeline.

    Pipeline events carry their details as extra fields, for example:
        validation_failed    record_id, field, reason (one per failed rule)
        user_check_failed    record_id, field, reason (first failure per user)
        read_users_success   path, count
        pipeline_abort       exception_type, plus exc_info
    """

    def format(self, record: logging.LogRecord) -> str:
        log_payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in STRUCTURED_FIELDS:
            if hasattr(record, attr):
                log_payload[attr] = getattr(record, attr)

        if record.exc_info:
            log_payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_payload, ensure_ascii=False, default=str)


def configure_logger(name: str = "movierec.pipeline", level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with JSON formatting.

    Calling it twice with the same name reuses the existing handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger
