import json
import logging
from io import StringIO
from pathlib import Path

import pytest

import movierec.config as config_mod
from movierec.config import AppConfig, ConfigError, PathsConfig, load_app_config
from movierec.logging_utils import JsonFormatter, configure_logger


ENV_VARS = (
    "MOVIEREC_MOVIES_PATH",
    "MOVIEREC_USERS_PATH",
    "MOVIEREC_OUTPUT_PATH",
    "MOVIEREC_REPORT_PATH",
    "MOVIEREC_STRICT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config_mod, "load_dotenv", lambda *args, **kwargs: False)


# ---------------------------------------------------------------------------
# JsonFormatter Tests
# ---------------------------------------------------------------------------

def test_json_formatter_outputs_valid_json_and_expected_keys():
    logger = logging.getLogger("json_formatter_test")
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    logger.info("hello", extra={"event": "test_event", "record_id": "SM112", "count": 3})
    payload = json.loads(stream.getvalue())

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "json_formatter_test"
    assert payload["event"] == "test_event"
    assert payload["record_id"] == "SM112"
    assert payload["count"] == 3
    assert "lineno" not in payload


def test_json_formatter_includes_exception_details():
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger("json_formatter_exc_test")
    logger.handlers = [handler]
    logger.propagate = False

    try:
        raise ValueError("boom")
    except ValueError:
        logger.error("failed", extra={"exception_type": "ValueError"}, exc_info=True)

    payload = json.loads(stream.getvalue())
    assert payload["exception_type"] == "ValueError"
    assert "boom" in payload["exc_info"]


# ---------------------------------------------------------------------------
# configure_logger Tests
# ---------------------------------------------------------------------------

def test_configure_logger_is_idempotent():
    logger_name = "config_test_logger"
    logging.getLogger(logger_name).handlers = []

    l1 = configure_logger(logger_name)
    l2 = configure_logger(logger_name)

    assert l1 is l2
    assert len(l1.handlers) == 1
    assert isinstance(l1.handlers[0].formatter, JsonFormatter)
    assert l1.propagate is False


# ---------------------------------------------------------------------------
# load_app_config Tests
# ---------------------------------------------------------------------------

def test_load_app_config_defaults():
    cfg = load_app_config()

    assert cfg == AppConfig(paths=PathsConfig(), strict=True)
    assert cfg.paths.movies_path == Path("data/movies.txt")


def test_load_app_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("MOVIEREC_MOVIES_PATH", str(tmp_path / "m.txt"))
    monkeypatch.setenv("MOVIEREC_USERS_PATH", str(tmp_path / "u.txt"))
    monkeypatch.setenv("MOVIEREC_OUTPUT_PATH", str(tmp_path / "out.txt"))
    monkeypatch.setenv("MOVIEREC_REPORT_PATH", str(tmp_path / "report.csv"))
    monkeypatch.setenv("MOVIEREC_STRICT", "no")

    cfg = load_app_config()

    assert cfg.paths.movies_path == tmp_path / "m.txt"
    assert cfg.paths.users_path == tmp_path / "u.txt"
    assert cfg.paths.output_path == tmp_path / "out.txt"
    assert cfg.paths.report_path == tmp_path / "report.csv"
    assert cfg.strict is False


@pytest.mark.parametrize("raw,expected", [("1", True), ("TRUE", True), (" yes ", True), ("0", False), ("off", False)])
def test_load_app_config_parses_strict_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("MOVIEREC_STRICT", raw)
    assert load_app_config().strict is expected


def test_load_app_config_invalid_strict_raises(monkeypatch):
    monkeypatch.setenv("MOVIEREC_STRICT", "maybe")

    with pytest.raises(ConfigError, match="MOVIEREC_STRICT"):
        load_app_config()
