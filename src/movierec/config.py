from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PathsConfig:
    """
    Input and output locations for a pipeline run.

    Attributes:
        movies_path: Two-line grouped movie catalog.
        users_path: Two-line grouped user catalog.
        output_path: Recommendations file written for every processed user.
        report_path: CSV audit of failed validations.
    """
    movies_path: Path = Path("data/movies.txt")
    users_path: Path = Path("data/users.txt")
    output_path: Path = Path("recommendations.txt")
    report_path: Path = Path("data/validation_report.csv")


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level configuration object for the recommendation pipeline.

    Attributes:
        paths: File locations.
        strict: Write one error line per rejected user instead of skipping it.
    """
    paths: PathsConfig
    strict: bool = True


def _parse_bool(env_var_name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {env_var_name!r} must be a boolean, got {raw!r}.")


def load_paths_config_from_env(prefix: str = "MOVIEREC") -> PathsConfig:
    """
    Load file locations from environment variables, falling back to defaults.

    Args:
        prefix: Prefix of the environment variables, e.g. MOVIEREC_MOVIES_PATH.
    """
    defaults = PathsConfig()
    return PathsConfig(
        movies_path=Path(os.getenv(f"{prefix}_MOVIES_PATH") or defaults.movies_path),
        users_path=Path(os.getenv(f"{prefix}_USERS_PATH") or defaults.users_path),
        output_path=Path(os.getenv(f"{prefix}_OUTPUT_PATH") or defaults.output_path),
        report_path=Path(os.getenv(f"{prefix}_REPORT_PATH") or defaults.report_path),
    )


def load_app_config(prefix: str = "MOVIEREC") -> AppConfig:
    """
    Construct and return the full application configuration.

    Values from a local .env file are loaded first; real environment
    variables take precedence over it.

    Raises:
        ConfigError: If MOVIEREC_STRICT is set to something that is not a boolean.
    """
    load_dotenv()

    strict_var = f"{prefix}_STRICT"
    raw_strict = os.getenv(strict_var)
    strict = True if not raw_strict else _parse_bool(strict_var, raw_strict)

    return AppConfig(paths=load_paths_config_from_env(prefix), strict=strict)
