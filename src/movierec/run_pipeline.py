from __future__ import annotations

import logging

from .config import ConfigError, load_app_config
from .logging_utils import configure_logger
from .parsers import ParseError, read_movies, read_users
from .service.recommendation_service import RecommendationService
from .writers import build_validation_report, save_validation_report_to_csv


def main() -> int:
    """
    Entry point for the catalog validation and recommendation pipeline.

    Steps:
        1. Initialize logger and load configuration.
        2. Read the movies and users files.
        3. Validate the catalog and process every user.
        4. Write the recommendations file.
        5. Save the validation report to CSV.

    Returns:
        Process exit code: 0 on success, 1 when input or config is unusable.
    """
    logger = configure_logger(name="movierec.pipeline", level=logging.INFO)

    logger.info("Starting recommendation pipeline", extra={"event": "pipeline_start"})

    try:
        app_config = load_app_config()
        movies = read_movies(app_config.paths.movies_path, logger=logger)
        users = read_users(app_config.paths.users_path, logger=logger)
    except (ConfigError, ParseError, FileNotFoundError) as exc:
        logger.error(
            "Pipeline aborted",
            extra={"event": "pipeline_abort", "exception_type": type(exc).__name__},
            exc_info=True,
        )
        return 1

    service = RecommendationService.from_config(app_config, logger=logger)
    result = service.run(movies, users)

    output_path = app_config.paths.output_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="\n") as f:
        written = service.write_results(result.users, f)

    logger.info(
        "Recommendations written",
        extra={"event": "write_recommendations_success", "path": str(output_path), "count": written},
    )

    save_validation_report_to_csv(
        build_validation_report(result.report_rows()),
        output_path=app_config.paths.report_path,
        logger=logger,
    )

    logger.info("Recommendation pipeline finished successfully", extra={"event": "pipeline_end"})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
