"""
Service layer for the catalog validation and recommendation pipeline.

This module wires the validators and the recommender together for a whole
run: it decides which movies form the catalog, which users are accepted, and
what ends up in the recommendations file.

Important:
    - No file reading happens here; parsed records are passed in.
    - Uniqueness registries are created per run (or injected by the caller)
      and only this layer adds ids to them, after a record is accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, TextIO, Tuple

from ..config import AppConfig, load_app_config
from ..core.recommend import recommend
from ..models import (
    VALID,
    ErrorKind,
    IdRegistry,
    Invalid,
    Movie,
    Reason,
    User,
    ValidationOutcome,
)
from ..validators import validate_movie, validate_user
from ..writers import write_first_error, write_recommendation


# ---------------------------------------------------------------------
# Typed Return Models
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class RecordFailure:
    """One failed rule for one record, as shown in the validation report."""

    record_type: str
    label: str
    record_id: str
    field: str
    outcome: Invalid

    def as_report_row(self) -> Dict[str, str]:
        return {
            "record_type": self.record_type,
            "label": self.label,
            "id": self.record_id,
            "field": self.field,
            "kind": self.outcome.kind.value,
            "reason": self.outcome.reason,
        }


@dataclass
class CatalogValidation:
    """Movies that passed every rule, plus the failures of the others."""

    accepted: List[Movie] = field(default_factory=list)
    failures: List[RecordFailure] = field(default_factory=list)


# Priority of the per-user checks; only the first failure is reported.
USER_CHECK_ORDER = ("name", "id", "recommendations")


@dataclass(frozen=True)
class UserResult:
    """
    Outcome of processing one user.

    Attributes:
        user: The parsed user.
        error_field: "name", "id" or "recommendations" for the first failure.
        error: The first failure in priority order, or None.
        recommendations: Titles recommended to the user.
    """
    user: User
    error_field: Optional[str] = None
    error: Optional[Invalid] = None
    recommendations: frozenset = frozenset()

    @property
    def accepted(self) -> bool:
        """Name and id are valid; the user may still have no recommendations."""
        return self.error is None or self.error_field == "recommendations"

    def errors_by_priority(self) -> List[Optional[str]]:
        """One slot per entry of USER_CHECK_ORDER; only the failing field is filled."""
        return [
            self.error.reason if self.error is not None and self.error_field == name else None
            for name in USER_CHECK_ORDER
        ]


@dataclass
class PipelineResult:
    catalog: CatalogValidation
    users: List[UserResult]

    def report_rows(self) -> List[Dict[str, str]]:
        rows = [failure.as_report_row() for failure in self.catalog.failures]
        for result in self.users:
            if result.error is not None:
                rows.append(
                    RecordFailure(
                        record_type="user",
                        label=result.user.name,
                        record_id=result.user.id,
                        field=result.error_field or "",
                        outcome=result.error,
                    ).as_report_row()
                )
        return rows


NO_RECOMMENDATIONS = Invalid.of(Reason.NO_RECOMMENDATIONS, ErrorKind.EMPTY_RECOMMENDATIONS)


# ---------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------


@dataclass
class RecommendationService:
    """
    High-level service running validation and recommendation for a batch.

    Attributes:
        strict: When True every processed user appears in the output, either
            as a recommendation block or as one error line. When False,
            rejected users and users without watched movies are skipped.
        logger: Logger used for structured pipeline events.
    """

    strict: bool = True
    logger: logging.Logger = logging.getLogger("movierec.service")

    @classmethod
    def from_config(
        cls,
        app_config: Optional[AppConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "RecommendationService":
        if app_config is None:
            app_config = load_app_config()
        return cls(
            strict=app_config.strict,
            logger=logger or logging.getLogger("movierec.service"),
        )

    # ------------------------------------------------------------
    # Movies
    # ------------------------------------------------------------
    def validate_catalog(
        self,
        movies: Sequence[Movie],
        movie_registry: Optional[IdRegistry] = None,
    ) -> CatalogValidation:
        """
        Validate every movie and keep the ones passing both rules.

        Each movie's id is checked against the ids accepted before it, so a
        later movie reusing an earlier movie's digits is rejected.
        """
        registry = movie_registry if movie_registry is not None else IdRegistry()
        result = CatalogValidation()

        for movie in movies:
            outcomes = validate_movie(movie, registry, logger=self.logger)
            failed = [(name, outcome) for name, outcome in outcomes if isinstance(outcome, Invalid)]

            if not failed:
                result.accepted.append(movie)
                registry.add(movie.id)
                continue

            for field_name, outcome in failed:
                result.failures.append(
                    RecordFailure(
                        record_type="movie",
                        label=movie.title,
                        record_id=movie.id,
                        field=field_name,
                        outcome=outcome,
                    )
                )

        self.logger.info(
            "Movie catalog validated",
            extra={
                "event": "validate_catalog_done",
                "count": len(result.accepted),
            },
        )
        return result

    # ------------------------------------------------------------
    # Users
    # ------------------------------------------------------------
    def first_user_error(
        self,
        user: User,
        user_registry: IdRegistry,
        recommendations: Set[str],
    ) -> Optional[Tuple[str, Invalid]]:
        """
        Return the first failing check as (field, outcome), or None.

        Name and id go through validate_user, which logs each failed field;
        the empty-recommendation condition comes last. Checks are tried in
        USER_CHECK_ORDER and the first Invalid wins.
        """
        checks: List[Tuple[str, ValidationOutcome]] = validate_user(
            user, user_registry, logger=self.logger
        )
        checks.append(("recommendations", VALID if recommendations else NO_RECOMMENDATIONS))

        for field_name, outcome in checks:
            if isinstance(outcome, Invalid):
                return field_name, outcome
        return None

    def process_user(
        self,
        user: User,
        catalog: Sequence[Movie],
        user_registry: IdRegistry,
    ) -> UserResult:
        recommendations = recommend(user.watched, catalog)
        failure = self.first_user_error(user, user_registry, recommendations)

        if failure is None:
            result = UserResult(user=user, recommendations=frozenset(recommendations))
        else:
            field_name, outcome = failure
            result = UserResult(
                user=user,
                error_field=field_name,
                error=outcome,
                recommendations=frozenset(recommendations),
            )
            self.logger.warning(
                "User check failed",
                extra={
                    "event": "user_check_failed",
                    "record_id": user.id,
                    "field": field_name,
                    "reason": outcome.reason,
                },
            )

        if result.accepted:
            user_registry.add(user.id)
        return result

    def process_users(
        self,
        users: Sequence[User],
        catalog: Sequence[Movie],
        user_registry: Optional[IdRegistry] = None,
    ) -> List[UserResult]:
        """Process users in file order, registering each accepted id."""
        registry = user_registry if user_registry is not None else IdRegistry()
        results = [self.process_user(user, catalog, registry) for user in users]

        self.logger.info(
            "Users processed",
            extra={
                "event": "process_users_done",
                "count": sum(1 for r in results if r.accepted),
            },
        )
        return results

    # ------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------
    def run(
        self,
        movies: Sequence[Movie],
        users: Sequence[User],
        movie_registry: Optional[IdRegistry] = None,
        user_registry: Optional[IdRegistry] = None,
    ) -> PipelineResult:
        catalog = self.validate_catalog(movies, movie_registry)
        user_results = self.process_users(users, catalog.accepted, user_registry)
        return PipelineResult(catalog=catalog, users=user_results)

    def write_results(self, results: Sequence[UserResult], stream: TextIO) -> int:
        """
        Write the recommendations file.

        Returns:
            Number of users written.
        """
        written = 0
        for result in results:
            user = result.user

            if self.strict:
                if not write_first_error(stream, user.name, user.id, *result.errors_by_priority()):
                    write_recommendation(stream, user.name, user.id, result.recommendations)
                written += 1
                continue

            if not result.accepted:
                self.logger.warning(
                    "Skipping rejected user",
                    extra={"event": "skip_user", "record_id": user.id, "reason": result.error.reason},
                )
                continue
            if not user.watched:
                self.logger.info(
                    "Skipping user without watched movies",
                    extra={"event": "skip_user", "record_id": user.id},
                )
                continue

            write_recommendation(stream, user.name, user.id, result.recommendations)
            written += 1

        return written
