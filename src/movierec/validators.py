"""
Record validation rules for the movie and user catalogs.

Every rule inspects a single field and returns a ValidationOutcome; none of
them raises for well-typed input and none of them mutates the registries it
is given. Uniqueness registries are owned by the caller, which adds an id
only after the whole record has been accepted.
"""

from __future__ import annotations

import logging
import re
from typing import Container, Iterable, List, Optional, Tuple

from .models import (
    VALID,
    ErrorKind,
    IdRegistry,
    Invalid,
    Movie,
    Reason,
    User,
    ValidationOutcome,
)

TITLE_WORD_SEPARATOR = re.compile(r"[\s\-]+")
MOVIE_ID_SUFFIX = re.compile(r"[0-9]{3}")
USER_NAME_PATTERN = re.compile(r"[A-Za-z ]+")
USER_ID_PATTERN = re.compile(r"[0-9]{9}|[0-9]{8}[A-Za-z]")

MOVIE_ID_SUFFIX_LENGTH = 3


# ---------------------------------------------------------------------
# Movie rules
# ---------------------------------------------------------------------


def validate_movie_title(title: Optional[str]) -> ValidationOutcome:
    """
    Every word of the title must start with an uppercase letter.

    Words are separated by runs of whitespace and/or hyphens, so
    "Spider-Man" and "Spider - Man" both yield the words "Spider" and "Man".
    Empty tokens produced by leading separators are skipped.
    """
    if not title:
        return Invalid.of(Reason.TITLE_MISSING, ErrorKind.MISSING_FIELD)

    for word in TITLE_WORD_SEPARATOR.split(title.strip()):
        if word and not word[0].isupper():
            return Invalid.of(Reason.TITLE_NOT_CAPITALIZED, ErrorKind.FORMAT_VIOLATION)

    return VALID


def extract_capital_letters(title: Optional[str]) -> str:
    """Return every uppercase letter of the title, in order."""
    if not title:
        return ""
    return "".join(ch for ch in title if ch.isupper())


def validate_movie_id(
    title: Optional[str],
    movie_id: Optional[str],
    existing_movie_ids: Optional[Iterable[str]] = None,
) -> ValidationOutcome:
    """
    Validate a movie id against its title and, optionally, the accepted ids.

    The id must be the title's capital letters followed by exactly three
    digits. When a registry is given, those three digits must not match the
    last three characters of any id already accepted. Prefix and format
    problems are reported before uniqueness is looked at.
    """
    expected_prefix = extract_capital_letters(title)

    if not movie_id or not movie_id.startswith(expected_prefix):
        return Invalid.of(Reason.MOVIE_ID_LETTERS_WRONG, ErrorKind.FORMAT_VIOLATION)

    suffix = movie_id[len(expected_prefix):]
    if not MOVIE_ID_SUFFIX.fullmatch(suffix):
        return Invalid.of(Reason.MOVIE_ID_LETTERS_WRONG, ErrorKind.FORMAT_VIOLATION)

    if existing_movie_ids is not None:
        for existing in existing_movie_ids:
            if existing[-MOVIE_ID_SUFFIX_LENGTH:] == suffix:
                return Invalid.of(
                    Reason.MOVIE_ID_NUMBERS_NOT_UNIQUE,
                    ErrorKind.UNIQUENESS_VIOLATION,
                )

    return VALID


# ---------------------------------------------------------------------
# User rules
# ---------------------------------------------------------------------


def validate_user_name(name: Optional[str]) -> ValidationOutcome:
    """
    Names contain letters and spaces only and must not start with a space.

    Trailing spaces and runs of interior spaces are accepted.
    """
    if not name:
        return Invalid.of(Reason.NAME_MISSING, ErrorKind.MISSING_FIELD)

    if name.startswith(" "):
        return Invalid.of(Reason.NAME_STARTS_WITH_SPACE, ErrorKind.FORMAT_VIOLATION)

    if not USER_NAME_PATTERN.fullmatch(name):
        return Invalid.of(Reason.NAME_INVALID_CHARACTERS, ErrorKind.FORMAT_VIOLATION)

    return VALID


def validate_user_id(
    user_id: Optional[str],
    existing_user_ids: Container[str],
) -> ValidationOutcome:
    """
    User ids are 9 digits, or 8 digits followed by a single letter, and must
    not already be in the registry.
    """
    if not user_id:
        return Invalid.of(Reason.USER_ID_MISSING, ErrorKind.MISSING_FIELD)

    if not USER_ID_PATTERN.fullmatch(user_id):
        return Invalid.of(Reason.USER_ID_FORMAT_WRONG, ErrorKind.FORMAT_VIOLATION)

    if user_id in existing_user_ids:
        return Invalid.of(Reason.USER_ID_NOT_UNIQUE, ErrorKind.UNIQUENESS_VIOLATION)

    return VALID


# ---------------------------------------------------------------------
# Record-level helpers
# ---------------------------------------------------------------------


FieldOutcome = Tuple[str, ValidationOutcome]


def validate_movie(
    movie: Movie,
    movie_registry: Optional[IdRegistry] = None,
    logger: Optional[logging.Logger] = None,
) -> List[FieldOutcome]:
    """
    Run the title and id rules for one movie.

    Returns:
        [("title", outcome), ("id", outcome)]
    """
    outcomes = [
        ("title", validate_movie_title(movie.title)),
        ("id", validate_movie_id(movie.title, movie.id, movie_registry)),
    ]
    _log_failures(outcomes, movie.id, logger)
    return outcomes


def validate_user(
    user: User,
    user_registry: Container[str],
    logger: Optional[logging.Logger] = None,
) -> List[FieldOutcome]:
    """
    Run the name and id rules for one user.

    Returns:
        [("name", outcome), ("id", outcome)]
    """
    outcomes = [
        ("name", validate_user_name(user.name)),
        ("id", validate_user_id(user.id, user_registry)),
    ]
    _log_failures(outcomes, user.id, logger)
    return outcomes


def _log_failures(
    outcomes: List[FieldOutcome],
    record_id: Optional[str],
    logger: Optional[logging.Logger],
) -> None:
    if logger is None:
        return
    for field_name, outcome in outcomes:
        if isinstance(outcome, Invalid):
            logger.warning(
                "Validation failed",
                extra={
                    "event": "validation_failed",
                    "record_id": record_id,
                    "field": field_name,
                    "reason": outcome.reason,
                },
            )
