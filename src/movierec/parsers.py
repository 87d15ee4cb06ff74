"""
Readers for the two-line grouped catalog files.

Movies file::

    Spider Man,SM112
    Action,Adventure

Users file::

    John Smith,12345678A
    SM112,TG221

Blank lines between groups are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .logging_utils import configure_logger
from .models import Movie, User


class ParseError(Exception):
    """Raised when a catalog file does not follow the two-line record layout."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


def _split_list(line: str) -> List[str]:
    return [item.strip() for item in line.split(",") if item.strip()]


def _iter_groups(lines: Iterable[str]) -> Iterator[Tuple[int, str, Optional[str]]]:
    """
    Yield (line_number, identity_line, list_line) for each record.

    list_line is None when the file ends right after an identity line.
    """
    numbered = enumerate((line.rstrip("\r\n") for line in lines), start=1)
    for line_number, line in numbered:
        if not line.strip():
            continue
        following = next(numbered, None)
        yield line_number, line, None if following is None else following[1]


def _split_identity(line: str, line_number: int, kind: str) -> Tuple[str, str]:
    parts = line.split(",")
    if len(parts) != 2:
        raise ParseError(f"Wrong {kind} line format: {line}", line_number)
    return parts[0], parts[1]


def parse_movies(lines: Iterable[str]) -> List[Movie]:
    """
    Parse movie records from an iterable of text lines.

    Raises:
        ParseError: If an identity line does not hold exactly a title and an
            id, or if a movie has no genres line.
    """
    movies: List[Movie] = []
    for line_number, identity, genres_line in _iter_groups(lines):
        title, movie_id = _split_identity(identity, line_number, "movie")
        title = title.strip()
        if genres_line is None:
            raise ParseError(f"Genres missing for movie: {title}", line_number)
        movies.append(Movie(title=title, id=movie_id.strip(), genres=tuple(_split_list(genres_line))))
    return movies


def parse_users(lines: Iterable[str]) -> List[User]:
    """
    Parse user records from an iterable of text lines.

    The name is kept exactly as written so the validator can reject a
    leading space; the id and the watched ids are trimmed.

    Raises:
        ParseError: If an identity line does not hold exactly a name and an
            id, or if a user has no watched-movies line.
    """
    users: List[User] = []
    for line_number, identity, watched_line in _iter_groups(lines):
        name, user_id = _split_identity(identity, line_number, "user")
        if watched_line is None:
            raise ParseError(f"Watched movies missing for user: {name}", line_number)
        users.append(User(name=name, id=user_id.strip(), watched=frozenset(_split_list(watched_line))))
    return users


def read_movies(path: Path, logger: logging.Logger | None = None) -> List[Movie]:
    """Read and parse the movies file at `path`."""
    _logger = logger or configure_logger()
    _logger.info("Reading movies file", extra={"event": "read_movies", "path": str(path)})

    with open(path, "r", encoding="utf-8") as f:
        movies = parse_movies(f)

    _logger.info(
        "Movies parsed",
        extra={"event": "read_movies_success", "path": str(path), "count": len(movies)},
    )
    return movies


def read_users(path: Path, logger: logging.Logger | None = None) -> List[User]:
    """Read and parse the users file at `path`."""
    _logger = logger or configure_logger()
    _logger.info("Reading users file", extra={"event": "read_users", "path": str(path)})

    with open(path, "r", encoding="utf-8") as f:
        users = parse_users(f)

    _logger.info(
        "Users parsed",
        extra={"event": "read_users_success", "path": str(path), "count": len(users)},
    )
    return users
