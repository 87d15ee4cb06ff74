from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Set, Tuple, Union


@dataclass(frozen=True)
class Movie:
    """
    A parsed movie catalog entry.

    Attributes:
        title: Display title, e.g. "Spider Man".
        id: Capital letters of the title followed by three digits, e.g. "SM112".
        genres: Genres in file order; may be empty.
    """
    title: str
    id: str
    genres: Tuple[str, ...] = ()


@dataclass(frozen=True)
class User:
    """
    A parsed user entry.

    Attributes:
        name: User name exactly as written in the users file.
        id: Nine digits, or eight digits followed by one letter.
        watched: Movie ids the user has already watched.
    """
    name: str
    id: str
    watched: frozenset = frozenset()


class ErrorKind(str, Enum):
    """
    Stable categories for failed validations.

    These values appear in the validation report and must remain stable.
    """

    MISSING_FIELD = "MISSING_FIELD"
    FORMAT_VIOLATION = "FORMAT_VIOLATION"
    UNIQUENESS_VIOLATION = "UNIQUENESS_VIOLATION"
    EMPTY_RECOMMENDATIONS = "EMPTY_RECOMMENDATIONS"


class Reason(str, Enum):
    """Human-readable failure reasons, one per rule branch."""

    TITLE_MISSING = "title is missing"
    TITLE_NOT_CAPITALIZED = "title word not capitalized"
    MOVIE_ID_LETTERS_WRONG = "id letters wrong"
    MOVIE_ID_NUMBERS_NOT_UNIQUE = "id numbers not unique"
    NAME_MISSING = "name is missing"
    NAME_STARTS_WITH_SPACE = "name starts with space"
    NAME_INVALID_CHARACTERS = "name has invalid characters"
    USER_ID_MISSING = "id is missing"
    USER_ID_FORMAT_WRONG = "id format wrong"
    USER_ID_NOT_UNIQUE = "id not unique"
    NO_RECOMMENDATIONS = "no recommendations"


@dataclass(frozen=True)
class Valid:
    """Outcome of a rule that passed."""

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """
    Outcome of a rule that failed.

    Attributes:
        reason: Plain-text reason, one of the Reason values.
        kind: Category of the failure.
    """
    reason: str
    kind: ErrorKind

    @property
    def is_valid(self) -> bool:
        return False

    @classmethod
    def of(cls, reason: Reason, kind: ErrorKind) -> "Invalid":
        return cls(reason=reason.value, kind=kind)


ValidationOutcome = Union[Valid, Invalid]

VALID = Valid()


@dataclass
class IdRegistry:
    """
    Identifiers accepted so far during a run.

    Owned by the caller and handed to the validators on every call. The
    validators only read it; the caller adds an id once its record has been
    accepted.
    """

    _ids: Set[str] = field(default_factory=set)

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "IdRegistry":
        return cls(set(ids))

    def add(self, identifier: str) -> None:
        self._ids.add(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)
