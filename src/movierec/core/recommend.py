from __future__ import annotations

from typing import AbstractSet, Iterable, Optional, Sequence, Set

from ..models import Movie


def liked_genres(watched_ids: AbstractSet[str], catalog: Iterable[Movie]) -> Set[str]:
    """Union of the genres of every catalog movie the user has watched."""
    genres: Set[str] = set()
    for movie in catalog:
        if movie.id in watched_ids:
            genres.update(movie.genres)
    return genres


def recommend(
    watched_ids: Optional[AbstractSet[str]],
    catalog: Optional[Sequence[Movie]],
) -> Set[str]:
    """
    Recommend titles sharing at least one genre with the watched movies.

    Watched movies are never recommended, and ids are compared
    case-sensitively. Titles are returned as a set, so two catalog entries
    with the same title yield one recommendation; for the same reason a
    title the user has watched under one id is not recommended under another.

    Returns:
        Set of recommended titles; empty when either input is empty.
    """
    if not watched_ids or not catalog:
        return set()

    genres = liked_genres(watched_ids, catalog)
    if not genres:
        return set()

    watched_titles = {movie.title for movie in catalog if movie.id in watched_ids}

    recommendations: Set[str] = set()
    for movie in catalog:
        if movie.id in watched_ids or movie.title in watched_titles:
            continue
        # any-match: a single shared genre is enough
        if not genres.isdisjoint(movie.genres):
            recommendations.add(movie.title)
    return recommendations
