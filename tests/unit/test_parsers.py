import logging

import pytest

from movierec.models import Movie, User
from movierec.parsers import ParseError, parse_movies, parse_users, read_movies, read_users


def lines(text):
    return text.splitlines(keepends=True)


# ---------------------------------------------------------------------------
# parse_movies
# ---------------------------------------------------------------------------

def test_parse_movies_reads_grouped_records_and_skips_blank_lines():
    movies = parse_movies(lines(
        "Spider Man, SM112\n"
        " Action , Adventure \n"
        "\n"
        "   \n"
        "Toy Story,TS234\n"
        "Animation\n"
    ))

    assert movies == [
        Movie("Spider Man", "SM112", ("Action", "Adventure")),
        Movie("Toy Story", "TS234", ("Animation",)),
    ]


def test_parse_movies_blank_genres_line_gives_empty_genres():
    movies = parse_movies(["Silent Film,SF100\n", "\n"])
    assert movies == [Movie("Silent Film", "SF100", ())]


def test_parse_movies_drops_empty_genre_entries():
    movies = parse_movies(["Heat,H100\n", "Action,,Crime,\n"])
    assert movies[0].genres == ("Action", "Crime")


@pytest.mark.parametrize("identity", ["Spider Man SM112", "Spider, Man,SM112"])
def test_parse_movies_wrong_identity_line_raises(identity):
    with pytest.raises(ParseError) as excinfo:
        parse_movies(["\n", identity + "\n", "Action\n"])

    assert "Wrong movie line format" in str(excinfo.value)
    assert excinfo.value.line_number == 2


def test_parse_movies_missing_genres_raises():
    with pytest.raises(ParseError, match="Genres missing for movie: Toy Story"):
        parse_movies(["Spider Man,SM112\n", "Action\n", "Toy Story,TS234\n"])


def test_parse_movies_empty_input():
    assert parse_movies([]) == []


# ---------------------------------------------------------------------------
# parse_users
# ---------------------------------------------------------------------------

def test_parse_users_keeps_name_and_trims_id():
    users = parse_users(lines(
        " John Smith ,  12345678A \n"
        "SM112 , TS234,SM112\n"
    ))

    assert users == [User(" John Smith ", "12345678A", frozenset({"SM112", "TS234"}))]


def test_parse_users_without_watched_movies():
    users = parse_users(["Jane,987654321\n", "\n", "\n", "Bob,123456789\n", "FG789\n"])

    assert users[0].watched == frozenset()
    assert users[1] == User("Bob", "123456789", frozenset({"FG789"}))


def test_parse_users_wrong_identity_line_raises():
    with pytest.raises(ParseError, match="Wrong user line format"):
        parse_users(["JohnSmith\n", "SM112\n"])


def test_parse_users_missing_watched_line_raises():
    with pytest.raises(ParseError, match="Watched movies missing for user: Bob"):
        parse_users(["Bob,123456789\n"])


# ---------------------------------------------------------------------------
# read_movies / read_users
# ---------------------------------------------------------------------------

def test_read_movies_and_users_from_disk(tmp_path, caplog):
    movies_path = tmp_path / "movies.txt"
    users_path = tmp_path / "users.txt"
    movies_path.write_text("Finding Nemo,FN567\nAnimation,Family\n", encoding="utf-8")
    users_path.write_text("Amy,112233445\nFN567\n", encoding="utf-8")

    logger = logging.getLogger("test.parsers")
    with caplog.at_level(logging.INFO, logger="test.parsers"):
        movies = read_movies(movies_path, logger=logger)
        users = read_users(users_path, logger=logger)

    assert movies == [Movie("Finding Nemo", "FN567", ("Animation", "Family"))]
    assert users == [User("Amy", "112233445", frozenset({"FN567"}))]
    events = [getattr(r, "event", None) for r in caplog.records]
    assert "read_movies_success" in events
    assert "read_users_success" in events


def test_read_movies_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_movies(tmp_path / "nope.txt", logger=logging.getLogger("test.parsers"))
