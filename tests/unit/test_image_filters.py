"""Parsing image lookups from query strings."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import sqlite

from job_board.features.images.filters import (
    ImagesQuery,
    parse_bool,
    parse_tags,
    query_from_params,
    query_from_string,
    tag_value,
)
from job_board.features.images.repository import ImagesRepository


def test_parse_tags() -> None:
    assert parse_tags("foo:bar, production:yep,broken,:nokey") == {"foo": "bar", "production": "yep"}
    assert parse_tags(None) == {}


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("False", False), ("1", True), ("", None), (None, None)],
)
def test_parse_bool(value: str | None, expected: bool | None) -> None:
    assert parse_bool(value) is expected


def test_parse_bool_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_bool("maybe")


def test_query_from_string() -> None:
    query = query_from_string("infra=gce&name=travis-.*&tags=os:linux,dist:xenial&is_default=true&limit=3")

    assert query == ImagesQuery(
        infra="gce",
        tags={"os": "linux", "dist": "xenial"},
        is_default=True,
        name="travis-.*",
        limit=3,
    )


def test_query_without_infra_is_ignored() -> None:
    assert query_from_string("name=whatever&limit=1") is None
    assert query_from_params({"infra": "  "}) is None


@pytest.mark.parametrize("line", ["infra=gce&limit=0", "infra=gce&limit=lots", "infra=gce&name=("])
def test_invalid_values_raise(line: str) -> None:
    with pytest.raises(ValueError):
        query_from_string(line)


def test_tag_values_render_as_stored_strings() -> None:
    assert tag_value(True) == "true"
    assert tag_value(False) == "false"
    assert tag_value(3) == "3"
    assert tag_value("linux") == "linux"


def test_name_matching_uses_regex_search() -> None:
    query = ImagesQuery(infra="gce", name="^travis-ci-.*-xenial")

    assert query.matches_name("travis-ci-garnet-xenial-1512502259")
    assert not query.matches_name("other-image")


def test_query_string_round_trip() -> None:
    query = ImagesQuery(infra="gce", tags={"os": "linux"}, is_default=False, limit=2)

    assert query_from_string(query.to_query_string()) == query


def test_lookup_statement_filters_tags_and_limit_in_sql() -> None:
    query = ImagesQuery(infra="gce", tags={"os": "linux", "language_ruby": "true"}, is_default=True, limit=2)

    sql = str(ImagesRepository(session=None).base_query(query).compile(dialect=sqlite.dialect()))  # type: ignore[arg-type]

    assert sql.count("JSON_EXTRACT") == 2
    assert "is_default" in sql
    assert "LIMIT" in sql


def test_name_pattern_lookups_are_not_limited_in_sql() -> None:
    query = ImagesQuery(infra="gce", name="^travis-", limit=2)

    sql = str(ImagesRepository(session=None).base_query(query).compile(dialect=sqlite.dialect()))  # type: ignore[arg-type]

    assert "LIMIT" not in sql
