"""Candidate ordering and lookup behaviour of the image resolution engine."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from job_board.features.images.filters import ImagesQuery
from job_board.features.images.resolution import (
    DEFAULT_IMAGE_NAME,
    ImageResolver,
    JobConfig,
    build_queries,
    candidate_tag_sets,
)


def _tags(config: dict) -> list[tuple[dict[str, str], bool]]:
    return [(candidate.tags, candidate.is_default) for candidate in candidate_tag_sets(config)]


def test_full_linux_descriptor_orders_tiers_most_specific_first() -> None:
    config = {"os": "linux", "dist": "xenial", "group": "stable", "language": "ruby"}

    assert _tags(config) == [
        (
            {"language_ruby": "true", "dist": "xenial", "group": "stable", "os": "linux"},
            True,
        ),
        ({"dist": "xenial", "group": "stable", "language_ruby": "true"}, False),
        ({"dist": "xenial", "language_ruby": "true"}, False),
        ({"group": "stable", "language_ruby": "true"}, False),
        ({"os": "linux", "language_ruby": "true"}, False),
        ({"os": "linux", "dist": "xenial"}, False),
        ({"language_ruby": "true"}, True),
        ({"dist": "xenial"}, True),
        ({"group": "stable"}, True),
        ({"os": "linux"}, True),
    ]


def test_dist_language_precedes_every_single_field_default() -> None:
    config = {"dist": "trusty", "language": "go"}
    tag_sets = _tags(config)

    dist_language = tag_sets.index(({"dist": "trusty", "language_go": "true"}, False))
    first_single = tag_sets.index(({"language_go": "true"}, True))
    assert dist_language < first_single


def test_apple_descriptor_uses_osx_image_tiers() -> None:
    config = {"os": "osx", "osx_image": "xcode12", "dist": "catalina", "language": "objective-c"}
    tag_sets = _tags(config)

    assert tag_sets[1] == ({"osx_image": "xcode12", "os": "osx"}, False)
    # dist + language is skipped on Apple platforms
    assert ({"dist": "catalina", "language_objective-c": "true"}, False) not in tag_sets
    assert ({"osx_image": "xcode12"}, True) in tag_sets
    assert tag_sets[0][0]["osx_image"] == "xcode12"


def test_macos_counts_as_apple_platform() -> None:
    assert JobConfig({"os": "macos"}).is_apple
    assert _tags({"os": "macos", "osx_image": "xcode14"})[1] == (
        {"osx_image": "xcode14", "os": "osx"},
        False,
    )


def test_osx_image_ignored_off_apple_platforms() -> None:
    tag_sets = _tags({"os": "linux", "osx_image": "xcode12"})

    assert all("osx_image" not in tags for tags, _ in tag_sets)


@pytest.mark.parametrize(
    "config",
    [
        {},
        {"os": "", "dist": "   ", "group": None, "language": "", "osx_image": ""},
        {"unrelated": "value"},
    ],
)
def test_blank_descriptor_produces_no_queries(config: dict) -> None:
    assert build_queries(config, "gce") == []


def test_non_mapping_config_is_treated_as_empty() -> None:
    assert build_queries(None, "gce") == []
    assert build_queries(["os", "linux"], "gce") == []  # type: ignore[arg-type]


def test_values_are_trimmed() -> None:
    assert _tags({"dist": "  bionic "}) == [({"dist": "bionic"}, True), ({"dist": "bionic"}, True)]


def test_build_queries_scope_infra_and_default_flag() -> None:
    queries = build_queries({"os": "linux", "dist": "focal"}, "ec2", limit=2)

    assert all(query.infra == "ec2" and query.limit == 2 for query in queries)
    assert queries[0].is_default is True
    assert queries[1] == ImagesQuery(infra="ec2", tags={"os": "linux", "dist": "focal"}, is_default=None, limit=2)
    assert [query.is_default for query in queries[2:]] == [True, True]


@dataclass
class _Image:
    name: str


class _RecordingRepository:
    def __init__(self, answers: dict[int, list[_Image]] | None = None) -> None:
        self.answers = answers or {}
        self.queries: list[ImagesQuery] = []

    async def query(self, query: ImagesQuery) -> list[_Image]:
        self.queries.append(query)
        return self.answers.get(len(self.queries) - 1, [])


@pytest.mark.asyncio
async def test_resolver_returns_first_non_empty_result() -> None:
    repository = _RecordingRepository({2: [_Image("second-hit"), _Image("ignored")], 4: [_Image("later")]})
    resolver = ImageResolver(repository)  # type: ignore[arg-type]

    name = await resolver.resolve({"os": "linux", "dist": "xenial", "language": "ruby"}, "gce")

    assert name == "second-hit"
    assert len(repository.queries) == 3


@pytest.mark.asyncio
async def test_resolver_falls_back_to_default() -> None:
    repository = _RecordingRepository()
    resolver = ImageResolver(repository)  # type: ignore[arg-type]

    assert await resolver.resolve({"language": "php"}, "gce") == DEFAULT_IMAGE_NAME
    assert len(repository.queries) == 2


@pytest.mark.asyncio
async def test_resolver_with_empty_descriptor_skips_the_store() -> None:
    repository = _RecordingRepository()
    resolver = ImageResolver(repository)  # type: ignore[arg-type]

    assert await resolver.resolve({}, "gce") == DEFAULT_IMAGE_NAME
    assert repository.queries == []
