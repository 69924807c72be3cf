"""Image catalog listing, search and registration."""

from __future__ import annotations

import logging

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture()
async def seeded_images(async_client: AsyncClient, member_headers: dict[str, str]) -> list[int]:
    ids = []
    for n in range(3):
        production = "nope" if n % 2 == 0 else "yep"
        response = await async_client.post(
            f"/images?infra=test&name=test-image-{n}&is_default={str(n == 0).lower()}"
            f"&tags=foo:bar,production:{production}",
            headers=member_headers,
        )
        assert response.status_code == 201, response.text
        ids.append(response.json()["data"][0]["id"])
    return ids


@pytest.mark.parametrize(
    ("query", "count"),
    [
        ("infra=test&limit=10", 3),
        ("infra=test", 1),
        ("infra=test&name=test-image-0&limit=10", 1),
        ("infra=test&name=test-.*&limit=10", 3),
        ("infra=test&name=foo&limit=10", 1),
        ("infra=test&tags=production:yep&limit=10", 1),
        ("infra=test&tags=production:nope&limit=10", 2),
        ("infra=test&tags=foo:bar&limit=10", 3),
        ("infra=test&is_default=true&limit=10", 1),
        ("infra=elsewhere&limit=10", 0),
    ],
)
async def test_list_images(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
    query: str,
    count: int,
) -> None:
    response = await async_client.get(f"/images?{query}", headers=member_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["@type"] == "images"
    assert len(body["data"]) == count


async def test_list_images_orders_by_id(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
) -> None:
    body = (await async_client.get("/images?infra=test&limit=10", headers=member_headers)).json()

    assert [image["id"] for image in body["data"]] == seeded_images
    assert body["data"][0]["tags"] == {"foo": "bar", "production": "nope"}


async def test_list_images_requires_infra(async_client: AsyncClient, member_headers: dict[str, str]) -> None:
    response = await async_client.get("/images", headers=member_headers)

    assert response.status_code == 400
    assert response.json() == {"@type": "error", "error": "missing infra param"}


async def test_list_images_rejects_bad_limit(async_client: AsyncClient, member_headers: dict[str, str]) -> None:
    response = await async_client.get("/images?infra=test&limit=0", headers=member_headers)

    assert response.status_code == 400


async def test_unmatched_listing_falls_back_to_the_default_image(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
) -> None:
    body = (await async_client.get("/images?infra=test&name=foo&limit=10", headers=member_headers)).json()

    assert [image["name"] for image in body["data"]] == ["test-image-0"]
    assert body["data"][0]["is_default"] is True


@pytest.mark.parametrize(
    ("lines", "count", "matching"),
    [
        (["infra=test&name=test-image-2"], 1, "infra=test&name=test-image-2&limit=1"),
        (["infra=test&name=whatever", "infra=test&limit=3"], 3, "infra=test&limit=3"),
        (
            ["infra=test&tags=foo:bar,production:true", "infra=test&is_default=true&limit=3"],
            1,
            "infra=test&is_default=true&limit=3",
        ),
        (["infra=test&name=whatever"], 1, "infra=test&is_default=true&limit=1"),
        (["infra=test&name=whatever&is_default=true&limit=3"], 1, "infra=test&is_default=true&limit=3"),
        (["infra=test&tags=foo:bar,production:true"], 1, "infra=test&is_default=true&limit=1"),
    ],
)
async def test_search_returns_first_matching_query(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
    lines: list[str],
    count: int,
    matching: str,
) -> None:
    response = await async_client.post(
        "/images/search",
        headers={**member_headers, "Content-Type": "text/uri-list"},
        content="\n".join(lines),
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == count
    assert body["meta"]["matching_query"] == matching


async def test_search_ignores_lines_without_infra(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
) -> None:
    response = await async_client.post(
        "/images/search",
        headers={**member_headers, "Content-Type": "text/uri-list"},
        content="foo=test&limit=1\nname=whatever",
    )

    assert response.status_code == 200
    assert response.json()["data"] == []


@pytest.mark.parametrize(
    "query",
    [
        "infra=test&name=whatever",
        "infra=test&name=whatever&is_default=true",
        "infra=test&name=whatever&tags=foo:bar",
    ],
)
async def test_register_image_from_query_params(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    query: str,
) -> None:
    response = await async_client.post(f"/images?{query}", headers=member_headers)

    assert response.status_code == 201
    created = response.json()["data"][0]
    assert created["infra"] == "test"
    assert created["name"] == "whatever"

    listed = (await async_client.get("/images?infra=test&name=^whatever$", headers=member_headers)).json()
    assert [image["id"] for image in listed["data"]] == [created["id"]]


async def test_register_image_parses_flags_and_tags(
    async_client: AsyncClient,
    member_headers: dict[str, str],
) -> None:
    response = await async_client.post(
        "/images?infra=test&name=whatever&is_default=true&tags=foo:bar,production:yep",
        headers=member_headers,
    )

    created = response.json()["data"][0]
    assert created["is_default"] is True
    assert created["tags"] == {"foo": "bar", "production": "yep"}


async def test_register_image_from_json_body(async_client: AsyncClient, member_headers: dict[str, str]) -> None:
    response = await async_client.post(
        "/images",
        headers=member_headers,
        json={"infra": "test", "name": "from-json", "tags": {"ready": True}},
    )

    assert response.status_code == 201
    assert response.json()["data"][0]["tags"] == {"ready": "true"}


@pytest.mark.parametrize("query", ["", "?infra=test", "?name=whatever", "?infra=test&name=x&is_default=maybe"])
async def test_register_image_requires_infra_and_name(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    query: str,
) -> None:
    response = await async_client.post(f"/images{query}", headers=member_headers)

    assert response.status_code == 400
    assert response.json()["@type"] == "error"

    listed = (await async_client.get("/images?infra=test&limit=10", headers=member_headers)).json()
    assert listed["data"] == []


async def test_register_image_rejects_incomplete_json(async_client: AsyncClient, member_headers: dict[str, str]) -> None:
    response = await async_client.post("/images", headers=member_headers, json={"infra": "test"})

    assert response.status_code == 400


async def test_register_image_logs_creation(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.INFO, logger="job_board.features.images.service"):
        response = await async_client.post("/images?infra=test&name=logged", headers=member_headers)

    assert response.status_code == 201
    records = [record for record in caplog.records if record.getMessage() == "images.create"]
    assert len(records) == 1
    assert records[0].image_name == "logged"
    assert records[0].infra == "test"


async def test_guest_cannot_register_images(async_client: AsyncClient, guest_headers: dict[str, str]) -> None:
    response = await async_client.post(
        "/images",
        headers=guest_headers,
        json={"infra": "test", "name": "sneaky"},
    )

    assert response.status_code == 403


async def test_delete_image_is_idempotent(
    async_client: AsyncClient,
    member_headers: dict[str, str],
    seeded_images: list[int],
) -> None:
    image_id = seeded_images[1]

    assert (await async_client.delete(f"/images/{image_id}", headers=member_headers)).status_code == 204
    assert (await async_client.delete(f"/images/{image_id}", headers=member_headers)).status_code == 204

    body = (await async_client.get("/images?infra=test&limit=10", headers=member_headers)).json()
    assert image_id not in [image["id"] for image in body["data"]]
