"""Authorization header parsing and the shared token allow-list."""

from __future__ import annotations

import base64

import pytest

from job_board.core.auth.credentials import (
    BasicCredentials,
    TokenAllowList,
    decode_basic,
    parse_authorization,
)


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode("ascii")


@pytest.mark.parametrize(
    ("value", "scheme", "params"),
    [
        ("Basic Zm9vOmJhcg==", "basic", "Zm9vOmJhcg=="),
        ("bearer abc.def.ghi", "bearer", "abc.def.ghi"),
        ("  Digest   realm=x ", "digest", "realm=x"),
        ("Token", "token", ""),
    ],
)
def test_parse_authorization(value: str, scheme: str, params: str) -> None:
    header = parse_authorization(value)

    assert header is not None
    assert header.scheme == scheme
    assert header.params == params


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_authorization_without_credentials(value: str | None) -> None:
    assert parse_authorization(value) is None


def test_decode_basic_splits_on_first_colon() -> None:
    assert decode_basic(_b64("user:pa:ss")) == BasicCredentials(username="user", password="pa:ss")
    assert decode_basic(_b64("lonely")) == BasicCredentials(username="lonely", password=None)


def test_decode_basic_rejects_undecodable_params() -> None:
    assert decode_basic(_b64("x") + "\xff") is None
    assert decode_basic(base64.b64encode(b"\xff\xfe:zz").decode()) is None


def test_guest_pair_is_detected() -> None:
    assert BasicCredentials("guest", "guest").is_guest
    assert not BasicCredentials("guest", "other").is_guest


def test_bare_token_list_accepts_username_or_password() -> None:
    allow = TokenAllowList("abc123:def456")

    assert len(allow) == 2
    assert allow.allows(BasicCredentials("abc123", "whatever"))
    assert allow.allows(BasicCredentials("someone", "def456"))
    assert allow.allows(BasicCredentials("def456"))
    assert not allow.allows(BasicCredentials("nobody", "nothing"))


def test_pair_list_requires_exact_pair() -> None:
    allow = TokenAllowList("worker:s3cret, gateway:t0ken")

    assert len(allow) == 2
    assert allow.allows(BasicCredentials("worker", "s3cret"))
    assert allow.allows(BasicCredentials("gateway", "t0ken"))
    assert not allow.allows(BasicCredentials("worker", "t0ken"))
    assert not allow.allows(BasicCredentials("worker"))


def test_empty_allow_list_accepts_nothing() -> None:
    allow = TokenAllowList("")

    assert len(allow) == 0
    assert not allow.allows(BasicCredentials("", ""))
