"""Fields stripped from a job before it reaches a worker."""

from __future__ import annotations

import copy

import pytest

from job_board.features.jobs.redaction import REJECT_KEYS, redact_job
from tests.utils import job_document


def test_sensitive_top_level_fields_are_dropped() -> None:
    cleaned = redact_job(job_document())

    for key in REJECT_KEYS:
        assert key not in cleaned["data"]
    assert cleaned["data"]["timeouts"] == {"hard_limit": 3000}


def test_sections_keep_only_allowed_fields() -> None:
    cleaned = redact_job(job_document())

    assert cleaned["data"]["config"] == {
        "os": "linux",
        "dist": "xenial",
        "group": "stable",
        "language": "python",
    }
    assert cleaned["data"]["job"] == {"id": 42, "number": "7.1", "queued_at": "2026-10-16T08:00:00Z"}
    assert cleaned["data"]["repository"] == {"slug": "octo/widgets"}


def test_input_is_not_mutated() -> None:
    original = job_document()
    snapshot = copy.deepcopy(original)

    redact_job(original)

    assert original == snapshot


@pytest.mark.parametrize("data", [None, "opaque", ["a", "b"]])
def test_non_mapping_data_passes_through(data: object) -> None:
    assert redact_job({"id": "1", "data": data}) == {"id": "1", "data": data}


def test_missing_sections_are_left_out() -> None:
    cleaned = redact_job({"data": {"ssh_key": "x", "config": {"os": "linux", "secure": "y"}}})

    assert cleaned == {"data": {"config": {"os": "linux"}}}
