"""Assertion helper utilities for tests."""

from __future__ import annotations


def assert_json_keys(data: dict, required: set[str]) -> None:
    """Ensure that all required keys are present in ``data``.

    Raises
    ------
    AssertionError
        If any required key is missing.
    """

    missing = required - data.keys()
    assert not missing, f"Missing keys: {', '.join(sorted(missing))}"


def assert_pagination(obj: dict) -> None:
    """Validate the ``{"data": [...], "meta": {...}}`` list envelope."""

    assert_json_keys(obj, {"data", "meta"})
    assert isinstance(obj["data"], list)
    assert_json_keys(obj["meta"], {"total", "page", "limit", "total_pages"})


def assert_problem(resp, status: int, code: str | None = None) -> dict:
    """Check an ``application/problem+json`` error response and return its body."""

    assert resp.status_code == status, resp.get_json()
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert_json_keys(body, {"status", "code", "detail", "request_id"})
    if code is not None:
        assert body["code"] == code
    return body
