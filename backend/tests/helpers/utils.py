"""Tiny helpers shared across test modules."""

from __future__ import annotations

import threading
from collections.abc import Callable
from contextlib import contextmanager
from typing import Any

from tests.factories.user import DEFAULT_PASSWORD


def run_concurrently(fn: Callable[[int], Any], n: int) -> list[Any]:
    """Run ``fn(i)`` on ``n`` threads released together by a barrier.

    Returns
    -------
    list
        One entry per thread: the return value, or the raised exception.
    """
    barrier = threading.Barrier(n)
    results: list[Any] = [None] * n

    def worker(i: int) -> None:
        barrier.wait()
        try:
            results[i] = fn(i)
        except Exception as exc:  # collected for assertions
            results[i] = exc

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def login(client, username: str, password: str = DEFAULT_PASSWORD) -> dict[str, Any]:
    """Log in through the API and return the ``data`` payload."""
    resp = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def auth_headers(client, username: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    """Bearer headers for ``username``."""
    token = login(client, username, password)["tokens"]["access"]["token"]
    return {"Authorization": f"Bearer {token}"}


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc
