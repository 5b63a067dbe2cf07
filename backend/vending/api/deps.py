"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from vending.core.errors import Unauthorized
from vending.core.wiring import services
from vending.schemas.common import PaginationQuerySchema
from vending.services._shared.dto import Pagination
from vending.services._shared.ports import UserRecord

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def parse_pagination(default_limit: int = 10, max_limit: int = 100) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args, unknown="exclude")
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def load_json(schema: Any) -> dict[str, Any]:
    """Validate the JSON body with ``schema``; a missing body counts as ``{}``."""

    return cast(dict[str, Any], schema.load(request.get_json(silent=True) or {}))


def bearer_token() -> str:
    """Extract the token from ``Authorization: Bearer <token>``."""

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized()
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized()
    return token


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token and load its user.

    The authenticated :class:`UserRecord` is re-read on every request and
    exposed as ``g.user``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.user = services().auth.authenticate_access_token(bearer_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user() -> UserRecord:
    """Return the user loaded by :func:`require_auth`."""

    return cast(UserRecord, g.user)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    """Return an empty ``204 No Content`` response."""

    return Response(status=204)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
