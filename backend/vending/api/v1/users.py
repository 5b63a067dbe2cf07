"""User endpoints: registration, self-service and deposits."""

from __future__ import annotations

from flask import Blueprint, request

from vending.api.deps import (
    current_user,
    json_response,
    load_json,
    no_content,
    parse_pagination,
    require_auth,
    timing,
)
from vending.core.wiring import services
from vending.schemas import (
    DepositSchema,
    UserCreateSchema,
    UserFilterSchema,
    UserSchema,
    UserUpdateSchema,
    build_meta,
)
from vending.services.users.dto import UserCreateIn, UserListIn, UserUpdateIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_create_schema = UserCreateSchema()
user_update_schema = UserUpdateSchema()
user_filter_schema = UserFilterSchema()
deposit_schema = DepositSchema()


@bp.post("")
@timing
def create_user():
    """Register a new buyer or seller."""

    payload = load_json(user_create_schema)
    user = services().users.register_user(UserCreateIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.get("")
@require_auth
@timing
def list_users():
    """Return paginated users."""

    filters = user_filter_schema.load(request.args)
    pagination = parse_pagination()
    page = services().users.query_users(
        UserListIn(
            username=filters["username"],
            role=filters["role"],
            page=pagination.page,
            limit=pagination.limit,
            sort=pagination.sort,
        )
    )
    return json_response({"data": user_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/<int:user_id>")
@require_auth
@timing
def get_user(user_id: int):
    """Return one user."""

    user = services().users.get_user(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/<int:user_id>")
@require_auth
@timing
def update_user(user_id: int):
    """Change one's own username and/or password."""

    payload = load_json(user_update_schema)
    user = services().users.update_user(current_user().id, user_id, UserUpdateIn(**payload))
    return json_response({"data": user_schema.dump(user)})


@bp.delete("/<int:user_id>")
@require_auth
@timing
def delete_user(user_id: int):
    """Delete one's own account."""

    services().users.delete_user(current_user().id, user_id)
    return no_content()


@bp.post("/deposit")
@require_auth
@timing
def deposit():
    """Insert one coin into the authenticated buyer's deposit."""

    payload = load_json(deposit_schema)
    user = services().users.increase_deposit(current_user().id, payload["deposit"])
    return json_response({"data": user_schema.dump(user)})
