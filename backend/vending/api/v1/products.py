"""Product endpoints and the purchase action."""

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
    BuySchema,
    ProductCreateSchema,
    ProductFilterSchema,
    ProductSchema,
    ProductUpdateSchema,
    PurchaseSchema,
    build_meta,
)
from vending.services.products.dto import ProductCreateIn, ProductListIn, ProductUpdateIn
from vending.services.purchases.dto import BuyIn

bp = Blueprint("products", __name__, url_prefix="/products")

product_schema = ProductSchema()
product_list_schema = ProductSchema(many=True)
product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()
product_filter_schema = ProductFilterSchema()
buy_schema = BuySchema()
purchase_schema = PurchaseSchema()


@bp.post("")
@require_auth
@timing
def create_product():
    """List a new product owned by the authenticated seller."""

    payload = load_json(product_create_schema)
    product = services().products.create_product(current_user().id, ProductCreateIn(**payload))
    return json_response({"data": product_schema.dump(product)}, status=201)


@bp.get("")
@require_auth
@timing
def list_products():
    """Return paginated products."""

    filters = product_filter_schema.load(request.args)
    pagination = parse_pagination()
    page = services().products.query_products(
        ProductListIn(
            product_name=filters["product_name"],
            seller_id=filters["seller_id"],
            page=pagination.page,
            limit=pagination.limit,
            sort=pagination.sort,
        )
    )
    return json_response({"data": product_list_schema.dump(page.items), "meta": build_meta(page)})


@bp.get("/<int:product_id>")
@require_auth
@timing
def get_product(product_id: int):
    """Return one product."""

    product = services().products.get_product(product_id)
    return json_response({"data": product_schema.dump(product)})


@bp.patch("/<int:product_id>")
@require_auth
@timing
def update_product(product_id: int):
    """Change name, cost or stock of one's own product."""

    payload = load_json(product_update_schema)
    product = services().products.update_product(
        current_user().id, product_id, ProductUpdateIn(**payload)
    )
    return json_response({"data": product_schema.dump(product)})


@bp.delete("/<int:product_id>")
@require_auth
@timing
def delete_product(product_id: int):
    """Remove one's own product."""

    services().products.delete_product(current_user().id, product_id)
    return no_content()


@bp.post("/buy")
@require_auth
@timing
def buy():
    """Buy ``amount`` units of a product with the authenticated buyer's deposit."""

    payload = load_json(buy_schema)
    result = services().purchases.buy_product(current_user().id, BuyIn(**payload))
    return json_response({"data": purchase_schema.dump(result)})
