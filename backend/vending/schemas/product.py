"""Product and purchase schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class ProductCreateSchema(Schema):
    """Payload for listing a new product."""

    product_name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    cost = fields.Integer(required=True, strict=True)
    amount_available = fields.Integer(load_default=0, strict=True)


class ProductUpdateSchema(Schema):
    """Partial product update."""

    product_name = fields.String(validate=validate.Length(min=1, max=120))
    cost = fields.Integer(strict=True)
    amount_available = fields.Integer(strict=True)


class ProductFilterSchema(Schema):
    """Supported query parameters for listing products."""

    class Meta:
        unknown = EXCLUDE

    product_name = fields.String(load_default=None, validate=validate.Length(min=1, max=120))
    seller_id = fields.Integer(load_default=None)


class BuySchema(Schema):
    """Purchase request."""

    product_id = fields.Integer(required=True, strict=True)
    amount = fields.Integer(required=True, strict=True)


class ProductSchema(Schema):
    """Public representation of a product."""

    id = fields.Integer(required=True)
    product_name = fields.String(required=True)
    cost = fields.Integer(required=True)
    amount_available = fields.Integer(required=True)
    seller_id = fields.Integer(required=True)


class PurchaseSchema(Schema):
    """Outcome of a purchase: charge, product snapshot and change coins."""

    total = fields.Integer(required=True)
    product = fields.Nested(ProductSchema, required=True)
    change = fields.List(fields.Integer(), required=True)
    deposit = fields.Integer(required=True)
