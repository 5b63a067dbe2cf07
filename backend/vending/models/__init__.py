from vending.models.product import Product
from vending.models.user import User

__all__ = [
    "Product",
    "User",
]
