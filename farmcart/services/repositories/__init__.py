"""
Repository Pattern for Database Operations

- CartLineRepository: cart line CRUD for the sync engine
- ProductRepository: catalog browsing, home page stats
"""
from .cart_repo import CartLineRepository
from .product_repo import ProductRepository

__all__ = [
    "CartLineRepository",
    "ProductRepository",
]
