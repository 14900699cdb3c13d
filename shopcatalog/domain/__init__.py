"""Domain layer for the catalog."""

from shopcatalog.domain.exceptions import DomainError, ProductNotFoundError

__all__ = [
    "DomainError",
    "ProductNotFoundError",
]
