"""Product Catalog.

Provides the three-level category taxonomy, product search compilation
and the catalog service that ties them together.
"""

from shopcatalog.catalog.models import Category, Product, ProductSize
from shopcatalog.catalog.query import (
    CatalogQueryCompiler,
    ProductPage,
    ProductQuery,
    SearchParams,
    SortOrder,
    StockFilter,
)
from shopcatalog.catalog.repository import CategoryRepository, ProductRepository
from shopcatalog.catalog.service import CatalogService
from shopcatalog.catalog.taxonomy import TaxonomyResolver

__all__ = [
    # Models
    "Category",
    "Product",
    "ProductSize",
    # Repositories
    "CategoryRepository",
    "ProductRepository",
    # Taxonomy
    "TaxonomyResolver",
    # Search
    "CatalogQueryCompiler",
    "ProductPage",
    "ProductQuery",
    "SearchParams",
    "SortOrder",
    "StockFilter",
    # Service
    "CatalogService",
]
