"""Catalog service for product operations.

High-level service that combines the taxonomy resolver, the search
compiler and the product repository into the catalog's public
operations.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import Product, ProductSize
from shopcatalog.catalog.query import CatalogQueryCompiler, ProductPage, SearchParams
from shopcatalog.catalog.repository import ProductRepository
from shopcatalog.catalog.taxonomy import TaxonomyResolver
from shopcatalog.domain.exceptions import ProductNotFoundError

logger = structlog.get_logger()

# Request key -> Product attribute
PRODUCT_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "brand": "brand",
    "imageUrl": "image_url",
    "color": "color",
    "price": "price",
    "discountedPrice": "discounted_price",
    "discountPercent": "discount_percent",
    "quantity": "quantity",
}

CATEGORY_KEYS = ("topLevelCategory", "secondLevelCategory", "thirdLevelCategory")


def product_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Pick the product attributes present in a request payload.

    Both the request spelling (``discountedPrice``) and the attribute
    name (``discounted_price``) are accepted. Unknown keys are ignored.

    Args:
        data: Request payload.

    Returns:
        Product attribute names and values.
    """
    fields: dict[str, Any] = {}
    for key, attribute in PRODUCT_FIELDS.items():
        if key in data:
            fields[attribute] = data[key]
        elif attribute in data:
            fields[attribute] = data[attribute]
    return fields


def build_sizes(raw_sizes: Iterable[Any] | None) -> list[ProductSize]:
    """Build size rows from a request's size list.

    Args:
        raw_sizes: Sizes as ``{"name", "quantity"}`` mappings or plain names.

    Returns:
        Size rows in request order.
    """
    sizes = []
    for position, raw in enumerate(raw_sizes or []):
        if isinstance(raw, Mapping):
            size = ProductSize(name=raw.get("name"), quantity=raw.get("quantity") or 0)
        else:
            size = ProductSize(name=str(raw), quantity=0)
        size.position = position
        sizes.append(size)
    return sizes


def _raw_sizes(data: Mapping[str, Any]) -> Any:
    if "sizes" in data:
        return data["sizes"]
    return data.get("size")


class CatalogService:
    """Service for catalog operations.

    Each write commits its own unit of work, so a bulk create that
    fails partway keeps the products created before the failure.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)

            product = await service.create_product({
                "title": "Slim Fit Shirt",
                "topLevelCategory": "Men",
                "secondLevelCategory": "Clothing",
                "thirdLevelCategory": "Shirts",
                "discountedPrice": 499,
            })

            page = await service.search_products({"category": "shirts"})
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.taxonomy = TaxonomyResolver(session)
        self.compiler = CatalogQueryCompiler(session)

    async def create_product(self, data: Mapping[str, Any]) -> Product:
        """Create a product, resolving its category path first.

        Args:
            data: Product payload with the three category names
                (``topLevelCategory``, ``secondLevelCategory``,
                ``thirdLevelCategory``) and the product fields.

        Returns:
            Created product with its category and sizes loaded.
        """
        top, second, third = (data.get(key) for key in CATEGORY_KEYS)
        leaf = await self.taxonomy.resolve_path_category(top, second, third)

        product = Product(
            **product_fields(data),
            category=leaf,
            sizes=build_sizes(_raw_sizes(data)),
        )
        await self.repository.save(product)
        await self.session.commit()

        logger.info(
            "Product created",
            product_id=product.id,
            category_id=leaf.id,
        )
        return product

    async def create_multiple_products(
        self,
        items: Iterable[Mapping[str, Any]],
    ) -> list[Product]:
        """Create products one after another.

        There is no rollback: if one product fails, the ones before it
        stay created and the rest are not attempted.

        Args:
            items: Product payloads.

        Returns:
            Created products.
        """
        created = []
        for data in items:
            created.append(await self.create_product(data))
        return created

    async def find_product_by_id(self, product_id: str) -> Product:
        """Get product by ID with its category loaded.

        Args:
            product_id: Product ID.

        Returns:
            The product.

        Raises:
            ProductNotFoundError: If no product has this ID.
        """
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product.

        Args:
            product_id: Product ID.

        Raises:
            ProductNotFoundError: If no product has this ID.
        """
        product = await self.find_product_by_id(product_id)
        await self.repository.delete(product)
        await self.session.commit()

        logger.info("Product deleted", product_id=product_id)

    async def update_product(
        self,
        product_id: str,
        data: Mapping[str, Any],
    ) -> Product | None:
        """Overwrite the fields present in ``data``.

        Args:
            product_id: Product ID.
            data: Fields to overwrite; ``sizes`` replaces the size list.

        Returns:
            Updated product, or None if no product has this ID.
        """
        raw_sizes = _raw_sizes(data)
        product = await self.repository.update_by_id(
            product_id,
            product_fields(data),
            sizes=build_sizes(raw_sizes) if raw_sizes is not None else None,
        )
        if product is None:
            return None

        await self.session.commit()

        logger.info("Product updated", product_id=product_id)
        return product

    async def search_products(self, query: Mapping[str, Any]) -> ProductPage:
        """Search products with filters and pagination.

        Args:
            query: Raw search parameters (see ``SearchParams.from_query``).

        Returns:
            One page of products.
        """
        return await self.compiler.search(SearchParams.from_query(query))
