"""Catalog search query compilation.

Turns loosely typed search parameters (query-string values, JSON
bodies) into a concrete filter, sort order and page window, runs it
against the product table and returns one page of results.

Malformed inputs are never rejected: numbers that cannot be parsed fall
back to their defaults and unrecognized sort or stock values take the
default branch of their enum.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from shopcatalog.catalog.models import Product, ProductSize
from shopcatalog.catalog.repository import CategoryRepository, ProductRepository

logger = structlog.get_logger()

DEFAULT_MIN_PRICE = 0
DEFAULT_MAX_PRICE = 100000
DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10


# ============================================================================
# Enums
# ============================================================================


class SortOrder(str, Enum):
    """Sort direction on the discounted price."""

    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"

    @classmethod
    def parse(cls, value: Any) -> "SortOrder":
        """Map a raw sort value to a sort order.

        Absent values sort ascending. Anything other than ``price_low``
        sorts descending.
        """
        if value is None or value == "" or value == cls.PRICE_LOW.value:
            return cls.PRICE_LOW
        return cls.PRICE_HIGH


class StockFilter(str, Enum):
    """Stock availability filter."""

    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    ANY = "any"

    @classmethod
    def parse(cls, value: Any) -> "StockFilter":
        """Map a raw stock value to a filter; unknown values mean no filter."""
        if value == cls.IN_STOCK.value:
            return cls.IN_STOCK
        if value == cls.OUT_OF_STOCK.value:
            return cls.OUT_OF_STOCK
        return cls.ANY


# ============================================================================
# Input coercion
# ============================================================================


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def _to_number(value: Any, default: int | float) -> int | float:
    if value is None or value == "":
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        return default if math.isnan(number) else number


def _to_decimal(value: int | float) -> Decimal:
    return Decimal(str(value))


def _to_list(value: Any) -> list[str]:
    """Normalize a comma-separated string or a list into a list of names.

    Any other value (numbers, booleans, mappings) means no names. Items
    of a list that are not non-empty strings are dropped.
    """
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        return []
    return [item for item in items if isinstance(item, str) and item != ""]


def _to_name(value: Any) -> str | None:
    """Normalize a single name; a repeated parameter keeps its first value."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, str) and value != "":
        return value
    return None


# ============================================================================
# Parameter and result types
# ============================================================================


@dataclass
class SearchParams:
    """Normalized product search parameters.

    Attributes:
        category: Category name to filter by (any level, case-insensitive).
        colors: Accepted product colors.
        sizes: Accepted size names; a product matches if it has any of them.
        min_price: Inclusive lower bound on discounted price.
        max_price: Inclusive upper bound on discounted price.
        min_discount: Inclusive lower bound on discount percent, if > 0.
        sort: Sort order on discounted price.
        stock: Stock availability filter.
        page_number: Page number (1-indexed).
        page_size: Items per page.
    """

    category: str | None = None
    colors: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    min_price: int | float = DEFAULT_MIN_PRICE
    max_price: int | float = DEFAULT_MAX_PRICE
    min_discount: int | float = 0
    sort: SortOrder = SortOrder.PRICE_LOW
    stock: StockFilter = StockFilter.ANY
    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "SearchParams":
        """Build search parameters from raw request values.

        Args:
            query: Raw parameters keyed by their request names
                (``category``, ``colors``, ``sizes``, ``minPrice``,
                ``maxPrice``, ``minDiscount``, ``sort``, ``stock``,
                ``pageNumber``, ``pageSize``).

        Returns:
            Normalized search parameters.
        """
        return cls(
            category=_to_name(query.get("category")),
            colors=_to_list(query.get("colors")),
            sizes=_to_list(query.get("sizes")),
            min_price=_to_number(query.get("minPrice"), DEFAULT_MIN_PRICE),
            max_price=_to_number(query.get("maxPrice"), DEFAULT_MAX_PRICE),
            min_discount=_to_number(query.get("minDiscount"), 0),
            sort=SortOrder.parse(query.get("sort")),
            stock=StockFilter.parse(query.get("stock")),
            page_number=_to_int(query.get("pageNumber"), DEFAULT_PAGE_NUMBER),
            page_size=_to_int(query.get("pageSize"), DEFAULT_PAGE_SIZE),
        )

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        if self.page_size <= 0:
            return 0
        return max(self.page_number - 1, 0) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (page size, never negative)."""
        return max(self.page_size, 0)


@dataclass
class ProductQuery:
    """A compiled product query.

    Attributes:
        conditions: Filter expressions, combined with AND.
        order_by: Sort expressions.
        offset: Rows to skip.
        limit: Maximum rows to return.
    """

    conditions: list[Any]
    order_by: list[Any]
    offset: int
    limit: int


@dataclass
class ProductPage:
    """One page of search results.

    Attributes:
        content: Products on this page.
        current_page: Requested page number.
        total_pages: Number of pages for the whole result set.
        total: Number of matching products.
    """

    content: list[Product]
    current_page: int
    total_pages: int
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "content": [product.to_dict() for product in self.content],
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "total": self.total,
        }


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` items."""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


# ============================================================================
# Compiler
# ============================================================================


def build_conditions(params: SearchParams, category_id: str | None = None) -> list[Any]:
    """Build the filter expressions for a search.

    Args:
        params: Search parameters.
        category_id: Resolved category ID, if filtering by category.

    Returns:
        Filter expressions, to be combined with AND.
    """
    conditions: list[Any] = []

    if category_id is not None:
        conditions.append(Product.category_id == category_id)

    if params.colors:
        conditions.append(Product.color.in_(params.colors))

    if params.sizes:
        conditions.append(Product.sizes.any(ProductSize.name.in_(params.sizes)))

    # Bounds are bound as decimals so fractional prices compare exactly
    conditions.append(Product.discounted_price >= _to_decimal(params.min_price))
    conditions.append(Product.discounted_price <= _to_decimal(params.max_price))

    if params.min_discount > 0:
        conditions.append(Product.discount_percent >= _to_decimal(params.min_discount))

    if params.stock is StockFilter.IN_STOCK:
        conditions.append(Product.quantity > 0)
    elif params.stock is StockFilter.OUT_OF_STOCK:
        conditions.append(Product.quantity == 0)

    return conditions


def build_order_by(sort: SortOrder) -> list[Any]:
    """Build the sort expressions for a search.

    Product ID breaks ties so that page windows are stable.
    """
    if sort is SortOrder.PRICE_LOW:
        return [Product.discounted_price.asc(), Product.id.asc()]
    return [Product.discounted_price.desc(), Product.id.asc()]


class CatalogQueryCompiler:
    """Compiles and runs product searches.

    Example usage:
        async with async_session_factory() as session:
            compiler = CatalogQueryCompiler(session)
            page = await compiler.search(
                SearchParams.from_query({"colors": "red, blue", "pageSize": "20"})
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize compiler with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)

    async def compile(self, params: SearchParams) -> ProductQuery | None:
        """Compile search parameters into a product query.

        Args:
            params: Search parameters.

        Returns:
            The compiled query, or None if the requested category
            does not exist.
        """
        category_id = None
        if params.category is not None:
            category = await self.categories.find_by_name_insensitive(params.category)
            if category is None:
                return None
            category_id = category.id

        return ProductQuery(
            conditions=build_conditions(params, category_id),
            order_by=build_order_by(params.sort),
            offset=params.offset,
            limit=params.limit,
        )

    async def search(self, params: SearchParams) -> ProductPage:
        """Search products.

        Args:
            params: Search parameters.

        Returns:
            One page of products with pagination metadata.
        """
        query = await self.compile(params)
        if query is None:
            logger.info("Search category not found", category=params.category)
            return ProductPage(content=[], current_page=params.page_number, total_pages=1)

        total = await self.products.count(query.conditions)
        products = list(
            await self.products.find(
                conditions=query.conditions,
                order_by=query.order_by,
                offset=query.offset,
                limit=query.limit,
            )
        )
        await self._attach_categories(products)

        logger.debug(
            "Product search executed",
            total=total,
            returned=len(products),
            page_number=params.page_number,
            page_size=params.page_size,
            sort=params.sort.value,
            stock=params.stock.value,
        )

        return ProductPage(
            content=products,
            current_page=params.page_number,
            total_pages=total_pages(total, params.page_size),
            total=total,
        )

    async def _attach_categories(self, products: Sequence[Product]) -> None:
        """Load the referenced categories and attach them to the products."""
        categories = await self.categories.get_many(p.category_id for p in products)
        for product in products:
            set_committed_value(product, "category", categories.get(product.category_id))
