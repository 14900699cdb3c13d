"""Catalog repositories for database operations.

Provide the document-store style operations the catalog relies on:
find-one by key, insert, lookup by ID, filtered find with sort and
skip/limit, count, partial update and delete.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shopcatalog.catalog.models import ROOT_LEVEL, Category, Product, ProductSize


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            men = await repo.find_root("Men")
            clothing = await repo.find_child("Clothing", men.id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_root(self, name: str) -> Category | None:
        """Find a top-level category by name.

        Top-level names form one global namespace, so no parent is
        involved in the lookup.

        Args:
            name: Category name.

        Returns:
            Category if found, None otherwise.
        """
        query = select(Category).where(
            and_(
                Category.name == name,
                Category.level == ROOT_LEVEL,
            )
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_child(self, name: str, parent_id: str) -> Category | None:
        """Find a category by name under a given parent.

        Args:
            name: Category name.
            parent_id: Parent category ID.

        Returns:
            Category if found, None otherwise.
        """
        query = select(Category).where(
            and_(
                Category.name == name,
                Category.parent_category_id == parent_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def insert(self, category: Category) -> Category:
        """Insert a category and assign its ID.

        Args:
            category: Category to insert.

        Returns:
            Inserted category.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    async def find_by_name_insensitive(self, name: str) -> Category | None:
        """Find the first category whose name equals ``name`` ignoring case.

        Any level may match; the earliest created category wins. Both
        sides are lowered by the database, so case folding follows its
        `lower()` (ASCII-only on SQLite).

        Args:
            name: Category name.

        Returns:
            Category if found, None otherwise.
        """
        query = (
            select(Category)
            .where(func.lower(Category.name) == func.lower(name))
            .order_by(Category.created_at.asc(), Category.id.asc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def get_many(self, category_ids: Iterable[str]) -> dict[str, Category]:
        """Load several categories in one query.

        Args:
            category_ids: Category IDs to load.

        Returns:
            Mapping of category ID to Category for the IDs that exist.
        """
        ids = set(category_ids)
        if not ids:
            return {}

        result = await self.session.execute(
            select(Category).where(Category.id.in_(ids))
        )
        return {category.id: category for category in result.scalars().all()}

    async def count(self) -> int:
        """Count all categories.

        Returns:
            Number of categories.
        """
        result = await self.session.execute(select(func.count(Category.id)))
        return result.scalar_one()


class ProductRepository:
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination. Filter conditions are
    SQLAlchemy expressions built by the caller.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find(
                conditions=[Product.color.in_(["red"])],
                order_by=[Product.discounted_price.asc()],
                limit=20,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Save a product to database.

        Args:
            product: Product to save.

        Returns:
            Saved product.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    async def get_by_id(
        self,
        product_id: str,
        include_category: bool = True,
    ) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.
            include_category: Whether to eagerly load the category.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.sizes))
        )

        if include_category:
            query = query.options(selectinload(Product.category))

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find(
        self,
        conditions: Sequence[Any] = (),
        order_by: Sequence[Any] = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[Product]:
        """Find products matching all conditions.

        Sizes are loaded with the products; the category reference is
        left unloaded.

        Args:
            conditions: Filter expressions, combined with AND.
            order_by: Sort expressions.
            offset: Number of matching rows to skip.
            limit: Maximum results (None for no limit).

        Returns:
            Sequence of matching products.
        """
        query = select(Product).options(selectinload(Product.sizes))

        if conditions:
            query = query.where(and_(*conditions))

        if order_by:
            query = query.order_by(*order_by)

        query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, conditions: Sequence[Any] = ()) -> int:
        """Count products matching all conditions.

        Args:
            conditions: Filter expressions, combined with AND.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id))

        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def update_by_id(
        self,
        product_id: str,
        fields: dict[str, Any],
        sizes: list[ProductSize] | None = None,
    ) -> Product | None:
        """Overwrite the given fields of a product.

        Args:
            product_id: Product ID.
            fields: Attribute names and their new values.
            sizes: Replacement size list, or None to keep the current one.

        Returns:
            Updated product, or None if it does not exist.
        """
        product = await self.get_by_id(product_id)
        if product is None:
            return None

        for name, value in fields.items():
            setattr(product, name, value)

        if sizes is not None:
            product.sizes = sizes

        await self.session.flush()
        return product

    async def delete(self, product: Product) -> None:
        """Delete a product and its sizes.

        Args:
            product: Product to delete.
        """
        await self.session.delete(product)
        await self.session.flush()
