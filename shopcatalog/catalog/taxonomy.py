"""Three-level category taxonomy.

Resolves a (top, second, third) category-name path into its leaf
category, creating any node of the path that does not exist yet.

Path example:
    Men > Clothing > Shirts

Every node is looked up and created through the same find-or-create
step. The step inserts inside a savepoint and falls back to reading
the existing row when the insert hits the categories' unique indexes,
so concurrent callers resolving the same path end up on the same nodes.
"""

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import LEAF_LEVEL, ROOT_LEVEL, Category
from shopcatalog.catalog.repository import CategoryRepository

logger = structlog.get_logger()


class TaxonomyResolver:
    """Finds or creates category paths.

    Example usage:
        async with async_session_factory() as session:
            resolver = TaxonomyResolver(session)
            leaf_id = await resolver.resolve_path("Men", "Clothing", "Shirts")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize resolver with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.categories = CategoryRepository(session)

    async def resolve_path(self, top_name: str, second_name: str, third_name: str) -> str:
        """Resolve a category path to its leaf category ID.

        Args:
            top_name: Top-level category name.
            second_name: Second-level category name.
            third_name: Third-level category name.

        Returns:
            ID of the level-3 category.
        """
        leaf = await self.resolve_path_category(top_name, second_name, third_name)
        return leaf.id

    async def resolve_path_category(
        self,
        top_name: str,
        second_name: str,
        third_name: str,
    ) -> Category:
        """Resolve a category path to its leaf category.

        Each level needs the ID of the previous one, so the three
        lookups run one after another.

        Args:
            top_name: Top-level category name.
            second_name: Second-level category name.
            third_name: Third-level category name.

        Returns:
            The level-3 category.
        """
        top = await self._find_or_create(top_name, ROOT_LEVEL, None)
        second = await self._find_or_create(second_name, ROOT_LEVEL + 1, top)
        return await self._find_or_create(third_name, LEAF_LEVEL, second)

    async def _find(self, name: str, parent: Category | None) -> Category | None:
        """Look up a category by its deduplication key."""
        if parent is None:
            return await self.categories.find_root(name)
        return await self.categories.find_child(name, parent.id)

    async def _find_or_create(
        self,
        name: str,
        level: int,
        parent: Category | None,
    ) -> Category:
        """Return the category for (name, parent), creating it if absent.

        Args:
            name: Category name.
            level: Level to assign when creating.
            parent: Parent category (None for top level).

        Returns:
            Existing or newly created category.

        Raises:
            IntegrityError: If the insert conflicts and the conflicting
                row still cannot be read back.
        """
        category = await self._find(name, parent)
        if category is not None:
            return category

        try:
            async with self.session.begin_nested():
                category = await self.categories.insert(
                    Category(
                        name=name,
                        level=level,
                        parent_category_id=parent.id if parent else None,
                    )
                )
        except IntegrityError:
            # Another writer created the same node between our read and insert
            logger.info(
                "Category created concurrently, re-reading",
                name=name,
                level=level,
                parent_id=parent.id if parent else None,
            )
            category = await self._find(name, parent)
            if category is None:
                raise
            return category

        logger.info(
            "Category created",
            category_id=category.id,
            name=name,
            level=level,
            parent_id=category.parent_category_id,
        )
        return category
