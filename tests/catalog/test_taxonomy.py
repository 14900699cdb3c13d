"""Tests for the category path resolver."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import Category
from shopcatalog.catalog.repository import CategoryRepository
from shopcatalog.catalog.taxonomy import TaxonomyResolver


@pytest.fixture
def resolver(session: AsyncSession) -> TaxonomyResolver:
    """Create resolver on the test session."""
    return TaxonomyResolver(session)


class TestResolvePath:
    """Tests for TaxonomyResolver.resolve_path."""

    @pytest.mark.asyncio
    async def test_creates_three_levels(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """A new path creates one category per level."""
        leaf_id = await resolver.resolve_path("Men", "Clothing", "Shirts")

        leaf = await session.get(Category, leaf_id)
        assert leaf is not None
        assert leaf.name == "Shirts"
        assert leaf.level == 3
        assert leaf.is_leaf
        assert await CategoryRepository(session).count() == 3

    @pytest.mark.asyncio
    async def test_idempotent(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """Resolving the same path twice returns the same leaf."""
        first = await resolver.resolve_path("Men", "Clothing", "Shirts")
        second = await resolver.resolve_path("Men", "Clothing", "Shirts")

        assert first == second
        assert await CategoryRepository(session).count() == 3

    @pytest.mark.asyncio
    async def test_hierarchy_shape(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """Two parent hops from a leaf reach a parentless top-level category."""
        leaf_id = await resolver.resolve_path("Women", "Footwear", "Boots")

        leaf = await session.get(Category, leaf_id)
        second = await session.get(Category, leaf.parent_category_id)
        top = await session.get(Category, second.parent_category_id)

        assert (second.name, second.level) == ("Footwear", 2)
        assert (top.name, top.level) == ("Women", 1)
        assert top.parent_category_id is None

    @pytest.mark.asyncio
    async def test_top_level_shared_across_paths(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """Paths with the same top name share one top-level category."""
        leaf_p = await session.get(Category, await resolver.resolve_path("A", "X", "P"))
        leaf_q = await session.get(Category, await resolver.resolve_path("A", "Y", "Q"))

        x = await session.get(Category, leaf_p.parent_category_id)
        y = await session.get(Category, leaf_q.parent_category_id)

        assert x.id != y.id
        assert x.parent_category_id == y.parent_category_id
        assert await CategoryRepository(session).count() == 5

    @pytest.mark.asyncio
    async def test_same_name_under_different_parents(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """Second-level names are scoped by their parent."""
        men_leaf = await session.get(
            Category, await resolver.resolve_path("Men", "Clothing", "Shirts")
        )
        women_leaf = await session.get(
            Category, await resolver.resolve_path("Women", "Clothing", "Shirts")
        )

        assert men_leaf.id != women_leaf.id
        assert men_leaf.parent_category_id != women_leaf.parent_category_id
        assert await CategoryRepository(session).count() == 6

    @pytest.mark.asyncio
    async def test_top_level_lookup_ignores_deeper_categories(
        self, resolver: TaxonomyResolver, session: AsyncSession
    ) -> None:
        """A lower-level category never stands in for a top-level one."""
        await resolver.resolve_path("Men", "Footwear", "Sneakers")
        leaf = await session.get(
            Category, await resolver.resolve_path("Footwear", "Kids", "Boots")
        )

        second = await session.get(Category, leaf.parent_category_id)
        top = await session.get(Category, second.parent_category_id)

        assert top.name == "Footwear"
        assert top.level == 1
        assert top.parent_category_id is None


class TestConcurrentCreation:
    """Tests for find-or-create when another writer wins the race."""

    @pytest.mark.asyncio
    async def test_conflicting_insert_rereads_existing(
        self,
        resolver: TaxonomyResolver,
        session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A stale 'absent' read converges on the existing category."""
        existing = await resolver.resolve_path("Men", "Clothing", "Shirts")

        real_find_root = resolver.categories.find_root
        calls: list[str] = []

        async def stale_find_root(name: str) -> Category | None:
            calls.append(name)
            if len(calls) == 1:
                return None
            return await real_find_root(name)

        monkeypatch.setattr(resolver.categories, "find_root", stale_find_root)

        leaf_id = await resolver.resolve_path("Men", "Clothing", "Shirts")

        assert leaf_id == existing
        assert calls == ["Men", "Men"]
        assert await CategoryRepository(session).count() == 3

    @pytest.mark.asyncio
    async def test_other_store_errors_propagate(self, resolver: TaxonomyResolver) -> None:
        """Failures that are not duplicates surface unchanged."""
        with pytest.raises(IntegrityError):
            await resolver.resolve_path(None, "Clothing", "Shirts")  # type: ignore[arg-type]
