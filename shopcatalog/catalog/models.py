"""SQLAlchemy models for the product catalog.

Defines the three-level Category tree, Product and ProductSize tables.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, inspect, text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopcatalog.infrastructure.database import Base

ROOT_LEVEL = 1
LEAF_LEVEL = 3


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


class Category(Base):
    """A node of the three-level category tree.

    Top-level categories live in one flat namespace: their names are
    unique across the whole catalog. Second and third level categories
    are unique by name within their parent only.

    Attributes:
        id: Unique category identifier (UUID string).
        name: Category label.
        level: Depth in the tree (1 = top, 3 = leaf).
        parent_category_id: Parent category ID (None for top level).
        created_at: Creation timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    parent_category_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # Relationships
    parent_category: Mapped["Category | None"] = relationship(
        "Category",
        remote_side="Category.id",
    )

    __table_args__ = (
        Index(
            "uq_categories_root_name",
            "name",
            unique=True,
            postgresql_where=text("level = 1"),
            sqlite_where=text("level = 1"),
        ),
        Index(
            "uq_categories_parent_name",
            "name",
            "parent_category_id",
            unique=True,
            postgresql_where=text("parent_category_id IS NOT NULL"),
            sqlite_where=text("parent_category_id IS NOT NULL"),
        ),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, name={self.name}, level={self.level})>"

    @property
    def is_leaf(self) -> bool:
        """Whether products may reference this category directly."""
        return self.level == LEAF_LEVEL

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "parentCategory": self.parent_category_id,
        }


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Unique product identifier (UUID string).
        title: Product title.
        description: Product description.
        brand: Brand name.
        image_url: Product image URL.
        color: Product color, used by the color filter.
        price: List price.
        discounted_price: Selling price, used for price filtering and sorting.
        discount_percent: Discount relative to the list price.
        quantity: Units in stock.
        category_id: Leaf (level 3) category ID.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    discounted_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True, index=True)
    discount_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    category: Mapped["Category"] = relationship("Category")
    sizes: Mapped[list["ProductSize"]] = relationship(
        "ProductSize",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSize.position",
        collection_class=ordering_list("position"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, title={(self.title or '')[:30]}...)>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        The category is rendered as a nested object when it has been
        loaded, and as its bare ID otherwise.

        Returns:
            Dictionary representation.
        """
        unloaded = inspect(self).unloaded
        if "category" not in unloaded and self.category is not None:
            category: Any = self.category.to_dict()
        else:
            category = self.category_id

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "brand": self.brand,
            "imageUrl": self.image_url,
            "color": self.color,
            "price": _to_float(self.price),
            "discountedPrice": _to_float(self.discounted_price),
            "discountPercent": _to_float(self.discount_percent),
            "quantity": self.quantity,
            "sizes": [] if "sizes" in unloaded else [s.to_dict() for s in self.sizes],
            "category": category,
        }


class ProductSize(Base):
    """One entry of a product's ordered size list.

    Attributes:
        id: Unique size row identifier.
        product_id: Owning product ID.
        name: Size label (e.g., "M", "42").
        quantity: Units available in this size.
        position: Index within the product's size list.
    """

    __tablename__ = "product_sizes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="sizes")

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductSize(name={self.name}, quantity={self.quantity})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {"name": self.name, "quantity": self.quantity}
