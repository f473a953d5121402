"""
Catalog models: Suppliers, Products, PriceHistory, ProductGroups, ProductMapping.

A supplier owns its products. A product's current price is a denormalized
copy of its most recent PriceHistory entry by effective date. Product groups
are the canonical "master" products that supplier products are mapped onto
for cross-supplier comparison.
"""

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricebook.core.database import Base


PLACEHOLDER_CODE_PREFIX = "AUTO-"


class Supplier(Base):
    """
    A vendor submitting price lists.

    Created by an admin or auto-created by an import that names an unknown
    supplier. Soft-deleted only: status flips to 'deleted'.
    """

    __tablename__ = "suppliers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default="active",
        comment="active | deleted",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Supplier {self.code}:{self.name}>"


class Product(Base):
    """A supplier's product. Code is unique per supplier."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("suppliers.id"),
        nullable=False,
    )
    product_code: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Supplier's product code, or an AUTO- placeholder.",
    )
    product_name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Current price: the latest PriceHistory entry by effective date.",
    )
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    effective_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default="active",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    supplier: Mapped["Supplier"] = relationship("Supplier", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("supplier_id", "product_code", name="uq_products_supplier_code"),
        Index("idx_products_supplier", "supplier_id"),
    )

    @property
    def has_placeholder_code(self) -> bool:
        return self.product_code.startswith(PLACEHOLDER_CODE_PREFIX)

    def __repr__(self) -> str:
        return f"<Product {self.supplier_id}/{self.product_code}>"


class PriceHistory(Base):
    """
    Append-only price ledger.

    One entry per observed price change, never updated in normal operation.
    """

    __tablename__ = "price_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id"),
        nullable=False,
    )
    price: Mapped[float] = mapped_column(Float, nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    source: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="manual",
        server_default="manual",
        comment="manual | admin_import | supplier_import | purchase_import",
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_price_history_product_date", "product_id", "effective_date"),
    )

    def __repr__(self) -> str:
        return f"<PriceHistory product={self.product_id} {self.price}@{self.effective_date}>"


class ProductGroup(Base):
    """Canonical master product that supplier products map onto."""

    __tablename__ = "product_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    master_code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    master_name: Mapped[str] = mapped_column(String(500), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        server_default="active",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ProductGroup {self.master_code}:{self.master_name}>"


class ProductMapping(Base):
    """Links a product to its group. At most one mapping per product."""

    __tablename__ = "product_mapping"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id"),
        nullable=False,
        unique=True,
    )
    product_group_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_groups.id"),
        nullable=False,
    )
    mapped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_product_mapping_group", "product_group_id"),
    )

    def __repr__(self) -> str:
        return f"<ProductMapping {self.product_id} → {self.product_group_id}>"
