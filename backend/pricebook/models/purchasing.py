"""
Purchasing models: PurchaseHistory and ImportBatch.

Purchase records keep a snapshot of the supplier/product codes and names as
they appeared on the imported sheet, so they stay readable even if the
product is later renamed or re-coded.
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
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from pricebook.core.database import Base


class PurchaseHistory(Base):
    """
    A realized purchase line.

    No two records share (po_number, product_code, supplier_id) when both
    po_number and product_code are set; the import pipeline enforces this
    rather than the schema, since incomplete rows are never deduplicated.
    """

    __tablename__ = "purchase_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("suppliers.id"),
        nullable=False,
    )
    product_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("products.id"),
        nullable=True,
    )
    supplier_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    product_code: Mapped[str | None] = mapped_column(String(200), nullable=True)
    product_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    quantity: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    po_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pf_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        # Duplicate guard lookup
        Index("idx_purchase_history_dedup", "po_number", "product_code", "supplier_id"),
        Index("idx_purchase_history_product", "product_id"),
    )

    def __repr__(self) -> str:
        return f"<PurchaseHistory PO={self.po_number} {self.product_code}>"


class ImportBatch(Base):
    """One confirmed import: its layout and outcome counts."""

    __tablename__ = "import_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    layout: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("suppliers.id"),
        nullable=True,
        comment="Set for supplier self-service imports.",
    )
    item_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    counts: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default="{}",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ImportBatch {self.id} {self.layout}>"
