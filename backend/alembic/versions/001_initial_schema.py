"""Initial schema: catalog, price ledger, purchasing, import batches.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Suppliers ───────────────────────────────────────────
    op.create_table(
        "suppliers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_suppliers_name_lower", "suppliers", [sa.text("lower(name)")])

    # ── Products ────────────────────────────────────────────
    op.create_table(
        "products",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("supplier_id", sa.Integer,
                  sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("product_code", sa.String(200), nullable=False),
        sa.Column("product_name", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Float, nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("effective_date", sa.Date, nullable=True),
        sa.Column("remark", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("supplier_id", "product_code", name="uq_products_supplier_code"),
    )
    op.create_index("idx_products_supplier", "products", ["supplier_id"])
    # Name fallback match: lower(trim(product_name)) per supplier
    op.execute(
        "CREATE INDEX idx_products_supplier_name ON products "
        "(supplier_id, lower(trim(product_name)))"
    )

    # ── Price History ───────────────────────────────────────
    op.create_table(
        "price_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer,
                  sa.ForeignKey("products.id"), nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("effective_date", sa.Date, nullable=False),
        sa.Column("source", sa.String(50), nullable=False, server_default="manual"),
        sa.Column("recorded_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_price_history_product_date", "price_history",
                    ["product_id", "effective_date"])

    # ── Product Groups / Mapping ────────────────────────────
    op.create_table(
        "product_groups",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("master_code", sa.String(100), nullable=False, unique=True),
        sa.Column("master_name", sa.String(500), nullable=False),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "product_mapping",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer,
                  sa.ForeignKey("products.id"), nullable=False, unique=True),
        sa.Column("product_group_id", sa.Integer,
                  sa.ForeignKey("product_groups.id"), nullable=False),
        sa.Column("mapped_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_product_mapping_group", "product_mapping", ["product_group_id"])

    # ── Purchase History ────────────────────────────────────
    op.create_table(
        "purchase_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("supplier_id", sa.Integer,
                  sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("product_id", sa.Integer,
                  sa.ForeignKey("products.id"), nullable=True),
        sa.Column("supplier_code", sa.String(100), nullable=True),
        sa.Column("product_code", sa.String(200), nullable=True),
        sa.Column("product_name", sa.String(500), nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("quantity", sa.Float, nullable=True),
        sa.Column("unit_price", sa.Float, nullable=True),
        sa.Column("total_price", sa.Float, nullable=True),
        sa.Column("purchase_date", sa.Date, nullable=True),
        sa.Column("delivery_date", sa.Date, nullable=True),
        sa.Column("po_number", sa.String(100), nullable=True),
        sa.Column("pf_number", sa.String(100), nullable=True),
        sa.Column("remark", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_purchase_history_dedup", "purchase_history",
                    ["po_number", "product_code", "supplier_id"])
    op.create_index("idx_purchase_history_product", "purchase_history", ["product_id"])

    # ── Import Batches ──────────────────────────────────────
    op.create_table(
        "import_batches",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("layout", sa.String(50), nullable=False),
        sa.Column("supplier_id", sa.Integer,
                  sa.ForeignKey("suppliers.id"), nullable=True),
        sa.Column("item_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("counts", JSONB, nullable=False,
                  server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("import_batches")
    op.drop_table("purchase_history")
    op.drop_table("product_mapping")
    op.drop_table("product_groups")
    op.drop_table("price_history")
    op.drop_table("products")
    op.drop_table("suppliers")
