"""All models must be imported here so SQLAlchemy registers them."""

from pricebook.models.catalog import (  # noqa: F401
    PriceHistory,
    Product,
    ProductGroup,
    ProductMapping,
    Supplier,
)
from pricebook.models.purchasing import ImportBatch, PurchaseHistory  # noqa: F401
