"""
Entity resolution: map a row's supplier/product fields onto records.

Suppliers: code (case-insensitive) → name (case-insensitive) → create.
Products, scoped to the supplier: code → trimmed case-insensitive name →
create.

Resolution runs in one of two modes, fixed when the ResolutionCache is
built:
  - preview (persist=False): nothing is written. Entities that confirm
    would create are proposed in an in-memory overlay under negative
    placeholder identifiers, so repeated references within one sheet
    resolve to the same proposal.
  - confirm (persist=True): missing entities are inserted and flushed,
    so later rows in the same call find them.

A cache lives for exactly one preview or confirm call.
"""

import itertools
import re
import time
from dataclasses import dataclass

import structlog
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.errors import UnknownSupplierError
from pricebook.models.catalog import PLACEHOLDER_CODE_PREFIX, Product, Supplier
from pricebook.services.normalization import normalize_key

logger = structlog.get_logger(__name__)

SUPPLIER_CODE_MAX_SLUG = 20


@dataclass
class SupplierRef:
    """A resolved supplier: a stored row, or a proposal (negative id)."""
    id: int
    code: str
    name: str
    is_new: bool = False


@dataclass
class ProposedProduct:
    """A product that confirm would create. Preview only."""
    id: int
    supplier_id: int
    product_code: str
    product_name: str


# ─── Code Generation ──────────────────────────────────────────

def _clock_ms() -> int:
    return int(time.time() * 1000)


def slugify_supplier_name(name: str) -> str:
    """
    'Acme Trading Co., Ltd.' → 'ACME-TRADING-CO-LTD'
    Non-ASCII letters are kept; anything else becomes a dash.
    """
    slug = re.sub(r"[\W_]+", "-", name.strip()).strip("-").upper()
    return slug[:SUPPLIER_CODE_MAX_SLUG].rstrip("-") or "SUPPLIER"


def generate_supplier_code(name: str, taken: set[str]) -> str:
    """Slug of the name plus the last 4 digits of the clock, made unique against taken codes."""
    base = f"{slugify_supplier_name(name)}-{str(_clock_ms())[-4:]}"
    return _unique_code(base, taken)


def _unique_code(base: str, taken: set[str]) -> str:
    candidate = base
    n = 1
    while candidate.lower() in taken:
        n += 1
        candidate = f"{base}-{n}"
    return candidate


# ─── Cache ────────────────────────────────────────────────────

class ResolutionCache:
    """
    Request-scoped supplier lookups plus the overlay of proposed entities.

    Built at the start of a preview or confirm and passed through; never
    shared between requests.
    """

    def __init__(self, suppliers: list[Supplier], taken_codes: set[str], persist: bool):
        self.persist = persist
        self.by_id: dict[int, SupplierRef] = {}
        self.by_code: dict[str, SupplierRef] = {}
        self.by_name: dict[str, SupplierRef] = {}
        self.taken_codes = {normalize_key(c) for c in taken_codes}
        self.new_suppliers: list[SupplierRef] = []
        self._proposed_products: dict[tuple, ProposedProduct] = {}
        self._placeholder_ids = itertools.count(-1, -1)
        self._placeholder_seq = itertools.count(1)

        for s in suppliers:
            self.register(SupplierRef(id=s.id, code=s.code, name=s.name))

    @classmethod
    async def load(cls, db: AsyncSession, persist: bool) -> "ResolutionCache":
        """Snapshot the active suppliers (and every code in use, for uniqueness)."""
        active = (
            await db.execute(select(Supplier).where(Supplier.status == "active"))
        ).scalars().all()
        codes = (await db.execute(select(Supplier.code))).scalars().all()
        return cls(list(active), set(codes), persist)

    def register(self, ref: SupplierRef) -> None:
        self.by_id[ref.id] = ref
        if ref.code:
            self.by_code.setdefault(normalize_key(ref.code), ref)
            self.taken_codes.add(normalize_key(ref.code))
        if ref.name:
            self.by_name.setdefault(normalize_key(ref.name), ref)

    def next_placeholder_id(self) -> int:
        return next(self._placeholder_ids)

    def placeholder_code(self) -> str:
        """AUTO-<ms>-<n>: product code for rows that carry none."""
        return f"{PLACEHOLDER_CODE_PREFIX}{_clock_ms()}-{next(self._placeholder_seq)}"

    # Proposed products (preview overlay)

    def find_proposed_product(
        self, supplier_id: int, code: str, name: str
    ) -> tuple[ProposedProduct | None, str]:
        if code:
            hit = self._proposed_products.get((supplier_id, "code", code))
            if hit:
                return hit, "code"
        if name:
            hit = self._proposed_products.get((supplier_id, "name", normalize_key(name)))
            if hit:
                return hit, "name"
        return None, "none"

    def propose_product(self, supplier_id: int, code: str, name: str) -> ProposedProduct:
        proposed = ProposedProduct(
            id=self.next_placeholder_id(),
            supplier_id=supplier_id,
            product_code=code,
            product_name=name,
        )
        self._proposed_products[(supplier_id, "code", code)] = proposed
        if name:
            self._proposed_products.setdefault((supplier_id, "name", normalize_key(name)), proposed)
        return proposed

    @property
    def created_supplier_count(self) -> int:
        return len(self.new_suppliers)


# ─── Suppliers ────────────────────────────────────────────────

async def resolve_supplier(
    db: AsyncSession,
    cache: ResolutionCache,
    code: str,
    name: str,
) -> tuple[SupplierRef | None, str]:
    """
    Resolve a supplier by code, then name; create (or propose) if neither matches.

    Returns (supplier, how) where how is:
      - 'code': matched on supplier code
      - 'name': matched on supplier name
      - 'created': new supplier (proposal in preview mode)
      - 'none': row carries no supplier code or name
    """
    code = (code or "").strip()
    name = (name or "").strip()

    if code:
        ref = cache.by_code.get(normalize_key(code))
        if ref:
            return ref, "code"
    if name:
        ref = cache.by_name.get(normalize_key(name))
        if ref:
            return ref, "name"
    if not code and not name:
        return None, "none"

    new_code = _unique_code(code, cache.taken_codes) if code else generate_supplier_code(name, cache.taken_codes)
    new_name = name or code

    if cache.persist:
        supplier = Supplier(code=new_code, name=new_name, status="active")
        db.add(supplier)
        await db.flush()
        ref = SupplierRef(id=supplier.id, code=new_code, name=new_name, is_new=True)
        logger.info("supplier_auto_created", supplier_id=supplier.id, code=new_code, name=new_name)
    else:
        ref = SupplierRef(id=cache.next_placeholder_id(), code=new_code, name=new_name, is_new=True)

    cache.register(ref)
    cache.new_suppliers.append(ref)
    return ref, "created"


def get_fixed_supplier(cache: ResolutionCache, supplier_id: int) -> SupplierRef:
    """The supplier a self-service import is pinned to. Must exist and be active."""
    ref = cache.by_id.get(supplier_id)
    if ref is None or ref.id < 0:
        raise UnknownSupplierError(supplier_id)
    return ref


# ─── Products ─────────────────────────────────────────────────

async def find_product_by_code(
    db: AsyncSession, supplier_id: int, code: str
) -> Product | None:
    result = await db.execute(
        select(Product).where(
            and_(
                Product.supplier_id == supplier_id,
                Product.product_code == code,
                Product.status == "active",
            )
        )
    )
    return result.scalar_one_or_none()


async def find_product_by_name(
    db: AsyncSession, supplier_id: int, name: str
) -> Product | None:
    """Trimmed, case-insensitive name match. The oldest product wins on ties."""
    result = await db.execute(
        select(Product)
        .where(
            and_(
                Product.supplier_id == supplier_id,
                func.lower(func.trim(Product.product_name)) == normalize_key(name),
                Product.status == "active",
            )
        )
        .order_by(Product.id)
        .limit(1)
    )
    return result.scalars().first()


async def match_product(
    db: AsyncSession,
    cache: ResolutionCache,
    supplier_id: int,
    code: str,
    name: str,
) -> tuple[Product | ProposedProduct | None, str]:
    """
    Match a product within one supplier.

    Returns (product, how) where how is 'code', 'name' or 'none'. A
    proposed supplier has no stored products, so only the overlay is
    consulted for it.
    """
    code = (code or "").strip()
    name = (name or "").strip()

    if supplier_id > 0:
        if code:
            product = await find_product_by_code(db, supplier_id, code)
            if product:
                return product, "code"
        if name:
            product = await find_product_by_name(db, supplier_id, name)
            if product:
                return product, "name"

    if not cache.persist:
        return cache.find_proposed_product(supplier_id, code, name)
    return None, "none"


def upgrade_placeholder_code(product: Product, code: str) -> bool:
    """
    Replace an AUTO- placeholder with the real code from a sheet.

    Returns True if the code changed.
    """
    code = (code or "").strip()
    if not code or code.startswith(PLACEHOLDER_CODE_PREFIX):
        return False
    if not product.has_placeholder_code:
        return False
    logger.info(
        "product_code_upgraded",
        product_id=product.id,
        old_code=product.product_code,
        new_code=code,
    )
    product.product_code = code
    return True
