"""
Tests for supplier and product resolution.

Covers:
  - Supplier matching by code, then name (case-insensitive)
  - Auto-creation with generated unique codes, deduplicated within a call
  - Preview mode proposals (negative ids, nothing written)
  - Product matching by code, then trimmed case-insensitive name
  - Placeholder code upgrade
"""

import pytest
from sqlalchemy import func, select

from pricebook.errors import UnknownSupplierError
from pricebook.models.catalog import Supplier
from pricebook.services.entity_resolver import (
    ResolutionCache,
    generate_supplier_code,
    get_fixed_supplier,
    match_product,
    resolve_supplier,
    slugify_supplier_name,
    upgrade_placeholder_code,
)


async def _supplier_count(db_session) -> int:
    return (await db_session.execute(select(func.count(Supplier.id)))).scalar()


# ─── Code Generation ──────────────────────────────────────────


def test_slugify_supplier_name():
    assert slugify_supplier_name("Acme Trading Co., Ltd.") == "ACME-TRADING-CO-LTD"


def test_slugify_truncates():
    slug = slugify_supplier_name("International Industrial Chemical Supplies")
    assert len(slug) <= 20
    assert not slug.endswith("-")


def test_slugify_fallback():
    assert slugify_supplier_name("***") == "SUPPLIER"


def test_generate_supplier_code_unique(monkeypatch):
    monkeypatch.setattr("pricebook.services.entity_resolver._clock_ms", lambda: 1700000001234)
    taken = {"acme-co-1234"}
    assert generate_supplier_code("Acme Co", taken) == "ACME-CO-1234-2"
    assert generate_supplier_code("Acme Co", set()) == "ACME-CO-1234"


# ─── Suppliers ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_resolve_supplier_by_code(db_session, make_supplier):
    supplier = await make_supplier(code="SUP-1", name="Siam Chemicals")
    cache = await ResolutionCache.load(db_session, persist=False)

    ref, how = await resolve_supplier(db_session, cache, "sup-1", "Other Name")
    assert how == "code"
    assert ref.id == supplier.id


@pytest.mark.asyncio
async def test_resolve_supplier_by_name_case_insensitive(db_session, make_supplier):
    supplier = await make_supplier(code="SUP-1", name="Siam Chemicals")
    cache = await ResolutionCache.load(db_session, persist=False)

    ref, how = await resolve_supplier(db_session, cache, "", "  SIAM chemicals ")
    assert how == "name"
    assert ref.id == supplier.id


@pytest.mark.asyncio
async def test_resolve_supplier_none(db_session):
    cache = await ResolutionCache.load(db_session, persist=False)
    ref, how = await resolve_supplier(db_session, cache, "", "  ")
    assert ref is None
    assert how == "none"


@pytest.mark.asyncio
async def test_deleted_supplier_not_matched(db_session, make_supplier):
    await make_supplier(code="OLD", name="Old Supplier", status="deleted")
    cache = await ResolutionCache.load(db_session, persist=False)

    ref, how = await resolve_supplier(db_session, cache, "OLD", "Old Supplier")
    assert how == "created"
    # The deleted supplier still owns its code
    assert ref.code == "OLD-2"


@pytest.mark.asyncio
async def test_preview_proposes_supplier_once(db_session):
    """Three rows naming one unknown supplier share one proposal; nothing is written."""
    cache = await ResolutionCache.load(db_session, persist=False)

    refs = [
        (await resolve_supplier(db_session, cache, "", name))[0]
        for name in ("Acme Co", "acme co", " ACME CO ")
    ]

    assert refs[0].id < 0
    assert {r.id for r in refs} == {refs[0].id}
    assert refs[0].is_new
    assert cache.created_supplier_count == 1
    assert await _supplier_count(db_session) == 0


@pytest.mark.asyncio
async def test_confirm_creates_supplier_once(db_session):
    cache = await ResolutionCache.load(db_session, persist=True)

    first, how = await resolve_supplier(db_session, cache, "", "Acme Co")
    second, _ = await resolve_supplier(db_session, cache, "", "ACME CO")

    assert how == "created"
    assert first.id > 0
    assert second.id == first.id
    assert first.code.startswith("ACME-CO-")
    assert await _supplier_count(db_session) == 1


@pytest.mark.asyncio
async def test_confirm_creates_supplier_with_sheet_code(db_session):
    cache = await ResolutionCache.load(db_session, persist=True)
    ref, _ = await resolve_supplier(db_session, cache, "V-900", "")
    assert ref.code == "V-900"
    assert ref.name == "V-900"


@pytest.mark.asyncio
async def test_fixed_supplier_unknown(db_session):
    cache = await ResolutionCache.load(db_session, persist=False)
    with pytest.raises(UnknownSupplierError) as exc:
        get_fixed_supplier(cache, 999)
    assert exc.value.supplier_id == 999


# ─── Products ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_match_product_by_code(db_session, make_supplier, make_product):
    supplier = await make_supplier()
    product = await make_product(supplier, product_code="P-001", product_name="Citric Acid")
    cache = await ResolutionCache.load(db_session, persist=True)

    found, how = await match_product(db_session, cache, supplier.id, "P-001", "Something else")
    assert how == "code"
    assert found.id == product.id


@pytest.mark.asyncio
async def test_match_product_by_name_fallback(db_session, make_supplier, make_product):
    supplier = await make_supplier()
    product = await make_product(supplier, product_code="AUTO-1-1", product_name="Citric Acid")
    cache = await ResolutionCache.load(db_session, persist=True)

    found, how = await match_product(db_session, cache, supplier.id, "REAL-1", "  citric ACID ")
    assert how == "name"
    assert found.id == product.id


@pytest.mark.asyncio
async def test_match_product_scoped_to_supplier(db_session, make_supplier, make_product):
    first = await make_supplier(code="S1", name="First")
    second = await make_supplier(code="S2", name="Second")
    await make_product(first, product_code="P-001")
    cache = await ResolutionCache.load(db_session, persist=True)

    found, how = await match_product(db_session, cache, second.id, "P-001", "Citric Acid 25kg")
    assert found is None
    assert how == "none"


@pytest.mark.asyncio
async def test_preview_product_proposal_reused(db_session, make_supplier):
    supplier = await make_supplier()
    cache = await ResolutionCache.load(db_session, persist=False)

    proposed = cache.propose_product(supplier.id, "P-NEW", "New Thing")
    found, how = await match_product(db_session, cache, supplier.id, "", "new thing")

    assert proposed.id < 0
    assert found is proposed
    assert how == "name"


@pytest.mark.asyncio
async def test_upgrade_placeholder_code(db_session, make_supplier, make_product):
    supplier = await make_supplier()
    product = await make_product(supplier, product_code="AUTO-1700000000000-1")

    assert upgrade_placeholder_code(product, "REAL-1")
    assert product.product_code == "REAL-1"
    # A real code is never overwritten
    assert not upgrade_placeholder_code(product, "REAL-2")
    assert product.product_code == "REAL-1"
