"""Tests for name similarity and mapping suggestions."""

import pytest

from pricebook.services.similarity import similarity, suggest_mappings


class TestSimilarity:
    def test_identical(self):
        assert similarity("acid", "acid") == 1.0

    def test_empty(self):
        assert similarity("", "acid") == 0.0
        assert similarity("", "") == 0.0

    def test_symmetric(self):
        assert similarity("citric acid", "citric acids") == similarity("citric acids", "citric acid")

    def test_one_edit(self):
        # kitten → sitten: one substitution over six characters
        assert similarity("kitten", "sitten") == pytest.approx(5 / 6)

    def test_bounds(self):
        score = similarity("abc", "xyz")
        assert 0.0 <= score <= 1.0
        assert score == 0.0


@pytest.mark.asyncio
class TestSuggestMappings:
    async def test_suggests_above_threshold(
        self, db_session, make_supplier, make_product, make_group
    ):
        supplier = await make_supplier()
        product = await make_product(supplier, product_name="Citric Acid")
        group = await make_group(master_name="citric acid")
        await make_group(master_code="G-002", master_name="sodium hydroxide")

        suggestions = await suggest_mappings(db_session)

        assert len(suggestions) == 1
        assert suggestions[0].product_id == product.id
        assert suggestions[0].group_id == group.id
        assert suggestions[0].score == 1.0
        assert suggestions[0].supplier_name == "Siam Chemicals"

    async def test_sorted_descending(
        self, db_session, make_supplier, make_product, make_group
    ):
        supplier = await make_supplier()
        await make_product(supplier, product_code="P-1", product_name="citric acid")
        await make_product(supplier, product_code="P-2", product_name="citric acid 99")
        await make_group(master_name="citric acid")

        suggestions = await suggest_mappings(db_session)

        scores = [s.score for s in suggestions]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] == 1.0

    async def test_mapped_products_excluded(
        self, db_session, make_supplier, make_product, make_group, make_mapping
    ):
        supplier = await make_supplier()
        product = await make_product(supplier, product_name="citric acid")
        group = await make_group(master_name="citric acid")
        await make_mapping(product, group)

        assert await suggest_mappings(db_session) == []

    async def test_inactive_products_excluded(
        self, db_session, make_supplier, make_product, make_group
    ):
        supplier = await make_supplier()
        await make_product(supplier, product_name="citric acid", status="deleted")
        await make_group(master_name="citric acid")

        assert await suggest_mappings(db_session) == []

    async def test_limit(self, db_session, make_supplier, make_product, make_group):
        supplier = await make_supplier()
        for i in range(5):
            await make_product(supplier, product_code=f"P-{i}", product_name="citric acid")
        await make_group(master_name="citric acid")

        assert len(await suggest_mappings(db_session, limit=3)) == 3

    async def test_threshold(self, db_session, make_supplier, make_product, make_group):
        supplier = await make_supplier()
        await make_product(supplier, product_name="citric acid")
        await make_group(master_name="citric")

        # 6 of 11 characters survive
        assert await suggest_mappings(db_session, threshold=0.6) == []
        assert len(await suggest_mappings(db_session, threshold=0.5)) == 1
