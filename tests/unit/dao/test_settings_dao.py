"""
Tests for the pricing settings and PABX DAOs.

WHY: Both stores are written with upsert semantics; a second save must
update the existing row, never add another.
"""

from pricing_api.dao.pabx import PabxPriceDAO, PabxSettingsDAO
from pricing_api.dao.pricing_setting import PricingSettingDAO


class TestPricingSettingDAO:
    async def test_missing_key(self, db_session):
        assert await PricingSettingDAO(db_session).get_value("vmPricingConfig") is None

    async def test_upsert_replaces_value(self, db_session, test_admin):
        dao = PricingSettingDAO(db_session)
        await dao.upsert("commissionTables", {"seller": {"months_12": 1}}, updated_by=test_admin.id)
        setting = await dao.upsert("commissionTables", {"seller": {"months_12": 2}})

        assert setting.value == {"seller": {"months_12": 2}}
        assert setting.updated_by is None
        assert await dao.count(key="commissionTables") == 1


class TestPabxSettingsDAO:
    async def test_one_row_per_user(self, db_session, test_user):
        dao = PabxSettingsDAO(db_session)
        await dao.upsert_for_user(test_user.id, test_user.name, {"pabx_extensions": 10})
        settings = await dao.upsert_for_user(test_user.id, "Nome Novo", {"pabx_extensions": 25})

        assert settings.pabx_extensions == 25
        assert settings.user_name == "Nome Novo"
        assert await dao.count(user_id=test_user.id) == 1

    async def test_unknown_user(self, db_session):
        assert await PabxSettingsDAO(db_session).get_by_user(999) is None


class TestPabxPriceDAO:
    async def test_upsert_table(self, db_session):
        dao = PabxPriceDAO(db_session)
        written = await dao.upsert_table({"setup": {"10": 1300, "20": 2100}, "monthly": {"10": 31}})

        assert written == 3
        rows = await dao.get_prices()
        assert [(row.category, row.range_key) for row in rows] == [
            ("monthly", "10"),
            ("setup", "10"),
            ("setup", "20"),
        ]

    async def test_upsert_price_updates_cell(self, db_session):
        dao = PabxPriceDAO(db_session)
        await dao.upsert_price("device", "50", 32.5)
        row = await dao.upsert_price("device", "50", 33)

        assert float(row.price) == 33
        assert len(await dao.get_prices()) == 1

    async def test_price_types_are_separate(self, db_session):
        dao = PabxPriceDAO(db_session)
        await dao.upsert_price("setup", "10", 1, price_type="promo")

        assert await dao.get_prices() == []
        assert len(await dao.get_prices("promo")) == 1
