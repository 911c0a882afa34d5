"""
Tests for PokemonStore against a temporary SQLite database.
"""

import pytest

from pokedex.exceptions import IdConflictError


class TestLookups:

    @pytest.mark.asyncio
    async def test_find_by_id_round_trips_nested_document(self, store, make_record):
        await store.insert(make_record(1, HP=45, SpecialAttack=65))

        record = await store.find_by_id(1)

        assert record.name.french == "Bulbizarre"
        assert record.type == ["Grass", "Poison"]
        assert record.base.hp == 45
        assert record.base.special_attack == 65

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, store):
        assert await store.find_by_id(99) is None

    @pytest.mark.asyncio
    async def test_find_by_name_matches_english_or_french(self, store, make_record):
        await store.insert(make_record(1, french="Bulbizarre", english="Bulbasaur"))

        assert (await store.find_by_name("Bulbizarre")).id == 1
        assert (await store.find_by_name("Bulbasaur")).id == 1

    @pytest.mark.asyncio
    async def test_find_by_name_is_case_sensitive(self, store, make_record):
        await store.insert(make_record(1, french="Bulbizarre"))

        assert await store.find_by_name("bulbizarre") is None

    @pytest.mark.asyncio
    async def test_duplicate_names_return_lowest_id(self, store, make_record):
        await store.insert(make_record(3, french="Pikachu", english=None))
        await store.insert(make_record(2, french="Pikachu", english=None))

        assert (await store.find_by_name("Pikachu")).id == 2


class TestPagingQueries:

    @pytest.mark.asyncio
    async def test_page_is_sorted_by_id(self, store, make_record):
        for record_id in (5, 1, 3, 2, 4):
            await store.insert(make_record(record_id, french=f"P{record_id}"))

        page = await store.find_page(skip=1, limit=3)

        assert [record.id for record in page] == [2, 3, 4]
        assert await store.count() == 5
        assert await store.find_max_id() == 5

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        assert await store.count() == 0
        assert await store.find_max_id() is None
        assert await store.find_page(skip=0, limit=20) == []


class TestWrites:

    @pytest.mark.asyncio
    async def test_insert_conflict_raises(self, store, db_session, make_record):
        await store.insert(make_record(1))
        await db_session.commit()

        with pytest.raises(IdConflictError) as exc_info:
            await store.insert(make_record(1, french="Autre"))

        assert exc_info.value.context["record_id"] == 1
        assert (await store.find_by_id(1)).name.french == "Bulbizarre"

    @pytest.mark.asyncio
    async def test_update_touches_only_given_fields(self, store, make_record):
        await store.insert(make_record(1, Attack=49))

        updated = await store.find_one_and_update(1, {"type": ["Fire"]})

        assert updated.type == ["Fire"]
        assert updated.base.attack == 49
        assert updated.name.french == "Bulbizarre"

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, store):
        assert await store.find_one_and_update(9, {"type": ["Fire"]}) is None

    @pytest.mark.asyncio
    async def test_delete_returns_deleted_record(self, store, make_record):
        await store.insert(make_record(1))

        deleted = await store.find_one_and_delete(1)

        assert deleted.id == 1
        assert await store.find_by_id(1) is None
        assert await store.find_one_and_delete(1) is None
