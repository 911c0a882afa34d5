"""
Pokedex Backend — Record Store Adapter
=======================================

What:  Thin document-style interface over the `pokemons` table.
Why:   Services reason about whole records (nested name/base documents);
       only this module knows that locales and stats are flattened columns.
How:   Wraps one AsyncSession. Every method is a single query plus a flush;
       transaction boundaries belong to get_db_session.
Who:   Created per request by PokemonService.

Operations:
    find_by_id / find_by_name  → single record or None
    find_max_id                → highest id or None (ORDER BY id DESC LIMIT 1)
    find_page / count          → sorted slice and total for pagination
    insert                     → IdConflictError on primary-key collision
    find_one_and_update        → updated record or None
    find_one_and_delete        → deleted record or None
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import FlushError

from pokedex.exceptions import IdConflictError
from pokedex.models.pokemon import NAME_COLUMNS, STAT_COLUMNS, Pokemon
from pokedex.schemas.pokemon import BaseStats, PokemonName, PokemonRecord

logger = logging.getLogger(__name__)


def to_record(row: Pokemon) -> PokemonRecord:
    """Rebuild the nested document from a flattened row."""
    return PokemonRecord(
        id=row.id,
        name=PokemonName(
            **{locale: getattr(row, column) for locale, column in NAME_COLUMNS.items()}
        ),
        type=list(row.type or []),
        base=BaseStats(
            **{wire: getattr(row, column) for wire, column in STAT_COLUMNS.items()}
        ),
        image=row.image,
    )


def to_column_values(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a record-shaped dict into column values.

    Only keys present in `document` are emitted, so a partial update set
    (e.g. just {"type": [...]}) touches just those columns.
    """
    values: Dict[str, Any] = {}
    if "id" in document:
        values["id"] = document["id"]
    if "name" in document:
        for locale, column in NAME_COLUMNS.items():
            values[column] = document["name"].get(locale)
    if "type" in document:
        values["type"] = list(document["type"])
    if "base" in document:
        for wire, column in STAT_COLUMNS.items():
            if wire in document["base"]:
                values[column] = document["base"][wire]
    if "image" in document:
        values["image"] = document["image"]
    return values


class PokemonStore:
    """Record store bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_row(self, record_id: int) -> Optional[Pokemon]:
        result = await self.session.execute(
            select(Pokemon).where(Pokemon.id == record_id)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, record_id: int) -> Optional[PokemonRecord]:
        row = await self._get_row(record_id)
        return to_record(row) if row is not None else None

    async def find_by_name(self, name: str) -> Optional[PokemonRecord]:
        """
        Exact match on the english OR french name.

        Case-sensitive; no trimming, no diacritic folding. If several
        records share the name, the lowest id wins.
        """
        result = await self.session.execute(
            select(Pokemon)
            .where(or_(Pokemon.name_english == name, Pokemon.name_french == name))
            .order_by(Pokemon.id.asc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return to_record(row) if row is not None else None

    async def find_max_id(self) -> Optional[int]:
        result = await self.session.execute(
            select(Pokemon.id).order_by(Pokemon.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_page(self, skip: int, limit: int) -> List[PokemonRecord]:
        result = await self.session.execute(
            select(Pokemon).order_by(Pokemon.id.asc()).offset(skip).limit(limit)
        )
        return [to_record(row) for row in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Pokemon.id)))
        return result.scalar() or 0

    async def insert(self, record: PokemonRecord) -> PokemonRecord:
        """
        Insert a new record.

        Raises:
            IdConflictError: another record already holds `record.id`. The
                session is rolled back so the caller can retry on it.
        """
        document = record.model_dump(by_alias=True)
        row = Pokemon(**to_column_values(document))
        self.session.add(row)
        try:
            await self.session.flush()
        except (IntegrityError, FlushError) as e:
            # FlushError: the colliding row is already in this session's identity map
            await self.session.rollback()
            logger.warning("Insert collided on id %d: %s", record.id, str(e))
            raise IdConflictError(record.id)
        return to_record(row)

    async def find_one_and_update(
        self, record_id: int, update_set: Dict[str, Any]
    ) -> Optional[PokemonRecord]:
        """Apply a record-shaped update set; fields not in it are unchanged."""
        row = await self._get_row(record_id)
        if row is None:
            return None
        for column, value in to_column_values(update_set).items():
            setattr(row, column, value)
        await self.session.flush()
        return to_record(row)

    async def find_one_and_delete(self, record_id: int) -> Optional[PokemonRecord]:
        row = await self._get_row(record_id)
        if row is None:
            return None
        record = to_record(row)
        await self.session.delete(row)
        await self.session.flush()
        return record
