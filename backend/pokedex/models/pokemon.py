"""
Pokedex Backend — Pokemon SQLAlchemy Model
===========================================

What:  ORM model representing the `pokemons` table.
Why:   Maps Python objects to rows for type-safe store operations.
Who:   Used only by PokemonStore; everything above the store works with
       PokemonRecord documents (see schemas/pokemon.py).

Table Design Rationale:
    - id: Integer primary key assigned by the application (max + 1), never
      autoincremented by the database. The primary key is what turns a
      concurrent duplicate allocation into an IntegrityError.
    - name_*: One column per locale so exact-match lookup on english/french
      is a plain indexed equality. Comparison is case-sensitive on both
      PostgreSQL and SQLite with default collation.
    - type: JSON list; always replaced wholesale, never queried inside.
    - six stat columns: NOT NULL, the create path always fills defaults.
"""

from typing import List, Optional

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pokedex.database import Base

# Record field name -> column attribute, in document order
NAME_COLUMNS = {
    "english": "name_english",
    "japanese": "name_japanese",
    "chinese": "name_chinese",
    "french": "name_french",
}

STAT_COLUMNS = {
    "HP": "hp",
    "Attack": "attack",
    "Defense": "defense",
    "SpecialAttack": "special_attack",
    "SpecialDefense": "special_defense",
    "Speed": "speed",
}

# Column bounds; Integer is 32-bit on PostgreSQL, the narrowest supported store
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1
NAME_MAX_LENGTH = 255
IMAGE_MAX_LENGTH = 1024


class Pokemon(Base):
    """
    One stored creature.

    Lifecycle:
        1. Inserted by create with defaults filled and a deterministic image URI
        2. Mutated only by update (field-level merge computed by the service)
        3. Hard-deleted by delete; its id is not reclaimed
    """

    __tablename__ = "pokemons"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        comment="Application-assigned id: max(id) + 1 at creation",
    )

    # ── Name (one column per locale) ──────────────────────────────────────
    name_english: Mapped[Optional[str]] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    name_japanese: Mapped[Optional[str]] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    name_chinese: Mapped[Optional[str]] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    name_french: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    type: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # ── Base stats ────────────────────────────────────────────────────────
    hp: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    attack: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    defense: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    special_attack: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    special_defense: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    speed: Mapped[int] = mapped_column(Integer, nullable=False, default=50)

    image: Mapped[str] = mapped_column(String(IMAGE_MAX_LENGTH), nullable=False)

    __table_args__ = (
        Index("idx_pokemons_name_english", "name_english"),
        Index("idx_pokemons_name_french", "name_french"),
    )

    def __repr__(self) -> str:
        return f"<Pokemon(id={self.id}, french='{self.name_french}')>"
