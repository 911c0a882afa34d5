"""
Pokedex Backend — Partial Update Merge
=======================================

What:  Computes the update set for PUT /pokemons/{id}.
How:   Field by field, a truthy patch value wins over the stored one.

Rules:
    name   present → all four locales emitted, each patch-or-existing
    type   non-empty → replaces the stored list wholesale
    base   present → all six stats emitted, each patch-or-existing
    image  truthy → replaced verbatim

Top-level fields the patch does not carry are left out of the update set,
so the store leaves them untouched. A stat of 0 is falsy and therefore
ignored: callers cannot set a stat to 0 through an update.
"""

from typing import Any, Dict

from pokedex.schemas.pokemon import BaseStats, PokemonName, PokemonPatch, PokemonRecord

NAME_LOCALES = tuple(PokemonName.model_fields)
STAT_FIELDS = tuple(BaseStats.model_fields)


def merge_patch(existing: PokemonRecord, patch: PokemonPatch) -> Dict[str, Any]:
    """Return the record-shaped update set (wire names for stats)."""
    update: Dict[str, Any] = {}

    if patch.name is not None:
        update["name"] = {
            locale: getattr(patch.name, locale) or getattr(existing.name, locale)
            for locale in NAME_LOCALES
        }

    if patch.type:
        update["type"] = list(patch.type)

    if patch.base is not None:
        update["base"] = {
            BaseStats.model_fields[field].alias: (
                getattr(patch.base, field) or getattr(existing.base, field)
            )
            for field in STAT_FIELDS
        }

    if patch.image:
        update["image"] = patch.image

    return update
