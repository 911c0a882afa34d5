"""
Pokedex Backend — Pokemon Service (Business Logic Orchestrator)
================================================================

What:  Implements every /pokemons operation on top of the store.
Why:   Keeps validation, id allocation, merging and paging out of the routes.
How:   Each call receives the request's AsyncSession, wraps it in a
       PokemonStore and composes IdentityAllocator, merge_patch, paginate and
       ImageResolver.
Who:   Called by routes/pokemons.py through the get_pokemon_service dependency.

Orchestration Flow (POST /pokemons):
    ┌──────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────────┐
    │ Validate │───▶│ Allocate id  │───▶│ Insert record │───▶│ Resolve image│
    │ (schema) │    │ (max + 1)    │    │ (retry on     │    │ (best-effort)│
    └──────────┘    └──────────────┘    │  id conflict) │    └──────────────┘
                                        └───────────────┘
    The image is resolved after the insert has claimed the id, so a retried
    allocation never writes a file under an id that belongs to someone else.

Error Handling Strategy:
    ValidationError and NotFoundError propagate as-is. Any other exception
    from the store is logged and wrapped in DatabaseError (generic 500).
    Image problems never reach this layer as exceptions.
"""

import logging
from typing import Any, Optional, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.exceptions import DatabaseError, NotFoundError, PokedexError, ValidationError
from pokedex.models.pokemon import INTEGER_MAX
from pokedex.schemas.pokemon import (
    PokemonCreate,
    PokemonListResponse,
    PokemonMutationResponse,
    PokemonName,
    PokemonPatch,
    PokemonRecord,
)
from pokedex.services.identity import IdentityAllocator
from pokedex.services.image_resolver import ImageOutcome, ImageResolver, ImageSource
from pokedex.services.merge import merge_patch
from pokedex.services.pagination import paginate
from pokedex.store import PokemonStore

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_record_id(raw: Any) -> Optional[int]:
    """
    Path id as an integer, or None when it cannot match a record.

    Non-numeric values and values outside the id column's range both
    match nothing; they never reach the store.
    """
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    if not 1 <= value <= INTEGER_MAX:
        return None
    return value


def validate_body(schema: Type[SchemaT], payload: Any, message: str) -> SchemaT:
    """Validate a decoded body against `schema`, raising our ValidationError (400)."""
    if not isinstance(payload, dict):
        raise ValidationError(message=message, context={"errors": ["body must be a JSON object"]})
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(message=message, context={"errors": errors})


class PokemonService:
    """
    Business logic layer for pokemon records.

    Stateless apart from its collaborators; one instance serves every request.
    """

    def __init__(
        self,
        image_resolver: Optional[ImageResolver] = None,
        allocator: Optional[IdentityAllocator] = None,
    ):
        self.image_resolver = image_resolver or ImageResolver()
        self.allocator = allocator or IdentityAllocator()

    async def list_pokemons(
        self, db: AsyncSession, page: Any = None, limit: Any = None
    ) -> PokemonListResponse:
        """
        One page of records sorted by ascending id.

        Invalid page/limit values fall back to 1 and the default page size.
        """
        store = PokemonStore(db)
        try:
            total = await store.count()
            window = paginate(page, limit, total)
            records = [] if window.is_past_end else await store.find_page(window.skip, window.limit)
        except Exception as e:
            logger.error("Database error listing pokemons: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve pokemons. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return PokemonListResponse(data=records, pagination=window.to_info())

    async def get_pokemon(self, db: AsyncSession, raw_id: Any) -> PokemonRecord:
        """Exact lookup by numeric id. A non-numeric id is a 404, not an error."""
        record_id = parse_record_id(raw_id)
        if record_id is None:
            raise NotFoundError(resource_id=str(raw_id))
        try:
            record = await PokemonStore(db).find_by_id(record_id)
        except Exception as e:
            logger.error("Database error fetching pokemon %s: %s", raw_id, str(e))
            raise DatabaseError(context={"pokemon_id": record_id})
        if record is None:
            raise NotFoundError(resource_id=str(record_id))
        return record

    async def get_pokemon_by_name(self, db: AsyncSession, name: str) -> PokemonRecord:
        """Exact, case-sensitive lookup on the english or french name."""
        try:
            record = await PokemonStore(db).find_by_name(name)
        except Exception as e:
            logger.error("Database error fetching pokemon named %r: %s", name, str(e))
            raise DatabaseError(context={"name": name})
        if record is None:
            raise NotFoundError(resource_id=name)
        return record

    async def create_pokemon(
        self,
        db: AsyncSession,
        payload: Any,
        upload: Optional[bytes] = None,
    ) -> PokemonMutationResponse:
        """
        Create a record: validate → allocate id → insert → resolve image.

        Args:
            db: Async database session
            payload: Decoded body ({name, type, base, image?})
            upload: Bytes of the multipart `imageFile` field, if any

        Raises:
            ValidationError: name.french, type or base missing/invalid
            DatabaseError: store failure or id allocation exhausted
        """
        data = validate_body(
            PokemonCreate, payload, "Missing required fields (name.french, type, base)"
        )
        store = PokemonStore(db)

        def build(new_id: int) -> PokemonRecord:
            return PokemonRecord(
                id=new_id,
                name=PokemonName(**data.name.model_dump()),
                type=data.type,
                base=data.base.with_defaults(),
                image=self.image_resolver.public_url(new_id),
            )

        try:
            record = await self.allocator.allocate_and_insert(store, build)
        except PokedexError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating pokemon: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="An error occurred while creating the pokemon. Please try again.",
                context={"original_error": type(e).__name__},
            )

        source = ImageSource.from_request(data.image, upload)
        result = await self.image_resolver.resolve(record.id, source)
        if result.outcome is not ImageOutcome.SKIPPED:
            logger.info("Pokemon %d image: %s (%s)", record.id, result.outcome.value, result.source)

        logger.info("Pokemon %d created (%s)", record.id, record.name.french)
        return PokemonMutationResponse(message="Pokemon created successfully", pokemon=record)

    async def update_pokemon(
        self, db: AsyncSession, raw_id: Any, payload: Any
    ) -> PokemonMutationResponse:
        """
        Partial update with field-level merge (see services/merge.py).

        Raises:
            ValidationError: body empty, not an object, or malformed
            NotFoundError: no record with this id
        """
        if not payload:
            raise ValidationError(message="Request body is empty or missing")
        patch = validate_body(PokemonPatch, payload, "Invalid update body")

        record_id = parse_record_id(raw_id)
        if record_id is None:
            raise NotFoundError(resource_id=str(raw_id))

        store = PokemonStore(db)
        try:
            existing = await store.find_by_id(record_id)
            if existing is None:
                raise NotFoundError(resource_id=str(record_id))

            update_set = merge_patch(existing, patch)
            if not update_set:
                updated: Optional[PokemonRecord] = existing
            else:
                updated = await store.find_one_and_update(record_id, update_set)
        except PokedexError:
            raise
        except Exception as e:
            logger.error("Database error updating pokemon %s: %s", record_id, str(e), exc_info=True)
            raise DatabaseError(context={"pokemon_id": record_id})

        if updated is None:
            # Deleted between the read and the write
            raise NotFoundError(resource_id=str(record_id))

        logger.info("Pokemon %d updated (fields: %s)", record_id, ", ".join(sorted(update_set)) or "none")
        return PokemonMutationResponse(message="Pokemon updated successfully", pokemon=updated)

    async def delete_pokemon(self, db: AsyncSession, raw_id: Any) -> PokemonMutationResponse:
        """Hard delete. The id is not reclaimed; the image file is left in place."""
        record_id = parse_record_id(raw_id)
        if record_id is None:
            raise NotFoundError(resource_id=str(raw_id))
        try:
            deleted = await PokemonStore(db).find_one_and_delete(record_id)
        except Exception as e:
            logger.error("Database error deleting pokemon %s: %s", record_id, str(e), exc_info=True)
            raise DatabaseError(context={"pokemon_id": record_id})
        if deleted is None:
            raise NotFoundError(resource_id=str(record_id))

        logger.info("Pokemon %d deleted", record_id)
        return PokemonMutationResponse(message="Pokemon deleted successfully", pokemon=deleted)


# ── Dependency ────────────────────────────────────────────────────────────
def get_pokemon_service(request: Request) -> PokemonService:
    """FastAPI dependency: the service instance built by create_app()."""
    return request.app.state.pokemon_service
