"""
Pokedex Backend — Pokemon Route Handlers
=========================================

What:  CRUD endpoints for /pokemons.
How:   Each handler reads path/query/body, delegates to PokemonService and
       returns the service result. Errors are raised as exceptions and
       formatted by the global handlers in main.py.

Route Inventory:
    GET    /pokemons?page&limit     paginated list
    GET    /pokemons/name/{name}    lookup by english or french name
    GET    /pokemons/{id}           lookup by id
    POST   /pokemons                create (JSON or multipart)
    PUT    /pokemons/{id}           partial update
    DELETE /pokemons/{id}           delete

Bodies are read from the raw request instead of a typed parameter so that
shape problems come back as our 400 ValidationError rather than FastAPI's
automatic 422.
"""

import json
import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from pokedex.database import get_db_session
from pokedex.exceptions import ValidationError
from pokedex.schemas.pokemon import (
    ErrorResponse,
    PokemonListResponse,
    PokemonMutationResponse,
    PokemonRecord,
)
from pokedex.services.pokemon_service import PokemonService, get_pokemon_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pokemons", tags=["Pokemons"])

# Multipart fields carrying JSON text
JSON_FORM_FIELDS = ("name", "type", "base")
UPLOAD_FIELD = "imageFile"


async def read_json_body(request: Request) -> Any:
    """Decode a JSON body; an absent body decodes to None."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError(message="Request body is not valid JSON", field="body")


async def read_create_body(request: Request) -> Tuple[Any, Optional[bytes]]:
    """
    Decode a create request into (payload, upload bytes).

    JSON:       the body as-is, no upload.
    Multipart:  name/type/base parsed from JSON strings, image kept as text,
                imageFile read into memory.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return await read_json_body(request), None

    form = await request.form()
    payload = {}
    for field in JSON_FORM_FIELDS:
        value = form.get(field)
        if isinstance(value, str) and value.strip():
            try:
                payload[field] = json.loads(value)
            except ValueError:
                raise ValidationError(
                    message=f"Form field '{field}' must contain valid JSON", field=field
                )

    image = form.get("image")
    if isinstance(image, str):
        payload["image"] = image

    upload: Optional[bytes] = None
    image_file = form.get(UPLOAD_FIELD)
    if isinstance(image_file, UploadFile):
        try:
            upload = await image_file.read() or None
        finally:
            await image_file.close()
        logger.info(
            "Received image upload: filename=%s, size=%d bytes",
            image_file.filename or "unknown",
            len(upload or b""),
        )
    return payload, upload


@router.get(
    "",
    response_model=PokemonListResponse,
    response_model_exclude_none=True,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List pokemons with pagination",
)
async def list_pokemons(
    page: Optional[str] = Query(default=None, description="Page number, 1-based (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 20)"),
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonListResponse:
    """
    Records sorted by ascending id. Non-numeric or non-positive page/limit
    values fall back to the defaults; a page past the end returns no data.
    """
    return await service.list_pokemons(db, page=page, limit=limit)


@router.get(
    "/name/{name}",
    response_model=PokemonRecord,
    response_model_exclude_none=True,
    responses={
        404: {"description": "Pokemon not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a pokemon by its english or french name",
)
async def get_pokemon_by_name(
    name: str,
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonRecord:
    return await service.get_pokemon_by_name(db, name)


@router.get(
    "/{pokemon_id}",
    response_model=PokemonRecord,
    response_model_exclude_none=True,
    responses={
        404: {"description": "Pokemon not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a pokemon by id",
)
async def get_pokemon(
    pokemon_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonRecord:
    # pokemon_id stays a string: a non-numeric id is a 404, not a 422
    return await service.get_pokemon(db, pokemon_id)


@router.post(
    "",
    status_code=201,
    response_model=PokemonMutationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing required fields", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a pokemon",
    description=(
        "JSON body {name: {french, ...}, type: [...], base: {...}, image?} or "
        "multipart form with JSON-encoded name/type/base and an optional "
        "'imageFile' upload. The id is max(id) + 1."
    ),
)
async def create_pokemon(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonMutationResponse:
    payload, upload = await read_create_body(request)
    return await service.create_pokemon(db, payload, upload=upload)


@router.put(
    "/{pokemon_id}",
    response_model=PokemonMutationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Empty or invalid body", "model": ErrorResponse},
        404: {"description": "Pokemon not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Partially update a pokemon",
)
async def update_pokemon(
    pokemon_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonMutationResponse:
    payload = await read_json_body(request)
    return await service.update_pokemon(db, pokemon_id, payload)


@router.delete(
    "/{pokemon_id}",
    response_model=PokemonMutationResponse,
    response_model_exclude_none=True,
    responses={
        404: {"description": "Pokemon not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a pokemon",
)
async def delete_pokemon(
    pokemon_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PokemonService = Depends(get_pokemon_service),
) -> PokemonMutationResponse:
    return await service.delete_pokemon(db, pokemon_id)
