"""
Pokedex Backend — Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the API contract for pokemon records.
Why:   Request bodies arrive loosely typed (JSON or multipart strings). They
       are validated once, at the service boundary, into explicit create and
       patch structures with named defaults.
How:   Input models coerce falsy values (None, 0, "", false) to "absent" before
       validation, which is the rule both create defaults and update merges
       rely on. Output models serialize with the wire names clients expect
       (`HP`, `SpecialAttack`, `currentPage`, ...).

Schema Families:
    Input:   PokemonCreate, PokemonPatch (+ PokemonNameInput, BaseStatsInput)
    Record:  PokemonRecord (+ PokemonName, BaseStats)
    Output:  PokemonListResponse, PokemonMutationResponse, PaginationInfo
    Misc:    ErrorResponse, HealthResponse
"""

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pokedex.models.pokemon import IMAGE_MAX_LENGTH, INTEGER_MAX, INTEGER_MIN, NAME_MAX_LENGTH

# Default for every base stat that is absent or falsy at creation
DEFAULT_STAT_VALUE = 50


def _falsy_to_none(value: Any) -> Any:
    """0, "", False, None and empty containers all mean "not provided"."""
    return value if value else None


FalsyAsNone = BeforeValidator(_falsy_to_none)

# Bounded by the column types, so oversized input is a 400 rather than a failed write
StatValue = Annotated[int, Field(ge=INTEGER_MIN, le=INTEGER_MAX)]
NameText = Annotated[str, Field(max_length=NAME_MAX_LENGTH)]
ImageText = Annotated[str, Field(max_length=IMAGE_MAX_LENGTH)]

OptionalStat = Annotated[Optional[StatValue], FalsyAsNone]
OptionalText = Annotated[Optional[NameText], FalsyAsNone]
RequiredText = Annotated[NameText, FalsyAsNone]
OptionalImage = Annotated[Optional[ImageText], FalsyAsNone]


# ══════════════════════════════════════════════════════════════════════════
# Record Models — the stored document shape
# ══════════════════════════════════════════════════════════════════════════


class PokemonName(BaseModel):
    """Multi-locale name. Only `french` is guaranteed on stored records."""
    english: Optional[str] = None
    japanese: Optional[str] = None
    chinese: Optional[str] = None
    french: Optional[str] = None


class BaseStats(BaseModel):
    """The six base stats as stored. Wire names are PascalCase."""
    hp: int = Field(alias="HP")
    attack: int = Field(alias="Attack")
    defense: int = Field(alias="Defense")
    special_attack: int = Field(alias="SpecialAttack")
    special_defense: int = Field(alias="SpecialDefense")
    speed: int = Field(alias="Speed")

    model_config = ConfigDict(populate_by_name=True)


class PokemonRecord(BaseModel):
    """
    What:  A complete record as returned by the store and the API.
    Who:   Produced by PokemonStore; consumed by the merge engine and routes.
    """
    id: int = Field(description="Unique, application-assigned id")
    name: PokemonName
    type: List[str] = Field(description="Category labels, e.g. ['Grass', 'Poison']")
    base: BaseStats
    image: str = Field(description="Public URI of the record's image asset")

    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Input Models — create and partial update
# ══════════════════════════════════════════════════════════════════════════


class BaseStatsInput(BaseModel):
    """
    Stats as sent by the client. Every field is optional; falsy means absent.

    On create an absent stat becomes DEFAULT_STAT_VALUE. On update an absent
    stat keeps the stored value, so a stat can never be set to 0.
    """
    hp: OptionalStat = Field(default=None, alias="HP")
    attack: OptionalStat = Field(default=None, alias="Attack")
    defense: OptionalStat = Field(default=None, alias="Defense")
    special_attack: OptionalStat = Field(default=None, alias="SpecialAttack")
    special_defense: OptionalStat = Field(default=None, alias="SpecialDefense")
    speed: OptionalStat = Field(default=None, alias="Speed")

    model_config = ConfigDict(populate_by_name=True)

    def with_defaults(self) -> BaseStats:
        """Fill every absent stat with DEFAULT_STAT_VALUE."""
        return BaseStats(
            **{
                field: getattr(self, field) or DEFAULT_STAT_VALUE
                for field in BaseStats.model_fields
            }
        )


class PokemonNameInput(BaseModel):
    """Name on create: `french` is mandatory, the other locales are optional."""
    english: OptionalText = None
    japanese: OptionalText = None
    chinese: OptionalText = None
    french: RequiredText


class PokemonNamePatch(BaseModel):
    """Name on update: every locale optional, falsy means keep the stored one."""
    english: OptionalText = None
    japanese: OptionalText = None
    chinese: OptionalText = None
    french: OptionalText = None


class PokemonCreate(BaseModel):
    """
    What:  Validated body of POST /pokemons.

    Required: name.french, type (at least one label), base (may be {}).
    Optional: image, either an http(s) URL to download or a local file path to copy.
    """
    name: PokemonNameInput
    type: List[str] = Field(min_length=1)
    base: BaseStatsInput
    image: OptionalImage = None


class PokemonPatch(BaseModel):
    """
    What:  Validated body of PUT /pokemons/{id}.

    Each top-level field is independent. A patch touching only `type` leaves
    `name`, `base` and `image` alone. Unknown keys are ignored. An empty
    `type` list counts as absent, like every other falsy value.
    """
    name: Annotated[Optional[PokemonNamePatch], FalsyAsNone] = None
    type: Annotated[Optional[List[str]], FalsyAsNone] = None
    base: Annotated[Optional[BaseStatsInput], FalsyAsNone] = None
    image: OptionalImage = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PaginationInfo(BaseModel):
    """
    What:  Navigation envelope for GET /pokemons.

    Serialized in camelCase: currentPage, totalPages, totalPokemons, limit,
    hasNextPage, hasPrevPage.
    """
    current_page: int
    total_pages: int
    total_pokemons: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PokemonListResponse(BaseModel):
    """Paginated list: `data` sorted by ascending id plus the pagination block."""
    data: List[PokemonRecord]
    pagination: PaginationInfo


class PokemonMutationResponse(BaseModel):
    """Returned by create (201), update (200) and delete (200)."""
    message: str
    pokemon: PokemonRecord


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Pokemon not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancers and container probes."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
