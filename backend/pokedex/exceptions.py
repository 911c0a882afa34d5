"""
Pokedex Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the three outcomes a request can fail with.
Why:   Services raise domain errors; global handlers in main.py map them to
       HTTP status codes so routes never build error responses by hand.
How:   Each exception carries a user-safe message and an optional context dict
       that is logged but never returned to the client.

Exception Hierarchy:
    PokedexError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── NotFoundError        → 404 Not Found
    └── DatabaseError        → 500 Internal Server Error
        └── IdConflictError  → 500 once retries are exhausted

Image download and copy failures have no exception here: ImageResolver
absorbs them and reports a result object instead of raising.
"""

from typing import Any, Dict, Optional


class PokedexError(Exception):
    """
    Base exception for all Pokedex application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PokedexError):
    """
    Raised when client input fails validation.

    When:    Missing name.french / type / base on create, empty update body,
             malformed JSON in the body or in a multipart field.
    HTTP:    400 Bad Request

    No store mutation is attempted once this is raised.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(PokedexError):
    """
    Raised when a lookup, update or delete target does not exist.

    HTTP:    404 Not Found

    The store returns None for missing records; the service layer converts
    that None into this exception.
    """

    def __init__(
        self,
        resource: str = "Pokemon",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(PokedexError):
    """
    Raised when store operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Driver errors,
    SQL text and constraint names go to the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdConflictError(DatabaseError):
    """
    Raised when an insert collides with an existing record id.

    What:    Two creates read the same max(id) and raced to insert max+1.
    Who:     Raised by PokemonStore.insert; retried by IdentityAllocator.
    """

    def __init__(self, record_id: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["record_id"] = record_id
        super().__init__(
            message="Could not allocate a unique id for the new Pokemon. Please retry.",
            context=ctx,
        )
        self.record_id = record_id
