"""
Pokedex Backend — Application Package Initializer
==================================================

What: Marks the `pokedex` directory as a Python package.
Why:  Enables module imports like `from pokedex.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows the same layered split everywhere:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (identity, merge, image, │  ← Business rules
    │   pagination, orchestration)        │
    ├─────────────────────────────────────┤
    │      Store adapter & Schemas        │  ← Records in, records out
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the session directly; they hand it to PokemonService,
    which wraps it in a PokemonStore. Every rule about IDs, partial updates
    and paging lives in a service module that can be tested without HTTP.
"""

__version__ = "1.0.0"
