"""
Pokedex Backend — Identity Allocator
=====================================

What:  Assigns the integer id of a new record.
How:   next_id = max(id) + 1, or 1 on an empty store. Gaps left by deletes
       are never filled.

The read-then-insert race:
    Two concurrent creates can both read max = 41 and both try to insert 42.
    The primary key rejects the second insert (IdConflictError); the
    allocator then re-reads the maximum and tries again, up to
    settings.id_allocation_attempts times. Under non-concurrent load this
    never triggers and the observable contract stays "current max + 1".
"""

import logging
from typing import Callable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from pokedex.config import settings
from pokedex.exceptions import IdConflictError
from pokedex.schemas.pokemon import PokemonRecord
from pokedex.store import PokemonStore

logger = logging.getLogger(__name__)


class IdentityAllocator:
    """Allocates ids and inserts records under them."""

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts or settings.id_allocation_attempts

    async def next_id(self, store: PokemonStore) -> int:
        """Return max(id) + 1, or 1 if the store is empty. Read-only."""
        current_max = await store.find_max_id()
        return current_max + 1 if current_max is not None else 1

    async def allocate_and_insert(
        self,
        store: PokemonStore,
        build: Callable[[int], PokemonRecord],
    ) -> PokemonRecord:
        """
        Allocate an id, build the record for it and insert it.

        Args:
            store: Store bound to the request's session
            build: Produces the full record for a given id. Called again
                   with a fresh id after every conflict.

        Raises:
            IdConflictError: every attempt collided (→ 500)
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(IdConflictError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=0.05, max=0.5),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                new_id = await self.next_id(store)
                record = await store.insert(build(new_id))
                logger.debug("Allocated id %d", record.id)
        return record
