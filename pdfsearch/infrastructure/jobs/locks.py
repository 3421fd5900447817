"""Per-document mutual exclusion for ingestion runs."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from ..logging import get_logger

logger = get_logger()


class DocumentLockRegistry:
    """Hands out one ``asyncio.Lock`` per document id.

    Holding the lock for a document guarantees that no other ingestion run
    for the same document executes in this process at the same time. Locks
    are created on first use and kept for the lifetime of the registry.
    """

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}

    def lock_for(self, document_id: int) -> asyncio.Lock:
        if document_id not in self._locks:
            self._locks[document_id] = asyncio.Lock()
        return self._locks[document_id]

    def is_locked(self, document_id: int) -> bool:
        lock = self._locks.get(document_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, document_id: int) -> AsyncIterator[None]:
        """Acquire the document's lock for the duration of the block.

        Released on every exit path, including cancellation.
        """
        lock = self.lock_for(document_id)
        if lock.locked():
            logger.info(f"Waiting for running ingestion of document {document_id} to finish")
        async with lock:
            yield
