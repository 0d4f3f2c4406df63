import logging
import threading
from contextlib import contextmanager
from typing import FrozenSet, Optional

from mdwiki.core.errors import IndexBusy
from mdwiki.core.store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


class PageIndex:
    """
    In-memory set of known document names.

    The set is replaced wholesale by rebuild() and never edited in place, so
    readers holding a snapshot are unaffected by later rebuilds. Creating,
    editing or deleting a document does not touch the index; only rebuild()
    does.
    """

    def __init__(self, store: DocumentStore, lock_timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT):
        self.store = store
        self.lock_timeout = lock_timeout
        self._pages: FrozenSet[str] = frozenset()
        self._lock = threading.Lock()

    @contextmanager
    def _locked(self):
        timeout = -1 if self.lock_timeout is None else self.lock_timeout
        if not self._lock.acquire(timeout=timeout):
            raise IndexBusy(f"page index lock not acquired within {self.lock_timeout}s")
        try:
            yield
        finally:
            self._lock.release()

    def scan(self) -> FrozenSet[str]:
        """List the backing directory. Raises StoreUnavailable."""
        return frozenset(self.store.list_names())

    def rebuild(self) -> FrozenSet[str]:
        """
        Rescan the backing directory and replace the index.
        On failure the previous set is kept and the error is re-raised.
        """
        with self._locked():
            pages = self.scan()
            self._pages = pages
        logger.info(f"PageIndex: Rebuilt from {self.store.root}. Total: {len(pages)}")
        return pages

    def contains(self, name: str) -> bool:
        with self._locked():
            return name in self._pages

    def snapshot(self) -> FrozenSet[str]:
        with self._locked():
            return self._pages

    def __len__(self):
        return len(self.snapshot())
