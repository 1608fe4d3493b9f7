"""
Backend credential pool.

Spreads generation calls over several backend handles (typically one per
API key) in round-robin order. The pool is itself a backend, so graders
can be given either a single handle or a pool.
"""

import json
import random
import string
import threading
import time
from typing import Any, Callable, List, Optional, Tuple

from google.genai import types

from ai.backend import BaseBackend, GeminiBackend
from config.constants import API_KEY_ID_LENGTH, GATEWAY_METADATA_HEADER
from config.logging_config import get_logger
from core.exceptions import EmptyPoolError
from core.models import BackendConfig

logger = get_logger(__name__)

BackendFactory = Callable[[BackendConfig], BaseBackend]


def _random_suffix(length: int = 6) -> str:
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def derive_backend_id(config: BackendConfig, backend_id: Optional[str] = None) -> str:
    """
    Pick the id of a pool entry.

    Uses the explicit id, else the trailing characters of the API key,
    else a generated ``genai-<millis>-<random>`` id.
    """
    if backend_id:
        return backend_id
    if config.api_key:
        return config.api_key[-API_KEY_ID_LENGTH:]
    return f"genai-{int(time.time() * 1000)}-{_random_suffix()}"


class BackendPool(BaseBackend):
    """
    Round-robin pool of backend handles.

    Entries are kept in insertion order. ``next()`` returns the handle at
    the cursor and advances the cursor modulo the pool size; reading and
    advancing happen under one lock so concurrent callers never receive
    the same slot twice in a row.

    Usage:
        pool = BackendPool()
        pool.add(BackendConfig(api_key="AIza..."))
        response = await pool.generate_content(model=..., contents=...)
    """

    def __init__(self, backend_factory: BackendFactory = GeminiBackend):
        """
        Initialize an empty pool.

        Args:
            backend_factory: Builds a handle from a BackendConfig
        """
        self._backend_factory = backend_factory
        self._entries: List[Tuple[str, BaseBackend]] = []
        self._index = 0
        self._lock = threading.Lock()

    def add(self, config: BackendConfig, backend_id: Optional[str] = None) -> str:
        """
        Build a handle from ``config`` and append it to the pool.

        The handle is tagged with a gateway metadata header carrying its id.
        Duplicate ids are accepted.

        Args:
            config: Backend configuration
            backend_id: Explicit id (default: derived from the API key)

        Returns:
            The id actually used
        """
        entry_id = derive_backend_id(config, backend_id)
        tagged = BackendConfig(
            api_key=config.api_key,
            base_url=config.base_url,
            headers={**config.headers, GATEWAY_METADATA_HEADER: json.dumps({"id": entry_id})}
        )
        backend = self._backend_factory(tagged)

        with self._lock:
            self._entries.append((entry_id, backend))
            size = len(self._entries)

        logger.debug(f"Added backend {entry_id} to pool (size={size})")
        return entry_id

    def remove(self, backend_id: str) -> bool:
        """
        Remove the first entry with the given id.

        Args:
            backend_id: Id to remove

        Returns:
            True if an entry was removed, False if not found
        """
        with self._lock:
            position = next(
                (i for i, (entry_id, _) in enumerate(self._entries) if entry_id == backend_id),
                None
            )
            if position is None:
                return False

            del self._entries[position]
            # Keep pointing at the same next entry
            if position < self._index:
                self._index -= 1
            if self._entries:
                self._index %= len(self._entries)
            else:
                self._index = 0

        logger.debug(f"Removed backend {backend_id} from pool")
        return True

    def next(self) -> BaseBackend:
        """
        Get the next handle in round-robin order.

        Raises:
            EmptyPoolError: If the pool has no entries
        """
        with self._lock:
            if not self._entries:
                raise EmptyPoolError("No backend instances in the pool.")
            _, backend = self._entries[self._index]
            self._index = (self._index + 1) % len(self._entries)
            return backend

    @property
    def size(self) -> int:
        """Number of entries in the pool."""
        return len(self._entries)

    @property
    def ids(self) -> List[str]:
        """Ids of all entries, in round-robin order."""
        with self._lock:
            return [entry_id for entry_id, _ in self._entries]

    def __len__(self) -> int:
        return self.size

    async def generate_content(
        self,
        model: str,
        contents: Any,
        config: Optional[types.GenerateContentConfig] = None
    ) -> types.GenerateContentResponse:
        """Dispatch one call to the next handle."""
        return await self.next().generate_content(model=model, contents=contents, config=config)
