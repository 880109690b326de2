"""
In-process store for conversation state awaiting a user decision.

Entries expire after a TTL and the store never holds more than
``max_entries``; when full, the oldest entry is evicted first.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Generic, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class PendingStore(Generic[K, V]):
    """A TTL and capacity bounded mapping."""

    def __init__(self, ttl_seconds: float, max_entries: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[K, Tuple[float, V]]" = OrderedDict()

    def put(self, key: K, value: V) -> None:
        """Store ``value``, replacing any entry under ``key``."""
        self._purge_expired()
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Pending store full, evicted %s", evicted)

    def get(self, key: K) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._expired(stored_at):
            del self._entries[key]
            return None
        return value

    def pop(self, key: K) -> Optional[V]:
        value = self.get(key)
        self._entries.pop(key, None)
        return value

    def __contains__(self, key) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self.ttl_seconds

    def _purge_expired(self) -> None:
        # Insertion order is age order, so stop at the first live entry
        while self._entries:
            key, (stored_at, _) = next(iter(self._entries.items()))
            if not self._expired(stored_at):
                break
            del self._entries[key]


@dataclass
class TransactionGuess:
    """Structured output of the AI parser, already validated."""

    type: str
    amount: float
    category: str
    description: str
    date: date
    confidence: float = 0.0


@dataclass
class PendingTransaction:
    guess: TransactionGuess
    category_id: str
    category_name: str
    source: str
    source_message_id: Optional[int] = None
    prompt_message_id: Optional[int] = None
    created_at: float = field(default_factory=time.time)


@dataclass
class PendingBillConfirmation:
    message_id: int
    chat_id: int
