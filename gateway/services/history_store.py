"""
HISTORY STORE MODULE
====================

In-memory conversation memory, keyed by (chatId, senderId). This is the only
shared mutable state in the gateway; every request thread goes through it.

RULES:
  - read(key, n) returns the last n turns in the order they were appended,
    or [] for a key that was never written (or was cleared / evicted).
  - append(key, role, content) stamps the turn with the current UTC time.
  - Each conversation keeps at most max_stored_turns turns (oldest dropped first).
  - At most max_conversations keys are held. Writing a new key past that
    ceiling evicts the least recently written other key.
  - clear(key) is idempotent.

LOCKING:
  read() takes the shared side of a reader/writer lock; append(), clear() and
  eviction take the exclusive side. Callers never hold the lock while talking
  to a provider.

Nothing is persisted: memory lives for the lifetime of the process.
"""

import logging
from collections import OrderedDict, deque
from typing import Deque, List, NamedTuple, Optional

from gateway.models import Content, Role, Turn
from gateway.utils.rwlock import ReadWriteLock
from gateway.utils.time_info import utc_now

logger = logging.getLogger("Jinxie")


class ConversationKey(NamedTuple):
    """
    Identifies one conversation's memory. Kept as a tuple rather than a joined
    string so ids that contain the separator can never collide.
    """
    chat_id: str
    sender_id: str

    def __str__(self) -> str:
        return f"{self.chat_id}:{self.sender_id}"


# ==============================================================================
# HISTORY STORE CLASS
# ==============================================================================

class HistoryStore:
    """Bounded, thread-safe map of ConversationKey -> ordered turns."""

    def __init__(
        self,
        max_conversations: int = 1000,
        max_stored_turns: int = 50,
        default_window: int = 10,
    ):
        if max_conversations < 1:
            raise ValueError("max_conversations must be at least 1")
        if max_stored_turns < default_window:
            raise ValueError(
                f"max_stored_turns ({max_stored_turns}) must be >= the read window ({default_window})"
            )
        self.max_conversations = max_conversations
        self.max_stored_turns = max_stored_turns
        self.default_window = default_window
        # Insertion order of the OrderedDict tracks recency of writes: first = oldest.
        self._conversations: "OrderedDict[ConversationKey, Deque[Turn]]" = OrderedDict()
        self._lock = ReadWriteLock()

    def read(self, key: ConversationKey, max_turns: Optional[int] = None) -> List[Turn]:
        """Return up to max_turns most recent turns (default: the configured window), oldest first."""
        if max_turns is None:
            max_turns = self.default_window
        if max_turns <= 0:
            return []
        with self._lock.read_locked():
            turns = self._conversations.get(key)
            if not turns:
                return []
            start = max(len(turns) - max_turns, 0)
            # Copy out only the window while the lock is held.
            return [turns[i] for i in range(start, len(turns))]

    def append(self, key: ConversationKey, role: Role, content: Content) -> Turn:
        """Append one turn to a conversation, creating it (and evicting if needed) on first write."""
        turn = Turn(role=role, content=content, created_at=utc_now())
        evicted = None
        with self._lock.write_locked():
            turns = self._conversations.get(key)
            if turns is None:
                turns = deque(maxlen=self.max_stored_turns)
                self._conversations[key] = turns
                if len(self._conversations) > self.max_conversations:
                    evicted = self._evict_one(keep=key)
            else:
                self._conversations.move_to_end(key)
            turns.append(turn)
        if evicted is not None:
            logger.info("Conversation limit (%s) reached, evicted %s", self.max_conversations, evicted)
        return turn

    def clear(self, key: ConversationKey) -> bool:
        """Forget a conversation. Returns True if there was anything to forget."""
        with self._lock.write_locked():
            return self._conversations.pop(key, None) is not None

    def _evict_one(self, keep: ConversationKey) -> Optional[ConversationKey]:
        # Caller holds the write lock.
        for candidate in self._conversations:
            if candidate != keep:
                del self._conversations[candidate]
                return candidate
        return None

    def keys(self) -> List[ConversationKey]:
        """Snapshot of stored keys, least recently written first."""
        with self._lock.read_locked():
            return list(self._conversations)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._conversations)

    def __contains__(self, key) -> bool:
        with self._lock.read_locked():
            return key in self._conversations
