import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

ANY = "any"


class ChatType(str, Enum):
    TEXT = "text"
    VIDEO = "video"


def normalize_interests(interests: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Lower-cases and strips interests, dropping blanks and duplicates."""
    if not interests:
        return frozenset()
    return frozenset(i.strip().lower() for i in interests if i and i.strip())


def _normalize_field(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


@dataclass(frozen=True)
class Filters:
    """What a user wants their partner to be. "any" accepts everyone."""
    country: str = ANY
    gender: str = ANY

    @classmethod
    def build(cls, country: Optional[str] = None, gender: Optional[str] = None) -> "Filters":
        return cls(
            country=_normalize_field(country) or ANY,
            gender=_normalize_field(gender) or ANY,
        )


@dataclass(frozen=True)
class Profile:
    """What a user says about themselves. Unknown fields stay None."""
    country: Optional[str] = None
    gender: Optional[str] = None

    @classmethod
    def build(cls, country: Optional[str] = None, gender: Optional[str] = None) -> "Profile":
        return cls(country=_normalize_field(country), gender=_normalize_field(gender))


@dataclass(frozen=True)
class QueueEntry:
    identity: str
    chat_type: ChatType
    interests: FrozenSet[str] = frozenset()
    desired: Filters = Filters()
    profile: Profile = Profile()
    joined_at: float = field(default_factory=time.time)


class QueueManager:
    def __init__(self):
        # One ordered map per chat type: identity -> entry, head first
        self.queues: Dict[ChatType, Dict[str, QueueEntry]] = {t: {} for t in ChatType}

    def enqueue(self, entry: QueueEntry):
        """Moves the identity to the tail of its chosen queue."""
        self.dequeue_all(entry.identity)
        self.queues[entry.chat_type][entry.identity] = entry

    def dequeue_all(self, identity: str) -> bool:
        """Removes the identity from every queue. Returns True if it was queued."""
        found = False
        for queue in self.queues.values():
            if queue.pop(identity, None) is not None:
                found = True
        return found

    def snapshot(self, chat_type: ChatType) -> Tuple[QueueEntry, ...]:
        return tuple(self.queues[chat_type].values())

    def entry_for(self, identity: str) -> Optional[QueueEntry]:
        for queue in self.queues.values():
            if identity in queue:
                return queue[identity]
        return None

    def sizes(self) -> Dict[str, int]:
        return {t.value: len(q) for t, q in self.queues.items()}

    def __contains__(self, identity: str) -> bool:
        return self.entry_for(identity) is not None

    def __len__(self) -> int:
        return sum(len(q) for q in self.queues.values())
