import hashlib
import itertools
import json
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .errors import InvalidPair, NotInRoom
from .queues import ChatType


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Room:
    room_id: str
    participants: Tuple[str, str]
    chat_type: ChatType
    created_at: float = field(default_factory=time.time)

    def other(self, identity: str) -> Optional[str]:
        if identity not in self.participants:
            return None
        a, b = self.participants
        return b if identity == a else a


class RoomRegistry:
    def __init__(self):
        self.rooms: Dict[str, Room] = {}
        # identity -> room_id, kept in step with self.rooms
        self.members: Dict[str, str] = {}
        self._sequence = itertools.count(1)

    def _room_id(self, a: str, b: str) -> str:
        # JSON keeps the pair unambiguous whatever characters the ids contain
        digest = sha256_hex(json.dumps([a, b]))[:16]
        return f"room-{next(self._sequence)}-{digest}"

    def create_room(self, a: str, b: str, chat_type: ChatType) -> Room:
        if a == b:
            raise InvalidPair(f"cannot pair {a!r} with itself")
        room = Room(room_id=self._room_id(a, b), participants=(a, b), chat_type=chat_type)
        self.rooms[room.room_id] = room
        self.members[a] = room.room_id
        self.members[b] = room.room_id
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def room_of(self, identity: str) -> Optional[Room]:
        room_id = self.members.get(identity)
        return self.rooms.get(room_id) if room_id else None

    def peers_of(self, room_id: str, sender: str) -> Tuple[str, ...]:
        """Everyone in the room except `sender`. Raises NotInRoom otherwise."""
        room = self.rooms.get(room_id)
        if room is None or sender not in room.participants:
            raise NotInRoom(f"{sender!r} is not in room {room_id!r}")
        return tuple(p for p in room.participants if p != sender)

    def destroy_room(self, room_id: str) -> Optional[Tuple[str, str]]:
        """Tears the room down. Returns its participants, or None if already gone."""
        room = self.rooms.pop(room_id, None)
        if room is None:
            return None
        for identity in room.participants:
            if self.members.get(identity) == room_id:
                del self.members[identity]
        return room.participants

    def __len__(self) -> int:
        return len(self.rooms)
