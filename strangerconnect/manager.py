import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from .config import Settings
from .errors import DisallowedFileType, NoTarget, OversizedPayload
from .matcher import MatchPolicy, find_match
from .moderation import ModerationTracker
from .queues import ChatType, Filters, Profile, QueueEntry, QueueManager, normalize_interests
from .relay import Emitter, EventRelay
from .rooms import Room, RoomRegistry
from .utils import check_file, clean_message, now_ms

logger = logging.getLogger(__name__)

Notification = Tuple[str, str, Any]  # (identity, event, data)

# event -> payload key; start-video carries no body
NEGOTIATION_EVENTS = {
    "offer": "offer",
    "answer": "answer",
    "ice-candidate": "candidate",
    "start-video": None,
}


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    IDLE = "idle"
    QUEUED = "queued"
    MATCHED = "matched"


class ConnectionManager:
    def __init__(self, emit: Emitter, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.policy = MatchPolicy(self.settings.match_policy)

        # Live identities; anything else is Disconnected
        self.active_connections: Set[str] = set()

        self.queues = QueueManager()
        self.rooms = RoomRegistry()
        self.moderation = ModerationTracker(self.rooms, threshold=self.settings.ban_threshold)
        self.relay = EventRelay(self.rooms, emit, on_delivery_failure=self.disconnect)

        # Guards queues, rooms and moderation state
        self.lock = asyncio.Lock()

    # --- State ---

    def state_of(self, sid: str) -> ConnectionState:
        if sid not in self.active_connections:
            return ConnectionState.DISCONNECTED
        if self.rooms.room_of(sid):
            return ConnectionState.MATCHED
        if sid in self.queues:
            return ConnectionState.QUEUED
        return ConnectionState.IDLE

    def is_banned(self, sid: str) -> bool:
        return self.moderation.is_banned(sid)

    async def _notify(self, notifications: List[Notification]):
        for identity, event, data in notifications:
            if identity in self.active_connections:
                await self.relay.deliver(identity, event, data)

    def _teardown(self, room_id: str, initiator: str) -> List[Notification]:
        """Destroys a room, returning chat-ended for everyone but the initiator."""
        participants = self.rooms.destroy_room(room_id)
        if participants is None:
            return []
        logger.info(f"🔚 Room {room_id} closed by {initiator}")
        return [(p, "chat-ended", None) for p in participants if p != initiator]

    # --- Lifecycle ---

    async def connect(self, sid: str):
        self.active_connections.add(sid)
        logger.info(f"✅ Client connected: {sid}")

    async def join_queue(
        self,
        sid: str,
        chat_type: ChatType = ChatType.TEXT,
        interests: Optional[List[str]] = None,
        desired: Optional[Filters] = None,
        profile: Optional[Profile] = None,
    ) -> Optional[Room]:
        """
        Queues `sid` and tries to pair it straight away.
        Returns the new room on a match, None when left waiting or rejected.
        """
        if sid not in self.active_connections:
            return None

        notifications: List[Notification] = []
        room = None
        async with self.lock:
            if self.moderation.is_banned(sid):
                logger.info(f"⛔ Rejected banned user {sid}")
                notifications.append((sid, "banned", None))
            else:
                # "Next" from inside a room: the old room never survives
                current = self.rooms.room_of(sid)
                if current:
                    notifications += self._teardown(current.room_id, sid)

                entry = QueueEntry(
                    identity=sid,
                    chat_type=ChatType(chat_type),
                    interests=normalize_interests(interests),
                    desired=desired or Filters(),
                    profile=profile or Profile(),
                )
                self.queues.enqueue(entry)
                logger.info(f"📝 User {sid} joined {entry.chat_type.value} queue "
                            f"with interests {sorted(entry.interests)}")

                partner = find_match(entry, self.queues.snapshot(entry.chat_type), self.policy)
                if partner:
                    self.queues.dequeue_all(sid)
                    self.queues.dequeue_all(partner.identity)
                    room = self.rooms.create_room(sid, partner.identity, entry.chat_type)
                    logger.info(f"🎉 MATCH FOUND: {sid} <--> {partner.identity} in {room.room_id}")
                    for me, other in ((entry, partner), (partner, entry)):
                        notifications.append((me.identity, "match-found", {
                            "room": room.room_id,
                            "type": room.chat_type.value,
                            "partner": {"id": other.identity, "interests": sorted(other.interests)},
                        }))
                else:
                    logger.info(f"⏳ No match yet for {sid}. Waiting in queue...")
                    notifications.append((sid, "waiting", None))

        await self._notify(notifications)
        return room

    async def leave_queue(self, sid: str) -> bool:
        async with self.lock:
            removed = self.queues.dequeue_all(sid)
        if removed:
            logger.info(f"🚶 User {sid} left the queue")
        return removed

    async def end_chat(self, sid: str, room_id: str) -> bool:
        async with self.lock:
            room = self.rooms.get_room(room_id)
            if room is None or sid not in room.participants:
                logger.debug(f"Ignored end-chat from {sid} for {room_id}")
                return False
            notifications = self._teardown(room_id, sid)
        await self._notify(notifications)
        return True

    async def report(self, sid: str, room_id: str, reason: Optional[str] = None):
        """
        Reports the partner in `room_id` and ends the chat.
        Returns the BanDecision, or None when there was nobody to report.
        """
        async with self.lock:
            try:
                decision = self.moderation.report(sid, room_id)
            except NoTarget as e:
                logger.debug(f"Ignored report from {sid}: {e}")
                return None
            logger.info(f"🚩 {sid} reported {decision.target} "
                        f"({decision.count} reports): {reason or 'no reason given'}")
            notifications = self._teardown(room_id, sid)
            if decision.banned:
                self.queues.dequeue_all(decision.target)
                notifications.append((decision.target, "banned", None))
        await self._notify(notifications)
        return decision

    async def disconnect(self, sid: str):
        if sid not in self.active_connections:
            return
        async with self.lock:
            self.active_connections.discard(sid)
            self.queues.dequeue_all(sid)
            room = self.rooms.room_of(sid)
            notifications = self._teardown(room.room_id, sid) if room else []
        logger.info(f"❌ Client disconnected: {sid}")
        await self._notify(notifications)

    # --- In-room traffic ---

    async def send_message(self, sid: str, room_id: str, message: str) -> int:
        text = clean_message(message)
        if not text:
            return 0
        # Everyone, sender included, sees the message as the server relayed it
        return await self.relay.relay(room_id, sid, "receive-message", {
            "message": text,
            "senderId": sid,
            "timestamp": now_ms(),
        }, echo=True)

    async def set_typing(self, sid: str, room_id: str, typing: bool = True) -> int:
        event = "partner-typing" if typing else "partner-stop-typing"
        return await self.relay.relay(room_id, sid, event)

    async def relay_signal(self, sid: str, room_id: str, signal: Any) -> int:
        return await self.relay.relay(room_id, sid, "video-signal", {"signal": signal, "from": sid})

    async def relay_negotiation(self, sid: str, room_id: str, event: str, body: Any = None) -> int:
        """
        Relays a WebRTC offer, answer, ice-candidate or start-video to the partner.
        The body is passed through untouched under its event's key.
        """
        if event not in NEGOTIATION_EVENTS:
            logger.debug(f"Dropped unknown negotiation event {event} from {sid}")
            return 0
        key = NEGOTIATION_EVENTS[event]
        data = {key: body, "from": sid} if key else None
        return await self.relay.relay(room_id, sid, event, data)

    async def share_file(self, sid: str, room_id: str, file: Dict[str, Any]) -> int:
        try:
            check_file(file.get("type", ""), file.get("data", ""), self.settings.max_file_bytes)
        except (OversizedPayload, DisallowedFileType) as e:
            logger.debug(f"Dropped file from {sid}: {e!r}")
            return 0
        return await self.relay.relay(room_id, sid, "file-received", {"senderId": sid, "file": file})

    async def set_hand(self, sid: str, room_id: str, raised: bool = True) -> int:
        event = "hand-raised" if raised else "hand-lowered"
        return await self.relay.relay(room_id, sid, event)
