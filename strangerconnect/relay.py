import logging
from typing import Any, Awaitable, Callable, Optional

from .errors import NotInRoom
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)

# emit(event, data, to=identity)
Emitter = Callable[..., Awaitable[Any]]
FailureHandler = Callable[[str], Awaitable[Any]]


class EventRelay:
    """Delivers in-room events to the right participants and nobody else."""

    def __init__(
        self,
        registry: RoomRegistry,
        emit: Emitter,
        on_delivery_failure: Optional[FailureHandler] = None,
    ):
        self.registry = registry
        self.emit = emit
        self.on_delivery_failure = on_delivery_failure

    async def deliver(self, identity: str, event: str, data: Any = None) -> bool:
        """Sends one event to one identity. Failures are logged, never raised."""
        try:
            await self.emit(event, data, to=identity)
            return True
        except Exception as e:
            logger.warning(f"⚠️ Could not deliver {event} to {identity}: {e}")
            if self.on_delivery_failure is not None:
                await self.on_delivery_failure(identity)
            return False

    async def relay(
        self,
        room_id: str,
        sender: str,
        event: str,
        data: Any = None,
        echo: bool = False,
    ) -> int:
        """
        Sends `event` to the sender's partner in `room_id`, plus the sender when
        `echo` is set. Returns how many deliveries succeeded.
        """
        try:
            peers = self.registry.peers_of(room_id, sender)
        except NotInRoom as e:
            logger.debug(f"Dropped {event}: {e}")
            return 0

        targets = (sender,) + peers if echo else peers
        delivered = 0
        for identity in targets:
            if await self.deliver(identity, event, data):
                delivered += 1
        return delivered
