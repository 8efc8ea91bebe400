import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Set, Tuple

from .errors import NoTarget
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)

DEFAULT_BAN_THRESHOLD = 3


class BanOutcome(str, Enum):
    RECORDED = "recorded"
    BANNED = "banned"


@dataclass(frozen=True)
class BanDecision:
    outcome: BanOutcome
    target: str
    count: int

    @property
    def banned(self) -> bool:
        return self.outcome == BanOutcome.BANNED


class ModerationTracker:
    def __init__(self, registry: RoomRegistry, threshold: int = DEFAULT_BAN_THRESHOLD):
        self.registry = registry
        self.threshold = threshold
        self.reports: Dict[str, int] = {}
        self.bans: Set[str] = set()
        # (reporter, target) pairs already counted
        self._seen: Set[Tuple[str, str]] = set()

    def report(self, reporter: str, room_id: str) -> BanDecision:
        """
        Counts a report against the reporter's partner in `room_id`.
        A reporter only counts once per target.
        """
        room = self.registry.get_room(room_id)
        target = room.other(reporter) if room else None
        if target is None:
            raise NoTarget(f"no one to report in room {room_id!r}")

        if (reporter, target) in self._seen:
            count = self.reports.get(target, 0)
        else:
            self._seen.add((reporter, target))
            count = self.reports.get(target, 0) + 1
            self.reports[target] = count

        if count >= self.threshold:
            if target not in self.bans:
                logger.warning(f"⛔ Banning {target} after {count} reports")
            self.bans.add(target)
            return BanDecision(BanOutcome.BANNED, target, count)
        return BanDecision(BanOutcome.RECORDED, target, count)

    def is_banned(self, identity: str) -> bool:
        return identity in self.bans

    def report_count(self, identity: str) -> int:
        return self.reports.get(identity, 0)
