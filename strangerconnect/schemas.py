from pydantic import BaseModel, Field
from typing import Any, List, Optional

from .queues import ChatType


# Event: join-queue
class JoinQueue(BaseModel):
    type: ChatType = ChatType.TEXT
    interests: List[str] = Field(default_factory=list)
    country: Optional[str] = Field(None, description="Desired partner country or 'any'")
    gender: Optional[str] = Field(None, description="Desired partner gender or 'any'")
    selfCountry: Optional[str] = None
    selfGender: Optional[str] = None


# Events: end-chat, typing, stop-typing, raise-hand, lower-hand
class RoomEvent(BaseModel):
    room: str


class Typing(RoomEvent):
    isTyping: bool = True


class SendMessage(RoomEvent):
    message: str


class VideoSignal(RoomEvent):
    signal: Any = None


class FileMeta(BaseModel):
    name: str
    type: str
    data: str


class FileShare(RoomEvent):
    file: FileMeta


class ReportUser(RoomEvent):
    reason: Optional[str] = None


# WebRTC negotiation events; bodies are relayed as-is
class Offer(RoomEvent):
    offer: Any = None


class Answer(RoomEvent):
    answer: Any = None


class IceCandidate(RoomEvent):
    candidate: Any = None
