import pytest

from strangerconnect.config import Settings
from strangerconnect.manager import ConnectionManager


class FakeServer:
    """Records what would have gone out over Socket.IO."""

    def __init__(self):
        self.sent = []
        self.broken = set()

    async def emit(self, event, data=None, to=None):
        if to in self.broken:
            raise ConnectionError(f"transport for {to} is closed")
        self.sent.append((to, event, data))

    def events_for(self, sid, event=None):
        return [(e, d) for to, e, d in self.sent if to == sid and (event is None or e == event)]

    def count(self, sid, event):
        return len(self.events_for(sid, event))


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def manager(server):
    return ConnectionManager(server.emit, Settings())
