import logging

from fastapi import FastAPI
from pydantic import ValidationError
import socketio

from .config import Settings
from .manager import ConnectionManager
from .queues import Filters, Profile
from . import schemas

# 1. Settings & Logging
settings = Settings.from_env()
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
logger = logging.getLogger(__name__)

# 2. Initialize FastAPI
fastapi_app = FastAPI(docs_url=None, redoc_url=None)

# 3. Initialize Socket.IO, allowing the configured client origins
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.client_urls,
    logger=settings.socketio_logger,
    engineio_logger=settings.socketio_logger,
)

# 4. Wrap FastAPI
app = socketio.ASGIApp(sio, fastapi_app)

manager = ConnectionManager(sio.emit, settings)


def parse(model, sid, event, data):
    """Validates an inbound payload, returning None (and logging) when malformed."""
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        logger.warning(f"Malformed {event} from {sid}: {e.error_count()} error(s)")
        return None

# --- HTTP Routes ---

@fastapi_app.get("/health")
async def health():
    return {
        "status": "healthy",
        "queued": manager.queues.sizes(),
        "rooms": len(manager.rooms),
    }

# --- WebSocket Events ---

@sio.event
async def connect(sid, environ, auth=None):
    await manager.connect(sid)

@sio.on('join-queue')
async def join_queue(sid, data=None):
    req = parse(schemas.JoinQueue, sid, 'join-queue', data)
    if req:
        await manager.join_queue(
            sid,
            chat_type=req.type,
            interests=req.interests,
            desired=Filters.build(req.country, req.gender),
            profile=Profile.build(req.selfCountry, req.selfGender),
        )

@sio.on('leave-queue')
async def leave_queue(sid, data=None):
    await manager.leave_queue(sid)

@sio.on('end-chat')
async def end_chat(sid, data=None):
    req = parse(schemas.RoomEvent, sid, 'end-chat', data)
    if req:
        await manager.end_chat(sid, req.room)

@sio.on('send-message')
async def send_message(sid, data=None):
    req = parse(schemas.SendMessage, sid, 'send-message', data)
    if req:
        await manager.send_message(sid, req.room, req.message)

@sio.on('typing')
async def typing(sid, data=None):
    req = parse(schemas.Typing, sid, 'typing', data)
    if req:
        await manager.set_typing(sid, req.room, req.isTyping)

@sio.on('stop-typing')
async def stop_typing(sid, data=None):
    req = parse(schemas.RoomEvent, sid, 'stop-typing', data)
    if req:
        await manager.set_typing(sid, req.room, False)

@sio.on('video-signal')
async def video_signal(sid, data=None):
    req = parse(schemas.VideoSignal, sid, 'video-signal', data)
    if req:
        await manager.relay_signal(sid, req.room, req.signal)

@sio.on('offer')
async def offer(sid, data=None):
    req = parse(schemas.Offer, sid, 'offer', data)
    if req:
        await manager.relay_negotiation(sid, req.room, 'offer', req.offer)

@sio.on('answer')
async def answer(sid, data=None):
    req = parse(schemas.Answer, sid, 'answer', data)
    if req:
        await manager.relay_negotiation(sid, req.room, 'answer', req.answer)

@sio.on('ice-candidate')
async def ice_candidate(sid, data=None):
    req = parse(schemas.IceCandidate, sid, 'ice-candidate', data)
    if req:
        await manager.relay_negotiation(sid, req.room, 'ice-candidate', req.candidate)

@sio.on('start-video')
async def start_video(sid, data=None):
    req = parse(schemas.RoomEvent, sid, 'start-video', data)
    if req:
        await manager.relay_negotiation(sid, req.room, 'start-video')

@sio.on('file-share')
async def file_share(sid, data=None):
    req = parse(schemas.FileShare, sid, 'file-share', data)
    if req:
        await manager.share_file(sid, req.room, req.file.model_dump())

@sio.on('raise-hand')
async def raise_hand(sid, data=None):
    req = parse(schemas.RoomEvent, sid, 'raise-hand', data)
    if req:
        await manager.set_hand(sid, req.room, True)

@sio.on('lower-hand')
async def lower_hand(sid, data=None):
    req = parse(schemas.RoomEvent, sid, 'lower-hand', data)
    if req:
        await manager.set_hand(sid, req.room, False)

@sio.on('report-user')
async def report_user(sid, data=None):
    req = parse(schemas.ReportUser, sid, 'report-user', data)
    if req:
        await manager.report(sid, req.room, req.reason)

@sio.event
async def disconnect(sid, reason=None):
    await manager.disconnect(sid)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
