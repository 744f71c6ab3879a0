import asyncio
import json
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import redis.asyncio as redis

from ..config import REDIS_URL

logger = logging.getLogger(__name__)

router = APIRouter()

redis_client = redis.from_url(REDIS_URL, decode_responses=True)


def _channel(mid: str) -> str:
    return f"match:{mid}"


async def broadcast(mid: str, message: dict) -> None:
    """Publish a scoring update to everyone watching the match.

    Live updates are best effort: a Redis outage must not fail a ball that has
    already been committed.
    """
    try:
        await redis_client.publish(_channel(mid), json.dumps(message))
    except redis.ConnectionError as exc:
        logger.warning("Could not broadcast update for match %s: %s", mid, exc)


@router.websocket("/matches/{mid}/stream")
async def match_stream(ws: WebSocket, mid: str) -> None:
    """Stream ball-by-ball updates via a Redis pub/sub channel.

    The subscription is in place before the handshake completes, so nothing
    published after a client connects is missed.
    """
    channel = _channel(mid)
    try:
        async with redis_client.pubsub() as pubsub:
            await pubsub.subscribe(channel)
            await ws.accept()

            async def sender() -> None:
                try:
                    async for msg in pubsub.listen():
                        if msg.get("type") == "message":
                            await ws.send_json(json.loads(msg["data"]))
                except redis.ConnectionError:
                    await ws.close()

            send_task = asyncio.create_task(sender())
            try:
                while True:
                    await ws.receive_text()
            except WebSocketDisconnect:
                pass
            finally:
                send_task.cancel()
                with suppress(asyncio.CancelledError):
                    await send_task
                await pubsub.unsubscribe(channel)
    except redis.ConnectionError:
        logger.warning("Redis unavailable; closing stream for match %s", mid)
        await ws.close()
