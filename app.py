from fastapi import FastAPI, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from routers.rooms import rooms_router
from schemas.signaling import (
    KIND_BY_WIRE_TYPE,
    ConnectedMessage,
    JoinRoomRequest,
    PingRequest,
    PongMessage,
    ReleaseFloorRequest,
    RequestFloorRequest,
    SignalRequest,
    UserInfo,
    client_message_adapter,
)
from constants import CORS_ORIGINS, IDENTITY_BACKEND, LOG_FILE, LOG_LEVEL, STATIC_TOKENS
from errors import AdmissionError, InvalidRequest
from hub import SignalingHub
from identity import IdentityProvider, StaticIdentityProvider
import uuid
import json
import asyncio
from typing import Optional
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def build_identity_provider() -> IdentityProvider:
    if IDENTITY_BACKEND == "static":
        return StaticIdentityProvider.from_string(STATIC_TOKENS)
    if IDENTITY_BACKEND != "redis":
        logger.warning(f"Unknown IDENTITY_BACKEND {IDENTITY_BACKEND!r}, falling back to redis")
    from backend import RedisIdentityBackend
    return RedisIdentityBackend()


def parse_client_message(raw: str):
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidRequest("message is not valid JSON") from e
    if not isinstance(data, dict):
        raise InvalidRequest("message must be a JSON object")
    try:
        return client_message_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidRequest(f"invalid {data.get('type', 'untyped')} message: {e.error_count()} errors") from e


def handle_client_message(hub: SignalingHub, connection_id: str, raw: str):
    """Apply one inbound message. Malformed input is logged and ignored."""
    try:
        message = parse_client_message(raw)
    except InvalidRequest as e:
        logger.warning(f"Ignoring message from connection {connection_id}: {e}")
        return

    if isinstance(message, JoinRoomRequest):
        hub.lifecycle.switch(connection_id, message.room)
    elif isinstance(message, RequestFloorRequest):
        hub.lifecycle.request_floor(connection_id)
    elif isinstance(message, ReleaseFloorRequest):
        hub.lifecycle.release_floor(connection_id)
    elif isinstance(message, SignalRequest):
        hub.lifecycle.relay(connection_id, KIND_BY_WIRE_TYPE[message.type], message.to, message.payload)
    elif isinstance(message, PingRequest):
        hub.connections.send(connection_id, PongMessage().model_dump())


def _bearer_token(websocket: WebSocket) -> Optional[str]:
    auth_header = websocket.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()
    return None


async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = None, room: Optional[str] = None):
    """Signaling WebSocket.

    Query parameters:
    - token: Session token (or `Authorization: Bearer <token>`)
    - room: Optional initial room, defaults to "main"
    """
    hub: SignalingHub = websocket.app.state.hub
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"WebSocket connection attempt from {client_host}, room: {room}")

    try:
        identity = await hub.binder.bind(token or _bearer_token(websocket))
    except AdmissionError as e:
        logger.warning(f"WebSocket connection rejected from {client_host}: {e.reason}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.reason)
        return

    await websocket.accept()
    connection_id = str(uuid.uuid4())
    queue = hub.connections.open(connection_id)
    writer_task = None
    logger.info(f"WebSocket connection accepted: {connection_id} for user {identity.id} ({identity.username})")

    try:
        welcome = ConnectedMessage(
            connection_id=connection_id,
            user=UserInfo(id=identity.id, username=identity.username),
        )
        hub.connections.send(connection_id, welcome.model_dump())
        hub.lifecycle.admit(connection_id, identity)
        hub.lifecycle.join(connection_id, room)
        writer_task = asyncio.create_task(hub.connections.writer(connection_id, websocket, queue))

        message_count = 0
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected normally for connection {connection_id}")
                break
            message_count += 1
            data = message.get("text")
            if data is None:
                logger.warning(f"Ignoring non-text frame #{message_count} from connection {connection_id}")
                continue
            logger.debug(f"Received message #{message_count} from connection {connection_id}")
            handle_client_message(hub, connection_id, data)
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
    finally:
        hub.lifecycle.disconnect(connection_id)
        hub.connections.close(connection_id)
        if writer_task is not None:
            writer_task.cancel()
            try:
                await writer_task
            except asyncio.CancelledError:
                pass
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Error closing WebSocket: {e}")


def create_app(identity_provider: Optional[IdentityProvider] = None) -> FastAPI:
    app = FastAPI(title="Floor Signaling Hub", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.hub = SignalingHub(identity_provider or build_identity_provider())
    app.include_router(rooms_router)
    app.add_api_websocket_route("/ws", websocket_endpoint)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Floor signaling hub OK"

    @app.get("/health")
    async def health():
        hub = app.state.hub
        loop = asyncio.get_running_loop()
        identity_ok = await loop.run_in_executor(None, hub.binder.provider.ping)
        with hub.lifecycle.lock:
            connection_count = len(hub.registry.connections())
        return {
            "status": "ok" if identity_ok else "degraded",
            "identity_backend": "ok" if identity_ok else "unreachable",
            "connections": connection_count,
        }

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        return "ok"

    logger.info("FastAPI application initialized")
    return app


app = create_app()
