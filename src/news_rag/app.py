"""
FastAPI transport for the chat backend.

- ``GET /health``: liveness only, no dependency checks
- ``WS /ws``: the session channel; every frame is ``{"event": str, "data": ...}``

Run with ``news-rag-server`` or ``uvicorn news_rag.app:create_app --factory``.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from news_rag.bootstrap import NewsRagServices
from news_rag.config import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def create_app(
    settings: Optional[Settings] = None, services: Optional[NewsRagServices] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (default: loaded from the environment)
        services: Pre-built services; built from ``settings`` when omitted
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
        app.state.services = services or NewsRagServices.from_settings(settings)
        await app.state.services.initialize()
        try:
            yield
        finally:
            await app.state.services.shutdown()

    app = FastAPI(title="News RAG Backend", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "OK", "message": "News RAG Backend is running"}

    @app.websocket("/ws")
    async def chat_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        orchestrator = websocket.app.state.services.orchestrator

        async def emit(event: str, data: Any = None) -> None:
            await websocket.send_json({"event": event, "data": data})

        session_id = await orchestrator.open_session(emit)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))

                raw = message.get("text")
                if raw is None:
                    await emit("error", {"message": "Frames must be sent as text"})
                    continue
                try:
                    frame = json.loads(raw)
                except json.JSONDecodeError:
                    await emit("error", {"message": "Frames must be JSON objects"})
                    continue
                if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                    await emit("error", {"message": "Frames must carry an event name"})
                    continue

                await orchestrator.dispatch(frame["event"], frame.get("data"), emit)
        except WebSocketDisconnect:
            logger.info(f"Client disconnected (session {session_id})")

    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
