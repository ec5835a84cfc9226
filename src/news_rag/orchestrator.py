"""
Conversation orchestration over a bidirectional message channel.

The orchestrator runs one request/response exchange per inbound message:
load history, retrieve articles, generate a grounded answer, persist the
updated history and deliver the reply. It speaks the session channel
protocol through an ``emit(event, data)`` callable so any transport
(WebSocket, Socket.IO, tests) can drive it.

Inbound events:  send_message, get_chat_history, clear_history
Outbound events: session_initialized, bot_typing, receive_message,
                 chat_history, history_cleared, error
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from news_rag.exceptions import InvalidInput, NewsRagError
from news_rag.generation import ResponseGenerator
from news_rag.models import ConversationTurn
from news_rag.storage import SessionStore
from news_rag.vector_index import VectorIndex

logger = logging.getLogger(__name__)

Emit = Callable[[str, Any], Awaitable[None]]


class SessionLocks:
    """
    One asyncio.Lock per active session id.

    Locks are dropped once nobody holds or waits on them.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._users[session_id] = self._users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[session_id] -= 1
            if self._users[session_id] == 0:
                del self._users[session_id]
                del self._locks[session_id]


class ChatOrchestrator:
    """
    Drives the per-message exchange and the history events of a session.

    All collaborators are injected; the orchestrator holds no state of its
    own beyond the optional per-session locks.
    """

    def __init__(
        self,
        session_store: SessionStore,
        vector_index: VectorIndex,
        generator: ResponseGenerator,
        retrieval_limit: int = 3,
        history_turns: int = 3,
        serialize_sessions: bool = True,
    ):
        """
        Args:
            session_store: Conversation history backend
            vector_index: Article retrieval
            generator: Grounded response generation
            retrieval_limit: Articles retrieved per message
            history_turns: Most recent turns handed to the generator
            serialize_sessions: Process messages for one session one at a
                time within this process. Across processes the history
                store stays last-writer-wins.
        """
        self.session_store = session_store
        self.vector_index = vector_index
        self.generator = generator
        self.retrieval_limit = retrieval_limit
        self.history_turns = history_turns
        self._session_locks: Optional[SessionLocks] = SessionLocks() if serialize_sessions else None

    async def open_session(self, emit: Emit) -> str:
        """Assign a fresh session id to a new connection."""
        session_id = str(uuid.uuid4())
        await emit("session_initialized", {"sessionId": session_id})
        logger.info(f"Session initialized: {session_id}")
        return session_id

    async def dispatch(self, event: str, data: Any, emit: Emit) -> None:
        """Route one inbound channel event."""
        data = data if isinstance(data, dict) else {}

        if event == "send_message":
            await self.send_message(data.get("sessionId"), data.get("message"), emit)
        elif event == "get_chat_history":
            await self.get_chat_history(data.get("sessionId"), emit)
        elif event == "clear_history":
            await self.clear_history(data.get("sessionId"), emit)
        else:
            logger.warning(f"Unknown event: {event}")
            await emit("error", {"message": f"Unknown event: {event}"})

    @staticmethod
    def _validate(session_id: Any, message: Any) -> str:
        if not isinstance(session_id, str) or not session_id.strip():
            raise InvalidInput("sessionId is required")
        if not isinstance(message, str) or not message.strip():
            raise InvalidInput("Message cannot be empty")
        return message

    async def send_message(
        self, session_id: Optional[str], message: Optional[str], emit: Emit
    ) -> Optional[ConversationTurn]:
        """
        Run one full exchange for an inbound message.

        Returns:
            The delivered assistant turn, or None if the exchange failed
        """
        try:
            message = self._validate(session_id, message)
        except InvalidInput as e:
            logger.info(f"Rejected message for session {session_id}: {e}")
            await emit("error", {"message": str(e)})
            return None

        if self._session_locks is None:
            return await self._exchange(session_id, message, emit)

        async with self._session_locks.hold(session_id):
            return await self._exchange(session_id, message, emit)

    async def _exchange(self, session_id: str, message: str, emit: Emit) -> Optional[ConversationTurn]:
        logger.info(f"Message received from {session_id}: '{message[:50]}'")

        try:
            history = await self.session_store.get_history(session_id)
        except Exception as e:
            logger.error(f"Could not load history for {session_id}: {e}")
            await emit("error", {"message": f"Failed to process message: {e}"})
            return None

        history = list(history)
        history.append(ConversationTurn(role="user", content=message))

        await emit("bot_typing", {"typing": True})
        try:
            articles = await self.vector_index.search_similar(message, self.retrieval_limit)

            content = await self.generator.generate_response(
                message, articles, history[-self.history_turns :]
            )

            reply = ConversationTurn(role="assistant", content=content)
            history.append(reply)

            await self.session_store.store_history(session_id, history)

            await emit("receive_message", reply.model_dump())
            logger.info(f"Response sent to {session_id} ({len(articles)} articles)")
            return reply
        except NewsRagError as e:
            logger.error(f"Error processing message for {session_id}: {e}")
            await emit("error", {"message": f"Failed to process message: {e}"})
            return None
        except Exception as e:
            logger.exception(f"Unexpected error processing message for {session_id}")
            await emit("error", {"message": f"Failed to process message: {e}"})
            return None
        finally:
            await emit("bot_typing", {"typing": False})

    async def get_chat_history(self, session_id: Optional[str], emit: Emit) -> None:
        if not session_id:
            await emit("error", {"message": "sessionId is required"})
            return

        try:
            history = await self.session_store.get_history(session_id)
        except Exception as e:
            logger.error(f"Error getting chat history for {session_id}: {e}")
            await emit("error", {"message": "Failed to get chat history"})
            return

        await emit("chat_history", [turn.model_dump() for turn in history])
        logger.debug(f"History sent for session {session_id} ({len(history)} turns)")

    async def clear_history(self, session_id: Optional[str], emit: Emit) -> None:
        if not session_id:
            await emit("error", {"message": "sessionId is required"})
            return

        try:
            await self.session_store.clear_history(session_id)
        except Exception as e:
            logger.error(f"Error clearing history for {session_id}: {e}")
            await emit("error", {"message": "Failed to clear history"})
            return

        await emit("history_cleared", None)
