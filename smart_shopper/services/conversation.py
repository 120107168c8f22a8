import asyncio
import logging
import uuid
from dataclasses import dataclass

from smart_shopper.core.config import settings
from smart_shopper.services.chat_store import ChatStore
from smart_shopper.services.llm_service import LLMService

logger = logging.getLogger(__name__)


@dataclass
class ConversationTurn:
    session_id: str
    user_message: str
    ai_response: str


class ConversationService:
    """Persistent multi-turn chat: history in, reply out, both sides logged"""

    def __init__(self, chat_store: ChatStore, llm_service: LLMService, history_limit: int | None = None):
        self.chat_store = chat_store
        self.llm_service = llm_service
        self.history_limit = history_limit or settings.CONVERSATION_HISTORY_LIMIT

    async def converse(self, message: str, session_id: str | None = None) -> ConversationTurn:
        session_id = session_id or str(uuid.uuid4())

        history = await self.chat_store.recent(session_id, self.history_limit)
        await self.chat_store.append(session_id, "user", message)

        ai_response = await asyncio.to_thread(self.llm_service.chat_reply, message, history)
        await self.chat_store.append(session_id, "assistant", ai_response)

        logger.info(f"Conversation {session_id}: replied with {len(history)} messages of history")
        return ConversationTurn(session_id=session_id, user_message=message, ai_response=ai_response)
