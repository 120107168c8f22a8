from motor.motor_asyncio import AsyncIOMotorCollection

from smart_shopper.core.config import settings
from smart_shopper.core.mongo import get_mongo_db
from smart_shopper.schemas.chat import ChatMessage, ChatRole


class ChatStore:
    """Append-only per-session message log"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def append(self, session_id: str, role: ChatRole, content: str) -> ChatMessage:
        message = ChatMessage(session_id=session_id, role=role, content=content)
        await self.collection.insert_one(message.model_dump())
        return message

    async def recent(self, session_id: str, limit: int) -> list[ChatMessage]:
        """Last `limit` messages of a session, oldest first"""
        cursor = (
            self.collection.find({"session_id": session_id}, {"_id": 0})
            .sort([("created_at", -1), ("_id", -1)])
            .limit(limit)
        )
        messages = [ChatMessage.model_validate(doc) async for doc in cursor]
        messages.reverse()
        return messages

    async def history(self, session_id: str) -> list[ChatMessage]:
        cursor = self.collection.find({"session_id": session_id}, {"_id": 0}).sort([("created_at", 1), ("_id", 1)])
        return [ChatMessage.model_validate(doc) async for doc in cursor]

    async def clear(self, session_id: str) -> int:
        result = await self.collection.delete_many({"session_id": session_id})
        return result.deleted_count


def get_chat_store() -> ChatStore:
    db = get_mongo_db()
    return ChatStore(db[settings.CHAT_MESSAGES_COLLECTION])
