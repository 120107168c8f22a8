import asyncio
import logging

from fastapi import APIRouter, Depends

from smart_shopper.core.dependencies import get_conversation_service
from smart_shopper.schemas.base import Envelope
from smart_shopper.schemas.chat import (
    ClearedData,
    ConnectionData,
    ConversationData,
    HistoryData,
    HistoryMessage,
    MessageRequest,
    SimpleChatData,
)
from smart_shopper.services.chat_store import ChatStore, get_chat_store
from smart_shopper.services.conversation import ConversationService
from smart_shopper.services.llm_service import LLMService, get_llm_service

router = APIRouter(prefix="/chat", tags=["Chat"])
logger = logging.getLogger(__name__)


@router.post("/simple", response_model=Envelope[SimpleChatData])
async def simple_chat(request: MessageRequest, llm_service: LLMService = Depends(get_llm_service)):
    """One-shot reply with no history"""
    logger.info(f"Simple chat request: '{request.message}'")
    ai_response = await asyncio.to_thread(llm_service.chat_reply, request.message)
    return Envelope(data=SimpleChatData(user_message=request.message, ai_response=ai_response))


@router.get("/test-openai", response_model=Envelope[ConnectionData])
async def test_openai(llm_service: LLMService = Depends(get_llm_service)):
    connected = await asyncio.to_thread(llm_service.test_connection)
    message = "OpenAI API working!" if connected else "OpenAI API connection failed"
    return Envelope(data=ConnectionData(connected=connected, message=message))


@router.post("/conversation", response_model=Envelope[ConversationData])
async def conversation(
    request: MessageRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    """
    Multi-turn chat.

    A session id is generated when none is sent; both the user message and
    the reply are stored, and the last messages of the session are sent to
    the model as context.
    """
    turn = await service.converse(request.message, request.session_id)
    return Envelope(
        data=ConversationData(
            session_id=turn.session_id,
            user_message=turn.user_message,
            ai_response=turn.ai_response,
        )
    )


@router.get("/history/{session_id}", response_model=Envelope[HistoryData])
async def conversation_history(session_id: str, chat_store: ChatStore = Depends(get_chat_store)):
    messages = await chat_store.history(session_id)
    return Envelope(
        data=HistoryData(
            session_id=session_id,
            messages=[HistoryMessage(role=m.role, content=m.content, timestamp=m.created_at) for m in messages],
        )
    )


@router.delete("/conversation/{session_id}", response_model=Envelope[ClearedData])
async def clear_conversation(session_id: str, chat_store: ChatStore = Depends(get_chat_store)):
    deleted = await chat_store.clear(session_id)
    logger.info(f"Cleared {deleted} messages for session {session_id}")
    return Envelope(data=ClearedData(session_id=session_id, deleted_count=deleted))
