"""
Chat API endpoints
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docchat.core.database import get_db
from docchat.deps.exceptions import ChatFailedError, DocChatError, ProviderUnavailableError
from docchat.deps.llm_providers import TRANSPORT_ERRORS
from docchat.deps.utils import sanitize_api_key
from docchat.middleware.auth import get_current_user_id
from docchat.schemas.chat import ChatReply, ChatRequest, ChatResponse, ChatTurnListResponse, ChatTurnOut
from docchat.services.chat_sessions import ChatSessionService
from docchat.services.completion import config_for_user
from docchat.services.provider_settings import get_or_create_provider_config
from docchat.services.usage import record_usage

router = APIRouter()
logger = logging.getLogger(__name__)

CHAT_ENDPOINT = "/api/ai/chat"


@router.post("/ai/chat", response_model=ChatResponse)
def chat_endpoint(
    chat_request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Run one chat exchange: persist the user turn, ask the configured provider,
    persist the reply and record usage.

    Returns:
        ChatResponse with the assistant reply, token count and session id
    """
    start_time = time.time()
    session_id = str(chat_request.session_id) if chat_request.session_id else None
    document_id = str(chat_request.document_id) if chat_request.document_id else None
    logger.info(f"Chat request received: user={user_id} session_id={session_id} message_length={len(chat_request.message)}")

    api_key = None
    try:
        provider_config = get_or_create_provider_config(db, user_id)
        llm_config = config_for_user(provider_config)
        api_key = llm_config.api_key

        result = ChatSessionService(db).complete_exchange(
            user_id=user_id,
            session_id=session_id,
            user_content=chat_request.message,
            llm_config=llm_config,
            document_id=document_id,
        )
    except DocChatError as e:
        record_usage(db, user_id, CHAT_ENDPOINT, status="error", error_message=e.message)
        raise
    except TRANSPORT_ERRORS as e:
        message = sanitize_api_key(str(e), api_key) or type(e).__name__
        logger.error(f"LLM provider unreachable for user {user_id}: {message}")
        record_usage(db, user_id, CHAT_ENDPOINT, status="error", error_message=message)
        raise ProviderUnavailableError(message) from e
    except Exception as e:
        message = sanitize_api_key(str(e), api_key) or type(e).__name__
        logger.error(f"Chat request failed for user {user_id}: {message}")
        record_usage(db, user_id, CHAT_ENDPOINT, status="error", error_message=message)
        raise ChatFailedError(message) from e

    record_usage(db, user_id, CHAT_ENDPOINT, status="success", tokens_used=result.tokens_used)

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Chat request completed: session_id={result.session.id} tokens={result.tokens_used} latency_ms={latency_ms}")

    return ChatResponse(
        data=ChatReply(
            message=result.assistant_turn.content,
            tokens_used=result.tokens_used,
            session_id=result.session.id,
        )
    )


@router.get("/ai/chat/history", response_model=ChatTurnListResponse)
def chat_history(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Latest turns of the user across all sessions, oldest first"""
    turns = ChatSessionService(db).recent_history(user_id)
    return ChatTurnListResponse(data=[ChatTurnOut.model_validate(t) for t in turns])
