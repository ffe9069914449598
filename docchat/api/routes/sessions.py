"""
Chat session API endpoints
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docchat.core.database import get_db
from docchat.middleware.auth import get_current_user_id
from docchat.schemas.chat import ChatTurnListResponse, ChatTurnOut
from docchat.schemas.sessions import (
    MessageResponse,
    SessionCreate,
    SessionListResponse,
    SessionOut,
    SessionRename,
    SessionResponse,
)
from docchat.services.chat_sessions import ChatSessionService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/chat/sessions", response_model=SessionListResponse)
def list_sessions(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    sessions = ChatSessionService(db).list_sessions(user_id)
    return SessionListResponse(data=[SessionOut.model_validate(s) for s in sessions])


@router.post("/chat/sessions", response_model=SessionResponse)
def create_session(
    payload: SessionCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    session = ChatSessionService(db).create_session(user_id, payload.title)
    return SessionResponse(data=SessionOut.model_validate(session))


@router.patch("/chat/sessions/{session_id}", response_model=SessionResponse)
def rename_session(
    session_id: UUID,
    payload: SessionRename,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    session = ChatSessionService(db).rename_session(user_id, str(session_id), payload.title)
    return SessionResponse(data=SessionOut.model_validate(session))


@router.delete("/chat/sessions/{session_id}", response_model=MessageResponse)
def delete_session(
    session_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Soft delete: the session disappears from listings, its turns are kept"""
    ChatSessionService(db).soft_delete_session(user_id, str(session_id))
    return MessageResponse(message="Session deleted")


@router.get("/chat/sessions/{session_id}/messages", response_model=ChatTurnListResponse)
def session_messages(
    session_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    turns = ChatSessionService(db).get_transcript(user_id, str(session_id))
    return ChatTurnListResponse(data=[ChatTurnOut.model_validate(t) for t in turns])
