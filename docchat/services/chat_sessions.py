"""
Chat session service: conversation lifecycle, transcripts and chat exchanges
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from docchat.core.config import settings
from docchat.deps.exceptions import SessionNotFoundError
from docchat.deps.llm_providers import LLMConfig
from docchat.models.chat_history import ChatSession, ChatTurn, DEFAULT_SESSION_TITLE, utcnow
from docchat.services.completion import generate_chat_completion

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
TITLE_ELLIPSIS = "..."


def derive_title(message: str) -> str:
    """Title for a session taken from its first user message"""
    if len(message) > TITLE_MAX_LENGTH:
        return message[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return message


@dataclass
class ExchangeResult:
    """Outcome of a completed chat exchange"""
    session: ChatSession
    user_turn: ChatTurn
    assistant_turn: ChatTurn
    tokens_used: int


class ChatSessionService:
    """
    Owns the conversation lifecycle for one request-scoped database session.

    Every operation takes the caller's user id and re-checks ownership; a
    session owned by someone else is reported exactly like a missing one.
    """

    def __init__(self, db: Session, system_prompt: Optional[str] = None):
        self.db = db
        self.system_prompt = system_prompt or settings.chat_system_prompt

    def _get_owned_session(self, user_id: str, session_id: str, include_deleted: bool = False) -> ChatSession:
        query = self.db.query(ChatSession).filter(
            ChatSession.id == session_id,
            ChatSession.user_id == user_id,
        )
        if not include_deleted:
            query = query.filter(ChatSession.deleted_at.is_(None))

        session = query.first()
        if session is None:
            logger.info(f"Session {session_id} not found for user {user_id}")
            raise SessionNotFoundError()
        return session

    def create_session(self, user_id: str, title: Optional[str] = None) -> ChatSession:
        session = ChatSession(user_id=user_id, title=title or DEFAULT_SESSION_TITLE)
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Created chat session {session.id} for user {user_id}")
        return session

    def append_user_turn(self, session: ChatSession, content: str, document_id: Optional[str] = None) -> ChatTurn:
        """Persist a user turn; freshness is bumped once the exchange completes"""
        turn = ChatTurn(
            session_id=session.id,
            user_id=session.user_id,
            document_id=document_id,
            role="user",
            content=content,
        )
        self.db.add(turn)
        self.db.commit()
        self.db.refresh(turn)
        return turn

    def _append_assistant_turn(self, session: ChatSession, content: str, tokens_used: int,
                               document_id: Optional[str] = None) -> ChatTurn:
        turn = ChatTurn(
            session_id=session.id,
            user_id=session.user_id,
            document_id=document_id,
            role="assistant",
            content=content,
            tokens_used=tokens_used or None,
        )
        self.db.add(turn)
        return turn

    def complete_exchange(
        self,
        user_id: str,
        session_id: Optional[str],
        user_content: str,
        llm_config: LLMConfig,
        document_id: Optional[str] = None,
    ) -> ExchangeResult:
        """
        Run one user/assistant round in a session.

        The user turn is committed before the provider call and is kept when
        the call fails; in that case no assistant turn is written and the
        provider error propagates. A missing session_id starts a new session.

        Args:
            user_id: Caller identity
            session_id: Active session owned by the caller, or None
            user_content: The user's message
            llm_config: Resolved provider configuration
            document_id: Optional source document reference

        Returns:
            ExchangeResult with both turns and the reported token count
        """
        if session_id is None:
            session = self.create_session(user_id)
        else:
            session = self._get_owned_session(user_id, session_id)

        user_turn = self.append_user_turn(session, user_content, document_id)

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": user_content},
        ]
        result = generate_chat_completion(messages, llm_config)

        try:
            assistant_turn = self._append_assistant_turn(session, result.content, result.tokens_used, document_id)

            if session.title == DEFAULT_SESSION_TITLE:
                session.title = derive_title(user_content)
            session.updated_at = utcnow()

            self.db.commit()
            self.db.refresh(assistant_turn)
            self.db.refresh(session)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Completed exchange in session {session.id}: tokens={result.tokens_used}")
        return ExchangeResult(
            session=session,
            user_turn=user_turn,
            assistant_turn=assistant_turn,
            tokens_used=result.tokens_used,
        )

    def list_sessions(self, user_id: str) -> List[ChatSession]:
        """Active sessions of a user, most recently active first"""
        return (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == user_id, ChatSession.deleted_at.is_(None))
            .order_by(ChatSession.updated_at.desc())
            .all()
        )

    def get_transcript(self, user_id: str, session_id: str) -> List[ChatTurn]:
        """Turns of an owned session in creation order (soft-deleted sessions stay readable)"""
        session = self._get_owned_session(user_id, session_id, include_deleted=True)
        return (
            self.db.query(ChatTurn)
            .filter(ChatTurn.session_id == session.id)
            .order_by(ChatTurn.created_at.asc(), ChatTurn.id.asc())
            .all()
        )

    def rename_session(self, user_id: str, session_id: str, title: str) -> ChatSession:
        """Overwrite the title; a renamed session is never auto-titled again"""
        session = self._get_owned_session(user_id, session_id)
        session.title = title
        session.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Renamed session {session_id}")
        return session

    def soft_delete_session(self, user_id: str, session_id: str) -> ChatSession:
        session = self._get_owned_session(user_id, session_id, include_deleted=True)
        if session.deleted_at is None:
            session.deleted_at = utcnow()
            self.db.commit()
            self.db.refresh(session)
            logger.info(f"Soft-deleted session {session_id}")
        return session

    def recent_history(self, user_id: str, limit: Optional[int] = None) -> List[ChatTurn]:
        """Latest turns of a user across sessions, returned oldest first"""
        turns = (
            self.db.query(ChatTurn)
            .filter(ChatTurn.user_id == user_id)
            .order_by(ChatTurn.created_at.desc(), ChatTurn.id.desc())
            .limit(limit or settings.history_limit)
            .all()
        )
        return list(reversed(turns))
