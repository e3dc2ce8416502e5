from __future__ import annotations

from threading import Lock
from typing import Dict, Tuple

from inbox_assistant.chat.session import ChatSession
from inbox_assistant.llm.gateway import ModelGateway


class ChatSessionStore:
    """In-process chat sessions keyed by (user, session id); never persisted."""

    def __init__(self, gateway: ModelGateway) -> None:
        self._lock = Lock()
        self._gateway = gateway
        self._sessions: Dict[Tuple[str, str], ChatSession] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_or_create(self, user_id: str, session_id: str, user_name: str) -> ChatSession:
        # Lock ensures two concurrent first requests share one session.
        with self._lock:
            key = (user_id, session_id)
            session = self._sessions.get(key)
            if session is None:
                session = ChatSession(self._gateway, user_name=user_name)
                self._sessions[key] = session
            return session

    def discard(self, user_id: str, session_id: str) -> bool:
        """Drop a session and its history. Returns False if it did not exist."""
        with self._lock:
            return self._sessions.pop((user_id, session_id), None) is not None
