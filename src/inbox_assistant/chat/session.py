from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import List, Optional, Tuple

from inbox_assistant.chat.intent import CONTEXT_MISSING_REPLY, classify_intent
from inbox_assistant.chat.prompting import augment_prompt, build_system_context
from inbox_assistant.config.logging import get_logger
from inbox_assistant.config.settings import DEFAULT_USER_NAME
from inbox_assistant.llm.gateway import CHAT_FALLBACK, ModelGateway
from inbox_assistant.models import DraftView, EmailContext, Message, Role
from inbox_assistant.parsing.draft import extract_draft

logger = get_logger(__name__)


class EmptyMessageError(ValueError):
    """Raised when a blank utterance is submitted."""


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"


@dataclass(frozen=True)
class TurnResult:
    user_message: Message
    reply: Message
    draft: Optional[DraftView]
    # True when the reply was scripted locally and the model was never called.
    short_circuited: bool = False


@dataclass(frozen=True)
class PendingTurn:
    system_context: str
    history: Tuple[Message, ...]
    outgoing: str


class ChatSession:
    """
    One conversation: idle -> awaiting (model call in flight) -> idle.

    History is appended optimistically: the user turn is recorded before the
    model answers, and the agent turn (real reply or fallback) on resolve.
    """

    def __init__(self, gateway: ModelGateway, user_name: str = DEFAULT_USER_NAME) -> None:
        self._gateway = gateway
        self._user_name = user_name or DEFAULT_USER_NAME
        self._lock = Lock()
        self._state = SessionState.IDLE
        self._history: List[Message] = []
        self._context: Optional[EmailContext] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def history(self) -> List[Message]:
        # Return a copy to avoid mutation by callers.
        with self._lock:
            return list(self._history)

    @property
    def context(self) -> Optional[EmailContext]:
        return self._context

    def bind_context(self, context: Optional[EmailContext]) -> None:
        # Allowed while awaiting; only later model calls see the new email.
        with self._lock:
            self._context = context

    def clear(self) -> bool:
        with self._lock:
            if self._state is not SessionState.IDLE:
                logger.info("Ignoring clear while a reply is pending")
                return False
            self._history = []
            return True

    def submit(self, utterance: str) -> Optional[TurnResult]:
        """
        Run one turn. Returns None (and changes nothing) if a turn is already
        in flight. Raises EmptyMessageError for blank input.
        """
        if not (utterance or "").strip():
            raise EmptyMessageError("Message is required")

        with self._lock:
            if self._state is not SessionState.IDLE:
                logger.info("Ignoring submit while a reply is pending")
                return None

            user_message = Message(role=Role.USER, text=utterance)
            intent = classify_intent(utterance)

            if intent.context_dependent and self._context is None:
                reply = Message(role=Role.AGENT, text=CONTEXT_MISSING_REPLY)
                self._history.extend([user_message, reply])
                return TurnResult(user_message=user_message, reply=reply, draft=None, short_circuited=True)

            pending = PendingTurn(
                system_context=build_system_context(self._context, self._user_name),
                history=tuple(self._history),
                outgoing=augment_prompt(utterance, intent.draft_requested, self._user_name),
            )
            self._history.append(user_message)
            self._state = SessionState.AWAITING

        try:
            reply_text = self._gateway.send(pending.system_context, pending.history, pending.outgoing)
        except Exception as exc:
            # Gateways are expected to swallow errors; keep history consistent if one does not.
            logger.error("Gateway raised during chat: %s: %s", type(exc).__name__, exc)
            reply_text = ""
        return self._resolve(user_message, reply_text)

    def _resolve(self, user_message: Message, reply_text: str) -> TurnResult:
        reply = Message(role=Role.AGENT, text=reply_text or CHAT_FALLBACK)
        with self._lock:
            self._history.append(reply)
            self._state = SessionState.IDLE
        return TurnResult(user_message=user_message, reply=reply, draft=extract_draft(reply.text))

    def draft_at(self, index: int) -> Optional[DraftView]:
        with self._lock:
            if index < 0 or index >= len(self._history):
                raise IndexError(index)
            message = self._history[index]
        if message.role is not Role.AGENT:
            return None
        return extract_draft(message.text)
