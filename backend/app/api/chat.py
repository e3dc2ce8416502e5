from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from backend.app.deps import CurrentUser, Services, current_user, get_services
from inbox_assistant.app.inbox import save_chat_draft
from inbox_assistant.chat.session import ChatSession, TurnResult
from inbox_assistant.config.logging import get_logger
from inbox_assistant.models import DraftView, EmailContext, Message, Role
from inbox_assistant.parsing.draft import extract_draft

router = APIRouter()
logger = get_logger(__name__)


class ChatMessageRequest(BaseModel):
    message: str


class ContextRequest(BaseModel):
    # None unbinds the current email.
    email_id: Optional[str] = None


class SaveDraftRequest(BaseModel):
    index: int
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


def _message_payload(message: Message) -> dict[str, Any]:
    # Works on a history snapshot; a concurrent clear() cannot invalidate it.
    draft = extract_draft(message.text) if message.role is Role.AGENT else None
    return {
        "role": message.role.value,
        "text": message.text,
        "draft": {"subject": draft.subject, "body": draft.body} if draft else None,
    }


def _session_payload(session: ChatSession) -> dict[str, Any]:
    context = session.context
    return {
        "state": session.state.value,
        "context": (
            {"sender_email": context.sender_email, "subject": context.subject} if context else None
        ),
        "messages": [_message_payload(message) for message in session.history],
    }


def _turn_payload(turn: TurnResult) -> dict[str, Any]:
    return {
        "reply": turn.reply.text,
        "short_circuited": turn.short_circuited,
        "draft": {"subject": turn.draft.subject, "body": turn.draft.body} if turn.draft else None,
    }


def _session(services: Services, user: CurrentUser, session_id: str) -> ChatSession:
    return services.sessions.get_or_create(user.id, session_id, user.name)


@router.get("/chat/{session_id}")
def get_session(
    session_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    return {"ok": True, "session": _session_payload(_session(services, user, session_id))}


@router.post("/chat/{session_id}/messages")
def send_message(
    session_id: str,
    payload: ChatMessageRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    session = _session(services, user, session_id)
    logger.info(
        "Chat request: session=%s has_context=%s history=%d",
        session_id,
        session.context is not None,
        len(session.history),
    )
    # EmptyMessageError is mapped to 400 by the app.
    turn = session.submit(payload.message)
    if turn is None:
        return {"ok": True, "ignored": True}
    return {"ok": True, "ignored": False, **_turn_payload(turn)}


@router.put("/chat/{session_id}/context")
def bind_context(
    session_id: str,
    payload: ContextRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    session = _session(services, user, session_id)
    if payload.email_id is None:
        session.bind_context(None)
        return {"ok": True, "context": None}

    email = services.storage.emails.get(user.id, payload.email_id)
    if email is None:
        raise HTTPException(status_code=404, detail=f"Email not found: {payload.email_id}")
    session.bind_context(EmailContext.from_email(email))
    return {"ok": True, "context": {"email_id": email.id, "subject": email.subject}}


@router.post("/chat/{session_id}/clear")
def clear_session(
    session_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    cleared = _session(services, user, session_id).clear()
    return {"ok": True, "cleared": cleared}


@router.post("/chat/{session_id}/drafts")
def save_draft(
    session_id: str,
    payload: SaveDraftRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    session = _session(services, user, session_id)
    try:
        view = session.draft_at(payload.index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=f"No message at index {payload.index}") from exc
    if view is None:
        raise HTTPException(status_code=400, detail="Message does not contain a draft.")

    # Draft views are editable before saving.
    edited = DraftView(
        subject=view.subject if payload.subject is None else payload.subject,
        body=view.body if payload.body is None else payload.body,
    )
    draft = save_chat_draft(user.id, services.storage, edited, context=session.context, to=payload.to)
    return {"ok": True, "draft": draft.to_dict()}


@router.delete("/chat/{session_id}")
def delete_session(
    session_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    deleted = services.sessions.discard(user.id, session_id)
    return {"ok": True, "deleted": deleted}
