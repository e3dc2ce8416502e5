from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request

from backend.app.sessions import ChatSessionStore
from inbox_assistant.config.settings import DEFAULT_USER_NAME
from inbox_assistant.llm.gateway import ModelGateway
from inbox_assistant.storage.records import Storage


@dataclass(frozen=True)
class Services:
    storage: Storage
    gateway: ModelGateway
    sessions: ChatSessionStore


@dataclass(frozen=True)
class CurrentUser:
    # The email address is the only per-user storage key.
    id: str
    name: str


def get_services(request: Request) -> Services:
    return request.app.state.services


def current_user(
    x_user_email: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
) -> CurrentUser:
    email = (x_user_email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return CurrentUser(id=email, name=(x_user_name or "").strip() or DEFAULT_USER_NAME)
