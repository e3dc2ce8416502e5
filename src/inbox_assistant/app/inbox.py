# src/inbox_assistant/app/inbox.py
from __future__ import annotations

import json
import time
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Optional

from inbox_assistant.config.logging import get_logger
from inbox_assistant.config.paths import MOCK_EMAILS_PATH
from inbox_assistant.llm.gateway import REPLY_FALLBACK, ModelGateway
from inbox_assistant.models import Draft, DraftMeta, DraftView, Email, EmailContext, ReservedPromptType
from inbox_assistant.parsing.draft import as_reply_subject, extract_draft
from inbox_assistant.prompts.defaults import AUTO_REPLY_FALLBACK, DEFAULT_PROMPTS
from inbox_assistant.storage.records import RecordNotFoundError, Storage, utc_now

logger = get_logger(__name__)


class ReplyGenerationError(RuntimeError):
    """Raised when the model could not produce a reply to save."""


def load_mock_inbox(user_id: str, storage: Storage, *, source: Path = MOCK_EMAILS_PATH) -> int:
    """
    Copy the bundled mock inbox into the user's store and seed default prompts.
    Ids get a per-load suffix so loading twice does not overwrite earlier copies.
    """
    raw = json.loads(source.read_text(encoding="utf-8"))
    suffix = str(int(time.time() * 1000))
    count = 0
    for item in raw:
        email = Email.from_dict(item)
        storage.emails.save(user_id, replace(email, id=f"{email.id}_{suffix}"))
        count += 1

    storage.prompts.ensure_defaults(user_id, DEFAULT_PROMPTS)
    logger.info("Loaded %d mock emails for %s", count, user_id)
    return count


def clear_inbox(user_id: str, storage: Storage) -> int:
    removed = storage.emails.clear(user_id)
    logger.info("Cleared %d emails for %s", removed, user_id)
    return removed


def new_draft(
    *,
    subject: str,
    body: str,
    to: str = "",
    email_id: Optional[str] = None,
    meta: Optional[DraftMeta] = None,
    draft_id: Optional[str] = None,
    created_at: Optional[str] = None,
) -> Draft:
    now = utc_now()
    return Draft(
        id=draft_id or str(uuid.uuid4()),
        email_id=email_id,
        to=to,
        subject=subject,
        body=body,
        created_at=created_at or now,
        updated_at=now,
        meta=meta or DraftMeta(),
    )


def save_chat_draft(
    user_id: str,
    storage: Storage,
    view: DraftView,
    *,
    context: Optional[EmailContext] = None,
    email_id: Optional[str] = None,
    to: Optional[str] = None,
) -> Draft:
    """Persist an (optionally edited) draft view produced in the chat."""
    meta = DraftMeta(
        generation_context="chat",
        original_sender=context.sender_email if context else None,
        original_subject=context.subject if context else None,
    )
    recipient = to if to is not None else (context.sender_email if context else "")
    draft = new_draft(subject=view.subject, body=view.body, to=recipient, email_id=email_id, meta=meta)
    storage.drafts.save(user_id, draft)
    return draft


def draft_reply(user_id: str, email_id: str, storage: Storage, gateway: ModelGateway) -> Draft:
    """Generate an auto-reply for one email with the user's auto_reply template and save it."""
    email = storage.emails.get(user_id, email_id)
    if email is None:
        raise RecordNotFoundError(email_id)

    template = storage.prompts.content_for(user_id, ReservedPromptType.AUTO_REPLY, AUTO_REPLY_FALLBACK)
    text = gateway.generate_reply(email.content_for_model(), template)
    if not text.strip() or text == REPLY_FALLBACK:
        raise ReplyGenerationError(f"Could not generate a reply for {email_id}")

    view = extract_draft(text)
    if view is None:
        # Model ignored the Subject: contract; keep its text as the body.
        view = DraftView(subject=as_reply_subject(email.subject), body=text.strip())

    meta = DraftMeta(
        generation_context="auto",
        original_sender=email.sender.email,
        original_subject=email.subject,
    )
    draft = new_draft(
        subject=view.subject,
        body=view.body,
        to=email.sender.email,
        email_id=email.id,
        meta=meta,
    )
    storage.drafts.save(user_id, draft)
    return draft
