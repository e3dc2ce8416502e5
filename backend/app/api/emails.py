# backend/app/api/emails.py
from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from backend.app.deps import CurrentUser, Services, current_user, get_services
from inbox_assistant.app.inbox import ReplyGenerationError, clear_inbox, draft_reply, load_mock_inbox
from inbox_assistant.config.logging import get_logger
from inbox_assistant.pipeline.processor import process_inbox

router = APIRouter()
logger = get_logger(__name__)


@router.get("/emails")
def list_emails(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    emails = services.storage.emails.list(user.id)
    return {"ok": True, "emails": [e.to_dict() for e in emails]}


@router.get("/emails/{email_id}")
def get_email(
    email_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    email = services.storage.emails.get(user.id, email_id)
    if email is None:
        raise HTTPException(status_code=404, detail=f"Email not found: {email_id}")
    return {"ok": True, "email": email.to_dict()}


@router.post("/emails/load")
def load_emails(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    count = load_mock_inbox(user.id, services.storage)
    return {"ok": True, "count": count}


@router.post("/emails/clear")
def clear_emails(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    removed = clear_inbox(user.id, services.storage)
    return {"ok": True, "removed": removed}


@router.post("/emails/process")
async def process_emails_endpoint(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    # Model calls block; run them in a worker thread so FastAPI stays responsive.
    summary = await run_in_threadpool(process_inbox, user.id, services.storage, services.gateway)
    return {"ok": True, **summary.to_dict()}


@router.post("/emails/{email_id}/reply")
def generate_reply(
    email_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict:
    try:
        draft = draft_reply(user.id, email_id, services.storage, services.gateway)
    except ReplyGenerationError as exc:
        logger.warning("Auto-reply failed for %s: %s", email_id, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"ok": True, "draft": draft.to_dict()}
