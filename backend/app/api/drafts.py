from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.app.deps import CurrentUser, Services, current_user, get_services
from inbox_assistant.app.inbox import new_draft
from inbox_assistant.models import DraftMeta

router = APIRouter()


class DraftMetaPayload(BaseModel):
    generation_context: str = "manual"
    original_sender: Optional[str] = None
    original_subject: Optional[str] = None
    suggested_follow_up: Optional[str] = None


class DraftCreateRequest(BaseModel):
    id: Optional[str] = None
    email_id: Optional[str] = None
    to: str = ""
    subject: str = ""
    body: str = ""
    created_at: Optional[str] = None
    meta: Optional[DraftMetaPayload] = None


class DraftUpdateRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


@router.get("/drafts")
def list_drafts(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    drafts = services.storage.drafts.list(user.id)
    return {"ok": True, "drafts": [d.to_dict() for d in drafts]}


@router.post("/drafts")
def create_draft(
    payload: DraftCreateRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    meta = DraftMeta(**payload.meta.model_dump()) if payload.meta else DraftMeta()
    # Saving with an existing id overwrites that draft (last write wins).
    draft = new_draft(
        subject=payload.subject,
        body=payload.body,
        to=payload.to,
        email_id=payload.email_id,
        meta=meta,
        draft_id=payload.id,
        created_at=payload.created_at,
    )
    services.storage.drafts.save(user.id, draft)
    return {"ok": True, "draft": draft.to_dict()}


@router.put("/drafts/{draft_id}")
def update_draft(
    draft_id: str,
    payload: DraftUpdateRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    changes = payload.model_dump(exclude_none=True)
    draft = services.storage.drafts.update(user.id, draft_id, **changes)
    return {"ok": True, "draft": draft.to_dict()}


@router.delete("/drafts/{draft_id}")
def delete_draft(
    draft_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    services.storage.drafts.delete(user.id, draft_id)
    return {"ok": True}
