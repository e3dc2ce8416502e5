from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from backend.app.deps import CurrentUser, Services, current_user, get_services
from inbox_assistant.models import is_reserved, parse_prompt_type
from inbox_assistant.prompts.defaults import DEFAULT_PROMPTS
from inbox_assistant.storage.records import ReservedPromptError

router = APIRouter()


class PromptRequest(BaseModel):
    # With an id this updates (and may rename) an existing prompt.
    id: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None


@router.get("/prompts")
def list_prompts(
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    prompts = services.storage.prompts.ensure_defaults(user.id, DEFAULT_PROMPTS)
    return {
        "ok": True,
        "prompts": [dict(p.to_dict(), reserved=is_reserved(p.type)) for p in prompts],
    }


@router.post("/prompts")
def save_prompt(
    payload: PromptRequest,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    prompts = services.storage.prompts
    prompt_type = parse_prompt_type(payload.type) if payload.type else None

    if payload.id:
        prompt = prompts.update(
            user.id,
            payload.id,
            content=payload.content,
            description=payload.description,
            prompt_type=prompt_type,
        )
        return {"ok": True, "prompt": prompt.to_dict()}

    if prompt_type is None:
        raise HTTPException(status_code=400, detail="Type is required for new prompts")
    if is_reserved(prompt_type) and prompts.get_by_type(user.id, prompt_type) is not None:
        raise ReservedPromptError(f"Prompt {prompt_type.value!r} already exists")
    prompt = prompts.create(
        user.id,
        prompt_type=prompt_type,
        content=payload.content or "",
        description=payload.description or "",
    )
    return {"ok": True, "prompt": prompt.to_dict()}


@router.delete("/prompts/{prompt_id}")
def delete_prompt(
    prompt_id: str,
    user: CurrentUser = Depends(current_user),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    services.storage.prompts.delete(user.id, prompt_id)
    return {"ok": True}
