from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from inbox_assistant.config.logging import get_logger
from inbox_assistant.models import (
    Draft,
    Email,
    Prompt,
    PromptType,
    ReservedPromptType,
    is_reserved,
    parse_prompt_type,
)

logger = get_logger(__name__)

# Ids become path segments; allow email addresses but nothing that walks directories.
_SAFE_ID = re.compile(r"^[A-Za-z0-9@._+-]+$")


class RecordNotFoundError(KeyError):
    """Raised when updating a record that does not exist."""


class ReservedPromptError(ValueError):
    """Raised when a reserved prompt would be deleted or renamed."""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _checked_id(value: str, what: str) -> str:
    if not value or value in {".", ".."} or not _SAFE_ID.match(value):
        raise ValueError(f"Invalid {what}: {value!r}")
    return value


class JsonRecordStore:
    """
    One JSON file per record under <root>/users/<user_id>/<kind>/<id>.json.
    Every mutation rewrites the whole file; last write wins.
    """

    def __init__(self, root: Path, kind: str) -> None:
        self._root = root
        self._kind = kind

    def _user_dir(self, user_id: str) -> Path:
        return self._root / "users" / _checked_id(user_id, "user id") / self._kind

    def _path(self, user_id: str, record_id: str) -> Path:
        return self._user_dir(user_id) / f"{_checked_id(record_id, 'record id')}.json"

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        directory = self._user_dir(user_id)
        if not directory.exists():
            return []
        records: List[Dict[str, Any]] = []
        for path in sorted(directory.glob("*.json")):
            record = self._read(path)
            if record is not None:
                records.append(record)
        return records

    def get(self, user_id: str, record_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(user_id, record_id)
        if not path.exists():
            return None
        return self._read(path)

    def put(self, user_id: str, record: Dict[str, Any]) -> None:
        path = self._path(user_id, str(record["id"]))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Wrote %s record %s", self._kind, path)

    def delete(self, user_id: str, record_id: str) -> None:
        path = self._path(user_id, record_id)
        # Deleting a missing record is not an error.
        path.unlink(missing_ok=True)

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Skipping unreadable %s record %s: %s", self._kind, path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Skipping malformed %s record %s", self._kind, path)
            return None
        return data


class EmailRepository:
    def __init__(self, store: JsonRecordStore) -> None:
        self._store = store

    def list(self, user_id: str) -> List[Email]:
        emails = [_load(Email, record) for record in self._store.list(user_id)]
        # Newest first; ISO timestamps sort lexically.
        return sorted((e for e in emails if e), key=lambda e: e.timestamp, reverse=True)

    def get(self, user_id: str, email_id: str) -> Optional[Email]:
        record = self._store.get(user_id, email_id)
        return _load(Email, record) if record else None

    def save(self, user_id: str, email: Email) -> None:
        self._store.put(user_id, email.to_dict())

    def update(self, user_id: str, email_id: str, **changes: Any) -> Email:
        email = self.get(user_id, email_id)
        if email is None:
            raise RecordNotFoundError(email_id)
        updated = replace(email, **changes)
        self.save(user_id, updated)
        return updated

    def delete(self, user_id: str, email_id: str) -> None:
        self._store.delete(user_id, email_id)

    def clear(self, user_id: str) -> int:
        emails = self.list(user_id)
        for email in emails:
            self.delete(user_id, email.id)
        return len(emails)


class DraftRepository:
    def __init__(self, store: JsonRecordStore) -> None:
        self._store = store

    def list(self, user_id: str) -> List[Draft]:
        drafts = [_load(Draft, record) for record in self._store.list(user_id)]
        return sorted((d for d in drafts if d), key=lambda d: d.updated_at, reverse=True)

    def get(self, user_id: str, draft_id: str) -> Optional[Draft]:
        record = self._store.get(user_id, draft_id)
        return _load(Draft, record) if record else None

    def save(self, user_id: str, draft: Draft) -> None:
        self._store.put(user_id, draft.to_dict())

    def update(self, user_id: str, draft_id: str, **changes: Any) -> Draft:
        draft = self.get(user_id, draft_id)
        if draft is None:
            raise RecordNotFoundError(draft_id)
        updated = replace(draft, updated_at=utc_now(), **changes)
        self.save(user_id, updated)
        return updated

    def delete(self, user_id: str, draft_id: str) -> None:
        self._store.delete(user_id, draft_id)


class PromptRepository:
    def __init__(self, store: JsonRecordStore) -> None:
        self._store = store

    def list(self, user_id: str) -> List[Prompt]:
        prompts = [_load(Prompt, record) for record in self._store.list(user_id)]
        return [p for p in prompts if p]

    def get(self, user_id: str, prompt_id: str) -> Optional[Prompt]:
        record = self._store.get(user_id, prompt_id)
        return _load(Prompt, record) if record else None

    def get_by_type(self, user_id: str, prompt_type: PromptType) -> Optional[Prompt]:
        for prompt in self.list(user_id):
            if prompt.type == prompt_type:
                return prompt
        return None

    def content_for(self, user_id: str, prompt_type: ReservedPromptType, fallback: str) -> str:
        prompt = self.get_by_type(user_id, prompt_type)
        return prompt.content if prompt and prompt.content else fallback

    def create(
        self, user_id: str, *, prompt_type: PromptType, content: str, description: str = ""
    ) -> Prompt:
        prompt = Prompt(
            id=str(uuid.uuid4()),
            type=prompt_type,
            content=content,
            description=description,
            updated_at=utc_now(),
        )
        self._store.put(user_id, prompt.to_dict())
        return prompt

    def update(
        self,
        user_id: str,
        prompt_id: str,
        *,
        content: Optional[str] = None,
        description: Optional[str] = None,
        prompt_type: Optional[PromptType] = None,
    ) -> Prompt:
        prompt = self.get(user_id, prompt_id)
        if prompt is None:
            raise RecordNotFoundError(prompt_id)

        new_type = prompt.type
        if prompt_type is not None and prompt_type != prompt.type:
            if is_reserved(prompt.type):
                raise ReservedPromptError(f"Prompt {prompt.type.value!r} cannot be renamed")
            if is_reserved(prompt_type):
                raise ReservedPromptError(f"Type {prompt_type.value!r} is reserved")
            new_type = prompt_type

        updated = replace(
            prompt,
            type=new_type,
            content=prompt.content if content is None else content,
            description=prompt.description if description is None else description,
            updated_at=utc_now(),
        )
        self._store.put(user_id, updated.to_dict())
        return updated

    def delete(self, user_id: str, prompt_id: str) -> None:
        prompt = self.get(user_id, prompt_id)
        if prompt is not None and is_reserved(prompt.type):
            raise ReservedPromptError(f"Prompt {prompt.type.value!r} cannot be deleted")
        self._store.delete(user_id, prompt_id)

    def ensure_defaults(self, user_id: str, defaults: List[Dict[str, str]]) -> List[Prompt]:
        existing = self.list(user_id)
        if existing:
            return existing
        logger.info("Seeding %d default prompts for %s", len(defaults), user_id)
        for item in defaults:
            self.create(
                user_id,
                prompt_type=parse_prompt_type(item["type"]),
                content=item.get("content", ""),
                description=item.get("description", ""),
            )
        return self.list(user_id)


def _load(model: Any, record: Dict[str, Any]) -> Any:
    # Keep load resilient: a single broken record must not hide the rest.
    try:
        return model.from_dict(record)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Skipping invalid %s record %r: %s", model.__name__, record.get("id"), exc)
        return None


@dataclass(frozen=True)
class Storage:
    emails: EmailRepository
    drafts: DraftRepository
    prompts: PromptRepository


def open_storage(data_dir: Path) -> Storage:
    """Build the per-process storage service; callers pass it by reference."""
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Opening JSON storage at %s", data_dir)
    return Storage(
        emails=EmailRepository(JsonRecordStore(data_dir, "emails")),
        drafts=DraftRepository(JsonRecordStore(data_dir, "drafts")),
        prompts=PromptRepository(JsonRecordStore(data_dir, "prompts")),
    )
