from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Category(str, Enum):
    IMPORTANT = "Important"
    NEWSLETTER = "Newsletter"
    SPAM = "Spam"
    TODO = "To-Do"
    UNCATEGORIZED = "Uncategorized"


# Labels the model may answer with; UNCATEGORIZED is the failure sentinel only.
VALID_CATEGORIES = (Category.IMPORTANT, Category.NEWSLETTER, Category.SPAM, Category.TODO)


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Role(str, Enum):
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class Sender:
    name: str
    email: str


@dataclass(frozen=True)
class ActionItem:
    description: str
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"description": self.description, "priority": self.priority.value}
        if self.deadline:
            data["deadline"] = self.deadline
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionItem":
        description = str(data.get("description") or "").strip()
        if not description:
            raise ValueError("Action item requires a description")
        try:
            priority = Priority(str(data.get("priority") or Priority.MEDIUM.value).capitalize())
        except ValueError:
            priority = Priority.MEDIUM
        deadline = data.get("deadline")
        return cls(
            description=description,
            priority=priority,
            deadline=str(deadline) if deadline else None,
        )


@dataclass(frozen=True)
class Email:
    id: str
    sender: Sender
    subject: str
    body: str
    timestamp: str
    category: Category = Category.UNCATEGORIZED
    action_items: List[ActionItem] = field(default_factory=list)
    is_processed: bool = False
    error: Optional[str] = None

    def content_for_model(self) -> str:
        return f"Subject: {self.subject}\nBody: {self.body}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "sender": {"name": self.sender.name, "email": self.sender.email},
            "subject": self.subject,
            "body": self.body,
            "timestamp": self.timestamp,
            "category": self.category.value,
            "action_items": [item.to_dict() for item in self.action_items],
            "is_processed": self.is_processed,
        }
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Email":
        sender = data.get("sender") or {}
        try:
            category = Category(data.get("category") or Category.UNCATEGORIZED.value)
        except ValueError:
            category = Category.UNCATEGORIZED
        # Keep load resilient to legacy camelCase records.
        raw_items = data.get("action_items", data.get("actionItems")) or []
        is_processed = data.get("is_processed", data.get("isProcessed", False))
        return cls(
            id=str(data["id"]),
            sender=Sender(name=str(sender.get("name") or ""), email=str(sender.get("email") or "")),
            subject=str(data.get("subject") or ""),
            body=str(data.get("body") or ""),
            timestamp=str(data.get("timestamp") or ""),
            category=category,
            action_items=[
                ActionItem.from_dict(item)
                for item in raw_items
                if isinstance(item, dict) and item.get("description")
            ],
            is_processed=bool(is_processed),
            error=data.get("error"),
        )


class ReservedPromptType(str, Enum):
    CATEGORIZATION = "categorization"
    ACTION_EXTRACTION = "action_extraction"
    AUTO_REPLY = "auto_reply"


@dataclass(frozen=True)
class CustomPromptType:
    name: str

    @property
    def value(self) -> str:
        return self.name


PromptType = Union[ReservedPromptType, CustomPromptType]


def parse_prompt_type(value: str) -> PromptType:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("Prompt type must not be empty")
    try:
        return ReservedPromptType(cleaned)
    except ValueError:
        return CustomPromptType(cleaned)


def is_reserved(prompt_type: PromptType) -> bool:
    return isinstance(prompt_type, ReservedPromptType)


@dataclass(frozen=True)
class Prompt:
    id: str
    type: PromptType
    content: str
    updated_at: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "description": self.description,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prompt":
        return cls(
            id=str(data["id"]),
            type=parse_prompt_type(str(data.get("type") or "")),
            content=str(data.get("content") or ""),
            description=str(data.get("description") or ""),
            updated_at=str(data.get("updated_at") or data.get("updatedAt") or ""),
        )


@dataclass(frozen=True)
class DraftMeta:
    generation_context: str = "manual"  # manual | chat | auto
    original_sender: Optional[str] = None
    original_subject: Optional[str] = None
    suggested_follow_up: Optional[str] = None


@dataclass(frozen=True)
class Draft:
    id: str
    subject: str
    body: str
    created_at: str
    updated_at: str
    to: str = ""
    email_id: Optional[str] = None
    meta: DraftMeta = field(default_factory=DraftMeta)

    def to_dict(self) -> Dict[str, Any]:
        meta = {k: v for k, v in vars(self.meta).items() if v is not None}
        return {
            "id": self.id,
            "email_id": self.email_id,
            "to": self.to,
            "subject": self.subject,
            "body": self.body,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "meta": meta,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Draft":
        meta = data.get("meta") or {}
        return cls(
            id=str(data["id"]),
            email_id=data.get("email_id"),
            to=str(data.get("to") or ""),
            subject=str(data.get("subject") or ""),
            body=str(data.get("body") or ""),
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
            meta=DraftMeta(
                generation_context=str(meta.get("generation_context") or "manual"),
                original_sender=meta.get("original_sender"),
                original_subject=meta.get("original_subject"),
                suggested_follow_up=meta.get("suggested_follow_up"),
            ),
        )


@dataclass(frozen=True)
class Message:
    role: Role
    text: str


@dataclass(frozen=True)
class EmailContext:
    sender_name: str
    sender_email: str
    subject: str
    body: str

    @classmethod
    def from_email(cls, email: Email) -> "EmailContext":
        return cls(
            sender_name=email.sender.name,
            sender_email=email.sender.email,
            subject=email.subject,
            body=email.body,
        )


@dataclass(frozen=True)
class DraftView:
    subject: str
    body: str
