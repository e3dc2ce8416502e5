from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from inbox_assistant.llm.gateway import CHAT_FALLBACK
from inbox_assistant.models import ActionItem, Category, Email, Message, Sender
from inbox_assistant.storage.records import Storage, open_storage


class RecordingGateway:
    """In-memory stand-in for the model gateway that records every call."""

    def __init__(self) -> None:
        self.chat_reply: str = "Sure, happy to help."
        self.on_send: Optional[Callable[[], None]] = None
        self.sent: List[Tuple[str, Tuple[Message, ...], str]] = []
        self.category: Category = Category.IMPORTANT
        self.actions: List[ActionItem] = [ActionItem(description="Reply to Sarah")]
        self.reply_text: str = "Subject: Re: Hello\n\nHi there,\nSounds good.\n- Alex"
        self.categorized: List[str] = []

    def send(self, system_context: str, history: Sequence[Message], user_message: str) -> str:
        self.sent.append((system_context, tuple(history), user_message))
        if self.on_send is not None:
            self.on_send()
        return self.chat_reply

    def categorize(self, email_content: str, template: str) -> Category:
        self.categorized.append(email_content)
        return self.category

    def extract_actions(self, email_content: str, template: str) -> List[ActionItem]:
        return list(self.actions)

    def generate_reply(self, email_content: str, template: str) -> str:
        return self.reply_text


class FailingGateway(RecordingGateway):
    """Behaves like a gateway whose provider is down: every call yields its fallback."""

    def send(self, system_context: str, history: Sequence[Message], user_message: str) -> str:
        self.sent.append((system_context, tuple(history), user_message))
        return CHAT_FALLBACK


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def failing_gateway() -> FailingGateway:
    return FailingGateway()


@pytest.fixture
def storage(tmp_path: Path) -> Storage:
    return open_storage(tmp_path / "data")


@pytest.fixture
def make_email() -> Callable[..., Email]:
    def _make(email_id: str = "a", **overrides: object) -> Email:
        fields = {
            "id": email_id,
            "sender": Sender(name="Sarah Chen", email="sarah@example.com"),
            "subject": "Hello",
            "body": "Can we meet on Thursday?",
            "timestamp": "2025-11-03T09:15:00Z",
        }
        fields.update(overrides)
        return Email(**fields)  # type: ignore[arg-type]

    return _make
