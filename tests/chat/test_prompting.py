from __future__ import annotations

from inbox_assistant.chat.prompting import (
    NO_EMAIL_SELECTED,
    augment_prompt,
    build_system_context,
    format_email_context,
)
from inbox_assistant.models import EmailContext


def _context() -> EmailContext:
    return EmailContext(
        sender_name="Sarah Chen",
        sender_email="sarah@example.com",
        subject="Hello",
        body="Can we meet on Thursday?",
    )


def test_augment_prompt_appends_subject_contract_for_drafts() -> None:
    prompt = augment_prompt("Draft a reply saying yes", True, "Alex Doe")

    assert prompt.startswith("Draft a reply saying yes\n\n")
    assert "Subject:" in prompt
    assert "Alex Doe" in prompt
    assert "NEVER use a bracketed placeholder" in prompt


def test_augment_prompt_leaves_other_messages_untouched() -> None:
    assert augment_prompt("Summarize this email", False, "Alex") == "Summarize this email"


def test_format_email_context_marks_missing_email() -> None:
    assert format_email_context(None) == NO_EMAIL_SELECTED


def test_system_context_contains_email_and_user_name() -> None:
    system = build_system_context(_context(), "Alex Doe")

    assert "From: Sarah Chen <sarah@example.com>" in system
    assert "Subject: Hello" in system
    assert "Body: Can we meet on Thursday?" in system
    assert 'The user\'s name is "Alex Doe"' in system
    assert "NOT the conversation history" in system
