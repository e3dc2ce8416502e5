from __future__ import annotations

import pytest

from inbox_assistant.chat.intent import classify_intent


@pytest.mark.parametrize(
    "utterance",
    ["Draft a reply saying yes", "please REPLY to this", "Write an email to Bob", "compose something"],
)
def test_draft_keywords_need_context_and_request_a_draft(utterance: str) -> None:
    intent = classify_intent(utterance)

    assert intent.context_dependent
    assert intent.draft_requested


@pytest.mark.parametrize("utterance", ["Summarize this email", "Give me a quick SUMMARY"])
def test_summary_needs_context_but_not_the_draft_format(utterance: str) -> None:
    intent = classify_intent(utterance)

    assert intent.context_dependent
    assert not intent.draft_requested


def test_plain_question_is_context_free() -> None:
    intent = classify_intent("What are the action items?")

    assert not intent.context_dependent
    assert not intent.draft_requested
