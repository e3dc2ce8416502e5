from __future__ import annotations

import pytest

from inbox_assistant.chat.intent import CONTEXT_MISSING_REPLY
from inbox_assistant.chat.session import ChatSession, EmptyMessageError, SessionState
from inbox_assistant.llm.gateway import CHAT_FALLBACK
from inbox_assistant.models import DraftView, EmailContext, Message, Role


def _context(subject: str = "Hello") -> EmailContext:
    return EmailContext(
        sender_name="Sarah Chen",
        sender_email="sarah@example.com",
        subject=subject,
        body="Can we meet on Thursday?",
    )


def test_summarize_without_email_short_circuits(gateway) -> None:
    session = ChatSession(gateway, user_name="Alex")

    turn = session.submit("Please summarize this")

    assert turn is not None
    assert turn.short_circuited
    assert turn.reply.text == CONTEXT_MISSING_REPLY
    assert gateway.sent == []
    assert session.history == [
        Message(role=Role.USER, text="Please summarize this"),
        Message(role=Role.AGENT, text=CONTEXT_MISSING_REPLY),
    ]


@pytest.mark.parametrize("utterance", ["Draft a reply saying yes", "reply with a no"])
def test_draft_request_sends_subject_contract(gateway, utterance: str) -> None:
    session = ChatSession(gateway, user_name="Alex")
    session.bind_context(_context())

    session.submit(utterance)

    system_context, history, outgoing = gateway.sent[0]
    assert outgoing.startswith(utterance)
    assert "Subject:" in outgoing
    assert history == ()
    assert "Subject: Hello" in system_context
    # The stored user turn is the raw utterance, not the augmented prompt.
    assert session.history[0].text == utterance


def test_reply_with_subject_line_surfaces_draft(gateway) -> None:
    gateway.chat_reply = "Subject: Re: Hello\n\nHi Sarah,\nThursday works.\n- Alex"
    session = ChatSession(gateway, user_name="Alex")
    session.bind_context(_context())

    turn = session.submit("Draft a reply saying yes")

    assert turn is not None
    assert turn.draft == DraftView(subject="Re: Hello", body="Hi Sarah,\nThursday works.\n- Alex")
    assert session.draft_at(1) == turn.draft
    assert session.draft_at(0) is None


def test_history_passed_to_gateway_excludes_current_turn(gateway) -> None:
    session = ChatSession(gateway)
    session.submit("First question")
    session.submit("Second question")

    _, history, outgoing = gateway.sent[1]
    assert outgoing == "Second question"
    assert [m.text for m in history] == ["First question", gateway.chat_reply]


def test_gateway_failure_still_returns_to_idle_with_fallback(failing_gateway) -> None:
    session = ChatSession(failing_gateway, user_name="Alex")
    session.bind_context(_context())

    turn = session.submit("Draft a reply saying yes")

    assert session.state is SessionState.IDLE
    assert turn is not None
    assert turn.reply.text == CHAT_FALLBACK
    assert turn.draft is None
    assert [m.role for m in session.history] == [Role.USER, Role.AGENT]


def test_gateway_that_raises_does_not_corrupt_history() -> None:
    class ExplodingGateway:
        def send(self, system_context, history, user_message):
            raise RuntimeError("boom")

    session = ChatSession(ExplodingGateway())  # type: ignore[arg-type]

    turn = session.submit("hello")

    assert turn is not None
    assert turn.reply.text == CHAT_FALLBACK
    assert session.state is SessionState.IDLE
    assert len(session.history) == 2


def test_submit_while_awaiting_is_ignored(gateway) -> None:
    session = ChatSession(gateway)
    observed = {}

    def during_call() -> None:
        observed["state"] = session.state
        observed["nested"] = session.submit("another message")
        observed["cleared"] = session.clear()
        observed["history"] = session.history

    gateway.on_send = during_call
    session.submit("hello")

    assert observed["state"] is SessionState.AWAITING
    assert observed["nested"] is None
    assert observed["cleared"] is False
    # Optimistic append: the user turn is visible before the reply resolves.
    assert observed["history"] == [Message(role=Role.USER, text="hello")]
    assert len(gateway.sent) == 1
    assert len(session.history) == 2


def test_bind_context_while_awaiting_only_affects_later_calls(gateway) -> None:
    session = ChatSession(gateway)
    session.bind_context(_context("First"))
    gateway.on_send = lambda: session.bind_context(_context("Second"))

    session.submit("What is this about?")
    gateway.on_send = None
    session.submit("And now?")

    assert "Subject: First" in gateway.sent[0][0]
    assert "Subject: Second" in gateway.sent[1][0]


def test_clear_keeps_bound_context(gateway) -> None:
    session = ChatSession(gateway)
    context = _context()
    session.bind_context(context)
    session.submit("hello")

    assert session.clear() is True
    assert session.history == []
    assert session.context == context


@pytest.mark.parametrize("utterance", ["", "   ", "\n\t"])
def test_blank_message_is_rejected_before_any_call(gateway, utterance: str) -> None:
    session = ChatSession(gateway)

    with pytest.raises(EmptyMessageError):
        session.submit(utterance)

    assert gateway.sent == []
    assert session.history == []
