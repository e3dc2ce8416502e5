from __future__ import annotations

from inbox_assistant.models import DraftView
from inbox_assistant.parsing.draft import (
    as_reply_subject,
    extract_draft,
    parse_json_reply,
    strip_code_fences,
)


def test_extract_draft_splits_subject_and_body() -> None:
    text = "Subject: Re: Hello\n\nHi Alice,\nSee you then.\n- Bob"

    assert extract_draft(text) == DraftView(subject="Re: Hello", body="Hi Alice,\nSee you then.\n- Bob")


def test_extract_draft_returns_none_without_subject_line() -> None:
    text = "Here is a summary: the meeting moved to Friday.\nNo subject mentioned."

    assert extract_draft(text) is None
    assert extract_draft(text) is None


def test_subject_must_start_a_line() -> None:
    assert extract_draft("The Subject: line is missing here") is None


def test_extract_draft_is_case_insensitive() -> None:
    draft = extract_draft("SUBJECT:   Re: Budget  \r\nThanks!")

    assert draft == DraftView(subject="Re: Budget", body="Thanks!")


def test_only_first_subject_line_is_consumed() -> None:
    text = "Subject: Re: Plan\n\nSee below.\nSubject: old thread\nBye"

    draft = extract_draft(text)

    assert draft is not None
    assert draft.subject == "Re: Plan"
    assert draft.body == "See below.\nSubject: old thread\nBye"


def test_subject_line_after_preamble_is_found() -> None:
    text = "Sure, here it is:\nSubject: Re: Lunch\n\nYes, noon works."

    draft = extract_draft(text)

    assert draft == DraftView(subject="Re: Lunch", body="Sure, here it is:\n\nYes, noon works.")


def test_subject_as_last_line_leaves_empty_body() -> None:
    assert extract_draft("Subject: Re: Ping") == DraftView(subject="Re: Ping", body="")


def test_strip_code_fences_handles_json_blocks() -> None:
    assert strip_code_fences('```json\n[{"description": "x"}]\n```') == '[{"description": "x"}]'
    assert strip_code_fences("```\n[]\n```") == "[]"
    assert strip_code_fences("  []  ") == "[]"


def test_parse_json_reply_reads_fenced_payload() -> None:
    assert parse_json_reply('```json\n{"a": 1}\n```') == {"a": 1}


def test_as_reply_subject_adds_re_prefix() -> None:
    assert as_reply_subject("Quarterly numbers") == "Re: Quarterly numbers"


def test_as_reply_subject_normalizes_existing_reply_prefixes() -> None:
    assert as_reply_subject("AW: Interview") == "Re: Interview"
    assert as_reply_subject("re:Interview") == "Re: Interview"
    assert as_reply_subject("") == "Re:"


def test_bare_carriage_returns_start_a_line() -> None:
    draft = extract_draft("Hi\rSubject: Re: Ping\rSee you.")

    assert draft == DraftView(subject="Re: Ping", body="Hi\nSee you.")


def test_crlf_body_is_normalized() -> None:
    draft = extract_draft("Subject: Re: Notes\r\n\r\nLine one\r\nLine two")

    assert draft == DraftView(subject="Re: Notes", body="Line one\nLine two")
