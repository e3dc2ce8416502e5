from __future__ import annotations

import json
import re
from typing import Any, Optional

from inbox_assistant.models import DraftView

_NEWLINE_RE = re.compile(r"\r\n?")
_SUBJECT_RE = re.compile(r"^Subject:\s*(.+)", flags=re.IGNORECASE | re.MULTILINE)
# Same anchor, but spans the whole line plus its terminator so it can be cut out.
_SUBJECT_LINE_RE = re.compile(r"^Subject:.*(?:\n|$)", flags=re.IGNORECASE | re.MULTILINE)

_FENCE_RE = re.compile(r"^```[A-Za-z]*[ \t]*\r?\n(.*?)\r?\n?```$", flags=re.DOTALL)


def extract_draft(text: str) -> Optional[DraftView]:
    """
    Split a model reply into a draft when it contains a "Subject:" line.
    Only the first Subject: line is consumed; later ones stay in the body.
    Line endings are normalized to "\\n", so a bare "\\r" also starts a line.
    """
    text = _NEWLINE_RE.sub("\n", text or "")
    match = _SUBJECT_RE.search(text)
    if not match:
        return None
    subject = match.group(1).strip()
    body = _SUBJECT_LINE_RE.sub("", text, count=1).strip()
    return DraftView(subject=subject, body=body)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    cleaned = (text or "").strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_json_reply(text: str) -> Any:
    return json.loads(strip_code_fences(text))


def as_reply_subject(subject: str) -> str:
    """Normalize Re:/AW:/SV: prefixes to a single "Re: "."""
    cleaned = (subject or "").strip()
    match = re.match(r"^(re|aw|sv)\s*:\s*(.*)$", cleaned, flags=re.IGNORECASE)
    if match:
        cleaned = match.group(2).strip()
    return f"Re: {cleaned}" if cleaned else "Re:"
