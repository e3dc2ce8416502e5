from __future__ import annotations

from typing import Optional

from inbox_assistant.models import EmailContext

NO_EMAIL_SELECTED = "No specific email selected."

DRAFT_FORMAT_CONTRACT = """IMPORTANT: You must format your response exactly as follows:
Subject: [Use the actual subject from the email context, prefixed with Re: if replying]

[Body of the email]

[Sign off with the user's actual name{name_hint}]

CRITICAL INSTRUCTIONS:
1. Do NOT use placeholders like "[Sender's Name]", "[Your Name]", or "[Original Subject]".
2. Use the ACTUAL names and subject from the provided context.
3. If you don't know a name, use a generic greeting like "Hi there," but NEVER use a bracketed placeholder.
4. The Subject line must be real."""

SYSTEM_INSTRUCTION = """You are a helpful email assistant.

IMPORTANT: Below is the EMAIL CONTENT you should analyze. The conversation history contains our discussion ABOUT this email, but when asked to analyze the email (e.g., for action items, summary, or content), ONLY refer to the email content below, NOT the conversation history.

EMAIL CONTENT:
{email_content}

When the user asks questions like "What are the action items?" or "Summarize this email", analyze ONLY the email content above. Do not treat the user's previous requests or commands as part of the email."""


def augment_prompt(utterance: str, draft_requested: bool, user_name: Optional[str] = None) -> str:
    """Append the Subject:/body/sign-off contract when a draft was asked for."""
    if not draft_requested:
        return utterance
    name_hint = f": {user_name}" if user_name else ""
    return f"{utterance}\n\n{DRAFT_FORMAT_CONTRACT.format(name_hint=name_hint)}"


def format_email_context(context: Optional[EmailContext]) -> str:
    if context is None:
        return NO_EMAIL_SELECTED
    return (
        "Current Email Context:\n"
        f"From: {context.sender_name} <{context.sender_email}>\n"
        f"Subject: {context.subject}\n"
        f"Body: {context.body}"
    )


def build_system_context(context: Optional[EmailContext], user_name: str) -> str:
    email_content = f'{format_email_context(context)}\n\nNote: The user\'s name is "{user_name}".'
    return SYSTEM_INSTRUCTION.format(email_content=email_content)
