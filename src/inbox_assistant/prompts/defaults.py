from __future__ import annotations

from typing import Dict, List

from inbox_assistant.models import ReservedPromptType

CATEGORIZATION_FALLBACK = "Categorize this email."
ACTION_EXTRACTION_FALLBACK = "Extract actions."
AUTO_REPLY_FALLBACK = "Draft a professional reply to this email. Format it as:\nSubject: [Subject]\n\n[Body]"

DEFAULT_PROMPTS: List[Dict[str, str]] = [
    {
        "type": ReservedPromptType.CATEGORIZATION.value,
        "description": "Categorization Logic",
        "content": (
            "Categorize the following email into exactly one of these categories: "
            "Important, Newsletter, Spam, To-Do. "
            "To-Do emails must include a direct request requiring user action. "
            "Respond with the category name only."
        ),
    },
    {
        "type": ReservedPromptType.ACTION_EXTRACTION.value,
        "description": "Action Item Extraction",
        "content": (
            "Extract the action items from the following email. "
            "Respond with a JSON array of objects with the keys "
            '"description", "deadline" (optional) and "priority" (High, Medium or Low). '
            "Respond with an empty array if there is nothing to do."
        ),
    },
    {
        "type": ReservedPromptType.AUTO_REPLY.value,
        "description": "Auto-Reply Template",
        "content": (
            "Draft a polite, concise reply to the following email. "
            "If it is a meeting request, ask for an agenda. "
            "Format it as:\nSubject: Re: <original subject>\n\n<body>"
        ),
    },
]
