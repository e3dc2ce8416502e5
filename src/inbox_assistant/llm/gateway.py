"""
Model gateway: the only place that talks to the hosted language model.

Every call degrades to a fixed fallback instead of raising, so chat and
batch processing keep going when the provider is down, over quota, or
answers with something unparseable.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from openai import OpenAI

from inbox_assistant.config import settings
from inbox_assistant.config.logging import get_logger
from inbox_assistant.models import VALID_CATEGORIES, ActionItem, Category, Message, Role
from inbox_assistant.parsing.draft import parse_json_reply

logger = get_logger(__name__)

CHAT_FALLBACK = "Sorry, I encountered an error. Please try again."
REPLY_FALLBACK = "Error generating reply."
RAW_JSON_SUFFIX = "Return ONLY raw JSON, no markdown formatting."


class ModelGateway(Protocol):
    def send(self, system_context: str, history: Sequence[Message], user_message: str) -> str: ...
    def categorize(self, email_content: str, template: str) -> Category: ...
    def extract_actions(self, email_content: str, template: str) -> List[ActionItem]: ...
    def generate_reply(self, email_content: str, template: str) -> str: ...


def parse_category(text: str) -> Category:
    """First known label contained in the reply wins; anything else is uncategorized."""
    for category in VALID_CATEGORIES:
        if category.value in text:
            return category
    return Category.UNCATEGORIZED


def parse_action_items(text: str) -> List[ActionItem]:
    payload = parse_json_reply(text)
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array, got {type(payload).__name__}")
    items: List[ActionItem] = []
    for entry in payload:
        if isinstance(entry, dict):
            try:
                items.append(ActionItem.from_dict(entry))
            except ValueError:
                logger.debug("Dropping action item without description: %r", entry)
    return items


def _history_input(history: Sequence[Message]) -> List[Dict[str, str]]:
    return [
        {"role": "user" if m.role == Role.USER else "assistant", "content": m.text}
        for m in history
    ]


class OpenAIGateway:
    def __init__(
        self,
        client: Optional[OpenAI] = None,
        *,
        model: str = settings.MODEL_NAME,
        timeout: Optional[float] = settings.LLM_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._model = model
        self._timeout = timeout

    def _get_client(self) -> OpenAI:
        # Built lazily so a missing key surfaces as a per-call fallback, not a startup crash.
        if self._client is None:
            kwargs: Dict[str, Any] = {"api_key": settings.load_openai_api_key()}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = OpenAI(**kwargs)
        return self._client

    def _complete(self, input_: Any, instructions: Optional[str] = None) -> str:
        kwargs: Dict[str, Any] = {"model": self._model, "input": input_}
        if instructions:
            kwargs["instructions"] = instructions
        resp = self._get_client().responses.create(**kwargs)
        output_text = getattr(resp, "output_text", None)
        if not output_text:
            raise RuntimeError("OpenAI response was empty.")
        return output_text

    def send(self, system_context: str, history: Sequence[Message], user_message: str) -> str:
        input_ = _history_input(history) + [{"role": "user", "content": user_message}]
        try:
            return self._complete(input_, instructions=system_context)
        except Exception as exc:
            logger.error("Chat completion failed: %s: %s", type(exc).__name__, exc)
            return CHAT_FALLBACK

    def categorize(self, email_content: str, template: str) -> Category:
        prompt = f"{template}\n\nEmail Content:\n{email_content}"
        try:
            text = self._complete(prompt).strip()
        except Exception as exc:
            logger.error("Categorization failed: %s: %s", type(exc).__name__, exc)
            return Category.UNCATEGORIZED
        return parse_category(text)

    def extract_actions(self, email_content: str, template: str) -> List[ActionItem]:
        prompt = f"{template}\n\nEmail Content:\n{email_content}\n\n{RAW_JSON_SUFFIX}"
        try:
            return parse_action_items(self._complete(prompt))
        except Exception as exc:
            logger.error("Action extraction failed: %s: %s", type(exc).__name__, exc)
            return []

    def generate_reply(self, email_content: str, template: str) -> str:
        prompt = f"{template}\n\nEmail Content:\n{email_content}"
        try:
            return self._complete(prompt)
        except Exception as exc:
            logger.error("Reply generation failed: %s: %s", type(exc).__name__, exc)
            return REPLY_FALLBACK
