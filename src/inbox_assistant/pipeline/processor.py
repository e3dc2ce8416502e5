from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from inbox_assistant.config.logging import get_logger
from inbox_assistant.llm.gateway import ModelGateway
from inbox_assistant.models import ActionItem, Category, Email, ReservedPromptType
from inbox_assistant.prompts.defaults import ACTION_EXTRACTION_FALLBACK, CATEGORIZATION_FALLBACK
from inbox_assistant.storage.records import Storage

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessedEmail:
    id: str
    category: Category
    actions: List[ActionItem]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class ProcessSummary:
    processed: int = 0
    errors: int = 0
    persist_errors: int = 0
    results: List[ProcessedEmail] = field(default_factory=list)
    # Every input email in input order; unselected ones are untouched.
    emails: List[Email] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "errors": self.errors,
            "persist_errors": self.persist_errors,
            "results": [r.to_dict() for r in self.results],
            "emails": [e.to_dict() for e in self.emails],
        }


def needs_processing(email: Email) -> bool:
    # Retry emails whose categorization fell back to the sentinel last time.
    return not email.is_processed or email.category == Category.UNCATEGORIZED


def analyze_email(
    email: Email,
    gateway: ModelGateway,
    *,
    categorization_prompt: str,
    action_prompt: str,
    pool: ThreadPoolExecutor,
) -> Email:
    """Run categorization and action extraction concurrently and join both."""
    content = email.content_for_model()
    category_future = pool.submit(gateway.categorize, content, categorization_prompt)
    actions_future = pool.submit(gateway.extract_actions, content, action_prompt)
    category = category_future.result()
    actions = actions_future.result()
    return replace(email, category=category, action_items=list(actions), is_processed=True)


def process_emails(
    emails: List[Email],
    gateway: ModelGateway,
    *,
    categorization_prompt: str = CATEGORIZATION_FALLBACK,
    action_prompt: str = ACTION_EXTRACTION_FALLBACK,
    persist: Optional[Callable[[Email], None]] = None,
) -> ProcessSummary:
    """
    Process emails one at a time, in input order.

    An email is only replaced when both model calls return; otherwise it
    keeps its prior state. Persistence is best effort: a failed write is
    logged and the in-memory result is still returned.
    """
    summary = ProcessSummary()
    to_process = sum(1 for e in emails if needs_processing(e))
    logger.info("Found %d total emails, %d to process.", len(emails), to_process)

    with ThreadPoolExecutor(max_workers=2) as pool:
        for email in emails:
            if not needs_processing(email):
                summary.emails.append(email)
                continue

            logger.info("Processing email %s...", email.id)
            try:
                updated = analyze_email(
                    email,
                    gateway,
                    categorization_prompt=categorization_prompt,
                    action_prompt=action_prompt,
                    pool=pool,
                )
            except Exception as exc:
                summary.errors += 1
                logger.error("[error] email=%s %s: %s", email.id, type(exc).__name__, exc)
                summary.emails.append(email)
                continue

            logger.info("Email %s categorized as: %s", email.id, updated.category.value)
            summary.processed += 1
            summary.emails.append(updated)
            summary.results.append(
                ProcessedEmail(id=updated.id, category=updated.category, actions=updated.action_items)
            )

            if persist is not None:
                try:
                    persist(updated)
                except (OSError, ValueError) as exc:
                    summary.persist_errors += 1
                    logger.warning("Could not persist email %s: %s", email.id, exc)

    return summary


def process_inbox(user_id: str, storage: Storage, gateway: ModelGateway) -> ProcessSummary:
    emails = storage.emails.list(user_id)
    prompts = storage.prompts
    return process_emails(
        emails,
        gateway,
        categorization_prompt=prompts.content_for(
            user_id, ReservedPromptType.CATEGORIZATION, CATEGORIZATION_FALLBACK
        ),
        action_prompt=prompts.content_for(
            user_id, ReservedPromptType.ACTION_EXTRACTION, ACTION_EXTRACTION_FALLBACK
        ),
        persist=lambda email: storage.emails.save(user_id, email),
    )
