from __future__ import annotations

import json
import os
from typing import Optional

from inbox_assistant.config.paths import SECRETS_DIR

MODEL_NAME: str = os.getenv("INBOX_ASSISTANT_MODEL", "gpt-4.1-mini")
DEFAULT_USER_NAME: str = "User"


def _optional_float(env_key: str) -> Optional[float]:
    raw = os.getenv(env_key, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


# No timeout unless configured: a hung model call keeps the chat in "awaiting".
LLM_TIMEOUT_SECONDS: Optional[float] = _optional_float("INBOX_ASSISTANT_LLM_TIMEOUT")


def load_openai_api_key() -> str | None:
    env_token = os.getenv("OPENAI_API_KEY", "").strip()
    if env_token:
        return env_token

    txt_path = SECRETS_DIR / "openai_token.txt"
    if txt_path.exists():
        try:
            token = txt_path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            return None
        return token or None

    json_path = SECRETS_DIR / "openai_token.json"
    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        # Prefer explicit key names, then generic token key.
        candidates = [
            payload.get("api_key"),
            payload.get("openai_api_key"),
            payload.get("token"),
        ]
        for candidate in candidates:
            if isinstance(candidate, str):
                token = candidate.strip()
                if token:
                    return token
        return None

    return None
