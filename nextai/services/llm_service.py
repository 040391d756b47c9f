# nextai/services/llm_service.py
"""Thin client for the Gemini ``generateContent`` REST endpoint."""
from __future__ import annotations

import logging
from typing import Iterable

import requests

from nextai.config import settings
from nextai.errors import LLMError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Next-AI, a helpful assistant. Answer clearly and concisely. "
    "Use the earlier conversation as context when it is relevant."
)

QUOTA_MESSAGE = "AI usage limit reached. Please try again later."
CONFIG_MESSAGE = "AI service is not configured correctly. Please contact support."
GENERIC_MESSAGE = "Failed to generate response"

_QUOTA_MARKERS = ("quota", "rate limit", "resource_exhausted", "limit exceeded")
_CONFIG_MARKERS = ("api key", "api_key", "permission_denied", "unauthenticated")


def build_prompt(history: Iterable, new_text: str) -> str:
    """Fold prior messages (objects with ``role``/``content``) and the new text into one prompt."""
    lines = [SYSTEM_PROMPT, ""]
    for m in history:
        speaker = "Assistant" if m.role == "assistant" else "User"
        lines.append(f"{speaker}: {m.content}")
    lines.append(f"User: {new_text}")
    lines.append("Assistant:")
    return "\n".join(lines)


def classify_error(status_code: int | None, text: str) -> str:
    t = (text or "").lower()
    if status_code == 429 or any(k in t for k in _QUOTA_MARKERS):
        return LLMError.QUOTA
    if status_code in (401, 403) or any(k in t for k in _CONFIG_MARKERS):
        return LLMError.CONFIG
    return LLMError.OTHER


def _error_for(kind: str) -> LLMError:
    message = {
        LLMError.QUOTA: QUOTA_MESSAGE,
        LLMError.CONFIG: CONFIG_MESSAGE,
    }.get(kind, GENERIC_MESSAGE)
    return LLMError(message, kind)


def generate_text(prompt: str) -> str:
    """Call the model once. No retries; failures raise LLMError."""
    if not settings.GEMINI_API_KEY:
        raise _error_for(LLMError.CONFIG)

    url = f"{settings.GEMINI_BASE}/models/{settings.GEMINI_MODEL}:generateContent"
    body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    try:
        resp = requests.post(
            url,
            params={"key": settings.GEMINI_API_KEY},
            json=body,
            timeout=settings.LLM_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Gemini connection error: %s", e)
        raise _error_for(LLMError.OTHER) from e

    if resp.status_code >= 400:
        kind = classify_error(resp.status_code, resp.text)
        logger.error("Gemini error %s (%s): %s", resp.status_code, kind, resp.text[:500])
        raise _error_for(kind)

    data = resp.json()
    # Expected: {"candidates":[{"content":{"parts":[{"text":"..."}]}}]}
    candidates = data.get("candidates") or []
    parts = ((candidates[0].get("content") or {}).get("parts") or []) if candidates else []
    content = "".join(p.get("text", "") for p in parts).strip()
    if not content:
        logger.error("Gemini returned no content: %s", str(data)[:500])
        raise _error_for(LLMError.OTHER)
    return content
