"""Note summaries via the OpenRouter chat-completions API."""

from __future__ import annotations

import logging
import re

import httpx

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"
APP_TITLE = "Mind-It Notes"
MAX_INPUT_CHARS = 12_000

SUMMARY_SYSTEM_PROMPT = """You are a helpful note-taking assistant. Summarize the user's note or document in your own words.

Requirements:
- Start each key point on a new line
- Use double line breaks between paragraphs
- Format 2-3 important points as bold using **bold text**
- Keep paragraphs short and focused"""

_ROLE_PREFIX = re.compile(
    r"^(AI:|Assistant:|Response:|Summary:|Note:|Requirements?:|Input:)\s*",
    re.IGNORECASE | re.MULTILINE,
)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


class SummaryError(Exception):
    """The model provider did not return a usable summary."""


def clean_summary(text: str) -> str:
    text = _ROLE_PREFIX.sub("", text).strip()
    return _EXTRA_NEWLINES.sub("\n\n", text)


class SummarizerService:
    """Summarize text with one chat-completion call; empty summary when unconfigured."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.config.openrouter_api_key)

    async def summarize(self, content: str) -> str:
        if not self.configured:
            logger.debug("Summaries disabled: no OpenRouter key configured")
            return ""

        headers = {
            "Authorization": f"Bearer {self.config.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.config.site_url,
            "X-Title": APP_TITLE,
        }
        payload = {
            "model": self.config.summary_model,
            "messages": [
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": content[:MAX_INPUT_CHARS]},
            ],
            "stream": False,
        }
        async with httpx.AsyncClient(
            timeout=self.config.http_timeout_seconds, transport=self.transport
        ) as client:
            response = await client.post(OPENROUTER_CHAT_URL, headers=headers, json=payload)

        if not response.is_success:
            logger.error(
                "OpenRouter error: %s",
                response.text[:500],
                extra={"status": response.status_code, "model": self.config.summary_model},
            )
            raise SummaryError(f"OpenRouter returned HTTP {response.status_code}")

        choices = response.json().get("choices") or []
        if not choices:
            raise SummaryError("Empty response from OpenRouter")
        message = choices[0].get("message") or {}
        return clean_summary(message.get("content") or "")


def get_summarizer_service() -> SummarizerService:
    return SummarizerService(get_config())


__all__ = ["SummarizerService", "SummaryError", "clean_summary", "get_summarizer_service"]
