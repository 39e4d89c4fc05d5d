"""
Service wrapping the LLM gateway used for summaries and topic tags.

Calls an OpenAI-compatible chat completions endpoint. Every failure mode
(feature flag off, missing key, HTTP error, malformed body) degrades to an
empty result so ingestion never stops on AI problems.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from ..config import AIConfig, settings
from ..parsing.keyword_tags import TOPIC_VOCABULARY

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "You are a civic governance assistant. Summarize the following text in 2-3 clear, "
    "concise sentences that highlight the key points and decisions. Focus on what "
    "matters to residents."
)

TAGS_PROMPT = (
    "You are a civic governance classifier. Analyze the text and return only a "
    "comma-separated list of relevant tags from: {vocabulary}. Return only the tags, "
    "nothing else."
)


@dataclass
class AIResult:
    """Model output plus the tokens it cost."""

    content: str = ""
    tokens_used: int = 0

    def tags(self) -> List[str]:
        """Parse a comma-separated tag answer, keeping known topics only."""
        found: List[str] = []
        for raw in self.content.split(","):
            tag = raw.strip().strip(".").lower()
            if tag in TOPIC_VOCABULARY and tag not in found:
                found.append(tag)
        return found


class AIService:
    """Summarize and classify civic text through the configured gateway."""

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or settings.ai
        self._client = client

    @property
    def enabled(self) -> bool:
        return self.config.is_active

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def summarize(self, text: Optional[str], max_tokens: Optional[int] = None) -> AIResult:
        if not text or not self.enabled:
            return AIResult()
        return await self._complete(
            SUMMARY_PROMPT,
            text[: self.config.summary_input_chars],
            max_tokens or self.config.summary_max_tokens,
        )

    async def classify_tags(self, text: Optional[str]) -> AIResult:
        if not text or not self.enabled:
            return AIResult()
        prompt = TAGS_PROMPT.format(vocabulary=", ".join(TOPIC_VOCABULARY))
        return await self._complete(
            prompt,
            text[: self.config.tags_input_chars],
            self.config.tags_max_tokens,
        )

    async def _complete(self, system_prompt: str, user_text: str, max_tokens: int) -> AIResult:
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        client = await self._client_instance()
        try:
            response = await client.post(self.config.gateway_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("AI gateway request failed: %s", exc)
            return AIResult()

        if response.status_code >= 400:
            logger.error("AI gateway returned %s: %s", response.status_code, response.text[:200])
            return AIResult()

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed AI gateway response: %s", exc)
            return AIResult()

        usage = data.get("usage") or {}
        return AIResult(content=content.strip(), tokens_used=int(usage.get("total_tokens") or 0))
