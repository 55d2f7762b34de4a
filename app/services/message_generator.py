"""Follow-up message generation: OpenAI-backed generator behind a small protocol.

The follow-up engine only depends on :class:`MessageGenerator`. Any failure
surfaces as ``MessageGenerationError`` and the engine falls back to plain
template rendering, so callers never see a generation failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from app.core.config import settings
from app.core.exceptions import MessageGenerationError

logger = logging.getLogger(__name__)

# ── System prompt ─────────────────────────────────────────────────────────

DEFAULT_SYSTEM_PROMPT = """You are a professional procurement specialist writing follow-up emails to vendors during onboarding.

Write a clear, courteous email body that:
- Addresses the vendor contact by name when one is provided
- Lists every validation issue provided, in order, with what needs to change
- Matches the urgency of the escalation level (0 = friendly reminder, 1 = firm, 2+ = urgent with consequences)
- Ends with how to get help

Rules:
1. Output ONLY the email body as plain text. No subject line, no markdown.
2. Never invent issues, deadlines or contact details that are not in the context.
3. Keep it under 250 words."""


@dataclass(frozen=True)
class GeneratedMessage:
    text: str
    model: str
    tokens_used: Optional[int] = None


class MessageGenerator(Protocol):
    async def generate(self, prompt: str, context: str) -> GeneratedMessage:
        """Return generated text or raise ``MessageGenerationError``."""
        ...


class OpenAIMessageGenerator:
    """Thin async wrapper around OpenAI chat completions."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        if client is None:
            if not settings.ai_enabled:
                raise MessageGenerationError(
                    "OpenAI API key is not configured. Set OPENAI_API_KEY in your .env file."
                )
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
            )
        self.client = client
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens
        self.temperature = settings.openai_temperature

    async def generate(self, prompt: str, context: str) -> GeneratedMessage:
        """Send *context* under the system *prompt* and return the generated body."""
        try:
            logger.info(
                "Calling OpenAI model=%s, input_length=%d",
                self.model,
                len(context),
            )
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt or DEFAULT_SYSTEM_PROMPT},
                    {"role": "user", "content": context},
                ],
                max_completion_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise MessageGenerationError(f"OpenAI service error: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise MessageGenerationError("Empty response from OpenAI")

        usage = getattr(response, "usage", None)
        tokens = getattr(usage, "total_tokens", None) if usage is not None else None
        logger.info("OpenAI call successful, tokens=%s", tokens)
        return GeneratedMessage(
            text=content.strip(),
            model=getattr(response, "model", None) or self.model,
            tokens_used=tokens,
        )


def get_message_generator() -> MessageGenerator | None:
    """Factory returning the configured generator, or None when AI is disabled."""
    if not settings.ai_enabled:
        return None
    return OpenAIMessageGenerator()
