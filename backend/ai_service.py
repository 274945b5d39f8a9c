"""Reasoning-engine client: send the prompt payload to Claude and return its text.

The reply is untrusted free text; turning it into a result is the
normalizer's job. No retry happens here beyond what the configured SDK
client does (`max_retries`, 0 by default).
"""

import logging
import time

import anthropic
from anthropic import Anthropic

from config import EngineConfig
from errors import EngineNotConfiguredError, ReasoningEngineError
from models import EngineRequest

logger = logging.getLogger(__name__)


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


class ReasoningEngineClient:
    """Thin wrapper over the Anthropic Messages API built from an explicit config."""

    def __init__(self, config: EngineConfig, client: Anthropic | None = None) -> None:
        self.config = config
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.config.is_configured

    @property
    def client(self) -> Anthropic:
        """Lazily create the SDK client."""
        if self._client is None:
            if not self.config.is_configured:
                raise EngineNotConfiguredError("ANTHROPIC_API_KEY not found in environment.")
            self._client = Anthropic(
                api_key=self.config.api_key,
                timeout=self.config.timeout_seconds,
                max_retries=self.config.max_retries,
            )
        return self._client

    def complete(self, request: EngineRequest) -> str:
        """
        Send one request and return the reply text.
        Raises ReasoningEngineError on provider failure or an empty reply.
        """
        client = self.client
        model = self.config.model
        logger.info(
            "Calling reasoning engine",
            extra={"model": model, "prompt_length": len(request["system"]) + len(request["user"])},
        )

        t0 = time.perf_counter()
        try:
            response = client.messages.create(
                model=model,
                max_tokens=self.config.max_tokens,
                system=request["system"],
                messages=[{"role": "user", "content": request["user"]}],
                temperature=self.config.temperature,
            )
        except anthropic.APIError as exc:
            logger.error("Reasoning engine call failed", extra={"model": model, "error": str(exc)})
            raise ReasoningEngineError(f"Reasoning engine call failed: {exc}") from exc

        content = _extract_response_text(response)
        stop_reason = getattr(response, "stop_reason", None)
        if stop_reason == "max_tokens":
            logger.warning("Engine output hit max_tokens", extra={"model": model})

        logger.info(
            "Reasoning engine replied",
            extra={
                "model": model,
                "stop_reason": stop_reason,
                "response_length": len(content),
                "elapsed_ms": int((time.perf_counter() - t0) * 1000),
            },
        )

        if not content:
            raise ReasoningEngineError("No response from reasoning engine")
        return content
