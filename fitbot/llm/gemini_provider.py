"""
Google Gemini LLM Provider.
Streams replies from the Generative Language REST API using server-sent events.
"""

import httpx
import json
import logging
import time
from typing import Optional, List, Dict, Any, AsyncGenerator

from .base import LLMProvider, LLMMessage, StreamInterrupted

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Provider for the Gemini ``streamGenerateContent`` endpoint.
    History roles are sent as-is ("user" / "model").
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 120.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _format_contents(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to Gemini ``contents``."""
        return [{"role": m.role, "parts": [{"text": m.content}]} for m in messages]

    def _build_payload(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": self._format_contents(messages),
            "generationConfig": {
                "temperature": temperature if temperature is not None else self.default_temperature,
                "maxOutputTokens": max_tokens or self.default_max_tokens,
            },
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    @staticmethod
    def _extract_text(chunk: Dict[str, Any]) -> str:
        candidates = chunk.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def chat_completion_stream(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncGenerator[str, None]:
        """Stream reply fragments from streamGenerateContent."""
        start_time = time.time()
        url = f"{self.base_url}/models/{self.model}:streamGenerateContent"
        payload = self._build_payload(messages, system_instruction, temperature, max_tokens)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"LLM API stream starting: provider=gemini, model={self.model}, "
                f"temperature={payload['generationConfig']['temperature']}, {len(messages)} messages"
            )

        accumulated_length = 0
        finish_reason = None
        usage_data: Dict[str, Any] = {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                async with client.stream(
                    'POST', url, params={"alt": "sse"}, json=payload, headers=self._get_headers()
                ) as response:
                    response.raise_for_status()

                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue

                        try:
                            chunk = json.loads(line[6:].strip())
                        except json.JSONDecodeError:
                            # Skip malformed chunks
                            continue
                        if not isinstance(chunk, dict):
                            continue

                        if chunk.get("usageMetadata"):
                            usage_data = chunk["usageMetadata"]
                        candidates = chunk.get("candidates") or []
                        if candidates and candidates[0].get("finishReason"):
                            finish_reason = candidates[0]["finishReason"]

                        text = self._extract_text(chunk)
                        if text:
                            accumulated_length += len(text)
                            yield text

            if finish_reason is None:
                raise StreamInterrupted("Gemini stream closed without a finish reason")

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "LLM API stream completed",
                extra={"extra_fields": {
                    "provider": "gemini",
                    "model": self.model,
                    "finish_reason": finish_reason,
                    "prompt_tokens": usage_data.get("promptTokenCount", 0),
                    "completion_tokens": usage_data.get("candidatesTokenCount", 0),
                    "total_tokens": usage_data.get("totalTokenCount", 0),
                    "duration_ms": round(duration_ms, 2),
                    "content_length": accumulated_length,
                }}
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"LLM API stream failed: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "provider": "gemini",
                    "model": self.model,
                    "duration_ms": round(duration_ms, 2),
                    "content_length": accumulated_length,
                    "error": str(e),
                }}
            )
            raise
