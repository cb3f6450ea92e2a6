"""Google Gemini API client."""
import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin generateContent wrapper.

    Never raises for expected failures: a missing key, timeout, HTTP error or
    empty candidate list all return None.
    """

    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        timeout: float = 15.0,
        max_retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        max_output_tokens: int = 256,
        temperature: float = 0.3,
    ) -> Optional[str]:
        """Call Gemini. 429 responses are retried with exponential backoff."""
        if not self.is_configured:
            return None

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
                "responseMimeType": "application/json",
            },
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.post(
                        url,
                        params={"key": self._api_key},
                        json=payload,
                    )
                    response.raise_for_status()
                    return self._extract_text(response.json())
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429 and attempt < self.max_retries:
                    # Honor Retry-After, otherwise back off 2, 4, 8... seconds
                    retry_after = e.response.headers.get("Retry-After")
                    if retry_after and retry_after.isdigit():
                        wait = min(int(retry_after), 30)
                    else:
                        wait = 2 ** (attempt + 1)
                    logger.warning(
                        f"Gemini 429 → retrying in {wait}s ({attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait)
                    continue
                logger.error(f"Gemini API call failed: {e}")
                break
            except httpx.TimeoutException:
                logger.error(f"Gemini API call timed out after {self.timeout}s")
                break
            except Exception as e:
                logger.error(f"Gemini API call failed: {e}")
                break

        return None

    @staticmethod
    def _extract_text(data: dict) -> Optional[str]:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return None
        return parts[0].get("text") or None
