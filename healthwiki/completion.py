"""
Hosted chat-completion client used as an optional fallback.

When Wikipedia has nothing usable for a health question, the prompt can be
answered by an OpenAI-compatible chat-completion endpoint instead.
"""

import logging
from typing import Optional

import httpx

from .exceptions import CompletionFailed
from .logging_config import log_latency

logger = logging.getLogger(__name__)


class CompletionClient:
    """Bearer-token client for an OpenAI-compatible /chat/completions endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        max_tokens: int = 500,
        system_prompt: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("A completion API key is required")
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.timeout = timeout
        self.transport = transport

    def build_payload(self, user_message: str, system_instruction: Optional[str] = None) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_instruction or self.system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": False,
        }

    @log_latency("completion.create")
    async def complete(self, user_message: str, system_instruction: Optional[str] = None) -> str:
        """
        Ask the completion API to answer a prompt.

        Args:
            user_message (str): The user's original prompt
            system_instruction (str, optional): Caller-supplied system text; the
                configured system prompt is used when omitted

        Returns:
            str: The assistant message content

        Raises:
            CompletionFailed: On network errors, non-success status or a malformed payload
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(user_message, system_instruction)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise CompletionFailed("Completion API request timed out") from e
        except httpx.HTTPError as e:
            raise CompletionFailed(f"Failed to connect to completion API: {e}") from e

        if response.status_code == 401:
            raise CompletionFailed("Completion API authentication failed - invalid API key")
        if response.status_code == 429:
            raise CompletionFailed("Completion API rate limit exceeded")
        if response.status_code != 200:
            raise CompletionFailed(f"Completion API error: {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionFailed("Completion API returned a malformed payload") from e

        if not isinstance(content, str) or not content.strip():
            raise CompletionFailed("Completion API returned an empty message")

        return content.strip()
