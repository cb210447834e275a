"""
Chat-completion and OCR clients over the OpenAI SDK.

Both are black boxes to the rest of the system: text in, text out. Any SDK
or response-shape failure surfaces as UpstreamServiceError, never retried.
"""

import base64
import logging
from typing import Optional, Protocol

import openai

from cardealpro.config import ModelConfig, settings
from cardealpro.prompts.system_prompts import LICENSE_OCR_PROMPT

logger = logging.getLogger(__name__)


class UpstreamServiceError(Exception):
    """Raised when the chat, OCR, or analysis service fails."""

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service} request failed: {detail}")


class ChatClient(Protocol):
    async def complete(
        self, messages: list[dict[str, str]], model: Optional[str] = None
    ) -> str: ...


class OcrEngine(Protocol):
    async def recognize(self, image: bytes, mime_type: str = "image/jpeg") -> str: ...


def _client(owner, service: str) -> openai.AsyncOpenAI:
    """Create the SDK client on first use so a missing API key fails per request."""
    if owner._client is None:
        try:
            owner._client = openai.AsyncOpenAI(api_key=owner._config.api_key or None)
        except openai.OpenAIError as e:
            raise UpstreamServiceError(service, str(e)) from e
    return owner._client


def _first_choice_text(response, service: str) -> str:
    if not response.choices:
        raise UpstreamServiceError(service, "empty response")
    content = response.choices[0].message.content
    if content is None:
        raise UpstreamServiceError(service, "response had no text content")
    return content


class OpenAIChatClient:
    """Async chat completions with the configured model and temperature."""

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        client: Optional[openai.AsyncOpenAI] = None,
    ) -> None:
        self._config = config or settings.model
        self._client = client

    async def complete(
        self, messages: list[dict[str, str]], model: Optional[str] = None
    ) -> str:
        model = model or self._config.chat_model
        logger.debug("Sending %d messages to %s", len(messages), model)
        try:
            response = await _client(self, "chat").chat.completions.create(
                model=model,
                messages=messages,
                temperature=self._config.chat_temperature,
            )
        except openai.OpenAIError as e:
            logger.error("Chat completion failed: %s", e)
            raise UpstreamServiceError("chat", str(e)) from e
        return _first_choice_text(response, "chat")


class OpenAIVisionOcr:
    """Text recognition by asking a vision model to transcribe the image."""

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        client: Optional[openai.AsyncOpenAI] = None,
    ) -> None:
        self._config = config or settings.model
        self._client = client

    async def recognize(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        encoded = base64.b64encode(image).decode("ascii")
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": LICENSE_OCR_PROMPT.strip()},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                    },
                ],
            }
        ]
        try:
            response = await _client(self, "ocr").chat.completions.create(
                model=self._config.vision_model,
                messages=messages,
                temperature=0,
            )
        except openai.OpenAIError as e:
            logger.error("OCR request failed: %s", e)
            raise UpstreamServiceError("ocr", str(e)) from e
        return _first_choice_text(response, "ocr")
