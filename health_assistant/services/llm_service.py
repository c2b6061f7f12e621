import base64
import logging
from typing import Any, Dict, List, Optional, Tuple

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from health_assistant.services.errors import CompletionFailed, UpstreamRateLimited
from health_assistant.utils.config import (
    GEMINI_API_KEY,
    LLM_MAX_OUTPUT_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT,
    LLM_TOP_P,
)

logger = logging.getLogger(__name__)

GEMINI_ROLES = {"user": "user", "assistant": "model"}


def _parse_data_url(url: str) -> Tuple[str, bytes]:
    header, _, payload = url.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("only base64 data URLs are supported")
    mime_type = header[len("data:"):-len(";base64")]
    return mime_type, base64.b64decode(payload)


def _to_parts(content: Any) -> List[types.Part]:
    if isinstance(content, str):
        return [types.Part.from_text(text=content)]

    parts = []
    for item in content:
        if item["type"] == "text":
            parts.append(types.Part.from_text(text=item["text"]))
        elif item["type"] == "image_url":
            mime_type, data = _parse_data_url(item["image_url"]["url"])
            parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))
        else:
            raise ValueError(f"unsupported content part: {item['type']}")
    return parts


def to_gemini_request(messages: List[Dict[str, Any]]) -> Tuple[Optional[str], List[types.Content]]:
    """Split a chat-style message list into Gemini's system instruction and contents."""
    system_instruction = None
    contents = []
    for message in messages:
        if message["role"] == "system":
            system_instruction = message["content"]
            continue
        contents.append(types.Content(role=GEMINI_ROLES[message["role"]], parts=_to_parts(message["content"])))
    return system_instruction, contents


class GeminiCompletionClient:
    def __init__(self, api_key: Optional[str] = GEMINI_API_KEY, model: str = LLM_MODEL,
                 temperature: float = LLM_TEMPERATURE, max_output_tokens: int = LLM_MAX_OUTPUT_TOKENS,
                 top_p: float = LLM_TOP_P, timeout: float = LLM_TIMEOUT, client=None):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.top_p = top_p
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        # built on first use so the app can start without credentials
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    async def generate_llm_response(self, messages: List[Dict[str, Any]]) -> str:
        try:
            system_instruction, contents = to_gemini_request(messages)
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                    top_p=self.top_p,
                ),
            )
            text = response.text
        except genai_errors.APIError as e:
            if e.code == 429:
                logger.warning(f"Completion rate limited: {e}")
                raise UpstreamRateLimited(str(e)) from e
            logger.error(f"Completion API error {e.code}: {e}")
            raise CompletionFailed(str(e)) from e
        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionFailed(str(e)) from e

        if not text or not text.strip():
            raise CompletionFailed("completion returned no text")
        return text
