import logging
from typing import AsyncIterator, Optional

import httpx

from health_assistant.services.errors import SynthesisFailed, UpstreamRateLimited
from health_assistant.utils.config import (
    MURF_API_KEY,
    TTS_SAMPLE_RATE,
    TTS_TIMEOUT,
    TTS_URL,
    TTS_VOICE_ID,
    TTS_VOICE_STYLE,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


class SpeechStream:
    """Audio body of an upstream TTS response, read chunk by chunk.

    The upstream connection is released once the chunks run out or the
    iteration is abandoned; ``aclose`` does the same for a stream that is
    never iterated.
    """

    media_type = "audio/wav"

    def __init__(self, response: httpx.Response):
        self._response = response

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes(CHUNK_SIZE):
                yield chunk
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class MurfSpeechClient:
    def __init__(self, http_client: httpx.AsyncClient, api_key: Optional[str] = MURF_API_KEY,
                 url: str = TTS_URL, voice_id: str = TTS_VOICE_ID, style: str = TTS_VOICE_STYLE,
                 sample_rate: int = TTS_SAMPLE_RATE, timeout: float = TTS_TIMEOUT):
        self.http_client = http_client
        self.api_key = api_key
        self.url = url
        self.voice_id = voice_id
        self.style = style
        self.sample_rate = sample_rate
        self.timeout = timeout

    def build_request(self, text: str) -> httpx.Request:
        return self.http_client.build_request(
            "POST",
            self.url,
            headers={
                "api-key": self.api_key or "",
                "Content-Type": "application/json",
                "Accept": "audio/wav",
            },
            json={
                "voiceId": self.voice_id,
                "style": self.style,
                "text": text,
                "format": "WAV",
                "sampleRate": self.sample_rate,
                "channelType": "MONO",
            },
            timeout=self.timeout,
        )

    async def text_to_speech(self, text: str) -> SpeechStream:
        try:
            response = await self.http_client.send(self.build_request(text), stream=True)
        except httpx.HTTPError as e:
            logger.error(f"TTS request failed: {e}")
            raise SynthesisFailed(str(e)) from e

        if response.is_success:
            return SpeechStream(response)

        await response.aread()
        await response.aclose()
        if response.status_code == 429:
            logger.warning("TTS rate limited")
            raise UpstreamRateLimited(f"TTS returned {response.status_code}")

        logger.error(f"TTS returned {response.status_code}: {response.text[:200]}")
        raise SynthesisFailed(f"TTS returned {response.status_code}")
