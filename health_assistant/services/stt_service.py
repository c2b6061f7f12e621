import asyncio
import io
import logging
from typing import Optional, Protocol, Union

import assemblyai as aai

from health_assistant.schemas.chat_schemas import AudioInput, TextInput
from health_assistant.services.errors import TranscriptionEmpty, TranscriptionFailed, UpstreamRateLimited
from health_assistant.utils.config import ASSEMBLYAI_API_KEY, STT_MODEL, STT_TIMEOUT

logger = logging.getLogger(__name__)


class Transcriber(Protocol):
    async def transcribe_audio(self, audio_bytes: bytes) -> str: ...


class AssemblyAITranscriber:
    """Batch speech-to-text through the AssemblyAI SDK.

    The SDK call blocks while it uploads and polls, so it runs in a worker
    thread to keep the event loop free for other requests.
    """

    def __init__(self, api_key: Optional[str] = ASSEMBLYAI_API_KEY, speech_model: str = STT_MODEL,
                 timeout: float = STT_TIMEOUT, transcriber=None):
        self.api_key = api_key
        self.speech_model = speech_model
        self.timeout = timeout
        self._transcriber = transcriber

    def _get_transcriber(self):
        if self._transcriber is None:
            aai.settings.api_key = self.api_key
            aai.settings.http_timeout = self.timeout
            config = aai.TranscriptionConfig(speech_model=aai.SpeechModel(self.speech_model))
            self._transcriber = aai.Transcriber(config=config)
        return self._transcriber

    def _transcribe_sync(self, audio_bytes: bytes):
        return self._get_transcriber().transcribe(io.BytesIO(audio_bytes))

    async def transcribe_audio(self, audio_bytes: bytes) -> str:
        try:
            transcript = await asyncio.to_thread(self._transcribe_sync, audio_bytes)
        except aai.types.AssemblyAIError as e:
            if getattr(e, "status_code", None) == 429:
                logger.warning(f"Transcription rate limited: {e}")
                raise UpstreamRateLimited(str(e)) from e
            logger.warning(f"Transcription request failed: {e}")
            raise TranscriptionFailed(str(e)) from e
        except Exception as e:
            logger.warning(f"Transcription request failed: {e}")
            raise TranscriptionFailed(str(e)) from e

        if transcript.status == aai.TranscriptStatus.error:
            logger.warning(f"Transcription returned an error: {transcript.error}")
            raise TranscriptionFailed(transcript.error or "transcription error")

        text = (transcript.text or "").strip()
        if not text:
            raise TranscriptionEmpty("speech-to-text returned no text")
        return text


async def resolve_transcript(user_input: Union[TextInput, AudioInput], transcriber: Transcriber) -> str:
    if isinstance(user_input, TextInput):
        return user_input.text
    return await transcriber.transcribe_audio(user_input.data)
