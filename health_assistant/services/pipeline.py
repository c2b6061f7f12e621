import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Protocol

from starlette.datastructures import FormData

from health_assistant.schemas.chat_schemas import CallRecord, Submission
from health_assistant.schemas.submission import parse_submission
from health_assistant.services.call_log import CallLogStore
from health_assistant.services.conversation import SYSTEM_PROMPT, compose_messages
from health_assistant.services.errors import (
    CompletionFailed,
    PipelineError,
    SynthesisFailed,
    TranscriptionFailed,
    ValidationError,
)
from health_assistant.services.image_service import encode_image
from health_assistant.services.stt_service import Transcriber, resolve_transcript
from health_assistant.services.tts_service import SpeechStream
from health_assistant.utils.config import DEFAULT_CALLER
from health_assistant.utils.logger import shorten

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    TRANSCRIBING = "transcribing"
    COMPOSING = "composing"
    COMPLETING = "completing"
    SYNTHESIZING = "synthesizing"
    LOGGED_AND_RESPONDING = "logged_and_responding"
    DONE = "done"
    ERRORED = "errored"


# error raised when a stage fails with something that is not already a PipelineError
STAGE_FAILURES = {
    PipelineStage.TRANSCRIBING: TranscriptionFailed,
    PipelineStage.COMPOSING: ValidationError,
    PipelineStage.COMPLETING: CompletionFailed,
    PipelineStage.SYNTHESIZING: SynthesisFailed,
}


class CompletionClient(Protocol):
    async def generate_llm_response(self, messages: List[Dict[str, Any]]) -> str: ...


class SpeechSynthesizer(Protocol):
    async def text_to_speech(self, text: str) -> SpeechStream: ...


@dataclass
class PipelineResult:
    transcript: str
    reply: str
    audio: SpeechStream
    record: CallRecord


class VoicePipeline:
    """Runs one voice request: transcribe, compose, complete, synthesize, log.

    Each external service is called at most once per request and nothing is
    retried. A ``CallRecord`` is appended only after speech synthesis has
    succeeded, so failed requests never show up in the call log.
    """

    def __init__(self, transcriber: Transcriber, completion: CompletionClient,
                 synthesizer: SpeechSynthesizer, call_log: CallLogStore,
                 system_prompt: str = SYSTEM_PROMPT, caller: str = DEFAULT_CALLER):
        self.transcriber = transcriber
        self.completion = completion
        self.synthesizer = synthesizer
        self.call_log = call_log
        self.system_prompt = system_prompt
        self.caller = caller

    async def handle_form(self, form: FormData) -> PipelineResult:
        """Validate a posted form, then run it. Invalid forms never reach an external service."""
        logger.debug(f"Pipeline {PipelineStage.VALIDATING.value}")
        try:
            submission = await parse_submission(form)
        except ValidationError as e:
            logger.warning(f"Pipeline {PipelineStage.ERRORED.value} while {PipelineStage.VALIDATING.value}: {e}")
            raise
        return await self.run(submission)

    async def run(self, submission: Submission) -> PipelineResult:
        stage = PipelineStage.RECEIVED
        audio = None
        try:
            stage = PipelineStage.TRANSCRIBING
            transcript = await resolve_transcript(submission.input, self.transcriber)
            logger.info(f"Transcript ({submission.input.kind}): {shorten(transcript)}")

            stage = PipelineStage.COMPOSING
            image = encode_image(submission.image)
            messages = compose_messages(transcript, submission.messages, image, self.system_prompt)

            stage = PipelineStage.COMPLETING
            started = time.monotonic()
            reply = await self.completion.generate_llm_response(messages)
            logger.info(f"Completion after {time.monotonic() - started:.2f}s: {shorten(reply)}")

            stage = PipelineStage.SYNTHESIZING
            audio = await self.synthesizer.text_to_speech(reply)
            duration = time.monotonic() - started

            stage = PipelineStage.LOGGED_AND_RESPONDING
            record = CallRecord(user=self.caller, duration=duration, question=transcript)
            self.call_log.append(record)
            logger.info(f"Call {record.id} logged, {duration:.2f}s")
        except PipelineError as e:
            if audio is not None:
                await audio.aclose()
            logger.warning(f"Pipeline {PipelineStage.ERRORED.value} while {stage.value}: {e}")
            raise
        except Exception as e:
            if audio is not None:
                await audio.aclose()
            logger.exception(f"Pipeline {PipelineStage.ERRORED.value} while {stage.value}")
            raise STAGE_FAILURES.get(stage, PipelineError)(str(e)) from e

        logger.debug(f"Pipeline {PipelineStage.DONE.value}")
        return PipelineResult(transcript=transcript, reply=reply, audio=audio, record=record)
