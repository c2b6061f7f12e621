"""Shared fakes for the external speech, completion and synthesis services."""
import pytest
from fastapi.testclient import TestClient

from health_assistant.main import app
from health_assistant.routes.api import get_pipeline
from health_assistant.services.call_log import InMemoryCallLog
from health_assistant.services.pipeline import VoicePipeline


class FakeTranscriber:
    def __init__(self, text="What is this rash?", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def transcribe_audio(self, audio_bytes: bytes) -> str:
        self.calls.append(audio_bytes)
        if self.error is not None:
            raise self.error
        return self.text


class FakeCompletion:
    def __init__(self, reply="With what I see, I think you have a mild allergy.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate_llm_response(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeSpeechStream:
    media_type = "audio/wav"

    def __init__(self, chunks=(b"RIFF", b"WAVEdata")):
        self.chunks = list(chunks)
        self.closed = False

    async def iter_bytes(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self):
        self.closed = True


class FakeSynthesizer:
    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self.streams = []

    async def text_to_speech(self, text: str):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        stream = FakeSpeechStream()
        self.streams.append(stream)
        return stream


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def call_log():
    return InMemoryCallLog(max_records=100)


@pytest.fixture
def pipeline(transcriber, completion, synthesizer, call_log):
    return VoicePipeline(
        transcriber=transcriber,
        completion=completion,
        synthesizer=synthesizer,
        call_log=call_log,
        system_prompt="You are a doctor.",
    )


@pytest.fixture
def client(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
