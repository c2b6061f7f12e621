import io
import json

import pytest
from starlette.datastructures import FormData, Headers, UploadFile

from health_assistant.schemas.chat_schemas import AudioInput, TextInput
from health_assistant.schemas.submission import parse_submission
from health_assistant.services.errors import ValidationError


def upload(data: bytes, filename="audio.wav", content_type="audio/wav"):
    return UploadFile(file=io.BytesIO(data), filename=filename,
                      headers=Headers({"content-type": content_type}))


async def test_text_input():
    submission = await parse_submission(FormData([("input", "Hello")]))
    assert isinstance(submission.input, TextInput)
    assert submission.input.text == "Hello"
    assert submission.messages == []
    assert submission.image is None


async def test_audio_input_with_history():
    form = FormData([
        ("input", upload(b"RIFF....WAVE")),
        ("message", json.dumps({"role": "user", "content": "first"})),
        ("message", json.dumps({"role": "assistant", "content": "second"})),
    ])
    submission = await parse_submission(form)
    assert isinstance(submission.input, AudioInput)
    assert submission.input.data == b"RIFF....WAVE"
    assert submission.input.content_type == "audio/wav"
    assert [(m.role, m.content) for m in submission.messages] == [("user", "first"), ("assistant", "second")]


async def test_image_attached():
    form = FormData([("input", "Hello"), ("image", upload(b"\x89PNG", "rash.png", "image/png"))])
    submission = await parse_submission(form)
    assert submission.image.data == b"\x89PNG"
    assert submission.image.content_type == "image/png"


async def test_empty_image_counts_as_absent():
    form = FormData([("input", "Hello"), ("image", upload(b"", "empty.png", "image/png"))])
    submission = await parse_submission(form)
    assert submission.image is None


@pytest.mark.parametrize("form", [
    FormData([]),
    FormData([("input", "")]),
    FormData([("input", "a"), ("input", "b")]),
    FormData([("input", "Hello"), ("message", "not json")]),
    FormData([("input", "Hello"), ("message", json.dumps({"role": "system", "content": "x"}))]),
    FormData([("input", "Hello"), ("message", json.dumps({"role": "user"}))]),
    FormData([("input", "Hello"), ("image", "not a file")]),
])
async def test_invalid_forms(form):
    with pytest.raises(ValidationError):
        await parse_submission(form)


async def test_empty_audio_rejected():
    with pytest.raises(ValidationError):
        await parse_submission(FormData([("input", upload(b""))]))


async def test_image_needs_image_type():
    form = FormData([("input", "Hello"), ("image", upload(b"%PDF", "doc.pdf", "application/pdf"))])
    with pytest.raises(ValidationError):
        await parse_submission(form)
