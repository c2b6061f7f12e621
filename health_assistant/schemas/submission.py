import json

import pydantic
from starlette.datastructures import FormData, UploadFile

from health_assistant.schemas.chat_schemas import (
    AudioInput,
    ChatMessage,
    ImageUpload,
    Submission,
    TextInput,
)
from health_assistant.services.errors import ValidationError


async def parse_submission(form: FormData) -> Submission:
    """Turn the multipart form posted to ``/api`` into a ``Submission``.

    Fields:
      * ``input``   - exactly one value, either non-empty text or a non-empty audio file
      * ``message`` - repeatable JSON ``{"role", "content"}`` objects, in order
      * ``image``   - optional image file; an empty upload counts as no image

    Raises ``ValidationError`` on anything else, before any external call is made.
    """
    inputs = form.getlist("input")
    if len(inputs) != 1:
        raise ValidationError(f"expected exactly one input field, got {len(inputs)}")

    try:
        user_input = await _parse_input(inputs[0])
        messages = [_parse_message(raw) for raw in form.getlist("message")]
        image = await _parse_image(form.getlist("image"))
        return Submission(input=user_input, messages=messages, image=image)
    except (pydantic.ValidationError, json.JSONDecodeError) as e:
        raise ValidationError(str(e)) from e


async def _parse_input(value):
    if isinstance(value, UploadFile):
        data = await value.read()
        if not data:
            raise ValidationError("audio input is empty")
        return AudioInput(data=data, filename=value.filename, content_type=value.content_type)

    if not value:
        raise ValidationError("text input is empty")
    return TextInput(text=value)


def _parse_message(raw) -> ChatMessage:
    if not isinstance(raw, str):
        raise ValidationError("message fields must be JSON strings")
    return ChatMessage.model_validate(json.loads(raw))


async def _parse_image(values):
    if not values:
        return None
    if len(values) > 1:
        raise ValidationError("at most one image may be attached")

    upload = values[0]
    if not isinstance(upload, UploadFile):
        raise ValidationError("image must be a file upload")

    data = await upload.read()
    if not data:
        return None
    return ImageUpload(data=data, content_type=upload.content_type or "")
