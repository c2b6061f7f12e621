import base64

from health_assistant.schemas.chat_schemas import ChatMessage, EncodedImage, ImageUpload
from health_assistant.services.conversation import SYSTEM_PROMPT, compose_messages
from health_assistant.services.image_service import encode_image


def test_text_only_without_history():
    messages = compose_messages("Hello", [])
    assert messages == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Hello"},
    ]


def test_history_kept_in_order_before_new_turn():
    history = [
        ChatMessage(role="assistant", content="Hi"),
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hi"),
    ]
    messages = compose_messages("What is this rash?", history, system_prompt="sys")
    assert messages == [
        {"role": "system", "content": "sys"},
        {"role": "assistant", "content": "Hi"},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hi"},
        {"role": "user", "content": "What is this rash?"},
    ]


def test_image_adds_two_part_user_turn():
    image = EncodedImage(media_type="image/png", data="aGVsbG8=")
    messages = compose_messages("Look at this", [], image, system_prompt="sys")

    assert len(messages) == 3
    assert messages[1] == {"role": "user", "content": "Look at this"}
    last = messages[-1]
    assert last["role"] == "user"
    text_part, image_part = last["content"]
    assert text_part == {"type": "text", "text": "Look at this"}
    assert image_part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,aGVsbG8="}}


def test_compose_does_not_mutate_history():
    history = [ChatMessage(role="assistant", content="Hi")]
    compose_messages("Hello", history)
    assert history == [ChatMessage(role="assistant", content="Hi")]


def test_encode_image_absent():
    assert encode_image(None) is None


def test_encode_image_keeps_every_byte():
    data = bytes(range(256)) * 4096
    encoded = encode_image(ImageUpload(data=data, content_type="image/jpeg"))
    assert encoded.media_type == "image/jpeg"
    assert encoded.data_url.startswith("data:image/jpeg;base64,")
    assert base64.b64decode(encoded.data) == data
