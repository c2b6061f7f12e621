from typing import Any, Dict, List, Optional, Sequence

from health_assistant.schemas.chat_schemas import ChatMessage, EncodedImage

SYSTEM_PROMPT = """You have to act as a professional doctor, I know you are not but this is for learning purpose.
    What's in this image?. Do you find anything wrong with it medically?
    If you make a differential, suggest some remedies for them. Do not add any numbers or special characters in
    your response. Your response should be in one long paragraph. Also always answer as if you are answering to a real person.
    Do not say 'In the image I see' but say 'With what I see, I think you have ....'
    Don't respond as an AI model in markdown, your answer should mimic that of an actual doctor not an AI bot,
    Keep your answer concise. No preamble, start your answer right away please"""


def compose_messages(
    transcript: str,
    history: Sequence[ChatMessage],
    image: Optional[EncodedImage] = None,
    system_prompt: str = SYSTEM_PROMPT,
) -> List[Dict[str, Any]]:
    """Build the message list sent to the completion API.

    Order is system prompt, prior turns exactly as submitted, the new user
    turn, and, when an image was attached, one more user turn pairing the
    transcript with the image.
    """
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": m.role, "content": m.content} for m in history)
    messages.append({"role": "user", "content": transcript})

    if image is not None:
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": transcript},
                {"type": "image_url", "image_url": {"url": image.data_url}},
            ],
        })

    return messages
