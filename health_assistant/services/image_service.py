import base64
from typing import Optional

from health_assistant.schemas.chat_schemas import EncodedImage, ImageUpload


def encode_image(image: Optional[ImageUpload]) -> Optional[EncodedImage]:
    if image is None:
        return None
    return EncodedImage(
        media_type=image.content_type,
        data=base64.b64encode(image.data).decode("utf-8"),
    )
