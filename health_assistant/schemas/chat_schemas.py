import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union

from health_assistant.utils.config import DEFAULT_CALLER


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class TextInput(BaseModel):
    kind: Literal["text"] = "text"
    text: str = Field(min_length=1)


class AudioInput(BaseModel):
    kind: Literal["audio"] = "audio"
    data: bytes = Field(min_length=1)
    filename: Optional[str] = None
    content_type: Optional[str] = None


SubmissionInput = Annotated[Union[TextInput, AudioInput], Field(discriminator="kind")]


class ImageUpload(BaseModel):
    data: bytes
    content_type: str = Field(pattern=r"^image/[\w.+-]+$")


class Submission(BaseModel):
    input: SubmissionInput
    messages: List[ChatMessage] = []
    image: Optional[ImageUpload] = None


class EncodedImage(BaseModel):
    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class CallRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user: str = DEFAULT_CALLER
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration: float = Field(ge=0)
    question: str
