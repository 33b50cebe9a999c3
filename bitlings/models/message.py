from typing import Optional
from pydantic import BaseModel, Field


class Message(BaseModel):
    role: str = Field(
        ...,
        description="Message role: 'user', 'assistant' or 'system'.",
    )
    content: Optional[str] = Field(
        None,
        description="Text content of the message.",
    )
    image_url: Optional[str] = Field(
        None,
        description="Optional image attached to a user message (URL or data: URL).",
    )
