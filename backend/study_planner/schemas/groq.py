from typing import Literal

from pydantic import BaseModel, Field


class TextRequest(BaseModel):
    text: str = ""


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1)
