from typing import Literal

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    description: str = Field(..., min_length=1, description="What the notebook should be about.")
    output_path: str = Field(..., min_length=1, description="Where the converter writes the notebook.")


class ChatMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str


class ChoiceMessage(BaseModel):
    content: str = ""


class ChatChoice(BaseModel):
    message: ChoiceMessage


class ChatResponse(BaseModel):
    choices: list[ChatChoice] = []
