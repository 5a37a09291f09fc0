"""ChatMessage, ChatResponse Pydantic models."""

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"] = "user"
    content: str = ""

    model_config = {"frozen": True}


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    model_config = {"frozen": True}


class ChatResponse(BaseModel):
    answer_text: str = ""
    citations: list[str] = []
    usage: TokenUsage = TokenUsage()
    model: str = ""

    model_config = {"frozen": True}
