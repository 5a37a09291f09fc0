"""QueryPlan Pydantic model."""

from pydantic import BaseModel

from research_signals.models.chat import ChatMessage


class QueryPlan(BaseModel):
    user_text: str
    system_text: str | None = None
    model_hint: str | None = None
    temperature_hint: float | None = None

    model_config = {"frozen": True}

    def messages(self) -> list[ChatMessage]:
        """System message (if any) first, then the user turn."""
        messages = []
        if self.system_text:
            messages.append(ChatMessage(role="system", content=self.system_text))
        messages.append(ChatMessage(role="user", content=self.user_text))
        return messages
