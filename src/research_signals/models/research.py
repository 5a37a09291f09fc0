"""ResearchResult Pydantic model."""

from pydantic import BaseModel


class ResearchResult(BaseModel):
    query: str = ""
    answer: str = ""
    citations: list[str] = []
    model: str = ""
    tokens_used: int = 0

    model_config = {"frozen": True}
