from pydantic import BaseModel


class ChatResponse(BaseModel):
    message: str
    type: str
    confidence: str | None = None
    remaining: int | None = None
    daily_limit: int | None = None
    suggestions: list[str] = []
    related_questions: list[str] = []
    matched_question: str | None = None
    score: float | None = None
