from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FAQCreate(BaseModel):
    # blank-after-trim text is rejected
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    category: str | None = None


class FAQUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str | None = Field(default=None, min_length=1)
    answer: str | None = Field(default=None, min_length=1)
    category: str | None = None


class FAQOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    answer: str
    category: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
