from __future__ import annotations

from pydantic import Field

from genai_notes.core.models.base import AppBaseModel


class TitleRequest(AppBaseModel):
    content: str = Field(..., min_length=1, description="Note content to title")


class ExpandRequest(AppBaseModel):
    shorthand: str = Field(..., min_length=1, description="Bullet points or shorthand to expand")


class SummarizeRequest(AppBaseModel):
    content: str = Field(..., min_length=1, description="Note content to summarize")


class AITextResponse(AppBaseModel):
    feature: str
    text: str
