"""
Conversation DTOs.

A Message is one turn of the chat transcript. Only assistant turns may
carry a chart.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from dto.visualization import VisualizationSpec


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    visualization: Optional[VisualizationSpec] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _only_assistant_has_visualization(self) -> "Message":
        if self.visualization is not None and self.role != "assistant":
            raise ValueError("only assistant messages may carry a visualization")
        return self


class QuestionSuggestion(BaseModel):
    """A follow-up question offered while the user is typing."""

    text: str
    type: Literal["column", "aggregate", "filter"]
