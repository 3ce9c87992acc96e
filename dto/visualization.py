from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr, field_validator

CHART_TYPES = Literal["bar", "line", "pie"]


class VisualizationPoint(BaseModel):
    name: StrictStr
    value: Union[StrictInt, StrictFloat]

    model_config = {"frozen": True}

    @field_validator("value", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        # JSON true/false arrive as Python bools, which are ints
        if isinstance(value, bool):
            raise ValueError("value must be a number, not a boolean")
        return value


class VisualizationSpec(BaseModel):
    """Chart description recovered from a model reply."""

    type: CHART_TYPES
    title: StrictStr
    data: List[VisualizationPoint]

    model_config = {"frozen": True}


class ExtractionResult(BaseModel):
    """
    Narrative text of a reply plus the chart it carried, if any.

    ``visualization`` is ``None`` whenever no well-formed block was found;
    ``narrative`` is always usable on its own.
    """

    narrative: str
    visualization: Optional[VisualizationSpec] = None

    @property
    def has_visualization(self) -> bool:
        return self.visualization is not None
