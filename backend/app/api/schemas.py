"""
Shared request models. Route-specific bodies live next to their routes.
"""
from typing import Optional

from pydantic import BaseModel, Field, RootModel, field_validator, model_validator

from app.core.constants import DAY_NAMES
from app.services.scheduling import parse_hhmm


class DayHoursIn(BaseModel):
    start: Optional[str] = Field(None, description="HH:MM opening time")
    end: Optional[str] = Field(None, description="HH:MM closing time (exclusive)")
    closed: bool = False

    @model_validator(mode="after")
    def check_range(self):
        if self.closed:
            return self
        start, end = parse_hhmm(self.start), parse_hhmm(self.end)
        if start is None or end is None:
            raise ValueError("start and end must be HH:MM unless the day is closed")
        if start >= end:
            raise ValueError("start must be before end")
        return self


class WorkingHoursIn(RootModel[dict[str, DayHoursIn]]):
    """Weekly hours keyed by lowercase day name. Days left out count as closed."""

    @field_validator("root", mode="before")
    @classmethod
    def lower_keys(cls, v):
        if not isinstance(v, dict):
            return v
        out = {str(k).strip().lower(): day for k, day in v.items()}
        unknown = sorted(set(out) - set(DAY_NAMES))
        if unknown:
            raise ValueError(f"unknown day names: {', '.join(unknown)}")
        return out

    def as_json(self) -> dict:
        return {day: hours.model_dump() for day, hours in self.root.items()}
