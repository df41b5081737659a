"""
Project input/output schemas and query filters.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProjectType(str, Enum):
    CONSTRUCTION = "construction"
    MACHINERY = "machinery"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


# Fields a create request must carry (reported back on a 400)
REQUIRED_FIELDS = [
    "name", "state_id", "type", "status", "start_date",
    "budget", "contractor", "description", "progress",
]
_NUMERIC_FIELDS = {"budget", "disbursed", "progress", "planned_progress"}
_OPTIONAL_TEXT = ("location", "branch", "officer")
_NOT_NULL = (
    "name", "state_id", "type", "status", "start_date", "budget", "disbursed",
    "contractor", "description", "progress", "planned_progress",
)


def missing_fields(body: Mapping[str, Any]) -> list[str]:
    """Required fields that are absent or blank. Numeric zero counts as present."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = body.get(name)
        if value is None:
            missing.append(name)
        elif name not in _NUMERIC_FIELDS and isinstance(value, str) and not value.strip():
            missing.append(name)
    return missing


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProjectCreate(BaseModel):
    model_config = ConfigDict(
        str_strip_whitespace=True, use_enum_values=True, allow_inf_nan=False, extra="ignore",
    )

    name: str = Field(min_length=1)
    state_id: str = Field(min_length=1)
    location: Optional[str] = None
    branch: Optional[str] = None
    type: ProjectType
    status: ProjectStatus
    start_date: dt.date
    end_date: Optional[dt.date] = None
    budget: float = Field(ge=0)
    disbursed: float = Field(default=0, ge=0)
    contractor: str = Field(min_length=1)
    officer: Optional[str] = None
    description: str = Field(min_length=1)
    progress: float
    planned_progress: float = 0

    @field_validator("state_id")
    @classmethod
    def _lower_state(cls, v: str) -> str:
        return v.lower()

    @field_validator("end_date", *_OPTIONAL_TEXT, mode="before")
    @classmethod
    def _blank_optional(cls, v):
        return _blank_to_none(v)


class ProjectUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""
    model_config = ConfigDict(
        str_strip_whitespace=True, use_enum_values=True, allow_inf_nan=False, extra="ignore",
    )

    name: Optional[str] = Field(default=None, min_length=1)
    state_id: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = None
    branch: Optional[str] = None
    type: Optional[ProjectType] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    disbursed: Optional[float] = Field(default=None, ge=0)
    contractor: Optional[str] = Field(default=None, min_length=1)
    officer: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=1)
    progress: Optional[float] = None
    planned_progress: Optional[float] = None

    @field_validator("state_id")
    @classmethod
    def _lower_state(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v

    @field_validator("end_date", *_OPTIONAL_TEXT, mode="before")
    @classmethod
    def _blank_optional(cls, v):
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _no_null_required(self) -> "ProjectUpdate":
        nulled = [name for name in _NOT_NULL if name in self.model_fields_set and getattr(self, name) is None]
        if nulled:
            raise ValueError(f"fields cannot be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    state_id: str
    location: Optional[str] = None
    branch: Optional[str] = None
    type: ProjectType
    status: ProjectStatus
    start_date: dt.date
    end_date: Optional[dt.date] = None
    budget: float
    disbursed: float = 0
    contractor: str
    officer: Optional[str] = None
    description: str
    progress: float
    planned_progress: float = 0
    created_by: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: dt.datetime) -> dt.datetime:
        # SQLite hands timestamps back without tzinfo; they are stored as UTC
        return v if v.tzinfo is not None else v.replace(tzinfo=dt.timezone.utc)


@dataclass
class ProjectFilters:
    """Optional list filters; all present filters are ANDed, date bounds inclusive."""
    state_id: Optional[str] = None
    type: Optional[ProjectType] = None
    status: Optional[ProjectStatus] = None
    start_date_from: Optional[dt.date] = None
    start_date_to: Optional[dt.date] = None
    end_date_from: Optional[dt.date] = None
    end_date_to: Optional[dt.date] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))
