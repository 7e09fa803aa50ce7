"""Data models for Hevy CLI configuration and API records."""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Config(BaseModel):
    """Persisted CLI configuration (``~/.config/hevy-cli/config.json``)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_key: Optional[str] = Field(default=None, alias="apiKey")


class CredentialSource(str, Enum):
    """Where the active API key came from."""

    ENV = "env"
    CONFIG = "config"
    MISSING = "missing"


class Credential(BaseModel):
    """Resolved API key together with its origin."""

    api_key: Optional[str] = None
    source: CredentialSource


class RecordView(BaseModel):
    """Read-only view over a loosely typed API record.

    Null values are dropped before validation so an alias list behaves like
    "first non-null field wins". A record that is not an object has no fields.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return {}


class WorkoutView(RecordView):
    """Columns shown for a workout row."""

    id: Optional[Any] = None
    title: Any = Field(default="Untitled", validation_alias=AliasChoices("title", "name"))
    start: Optional[Any] = Field(
        default=None, validation_alias=AliasChoices("start_time", "startTime", "date")
    )
    duration: Optional[Any] = Field(
        default=None, validation_alias=AliasChoices("duration", "duration_minutes")
    )


class ExerciseView(RecordView):
    """Columns shown for an exercise row."""

    id: Optional[Any] = None
    name: Optional[Any] = None
    muscle: Optional[Any] = Field(
        default=None, validation_alias=AliasChoices("muscle_group", "muscleGroup")
    )
    equipment: Optional[Any] = None


class RoutineView(RecordView):
    """Columns shown for a routine row."""

    id: Optional[Any] = None
    title: Any = Field(default="Untitled", validation_alias=AliasChoices("title", "name"))
    updated: Optional[Any] = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt", "created_at")
    )
