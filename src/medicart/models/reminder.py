"""Medication reminder models."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIME_PATTERN = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")

DEFAULT_REMINDER_TIMES = ("09:00", "21:00")
DEFAULT_FORM_TIME = "09:00"
DEFAULT_ADDED_TIME = "12:00"
FREQUENCY_CHOICES = ("Daily", "Twice Daily", "Three Times Daily", "As Needed", "Weekly")


def validate_times(times: list[str]) -> list[str]:
    """Ensure a schedule carries at least one well-formed ``HH:MM`` entry."""

    if not times:
        raise ValueError("a reminder needs at least one time")
    for entry in times:
        if not TIME_PATTERN.match(entry):
            raise ValueError(f"invalid reminder time {entry!r}, expected HH:MM")
    return times


class ReminderDraft(BaseModel):
    """Reminder form payload before an id is assigned."""

    medication: str = Field(default="")
    dosage: str = Field(default="")
    frequency: str = Field(default="Daily")
    times: list[str] = Field(default_factory=lambda: [DEFAULT_FORM_TIME])

    model_config = ConfigDict(frozen=True)

    @field_validator("medication", "dosage", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("times")
    @classmethod
    def _check_times(cls, value: list[str]) -> list[str]:
        return validate_times(value)


class Reminder(ReminderDraft):
    """Recurring dosage reminder persisted in the reminder collection."""

    id: str
    enabled: bool = Field(default=True)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_legacy_id(cls, value):
        # older collections carried numeric, timestamp-derived ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


__all__ = [
    "DEFAULT_ADDED_TIME",
    "DEFAULT_FORM_TIME",
    "DEFAULT_REMINDER_TIMES",
    "FREQUENCY_CHOICES",
    "Reminder",
    "ReminderDraft",
    "TIME_PATTERN",
    "validate_times",
]
