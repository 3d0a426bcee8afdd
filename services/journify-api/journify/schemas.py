from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .labels import clean_labels
from .models import DEFAULT_CATEGORY


class JournalEntryWrite(BaseModel):
    entry_date: date
    title: str | None = None
    content: str | None = None
    primary_mood: str | None = None
    secondary_moods: list[str] = Field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    tags: list[str] = Field(default_factory=list)

    @field_validator("secondary_moods", "tags")
    @classmethod
    def _check_labels(cls, value: list[str]) -> list[str]:
        return clean_labels(value)

    @field_validator("category")
    @classmethod
    def _default_category(cls, value: str) -> str:
        return value.strip() or DEFAULT_CATEGORY


class JournalEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_date: date
    title: str | None = None
    content: str | None = None
    primary_mood: str | None = None
    secondary_moods: list[str] = Field(default_factory=list)
    category: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class JournalStats(BaseModel):
    current_streak: int
    longest_streak: int
    missed_in_last_30_days: int
    total_words: int


class ExportRequest(BaseModel):
    start: date
    end: date


class ExportResult(BaseModel):
    path: str


class ThemeStatus(BaseModel):
    is_dark_mode: bool
    theme_class: str
