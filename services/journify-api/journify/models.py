from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .labels import LabelList

DEFAULT_CATEGORY = "Personal"


class Base(DeclarativeBase):
    pass


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    title: Mapped[str | None] = mapped_column(Text)
    content: Mapped[str | None] = mapped_column(Text)
    primary_mood: Mapped[str | None] = mapped_column(Text)
    secondary_moods: Mapped[list[str] | None] = mapped_column(LabelList, nullable=True, default=list)
    category: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_CATEGORY)
    tags: Mapped[list[str] | None] = mapped_column(LabelList, nullable=True, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("journal_entries_entry_date_idx", "entry_date"),
    )


EDITABLE_FIELDS = (
    "entry_date",
    "title",
    "content",
    "primary_mood",
    "secondary_moods",
    "category",
    "tags",
)
