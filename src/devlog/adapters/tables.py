"""
SQLAlchemy tables for categories, sprints and entries.

Dates and timestamps are stored as ISO strings so that ordering and range
filters compare lexicographically, the same way the core does.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from devlog.core.models import Category, DailyEntry, Sprint


class Base(DeclarativeBase):
    pass


class CategoryRow(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(collation="nocase"), nullable=False, unique=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)

    def to_model(self) -> Category:
        return Category(id=self.id, name=self.name, created_at=self.created_at)


class SprintRow(Base):
    __tablename__ = "sprints"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[str] = mapped_column(String, nullable=False)
    end_date: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)

    def to_model(self) -> Sprint:
        return Sprint(
            id=self.id,
            code=self.code,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            created_at=self.created_at,
        )


class EntryRow(Base):
    __tablename__ = "entries"
    __table_args__ = (
        Index("idx_entries_sprint_date", "sprint_id", "date", "category_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    sprint_id: Mapped[str] = mapped_column(
        String, ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[str] = mapped_column(String, nullable=False)
    category_id: Mapped[str] = mapped_column(
        String, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)

    def to_model(self) -> DailyEntry:
        return DailyEntry(
            id=self.id,
            sprint_id=self.sprint_id,
            date=self.date,
            category_id=self.category_id,
            title=self.title,
            details=self.details,
            created_at=self.created_at,
        )
