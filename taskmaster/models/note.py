"""Note model."""

from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class Note(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"

    title: str = Field(nullable=False)
    content: str = Field(nullable=False)
