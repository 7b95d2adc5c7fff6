from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from .chapter_model import Chapter
    from .exercise_model import Exercise


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    chapter_id: Mapped[int] = mapped_column(Integer, ForeignKey("chapters.id"), index=True, nullable=False)
    lesson_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    grammar_points: Mapped[List[str]] = mapped_column(JSON, default=list)
    vocabulary: Mapped[List[Any]] = mapped_column(JSON, default=list)
    examples: Mapped[List[Any]] = mapped_column(JSON, default=list)

    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    chapter: Mapped["Chapter"] = relationship(back_populates="lessons")
    exercises: Mapped[List["Exercise"]] = relationship(
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="Exercise.exercise_number",
    )

    def __repr__(self):
        return f"<Lesson(id={self.id}, chapter_id={self.chapter_id}, number={self.lesson_number})>"
