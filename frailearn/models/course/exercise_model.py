from sqlalchemy import Integer, String, Text, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .lesson_model import Lesson


class Exercise(Base):
    """A single question/answer pair inside a lesson."""

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    lesson_id: Mapped[int] = mapped_column(Integer, ForeignKey("lessons.id"), index=True, nullable=False)
    exercise_number: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(50), default="MULTIPLE_CHOICE", nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, default=list)
    explanation: Mapped[Optional[str]] = mapped_column(Text)
    grammar_point: Mapped[Optional[str]] = mapped_column(String(255))
    difficulty: Mapped[str] = mapped_column(String(20), default="MEDIUM", nullable=False)
    topic: Mapped[Optional[str]] = mapped_column(String(255))

    lesson: Mapped["Lesson"] = relationship(back_populates="exercises")

    def __repr__(self):
        return f"<Exercise(id={self.id}, lesson_id={self.lesson_id}, number={self.exercise_number})>"
