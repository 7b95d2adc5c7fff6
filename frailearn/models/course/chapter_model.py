# Fichier: frailearn/models/course/chapter_model.py
from sqlalchemy import Integer, String, Boolean, Text, Float, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from frailearn.models.user_model import ProficiencyLevel, level_enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from ..user_model import User
    from .lesson_model import Lesson


class Chapter(Base):
    __tablename__ = "chapters"
    __table_args__ = (UniqueConstraint("user_id", "level", "chapter_number", name="uq_chapter_user_level_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    level: Mapped[ProficiencyLevel] = mapped_column(level_enum(), nullable=False)
    chapter_number: Mapped[int] = mapped_column(Integer, nullable=False)
    section_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    estimated_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    learning_objectives: Mapped[List[str]] = mapped_column(JSON, default=list)
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)

    # --- Gating ---
    is_unlocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    unlocked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    unlock_condition: Mapped[Optional[str]] = mapped_column(String(255))

    is_started: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    mastery_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    user: Mapped["User"] = relationship(back_populates="chapters")
    lessons: Mapped[List["Lesson"]] = relationship(
        back_populates="chapter",
        cascade="all, delete-orphan",
        order_by="Lesson.lesson_number",
    )

    @property
    def status_label(self) -> str:
        if self.is_completed:
            return "Completed"
        if self.is_started:
            return "In Progress"
        if self.is_unlocked:
            return "Unlocked"
        return "Locked"

    def __repr__(self):
        return f"<Chapter(id={self.id}, level={self.level}, number={self.chapter_number})>"
