# Fichier: frailearn/models/bridge/bridge_course_model.py
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from frailearn.models.user_model import ProficiencyLevel, level_enum
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from ..user_model import User
    from ..testing.test_attempt_model import TestAttempt


class BridgeCourse(Base):
    """Remedial course a learner finishes before moving up to ``target_level``."""

    __tablename__ = "bridge_courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    target_level: Mapped[ProficiencyLevel] = mapped_column(level_enum(), nullable=False)

    total_chapters: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_chapters: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    final_test_score: Mapped[Optional[int]] = mapped_column(Integer)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped["User"] = relationship(back_populates="bridge_course")
    chapters: Mapped[List["BridgeChapter"]] = relationship(
        back_populates="bridge_course",
        cascade="all, delete-orphan",
        order_by="BridgeChapter.chapter_number",
    )
    final_tests: Mapped[List["TestAttempt"]] = relationship(back_populates="bridge_course")

    def __repr__(self):
        return f"<BridgeCourse(id={self.id}, user_id={self.user_id}, completed={self.is_completed})>"


class BridgeChapter(Base):
    __tablename__ = "bridge_chapters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    bridge_course_id: Mapped[int] = mapped_column(Integer, ForeignKey("bridge_courses.id"), index=True, nullable=False)
    chapter_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    topic: Mapped[Optional[str]] = mapped_column(String(255))
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    bridge_course: Mapped["BridgeCourse"] = relationship(back_populates="chapters")
