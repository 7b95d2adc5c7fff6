from sqlalchemy import Integer, String, Boolean, Text, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from frailearn.models.user_model import ProficiencyLevel, level_enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from ..user_model import User


class RemedialChapter(Base):
    """Short review chapter generated for a topic the learner got wrong.

    At most one open (``is_completed`` false) chapter exists per
    ``(user_id, grammar_point)``.
    """

    __tablename__ = "remedial_chapters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    level: Mapped[ProficiencyLevel] = mapped_column(level_enum(), nullable=False)
    grammar_point: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Test attempt whose mistakes triggered the chapter.
    source_test_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("test_attempts.id", ondelete="SET NULL"), nullable=True
    )
    triggered_by: Mapped[Optional[str]] = mapped_column(String(255))
    mistake_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mistake_question_ids: Mapped[List[str]] = mapped_column(JSON, default=list)

    content: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    exercises: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    estimated_minutes: Mapped[int] = mapped_column(Integer, default=2, nullable=False)

    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped["User"] = relationship(back_populates="remedial_chapters")

    def __repr__(self):
        return f"<RemedialChapter(id={self.id}, user_id={self.user_id}, grammar_point={self.grammar_point!r})>"
