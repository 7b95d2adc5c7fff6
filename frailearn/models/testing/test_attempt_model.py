# Fichier: frailearn/models/testing/test_attempt_model.py
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, JSON, Enum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from frailearn.models.user_model import ProficiencyLevel, level_enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime
import enum

if TYPE_CHECKING:
    from ..user_model import User
    from ..bridge.bridge_course_model import BridgeCourse


class TestType(str, enum.Enum):
    __test__ = False

    PROGRESS_TEST = "PROGRESS_TEST"
    BRIDGE_FINAL = "BRIDGE_FINAL"


class TestAttempt(Base):
    """One test-taking session.

    ``completed_at`` stays NULL while the attempt is in progress; grading sets
    it together with ``score``, ``correct_answers`` and ``passed`` exactly once.
    """

    __test__ = False
    __tablename__ = "test_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    test_type: Mapped[TestType] = mapped_column(
        Enum(TestType, name="testtype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        index=True,
    )
    level: Mapped[ProficiencyLevel] = mapped_column(level_enum(), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Progress tests cover a chapter range ("1-5"); bridge final tests point
    # at the bridge course they conclude.
    chapter_range: Mapped[Optional[str]] = mapped_column(String(50))
    bridge_course_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("bridge_courses.id"), nullable=True)

    questions: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    user_answers: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    correct_answers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False)

    topic_breakdown: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    weak_areas: Mapped[List[str]] = mapped_column(JSON, default=list)
    strong_areas: Mapped[List[str]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship(back_populates="test_attempts")
    bridge_course: Mapped[Optional["BridgeCourse"]] = relationship(back_populates="final_tests")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self):
        return f"<TestAttempt(id={self.id}, type={self.test_type}, score={self.score}, passed={self.passed})>"
