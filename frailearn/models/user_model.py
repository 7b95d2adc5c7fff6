from sqlalchemy import Integer, String, Boolean, DateTime, func, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from frailearn.db.base_class import Base
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
import enum

if TYPE_CHECKING:
    from .course.chapter_model import Chapter
    from .bridge.bridge_course_model import BridgeCourse
    from .testing.test_attempt_model import TestAttempt
    from .progress.mistake_model import Mistake
    from .progress.remedial_chapter_model import RemedialChapter


class ProficiencyLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


def level_enum(name: str = "proficiencylevel") -> Enum:
    """Column type shared by every table that stores a proficiency level."""
    return Enum(ProficiencyLevel, name=name, values_callable=lambda obj: [e.value for e in obj])


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    current_level: Mapped[ProficiencyLevel] = mapped_column(
        level_enum(),
        nullable=False,
        default=ProficiencyLevel.BEGINNER,
        server_default=ProficiencyLevel.BEGINNER.value,
    )
    skipped_placement_test: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    placement_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    chapters: Mapped[List["Chapter"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    bridge_course: Mapped[Optional["BridgeCourse"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )
    test_attempts: Mapped[List["TestAttempt"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    mistakes: Mapped[List["Mistake"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    remedial_chapters: Mapped[List["RemedialChapter"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
