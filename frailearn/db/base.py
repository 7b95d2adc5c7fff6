"""Declares every SQLAlchemy model so ``Base.metadata`` knows the full schema."""

from frailearn.db.base_class import Base

# Utilisateurs
from frailearn.models.user_model import User

# Curriculum
from frailearn.models.course.chapter_model import Chapter
from frailearn.models.course.lesson_model import Lesson
from frailearn.models.course.exercise_model import Exercise

# Bridge course & tests
from frailearn.models.bridge.bridge_course_model import BridgeCourse, BridgeChapter
from frailearn.models.testing.test_attempt_model import TestAttempt

# Progression
from frailearn.models.progress.mistake_model import Mistake
from frailearn.models.progress.remedial_chapter_model import RemedialChapter

__all__ = (
    "Base",
    "User",
    "Chapter",
    "Lesson",
    "Exercise",
    "BridgeCourse",
    "BridgeChapter",
    "TestAttempt",
    "Mistake",
    "RemedialChapter",
)
