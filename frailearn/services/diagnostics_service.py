"""Read-only reports behind the ``check_*`` and ``debug_*`` scripts.

Nothing in this module writes to the database. Each function returns plain
dataclasses; formatting is left to the scripts.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, inspect
from sqlalchemy.orm import Session, selectinload

from frailearn.core.config import settings
from frailearn.crud import bridge_course_crud, chapter_crud, remedial_chapter_crud, test_attempt_crud
from frailearn.models.course.chapter_model import Chapter
from frailearn.models.course.lesson_model import Lesson
from frailearn.models.progress.remedial_chapter_model import RemedialChapter
from frailearn.models.testing.test_attempt_model import TestAttempt, TestType
from frailearn.models.user_model import User
from frailearn.schemas.test_schema import parse_answers, parse_questions
from frailearn.services import gate_service, grading_service
from frailearn.services.grading_service import GradingAudit, compute_score, round_half_up

logger = logging.getLogger(__name__)

RECOMMENDATION_MARGIN = 5


# ----------------------------------------------------------------------
# Bridge final tests
# ----------------------------------------------------------------------
@dataclass(slots=True)
class BridgeTestStatus:
    test_attempt_id: int
    user_email: str
    level: str
    score: int
    passing_score: int
    passed: bool
    completed: bool
    created_at: Optional[datetime]
    curriculum_chapters: int = 0
    bridge_course_completed: Optional[bool] = None
    bridge_target_level: Optional[str] = None


@dataclass(slots=True)
class FailedTestDetail:
    test_attempt_id: int
    user_email: str
    score: int
    passing_score: int
    correct_answers: int
    total_questions: int
    curriculum_chapters: int

    @property
    def points_missing(self) -> int:
        return self.passing_score - self.score


@dataclass(slots=True)
class FailedTestStats:
    threshold: int
    total: int = 0
    passed: int = 0
    failed: int = 0
    average_score: float = 0.0
    recent_failures: List[FailedTestDetail] = field(default_factory=list)

    @property
    def pass_rate(self) -> int:
        return compute_score(self.passed, self.total)

    @property
    def recommended_threshold(self) -> Optional[int]:
        """Suggested threshold when the average score sits below the current one."""
        if not self.total or self.average_score >= self.threshold:
            return None
        return max(round_half_up(self.average_score - RECOMMENDATION_MARGIN), 0)


def _level_value(level) -> str:
    return getattr(level, "value", level)


def _chapter_count(db: Session, user_id: int, level) -> int:
    return db.query(func.count(Chapter.id)).filter(Chapter.user_id == user_id, Chapter.level == level).scalar() or 0


def recent_bridge_final_tests(db: Session, limit: int = 5) -> List[BridgeTestStatus]:
    statuses: List[BridgeTestStatus] = []
    for attempt in test_attempt_crud.list_tests(db, TestType.BRIDGE_FINAL, limit=limit):
        status = BridgeTestStatus(
            test_attempt_id=attempt.id,
            user_email=attempt.user.email,
            level=_level_value(attempt.level),
            score=attempt.score,
            passing_score=attempt.passing_score,
            passed=attempt.passed,
            completed=attempt.is_completed,
            created_at=attempt.created_at,
        )
        if attempt.passed and attempt.is_completed:
            status.curriculum_chapters = _chapter_count(db, attempt.user_id, attempt.level)
            bridge_course = bridge_course_crud.get_bridge_course_for_user(db, attempt.user_id)
            if bridge_course is not None:
                status.bridge_course_completed = bridge_course.is_completed
                status.bridge_target_level = _level_value(bridge_course.target_level)
        statuses.append(status)
    return statuses


def failed_bridge_test_stats(db: Session, threshold: Optional[int] = None, limit: int = 10) -> FailedTestStats:
    threshold = settings.BRIDGE_FINAL_PASSING_SCORE if threshold is None else threshold
    stats = FailedTestStats(threshold=threshold)

    for attempt in test_attempt_crud.list_tests(db, TestType.BRIDGE_FINAL, completed=True, passed=False, limit=limit):
        stats.recent_failures.append(
            FailedTestDetail(
                test_attempt_id=attempt.id,
                user_email=attempt.user.email,
                score=attempt.score,
                passing_score=attempt.passing_score,
                correct_answers=attempt.correct_answers,
                total_questions=attempt.total_questions,
                curriculum_chapters=_chapter_count(db, attempt.user_id, attempt.level),
            )
        )

    completed = test_attempt_crud.list_tests(db, TestType.BRIDGE_FINAL, completed=True)
    stats.total = len(completed)
    stats.passed = sum(1 for attempt in completed if attempt.passed)
    stats.failed = stats.total - stats.passed
    if completed:
        stats.average_score = sum(attempt.score for attempt in completed) / len(completed)
    return stats


# ----------------------------------------------------------------------
# Lessons and exercises
# ----------------------------------------------------------------------
@dataclass(slots=True)
class ThinLesson:
    lesson_id: int
    title: str
    topic: str
    exercise_question: Optional[str]


@dataclass(slots=True)
class ExerciseDistribution:
    lesson_count: int
    distribution: Dict[int, int]
    single_exercise_lessons: List[ThinLesson] = field(default_factory=list)


def lesson_exercise_distribution(db: Session) -> ExerciseDistribution:
    """Count exercises per lesson; lessons with a single exercise are flagged."""
    lessons = (
        db.query(Lesson)
        .options(selectinload(Lesson.exercises))
        .order_by(Lesson.lesson_number.asc(), Lesson.id.asc())
        .all()
    )
    counts = Counter(len(lesson.exercises) for lesson in lessons)
    thin = [
        ThinLesson(
            lesson_id=lesson.id,
            title=lesson.title,
            topic=lesson.topic,
            exercise_question=lesson.exercises[0].question,
        )
        for lesson in lessons
        if len(lesson.exercises) == 1
    ]
    return ExerciseDistribution(
        lesson_count=len(lessons),
        distribution=dict(sorted(counts.items())),
        single_exercise_lessons=thin,
    )


# ----------------------------------------------------------------------
# Progress tests
# ----------------------------------------------------------------------
@dataclass(slots=True)
class AnswerCheck:
    question_id: str
    user_answer: str
    correct_answer: Optional[str]
    is_correct: bool

    @property
    def question_found(self) -> bool:
        return self.correct_answer is not None


@dataclass(slots=True)
class TestDetails:
    __test__ = False

    attempt: TestAttempt
    checks: List[AnswerCheck]
    audit: GradingAudit
    open_remedial_chapters: List[RemedialChapter] = field(default_factory=list)


def latest_progress_test(db: Session, user: User) -> Optional[TestAttempt]:
    return test_attempt_crud.get_latest_test(db, user.id, TestType.PROGRESS_TEST)


def progress_test_details(db: Session, user: User) -> Optional[TestDetails]:
    """Latest progress test with a per-answer comparison and a grading audit."""
    attempt = latest_progress_test(db, user)
    if attempt is None:
        return None

    by_id = {question.id: question for question in parse_questions(attempt.questions)}
    checks: List[AnswerCheck] = []
    for answer in parse_answers(attempt.user_answers):
        question = by_id.get(answer.question_id)
        checks.append(
            AnswerCheck(
                question_id=answer.question_id,
                user_answer=answer.user_answer,
                correct_answer=question.correct_answer if question else None,
                is_correct=question is not None and grading_service.answers_match(answer.user_answer, question.correct_answer),
            )
        )
    return TestDetails(
        attempt=attempt,
        checks=checks,
        audit=grading_service.audit_attempt(attempt),
        open_remedial_chapters=remedial_chapter_crud.list_open_remedial_chapters(db, user.id),
    )


@dataclass(slots=True)
class ProgressReadiness:
    level: str
    chapter_range: str
    required: int
    completed_numbers: List[int]
    missing_numbers: List[int]

    @property
    def ready(self) -> bool:
        return not self.missing_numbers


def progress_readiness(db: Session, user: User, chapter_range: str, level=None) -> ProgressReadiness:
    start, end = gate_service.parse_chapter_range(chapter_range)
    level = level or user.current_level
    chapters = chapter_crud.get_chapters_in_range(db, user.id, level, start, end)
    completed = sorted(chapter.chapter_number for chapter in chapters if chapter.is_completed)
    missing = [number for number in range(start, end + 1) if number not in completed]
    return ProgressReadiness(
        level=_level_value(level),
        chapter_range=f"{start}-{end}",
        required=end - start + 1,
        completed_numbers=completed,
        missing_numbers=missing,
    )


# ----------------------------------------------------------------------
# Users and chapters
# ----------------------------------------------------------------------
@dataclass(slots=True)
class ChapterStatus:
    chapter_number: int
    title: str
    status: str
    section_number: int
    unlock_condition: Optional[str]


@dataclass(slots=True)
class BridgeChapterStatus:
    chapter_number: int
    title: str
    is_completed: bool


@dataclass(slots=True)
class ChapterOverview:
    user_email: str
    level: str
    chapters: List[ChapterStatus]
    bridge_chapters: List[BridgeChapterStatus]

    @property
    def status_counts(self) -> Dict[str, int]:
        return dict(Counter(chapter.status for chapter in self.chapters))


def chapter_overview(db: Session, user: User, level=None) -> ChapterOverview:
    level = level or user.current_level
    chapters = [
        ChapterStatus(
            chapter_number=chapter.chapter_number,
            title=chapter.title,
            status=chapter.status_label,
            section_number=chapter.section_number,
            unlock_condition=chapter.unlock_condition,
        )
        for chapter in chapter_crud.get_chapters_for_level(db, user.id, level)
    ]

    bridge_chapters: List[BridgeChapterStatus] = []
    bridge_course = bridge_course_crud.get_bridge_course_for_user(db, user.id)
    if bridge_course is not None:
        bridge_chapters = [
            BridgeChapterStatus(chapter_number=item.chapter_number, title=item.title, is_completed=item.is_completed)
            for item in bridge_course.chapters
        ]

    return ChapterOverview(
        user_email=user.email,
        level=_level_value(level),
        chapters=chapters,
        bridge_chapters=bridge_chapters,
    )


# ----------------------------------------------------------------------
# Schema and content quality
# ----------------------------------------------------------------------
@dataclass(slots=True)
class ColumnInfo:
    name: str
    type: str
    nullable: bool
    default: Optional[str]


def table_columns(db: Session, table_name: str = TestAttempt.__tablename__) -> List[ColumnInfo]:
    """Columns of ``table_name`` as the live database reports them."""
    inspector = inspect(db.get_bind())
    return [
        ColumnInfo(
            name=column["name"],
            type=str(column["type"]),
            nullable=bool(column.get("nullable", True)),
            default=column.get("default"),
        )
        for column in inspector.get_columns(table_name)
    ]


def count_test_attempts(db: Session) -> int:
    return db.query(func.count(TestAttempt.id)).scalar() or 0


def shared_chapter_titles(db: Session, first_level, second_level, limit: int = 15) -> List[str]:
    """Chapter titles that appear in both levels (across all users)."""

    def _titles(level) -> List[str]:
        rows = (
            db.query(Chapter.title)
            .filter(Chapter.level == level)
            .order_by(Chapter.chapter_number.asc(), Chapter.id.asc())
            .limit(limit)
            .all()
        )
        return [row[0] for row in rows]

    second_titles = set(_titles(second_level))
    shared: List[str] = []
    for title in _titles(first_level):
        if title in second_titles and title not in shared:
            shared.append(title)
    return shared

