"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime, timezone

from frailearn.models.bridge.bridge_course_model import BridgeChapter, BridgeCourse
from frailearn.models.course.chapter_model import Chapter
from frailearn.models.course.exercise_model import Exercise
from frailearn.models.course.lesson_model import Lesson
from frailearn.models.progress.remedial_chapter_model import RemedialChapter
from frailearn.models.testing.test_attempt_model import TestAttempt, TestType
from frailearn.models.user_model import ProficiencyLevel, User
from frailearn.schemas.course_schema import GeneratedChapter, GeneratedRemedialChapter
from frailearn.schemas.test_schema import QuestionRecord
from frailearn.services.errors import CurriculumGenerationError


def create_user(db, **kwargs) -> User:
    defaults = {
        "email": "learner@example.com",
        "name": "Learner",
        "current_level": ProficiencyLevel.BEGINNER,
        "skipped_placement_test": False,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_chapters(
    db,
    user,
    *,
    level=ProficiencyLevel.BEGINNER,
    numbers=range(1, 6),
    completed=False,
    unlocked=True,
    lessons_per_chapter: int = 0,
    exercises_per_lesson: int = 2,
) -> list[Chapter]:
    now = datetime.now(timezone.utc)
    chapters = []
    for number in numbers:
        chapter = Chapter(
            user_id=user.id,
            level=level,
            chapter_number=number,
            section_number=(number - 1) // 5 + 1,
            title=f"Chapter {number}",
            topic=f"Topic {number}",
            learning_objectives=[],
            content={},
            is_unlocked=unlocked or completed,
            unlocked_at=now if (unlocked or completed) else None,
            is_started=completed,
            is_completed=completed,
            completed_at=now if completed else None,
        )
        for lesson_number in range(1, lessons_per_chapter + 1):
            lesson = Lesson(
                lesson_number=lesson_number,
                title=f"Lesson {number}.{lesson_number}",
                topic=f"Topic {number}",
                content={},
                grammar_points=[],
                vocabulary=[],
                examples=[],
            )
            for exercise_number in range(1, exercises_per_lesson + 1):
                lesson.exercises.append(
                    Exercise(
                        exercise_number=exercise_number,
                        question=f"Question {number}.{lesson_number}.{exercise_number}",
                        correct_answer="a",
                        options=["a", "b"],
                    )
                )
            chapter.lessons.append(lesson)
        chapters.append(chapter)
    db.add_all(chapters)
    db.commit()
    return chapters


def create_bridge_course(
    db,
    user,
    *,
    target_level=ProficiencyLevel.INTERMEDIATE,
    chapter_count: int = 3,
    chapters_completed: bool = True,
    **kwargs,
) -> BridgeCourse:
    defaults = {
        "user_id": user.id,
        "target_level": target_level,
        "total_chapters": chapter_count,
        "completed_chapters": chapter_count if chapters_completed else 0,
        "is_completed": False,
    }
    defaults.update(kwargs)
    bridge_course = BridgeCourse(**defaults)
    for number in range(1, chapter_count + 1):
        bridge_course.chapters.append(
            BridgeChapter(
                chapter_number=number,
                title=f"Bridge {number}",
                topic=f"Bridge topic {number}",
                is_completed=chapters_completed,
            )
        )
    db.add(bridge_course)
    db.commit()
    db.refresh(bridge_course)
    return bridge_course


def make_questions(count: int = 15, *, topic: str | None = None, difficulty: str | None = None) -> list[dict]:
    """Stored-form questions; the correct answer to question ``n`` is ``answer-n``."""
    questions = []
    for number in range(1, count + 1):
        question = {
            "id": number,
            "question": f"Question {number}?",
            "type": "MULTIPLE_CHOICE",
            "correctAnswer": f"answer-{number}",
            "options": [f"answer-{number}", "wrong"],
        }
        if topic:
            question["topic"] = topic
        if difficulty:
            question["difficulty"] = difficulty
        questions.append(question)
    return questions


def make_answers(count: int, correct: int) -> list[dict]:
    """Answers for questions ``1..count``; the first ``correct`` ones are right."""
    return [
        {"questionId": number, "userAnswer": f"answer-{number}" if number <= correct else "wrong"}
        for number in range(1, count + 1)
    ]


def create_test_attempt(db, user, *, test_type=TestType.PROGRESS_TEST, **kwargs) -> TestAttempt:
    questions = kwargs.pop("questions", None) or make_questions()
    defaults = {
        "user_id": user.id,
        "test_type": test_type,
        "level": ProficiencyLevel.BEGINNER,
        "title": "Progress Test: Chapters 1-5" if test_type == TestType.PROGRESS_TEST else "Bridge Course Final Test",
        "chapter_range": "1-5" if test_type == TestType.PROGRESS_TEST else None,
        "questions": questions,
        "user_answers": [],
        "total_questions": len(questions),
        "correct_answers": 0,
        "score": 0,
        "passed": False,
        "passing_score": 80,
        "topic_breakdown": {},
        "weak_areas": [],
        "strong_areas": [],
    }
    defaults.update(kwargs)
    attempt = TestAttempt(**defaults)
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt


def create_remedial_chapter(db, user: User, *, grammar_point: str, is_completed: bool = False) -> RemedialChapter:
    chapter = RemedialChapter(
        user_id=user.id,
        level=ProficiencyLevel.BEGINNER,
        grammar_point=grammar_point,
        title=f"Review: {grammar_point}",
        is_completed=is_completed,
        completed_at=datetime.now(timezone.utc) if is_completed else None,
    )
    db.add(chapter)
    db.commit()
    db.refresh(chapter)
    return chapter


def generated_chapters(count: int, *, prefix: str = "Generated") -> list[GeneratedChapter]:
    return [
        GeneratedChapter(
            title=f"{prefix} {number}",
            topic=f"{prefix} topic {number}",
            lessons=[{"title": f"{prefix} lesson {number}", "topic": f"{prefix} topic {number}"}],
        )
        for number in range(1, count + 1)
    ]


class FakeContentGenerator:
    """In-memory generator recording every call."""

    def __init__(self, *, curriculum_size: int = 15, question_count: int = 15):
        self.curriculum_size = curriculum_size
        self.question_count = question_count
        self.calls: list[tuple] = []

    def generate_curriculum(self, level: str) -> list[GeneratedChapter]:
        self.calls.append(("curriculum", level))
        return generated_chapters(self.curriculum_size, prefix=level.title())

    def generate_chapter_range(self, level: str, start: int, end: int) -> list[GeneratedChapter]:
        self.calls.append(("chapter_range", level, start, end))
        return generated_chapters(end - start + 1, prefix=f"{level.title()} {start}-{end}")

    def generate_progress_test(self, chapters) -> list[QuestionRecord]:
        self.calls.append(("progress_test", [chapter.chapter_number for chapter in chapters]))
        return [QuestionRecord.model_validate(item) for item in make_questions(self.question_count)]

    def generate_bridge_final_test(self, chapters) -> list[QuestionRecord]:
        self.calls.append(("bridge_final_test", [chapter.chapter_number for chapter in chapters]))
        return [QuestionRecord.model_validate(item) for item in make_questions(self.question_count)]

    def generate_remedial_chapter(self, topic: str, mistakes) -> GeneratedRemedialChapter:
        self.calls.append(("remedial_chapter", topic, len(mistakes)))
        return GeneratedRemedialChapter(
            title=f"Review: {topic}",
            description=f"Quick review of {topic}",
            content={"explanation": f"How {topic} works"},
            exercises=[{"type": "FILL_IN_BLANK", "question": f"{topic}?", "correctAnswer": "yes"}],
        )


class FailingContentGenerator(FakeContentGenerator):
    """Generator whose content calls always fail, as an unavailable model would."""

    def generate_curriculum(self, level: str):
        self.calls.append(("curriculum", level))
        raise CurriculumGenerationError()

    def generate_chapter_range(self, level: str, start: int, end: int):
        self.calls.append(("chapter_range", level, start, end))
        raise ConnectionError("model unavailable")


class FailingRemedialGenerator(FakeContentGenerator):
    """Generator that serves tests and chapters but cannot produce remedial content."""

    def generate_remedial_chapter(self, topic: str, mistakes):
        self.calls.append(("remedial_chapter", topic, len(mistakes)))
        raise ConnectionError("model unavailable")
