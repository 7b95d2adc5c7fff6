"""Persistence of generated curriculum content (chapters, lessons, exercises)."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy.orm import Session

from frailearn.core.config import settings
from frailearn.crud import chapter_crud
from frailearn.models.course.chapter_model import Chapter
from frailearn.models.course.exercise_model import Exercise
from frailearn.models.course.lesson_model import Lesson
from frailearn.schemas.course_schema import GeneratedChapter, GeneratedExercise, GeneratedLesson
from frailearn.services.errors import CurriculumGenerationError

logger = logging.getLogger(__name__)

_EXERCISE_TYPES = (
    (("fill", "blank"), "FILL_IN_BLANK"),
    (("multiple", "choice"), "MULTIPLE_CHOICE"),
    (("rearrange",), "SENTENCE_REARRANGE"),
    (("conjugation",), "CONJUGATION"),
    (("article",), "ARTICLE_SELECTION"),
    (("pronoun",), "PRONOUN_SELECTION"),
    (("true", "false"), "TRUE_FALSE"),
)


def map_exercise_type(raw: str | None) -> str:
    if not raw:
        return "MULTIPLE_CHOICE"
    lower = raw.lower()
    if "translation" in lower:
        return "TRANSLATION_FR_TO_EN" if "fr_to_en" in lower else "TRANSLATION_EN_TO_FR"
    for needles, mapped in _EXERCISE_TYPES:
        if any(needle in lower for needle in needles):
            return mapped
    return "MULTIPLE_CHOICE"


def section_for(chapter_number: int, per_section: int | None = None) -> int:
    per_section = per_section or settings.CHAPTERS_PER_SECTION
    return math.ceil(chapter_number / per_section)


def unlock_condition_for(section: int, per_section: int | None = None) -> str:
    """Chapters of ``section`` open once the previous section's progress test is passed."""
    per_section = per_section or settings.CHAPTERS_PER_SECTION
    end = max(section - 1, 1) * per_section
    return f"Pass Progress Test for chapters {end - per_section + 1}-{end}."


def default_exercises(lesson: GeneratedLesson) -> List[GeneratedExercise]:
    """Two placeholder exercises for lessons generated without any."""
    topic = lesson.topic or lesson.title or "General Topic"
    grammar_point = lesson.grammar_points[0] if lesson.grammar_points else topic
    return [
        GeneratedExercise(
            type="MULTIPLE_CHOICE",
            question="Which topic does this lesson focus on?",
            options=[topic, "Articles", "Conjugation", "Vocabulary"],
            correct_answer=topic,
            explanation=f"Topic identification for the lesson: {topic}",
            grammar_point=grammar_point,
            difficulty="EASY",
            topic=topic,
        ),
        GeneratedExercise(
            type="FILL_IN_BLANK",
            question=f"Write a short sentence about {topic} in French.",
            options=[],
            correct_answer=f"Sample answer about {topic}",
            explanation=f"Open-ended practice for topic {topic}",
            grammar_point=grammar_point,
            difficulty="MEDIUM",
            topic=topic,
        ),
    ]


def _build_exercise(exercise: GeneratedExercise, number: int, lesson: GeneratedLesson, chapter_topic: str) -> Exercise:
    lesson_label = lesson.title or lesson.topic or "Exercise"
    correct = exercise.correct_answer or (exercise.options[0] if exercise.options else "Sample answer")
    topic = exercise.topic or lesson.topic or lesson.title or chapter_topic or "General"
    return Exercise(
        exercise_number=number,
        type=map_exercise_type(exercise.type),
        question=exercise.question or f"Practice: {lesson_label}",
        correct_answer=correct,
        options=list(exercise.options),
        explanation=exercise.explanation,
        grammar_point=exercise.grammar_point or (lesson.grammar_points[0] if lesson.grammar_points else None) or topic,
        difficulty=(exercise.difficulty or "MEDIUM").upper(),
        topic=topic,
    )


def _build_lesson(lesson: GeneratedLesson, number: int, chapter_topic: str) -> Lesson:
    exercises = lesson.exercises or default_exercises(lesson)
    db_lesson = Lesson(
        lesson_number=number,
        title=lesson.title or f"Lesson {number}",
        topic=lesson.topic or lesson.title or chapter_topic or f"Lesson {number}",
        content=dict(lesson.content),
        grammar_points=list(lesson.grammar_points),
        vocabulary=list(lesson.vocabulary),
        examples=list(lesson.examples),
    )
    for index, exercise in enumerate(exercises, start=1):
        db_lesson.exercises.append(_build_exercise(exercise, index, lesson, chapter_topic))
    return db_lesson


def build_chapter(
    user_id: int,
    level,
    chapter_number: int,
    data: GeneratedChapter,
    *,
    unlocked: bool,
    per_section: int | None = None,
) -> Chapter:
    section = section_for(chapter_number, per_section)
    topic = data.topic or data.title
    chapter = Chapter(
        user_id=user_id,
        level=level,
        chapter_number=chapter_number,
        section_number=section,
        title=data.title,
        topic=topic,
        description=data.description,
        estimated_minutes=data.estimated_minutes,
        learning_objectives=list(data.learning_objectives),
        content=dict(data.content),
        is_unlocked=unlocked,
        unlocked_at=datetime.now(timezone.utc) if unlocked else None,
        unlock_condition=None if unlocked else unlock_condition_for(section, per_section),
    )
    for index, lesson in enumerate(data.lessons, start=1):
        chapter.lessons.append(_build_lesson(lesson, index, topic))
    return chapter


def save_curriculum(
    db: Session,
    user_id: int,
    level,
    chapters: Sequence[GeneratedChapter],
    per_section: int | None = None,
) -> List[Chapter]:
    """Persist a full generated curriculum; the first section starts unlocked.

    Callers are expected to have checked that no chapters exist yet for
    ``(user_id, level)``. The session is flushed, not committed.
    """
    if not chapters:
        raise CurriculumGenerationError("empty_curriculum")

    per_section = per_section or settings.CHAPTERS_PER_SECTION
    created = [
        build_chapter(user_id, level, index, data, unlocked=index <= per_section, per_section=per_section)
        for index, data in enumerate(chapters, start=1)
    ]
    db.add_all(created)
    db.flush()
    logger.info("Curriculum %s sauvegardé pour l'utilisateur %s: %s chapitres", level, user_id, len(created))
    return created


def save_chapter_range(
    db: Session,
    user_id: int,
    level,
    start: int,
    chapters: Sequence[GeneratedChapter],
    per_section: int | None = None,
) -> List[Chapter]:
    """Persist chapters generated for a later range; they are created unlocked."""
    if not chapters:
        raise CurriculumGenerationError("empty_chapter_range")

    existing = {
        chapter.chapter_number
        for chapter in chapter_crud.get_chapters_in_range(db, user_id, level, start, start + len(chapters) - 1)
    }
    created: List[Chapter] = []
    for offset, data in enumerate(chapters):
        number = start + offset
        if number in existing:
            continue
        created.append(build_chapter(user_id, level, number, data, unlocked=True, per_section=per_section))
    db.add_all(created)
    db.flush()
    return created
