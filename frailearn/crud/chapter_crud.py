# Fichier: frailearn/crud/chapter_crud.py
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy.orm import Session

from frailearn.models.course.chapter_model import Chapter


def get_chapters_for_level(db: Session, user_id: int, level) -> List[Chapter]:
    return (
        db.query(Chapter)
        .filter(Chapter.user_id == user_id, Chapter.level == level)
        .order_by(Chapter.chapter_number.asc())
        .all()
    )


def get_chapters_in_range(db: Session, user_id: int, level, start: int, end: int) -> List[Chapter]:
    return (
        db.query(Chapter)
        .filter(
            Chapter.user_id == user_id,
            Chapter.level == level,
            Chapter.chapter_number >= start,
            Chapter.chapter_number <= end,
        )
        .order_by(Chapter.chapter_number.asc())
        .all()
    )


def chapters_exist(db: Session, user_id: int, level) -> bool:
    """Garde d'idempotence: un curriculum existe déjà pour (user, level)."""
    return (
        db.query(Chapter.id)
        .filter(Chapter.user_id == user_id, Chapter.level == level)
        .first()
        is not None
    )


def unlock_chapters(chapters: Iterable[Chapter], when: datetime | None = None) -> List[int]:
    """Unlock the given chapters in memory; returns the numbers that changed."""
    when = when or datetime.now(timezone.utc)
    changed: List[int] = []
    for chapter in chapters:
        if chapter.is_unlocked:
            continue
        chapter.is_unlocked = True
        chapter.unlocked_at = when
        chapter.unlock_condition = None
        changed.append(chapter.chapter_number)
    return changed
