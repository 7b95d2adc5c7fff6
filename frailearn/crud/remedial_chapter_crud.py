# Fichier: frailearn/crud/remedial_chapter_crud.py
from typing import List, Optional

from sqlalchemy.orm import Session

from frailearn.models.progress.remedial_chapter_model import RemedialChapter


def get_open_remedial_chapter(db: Session, user_id: int, grammar_point: str) -> Optional[RemedialChapter]:
    return (
        db.query(RemedialChapter)
        .filter(
            RemedialChapter.user_id == user_id,
            RemedialChapter.grammar_point == grammar_point,
            RemedialChapter.is_completed.is_(False),
        )
        .first()
    )


def list_open_remedial_chapters(db: Session, user_id: int) -> List[RemedialChapter]:
    return (
        db.query(RemedialChapter)
        .filter(RemedialChapter.user_id == user_id, RemedialChapter.is_completed.is_(False))
        .order_by(RemedialChapter.created_at.desc(), RemedialChapter.id.desc())
        .all()
    )
