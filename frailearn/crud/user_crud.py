# Fichier: frailearn/crud/user_crud.py

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from frailearn.models.course.chapter_model import Chapter
from frailearn.models.user_model import User


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Recherche insensible à la casse."""
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def find_user(db: Session, identifier: str) -> Optional[User]:
    """Resolve a user from a command-line identifier: numeric id or email."""
    if identifier.isdigit():
        user = get_user(db, int(identifier))
        if user:
            return user
    return get_user_by_email(db, identifier)


def list_users_with_chapter_counts(db: Session, limit: Optional[int] = None) -> List[tuple[User, int]]:
    """Renvoie chaque utilisateur avec son nombre de chapitres, du plus récent au plus ancien."""
    query = (
        db.query(User, func.count(Chapter.id))
        .outerjoin(Chapter, Chapter.user_id == User.id)
        .group_by(User.id)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return [(user, int(count)) for user, count in query.all()]
