# Fichier: frailearn/crud/bridge_course_crud.py
from typing import List, Optional

from sqlalchemy.orm import Session

from frailearn.models.bridge.bridge_course_model import BridgeCourse


def get_bridge_course(db: Session, bridge_course_id: int) -> Optional[BridgeCourse]:
    return db.get(BridgeCourse, bridge_course_id)


def get_bridge_course_for_user(db: Session, user_id: int) -> Optional[BridgeCourse]:
    return db.query(BridgeCourse).filter(BridgeCourse.user_id == user_id).first()


def get_active_bridge_course(db: Session, user_id: int) -> Optional[BridgeCourse]:
    return (
        db.query(BridgeCourse)
        .filter(BridgeCourse.user_id == user_id, BridgeCourse.is_completed.is_(False))
        .first()
    )


def list_completed_bridge_courses(db: Session) -> List[BridgeCourse]:
    return (
        db.query(BridgeCourse)
        .filter(BridgeCourse.is_completed.is_(True))
        .order_by(BridgeCourse.completed_at.desc(), BridgeCourse.id.desc())
        .all()
    )
