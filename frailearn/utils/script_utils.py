# Fichier : frailearn/utils/script_utils.py
"""Shared plumbing for the command-line scripts under ``scripts/``."""

from __future__ import annotations

import argparse
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from frailearn.crud import user_crud
from frailearn.db import base  # noqa: F401  (registers every model)
from frailearn.db.session import create_database_engine, session_scope
from frailearn.models.user_model import ProficiencyLevel, User


def add_database_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--database-url",
        dest="database_url",
        default=None,
        help="Override settings.DATABASE_URL (useful for targeting another environment).",
    )


def level_argument(value: str) -> ProficiencyLevel:
    try:
        return ProficiencyLevel(value.upper())
    except ValueError as exc:
        choices = ", ".join(level.value for level in ProficiencyLevel)
        raise argparse.ArgumentTypeError(f"invalid level {value!r} (choose from {choices})") from exc


@contextmanager
def open_session(database_url: Optional[str] = None) -> Iterator[Session]:
    """Scoped session on a dedicated engine, disposed when the block exits."""
    engine = create_database_engine(database_url)
    try:
        with session_scope(engine) as db:
            yield db
    finally:
        engine.dispose()


def require_user(db: Session, identifier: str) -> Optional[User]:
    """Look a user up by id or email, printing a message when it is missing."""
    user = user_crud.find_user(db, identifier)
    if user is None:
        print(f"❌ User not found: {identifier}")
    return user
