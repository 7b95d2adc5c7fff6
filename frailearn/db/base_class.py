# Fichier: frailearn/db/base_class.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for every SQLAlchemy model of the learning database.
    """
