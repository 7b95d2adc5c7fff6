# Fichier: frailearn/schemas/course_schema.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _unwrap_list(value: Any, *keys: str) -> List[Any]:
    # Les modèles renvoient souvent {"goals": [...]} au lieu d'une liste nue.
    if value is None:
        return []
    if isinstance(value, dict):
        for key in keys:
            if isinstance(value.get(key), list):
                return value[key]
        return []
    if isinstance(value, list):
        return value
    return [value]


# --- Contenu généré (sortie du générateur de curriculum) ---
class GeneratedExercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Optional[str] = None
    question: Optional[str] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    options: List[str] = Field(default_factory=list)
    explanation: Optional[str] = None
    grammar_point: Optional[str] = Field(default=None, alias="grammarPoint")
    difficulty: Optional[str] = None
    topic: Optional[str] = None

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> List[str]:
        return [str(option) for option in _unwrap_list(value, "options")]


class GeneratedLesson(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    topic: Optional[str] = None
    content: Dict[str, Any] = Field(default_factory=dict)
    grammar_points: List[str] = Field(default_factory=list, alias="grammarPoints")
    vocabulary: List[Any] = Field(default_factory=list)
    examples: List[Any] = Field(default_factory=list)
    exercises: List[GeneratedExercise] = Field(default_factory=list)

    @field_validator("grammar_points", mode="before")
    @classmethod
    def _unwrap_grammar_points(cls, value: Any) -> List[Any]:
        return [str(point) for point in _unwrap_list(value, "points")]

    @field_validator("vocabulary", mode="before")
    @classmethod
    def _unwrap_vocabulary(cls, value: Any) -> List[Any]:
        return _unwrap_list(value, "words")

    @field_validator("examples", mode="before")
    @classmethod
    def _unwrap_examples(cls, value: Any) -> List[Any]:
        return _unwrap_list(value, "pairs")

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}


class GeneratedChapter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    topic: Optional[str] = None
    description: Optional[str] = None
    estimated_minutes: Optional[int] = Field(default=None, alias="estimatedMinutes")
    learning_objectives: List[str] = Field(default_factory=list, alias="learningObjectives")
    content: Dict[str, Any] = Field(default_factory=dict)
    lessons: List[GeneratedLesson] = Field(default_factory=list)

    @field_validator("learning_objectives", mode="before")
    @classmethod
    def _unwrap_objectives(cls, value: Any) -> List[Any]:
        return [str(goal) for goal in _unwrap_list(value, "goals")]

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}


# --- Vue d'un chapitre renvoyée par l'API ---
class ChapterSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="ignore")

    id: int
    chapter_number: int = Field(alias="chapterNumber")
    title: str
    is_unlocked: bool = Field(default=False, alias="isUnlocked")
    is_completed: bool = Field(default=False, alias="isCompleted")


# --- Chapitre de remédiation généré pour un point faible ---
class GeneratedRemedialChapter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    description: Optional[str] = None
    content: Dict[str, Any] = Field(default_factory=dict)
    exercises: List[GeneratedExercise] = Field(default_factory=list)

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @field_validator("exercises", mode="before")
    @classmethod
    def _unwrap_exercises(cls, value: Any) -> List[Any]:
        return _unwrap_list(value, "exercises", "items")
