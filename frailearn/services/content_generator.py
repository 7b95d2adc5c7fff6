"""Contract for the external content generator and its OpenAI-backed implementation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol, Sequence

from pydantic import ValidationError

from frailearn.core import ai_service
from frailearn.core.config import settings
from frailearn.schemas.course_schema import GeneratedChapter, GeneratedRemedialChapter
from frailearn.schemas.test_schema import QuestionRecord
from frailearn.services.errors import CurriculumGenerationError
from frailearn.utils.json_utils import unwrap_key

logger = logging.getLogger(__name__)

CURRICULUM_CHAPTER_COUNT = 15


class ContentGenerator(Protocol):
    def generate_curriculum(self, level: str) -> List[GeneratedChapter]:
        ...

    def generate_chapter_range(self, level: str, start: int, end: int) -> List[GeneratedChapter]:
        ...

    def generate_progress_test(self, chapters: Sequence[Any]) -> List[QuestionRecord]:
        ...

    def generate_bridge_final_test(self, chapters: Sequence[Any]) -> List[QuestionRecord]:
        ...

    def generate_remedial_chapter(self, topic: str, mistakes: Sequence[Dict[str, Any]]) -> GeneratedRemedialChapter:
        ...


def _chapter_context(chapter: Any) -> Dict[str, Any]:
    return {
        "chapter_number": getattr(chapter, "chapter_number", None),
        "title": getattr(chapter, "title", None),
        "topic": getattr(chapter, "topic", None),
        "description": getattr(chapter, "description", None),
    }


def _parse_chapters(raw: Any, label: str) -> List[GeneratedChapter]:
    if not isinstance(raw, list) or not raw:
        raise CurriculumGenerationError("invalid_curriculum_payload")
    try:
        return [GeneratedChapter.model_validate(item) for item in raw]
    except ValidationError as exc:
        logger.error("Chapitres invalides pour %s: %s", label, exc)
        raise CurriculumGenerationError("invalid_curriculum_payload") from exc


def _parse_questions(raw: Any) -> List[QuestionRecord]:
    if not isinstance(raw, list) or not raw:
        raise CurriculumGenerationError("invalid_test_payload")
    questions: List[QuestionRecord] = []
    for index, item in enumerate(raw, start=1):
        if isinstance(item, dict) and item.get("id") in (None, ""):
            item = {**item, "id": index}
        try:
            questions.append(QuestionRecord.model_validate(item))
        except ValidationError as exc:
            logger.warning("Question %s ignorée (format invalide): %s", index, exc)
    if not questions:
        raise CurriculumGenerationError("invalid_test_payload")
    return _dedupe_question_ids(questions)


def _dedupe_question_ids(questions: List[QuestionRecord]) -> List[QuestionRecord]:
    """Give every repeated id a fresh numeric id after the highest one in use."""

    numeric = [int(q.id) for q in questions if q.id.isdigit()]
    next_id = max(numeric, default=0) + 1
    seen: set[str] = set()
    deduped: List[QuestionRecord] = []
    for question in questions:
        if question.id in seen:
            logger.warning("Question id %s en double, renuméroté en %s", question.id, next_id)
            question = question.model_copy(update={"id": str(next_id)})
            next_id += 1
        seen.add(question.id)
        deduped.append(question)
    return deduped


class AIContentGenerator:
    """Generates chapters and tests through the OpenAI chat completion API."""

    def __init__(self, chapters_per_call: int | None = None):
        self.chapters_per_call = chapters_per_call or settings.CHAPTERS_PER_SECTION

    def generate_curriculum(self, level: str) -> List[GeneratedChapter]:
        chapters: List[GeneratedChapter] = []
        for start in range(1, CURRICULUM_CHAPTER_COUNT + 1, self.chapters_per_call):
            end = min(start + self.chapters_per_call - 1, CURRICULUM_CHAPTER_COUNT)
            chapters.extend(self.generate_chapter_range(level, start, end))
        logger.info("Curriculum %s généré: %s chapitres", level, len(chapters))
        return chapters

    def generate_chapter_range(self, level: str, start: int, end: int) -> List[GeneratedChapter]:
        prompt = ai_service.build_chapter_range_prompt(level, start, end)
        data = ai_service.call_ai_model_json(prompt)
        return _parse_chapters(unwrap_key(data, "chapters"), f"{level} {start}-{end}")

    def generate_progress_test(self, chapters: Sequence[Any]) -> List[QuestionRecord]:
        prompt = ai_service.build_progress_test_prompt([_chapter_context(ch) for ch in chapters])
        data = ai_service.call_ai_model_json(prompt)
        return _parse_questions(unwrap_key(data, "progressTest", "questionsData"))

    def generate_bridge_final_test(self, chapters: Sequence[Any]) -> List[QuestionRecord]:
        prompt = ai_service.build_bridge_final_test_prompt([_chapter_context(ch) for ch in chapters])
        data = ai_service.call_ai_model_json(prompt)
        return _parse_questions(unwrap_key(data, "finalTest", "questionsData"))

    def generate_remedial_chapter(self, topic: str, mistakes: Sequence[Dict[str, Any]]) -> GeneratedRemedialChapter:
        prompt = ai_service.build_remedial_chapter_prompt(topic, list(mistakes))
        data = ai_service.call_ai_model_json(prompt)
        try:
            return GeneratedRemedialChapter.model_validate(unwrap_key(data, "remedialChapter") or data)
        except ValidationError as exc:
            logger.error("Chapitre de remédiation invalide pour %s: %s", topic, exc)
            raise CurriculumGenerationError("invalid_remedial_payload") from exc
