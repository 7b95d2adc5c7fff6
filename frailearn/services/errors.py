from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LearningFlowError(Exception):
    """Domain-specific exception raised when a learning-flow rule is violated."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


class NotFound(LearningFlowError):
    def __init__(self, entity: str, entity_id: object):
        LearningFlowError.__init__(self, f"{entity.lower()}_not_found", status_code=404)
        self.entity = entity
        self.entity_id = entity_id

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} {self.entity_id} not found"


class AlreadyCompleted(LearningFlowError):
    """The attempt already has a result; a second submission changes nothing."""

    def __init__(self, test_attempt_id: int):
        LearningFlowError.__init__(self, "test_already_completed")
        self.test_attempt_id = test_attempt_id


class QuestionMismatch(LearningFlowError):
    def __init__(self, question_id: str):
        LearningFlowError.__init__(self, "question_not_found")
        self.question_id = question_id


class CurriculumGenerationError(LearningFlowError):
    def __init__(self, code: str = "curriculum_generation_failed"):
        LearningFlowError.__init__(self, code, status_code=502)
