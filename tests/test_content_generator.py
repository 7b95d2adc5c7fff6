import pytest

from frailearn.core import ai_service
from frailearn.services.content_generator import AIContentGenerator
from frailearn.services.errors import CurriculumGenerationError


def _chapter_payload(start: int, end: int) -> dict:
    return {
        "chapters": [
            {"title": f"Chapter {number}", "learningObjectives": {"goals": ["goal"]}, "lessons": []}
            for number in range(start, end + 1)
        ]
    }


class _Chapter:
    def __init__(self, number: int):
        self.chapter_number = number
        self.title = f"Chapter {number}"
        self.topic = f"Topic {number}"
        self.description = None


def test_curriculum_is_generated_in_section_batches(monkeypatch):
    prompts = []

    def fake_call(prompt, *args, **kwargs):
        prompts.append(prompt)
        start, end = (int(part) for part in prompt.split("Generate chapters ")[1].split(" ")[0].split("-"))
        return _chapter_payload(start, end)

    monkeypatch.setattr(ai_service, "call_ai_model_json", fake_call)

    chapters = AIContentGenerator(chapters_per_call=5).generate_curriculum("BEGINNER")

    assert len(chapters) == 15
    assert len(prompts) == 3
    assert "greetings" in prompts[0]
    assert chapters[0].learning_objectives == ["goal"]


def test_invalid_chapter_payload_raises(monkeypatch):
    monkeypatch.setattr(ai_service, "call_ai_model_json", lambda *args, **kwargs: {"chapters": []})

    with pytest.raises(CurriculumGenerationError) as exc:
        AIContentGenerator().generate_chapter_range("BEGINNER", 6, 10)

    assert exc.value.code == "invalid_curriculum_payload"


def test_progress_test_questions_are_normalized(monkeypatch):
    payload = {
        "progressTest": {
            "questionsData": [
                {"id": 1, "question": "Q1", "correctAnswer": "a", "options": ["a", "b"]},
                {"question": "Q2", "correctAnswer": 2},
                {"id": 3, "correctAnswer": "missing question text"},
            ]
        }
    }
    monkeypatch.setattr(ai_service, "call_ai_model_json", lambda *args, **kwargs: payload)

    questions = AIContentGenerator().generate_progress_test([_Chapter(1), _Chapter(2)])

    assert [question.id for question in questions] == ["1", "2"]
    assert questions[1].correct_answer == "2"


def test_repeated_question_ids_are_renumbered(monkeypatch):
    payload = {
        "progressTest": {
            "questionsData": [
                {"id": 1, "question": "Q1", "correctAnswer": "a"},
                {"id": 1, "question": "Q2", "correctAnswer": "b"},
                {"id": 2, "question": "Q3", "correctAnswer": "c"},
            ]
        }
    }
    monkeypatch.setattr(ai_service, "call_ai_model_json", lambda *args, **kwargs: payload)

    questions = AIContentGenerator().generate_progress_test([_Chapter(1)])

    assert [question.id for question in questions] == ["1", "3", "2"]
    assert questions[1].question == "Q2"


def test_bridge_final_test_requires_questions(monkeypatch):
    monkeypatch.setattr(ai_service, "call_ai_model_json", lambda *args, **kwargs: {"finalTest": {}})

    with pytest.raises(CurriculumGenerationError) as exc:
        AIContentGenerator().generate_bridge_final_test([_Chapter(1)])

    assert exc.value.code == "invalid_test_payload"


def test_call_ai_model_json_retries_invalid_output(monkeypatch):
    responses = iter(["not json", '```json\n[{"id": 1}]\n```'])
    system_prompts = []

    def fake_llm(user_prompt, system_prompt=""):
        system_prompts.append(system_prompt)
        return next(responses)

    monkeypatch.setattr(ai_service, "_call_openai_llm", fake_llm)

    data = ai_service.call_ai_model_json("prompt", max_retries=1)

    assert data == {"items": [{"id": 1}]}
    assert ai_service.JSON_REPAIR in system_prompts[1]


def test_call_ai_model_json_does_not_retry_missing_client(monkeypatch):
    calls = []

    def fake_llm(user_prompt, system_prompt=""):
        calls.append(user_prompt)
        raise ConnectionError("no client")

    monkeypatch.setattr(ai_service, "_call_openai_llm", fake_llm)

    with pytest.raises(ConnectionError):
        ai_service.call_ai_model_json("prompt", max_retries=3)
    assert len(calls) == 1


def test_remedial_chapter_is_parsed_from_model_output(monkeypatch):
    prompts = []

    def fake_call(prompt, *args, **kwargs):
        prompts.append(prompt)
        return {
            "title": "Le passé composé en 2 minutes",
            "content": {"rule": "avoir + participe passé"},
            "exercises": {"exercises": [{"type": "fill_in_blank", "question": "J'___ mangé", "correctAnswer": "ai"}]},
        }

    monkeypatch.setattr(ai_service, "call_ai_model_json", fake_call)
    mistakes = [{"question": "Q1", "user_answer": "suis", "correct_answer": "ai"}]

    chapter = AIContentGenerator().generate_remedial_chapter("Passé composé", mistakes)

    assert chapter.title == "Le passé composé en 2 minutes"
    assert chapter.exercises[0].correct_answer == "ai"
    assert '"Passé composé"' in prompts[0]
    assert 'Student answered: "suis"' in prompts[0]


def test_remedial_chapter_without_title_is_rejected(monkeypatch):
    monkeypatch.setattr(ai_service, "call_ai_model_json", lambda *args, **kwargs: {"content": {}})

    with pytest.raises(CurriculumGenerationError) as exc:
        AIContentGenerator().generate_remedial_chapter("Articles", [])

    assert exc.value.code == "invalid_remedial_payload"
