# Fichier: frailearn/core/ai_service.py

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI

from frailearn.core.config import settings
from frailearn.utils.json_utils import parse_model_object

logger = logging.getLogger(__name__)

JSON_GUARD = "Réponds uniquement avec un objet JSON valide, sans texte autour."
JSON_REPAIR = (
    "\n\n[CONTRAINTE DE SORTIE]\n"
    "- Ta réponse précédente n'était pas un JSON valide.\n"
    "- Réponds STRICTEMENT avec un unique objet JSON valide.\n"
    "- Pas de backticks, pas de commentaires, pas de texte hors JSON."
)

SYSTEM_PROMPT = (
    "You are an expert French language educator and curriculum designer. "
    "You only answer with valid JSON."
)

# Thèmes proposés au modèle selon la tranche de chapitres.
TOPICS_BY_RANGE = {
    "1-5": "greetings, numbers, basic verbs, family, colors",
    "6-10": "food, shopping, directions, past tense, future tense",
    "11-15": "subjunctive, complex sentences, culture, literature, advanced conversation",
}

_client: Optional[OpenAI] = None


def get_openai_client() -> OpenAI:
    """Build the OpenAI client on first use."""
    global _client
    if _client is None:
        if not settings.OPENAI_API_KEY:
            raise ConnectionError("Le client OpenAI n'est pas configuré (OPENAI_API_KEY manquant).")
        _client = OpenAI(api_key=settings.OPENAI_API_KEY)
        logger.info("Client OpenAI configuré avec le modèle %s.", settings.OPENAI_MODEL)
    return _client


def _call_openai_llm(user_prompt: str, system_prompt: str = "") -> str:
    client = get_openai_client()
    sp = f"{system_prompt}\n\n{JSON_GUARD}".strip()
    messages = [{"role": "system", "content": sp}, {"role": "user", "content": user_prompt}]
    try:
        logger.info("Appel à l'API OpenAI avec le modèle %s", settings.OPENAI_MODEL)
        response = client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=messages,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""
    except Exception as e:
        logger.error("Une erreur API est survenue avec OpenAI : %s", e)
        raise


def call_ai_model_json(user_prompt: str, system_prompt: str = SYSTEM_PROMPT, max_retries: Optional[int] = None) -> Dict[str, Any]:
    """Call the model and parse its answer as JSON, re-prompting on invalid output."""
    if max_retries is None:
        max_retries = settings.AI_JSON_MAX_RETRIES
    last_exc: Optional[Exception] = None
    for attempt in range(max_retries + 1):
        sys_used = system_prompt if attempt == 0 else system_prompt + JSON_REPAIR
        try:
            raw = _call_openai_llm(user_prompt=user_prompt, system_prompt=sys_used)
            return parse_model_object(raw)
        except ConnectionError:
            raise
        except Exception as e:
            last_exc = e
            logger.warning("Tentative JSON %s/%s échouée: %s", attempt + 1, max_retries + 1, e)
    raise last_exc if last_exc else RuntimeError("Échec d'appel JSON sans exception d'origine.")


# --- Prompts ---

def build_chapter_range_prompt(level: str, start: int, end: int) -> str:
    count = end - start + 1
    topics = TOPICS_BY_RANGE.get(f"{start}-{end}", "French fundamentals")
    return f"""Generate chapters {start}-{end} for a {level} French course.
The output MUST be a single JSON object with a root key "chapters" containing exactly {count} chapter objects.

Each chapter must have:
- "title", "topic", "description" (max 100 chars), "estimatedMinutes" (30-60)
- "learningObjectives": {{"goals": [2-3 goals]}}
- "content": {{"introduction": "..."}}
- "lessons": exactly 2 lessons

Each lesson must have:
- "title", "topic"
- "content": {{"introduction": "...", "explanation": "..."}}
- "grammarPoints": {{"points": [...]}}, "vocabulary": {{"words": [...]}}
- "examples": {{"pairs": [{{"fr": "...", "en": "..."}}]}}
- "exercises": exactly 2 objects with "type" (MULTIPLE_CHOICE or FILL_IN_BLANK),
  "question", "correctAnswer", "options", "explanation", "grammarPoint"

Focus on: {topics}
Keep content concise and practical."""


def build_progress_test_prompt(chapters: List[Dict[str, Any]], question_count: int = 15) -> str:
    topics = ", ".join(str(ch.get("topic") or ch.get("title")) for ch in chapters)
    summary = "\n".join(
        f"Chapter {ch.get('chapter_number')}: {ch.get('title')} ({ch.get('description') or ''})" for ch in chapters
    )
    return f"""You are creating a progress test for a student.
The student has just completed a section covering the following chapters:
{summary}

The key topics were: {topics}.

The output MUST be a single JSON object with a root key "progressTest" containing a
"questionsData" array of {question_count} question objects.
Each question object must have: "id", "type" ("MULTIPLE_CHOICE" or "FILL_IN_BLANK"),
"topic" (one of the topics above), "question", "options" (if multiple choice),
"difficulty" (EASY, MEDIUM or HARD) and "correctAnswer"."""


def build_bridge_final_test_prompt(chapters: List[Dict[str, Any]], question_count: int = 10) -> str:
    topics = ", ".join(str(ch.get("topic") or ch.get("title")) for ch in chapters)
    summary = "\n".join(f"- {ch.get('title')}" for ch in chapters)
    return f"""A student has just completed a personalized "Bridge Course" to fix specific weaknesses.
The course covered the following chapters:
{summary}

The key topics were: {topics}.

The output MUST be a single JSON object with a root key "finalTest" containing a
"questionsData" array of {question_count} question objects.
Each question object must have: "id", "type" ("MULTIPLE_CHOICE" or "FILL_IN_BLANK"),
"topic" (one of the topics above), "question", "options" (if multiple choice),
"difficulty" (EASY, MEDIUM or HARD) and "correctAnswer"."""


def build_remedial_chapter_prompt(topic: str, mistakes: List[Dict[str, Any]], exercise_count: int = 5) -> str:
    examples = "\n".join(
        f'- Question: "{m.get("question")}" | Student answered: "{m.get("user_answer")}" '
        f'| Correct answer: "{m.get("correct_answer")}"'
        for m in mistakes[:3]
    )
    return f"""A student keeps making mistakes on the French topic "{topic}".
Recent mistakes:
{examples}

Write a very short remedial micro-lesson (2 minutes of reading) that fixes exactly these errors.
The output MUST be a single JSON object with:
- "title", "description" (max 100 chars)
- "content": {{"explanation": "...", "rule": "...", "examples": [{{"fr": "...", "en": "..."}}]}}
- "exercises": exactly {exercise_count} objects with "type" (MULTIPLE_CHOICE or FILL_IN_BLANK),
  "question", "correctAnswer", "options", "explanation"."""
