"""Minimal client for the learning app's HTTP API, used by the repro scripts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

from frailearn.core.config import settings
from frailearn.schemas.course_schema import ChapterSummary
from frailearn.schemas.test_schema import SubmittedAnswer, TestSubmitResult

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiError(Exception):
    """Raised for any non-2xx response."""

    status_code: int
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return f"HTTP {self.status_code}: {self.message}"


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason or "unknown error"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("detail") or payload)
    return str(payload)


class FrailearnClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or str(settings.API_BASE_URL)).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.info("%s %s", method, url)
        response = self.session.request(method, url, json=json, headers=headers, timeout=self.timeout)
        if not response.ok:
            message = _error_message(response)
            logger.warning("%s %s -> %s (%s)", method, url, response.status_code, message)
            raise ApiError(response.status_code, message)
        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data.get("token")
        if not self.token:
            raise ApiError(200, "login response did not contain a token")
        return data

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")

    def list_chapters(self) -> List[ChapterSummary]:
        data = self._request("GET", "/course/chapters")
        if isinstance(data, dict):
            data = data.get("chapters", [])
        return [ChapterSummary.model_validate(item) for item in data or []]

    def get_chapter(self, chapter_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/course/chapters/{chapter_id}")

    def start_progress_test(self, level: str, chapter_range: str) -> Dict[str, Any]:
        return self._request("POST", "/tests/progress/start", json={"level": level, "chapterRange": chapter_range})

    def submit_progress_test(self, test_id: int, answers: Iterable[SubmittedAnswer | Dict[str, Any]]) -> TestSubmitResult:
        payload = [
            answer.model_dump(by_alias=True) if isinstance(answer, SubmittedAnswer) else answer
            for answer in answers
        ]
        data = self._request("POST", f"/tests/progress/{test_id}/submit", json={"answers": payload})
        return TestSubmitResult.model_validate({"testId": test_id, **data})
