# Fichier : frailearn/utils/json_utils.py
"""Lecture tolérante des réponses JSON renvoyées par le modèle."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

_FENCED = re.compile(r"^```[\w-]*[ \t]*\n?(?P<body>.*?)\n?```$", re.DOTALL)
_DECODER = json.JSONDecoder()


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    match = _FENCED.match(text)
    return match.group("body").strip() if match else text


def _first_embedded_value(text: str) -> Any:
    """Decode the first ``{...}`` or ``[...]`` found inside surrounding prose."""
    for index, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            value, _ = _DECODER.raw_decode(text, index)
        except json.JSONDecodeError:
            continue
        return value
    raise LookupError("no embedded JSON value")


def parse_model_json(raw: Optional[str]) -> Any:
    """Parse a model answer expected to be JSON.

    Markdown fences are removed first; when the remainder still is not JSON the
    first object or array embedded in it is used. The original decode error is
    raised when nothing parses.
    """
    if raw is None:
        raise ValueError("parse_model_json: input is None")

    text = _strip_code_fences(str(raw))
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        try:
            return _first_embedded_value(text)
        except LookupError:
            raise exc from None


def parse_model_object(raw: Optional[str]) -> Dict[str, Any]:
    """Like :func:`parse_model_json` but always returns an object.

    A bare array is wrapped as ``{"items": [...]}``; scalars are rejected.
    """
    data = parse_model_json(raw)
    if isinstance(data, list):
        return {"items": data}
    if not isinstance(data, dict):
        raise ValueError(f"JSON object expected, got {type(data).__name__}")
    return data


def unwrap_key(payload: Any, *keys: str) -> Any:
    """Descend into nested dict keys, returning None when a level is missing."""
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
