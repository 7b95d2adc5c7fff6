"""CLI helper to validate required environment variables.

Usage::

    python -m scripts.check_env

It simply imports :mod:`frailearn.core.config` and reports any validation
errors in a readable format, exiting with status code 1 when something is
missing.
"""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from pydantic import ValidationError

SECRET_MARKERS = ("key", "password", "secret", "token")


def _display_value(name: str, value: object) -> str:
    if value is None:
        return "<unset>"
    if any(marker in name.lower() for marker in SECRET_MARKERS):
        return "<hidden>"
    if name == "DATABASE_URL":
        from sqlalchemy.engine.url import make_url

        try:
            return make_url(str(value)).render_as_string(hide_password=True)
        except Exception:
            return "<unparseable>"
    return str(value)


def main() -> int:
    try:
        from frailearn.core.config import settings
    except ValidationError:
        # ``frailearn.core.config`` already prints a detailed error summary.
        print("Environment validation failed – see details above.", file=sys.stderr)
        return 1

    print("Environment variables OK.")
    for name, value in settings.model_dump().items():
        print(f"- {name}: {_display_value(name, value)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
