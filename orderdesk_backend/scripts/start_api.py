"""
Run the Orderdesk API with uvicorn.

PORT (default 8000) and HOST (default 0.0.0.0) come from the environment.
"""
import os
import sys
from pathlib import Path

# Make `app` importable when executed as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn  # noqa: E402


def _read_port() -> int:
    value = os.environ.get("PORT", "8000")
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid PORT '{value}': {exc}") from exc


def main() -> None:
    uvicorn.run("app.main:app", host=os.environ.get("HOST", "0.0.0.0"), port=_read_port())


if __name__ == "__main__":
    main()
