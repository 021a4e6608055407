"""
The signed-in student's session.

Screens receive a Session explicitly and only read it. It is kept in:

    <data_dir>/session.json

Design rationale:
- the lecture catalogue lives in the backend
- session.json only stores who is using this terminal and which class
  (standard) they picked

Only `lecturehub session set` writes this file.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from lecturehub.config import PACKAGE_DIR


@dataclass(frozen=True)
class Session:
    selected_standard: str = ""
    name: str = ""
    email: str = ""
    uid: str = ""
    id_token: str = ""
    standard_color: str = ""

    @property
    def signed_in(self) -> bool:
        return bool(self.uid)


def _default_session_path() -> Path:
    """
    Return the default path of session.json inside the package data dir.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    return PACKAGE_DIR / "data" / "session.json"


def load_session(path: str | Path | None = None) -> Session:
    """
    Load the session from session.json.

    Returns an empty Session if the file does not exist or is invalid,
    so a broken file never stops the app from starting.
    """
    session_path = Path(path) if path is not None else _default_session_path()

    # First run: nobody has picked a standard yet
    if not session_path.exists():
        return Session()

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return Session()
        known = {f.name for f in fields(Session)}
        # ignore unknown keys and non-string values, strip the rest
        values = {k: v.strip() for k, v in data.items() if k in known and isinstance(v, str)}
        return Session(**values)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return Session()


def save_session(session: Session, path: str | Path | None = None) -> None:
    """
    Save the session to session.json, creating parent directories if needed.
    """
    session_path = Path(path) if path is not None else _default_session_path()
    session_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {k: v.strip() for k, v in asdict(session).items()}
    session_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
