"""
Runtime settings.

Everything is read from environment variables (a local .env file is loaded
by the CLI first). CLI flags can override single values afterwards via
dataclasses.replace().
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

log = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RECORDS = 1000
DEFAULT_LECTURES_COLLECTION = "FreeLecture"
DEFAULT_USERS_COLLECTION = "users"

BACKENDS = ("firestore", "local")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    backend: str = "local"
    project_id: str = ""
    api_key: str = ""
    database: str = "(default)"
    timeout: float = DEFAULT_TIMEOUT
    max_records: int = DEFAULT_MAX_RECORDS
    data_dir: Path = PACKAGE_DIR / "data"
    lectures_collection: str = DEFAULT_LECTURES_COLLECTION
    users_collection: str = DEFAULT_USERS_COLLECTION
    log_level: str = "WARNING"

    @property
    def session_path(self) -> Path:
        return self.data_dir / "session.json"


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default
    if value <= 0:
        log.warning("Ignoring non-positive %s=%r, using %s", key, raw, default)
        return default
    return value


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default
    if value <= 0:
        log.warning("Ignoring non-positive %s=%r, using %s", key, raw, default)
        return default
    return value


def _env_log_level(env: Mapping[str, str]) -> str:
    level = (env.get("LECTUREHUB_LOG_LEVEL") or "").strip().upper()
    if not level:
        return "WARNING"
    if level not in LOG_LEVELS:
        log.warning("Ignoring unknown LECTUREHUB_LOG_LEVEL=%r, using WARNING", level)
        return "WARNING"
    return level


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from an environment mapping (os.environ by default).

    The backend defaults to Firestore when a project id is configured and
    to the local JSON directory otherwise.
    """
    env = os.environ if env is None else env

    project_id = (env.get("LECTUREHUB_PROJECT_ID") or "").strip()

    backend = (env.get("LECTUREHUB_BACKEND") or "").strip().lower()
    if not backend:
        backend = "firestore" if project_id else "local"
    elif backend not in BACKENDS:
        log.warning("Unknown LECTUREHUB_BACKEND=%r, falling back to 'local'", backend)
        backend = "local"

    data_dir_raw = (env.get("LECTUREHUB_DATA_DIR") or "").strip()
    data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else PACKAGE_DIR / "data"

    return Settings(
        backend=backend,
        project_id=project_id,
        api_key=(env.get("LECTUREHUB_API_KEY") or "").strip(),
        database=(env.get("LECTUREHUB_DATABASE") or "").strip() or "(default)",
        timeout=_env_float(env, "LECTUREHUB_TIMEOUT", DEFAULT_TIMEOUT),
        max_records=_env_int(env, "LECTUREHUB_MAX_RECORDS", DEFAULT_MAX_RECORDS),
        data_dir=data_dir,
        lectures_collection=(env.get("LECTUREHUB_LECTURES_COLLECTION") or "").strip()
        or DEFAULT_LECTURES_COLLECTION,
        users_collection=(env.get("LECTUREHUB_USERS_COLLECTION") or "").strip() or DEFAULT_USERS_COLLECTION,
        log_level=_env_log_level(env),
    )
