"""
Central data model definitions used across the project.

Lecture records themselves stay plain dicts (exactly what the backend
returns, plus an "id" key). This module only defines the small pieces of
UI state that several screens share:
- FetchStatus / FetchState: the loading/error/ready tri-state of a screen
- FilterCriteria: what the lecture list is currently filtered by
- ChatMessage: one bubble in the doubts chat
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

Record = Dict[str, Any]


class FetchStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass
class FetchState:
    """
    Fetch state of one list screen.

    `status` is a single tag, so error and ready can never both be set.
    `refreshing` is tracked separately because a pull-to-refresh shows an
    inline indicator instead of the full-screen spinner.
    """

    status: FetchStatus = FetchStatus.LOADING
    refreshing: bool = False
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    @property
    def ready(self) -> bool:
        return self.status is FetchStatus.READY

    @property
    def failed(self) -> bool:
        return self.status is FetchStatus.ERROR


@dataclass(frozen=True)
class FilterCriteria:
    """
    Lecture list filter.

    standard: the student's selected class, always applied
    subject_query / global_query: optional free-text searches ("" = off)
    """

    standard: str
    subject_query: str = ""
    global_query: str = ""


@dataclass(frozen=True)
class ChatMessage:
    id: str
    text: str
    sender: str  # "user" or "bot"

    @property
    def is_user(self) -> bool:
        return self.sender == "user"
