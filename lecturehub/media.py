"""
YouTube link handling.

Lecture documents store a free-form "youtubelink". The player only needs
the video id, so we extract it from the usual URL shapes:

    https://www.youtube.com/watch?v=ID[&...]      (v= anywhere in the query)
    https://youtu.be/ID
    https://www.youtube.com/embed/ID
    https://www.youtube.com/v/ID  |  /e/ID
    https://www.youtube.com/user/NAME#p/u/1/ID

Anything else yields None, and the UI shows "No video available." instead.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

VIDEO_FIELD = "youtubelink"
NO_VIDEO_TEXT = "No video available."

_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/#\s]+)",
    re.IGNORECASE,
)


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    if not url or not isinstance(url, str):
        return None
    match = _YOUTUBE_ID_RE.search(url.strip())
    if not match:
        return None
    return match.group(1)


def record_video_id(record: Mapping[str, Any]) -> Optional[str]:
    """Video id of a lecture record, or None if it has no usable link."""
    return extract_youtube_id(record.get(VIDEO_FIELD))


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
