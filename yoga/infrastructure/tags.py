"""Per-video tag sidecar files.

Tags live next to the video as a JSON array of strings. For `.mp4` files the
extension is replaced (`clip.mp4` -> `clip.json`), other videos get `.json`
appended (`clip.mkv` -> `clip.mkv.json`).
"""

import json
from pathlib import Path
from typing import Iterable, List
from pydantic import TypeAdapter

_TAG_LIST = TypeAdapter(List[str])


def path_for(video_path: Path) -> Path:
    video_path = Path(video_path)
    if video_path.suffix.lower() == ".mp4":
        return video_path.with_suffix(".json")
    return video_path.with_name(video_path.name + ".json")


def sanitize_tags(raw: Iterable[str]) -> List[str]:
    """Trims, drops empties, removes exact duplicates and sorts."""
    cleaned = {tag.strip() for tag in raw if tag and tag.strip()}
    return sorted(cleaned)


def parse_tag_input(value: str) -> List[str]:
    """Splits comma separated user input, deduplicating case-insensitively.

    The first spelling of a tag wins and input order is kept.
    """
    tags: List[str] = []
    seen = set()
    for part in (value or "").split(","):
        trimmed = part.strip()
        if not trimmed:
            continue
        lowered = trimmed.lower()
        if lowered in seen:
            continue
        seen.add(lowered)
        tags.append(trimmed)
    return tags


def load_tags(video_path: Path) -> List[str]:
    """Reads a video's tags. A missing sidecar yields an empty list."""
    try:
        data = path_for(video_path).read_text()
    except FileNotFoundError:
        return []
    try:
        raw = json.loads(data)
    except RecursionError:
        raise ValueError("tag file is nested too deeply")
    return sanitize_tags(_TAG_LIST.validate_python(raw))


def save_tags(video_path: Path, tags: Iterable[str]) -> List[str]:
    """Writes sanitized tags and returns what was written."""
    cleaned = sanitize_tags(tags)
    path_for(video_path).write_text(json.dumps(cleaned, indent=2))
    return cleaned
