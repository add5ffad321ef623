import os
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from yoga.domain.models import VideoEntry


def render_progress_bar(done: int, total: int, width: int) -> str:
    if width <= 0 or total <= 0:
        return ""
    done = max(0, min(done, total))
    filled = min(width, done * width // total)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "--"
    total = int(seconds + 0.5)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def humanize_age(mod_time: float, now: Optional[float] = None) -> str:
    if mod_time <= 0:
        return "--"
    elapsed = (now if now is not None else time.time()) - mod_time
    if elapsed < 60:
        return "just now"
    if elapsed < 3600:
        return f"{int(elapsed // 60)}m ago"
    if elapsed < 86400:
        return f"{int(elapsed // 3600)}h ago"
    return datetime.fromtimestamp(mod_time).strftime("%Y-%m-%d")


def trim_path(path: Path) -> str:
    """Replaces the home directory prefix with ~."""
    text = str(path)
    home = os.path.expanduser("~")
    if home and home != "~" and text.startswith(home):
        return "~" + text[len(home):]
    return text


def video_row(video: VideoEntry, now: Optional[float] = None) -> List[str]:
    """Name, Duration, Age, Tags cells for one entry."""
    duration = format_duration(video.duration) if video.duration > 0 else "(unknown)"
    if video.error:
        duration = "!" + video.error
    return [video.name, duration, humanize_age(video.mod_time, now), ", ".join(video.tags)]
