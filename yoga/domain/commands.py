"""Side effects requested by the library model.

The update function never performs I/O itself; it returns these commands and the
CommandRunner executes them on background threads. Each command results in
exactly one event published back on the EventBus.
"""

from pathlib import Path
from typing import List
from pydantic import BaseModel


class Command(BaseModel):
    """Base class for all commands."""

    pass


class ScanLibrary(Command):
    """Collect, stat and join cache/tag data for every video under the root."""

    root: Path


class WatchProgress(Command):
    """Wait one polling interval, then report the scan progress snapshot."""

    pass


class ProbeDuration(Command):
    path: Path


class FlushDurationCache(Command):
    pass


class SaveTags(Command):
    path: Path
    tags: List[str]


class LaunchPlayer(Command):
    path: Path
    crop: str = ""


class GenerateThumbnail(Command):
    path: Path
    duration: float = 0.0
