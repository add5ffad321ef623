"""Domain events for the video library.

Two kinds of events flow into the library model: results of background commands
(published by the CommandRunner from worker threads) and user intents (published
by whatever front-end drives the session). Both are consumed on the single
update thread.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field

from .models import LibraryScan, SortField


class Event(BaseModel):
    """Base class for all domain events.

    Events are validated Pydantic models. They are not frozen by default.
    """

    pass


# ── Command results ────────────────────────────────────────────────────────────

class CommandResult(Event):
    """Base class for events answering exactly one command."""

    pass


class LibraryLoaded(CommandResult):
    """Emitted when a scan finishes. `error` is set when traversal failed."""

    scan: LibraryScan = Field(default_factory=LibraryScan)
    error: Optional[str] = None


class ProgressUpdated(CommandResult):
    processed: int
    total: int
    done: bool


class DurationResolved(CommandResult):
    """Emitted once per probed path, in completion order."""

    path: Path
    duration: float = 0.0
    error: Optional[str] = None


class DurationCacheFlushed(CommandResult):
    written: bool = False
    error: Optional[str] = None


class TagsSaved(CommandResult):
    path: Path
    tags: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class PlaybackStarted(CommandResult):
    path: Path
    error: Optional[str] = None


class ThumbnailReady(CommandResult):
    path: Path
    thumbnail: Optional[Path] = None
    error: Optional[str] = None


class CommandFailed(CommandResult):
    """Emitted when a command handler raised unexpectedly."""

    command: str
    error: str


# ── User intents ───────────────────────────────────────────────────────────────

class ApplyFilters(Event):
    """Raw filter form values; bounds are validated by the model."""

    name: str = ""
    min_minutes: str = ""
    max_minutes: str = ""
    tags: str = ""


class ResetFilters(Event):
    pass


class ToggleSort(Event):
    """Same field flips direction, another field resets to ascending."""

    field: SortField


class MoveCursor(Event):
    delta: int  # -1 = up, +1 = down


class PlaySelected(Event):
    pass


class ToggleCrop(Event):
    pass


class CommitTags(Event):
    """Comma separated tag input for the selected video."""

    value: str


class RequestThumbnail(Event):
    pass


class ReindexRequested(Event):
    pass
