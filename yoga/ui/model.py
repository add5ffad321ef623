"""Renderer-agnostic library view model.

All state changes happen in `update(state, event)` on a single thread. The
function never performs I/O; it returns the commands to run, which the
CommandRunner executes in the background and answers with new events.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Type

from yoga.domain.commands import (
    Command, ScanLibrary, WatchProgress, FlushDurationCache, SaveTags,
    LaunchPlayer, GenerateThumbnail,
)
from yoga.domain.events import (
    Event, LibraryLoaded, ProgressUpdated, DurationResolved, DurationCacheFlushed,
    TagsSaved, PlaybackStarted, ThumbnailReady, CommandFailed,
    ApplyFilters, ResetFilters, ToggleSort, MoveCursor, PlaySelected, ToggleCrop,
    CommitTags, RequestThumbnail, ReindexRequested,
)
from yoga.domain.models import FilterState, SortField, VideoEntry
from yoga.infrastructure.tags import parse_tag_input
from yoga.pipeline.duration_pool import DurationScheduler
from yoga.ui.filters import apply_filters_and_sort, parse_filter_inputs, toggle_sort
from yoga.ui.view_helpers import trim_path

logger = logging.getLogger(__name__)


class LibraryState:
    """Everything a front-end needs to draw the library table."""

    def __init__(
        self,
        root: Path,
        crop: str = "",
        scheduler: Optional[DurationScheduler] = None,
        player_name: str = "VLC",
    ):
        self.root = Path(root)
        self.crop_value = crop or ""
        self.crop_enabled = bool(self.crop_value)
        self.player_name = player_name
        self.durations = scheduler or DurationScheduler()

        self.videos: List[VideoEntry] = []
        self.filtered: List[VideoEntry] = []
        self.cursor = 0
        self.filters = FilterState()
        self.sort_field = SortField.NAME
        self.sort_ascending = True

        self.loading = False
        self.error: Optional[str] = None
        self.scan_processed = 0
        self.scan_total = 0
        self.status_message = ""
        self.base_status = ""

    def selected(self) -> Optional[VideoEntry]:
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    def selected_path(self) -> Optional[Path]:
        video = self.selected()
        return video.path if video else None

    def find_video(self, path: Path) -> Optional[VideoEntry]:
        for video in self.videos:
            if video.path == path:
                return video
        return None

    def apply_filters_and_sort(self):
        self.filtered = apply_filters_and_sort(self.videos, self.filters, self.sort_field, self.sort_ascending)
        self.cursor = 0

    def restore_selection(self, path: Optional[Path]):
        if path is None:
            return
        for idx, video in enumerate(self.filtered):
            if video.path == path:
                self.cursor = idx
                return

    def merge_videos(self, videos: List[VideoEntry]):
        """Replaces known paths in place and appends new ones."""
        if not self.videos:
            self.videos = list(videos)
            return
        index = {video.path: idx for idx, video in enumerate(self.videos)}
        for video in videos:
            idx = index.get(video.path)
            if idx is None:
                index[video.path] = len(self.videos)
                self.videos.append(video)
            else:
                self.videos[idx] = video

    def active_crop(self) -> str:
        return self.crop_value if self.crop_enabled else ""

    def status_text(self) -> str:
        status = self.status_message.strip()
        base = self.base_status.strip()
        if not base:
            return status
        if not status or status == base:
            return base
        return f"{base} • {status}"


def init(state: LibraryState) -> List[Command]:
    """Commands that start the first scan."""
    state.loading = True
    state.status_message = "Scanning for videos..."
    return [ScanLibrary(root=state.root), WatchProgress()]


# ── Command results ────────────────────────────────────────────────────────────

def _on_library_loaded(state: LibraryState, event: LibraryLoaded) -> List[Command]:
    state.loading = False
    if event.error:
        state.error = event.error
        state.status_message = f"error: {event.error}"
        return []

    scan = event.scan
    state.error = None
    selected = state.selected_path()
    state.merge_videos(scan.entries)
    commands: List[Command] = list(state.durations.enqueue(scan.pending_durations))
    state.apply_filters_and_sort()
    state.restore_selection(selected)

    if not state.filtered:
        state.base_status = "No videos found"
        state.status_message = state.base_status
        return commands

    status = f"Loaded {len(state.filtered)} videos"
    if scan.cache_error:
        status += f" (cache warning: {scan.cache_error})"
    if state.durations.active:
        status += ", probing durations..."
    if scan.tag_warning:
        status += f" (tag warning: {scan.tag_warning})"
    state.base_status = status
    state.status_message = status
    return commands


def _on_progress(state: LibraryState, event: ProgressUpdated) -> List[Command]:
    state.scan_processed = event.processed
    state.scan_total = event.total
    if state.loading and event.total:
        state.status_message = f"Scanning videos {event.processed}/{event.total}..."
    if event.done:
        return []
    return [WatchProgress()]


def _on_duration_resolved(state: LibraryState, event: DurationResolved) -> List[Command]:
    selected = state.selected_path()
    video = state.find_video(event.path)
    if video is not None:
        video.duration = event.duration if not event.error else 0.0
        video.error = event.error

    total = state.durations.total
    commands, finished = state.durations.complete(event.path)
    done = total if finished else state.durations.done

    if event.error:
        state.status_message = f"Duration error for {event.path.name}: {event.error}"
    elif total:
        state.status_message = f"Probing durations {done}/{total}..."

    state.apply_filters_and_sort()
    state.restore_selection(selected)
    if finished:
        logger.info(f"All {total} durations resolved, flushing cache")
        return [FlushDurationCache()]
    return list(commands)


def _on_cache_flushed(state: LibraryState, event: DurationCacheFlushed) -> List[Command]:
    if event.error:
        state.status_message = f"Duration cache flush error: {event.error}"
    else:
        state.status_message = f"Durations ready ({len(state.filtered)} videos)"
    return []


def _on_tags_saved(state: LibraryState, event: TagsSaved) -> List[Command]:
    if event.error:
        state.status_message = f"Tag save error: {event.error}"
        return []
    video = state.find_video(event.path)
    if video is not None:
        video.tags = list(event.tags)
    state.apply_filters_and_sort()
    state.restore_selection(event.path)
    if not event.tags:
        state.status_message = "Tags cleared"
    else:
        state.status_message = f"Tags updated ({len(event.tags)})"
    return []


def _on_playback_started(state: LibraryState, event: PlaybackStarted) -> List[Command]:
    if event.error:
        state.status_message = f"Failed to launch {state.player_name}: {event.error}"
    else:
        state.status_message = f"Playing via {state.player_name}: {trim_path(event.path)}"
    return []


def _on_thumbnail_ready(state: LibraryState, event: ThumbnailReady) -> List[Command]:
    if event.error:
        state.status_message = f"Thumbnail error for {event.path.name}: {event.error}"
        return []
    video = state.find_video(event.path)
    if video is not None:
        video.thumbnail = event.thumbnail
    state.status_message = f"Thumbnail ready for {event.path.name}"
    return []


def _on_command_failed(state: LibraryState, event: CommandFailed) -> List[Command]:
    if event.command == ScanLibrary.__name__:
        state.loading = False
        state.error = event.error
    state.status_message = f"{event.command} failed: {event.error}"
    return []


# ── User intents ───────────────────────────────────────────────────────────────

def _on_apply_filters(state: LibraryState, event: ApplyFilters) -> List[Command]:
    try:
        filters = parse_filter_inputs(event.name, event.min_minutes, event.max_minutes, event.tags)
    except ValueError as e:
        state.status_message = str(e)
        return []
    state.filters = filters
    state.apply_filters_and_sort()
    state.status_message = f"Filters applied ({len(state.filtered)} videos)"
    return []


def _on_reset_filters(state: LibraryState, event: ResetFilters) -> List[Command]:
    state.filters = FilterState()
    state.apply_filters_and_sort()
    state.status_message = f"Filters cleared ({len(state.filtered)} videos)"
    return []


def _on_toggle_sort(state: LibraryState, event: ToggleSort) -> List[Command]:
    state.sort_field, state.sort_ascending = toggle_sort(state.sort_field, state.sort_ascending, event.field)
    state.apply_filters_and_sort()
    state.status_message = f"Sorted {len(state.filtered)} videos"
    return []


def _on_move_cursor(state: LibraryState, event: MoveCursor) -> List[Command]:
    if state.filtered:
        state.cursor = max(0, min(len(state.filtered) - 1, state.cursor + event.delta))
    return []


def _on_play_selected(state: LibraryState, event: PlaySelected) -> List[Command]:
    video = state.selected()
    if video is None:
        return []
    state.status_message = f"Launching {state.player_name}: {video.name}"
    return [LaunchPlayer(path=video.path, crop=state.active_crop())]


def _on_toggle_crop(state: LibraryState, event: ToggleCrop) -> List[Command]:
    if not state.crop_value:
        state.status_message = "No crop value set (start with --crop)"
        return []
    state.crop_enabled = not state.crop_enabled
    if state.crop_enabled:
        state.status_message = f"Crop enabled ({state.crop_value})"
    else:
        state.status_message = "Crop disabled"
    return []


def _on_commit_tags(state: LibraryState, event: CommitTags) -> List[Command]:
    video = state.selected()
    if video is None:
        state.status_message = "No video selected"
        return []
    state.status_message = f"Saving tags for {video.name}"
    return [SaveTags(path=video.path, tags=parse_tag_input(event.value))]


def _on_request_thumbnail(state: LibraryState, event: RequestThumbnail) -> List[Command]:
    video = state.selected()
    if video is None:
        return []
    state.status_message = f"Generating thumbnail for {video.name}"
    return [GenerateThumbnail(path=video.path, duration=video.duration)]


def _on_reindex(state: LibraryState, event: ReindexRequested) -> List[Command]:
    state.loading = True
    state.status_message = "Re-indexing videos..."
    return [ScanLibrary(root=state.root), WatchProgress()]


_HANDLERS: Dict[Type[Event], Callable[[LibraryState, Event], List[Command]]] = {
    LibraryLoaded: _on_library_loaded,
    ProgressUpdated: _on_progress,
    DurationResolved: _on_duration_resolved,
    DurationCacheFlushed: _on_cache_flushed,
    TagsSaved: _on_tags_saved,
    PlaybackStarted: _on_playback_started,
    ThumbnailReady: _on_thumbnail_ready,
    CommandFailed: _on_command_failed,
    ApplyFilters: _on_apply_filters,
    ResetFilters: _on_reset_filters,
    ToggleSort: _on_toggle_sort,
    MoveCursor: _on_move_cursor,
    PlaySelected: _on_play_selected,
    ToggleCrop: _on_toggle_crop,
    CommitTags: _on_commit_tags,
    RequestThumbnail: _on_request_thumbnail,
    ReindexRequested: _on_reindex,
}

HANDLED_EVENTS = tuple(_HANDLERS)


def update(state: LibraryState, event: Event) -> Tuple[LibraryState, List[Command]]:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.debug(f"Unhandled event {type(event).__name__}")
        return state, []
    return state, handler(state, event)
