import logging
import os
import threading
import concurrent.futures
from typing import Callable, Dict, Iterable, Optional, Type

from yoga.domain.commands import (
    Command, ScanLibrary, WatchProgress, ProbeDuration, FlushDurationCache,
    SaveTags, LaunchPlayer, GenerateThumbnail,
)
from yoga.domain.events import (
    Event, LibraryLoaded, ProgressUpdated, DurationCacheFlushed, TagsSaved,
    PlaybackStarted, ThumbnailReady, CommandFailed,
)
from yoga.infrastructure.event_bus import EventBus
from yoga.infrastructure.player import PlayerLauncher
from yoga.infrastructure.tags import load_tags, save_tags
from yoga.infrastructure.thumbnails import ThumbnailCache, ThumbnailGenerator
from yoga.pipeline.duration_pool import DurationWorkerPool
from yoga.pipeline.library_loader import LibraryLoader
from yoga.pipeline.progress import ProgressTracker


class CommandRunner:
    """Executes model commands on background threads.

    Every command ends in exactly one event published on the EventBus; a
    handler that raises unexpectedly produces CommandFailed instead. Probes go
    to the DurationWorkerPool, everything else to a small general executor.

    Args:
        event_bus: EventBus receiving result events.
        loader: LibraryLoader for ScanLibrary.
        duration_pool: DurationWorkerPool for ProbeDuration.
        progress: ProgressTracker shared with the loader.
        player: PlayerLauncher for LaunchPlayer.
        thumbnail_generator: Optional generator; thumbnails are disabled without it.
        thumbnail_cache: Optional cache updated after each generated thumbnail.
        progress_interval_s: Delay of one WatchProgress poll.
    """

    def __init__(
        self,
        event_bus: EventBus,
        loader: LibraryLoader,
        duration_pool: DurationWorkerPool,
        progress: ProgressTracker,
        player: PlayerLauncher,
        thumbnail_generator: Optional[ThumbnailGenerator] = None,
        thumbnail_cache: Optional[ThumbnailCache] = None,
        progress_interval_s: float = 0.2,
        max_workers: int = 4,
    ):
        self.event_bus = event_bus
        self.loader = loader
        self.duration_pool = duration_pool
        self.progress = progress
        self.player = player
        self.thumbnail_generator = thumbnail_generator
        self.thumbnail_cache = thumbnail_cache
        self.progress_interval_s = progress_interval_s
        self.logger = logging.getLogger(__name__)
        self._stop = threading.Event()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="yoga-cmd"
        )
        self._handlers: Dict[Type[Command], Callable[[Command], Event]] = {
            ScanLibrary: self._scan_library,
            WatchProgress: self._watch_progress,
            FlushDurationCache: self._flush_duration_cache,
            SaveTags: self._save_tags,
            LaunchPlayer: self._launch_player,
            GenerateThumbnail: self._generate_thumbnail,
        }

    def dispatch(self, commands: Iterable[Command]):
        for command in commands:
            self.logger.debug(f"Dispatch {type(command).__name__}: {command}")
            if isinstance(command, ProbeDuration):
                self.duration_pool.submit(command.path)
                continue
            if isinstance(command, ScanLibrary):
                # Reset before any WatchProgress of the same batch can poll
                self.progress.reset()
            self._executor.submit(self._execute, command)

    def _execute(self, command: Command):
        handler = self._handlers.get(type(command))
        try:
            if handler is None:
                raise TypeError(f"No handler for {type(command).__name__}")
            event = handler(command)
        except Exception as e:
            self.logger.exception(f"Command {type(command).__name__} failed")
            event = CommandFailed(command=type(command).__name__, error=str(e))
        self.event_bus.publish(event)

    def shutdown(self, wait: bool = True):
        self._stop.set()
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
        self.duration_pool.shutdown(wait=wait)

    def _scan_library(self, command: ScanLibrary) -> Event:
        try:
            scan = self.loader.load(command.root)
        except OSError as e:
            self.logger.error(f"Library scan failed for {command.root}: {e}")
            return LibraryLoaded(error=str(e))
        finally:
            self.progress.mark_done()
        return LibraryLoaded(scan=scan)

    def _watch_progress(self, command: WatchProgress) -> Event:
        self._stop.wait(self.progress_interval_s)
        processed, total, done = self.progress.snapshot()
        return ProgressUpdated(processed=processed, total=total, done=done or self._stop.is_set())

    def _flush_duration_cache(self, command: FlushDurationCache) -> Event:
        try:
            written = self.loader.duration_cache.flush()
        except OSError as e:
            self.logger.error(f"Duration cache flush failed: {e}")
            return DurationCacheFlushed(error=str(e))
        return DurationCacheFlushed(written=written)

    def _save_tags(self, command: SaveTags) -> Event:
        try:
            save_tags(command.path, command.tags)
            saved = load_tags(command.path)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Tag save failed for {command.path.name}: {e}")
            return TagsSaved(path=command.path, error=str(e))
        self.logger.info(f"Tags saved for {command.path.name}: {saved}")
        return TagsSaved(path=command.path, tags=saved)

    def _launch_player(self, command: LaunchPlayer) -> Event:
        try:
            self.player.launch(command.path, command.crop)
        except OSError as e:
            self.logger.error(f"Player launch failed for {command.path}: {e}")
            return PlaybackStarted(path=command.path, error=str(e))
        return PlaybackStarted(path=command.path)

    def _generate_thumbnail(self, command: GenerateThumbnail) -> Event:
        if self.thumbnail_generator is None:
            return ThumbnailReady(path=command.path, error="thumbnails disabled")
        try:
            thumbnail = self.thumbnail_generator.generate(command.path, command.duration)
            if self.thumbnail_cache is not None:
                self.thumbnail_cache.store(command.path, os.stat(command.path).st_mtime, thumbnail)
        except (OSError, RuntimeError, ValueError) as e:
            self.logger.warning(f"Thumbnail failed for {command.path.name}: {e}")
            return ThumbnailReady(path=command.path, error=str(e))
        return ThumbnailReady(path=command.path, thumbnail=thumbnail)
