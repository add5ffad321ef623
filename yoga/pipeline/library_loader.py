"""Library loading: path collection joined with cached durations and tags.

One bad file never prevents the rest of the library from loading: stat
failures are stored on the entry, tag problems are collected into one warning
and a broken cache file only means a cold cache. Only a failed directory
traversal aborts the load.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from yoga.domain.models import LibraryScan, VideoEntry
from yoga.infrastructure.duration_cache import DurationCache
from yoga.infrastructure.file_scanner import FileScanner
from yoga.infrastructure.tags import load_tags
from yoga.infrastructure.thumbnails import ThumbnailCache
from yoga.pipeline.progress import ProgressTracker


class LibraryLoader:
    """Builds the video list and the pending-duration queue for a root.

    The duration cache file is read on the first load only. Later loads
    (re-index) keep the in-memory cache, which already holds every record
    written by probes since.

    Args:
        file_scanner: FileScanner used to enumerate video paths.
        duration_cache: DurationCache shared with the duration worker pool.
        progress: Optional ProgressTracker updated per processed path.
        thumbnail_cache: Optional ThumbnailCache used to attach known thumbnails.
    """

    def __init__(
        self,
        file_scanner: FileScanner,
        duration_cache: DurationCache,
        progress: Optional[ProgressTracker] = None,
        thumbnail_cache: Optional[ThumbnailCache] = None,
    ):
        self.file_scanner = file_scanner
        self.duration_cache = duration_cache
        self.progress = progress
        self.thumbnail_cache = thumbnail_cache
        self.logger = logging.getLogger(__name__)
        self._cache_loaded = False

    def _load_caches(self) -> Optional[str]:
        if self._cache_loaded:
            return None
        self._cache_loaded = True
        cache_error = None
        try:
            self.duration_cache.load()
        except (OSError, ValueError) as e:
            cache_error = str(e)
            self.logger.warning(f"Duration cache unusable, starting cold: {self.duration_cache.path}: {e}")
        if self.thumbnail_cache is not None:
            try:
                self.thumbnail_cache.load()
            except (OSError, ValueError) as e:
                self.logger.warning(f"Thumbnail cache unusable: {self.thumbnail_cache.path}: {e}")
        return cache_error

    def load(self, root: Path) -> LibraryScan:
        """Scans root. Raises OSError when the directory walk fails."""
        cache_error = self._load_caches()
        paths = self.file_scanner.collect(root)
        if self.progress is not None:
            self.progress.set_total(len(paths))

        entries: List[VideoEntry] = []
        pending: List[Path] = []
        tag_errors: List[str] = []

        for path in paths:
            try:
                info = os.stat(path)
            except OSError as e:
                self.logger.warning(f"Cannot stat {path}: {e}")
                entries.append(VideoEntry.from_path(path, error=str(e)))
                self._increment()
                continue

            duration = self.duration_cache.lookup(path, info)
            if duration is None:
                pending.append(path)

            try:
                tags = load_tags(path)
            except (OSError, ValueError) as e:
                tags = []
                tag_errors.append(f"{path.name}: {e}")

            thumbnail = None
            if self.thumbnail_cache is not None:
                thumbnail = self.thumbnail_cache.lookup(path, info.st_mtime)

            entries.append(VideoEntry.from_path(
                path,
                duration=duration or 0.0,
                mod_time=info.st_mtime,
                size=info.st_size,
                tags=tags,
                thumbnail=thumbnail,
            ))
            self._increment()

        pending.sort(key=str)
        tag_errors.sort()
        tag_warning = "; ".join(tag_errors) if tag_errors else None
        if tag_warning:
            self.logger.warning(f"Tag problems: {tag_warning}")
        self.logger.info(
            f"Library loaded: root={root}, videos={len(entries)}, pending_durations={len(pending)}"
        )
        return LibraryScan(
            entries=entries,
            pending_durations=pending,
            tag_warning=tag_warning,
            cache_error=cache_error,
        )

    def _increment(self):
        if self.progress is not None:
            self.progress.increment()
