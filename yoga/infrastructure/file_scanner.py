import os
import stat
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

from yoga.domain.models import VIDEO_EXTENSIONS

logger = logging.getLogger(__name__)


class FileScanner:
    """Recursively collects video files under a root, following symlinks safely.

    Results use display paths (the path as browsed, possibly through symlinked
    directories). Each directory is descended at most once, keyed by its
    resolved real path, which breaks symlink cycles.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        exts = extensions if extensions is not None else VIDEO_EXTENSIONS
        self.extensions = {(ext if ext.startswith(".") else f".{ext}").lower() for ext in exts}

    def is_video(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def collect(self, root: Path) -> List[Path]:
        """Returns the sorted, deduplicated list of video paths under root.

        A regular-file root yields itself when it is a video. Any I/O error while
        listing a directory aborts the walk.
        """
        root = Path(root)
        if not stat.S_ISDIR(root.stat().st_mode):
            return [root] if self.is_video(root) else []

        visited: Set[str] = set()
        found: List[Path] = []
        self._walk(root, root, visited, found)
        logger.debug(f"Collected {len(found)} video paths under {root} ({len(visited)} dirs)")
        return sorted(set(found), key=str)

    def _walk(self, display_dir: Path, real_dir: Path, visited: Set[str], found: List[Path]):
        resolved = os.path.realpath(real_dir)
        if resolved in visited:
            logger.debug(f"Skipping already visited directory {display_dir} -> {resolved}")
            return
        visited.add(resolved)

        with os.scandir(resolved) as it:
            # Name order keeps the first-visited display path deterministic
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            display_child = display_dir / entry.name
            real_child = Path(resolved) / entry.name
            if entry.is_symlink():
                self._handle_symlink(display_child, real_child, visited, found)
            elif entry.is_dir(follow_symlinks=False):
                self._walk(display_child, real_child, visited, found)
            elif self.is_video(display_child):
                found.append(display_child)

    def _handle_symlink(self, display_child: Path, real_child: Path, visited: Set[str], found: List[Path]):
        try:
            target = real_child.resolve(strict=True)
            target_is_dir = target.is_dir()
        except (OSError, RuntimeError):
            # Broken or looping link: surface it by name
            if self.is_video(display_child):
                found.append(display_child)
            return

        if target_is_dir:
            self._walk(display_child, target, visited, found)
        elif self.is_video(display_child) or self.is_video(target):
            found.append(display_child)
