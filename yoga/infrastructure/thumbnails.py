import json
import logging
import subprocess
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, TypeAdapter

from yoga.config.models import ThumbnailConfig
from yoga.infrastructure.ffprobe import FFprobeAdapter

logger = logging.getLogger(__name__)


class ThumbnailRecord(BaseModel):
    video_path: str
    thumbnail: str
    mod_time: float
    timestamp: datetime


_RECORD_LIST = TypeAdapter(List[ThumbnailRecord])


class ThumbnailCache:
    """Maps video path + mtime to a generated thumbnail image.

    Persisted as a JSON list under the library root and rewritten on every store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._records: Dict[str, ThumbnailRecord] = {}
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    def load(self):
        """Reads the cache file; missing file is fine, malformed content raises ValueError."""
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            return
        try:
            raw = json.loads(text) if text.strip() else []
        except RecursionError:
            raise ValueError("thumbnail cache is nested too deeply")
        records = _RECORD_LIST.validate_python(raw)
        with self._lock:
            self._records = {r.video_path: r for r in records}

    def lookup(self, video_path: Path, mod_time: float) -> Optional[Path]:
        with self._lock:
            record = self._records.get(str(video_path))
        if record is None or record.mod_time != mod_time:
            return None
        thumb = Path(record.thumbnail)
        if not thumb.exists():
            return None
        return thumb

    def store(self, video_path: Path, mod_time: float, thumbnail: Path):
        with self._lock:
            self._records[str(video_path)] = ThumbnailRecord(
                video_path=str(video_path),
                thumbnail=str(thumbnail),
                mod_time=mod_time,
                timestamp=datetime.now(),
            )
        self._write()

    def _write(self):
        # Snapshot inside the write lock: the newest state is written last
        with self._write_lock:
            with self._lock:
                payload = [r.model_dump(mode="json") for r in self._records.values()]
            self.path.write_text(json.dumps(payload, indent=2))


class ThumbnailGenerator:
    """Extracts a single scaled frame with ffmpeg."""

    def __init__(self, config: ThumbnailConfig, ffprobe: FFprobeAdapter, ffmpeg_path: str = "ffmpeg"):
        self.config = config
        self.ffprobe = ffprobe
        self.ffmpeg_path = ffmpeg_path

    def thumbnail_path(self, video_path: Path) -> Path:
        video_path = Path(video_path)
        return video_path.parent / self.config.dir_name / f"{video_path.stem}.jpg"

    def build_args(self, video_path: Path, output: Path, timestamp: float) -> List[str]:
        return [
            self.ffmpeg_path,
            "-ss", f"{timestamp:.3f}",
            "-i", str(video_path),
            "-vframes", "1",
            "-vf", f"scale={self.config.width}:{self.config.height}",
            "-y",
            str(output),
        ]

    def generate(self, video_path: Path, duration: float = 0.0) -> Path:
        """Writes the thumbnail and returns its path.

        Probes the duration when it is not known yet.
        """
        if duration <= 0:
            duration = self.ffprobe.probe_duration(video_path)
        timestamp = duration * self.config.percent / 100
        output = self.thumbnail_path(video_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        cmd = self.build_args(video_path, output, timestamp)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.config.timeout_s)
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"ffmpeg timed out after {self.config.timeout_s:g}s")
        if result.returncode != 0:
            raise RuntimeError(f"ffmpeg failed for {video_path}: {(result.stderr or '').strip()[-200:]}")
        logger.debug(f"Thumbnail written: {output}")
        return output
