import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional
from pydantic import TypeAdapter

from yoga.domain.models import CacheRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(Dict[str, CacheRecord])


class DurationCache:
    """Persistent path -> duration store, fingerprinted by mtime and size.

    A record is only trusted while the live file still has the stored mtime
    (whole seconds) and size; a mismatch drops the record on lookup. Writes
    only mark the cache dirty, `flush()` persists everything as one JSON object.
    All methods are safe to call from several probe workers at once.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._records: Dict[str, CacheRecord] = {}
        self._lock = threading.Lock()
        self._dirty = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def load(self):
        """Reads the cache file.

        A missing or empty file gives an empty cache. Unreadable or malformed
        content also leaves an empty, usable cache but the error is re-raised so
        the caller can report it.
        """
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            self._replace({})
            return
        except OSError:
            self._replace({})
            raise

        if not text.strip():
            self._replace({})
            return

        try:
            records = _RECORDS.validate_python(json.loads(text))
        except ValueError:
            self._replace({})
            raise
        except RecursionError:
            self._replace({})
            raise ValueError("cache file is nested too deeply")
        self._replace(records)
        logger.debug(f"Loaded {len(records)} cached durations from {self.path}")

    def _replace(self, records: Dict[str, CacheRecord]):
        with self._lock:
            self._records = records
            self._dirty = False

    def lookup(self, path: Path, info: os.stat_result) -> Optional[float]:
        """Returns the cached duration in seconds, or None."""
        key = str(path)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            if record.mod_time_unix != int(info.st_mtime) or record.size != info.st_size:
                del self._records[key]
                self._dirty = True
                return None
            if record.duration_seconds <= 0:
                return None
            return record.duration_seconds

    def record(self, path: Path, info: os.stat_result, seconds: float):
        """Upserts a record; non-positive durations are ignored."""
        if seconds <= 0:
            return
        entry = CacheRecord(
            duration_seconds=seconds,
            mod_time_unix=int(info.st_mtime),
            size=info.st_size,
        )
        with self._lock:
            self._records[str(path)] = entry
            self._dirty = True

    def flush(self) -> bool:
        """Writes the cache if anything changed. Returns True when a write happened."""
        with self._lock:
            if not self._dirty:
                return False
            snapshot = {key: record.model_dump() for key, record in self._records.items()}
            self._dirty = False

        try:
            self.path.write_text(json.dumps(snapshot, indent=2))
        except OSError:
            with self._lock:
                self._dirty = True
            raise
        logger.info(f"Duration cache written: {self.path} ({len(snapshot)} entries)")
        return True
