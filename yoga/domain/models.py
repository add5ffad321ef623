from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

VIDEO_EXTENSIONS = [".mp4", ".mkv", ".mov", ".avi", ".wmv", ".m4v", ".webm"]


class SortField(str, Enum):
    NAME = "name"
    DURATION = "duration"
    AGE = "age"


class VideoEntry(BaseModel):
    """A single video in the library, identified by its display path."""

    path: Path
    name: str
    duration: float = 0.0  # seconds, 0 means unknown
    mod_time: float = 0.0  # unix seconds
    size: int = 0
    tags: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    thumbnail: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Path, **kwargs) -> "VideoEntry":
        return cls(path=path, name=path.name, **kwargs)


class CacheRecord(BaseModel):
    duration_seconds: float
    mod_time_unix: int
    size: int


class FilterState(BaseModel):
    name: str = ""
    min_enabled: bool = False
    min_minutes: int = Field(default=0, ge=0)
    max_enabled: bool = False
    max_minutes: int = Field(default=0, ge=0)
    tags: str = ""

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.min_enabled and self.max_enabled and self.min_minutes > self.max_minutes:
            raise ValueError("min minutes cannot exceed max minutes")
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.tags or self.min_enabled or self.max_enabled)


class LibraryScan(BaseModel):
    """Materialized result of one library load."""

    entries: List[VideoEntry] = Field(default_factory=list)
    pending_durations: List[Path] = Field(default_factory=list)
    tag_warning: Optional[str] = None
    cache_error: Optional[str] = None
