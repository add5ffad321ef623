from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from yoga.domain.models import VIDEO_EXTENSIONS


class GeneralConfig(BaseModel):
    extensions: List[str] = Field(default_factory=lambda: list(VIDEO_EXTENSIONS))
    max_probe_workers: int = Field(default=6, ge=1)
    probe_timeout_s: float = Field(default=15.0, gt=0)
    ffprobe_path: str = "ffprobe"
    ffmpeg_path: str = "ffmpeg"
    player_path: str = "vlc"
    cache_filename: str = ".video_duration_cache.json"
    crop: Optional[str] = None  # e.g. "5:4"
    debug: bool = False
    log_path: Optional[str] = None

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("extensions must not be empty")
        return normalized


class UiConfig(BaseModel):
    """UI display configuration."""
    progress_interval_s: float = Field(default=0.2, gt=0)
    progress_bar_width: int = Field(default=24, ge=4, le=200)


class ThumbnailConfig(BaseModel):
    enabled: bool = True
    width: int = Field(default=320, gt=0)
    height: int = Field(default=180, gt=0)
    percent: int = Field(default=10, ge=0, le=100)  # position within the clip
    dir_name: str = ".thumbnails"
    cache_filename: str = ".video_thumbnails.json"
    timeout_s: float = Field(default=30.0, gt=0)


class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    ui: UiConfig = Field(default_factory=UiConfig)
    thumbnails: ThumbnailConfig = Field(default_factory=ThumbnailConfig)
