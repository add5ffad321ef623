import pytest
import threading
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from yoga.config.models import AppConfig
from yoga.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns an AppConfig tuned for fast tests (short polling, no thumbnails)."""
    return AppConfig(
        general={
            "extensions": [".mp4", ".mkv", ".mov"],
            "max_probe_workers": 4,
            "probe_timeout_s": 5.0,
            "player_path": "vlc",
            "crop": None,
            "debug": False,
        },
        ui={
            "progress_interval_s": 0.01,
            "progress_bar_width": 10,
        },
        thumbnails={
            "enabled": False,
        },
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "yoga.yaml"

    content = {
        'general': {
            'extensions': ['mp4', 'MKV'],
            'max_probe_workers': 3,
            'player_path': 'mpv',
            'crop': '5:4',
        },
        'ui': {
            'progress_interval_s': 0.05,
        },
        'thumbnails': {
            'enabled': False,
            'width': 160,
            'height': 90,
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def library_root(tmp_path):
    """Creates a library root directory."""
    root = tmp_path / "Yoga"
    root.mkdir()
    return root

@pytest.fixture
def dummy_video_files(library_root):
    """Creates dummy video files in the library root."""
    files = []

    for name in ("morning flow.mp4", "hips.mkv", "Sun Salutation.MP4"):
        f = library_root / name
        f.write_bytes(b"dummy video content " * 100)  # ~2KB
        files.append(f)

    (library_root / "notes.txt").write_text("not a video")

    subdir = library_root / "subdir"
    subdir.mkdir()
    f = subdir / "evening.mov"
    f.write_bytes(b"dummy video content " * 50)
    files.append(f)

    return files

# ============================================================================
# Fakes
# ============================================================================

class FakeProber:
    """Stands in for FFprobeAdapter; durations keyed by file name."""

    def __init__(self, durations: Optional[Dict[str, float]] = None, default: float = 600.0,
                 errors: Optional[Dict[str, str]] = None):
        self.durations = durations or {}
        self.default = default
        self.errors = errors or {}
        self.calls: List[Path] = []
        self._lock = threading.Lock()

    def probe_duration(self, file_path: Path) -> float:
        with self._lock:
            self.calls.append(Path(file_path))
        name = Path(file_path).name
        if name in self.errors:
            raise RuntimeError(self.errors[name])
        return self.durations.get(name, self.default)


class FakePlayer:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.launched = []

    def launch(self, file_path: Path, crop: str = ""):
        if self.error is not None:
            raise self.error
        self.launched.append((Path(file_path), crop))


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def make_prober():
    """Factory for FakeProber with custom durations/errors."""
    return FakeProber


@pytest.fixture
def fake_player():
    return FakePlayer()

# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
