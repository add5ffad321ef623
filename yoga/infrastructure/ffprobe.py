import math
import subprocess
from pathlib import Path


class FFprobeAdapter:
    """Wrapper around ffprobe to read a clip's container duration."""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout_s: float = 15.0):
        self.ffprobe_path = ffprobe_path
        self.timeout_s = timeout_s

    @staticmethod
    def parse_duration(output: str) -> float:
        text = (output or "").strip()
        if not text:
            raise ValueError("empty duration")
        try:
            seconds = float(text)
        except ValueError:
            raise ValueError(f"invalid duration output: {text!r}")
        if not math.isfinite(seconds):
            raise ValueError(f"invalid duration output: {text!r}")
        return seconds

    def probe_duration(self, file_path: Path) -> float:
        """Executes ffprobe and returns the duration in seconds.

        No retries: callers record the failure against the file.
        """
        cmd = [
            self.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(file_path)
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout_s)
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"ffprobe timed out after {self.timeout_s:g}s")
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise RuntimeError(f"ffprobe failed for {file_path}: {stderr or f'exit status {result.returncode}'}")

        return self.parse_duration(result.stdout)
