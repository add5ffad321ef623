import subprocess
import pytest
from pathlib import Path
from unittest.mock import patch
from yoga.infrastructure.ffprobe import FFprobeAdapter

def test_ffprobe_duration():
    with patch("subprocess.run") as mock_run:
        mock_run.return_value.stdout = "1234.567\n"
        mock_run.return_value.returncode = 0

        adapter = FFprobeAdapter()
        duration = adapter.probe_duration(Path("test.mp4"))

        assert duration == pytest.approx(1234.567)
        cmd = mock_run.call_args[0][0]
        assert cmd == [
            "ffprobe", "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            "test.mp4",
        ]
        assert mock_run.call_args.kwargs["timeout"] == 15.0

def test_ffprobe_error():
    with patch("subprocess.run") as mock_run:
        mock_run.return_value.returncode = 1
        mock_run.return_value.stderr = "moov atom not found"

        adapter = FFprobeAdapter()
        with pytest.raises(RuntimeError, match="moov atom not found"):
            adapter.probe_duration(Path("test.mp4"))

def test_ffprobe_timeout():
    with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="ffprobe", timeout=15)):
        adapter = FFprobeAdapter(timeout_s=15.0)
        with pytest.raises(RuntimeError, match="timed out after 15s"):
            adapter.probe_duration(Path("slow.mp4"))

def test_ffprobe_missing_binary():
    with patch("subprocess.run", side_effect=FileNotFoundError("ffprobe")):
        with pytest.raises(FileNotFoundError):
            FFprobeAdapter().probe_duration(Path("test.mp4"))

def test_ffprobe_empty_output():
    with patch("subprocess.run") as mock_run:
        mock_run.return_value.stdout = "\n"
        mock_run.return_value.returncode = 0
        with pytest.raises(ValueError, match="empty duration"):
            FFprobeAdapter().probe_duration(Path("test.mp4"))

@pytest.mark.parametrize("output", ["N/A", "nan", "inf"])
def test_ffprobe_invalid_output(output):
    with pytest.raises(ValueError, match="invalid duration output"):
        FFprobeAdapter.parse_duration(output)

def test_ffprobe_custom_binary_path():
    with patch("subprocess.run") as mock_run:
        mock_run.return_value.stdout = "10"
        mock_run.return_value.returncode = 0
        FFprobeAdapter("/opt/ffmpeg/bin/ffprobe", timeout_s=3).probe_duration(Path("a.mkv"))
        assert mock_run.call_args[0][0][0] == "/opt/ffmpeg/bin/ffprobe"
        assert mock_run.call_args.kwargs["timeout"] == 3
