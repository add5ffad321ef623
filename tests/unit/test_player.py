import subprocess
import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock
from yoga.infrastructure.player import PlayerLauncher

def test_build_args_without_crop():
    assert PlayerLauncher.build_args(Path("/v/a.mp4")) == ["/v/a.mp4"]

def test_build_args_with_crop():
    assert PlayerLauncher.build_args(Path("/v/a.mp4"), "5:4") == ["--crop", "5:4", "/v/a.mp4"]

def test_launch_spawns_detached_process():
    with patch("subprocess.Popen") as mock_popen:
        mock_popen.return_value = MagicMock(pid=4242)

        proc = PlayerLauncher("vlc").launch(Path("/v/a.mp4"), "16:9")

        assert proc.pid == 4242
        cmd = mock_popen.call_args[0][0]
        assert cmd == ["vlc", "--crop", "16:9", "/v/a.mp4"]
        kwargs = mock_popen.call_args.kwargs
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] == subprocess.DEVNULL

def test_launch_missing_player_raises():
    with patch("subprocess.Popen", side_effect=FileNotFoundError("vlc")):
        with pytest.raises(OSError):
            PlayerLauncher("vlc").launch(Path("/v/a.mp4"))
