import logging
import subprocess
import threading
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


class PlayerLauncher:
    """Starts the external video player detached from the UI."""

    def __init__(self, player_path: str = "vlc"):
        self.player_path = player_path

    @staticmethod
    def build_args(file_path: Path, crop: str = "") -> List[str]:
        args: List[str] = []
        if crop:
            args += ["--crop", crop]
        args.append(str(file_path))
        return args

    def launch(self, file_path: Path, crop: str = "") -> subprocess.Popen:
        """Spawns the player and reaps it on a background thread.

        Raises OSError when the player cannot be started.
        """
        cmd = [self.player_path, *self.build_args(file_path, crop)]
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        logger.info(f"Player started (pid={proc.pid}): {' '.join(cmd)}")
        threading.Thread(target=proc.wait, name="player-reaper", daemon=True).start()
        return proc
