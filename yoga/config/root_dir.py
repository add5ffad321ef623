import os
import stat
from pathlib import Path
from typing import Tuple

DEFAULT_ROOT = "~/Yoga"


def _strip_wrapping_quotes(value: str) -> str:
    trimmed = value.strip()
    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in ('"', "'"):
        return trimmed[1:-1]
    return trimmed


def normalize_root_input(value: str, default: str = DEFAULT_ROOT) -> Tuple[str, bool]:
    """Returns (path text, is_default)."""
    cleaned = _strip_wrapping_quotes(value or "")
    if not cleaned:
        return default, True
    return cleaned, False


def expand_root(value: str) -> Path:
    """Expands ~ and ~user; raises ValueError for unknown users."""
    expanded = os.path.expanduser(value)
    if expanded.startswith("~"):
        raise ValueError(f"cannot expand root path {value!r}")
    return Path(os.path.abspath(expanded))


def resolve_root_path(value: str, default: str = DEFAULT_ROOT) -> Path:
    """Expands and validates the library root.

    The default root is created on demand; an explicit root must already exist.
    """
    text, is_default = normalize_root_input(value, default)
    path = expand_root(text)
    try:
        info = path.stat()
    except FileNotFoundError:
        if not is_default:
            raise ValueError(f"root path does not exist: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ValueError(f"cannot create default directory {str(path)!r}: {exc}") from exc
        info = path.stat()
    except OSError as exc:
        raise ValueError(f"cannot access root path {str(path)!r}: {exc}") from exc

    if not (stat.S_ISDIR(info.st_mode) or stat.S_ISREG(info.st_mode)):
        raise ValueError(f"root path {str(path)!r} is not a file or directory")
    return path
