from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

"""Text acquisition boundary.

The analysis pipeline never opens files itself; it receives a callable that
turns a source into text or raises ReadError. The default reads local files,
tests pass in lambdas.
"""

__all__ = [
    "ReadError",
    "TextAcquirer",
    "acquire_text",
]


class ReadError(Exception):
    """Raised when the content of an input source cannot be obtained."""


TextAcquirer = Callable[[Path], str]


def acquire_text(source: Path) -> str:
    """Read a local file as UTF-8 text (a leading BOM is dropped)."""
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise ReadError(f"file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ReadError(f"not valid UTF-8 text: {path} ({e.reason})") from e
    except OSError as e:
        raise ReadError(f"cannot read {path}: {e}") from e
