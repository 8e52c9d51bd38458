"""
Utilities for building safe output paths for releases and their assets.
"""

from pathlib import Path

from pathvalidate import sanitize_filename


def create_dir(directory_path: Path) -> None:
    """Creates a directory (and parents) if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def safe_child_path(parent: Path, name: str) -> Path:
    """
    Joins a remotely supplied file or directory name onto `parent`.

    Separators and reserved characters are stripped so the result is always a
    direct child of `parent`.

    Raises:
        ValueError: If nothing usable is left of the name.
    """
    cleaned = sanitize_filename(name, platform="universal")
    if cleaned in ("", ".", ".."):
        raise ValueError(f"Cannot derive a file name from {name!r}")
    return parent / cleaned
