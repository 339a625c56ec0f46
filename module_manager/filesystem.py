"""
Filesystem Provider

Thin wrapper over pathlib used by the module registry for every disk access,
so the registry never touches the filesystem directly and tests or hosts can
swap in their own implementation.
"""

import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Filesystem:
    """Local filesystem operations used by the module registry."""

    def exists(self, path: PathLike) -> bool:
        """Determine whether a file or directory exists."""
        return Path(path).exists()

    def is_directory(self, path: PathLike) -> bool:
        """Determine whether the given path is a directory."""
        return Path(path).is_dir()

    def directories(self, path: PathLike) -> List[str]:
        """
        List the immediate subdirectories of a directory.

        Args:
            path: Directory to list

        Returns:
            Full paths of the subdirectories, sorted by name
        """
        return sorted(str(item) for item in Path(path).iterdir() if item.is_dir())

    def make_directory(self, path: PathLike, mode: int = 0o777, recursive: bool = False) -> None:
        """Create a directory; an existing directory is left untouched."""
        Path(path).mkdir(mode=mode, parents=recursive, exist_ok=True)
        logger.debug(f"Created directory: {path}")

    def get(self, path: PathLike) -> str:
        """
        Read a file's contents.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def put(self, path: PathLike, content: str) -> int:
        """
        Write a file atomically, replacing any previous contents.

        The content is written to a sibling temp file first and moved over
        the target, so readers never observe a half-written file.

        Returns:
            Number of characters written
        """
        target = Path(path)
        temp_path = target.with_name(target.name + '.tmp')
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                written = f.write(content)
            temp_path.replace(target)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise
        return written
