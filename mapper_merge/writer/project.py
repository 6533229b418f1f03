"""
Project file access used by the files writer.

The writer only needs three operations, so it takes any Project: a
LocalProject backed by a directory, or an InMemoryProject for tests and dry
runs.
"""

from __future__ import annotations

import io
import os
import stat
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


def _file_mode(target: Path) -> int:
    """Mode of the existing target, or the umask default for a new file."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class Project(ABC):
    """File-system view of the project the generated files belong to."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file exists at path."""
        pass

    @abstractmethod
    def open_for_read(self, path: str) -> BinaryIO:
        """Open a file for reading.

        Raises:
            FileNotFoundError: If there is no file at path
        """
        pass

    @abstractmethod
    def create_and_write(self, path: str, text: str) -> None:
        """Create (or replace) a file, creating parent directories as needed.

        Raises:
            OSError: If the file cannot be written
        """
        pass


class LocalProject(Project):
    """Project rooted at a directory on disk.

    Relative paths are resolved against root. With atomic_write, content is
    written to a temporary file in the target directory which then replaces
    the target, so an interrupted write never leaves a truncated file.
    """

    def __init__(self, root: str | Path = ".", atomic_write: bool = True, encoding: str = "utf-8"):
        self.root = Path(root)
        self.atomic_write = atomic_write
        self.encoding = encoding

    def _resolve(self, path: str) -> Path:
        return self.root / path

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def open_for_read(self, path: str) -> BinaryIO:
        return open(self._resolve(path), "rb")

    def create_and_write(self, path: str, text: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        if not self.atomic_write:
            target.write_text(text, encoding=self.encoding)
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
        )
        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "w", encoding=self.encoding, newline="") as f:
                f.write(text)
            # mkstemp creates the file owner-only; keep the mode a plain write would give
            temp_path.chmod(_file_mode(target))
            temp_path.replace(target)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise


class InMemoryProject(Project):
    """Project whose files live in a dict of path to bytes."""

    def __init__(self, files: dict[str, bytes] | None = None, encoding: str = "utf-8"):
        self.files: dict[str, bytes] = dict(files or {})
        self.encoding = encoding

    def exists(self, path: str) -> bool:
        return path in self.files

    def open_for_read(self, path: str) -> BinaryIO:
        try:
            return io.BytesIO(self.files[path])
        except KeyError:
            raise FileNotFoundError(path) from None

    def create_and_write(self, path: str, text: str) -> None:
        self.files[path] = text.encode(self.encoding)

    def read_text(self, path: str) -> str:
        return self.files[path].decode(self.encoding)


class DryRunProject(InMemoryProject):
    """Captures writes in memory; reads fall through to another project."""

    def __init__(self, base: Project, encoding: str = "utf-8"):
        super().__init__(encoding=encoding)
        self.base = base

    def exists(self, path: str) -> bool:
        return super().exists(path) or self.base.exists(path)

    def open_for_read(self, path: str) -> BinaryIO:
        if super().exists(path):
            return super().open_for_read(path)
        return self.base.open_for_read(path)
