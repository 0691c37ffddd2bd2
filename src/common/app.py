"""Read-only view of a project source tree.

Every path handed to App is relative to the source root. Lookups for missing
files return False/None instead of raising; reading a file that exists but
cannot be read or decoded raises an AppError subclass.
"""

from __future__ import annotations

import glob
import json
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any, List, Optional

import yaml

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for hard failures while reading the source tree."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class FileReadError(AppError):
    """Raised when a file exists but cannot be read."""


class ParseError(AppError):
    """Raised when a structured file exists but cannot be decoded."""


class App:
    """A project source directory."""

    def __init__(self, source: str):
        self.source = Path(source).resolve()
        if not self.source.is_dir():
            raise FileReadError(str(source), "source directory does not exist")

    def _abs(self, rel_path: str) -> Path:
        return self.source / rel_path

    def includes_file(self, rel_path: str) -> bool:
        """Return True if a regular file exists at rel_path."""
        return self._abs(rel_path).is_file()

    def includes_directory(self, rel_path: str) -> bool:
        return self._abs(rel_path).is_dir()

    def read_file(self, rel_path: str) -> str:
        """Read a text file.

        Raises:
            FileReadError: If the file is missing or unreadable.
        """
        try:
            with open(self._abs(rel_path), "r", encoding="utf-8") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(rel_path, str(e)) from e

    def read_file_if_exists(self, rel_path: str) -> Optional[str]:
        """Read a text file, or return None when it does not exist."""
        if not self.includes_file(rel_path):
            return None
        return self.read_file(rel_path)

    def read_json(self, rel_path: str) -> Any:
        """Read and decode a JSON file.

        Raises:
            FileReadError: If the file is missing or unreadable.
            ParseError: If the content is not valid JSON.
        """
        body = self.read_file(rel_path)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ParseError(rel_path, f"invalid JSON: {e}") from e

    def read_yaml(self, rel_path: str) -> Any:
        """Read and decode a YAML file.

        Raises:
            FileReadError: If the file is missing or unreadable.
            ParseError: If the content is not valid YAML.
        """
        body = self.read_file(rel_path)
        try:
            return yaml.safe_load(body)
        except yaml.YAMLError as e:
            raise ParseError(rel_path, f"invalid YAML: {e}") from e

    def find_files(self, pattern: str) -> List[str]:
        """Return relative posix paths of files matching a recursive glob, sorted."""
        matches = glob.glob(os.path.join(glob.escape(str(self.source)), pattern), recursive=True)
        return sorted(
            self.strip_source_path(m) for m in matches if os.path.isfile(m)
        )

    def find_directories(self, pattern: str) -> List[str]:
        """Return relative posix paths of directories matching a glob, sorted."""
        matches = glob.glob(os.path.join(glob.escape(str(self.source)), pattern), recursive=True)
        return sorted(
            self.strip_source_path(m) for m in matches if os.path.isdir(m)
        )

    def strip_source_path(self, abs_path: str) -> str:
        """Make a path relative to the source root, in posix form ("" for the root)."""
        rel = os.path.relpath(abs_path, self.source)
        if rel == os.curdir:
            return ""
        return PurePosixPath(*Path(rel).parts).as_posix()
