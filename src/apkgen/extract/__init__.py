"""Dependency archive resolution and extraction."""

from .archive import ArchiveExtractor, unzip_archive
from .resolve import resolve_archive_file

__all__ = ["ArchiveExtractor", "resolve_archive_file", "unzip_archive"]
