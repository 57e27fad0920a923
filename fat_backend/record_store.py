#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Record Stores

The engine persists every directory entry and every block as a separate,
named text record. A store only has to offer five operations (exists, read,
write, delete, list); it gives no ordering or atomicity guarantees beyond a
single record.

DirectoryRecordStore keeps one UTF-8 file per record inside a directory.
MemoryRecordStore keeps records in a dict and is used for tests and scratch
sessions.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Dict, List

from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RecordStore:
    """Interface of a named text record store"""

    def exists(self, name: str) -> bool:
        raise NotImplementedError

    def read(self, name: str) -> str:
        raise NotImplementedError

    def write(self, name: str, text: str):
        raise NotImplementedError

    def delete(self, name: str):
        raise NotImplementedError

    def list(self, pattern: str = '*') -> List[str]:
        """Names of all records matching a shell-style pattern"""
        raise NotImplementedError


class MemoryRecordStore(RecordStore):
    """Record store held entirely in memory"""

    def __init__(self):
        self.records: Dict[str, str] = {}

    def exists(self, name: str) -> bool:
        return name in self.records

    def read(self, name: str) -> str:
        try:
            return self.records[name]
        except KeyError:
            raise NotFoundError(name)

    def write(self, name: str, text: str):
        self.records[name] = text

    def delete(self, name: str):
        if name not in self.records:
            raise NotFoundError(name)
        del self.records[name]

    def list(self, pattern: str = '*') -> List[str]:
        return [n for n in self.records if fnmatch.fnmatchcase(n, pattern)]


class DirectoryRecordStore(RecordStore):
    """Record store backed by a directory of files, one file per record"""

    # Characters that cannot appear in a record (file) name
    INVALID_CHARS = '<>:"|?*\\/\x00'

    def __init__(self, root: str, create: bool = True):
        self.root = Path(root)
        if create:
            self.root.mkdir(parents=True, exist_ok=True)
        elif not self.root.is_dir():
            raise NotFoundError(str(self.root), f"Store directory does not exist: {self.root}")
        logger.debug(f"Opened record store at {self.root}")

    def _path(self, name: str) -> Path:
        if not name or name in ('.', '..') or any(c in name for c in self.INVALID_CHARS):
            raise ValidationError(f"Invalid record name: {name!r}")
        return self.root / name

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read(self, name: str) -> str:
        path = self._path(name)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(name)

    def write(self, name: str, text: str):
        path = self._path(name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        logger.debug(f"Wrote record {name} ({len(text)} chars)")

    def delete(self, name: str):
        path = self._path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(name)
        logger.debug(f"Deleted record {name}")

    def list(self, pattern: str = '*') -> List[str]:
        names = []
        with os.scandir(self.root) as it:
            for item in it:
                if item.is_file() and fnmatch.fnmatchcase(item.name, pattern):
                    names.append(item.name)
        return sorted(names)
