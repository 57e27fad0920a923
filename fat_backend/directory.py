#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
File Directory Operations

This module owns the set of directory entries kept in a record store:
- Creating (reserving) entries for new files.
- Looking entries up by name and enumerating them by recycle-bin state.
- Persisting entries after the caller has changed them.
- Moving entries to and from the recycle bin.

Nothing is cached between calls; every lookup reads the store.
"""

import datetime
import logging
from typing import List, Optional, Tuple

from .codec import decode_entry, encode_entry
from .config import FATConfig
from .errors import FormatError, ValidationError
from .models import DirectoryEntry
from .record_store import RecordStore

logger = logging.getLogger(__name__)

# Characters that cannot appear in a file name
INVALID_NAME_CHARS = '<>:"|?*\\/\x00'


def validate_name(name: str) -> str:
    """Check a file name and return it unchanged, or raise ValidationError"""
    if name is None or not name.strip():
        raise ValidationError("File name cannot be empty")
    bad = sorted({c for c in name if c in INVALID_NAME_CHARS})
    if bad:
        shown = ' '.join(repr(c) for c in bad)
        raise ValidationError(f"File name '{name}' contains invalid characters: {shown}")
    return name


class DirectoryManager:
    """Creates, finds, updates and trashes directory entries"""

    def __init__(self, store: RecordStore, config: Optional[FATConfig] = None):
        self.store = store
        self.config = config or FATConfig()

    def record_name(self, name: str) -> str:
        return self.config.entry_record_name(name)

    def _now(self) -> datetime.datetime:
        return datetime.datetime.now()

    def _write(self, entry: DirectoryEntry):
        self.store.write(self.record_name(entry.name), encode_entry(entry, self.config.record_format))

    def exists(self, name: str) -> bool:
        return self.store.exists(self.record_name(name))

    def records(self) -> List[str]:
        """Names of all directory entry records in the store"""
        return self.store.list(f"*{self.config.entry_suffix}")

    def load(self, record: str) -> DirectoryEntry:
        return decode_entry(self.store.read(record), record, self.config.record_format)

    def get(self, name: str) -> DirectoryEntry:
        """Load the entry for `name` (NotFoundError if there is none)"""
        return self.load(self.record_name(name))

    def create(self, name: str) -> DirectoryEntry:
        """
        Create and persist a fresh, empty entry.

        Existing entries with the same name are not checked here; the caller
        decides what a duplicate means.
        """
        validate_name(name)
        now = self._now()
        entry = DirectoryEntry(
            name=name,
            head_block_ref="",
            in_trash=False,
            size_chars=0,
            created_at=now,
            modified_at=now,
            deleted_at=None,
        )
        self._write(entry)
        logger.debug(f"Reserved directory entry '{name}'")
        return entry

    def scan(self, trashed: Optional[bool] = False) -> Tuple[List[DirectoryEntry], List[str]]:
        """
        Enumerate entries, skipping records that cannot be decoded.

        Args:
            trashed: False for active entries, True for entries in the recycle
                     bin, None for all of them.

        Returns:
            (entries, names of the unreadable entry records)
        """
        entries = []
        unreadable = []
        for record in self.records():
            try:
                entry = self.load(record)
            except FormatError as e:
                logger.error(f"Skipping unreadable directory entry: {e}")
                unreadable.append(record)
                continue
            if trashed is None or entry.in_trash == trashed:
                entries.append(entry)
        return entries, unreadable

    def list(self, trashed: Optional[bool] = False) -> List[DirectoryEntry]:
        """Enumerate entries by recycle-bin state (see scan)"""
        return self.scan(trashed)[0]

    def update(self, entry: DirectoryEntry):
        """Persist an entry whose fields were already changed by the caller"""
        problems = entry.invariant_violations()
        if problems:
            raise ValidationError(f"Inconsistent entry '{entry.name}': {'; '.join(problems)}")
        self._write(entry)
        logger.debug(f"Updated directory entry '{entry.name}'")

    def mark_trashed(self, entry: DirectoryEntry) -> DirectoryEntry:
        if entry.in_trash:
            raise ValidationError(f"'{entry.name}' is already in the recycle bin")
        entry.in_trash = True
        entry.deleted_at = self._now()
        self._write(entry)
        logger.debug(f"Moved '{entry.name}' to the recycle bin")
        return entry

    def mark_restored(self, entry: DirectoryEntry) -> DirectoryEntry:
        if not entry.in_trash:
            raise ValidationError(f"'{entry.name}' is not in the recycle bin")
        entry.in_trash = False
        entry.deleted_at = None
        self._write(entry)
        logger.debug(f"Restored '{entry.name}' from the recycle bin")
        return entry
