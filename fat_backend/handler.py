#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT File Service
Creates, reads, rewrites, trashes and restores files stored as a directory
entry plus a chain of block records
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .chain import ChainAllocator
from .config import DUPLICATE_REJECT, FATConfig
from .directory import DirectoryManager, validate_name
from .errors import FATCorruptionError, FATError, NotFoundError, ValidationError
from .models import DirectoryEntry
from .record_store import RecordStore

logger = logging.getLogger(__name__)

Selection = Union[DirectoryEntry, str]


@dataclass
class OperationResult:
    """Result of a file service operation"""
    success: bool = False
    message: str = ""
    value: Any = None
    error: Optional[FATError] = None


@dataclass
class IntegrityReport:
    """Consistency summary of a record store"""
    files_checked: int = 0
    blocks_checked: int = 0
    broken: Dict[str, str] = field(default_factory=dict)
    size_mismatches: List[str] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.broken or self.size_mismatches or self.orphans)


class FileService:
    """Handler for files kept in a FAT-style record store"""

    def __init__(self, store: RecordStore, config: Optional[FATConfig] = None):
        self.store = store
        self.config = (config or FATConfig()).validate()
        self.chains = ChainAllocator(store, self.config)
        self.directory = DirectoryManager(store, self.config)
        logger.debug(f"Initializing FileService on {type(store).__name__}")

    def _fail(self, action: str, error: FATError) -> OperationResult:
        if isinstance(error, FATCorruptionError):
            logger.error(f"Corruption while trying to {action}: {error}")
        else:
            logger.warning(f"Failed to {action}: {error}")
        return OperationResult(success=False, message=str(error), error=error)

    def _resolve(self, selection: Selection) -> DirectoryEntry:
        """Re-read the selected entry from the store"""
        name = selection.name if isinstance(selection, DirectoryEntry) else selection
        if not name:
            raise ValidationError("No file selected")
        record = self.directory.record_name(name)
        if not self.store.exists(record):
            raise NotFoundError(name, f"File not found: '{name}'")
        return self.directory.get(name)

    def create_file(self, name: str, content: str) -> OperationResult:
        """Create a file and write its content as a new chain"""
        try:
            validate_name(name)
            if self.directory.exists(name):
                if self.config.duplicate_policy == DUPLICATE_REJECT:
                    raise ValidationError(f"A file named '{name}' already exists")
                previous = self.directory.get(name)
                freed = self.chains.free_chain(previous.head_block_ref)
                logger.info(f"Replacing existing file '{name}' ({len(freed)} old block(s) freed)")

            entry = self.directory.create(name)
            entry.head_block_ref = self.chains.write_chain(content, name)
            entry.size_chars = len(content)
            self.directory.update(entry)
        except FATError as e:
            return self._fail(f"create '{name}'", e)

        blocks = self.chains.block_count(len(content))
        logger.info(f"Created '{name}' ({len(content)} chars, {blocks} block(s))")
        return OperationResult(success=True, message=f"Created '{name}'", value=entry)

    def get_file(self, name: str) -> OperationResult:
        try:
            entry = self._resolve(name)
        except FATError as e:
            return self._fail(f"look up '{name}'", e)
        return OperationResult(success=True, value=entry)

    def list_files(self, trashed: Optional[bool] = False) -> OperationResult:
        """List active files, trashed files (trashed=True) or all (None)"""
        try:
            entries, unreadable = self.directory.scan(trashed)
        except FATError as e:
            return self._fail("list files", e)
        where = "in the recycle bin" if trashed else "active"
        if trashed is None:
            where = "in total"
        message = f"{len(entries)} file(s) {where}"
        if unreadable:
            message += f"; {len(unreadable)} unreadable record(s) skipped, run Check Integrity for details"
        return OperationResult(success=True, message=message, value=entries)

    def read_file(self, selection: Selection) -> OperationResult:
        """Return the full content of the selected file"""
        try:
            entry = self._resolve(selection)
            content = self.chains.read_chain(entry.head_block_ref)
        except FATError as e:
            return self._fail(f"read '{getattr(selection, 'name', selection)}'", e)

        if len(content) != entry.size_chars:
            logger.warning(
                f"Size mismatch for '{entry.name}': directory says {entry.size_chars}, chain holds {len(content)}"
            )
        return OperationResult(success=True, message=f"Read '{entry.name}'", value=content)

    def rewrite_file(self, selection: Selection, content: str) -> OperationResult:
        """Replace the content of a file: free the old chain, then write the new one"""
        try:
            entry = self._resolve(selection)
            if entry.in_trash and not self.config.allow_trashed_rewrite:
                raise ValidationError(f"'{entry.name}' is in the recycle bin and cannot be modified")

            freed = self.chains.free_chain(entry.head_block_ref)
            entry.head_block_ref = self.chains.write_chain(content, entry.name)
            entry.size_chars = len(content)
            entry.modified_at = datetime.datetime.now()
            self.directory.update(entry)
        except FATError as e:
            return self._fail(f"rewrite '{getattr(selection, 'name', selection)}'", e)

        logger.info(f"Rewrote '{entry.name}' ({len(freed)} block(s) freed, {len(content)} chars written)")
        return OperationResult(success=True, message=f"Saved '{entry.name}'", value=entry)

    def trash_file(self, selection: Selection) -> OperationResult:
        """Move a file to the recycle bin (its blocks are kept)"""
        try:
            entry = self.directory.mark_trashed(self._resolve(selection))
        except FATError as e:
            return self._fail(f"delete '{getattr(selection, 'name', selection)}'", e)
        logger.info(f"Moved '{entry.name}' to the recycle bin")
        return OperationResult(success=True, message=f"'{entry.name}' moved to the recycle bin", value=entry)

    def restore_file(self, selection: Selection) -> OperationResult:
        """Bring a file back from the recycle bin"""
        try:
            entry = self.directory.mark_restored(self._resolve(selection))
        except FATError as e:
            return self._fail(f"restore '{getattr(selection, 'name', selection)}'", e)
        logger.info(f"Restored '{entry.name}'")
        return OperationResult(success=True, message=f"Restored '{entry.name}'", value=entry)

    def check_integrity(self) -> OperationResult:
        """
        Walk every chain and compare it against the directory and the store.

        Reports chains that cannot be read, sizes that disagree with the chain
        content, and block records no entry can reach. Nothing is modified.
        """
        report = IntegrityReport()
        reachable = set()

        for record in self.directory.records():
            report.files_checked += 1
            try:
                entry = self.directory.load(record)
            except FATError as e:
                report.broken[record] = str(e)
                continue

            length = 0
            try:
                for ref, block in self.chains.walk(entry.head_block_ref):
                    reachable.add(ref)
                    length += len(block.payload)
            except FATCorruptionError as e:
                report.broken[entry.name] = str(e)
                continue
            if length != entry.size_chars:
                report.size_mismatches.append(entry.name)

        blocks = self.store.list(f"*{self.config.block_suffix}")
        report.blocks_checked = len(blocks)
        report.orphans = sorted(name for name in blocks if name not in reachable)

        if report.is_clean:
            message = f"No problems found ({report.files_checked} file(s), {report.blocks_checked} block(s))"
            logger.info(message)
        else:
            message = (f"{len(report.broken)} broken chain(s), {len(report.size_mismatches)} size mismatch(es), "
                       f"{len(report.orphans)} orphaned block(s)")
            logger.warning(f"Integrity check: {message}")
        return OperationResult(success=True, message=message, value=report)
