#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""Data model for directory entries and chain blocks"""

import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass
class Block:
    """One fixed-capacity fragment of a file plus its forward link"""
    payload: str
    next_ref: str = ""
    is_last: bool = False


@dataclass
class DirectoryEntry:
    """Metadata of a logical file and the head of its block chain"""
    name: str
    head_block_ref: str = ""
    in_trash: bool = False
    size_chars: int = 0
    created_at: Optional[datetime.datetime] = None
    modified_at: Optional[datetime.datetime] = None
    deleted_at: Optional[datetime.datetime] = None

    def invariant_violations(self) -> list:
        """Return human-readable descriptions of broken invariants (empty if consistent)"""
        problems = []
        if self.in_trash and self.deleted_at is None:
            problems.append("entry is in the recycle bin but has no deletion time")
        if not self.in_trash and self.deleted_at is not None:
            problems.append("active entry carries a deletion time")
        if self.size_chars < 0:
            problems.append(f"negative size {self.size_chars}")
        if bool(self.head_block_ref) != (self.size_chars > 0):
            problems.append(
                f"head block '{self.head_block_ref}' does not match size {self.size_chars}"
            )
        return problems
