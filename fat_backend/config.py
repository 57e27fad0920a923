#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Engine configuration: block geometry, record naming, the on-disk record
format and the policies for duplicate names and rewriting files that sit in
the recycle bin.
"""

from dataclasses import dataclass

from .errors import ValidationError

# Maximum payload characters per block
MAX_BLOCK = 20

DUPLICATE_OVERWRITE = 'overwrite'
DUPLICATE_REJECT = 'reject'
DUPLICATE_POLICIES = (DUPLICATE_OVERWRITE, DUPLICATE_REJECT)

# Record formats: 'native' uses English JSON keys and block_ names,
# 'legacy' reads and writes stores made by the FAT console program
RECORD_FORMAT_NATIVE = 'native'
RECORD_FORMAT_LEGACY = 'legacy'
RECORD_FORMATS = (RECORD_FORMAT_NATIVE, RECORD_FORMAT_LEGACY)

NATIVE_BLOCK_PREFIX = 'block_'
LEGACY_BLOCK_PREFIX = 'bloque_'


@dataclass
class FATConfig:
    """Settings shared by the allocator, the directory manager and the service"""
    block_size: int = MAX_BLOCK
    max_chain_hops: int = 100_000
    duplicate_policy: str = DUPLICATE_OVERWRITE
    allow_trashed_rewrite: bool = True
    record_format: str = RECORD_FORMAT_NATIVE
    entry_suffix: str = '_FAT.json'
    block_prefix: str = NATIVE_BLOCK_PREFIX
    block_suffix: str = '.bloq.json'

    @classmethod
    def legacy(cls, **kwargs) -> 'FATConfig':
        """Configuration for stores written by the FAT console program"""
        kwargs.setdefault('block_prefix', LEGACY_BLOCK_PREFIX)
        return cls(record_format=RECORD_FORMAT_LEGACY, **kwargs)

    def validate(self) -> 'FATConfig':
        if self.block_size < 1:
            raise ValidationError(f"Block size must be positive, got {self.block_size}")
        if self.max_chain_hops < 1:
            raise ValidationError(f"Hop limit must be positive, got {self.max_chain_hops}")
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValidationError(
                f"Unknown duplicate policy: {self.duplicate_policy!r} "
                f"(expected one of {', '.join(DUPLICATE_POLICIES)})"
            )
        if self.record_format not in RECORD_FORMATS:
            raise ValidationError(
                f"Unknown record format: {self.record_format!r} "
                f"(expected one of {', '.join(RECORD_FORMATS)})"
            )
        if not self.entry_suffix or not self.block_suffix:
            raise ValidationError("Record suffixes cannot be empty")
        if self.entry_suffix.endswith(self.block_suffix) or self.block_suffix.endswith(self.entry_suffix):
            raise ValidationError("Entry and block suffixes must be distinguishable")
        return self

    def entry_record_name(self, name: str) -> str:
        """Record name of the directory entry for a file"""
        return f"{name}{self.entry_suffix}"

    def block_record_name(self, base_name: str, index: int) -> str:
        """Record name of block `index` in the chain of file `base_name`"""
        return f"{self.block_prefix}{base_name}_{index}{self.block_suffix}"

    def is_block_record(self, name: str) -> bool:
        """True if `name` has the shape of a block record name"""
        return (name.startswith(self.block_prefix) and name.endswith(self.block_suffix)
                and not name.endswith(self.entry_suffix))
