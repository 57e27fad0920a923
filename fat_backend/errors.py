#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT Engine Errors

Exception hierarchy shared by the record store, the codecs, the chain
allocator and the directory manager. The File Service turns these into
failed OperationResult values; anything that is not a FATError (for
example an OSError from the storage medium) is left to propagate.
"""


class FATError(Exception):
    """Base class for all engine errors"""


class ValidationError(FATError):
    """Caller input violates a precondition. Raised before anything is written."""


class NotFoundError(FATError):
    """A directory entry or record does not exist"""

    def __init__(self, name: str, message: str = None):
        self.name = name
        super().__init__(message or f"Record not found: '{name}'")


class FATCorruptionError(FATError):
    """Persisted state is inconsistent"""


class BrokenChainError(FATCorruptionError):
    """A chain walk hit a missing record or exceeded the hop limit"""

    def __init__(self, missing_ref: str, last_good_ref: str = "", message: str = None):
        self.missing_ref = missing_ref
        self.last_good_ref = last_good_ref
        if message is None:
            after = f" after '{last_good_ref}'" if last_good_ref else " at chain head"
            message = f"Broken chain: block '{missing_ref}' is missing{after}"
        super().__init__(message)


class FormatError(FATCorruptionError):
    """A persisted record could not be decoded"""

    def __init__(self, record_name: str, reason: str):
        self.record_name = record_name
        self.reason = reason
        label = f"'{record_name}'" if record_name else "record"
        super().__init__(f"Cannot decode {label}: {reason}")
