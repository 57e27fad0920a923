#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Record Codecs

Text encoding of the two persisted record kinds:

- Block records: {"data": <payload>, "next": <record name or "">, "eof": <bool>}
- Directory entry records: {"name", "head_block", "in_trash", "size_chars",
  "created_at", "modified_at", "deleted_at"}

Records are indented JSON. Timestamps are naive local times written with
TIMESTAMP_FORMAT (e.g. 2026-10-19T14:03:27.000512); any other textual form is
rejected on decode.

The legacy record format stores the same fields under the keys used by the
FAT console program (Datos/SiguienteArchivo/EOF for blocks, Nombre,
RutaArchivoDatosInicial and so on for entries). Its timestamps are .NET
round-trip strings: up to seven fraction digits and an optional UTC offset,
which is dropped on decode since all times are local.
"""

import datetime
import json
import re
from typing import Dict, Optional

from .config import MAX_BLOCK, RECORD_FORMAT_LEGACY, RECORD_FORMAT_NATIVE
from .errors import FormatError, ValidationError
from .models import Block, DirectoryEntry

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

LEGACY_TIMESTAMP_RE = re.compile(
    r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,7}))?(?:Z|[+-]\d{2}:\d{2})?$'
)

BLOCK_FIELDS = ('data', 'next', 'eof')
ENTRY_FIELDS = ('name', 'head_block', 'in_trash', 'size_chars',
                'created_at', 'modified_at', 'deleted_at')

# Stored JSON key for each field, per record format
BLOCK_KEYS: Dict[str, Dict[str, str]] = {
    RECORD_FORMAT_NATIVE: {f: f for f in BLOCK_FIELDS},
    RECORD_FORMAT_LEGACY: {'data': 'Datos', 'next': 'SiguienteArchivo', 'eof': 'EOF'},
}
ENTRY_KEYS: Dict[str, Dict[str, str]] = {
    RECORD_FORMAT_NATIVE: {f: f for f in ENTRY_FIELDS},
    RECORD_FORMAT_LEGACY: {
        'name': 'Nombre',
        'head_block': 'RutaArchivoDatosInicial',
        'in_trash': 'EnPapelera',
        'size_chars': 'TamanoCaracteres',
        'created_at': 'FechaCreacion',
        'modified_at': 'FechaModificacion',
        'deleted_at': 'FechaEliminacion',
    },
}


def _keys(table: Dict[str, Dict[str, str]], record_format: str) -> Dict[str, str]:
    try:
        return table[record_format]
    except KeyError:
        raise ValidationError(f"Unknown record format: {record_format!r}")


def encode_timestamp(dt: Optional[datetime.datetime]) -> Optional[str]:
    """Encode a datetime using TIMESTAMP_FORMAT (None stays None)"""
    if dt is None:
        return None
    return dt.strftime(TIMESTAMP_FORMAT)


def decode_timestamp(value, record_name: str = "", field: str = "timestamp") -> datetime.datetime:
    """Parse a TIMESTAMP_FORMAT string, raising FormatError on anything else"""
    if not isinstance(value, str):
        raise FormatError(record_name, f"{field} must be a string, got {type(value).__name__}")
    try:
        return datetime.datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        raise FormatError(record_name, f"{field} '{value}' does not match {TIMESTAMP_FORMAT}")


def decode_legacy_timestamp(value, record_name: str = "", field: str = "timestamp") -> datetime.datetime:
    """Parse a .NET round-trip timestamp such as 2024-05-01T12:00:00.1234567+02:00"""
    if not isinstance(value, str):
        raise FormatError(record_name, f"{field} must be a string, got {type(value).__name__}")
    match = LEGACY_TIMESTAMP_RE.match(value)
    if not match:
        raise FormatError(record_name, f"{field} '{value}' is not a round-trip timestamp")
    whole, fraction = match.groups()
    # Python keeps microseconds; the seventh digit is dropped
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        dt = datetime.datetime.strptime(whole, "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        raise FormatError(record_name, f"{field} '{value}' is not a valid date")
    return dt.replace(microsecond=micro)


def _load_object(text: str, record_name: str, fields) -> dict:
    try:
        obj = json.loads(text)
    except (TypeError, ValueError) as e:
        raise FormatError(record_name, f"invalid JSON ({e})")
    if not isinstance(obj, dict):
        raise FormatError(record_name, "record is not a JSON object")
    missing = [f for f in fields if f not in obj]
    if missing:
        raise FormatError(record_name, f"missing field(s): {', '.join(missing)}")
    return obj


def _expect(obj: dict, field: str, kind, record_name: str):
    value = obj[field]
    # bool is a subclass of int; keep the two apart
    if kind is int and isinstance(value, bool):
        raise FormatError(record_name, f"field '{field}' must be an integer")
    if not isinstance(value, kind):
        raise FormatError(record_name, f"field '{field}' has unexpected type {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def encode_block(block: Block, max_payload: int = MAX_BLOCK,
                 record_format: str = RECORD_FORMAT_NATIVE) -> str:
    """Serialize a block. Oversized payloads are rejected before anything is written."""
    keys = _keys(BLOCK_KEYS, record_format)
    if len(block.payload) > max_payload:
        raise ValidationError(
            f"Block payload of {len(block.payload)} characters exceeds the {max_payload} character limit"
        )
    if block.is_last and block.next_ref:
        raise ValidationError(f"Terminal block cannot point to '{block.next_ref}'")
    return json.dumps(
        {keys['data']: block.payload, keys['next']: block.next_ref, keys['eof']: block.is_last},
        indent=2, ensure_ascii=False
    )


def decode_block(text: str, record_name: str = "", max_payload: int = MAX_BLOCK,
                 record_format: str = RECORD_FORMAT_NATIVE) -> Block:
    """Parse a block record"""
    keys = _keys(BLOCK_KEYS, record_format)
    obj = _load_object(text, record_name, [keys[f] for f in BLOCK_FIELDS])
    payload = _expect(obj, keys['data'], str, record_name)
    next_ref = _expect(obj, keys['next'], str, record_name)
    is_last = _expect(obj, keys['eof'], bool, record_name)

    if len(payload) > max_payload:
        raise FormatError(
            record_name, f"payload of {len(payload)} characters exceeds the {max_payload} character limit"
        )
    if is_last and next_ref:
        raise FormatError(record_name, f"end-of-chain block still points to '{next_ref}'")

    return Block(payload=payload, next_ref=next_ref, is_last=is_last)


# ---------------------------------------------------------------------------
# Directory entries
# ---------------------------------------------------------------------------

def encode_entry(entry: DirectoryEntry, record_format: str = RECORD_FORMAT_NATIVE) -> str:
    """Serialize a directory entry"""
    keys = _keys(ENTRY_KEYS, record_format)
    return json.dumps({
        keys['name']: entry.name,
        keys['head_block']: entry.head_block_ref,
        keys['in_trash']: entry.in_trash,
        keys['size_chars']: entry.size_chars,
        keys['created_at']: encode_timestamp(entry.created_at),
        keys['modified_at']: encode_timestamp(entry.modified_at),
        keys['deleted_at']: encode_timestamp(entry.deleted_at),
    }, indent=2, ensure_ascii=False)


def decode_entry(text: str, record_name: str = "",
                 record_format: str = RECORD_FORMAT_NATIVE) -> DirectoryEntry:
    """Parse a directory entry record"""
    keys = _keys(ENTRY_KEYS, record_format)
    parse_time = decode_legacy_timestamp if record_format == RECORD_FORMAT_LEGACY else decode_timestamp
    obj = _load_object(text, record_name, [keys[f] for f in ENTRY_FIELDS[:-1]])

    name = _expect(obj, keys['name'], str, record_name)
    if not name:
        raise FormatError(record_name, "empty file name")
    head = _expect(obj, keys['head_block'], str, record_name)
    in_trash = _expect(obj, keys['in_trash'], bool, record_name)
    size = _expect(obj, keys['size_chars'], int, record_name)

    created = parse_time(obj[keys['created_at']], record_name, keys['created_at'])
    modified = parse_time(obj[keys['modified_at']], record_name, keys['modified_at'])
    deleted_raw = obj.get(keys['deleted_at'])
    deleted = None if deleted_raw is None else parse_time(deleted_raw, record_name, keys['deleted_at'])

    entry = DirectoryEntry(
        name=name,
        head_block_ref=head,
        in_trash=in_trash,
        size_chars=size,
        created_at=created,
        modified_at=modified,
        deleted_at=deleted,
    )

    problems = entry.invariant_violations()
    if problems:
        raise FormatError(record_name, "; ".join(problems))
    return entry
