import datetime
import json

import pytest

from fat_backend.codec import (
    TIMESTAMP_FORMAT, decode_block, decode_entry, decode_legacy_timestamp, decode_timestamp,
    encode_block, encode_entry, encode_timestamp
)
from fat_backend.config import RECORD_FORMAT_LEGACY
from fat_backend.errors import FormatError, ValidationError
from fat_backend.models import Block, DirectoryEntry

CREATED = datetime.datetime(2026, 3, 14, 9, 26, 53, 589793)
MODIFIED = datetime.datetime(2026, 3, 15, 10, 0, 0, 0)


@pytest.fixture
def entry():
    return DirectoryEntry(
        name="note",
        head_block_ref="block_note_0.bloq.json",
        in_trash=False,
        size_chars=45,
        created_at=CREATED,
        modified_at=MODIFIED,
    )


class TestTimestamps:
    def test_fixed_format(self):
        assert encode_timestamp(CREATED) == "2026-03-14T09:26:53.589793"
        assert decode_timestamp("2026-03-14T09:26:53.589793") == CREATED

    def test_none_passthrough(self):
        assert encode_timestamp(None) is None

    @pytest.mark.parametrize("value", [
        "2026-03-14 09:26:53",
        "14/03/2026 09:26:53",
        "2026-03-14T09:26:53",            # no fraction
        "2026-03-14T09:26:53.5+01:00",    # offset not allowed
        "",
    ])
    def test_other_formats_rejected(self, value):
        with pytest.raises(FormatError):
            decode_timestamp(value, "x_FAT.json", "created_at")

    def test_non_string_rejected(self):
        with pytest.raises(FormatError):
            decode_timestamp(1700000000)

    def test_format_constant(self):
        assert TIMESTAMP_FORMAT == "%Y-%m-%dT%H:%M:%S.%f"


class TestBlockCodec:
    def test_encode_fields(self):
        text = encode_block(Block("hello", "block_a_1.bloq.json", False))
        assert json.loads(text) == {'data': 'hello', 'next': 'block_a_1.bloq.json', 'eof': False}

    def test_decode(self):
        block = decode_block('{"data": "tail", "next": "", "eof": true}')
        assert block == Block("tail", "", True)

    def test_unicode_payload_survives(self):
        block = Block("ñandú über 日本", "", True)
        assert decode_block(encode_block(block)) == block

    def test_encode_oversized_payload(self):
        with pytest.raises(ValidationError):
            encode_block(Block("x" * 21, "", True))

    def test_decode_oversized_payload(self):
        text = json.dumps({'data': "x" * 21, 'next': "", 'eof': True})
        with pytest.raises(FormatError) as exc:
            decode_block(text, "block_big_0.bloq.json")
        assert exc.value.record_name == "block_big_0.bloq.json"

    def test_payload_at_limit(self):
        text = json.dumps({'data': "x" * 20, 'next': "", 'eof': True})
        assert len(decode_block(text).payload) == 20

    @pytest.mark.parametrize("missing", ['data', 'next', 'eof'])
    def test_missing_field(self, missing):
        obj = {'data': "abc", 'next': "", 'eof': True}
        del obj[missing]
        with pytest.raises(FormatError) as exc:
            decode_block(json.dumps(obj), "block_a_0.bloq.json")
        assert missing in str(exc.value)

    def test_terminal_block_with_successor(self):
        text = json.dumps({'data': "abc", 'next': "block_a_1.bloq.json", 'eof': True})
        with pytest.raises(FormatError):
            decode_block(text)

    def test_encode_terminal_block_with_successor(self):
        with pytest.raises(ValidationError):
            encode_block(Block("abc", "block_a_1.bloq.json", True))

    def test_wrong_types(self):
        with pytest.raises(FormatError):
            decode_block(json.dumps({'data': 5, 'next': "", 'eof': True}))
        with pytest.raises(FormatError):
            decode_block(json.dumps({'data': "a", 'next': "", 'eof': "yes"}))

    def test_not_json(self):
        with pytest.raises(FormatError):
            decode_block("<block>abc</block>")

    def test_not_an_object(self):
        with pytest.raises(FormatError):
            decode_block('["abc", "", true]')


class TestEntryCodec:
    def test_round_trip(self, entry):
        assert decode_entry(encode_entry(entry)) == entry

    def test_trashed_round_trip(self, entry):
        entry.in_trash = True
        entry.deleted_at = MODIFIED
        assert decode_entry(encode_entry(entry)) == entry

    def test_encoded_keys(self, entry):
        obj = json.loads(encode_entry(entry))
        assert obj == {
            'name': "note",
            'head_block': "block_note_0.bloq.json",
            'in_trash': False,
            'size_chars': 45,
            'created_at': "2026-03-14T09:26:53.589793",
            'modified_at': "2026-03-15T10:00:00.000000",
            'deleted_at': None,
        }

    def test_deleted_at_is_optional(self, entry):
        obj = json.loads(encode_entry(entry))
        del obj['deleted_at']
        assert decode_entry(json.dumps(obj)).deleted_at is None

    @pytest.mark.parametrize("missing", ['name', 'head_block', 'in_trash', 'size_chars',
                                         'created_at', 'modified_at'])
    def test_missing_required_field(self, entry, missing):
        obj = json.loads(encode_entry(entry))
        del obj[missing]
        with pytest.raises(FormatError) as exc:
            decode_entry(json.dumps(obj), "note_FAT.json")
        assert exc.value.record_name == "note_FAT.json"

    def test_bad_timestamp(self, entry):
        obj = json.loads(encode_entry(entry))
        obj['modified_at'] = "2026-03-15T10:00:00Z"
        with pytest.raises(FormatError):
            decode_entry(json.dumps(obj))

    def test_trash_flag_without_deletion_time(self, entry):
        obj = json.loads(encode_entry(entry))
        obj['in_trash'] = True
        with pytest.raises(FormatError):
            decode_entry(json.dumps(obj))

    def test_deletion_time_on_active_entry(self, entry):
        obj = json.loads(encode_entry(entry))
        obj['deleted_at'] = "2026-03-16T00:00:00.000000"
        with pytest.raises(FormatError):
            decode_entry(json.dumps(obj))

    def test_head_without_size(self, entry):
        obj = json.loads(encode_entry(entry))
        obj['size_chars'] = 0
        with pytest.raises(FormatError):
            decode_entry(json.dumps(obj))

    def test_size_must_be_integer(self, entry):
        obj = json.loads(encode_entry(entry))
        obj['size_chars'] = True
        with pytest.raises(FormatError):
            decode_entry(json.dumps(obj))


class TestLegacyFormat:
    def test_block_keys(self):
        text = encode_block(Block("hola", "", True), record_format=RECORD_FORMAT_LEGACY)
        assert json.loads(text) == {'Datos': "hola", 'SiguienteArchivo': "", 'EOF': True}
        assert decode_block(text, record_format=RECORD_FORMAT_LEGACY) == Block("hola", "", True)

    def test_native_block_not_legacy(self):
        text = encode_block(Block("hola", "", True))
        with pytest.raises(FormatError) as exc:
            decode_block(text, "bloque_a_0.bloq.json", record_format=RECORD_FORMAT_LEGACY)
        assert "Datos" in str(exc.value)

    def test_entry_written_by_console_program(self):
        text = json.dumps({
            'Nombre': "nota",
            'RutaArchivoDatosInicial': "bloque_nota_0.bloq.json",
            'EnPapelera': True,
            'TamanoCaracteres': 45,
            'FechaCreacion': "2026-03-14T09:26:53.5897931+01:00",
            'FechaModificacion': "2026-03-15T10:00:00",
            'FechaEliminacion': "2026-03-16T08:30:00.25",
        }, indent=2)
        entry = decode_entry(text, "nota_FAT.json", RECORD_FORMAT_LEGACY)
        assert entry.name == "nota"
        assert entry.head_block_ref == "bloque_nota_0.bloq.json"
        assert entry.in_trash is True
        assert entry.size_chars == 45
        assert entry.created_at == CREATED
        assert entry.modified_at == MODIFIED
        assert entry.deleted_at == datetime.datetime(2026, 3, 16, 8, 30, 0, 250000)

    def test_entry_round_trip(self, entry):
        text = encode_entry(entry, RECORD_FORMAT_LEGACY)
        assert set(json.loads(text)) == {
            'Nombre', 'RutaArchivoDatosInicial', 'EnPapelera', 'TamanoCaracteres',
            'FechaCreacion', 'FechaModificacion', 'FechaEliminacion',
        }
        assert decode_entry(text, record_format=RECORD_FORMAT_LEGACY) == entry

    @pytest.mark.parametrize("value", [
        "2026-03-14 09:26:53",
        "14/03/2026",
        "2026-03-14T09:26:53.12345678",
        "2026-13-14T09:26:53",
    ])
    def test_bad_timestamps(self, value):
        with pytest.raises(FormatError):
            decode_legacy_timestamp(value, "nota_FAT.json", "FechaCreacion")

    def test_unknown_format(self):
        with pytest.raises(ValidationError):
            encode_block(Block("x", "", True), record_format="xml")
