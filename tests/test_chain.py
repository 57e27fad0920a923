import json

import pytest
from unittest.mock import patch

from fat_backend.chain import ChainAllocator
from fat_backend.codec import decode_block, encode_block
from fat_backend.config import FATConfig
from fat_backend.errors import BrokenChainError, FormatError
from fat_backend.models import Block
from fat_backend.record_store import DirectoryRecordStore, MemoryRecordStore


class OrderCheckingStore(MemoryRecordStore):
    """Memory store that fails if a block is written before its successor exists"""

    def __init__(self):
        super().__init__()
        self.write_order = []

    def write(self, name, text):
        if name.endswith('.bloq.json'):
            block = decode_block(text, name)
            if block.next_ref:
                assert self.exists(block.next_ref), f"{name} written before {block.next_ref}"
        self.write_order.append(name)
        super().write(name, text)


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def chains(store):
    return ChainAllocator(store)


def blocks_of(store):
    return {name: decode_block(text, name) for name, text in store.records.items()}


class TestWriteChain:
    def test_empty_content_writes_nothing(self, chains, store):
        assert chains.write_chain("", "empty") == ""
        assert store.records == {}

    def test_single_block(self, chains, store):
        head = chains.write_chain("short", "a")
        assert head == "block_a_0.bloq.json"
        assert blocks_of(store) == {head: Block("short", "", True)}

    def test_exactly_one_block_at_limit(self, chains, store):
        chains.write_chain("x" * 20, "a")
        assert list(store.records) == ["block_a_0.bloq.json"]

    def test_forty_five_chars_make_three_blocks(self, chains, store):
        content = "".join(chr(ord('a') + i % 26) for i in range(45))
        head = chains.write_chain(content, "note")

        blocks = blocks_of(store)
        assert len(blocks) == 3
        first = blocks[head]
        second = blocks[first.next_ref]
        third = blocks[second.next_ref]
        assert [len(b.payload) for b in (first, second, third)] == [20, 20, 5]
        assert first.payload == content[:20]
        assert second.payload == content[20:40]
        assert third.payload == content[40:]

    @pytest.mark.parametrize("length", [1, 19, 20, 21, 39, 40, 41, 100, 257])
    def test_block_count_and_size_bound(self, chains, store, length):
        chains.write_chain("z" * length, "f")
        blocks = blocks_of(store)
        assert len(blocks) == chains.block_count(length) == -(-length // 20)
        assert all(len(b.payload) <= 20 for b in blocks.values())

    @pytest.mark.parametrize("length", [1, 20, 21, 60, 99])
    def test_single_terminal_block(self, chains, store, length):
        chains.write_chain("q" * length, "f")
        terminal = [b for b in blocks_of(store).values() if b.is_last]
        assert len(terminal) == 1
        assert terminal[0].next_ref == ""
        # Every other block links forward
        assert all(b.next_ref for b in blocks_of(store).values() if not b.is_last)

    def test_record_names_follow_index(self, chains, store):
        chains.write_chain("y" * 50, "report")
        assert sorted(store.records) == [
            "block_report_0.bloq.json",
            "block_report_1.bloq.json",
            "block_report_2.bloq.json",
        ]

    def test_tail_written_first(self):
        store = OrderCheckingStore()
        chains = ChainAllocator(store)
        chains.write_chain("w" * 70, "ordered")
        assert store.write_order == [
            "block_ordered_3.bloq.json",
            "block_ordered_2.bloq.json",
            "block_ordered_1.bloq.json",
            "block_ordered_0.bloq.json",
        ]

    def test_interrupted_write_leaves_no_dangling_link(self):
        store = OrderCheckingStore()
        chains = ChainAllocator(store)
        original_write = store.write
        calls = []

        def failing_write(name, text):
            calls.append(name)
            if len(calls) == 3:
                raise OSError("disk full")
            original_write(name, text)

        with patch.object(store, 'write', side_effect=failing_write):
            with pytest.raises(OSError):
                chains.write_chain("v" * 100, "crash")

        # Whatever made it to the store only points at records that exist
        for name, block in blocks_of(store).items():
            assert not block.next_ref or store.exists(block.next_ref)

    def test_overwriting_existing_record_is_logged(self, chains, store):
        store.write("block_a_0.bloq.json", encode_block(Block("old", "", True)))
        with patch('fat_backend.chain.logger') as mock_logger:
            chains.write_chain("new", "a")
        mock_logger.warning.assert_called_once()
        assert decode_block(store.read("block_a_0.bloq.json")).payload == "new"

    def test_custom_block_size(self, store):
        chains = ChainAllocator(store, FATConfig(block_size=4))
        chains.write_chain("abcdefghij", "s")
        assert len(store.records) == 3
        assert chains.read_chain("block_s_0.bloq.json") == "abcdefghij"


class TestReadChain:
    @pytest.mark.parametrize("content", [
        "a",
        "exactly twenty chars",
        "line one\nline two\r\nline three\twith tab",
        "ünïcödé ✓ " * 7,
        "x" * 1000,
    ])
    def test_round_trip(self, chains, content):
        head = chains.write_chain(content, "rt")
        assert chains.read_chain(head) == content

    def test_empty_head(self, chains):
        assert chains.read_chain("") == ""

    def test_missing_middle_block(self, chains, store):
        head = chains.write_chain("m" * 45, "note")
        store.delete("block_note_1.bloq.json")

        with pytest.raises(BrokenChainError) as exc:
            chains.read_chain(head)
        assert exc.value.missing_ref == "block_note_1.bloq.json"
        assert exc.value.last_good_ref == "block_note_0.bloq.json"
        assert "block_note_1.bloq.json" in str(exc.value)

    def test_missing_head(self, chains):
        with pytest.raises(BrokenChainError) as exc:
            chains.read_chain("block_gone_0.bloq.json")
        assert exc.value.missing_ref == "block_gone_0.bloq.json"
        assert exc.value.last_good_ref == ""

    def test_cycle_hits_hop_limit(self, store):
        chains = ChainAllocator(store, FATConfig(max_chain_hops=10))
        store.write("block_c_0.bloq.json", encode_block(Block("a", "block_c_1.bloq.json", False)))
        store.write("block_c_1.bloq.json", encode_block(Block("b", "block_c_0.bloq.json", False)))

        with pytest.raises(BrokenChainError) as exc:
            chains.read_chain("block_c_0.bloq.json")
        assert "10" in str(exc.value)

    def test_corrupt_block(self, chains, store):
        head = chains.write_chain("k" * 30, "bad")
        store.write("block_bad_1.bloq.json", "not json")
        with pytest.raises(FormatError) as exc:
            chains.read_chain(head)
        assert exc.value.record_name == "block_bad_1.bloq.json"

    def test_unterminated_block_ends_walk(self, chains, store):
        store.write("block_u_0.bloq.json", json.dumps({'data': "abc", 'next': "", 'eof': False}))
        with patch('fat_backend.chain.logger') as mock_logger:
            assert chains.read_chain("block_u_0.bloq.json") == "abc"
        mock_logger.warning.assert_called_once()

    def test_head_naming_entry_record(self, chains, store):
        store.write("other_FAT.json", "{}")
        with pytest.raises(FormatError) as exc:
            chains.read_chain("other_FAT.json")
        assert exc.value.record_name == "other_FAT.json"

    def test_chain_refs(self, chains):
        head = chains.write_chain("r" * 41, "refs")
        assert chains.chain_refs(head) == [
            "block_refs_0.bloq.json",
            "block_refs_1.bloq.json",
            "block_refs_2.bloq.json",
        ]

    def test_directory_store_round_trip(self, tmp_path):
        chains = ChainAllocator(DirectoryRecordStore(str(tmp_path)))
        head = chains.write_chain("persisted on disk, " * 4, "disk")
        assert chains.read_chain(head) == "persisted on disk, " * 4
        assert len(list(tmp_path.glob("*.bloq.json"))) == 4


class TestFreeChain:
    def test_frees_every_block(self, chains, store):
        head = chains.write_chain("f" * 61, "gone")
        freed = chains.free_chain(head)
        assert len(freed) == 4
        assert freed[0] == head
        assert store.records == {}

    def test_empty_ref_is_noop(self, chains, store):
        store.write("other_FAT.json", "{}")
        assert chains.free_chain("") == []
        assert list(store.records) == ["other_FAT.json"]

    def test_missing_block_is_not_fatal(self, chains, store):
        head = chains.write_chain("p" * 80, "partial")
        store.delete("block_partial_2.bloq.json")

        with patch('fat_backend.chain.logger') as mock_logger:
            freed = chains.free_chain(head)

        assert freed == ["block_partial_0.bloq.json", "block_partial_1.bloq.json"]
        mock_logger.warning.assert_called_once()
        # Unreachable tail is left behind
        assert list(store.records) == ["block_partial_3.bloq.json"]

    def test_undecodable_block_kept(self, chains, store):
        head = chains.write_chain("d" * 50, "junk")
        store.write("block_junk_1.bloq.json", "{broken")

        with pytest.raises(FormatError) as exc:
            chains.free_chain(head)
        assert exc.value.record_name == "block_junk_1.bloq.json"
        # Nothing is deleted when the chain cannot be trusted
        assert sorted(store.records) == [
            "block_junk_0.bloq.json",
            "block_junk_1.bloq.json",
            "block_junk_2.bloq.json",
        ]

    def test_oversized_block_kept(self, chains, store):
        head = chains.write_chain("o" * 30, "big")
        store.write("block_big_1.bloq.json", json.dumps({'data': "x" * 25, 'next': "", 'eof': True}))

        with pytest.raises(FormatError):
            chains.free_chain(head)
        assert store.exists("block_big_0.bloq.json")
        assert store.exists("block_big_1.bloq.json")

    def test_refuses_entry_record(self, chains, store):
        store.write("victim_FAT.json", '{"name": "victim"}')
        with pytest.raises(FormatError) as exc:
            chains.free_chain("victim_FAT.json")
        assert exc.value.record_name == "victim_FAT.json"
        assert store.exists("victim_FAT.json")

    def test_refuses_entry_record_mid_chain(self, chains, store):
        store.write("victim_FAT.json", '{"name": "victim"}')
        store.write("block_a_0.bloq.json", encode_block(Block("a", "victim_FAT.json", False)))

        with pytest.raises(FormatError):
            chains.free_chain("block_a_0.bloq.json")
        assert store.exists("block_a_0.bloq.json")
        assert store.exists("victim_FAT.json")

    @pytest.mark.parametrize("ref", ["notes.txt", "block_a_0.json", "a_0.bloq.json"])
    def test_refuses_foreign_names(self, chains, store, ref):
        store.write(ref, encode_block(Block("x", "", True)))
        with pytest.raises(FormatError):
            chains.free_chain(ref)
        assert store.exists(ref)

    def test_cycle_terminates(self, store):
        chains = ChainAllocator(store)
        store.write("block_c_0.bloq.json", encode_block(Block("a", "block_c_1.bloq.json", False)))
        store.write("block_c_1.bloq.json", encode_block(Block("b", "block_c_0.bloq.json", False)))
        assert chains.free_chain("block_c_0.bloq.json") == ["block_c_0.bloq.json", "block_c_1.bloq.json"]
        assert store.records == {}

    def test_leaves_other_chains_alone(self, chains, store):
        keep = chains.write_chain("k" * 30, "keep")
        drop = chains.write_chain("d" * 30, "drop")
        chains.free_chain(drop)
        assert chains.read_chain(keep) == "k" * 30


class TestLegacyFormat:
    @pytest.fixture
    def chains(self, store):
        return ChainAllocator(store, FATConfig.legacy())

    def test_record_names_and_keys(self, chains, store):
        head = chains.write_chain("a" * 25, "nota")
        assert head == "bloque_nota_0.bloq.json"
        assert json.loads(store.read(head)) == {
            'Datos': "a" * 20, 'SiguienteArchivo': "bloque_nota_1.bloq.json", 'EOF': False
        }
        assert json.loads(store.read("bloque_nota_1.bloq.json")) == {
            'Datos': "aaaaa", 'SiguienteArchivo': "", 'EOF': True
        }

    def test_reads_console_program_chain(self, chains, store):
        store.write("bloque_hola_0.bloq.json",
                    '{\n  "Datos": "Hola mundo, esto es ",\n  "SiguienteArchivo": "bloque_hola_1.bloq.json",\n'
                    '  "EOF": false\n}')
        store.write("bloque_hola_1.bloq.json",
                    '{\n  "Datos": "una prueba",\n  "SiguienteArchivo": "",\n  "EOF": true\n}')
        assert chains.read_chain("bloque_hola_0.bloq.json") == "Hola mundo, esto es una prueba"
        assert chains.free_chain("bloque_hola_0.bloq.json") == [
            "bloque_hola_0.bloq.json", "bloque_hola_1.bloq.json"
        ]

    def test_native_block_names_rejected(self, chains, store):
        store.write("block_x_0.bloq.json", encode_block(Block("x", "", True)))
        with pytest.raises(FormatError):
            chains.read_chain("block_x_0.bloq.json")
