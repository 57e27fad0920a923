#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Chain Allocator

Splits file content into fixed-size blocks, persists them as a forward-linked
chain of records, and walks, reassembles or frees existing chains.

Write order matters: blocks are written last-to-first, so every forward
reference that reaches the store already names an existing record. This is
the only crash-safety property the scheme has; an interrupted write leaves
unreferenced tail blocks behind, never a dangling link.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from .codec import decode_block, encode_block
from .config import FATConfig
from .errors import BrokenChainError, FormatError, NotFoundError
from .models import Block
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class ChainAllocator:
    """Writes, reads and frees block chains in a record store"""

    def __init__(self, store: RecordStore, config: Optional[FATConfig] = None):
        self.store = store
        self.config = config or FATConfig()

    def block_count(self, length: int) -> int:
        """Number of blocks needed for `length` characters"""
        size = self.config.block_size
        return (length + size - 1) // size

    def split(self, content: str) -> List[str]:
        """Cut content into consecutive fragments of at most block_size characters"""
        size = self.config.block_size
        return [content[i:i + size] for i in range(0, len(content), size)]

    def write_chain(self, content: str, base_name: str) -> str:
        """Persist content as a new chain and return the head record name ("" if empty)"""
        fragments = self.split(content)
        if not fragments:
            logger.debug(f"Empty content for '{base_name}', no blocks written")
            return ""

        names = [self.config.block_record_name(base_name, i) for i in range(len(fragments))]

        # Tail first: block i is written only after block i+1 exists
        next_ref = ""
        for i in range(len(fragments) - 1, -1, -1):
            block = Block(payload=fragments[i], next_ref=next_ref, is_last=(i == len(fragments) - 1))
            text = encode_block(block, self.config.block_size, self.config.record_format)
            if self.store.exists(names[i]):
                logger.warning(f"Overwriting existing block record {names[i]}")
            self.store.write(names[i], text)
            next_ref = names[i]

        logger.debug(f"Wrote {len(fragments)} block(s) for '{base_name}' starting at {names[0]}")
        return names[0]

    def walk(self, head_ref: str) -> Iterator[Tuple[str, Block]]:
        """
        Yield (record name, block) pairs from head to terminus.

        Raises BrokenChainError for a missing record or when the hop limit is
        exceeded, and FormatError for an undecodable record or a reference
        that does not name a block record.
        """
        current = head_ref
        previous = ""
        hops = 0

        while current:
            hops += 1
            if hops > self.config.max_chain_hops:
                raise BrokenChainError(
                    current, previous,
                    f"Chain starting at '{head_ref}' exceeds {self.config.max_chain_hops} blocks "
                    f"(possible cycle at '{current}')"
                )
            if not self.config.is_block_record(current):
                raise FormatError(current, "not a block record")

            try:
                text = self.store.read(current)
            except NotFoundError:
                raise BrokenChainError(current, previous)

            block = decode_block(text, current, self.config.block_size, self.config.record_format)
            yield current, block

            if block.is_last:
                return
            if not block.next_ref:
                logger.warning(f"Block {current} has no successor but is not marked as end of chain")
                return

            previous, current = current, block.next_ref

    def read_chain(self, head_ref: str) -> str:
        """Reassemble the content stored in the chain starting at head_ref"""
        parts = [block.payload for _, block in self.walk(head_ref)]
        return "".join(parts)

    def chain_refs(self, head_ref: str) -> List[str]:
        """Record names of every block in the chain, in order"""
        return [name for name, _ in self.walk(head_ref)]

    def free_chain(self, head_ref: str) -> List[str]:
        """
        Delete every block of a chain, best effort for missing blocks only.

        The chain is walked completely before anything is deleted. A missing
        block ends the walk with a warning, since nothing beyond it can be
        located, and the blocks found up to that point are freed. A reference
        that is not a block record name, or a record that does not decode as
        a block, raises FormatError and nothing is deleted.

        Returns:
            The record names that were deleted, in chain order.
        """
        refs = []
        seen = set()
        current = head_ref

        while current:
            if current in seen:
                logger.error(f"Chain {head_ref} loops back to {current}, freeing the blocks before it")
                break
            if len(refs) >= self.config.max_chain_hops:
                logger.error(f"Stopped freeing chain at '{current}': hop limit {self.config.max_chain_hops} reached")
                break
            if not self.config.is_block_record(current):
                raise FormatError(current, f"not a block record (referenced from chain {head_ref})")

            try:
                text = self.store.read(current)
            except NotFoundError:
                logger.warning(f"Block {current} not found while freeing chain {head_ref}, skipping rest")
                break

            block = decode_block(text, current, self.config.block_size, self.config.record_format)
            refs.append(current)
            seen.add(current)

            if block.is_last:
                break
            current = block.next_ref

        for ref in refs:
            self.store.delete(ref)

        if refs:
            logger.debug(f"Freed {len(refs)} block(s) starting at {head_ref}")
        return refs
