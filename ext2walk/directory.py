from __future__ import annotations

import logging
from typing import Iterator

from .disk import Context
from .error import CorruptDirectory
from .inode import DirEntry
from .parser import DirEntryHeaderInfo

logger = logging.getLogger(__name__)

DIR_ENTRY_HEADER_SIZE = DirEntryHeaderInfo.__size__


def parse_directory_block(parent: int, block: int, data: bytes) -> Iterator[DirEntry]:
    """Yield the live entries of one directory block.

    Entries with inode 0 are consumed but not yielded. Raises CorruptDirectory
    once the record lengths stop partitioning the block; entries before that
    point have already been yielded.
    """
    block_size = len(data)
    offset = 0

    while offset < block_size:
        if offset + DIR_ENTRY_HEADER_SIZE > block_size:
            raise CorruptDirectory(block, offset, "record header crosses the block end")

        header = DirEntryHeaderInfo(data[offset : offset + DIR_ENTRY_HEADER_SIZE])

        if header.rec_len < DIR_ENTRY_HEADER_SIZE:
            raise CorruptDirectory(block, offset, f"record length {header.rec_len} too small")
        if offset + header.rec_len > block_size:
            raise CorruptDirectory(
                block, offset, f"record length {header.rec_len} runs past the block end"
            )

        if header.inode != 0:
            if DIR_ENTRY_HEADER_SIZE + header.name_len > header.rec_len:
                raise CorruptDirectory(
                    block, offset, f"name length {header.name_len} exceeds the record"
                )

            name_start = offset + DIR_ENTRY_HEADER_SIZE
            name = data[name_start : name_start + header.name_len]

            yield DirEntry(
                parent=parent,
                offset=offset,
                index=header.inode,
                rec_len=header.rec_len,
                name_len=header.name_len,
                name=name.decode("utf-8", errors="surrogateescape"),
            )

        offset += header.rec_len


def scan_directory_block(ctx: Context, parent: int, block: int) -> Iterator[DirEntry]:
    logger.debug("inode %d: scanning directory block %d", parent, block)
    yield from parse_directory_block(parent, block, ctx.reader.read_block(block))
