from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

from .device import ImageReader
from .directory import scan_directory_block
from .disk import Context, load_block_bitmap, load_context, load_inode_bitmap
from .error import CorruptDirectory, Ext2WalkError
from .indirect import resolve_inode
from .inode import read_inode
from .records import (
    DirEntryRecord,
    FreeBlockRecord,
    FreeInodeRecord,
    GroupRecord,
    IndirectRecord,
    InodeRecord,
    Record,
    SuperblockRecord,
)

logger = logging.getLogger(__name__)


def walk_groups(ctx: Context) -> Iterator[Record]:
    sb = ctx.superblock
    for group in ctx.groups:
        yield GroupRecord(group, sb.blocks_in_group(group.number), sb.inodes_in_group(group.number))


def walk_free_blocks(ctx: Context) -> Iterator[Record]:
    for group in ctx.groups:
        bitmap = load_block_bitmap(ctx, group)
        first_block = ctx.first_block_of_group(group.number)
        for index in bitmap.free_indices(ctx.superblock.blocks_in_group(group.number)):
            yield FreeBlockRecord(first_block + index)


def walk_free_inodes(ctx: Context) -> Iterator[Record]:
    for group in ctx.groups:
        bitmap = load_inode_bitmap(ctx, group)
        first_inode = ctx.first_inode_of_group(group.number)
        for index in bitmap.free_indices(ctx.superblock.inodes_in_group(group.number)):
            yield FreeInodeRecord(first_inode + index)


def _scan_directory(ctx: Context, parent: int, block: int) -> Iterator[Record]:
    try:
        for entry in scan_directory_block(ctx, parent, block):
            yield DirEntryRecord(entry)
    except CorruptDirectory as e:
        logger.warning("inode %d: %s, skipping rest of block", parent, e)


def walk_inode(ctx: Context, inode_number: int) -> Iterator[Record]:
    inode = read_inode(ctx, inode_number)

    if not inode.is_used:
        logger.warning("inode %d is marked used but has no file type", inode_number)
        return

    yield InodeRecord(inode)

    if not inode.has_block_pointers:
        return

    if inode.is_dir:
        for block in inode.direct_blocks:
            if block != 0:
                yield from _scan_directory(ctx, inode_number, block)

    for reference in resolve_inode(ctx, inode):
        yield IndirectRecord(reference)

        if inode.is_dir and reference.level == 1:
            yield from _scan_directory(ctx, inode_number, reference.referenced_block)


def walk_inodes(ctx: Context) -> Iterator[Record]:
    for group in ctx.groups:
        bitmap = load_inode_bitmap(ctx, group)
        first_inode = ctx.first_inode_of_group(group.number)
        for index in bitmap.used_indices(ctx.superblock.inodes_in_group(group.number)):
            inode_number = first_inode + index
            try:
                yield from walk_inode(ctx, inode_number)
            except Ext2WalkError as e:
                logger.error("inode %d: %s", inode_number, e)


def walk(ctx: Context) -> Iterator[Record]:
    yield SuperblockRecord(ctx.superblock)
    yield from walk_groups(ctx)
    yield from walk_free_blocks(ctx)
    yield from walk_free_inodes(ctx)
    yield from walk_inodes(ctx)


def scan_image(image: BinaryIO) -> Iterator[Record]:
    """Decode the structural tables of ``image`` and enumerate every record.

    InvalidImage and IoFailure on the superblock, descriptors or bitmaps
    propagate; failures inside a single inode are logged and skipped.
    """
    ctx = load_context(ImageReader(image))
    yield from walk(ctx)
