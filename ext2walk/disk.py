from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator

from bitarray import bitarray

from .device import ImageReader
from .error import InvalidImage
from .parser import SuperBlockInfo, BlockGroupDescriptionInfo

logger = logging.getLogger(__name__)

EXT2_SUPER_MAGIC = 0xEF53
EXT2_MIN_BLOCK_SIZE = 1024
EXT2_MAX_BLOCK_LOG_SIZE = 6  # 64 KiB
SUPERBLOCK_OFFSET = 1024


class SuperBlock:
    EXT2_GOOD_OLD_FIRST_INO = 11
    EXT2_GOOD_OLD_INODE_SIZE = 128
    EXT2_GOOD_OLD_REV = 0

    def __init__(self, data: bytes):
        info = SuperBlockInfo(data)

        if info.s_magic != EXT2_SUPER_MAGIC:
            raise InvalidImage(f"bad superblock magic {info.s_magic:#06x}")

        if info.s_log_block_size > EXT2_MAX_BLOCK_LOG_SIZE:
            raise InvalidImage(f"unsupported log block size {info.s_log_block_size}")

        if info.s_blocks_per_group == 0 or info.s_inodes_per_group == 0:
            raise InvalidImage("superblock declares empty block groups")

        self.magic = info.s_magic
        self.blocks_count = info.s_blocks_count
        self.inodes_count = info.s_inodes_count
        self.blocks_per_group = info.s_blocks_per_group
        self.inodes_per_group = info.s_inodes_per_group
        self.first_data_block = info.s_first_data_block

        self.log_block_size = info.s_log_block_size
        self.block_size = EXT2_MIN_BLOCK_SIZE << self.log_block_size

        if info.s_rev_level == SuperBlock.EXT2_GOOD_OLD_REV:
            self.inode_size = SuperBlock.EXT2_GOOD_OLD_INODE_SIZE
            self.first_inode = SuperBlock.EXT2_GOOD_OLD_FIRST_INO
        else:
            self.inode_size = info.s_inode_size
            self.first_inode = info.s_first_ino

        self.nb_block_groups = int(math.ceil(self.blocks_count / self.blocks_per_group))

    @property
    def pointers_per_block(self) -> int:
        return self.block_size // 4

    @property
    def group_table_block(self) -> int:
        """The descriptor table starts in the block after the superblock's."""
        return SUPERBLOCK_OFFSET // self.block_size + 1

    def blocks_in_group(self, group: int) -> int:
        return min(self.blocks_per_group, self.blocks_count - group * self.blocks_per_group)

    def inodes_in_group(self, group: int) -> int:
        return min(self.inodes_per_group, self.inodes_count - group * self.inodes_per_group)

    def __repr__(self) -> str:
        return (
            f"<SuperBlock(blocks={self.blocks_count}, inodes={self.inodes_count}, "
            f"block_size={self.block_size}, groups={self.nb_block_groups})>"
        )


class BlockGroupDescription:
    __size__ = BlockGroupDescriptionInfo.__size__

    def __init__(self, number: int, data: bytes):
        info = BlockGroupDescriptionInfo(data)
        self.number = number
        self.block_bitmap_id = info.bg_block_bitmap
        self.inode_bitmap_id = info.bg_inode_bitmap
        self.inode_table_id = info.bg_inode_table
        self.free_blocks_count = info.bg_free_blocks_count
        self.free_inodes_count = info.bg_free_inodes_count

    def __repr__(self) -> str:
        return (
            f"<BlockGroupDescription(number={self.number}, "
            f"block_bitmap={self.block_bitmap_id}, inode_bitmap={self.inode_bitmap_id}, "
            f"inode_table={self.inode_table_id})>"
        )


class BitmapView:
    """One bitmap block; bit k answers for the k-th entity of its group."""

    def __init__(self, data: bytes):
        self.data = bitarray(endian="little")
        self.data.frombytes(data)

    def is_used(self, index: int) -> bool:
        return bool(self.data[index])

    def free_indices(self, limit: int) -> Iterator[int]:
        for index in range(min(limit, len(self.data))):
            if not self.data[index]:
                yield index

    def used_indices(self, limit: int) -> Iterator[int]:
        for index in range(min(limit, len(self.data))):
            if self.data[index]:
                yield index

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class Context:
    """Everything the decoders need, passed explicitly instead of held globally."""

    reader: ImageReader
    superblock: SuperBlock
    groups: list[BlockGroupDescription] = field(default_factory=list)

    @property
    def block_size(self) -> int:
        return self.superblock.block_size

    def group_of_inode(self, inode_number: int) -> BlockGroupDescription:
        return self.groups[(inode_number - 1) // self.superblock.inodes_per_group]

    def first_block_of_group(self, group: int) -> int:
        return self.superblock.first_data_block + group * self.superblock.blocks_per_group

    def first_inode_of_group(self, group: int) -> int:
        return group * self.superblock.inodes_per_group + 1


def read_superblock(reader: ImageReader) -> SuperBlock:
    superblock = SuperBlock(reader.read(SUPERBLOCK_OFFSET, SuperBlockInfo.__size__))
    reader.block_size = superblock.block_size
    logger.debug("decoded %r", superblock)
    return superblock


def read_group_descriptors(
    reader: ImageReader, superblock: SuperBlock
) -> list[BlockGroupDescription]:
    table_offset = superblock.group_table_block * superblock.block_size
    size = BlockGroupDescription.__size__

    groups = []
    for number in range(superblock.nb_block_groups):
        group = BlockGroupDescription(number, reader.read(table_offset + number * size, size))
        logger.debug("decoded %r", group)
        groups.append(group)

    return groups


def load_context(reader: ImageReader) -> Context:
    superblock = read_superblock(reader)
    return Context(reader, superblock, read_group_descriptors(reader, superblock))


def load_block_bitmap(ctx: Context, group: BlockGroupDescription) -> BitmapView:
    return BitmapView(ctx.reader.read_block(group.block_bitmap_id))


def load_inode_bitmap(ctx: Context, group: BlockGroupDescription) -> BitmapView:
    return BitmapView(ctx.reader.read_block(group.inode_bitmap_id))
