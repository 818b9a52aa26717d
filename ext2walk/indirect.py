from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .disk import Context
from .inode import EXT2_NDIR_BLOCKS, Inode
from .parser import PointerBlockInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndirectReference:
    owner: int
    level: int
    logical_offset: int
    indirect_block: int
    referenced_block: int


def first_logical_block(level: int, pointers_per_block: int) -> int:
    """Logical block number of the first block reachable from i_block[11 + level]."""
    offset = EXT2_NDIR_BLOCKS
    for lower in range(1, level):
        offset += pointers_per_block**lower
    return offset


def read_pointers(ctx: Context, block: int) -> tuple[int, ...]:
    return PointerBlockInfo(ctx.reader.read_block(block)).pointers


def resolve(
    ctx: Context, owner: int, block: int, level: int, logical_base: int
) -> Iterator[IndirectReference]:
    """Walk the pointer tree rooted at ``block`` depth first.

    ``block`` is an indirect block of the given level: its pointers reference
    level - 1 indirect blocks, or data blocks when level is 1. Every non-zero
    pointer yields one reference; a zero pointer is a hole and its subtree is
    never read.
    """
    pointers_per_block = ctx.superblock.pointers_per_block
    span = pointers_per_block ** (level - 1)

    for index, pointer in enumerate(read_pointers(ctx, block)):
        if pointer == 0:
            continue

        logical_offset = logical_base + index * span
        yield IndirectReference(owner, level, logical_offset, block, pointer)

        if level > 1:
            yield from resolve(ctx, owner, pointer, level - 1, logical_offset)


def resolve_inode(ctx: Context, inode: Inode) -> Iterator[IndirectReference]:
    pointers_per_block = ctx.superblock.pointers_per_block

    roots = (inode.single_indirect, inode.double_indirect, inode.triple_indirect)
    for level, root in enumerate(roots, start=1):
        if root == 0:
            continue

        logger.debug("inode %d: level %d indirect block %d", inode.number, level, root)
        yield from resolve(
            ctx, inode.number, root, level, first_logical_block(level, pointers_per_block)
        )
