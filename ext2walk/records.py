"""
Output records, one per line, comma separated.
"""
from __future__ import annotations

from dataclasses import dataclass
from time import gmtime, strftime
from typing import Union

from .disk import BlockGroupDescription, SuperBlock
from .indirect import IndirectReference
from .inode import DirEntry, Inode

TIME_FORMAT = "%m/%d/%y %H:%M:%S"


def format_time(timestamp: int) -> str:
    return strftime(TIME_FORMAT, gmtime(timestamp))


def _join(*fields: object) -> str:
    return ",".join(str(f) for f in fields)


@dataclass(frozen=True)
class SuperblockRecord:
    superblock: SuperBlock

    def to_csv(self) -> str:
        sb = self.superblock
        return _join(
            "SUPERBLOCK",
            sb.blocks_count,
            sb.inodes_count,
            sb.block_size,
            sb.inode_size,
            sb.blocks_per_group,
            sb.inodes_per_group,
            sb.first_inode,
        )


@dataclass(frozen=True)
class GroupRecord:
    group: BlockGroupDescription
    blocks_in_group: int
    inodes_in_group: int

    def to_csv(self) -> str:
        g = self.group
        return _join(
            "GROUP",
            g.number,
            self.blocks_in_group,
            self.inodes_in_group,
            g.free_blocks_count,
            g.free_inodes_count,
            g.block_bitmap_id,
            g.inode_bitmap_id,
            g.inode_table_id,
        )


@dataclass(frozen=True)
class FreeBlockRecord:
    block: int

    def to_csv(self) -> str:
        return _join("BFREE", self.block)


@dataclass(frozen=True)
class FreeInodeRecord:
    inode: int

    def to_csv(self) -> str:
        return _join("IFREE", self.inode)


@dataclass(frozen=True)
class InodeRecord:
    inode: Inode

    def __post_init__(self) -> None:
        if not self.inode.is_used:
            raise ValueError(f"inode {self.inode.number} has no file type")

    def to_csv(self) -> str:
        i = self.inode
        fields = [
            "INODE",
            i.number,
            i.kind.type_char,
            f"{i.permissions:o}",
            i.uid,
            i.gid,
            i.links_count,
            format_time(i.ctime),
            format_time(i.mtime),
            format_time(i.atime),
            i.size,
            i.blocks,
        ]
        if i.has_block_pointers:
            fields.extend(i.block)
        return _join(*fields)


@dataclass(frozen=True)
class DirEntryRecord:
    entry: DirEntry

    def to_csv(self) -> str:
        e = self.entry
        return _join("DIRENT", e.parent, e.offset, e.index, e.rec_len, e.name_len, f"'{e.name}'")


@dataclass(frozen=True)
class IndirectRecord:
    reference: IndirectReference

    def to_csv(self) -> str:
        r = self.reference
        return _join(
            "INDIRECT", r.owner, r.level, r.logical_offset, r.indirect_block, r.referenced_block
        )


Record = Union[
    SuperblockRecord,
    GroupRecord,
    FreeBlockRecord,
    FreeInodeRecord,
    InodeRecord,
    DirEntryRecord,
    IndirectRecord,
]
