from __future__ import annotations

from dataclasses import dataclass
import enum
import logging

from .disk import Context
from .parser import InodeInfo

logger = logging.getLogger(__name__)

EXT2_NDIR_BLOCKS = 12
EXT2_IND_BLOCK = EXT2_NDIR_BLOCKS
EXT2_DIND_BLOCK = EXT2_IND_BLOCK + 1
EXT2_TIND_BLOCK = EXT2_DIND_BLOCK + 1

# a symlink target up to this many bytes lives in i_block itself
EXT2_FAST_SYMLINK_MAX = 60


@dataclass(frozen=True)
class DirEntry:
    parent: int
    offset: int
    index: int
    rec_len: int
    name_len: int
    name: str


class InodeMode(enum.IntFlag):
    EXT2_S_IFMT = 0xF000
    EXT2_S_IFSOCK = 0xC000
    EXT2_S_IFLNK = 0xA000
    EXT2_S_IFREG = 0x8000
    EXT2_S_IFBLK = 0x6000
    EXT2_S_IFDIR = 0x4000
    EXT2_S_IFCHR = 0x2000
    EXT2_S_IFIFO = 0x1000
    EXT2_S_IPERM = 0x0FFF


class InodeKind(enum.Enum):
    REGULAR_FILE = "f"
    DIRECTORY = "d"
    SYMBOLIC_LINK = "s"
    UNUSED = ""
    OTHER = "?"

    @property
    def type_char(self) -> str:
        return self.value


def classify(mode: int) -> InodeKind:
    file_type = int(mode & InodeMode.EXT2_S_IFMT)

    if file_type == 0:
        return InodeKind.UNUSED
    if file_type == InodeMode.EXT2_S_IFREG:
        return InodeKind.REGULAR_FILE
    if file_type == InodeMode.EXT2_S_IFDIR:
        return InodeKind.DIRECTORY
    if file_type == InodeMode.EXT2_S_IFLNK:
        return InodeKind.SYMBOLIC_LINK
    return InodeKind.OTHER


class Inode:
    def __init__(self, number: int, data: bytes):
        info = InodeInfo(data)

        self.number = number
        self.mode = info.i_mode
        self.kind = classify(info.i_mode)

        self.uid = info.i_uid
        self.gid = info.i_gid
        self.links_count = info.i_links_count

        self.ctime = info.i_ctime
        self.mtime = info.i_mtime
        self.atime = info.i_atime

        self.size = info.i_size
        self.blocks = info.i_blocks
        self.block = info.i_block

    @property
    def permissions(self) -> int:
        return int(self.mode & InodeMode.EXT2_S_IPERM)

    @property
    def is_used(self) -> bool:
        return self.kind is not InodeKind.UNUSED

    @property
    def is_file(self) -> bool:
        return self.kind is InodeKind.REGULAR_FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is InodeKind.DIRECTORY

    @property
    def is_link(self) -> bool:
        return self.kind is InodeKind.SYMBOLIC_LINK

    @property
    def has_block_pointers(self) -> bool:
        """False when i_block holds something other than block numbers, e.g.
        the target of a fast symlink or a device number."""
        if self.is_file or self.is_dir:
            return True
        return self.is_link and self.size > EXT2_FAST_SYMLINK_MAX

    @property
    def direct_blocks(self) -> tuple[int, ...]:
        return self.block[:EXT2_NDIR_BLOCKS]

    @property
    def single_indirect(self) -> int:
        return self.block[EXT2_IND_BLOCK]

    @property
    def double_indirect(self) -> int:
        return self.block[EXT2_DIND_BLOCK]

    @property
    def triple_indirect(self) -> int:
        return self.block[EXT2_TIND_BLOCK]

    def __repr__(self) -> str:
        return f"<Inode(number={self.number}, kind={self.kind.name}, size={self.size})>"


def inode_offset(ctx: Context, inode_number: int) -> int:
    group = ctx.group_of_inode(inode_number)
    local_index = (inode_number - 1) % ctx.superblock.inodes_per_group
    return ctx.reader.block_offset(group.inode_table_id) + local_index * ctx.superblock.inode_size


def read_inode(ctx: Context, inode_number: int) -> Inode:
    offset = inode_offset(ctx, inode_number)
    inode = Inode(inode_number, ctx.reader.read(offset, InodeInfo.__size__))
    logger.debug("decoded %r at offset %d", inode, offset)
    return inode
