import struct


class _Parser:
    def __init__(self, buffer: bytes, size: int):
        assert size == len(buffer), f"expected buffer of size {size}, was {len(buffer)}"
        self.buffer = buffer
        self.offset = 0

    def _read(self, format_string: str, size: int) -> tuple:
        data = struct.unpack("<" + format_string, self.buffer[self.offset : self.offset + size])
        self.offset += size
        return data

    def _skip(self, size: int) -> None:
        self.offset += size

    def read_u32(self) -> int:
        data = self._read("I", 4)  # type: tuple[int, ...]
        assert isinstance(data, tuple) and len(data) == 1
        return data[0]

    def read_u32s(self, *, count: int = 1) -> tuple[int, ...]:
        return self._read(f"{count}I", 4 * count)

    def read_u16(self) -> int:
        data = self._read("H", 2)  # type: tuple[int, ...]
        assert isinstance(data, tuple) and len(data) == 1
        return data[0]

    def read_u8(self) -> int:
        data = self._read("B", 1)  # type: tuple[int, ...]
        assert isinstance(data, tuple) and len(data) == 1
        return data[0]


class SuperBlockInfo(_Parser):
    __size__ = 1024

    def __init__(self, buffer: bytes):
        super().__init__(buffer, SuperBlockInfo.__size__)

        self.s_inodes_count = self.read_u32()
        self.s_blocks_count = self.read_u32()
        self._skip(12)  # reserved, free blocks, free inodes
        self.s_first_data_block = self.read_u32()
        self.s_log_block_size = self.read_u32()
        self._skip(4)  # log_frag_size
        self.s_blocks_per_group = self.read_u32()
        self._skip(4)  # frags_per_group
        self.s_inodes_per_group = self.read_u32()
        self._skip(12)  # mtime, wtime, mount counts
        self.s_magic = self.read_u16()
        self._skip(18)  # state, errors, minor rev, lastcheck, checkinterval, creator os
        self.s_rev_level = self.read_u32()
        self._skip(4)  # default reserved uid/gid

        # EXT2_DYNAMIC_REV Specific
        self.s_first_ino = self.read_u32()
        self.s_inode_size = self.read_u16()


class BlockGroupDescriptionInfo(_Parser):
    __size__ = 32

    def __init__(self, data: bytes):
        super().__init__(data, BlockGroupDescriptionInfo.__size__)

        self.bg_block_bitmap = self.read_u32()
        self.bg_inode_bitmap = self.read_u32()
        self.bg_inode_table = self.read_u32()
        self.bg_free_blocks_count = self.read_u16()
        self.bg_free_inodes_count = self.read_u16()


class InodeInfo(_Parser):
    __size__ = 128

    def __init__(self, data: bytes):
        super().__init__(data, InodeInfo.__size__)

        self.i_mode = self.read_u16()
        self.i_uid = self.read_u16()
        self.i_size = self.read_u32()
        self.i_atime = self.read_u32()
        self.i_ctime = self.read_u32()
        self.i_mtime = self.read_u32()
        self._skip(4)  # dtime
        self.i_gid = self.read_u16()
        self.i_links_count = self.read_u16()
        self.i_blocks = self.read_u32()
        self._skip(8)  # flags, osd1
        self.i_block = self.read_u32s(count=15)


class DirEntryHeaderInfo(_Parser):
    __size__ = 8

    def __init__(self, data: bytes):
        super().__init__(data, DirEntryHeaderInfo.__size__)

        self.inode = self.read_u32()
        self.rec_len = self.read_u16()
        self.name_len = self.read_u8()


class PointerBlockInfo(_Parser):
    """A block holding nothing but 32-bit block numbers (an indirect block)."""

    def __init__(self, data: bytes):
        super().__init__(data, len(data))

        self.pointers = self.read_u32s(count=len(data) // 4)
