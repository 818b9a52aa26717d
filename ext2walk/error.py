"""
Defines exceptions raised while walking an ext2 image.
"""


class Ext2WalkError(Exception):
    """Base class for every error raised by ext2walk."""


class InvalidImage(Ext2WalkError):
    """Thrown when the superblock does not describe an ext2 filesystem."""


class CorruptDirectory(Ext2WalkError):
    """Thrown when the record lengths of a directory block do not partition the
    block exactly."""

    def __init__(self, block: int, offset: int, reason: str):
        super().__init__(f"corrupt directory block {block} at offset {offset}: {reason}")
        self.block = block
        self.offset = offset
        self.reason = reason


class IoFailure(Ext2WalkError):
    """Thrown when the image cannot supply the bytes a structure needs."""

    def __init__(self, offset: int, size: int, reason: str):
        super().__init__(f"cannot read {size} bytes at offset {offset}: {reason}")
        self.offset = offset
        self.size = size
        self.reason = reason
