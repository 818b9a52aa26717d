from __future__ import annotations

import logging
from typing import BinaryIO

from .error import IoFailure

logger = logging.getLogger(__name__)


class ImageReader:
    """Random-access reads from an opened image file or block device.

    The reader never owns the file object; whoever opened it closes it.
    """

    def __init__(self, image: BinaryIO, block_size: int = 1024):
        self.image = image
        self.block_size = block_size

    def read(self, offset: int, size: int) -> bytes:
        try:
            self.image.seek(offset)
            data = self.image.read(size)
        except (OSError, ValueError) as e:
            raise IoFailure(offset, size, str(e)) from e

        if len(data) != size:
            raise IoFailure(offset, size, f"short read of {len(data)} bytes")

        return data

    def block_offset(self, block: int) -> int:
        return block * self.block_size

    def read_block(self, block: int) -> bytes:
        logger.debug("reading block %d at offset %d", block, self.block_offset(block))
        return self.read(self.block_offset(block), self.block_size)
