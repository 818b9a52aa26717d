import struct
import unittest

from ext2walk.device import ImageReader
from ext2walk.directory import parse_directory_block, scan_directory_block
from ext2walk.disk import load_context
from ext2walk.error import CorruptDirectory
from ext2walk.inode import DirEntry

from imagebuilder import ImageBuilder

BLOCK_SIZE = 1024


def directory_block(entries):
    data = bytearray(BLOCK_SIZE)
    offset = 0
    for inode, rec_len, name in entries:
        encoded = name.encode()
        struct.pack_into("<IHBB", data, offset, inode, rec_len, len(encoded), 0)
        data[offset + 8 : offset + 8 + len(encoded)] = encoded
        offset += rec_len
    return bytes(data)


class ParseDirectoryBlockTestCase(unittest.TestCase):
    def test_single_entry_spanning_block(self):
        entries = list(parse_directory_block(2, 30, directory_block([(5, BLOCK_SIZE, "foo")])))
        self.assertEqual(entries, [DirEntry(2, 0, 5, BLOCK_SIZE, 3, "foo")])

    def test_deleted_entry_is_skipped_but_consumed(self):
        data = directory_block([(2, 12, "."), (0, 20, "gone"), (7, BLOCK_SIZE - 32, "bar")])
        entries = list(parse_directory_block(2, 30, data))
        self.assertEqual(
            [(e.offset, e.index, e.name) for e in entries], [(0, 2, "."), (32, 7, "bar")]
        )
        self.assertEqual(entries[1].rec_len, BLOCK_SIZE - 32)

    def test_offsets_are_where_each_record_starts(self):
        data = directory_block([(2, 12, "."), (2, 12, ".."), (11, BLOCK_SIZE - 24, "lost+found")])
        self.assertEqual([e.offset for e in parse_directory_block(2, 30, data)], [0, 12, 24])

    def test_zero_record_length(self):
        data = directory_block([(2, 12, "."), (3, 0, "x")])
        entries = []
        with self.assertRaises(CorruptDirectory) as cm:
            for entry in parse_directory_block(2, 30, data):
                entries.append(entry)
        self.assertEqual(cm.exception.block, 30)
        self.assertEqual(cm.exception.offset, 12)
        self.assertEqual([e.name for e in entries], ["."])

    def test_record_running_past_block_end(self):
        data = directory_block([(2, 12, "."), (3, BLOCK_SIZE, "x")])
        with self.assertRaises(CorruptDirectory):
            list(parse_directory_block(2, 30, data))

    def test_name_longer_than_record(self):
        data = bytearray(directory_block([(2, 12, "."), (3, BLOCK_SIZE - 12, "x")]))
        data[12 + 6] = 250
        struct.pack_into("<H", data, 12 + 4, 16)
        with self.assertRaises(CorruptDirectory):
            list(parse_directory_block(2, 30, bytes(data)))

    def test_non_utf8_name_survives(self):
        data = bytearray(directory_block([(5, BLOCK_SIZE, "ab")]))
        data[9] = 0xFF
        (entry,) = parse_directory_block(2, 30, bytes(data))
        self.assertEqual(entry.name.encode("utf-8", errors="surrogateescape"), b"a\xff")


class ScanDirectoryBlockTestCase(unittest.TestCase):
    def test_reads_block_from_image(self):
        builder = ImageBuilder()
        builder.dir_block(9, [(2, 12, "."), (2, BLOCK_SIZE - 12, "..")])
        ctx = load_context(ImageReader(builder.build()))

        entries = list(scan_directory_block(ctx, 2, 9))
        self.assertEqual(
            [(e.parent, e.index, e.name) for e in entries], [(2, 2, "."), (2, 2, "..")]
        )


if __name__ == "__main__":
    unittest.main()
