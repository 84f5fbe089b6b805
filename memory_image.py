"""
Intel HEX records -> PIC16F1454 program memory image.

The image is a flat little-endian byte view of program memory: word N lives
at bytes 2N (low 8 bits) and 2N+1 (high 6 bits). Erased flash reads back as
0x3FFF, so every untouched word is FF 3F.

Only three record types matter here:
    00  data
    01  end of file
    04  extended linear address (non-zero means config/EEPROM space,
        which this image does not cover)
"""

from collections import namedtuple
from enum import Enum

import numpy as np

from conversion_errors import MalformedRecordError
from hex_decode import read_hex

PM_SIZE_IN_BYTES = 16384

# Byte addresses accepted from data records
CODE_START_ADDRESS = 0x400
CODE_WINDOW_END = 0x8000

ERASED_WORD = np.array([0xFF, 0x3F], dtype=np.uint8)

RECORD_MARK = ':'
HEADER_LENGTH = 9  # ':' + count(2) + address(4) + type(2)


class RecordType(Enum):
    DATA = '00'
    END_OF_FILE = '01'
    EXTENDED_LINEAR_ADDRESS = '04'
    OTHER = None

    @classmethod
    def from_field(cls, field):
        for member in (cls.DATA, cls.END_OF_FILE, cls.EXTENDED_LINEAR_ADDRESS):
            if member.value == field:
                return member
        return cls.OTHER


HexRecord = namedtuple('HexRecord',
                       ['count', 'address', 'type', 'text', 'line_number'])

BuildResult = namedtuple('BuildResult', [
    'image',
    'out_of_bounds',
    'first_bad_address',
    'first_bad_line',
    'records',
    'bytes_written',
    'bytes_skipped',
])


class MemoryImage:
    """Program memory buffer, pre-filled with the erased pattern."""

    def __init__(self, size=PM_SIZE_IN_BYTES):
        if size % 2:
            raise ValueError(f"image size must be a whole number of words: {size}")
        self.data = np.tile(ERASED_WORD, size // 2)

    def __len__(self):
        return len(self.data)

    def __getitem__(self, address):
        return int(self.data[address])

    def __setitem__(self, address, value):
        self.data[address] = value

    def contains(self, address):
        return 0 <= address < len(self.data)

    def words(self, start, stop):
        """Little-endian 16-bit words covering bytes [start, stop)."""
        return np.frombuffer(self.data[start:stop].tobytes(), dtype='<u2')

    def word_at(self, address):
        return int(self.data[address]) | (int(self.data[address + 1]) << 8)

    def is_erased(self, address):
        return (self.data[address] == ERASED_WORD[0]
                and self.data[address + 1] == ERASED_WORD[1])

    def erased_mask(self):
        """Boolean per byte: True where the byte still holds the fill value."""
        return self.data == np.tile(ERASED_WORD, len(self.data) // 2)

    def tobytes(self):
        return self.data.tobytes()


def parse_record(line, line_number=None):
    """Split one HEX line into its header fields.

    Returns None for lines that are not records. The payload is left in
    ``text`` and decoded by the caller, since how much of it is needed
    depends on the record type.
    """
    line = line.rstrip('\r\n')
    if not line.startswith(RECORD_MARK):
        return None
    if len(line) < HEADER_LENGTH:
        raise MalformedRecordError(
            f"record header truncated ({len(line)} characters)", line_number)

    count = read_hex(line, 1, 2, line_number)
    address = read_hex(line, 3, 4, line_number)
    record_type = RecordType.from_field(line[7:9])
    return HexRecord(count, address, record_type, line, line_number)


def in_code_window(address, image):
    return (CODE_START_ADDRESS <= address < CODE_WINDOW_END
            and image.contains(address))


def build_image(lines, image=None):
    """Apply HEX records to a fresh (or supplied) memory image.

    Out-of-window bytes are not written; they set ``out_of_bounds`` and
    parsing carries on so the caller can report the first offender.

    Args:
        lines: iterable of text lines
        image: MemoryImage to populate (default: new erased image)

    Returns:
        BuildResult
    """
    if image is None:
        image = MemoryImage()

    upper_address = 0
    out_of_bounds = False
    first_bad_address = None
    first_bad_line = None
    records = 0
    bytes_written = 0
    bytes_skipped = 0

    for line_number, line in enumerate(lines, start=1):
        record = parse_record(line, line_number)
        if record is None:
            continue
        records += 1

        if record.type is RecordType.DATA:
            if upper_address != 0:
                bytes_skipped += record.count
                continue
            address = record.address
            for i in range(record.count):
                value = read_hex(record.text, HEADER_LENGTH + 2 * i, 2,
                                 line_number)
                if in_code_window(address, image):
                    image[address] = value
                    bytes_written += 1
                else:
                    if not out_of_bounds:
                        first_bad_address = address
                        first_bad_line = line_number
                    out_of_bounds = True
                address += 1

        elif record.type is RecordType.EXTENDED_LINEAR_ADDRESS:
            upper_address = read_hex(record.text, HEADER_LENGTH, 4, line_number)

        elif record.type is RecordType.END_OF_FILE:
            break

    return BuildResult(image, out_of_bounds, first_bad_address, first_bad_line,
                       records, bytes_written, bytes_skipped)
