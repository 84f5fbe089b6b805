"""
DFU 1.1 file suffix.

    offset  size  field
    0       2     bcdDevice   (0xFFFF = any)
    2       2     idProduct
    4       2     idVendor
    6       2     bcdDFU      (0x0100)
    8       3     ucDfuSignature "UFD"
    11      1     bLength     (16)
    12      4     dwCRC       CRC-32 of everything before it

All multi-byte fields little-endian.
"""

import struct
from collections import namedtuple

from checksums import crc32, CRC32_SEED

DFU_SUFFIX_LENGTH = 16
DFU_SPEC_VERSION = 0x0100
DFU_SIGNATURE = b'UFD'

USB_VENDOR_ID = 0x1234
USB_PRODUCT_ID = 0x0001
FIRMWARE_VERSION = 0xFFFF

SUFFIX_HEADER = struct.Struct('<HHHH3sB')
SUFFIX_CRC = struct.Struct('<L')

DfuSuffix = namedtuple('DfuSuffix', [
    'firmware_version', 'product_id', 'vendor_id', 'dfu_version',
    'signature', 'length', 'crc', 'crc_valid',
])


def build_suffix_header(vendor_id=USB_VENDOR_ID, product_id=USB_PRODUCT_ID,
                        firmware_version=FIRMWARE_VERSION):
    return SUFFIX_HEADER.pack(
        firmware_version,
        product_id,
        vendor_id,
        DFU_SPEC_VERSION,
        DFU_SIGNATURE,
        DFU_SUFFIX_LENGTH,
    )


def append_dfu_suffix(image_bytes, vendor_id=USB_VENDOR_ID,
                      product_id=USB_PRODUCT_ID,
                      firmware_version=FIRMWARE_VERSION):
    """Return image_bytes followed by the 16-byte DFU suffix.

    The CRC covers the image plus the first 12 suffix bytes.
    """
    header = build_suffix_header(vendor_id, product_id, firmware_version)
    blob = bytes(image_bytes) + header
    suffix = header + SUFFIX_CRC.pack(crc32(blob, CRC32_SEED))
    assert len(suffix) == DFU_SUFFIX_LENGTH
    return bytes(image_bytes) + suffix


def parse_dfu_suffix(blob):
    """Decode the suffix at the end of a DFU file and check its CRC."""
    if len(blob) < DFU_SUFFIX_LENGTH:
        raise ValueError(f"file too short for a DFU suffix ({len(blob)} bytes)")

    header = blob[-DFU_SUFFIX_LENGTH:-SUFFIX_CRC.size]
    (firmware_version, product_id, vendor_id, dfu_version,
     signature, length) = SUFFIX_HEADER.unpack(header)
    (crc,) = SUFFIX_CRC.unpack(blob[-SUFFIX_CRC.size:])
    crc_valid = crc == crc32(blob[:-SUFFIX_CRC.size], CRC32_SEED)

    return DfuSuffix(firmware_version, product_id, vendor_id, dfu_version,
                     signature, length, crc, crc_valid)
