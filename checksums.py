"""
Checksum engines used by the DFU image builder.

1. Modified CRC-14 over 16-bit program memory words. The PIC16F1 USB DFU
   bootloader recomputes it at reset to decide whether the application is
   intact before jumping to it.
2. Reflected CRC-32 (poly 0xEDB88320) over raw bytes, as required for the
   dwCRC field of the DFU suffix.
"""

import zlib
from functools import reduce

CRC14_POLYNOMIAL = 0x23B1
CRC32_SEED = 0xFFFFFFFF


def modified_crc14(word, crc):
    """Shift one 16-bit word into the CRC-14 state.

    Unlike a textbook CRC-14 this always shifts in 16 bits, LSB first,
    which is what the bootloader does with each flash word.
    """
    for _ in range(16):
        feedback = (word ^ crc) & 1
        crc >>= 1
        if feedback:
            crc ^= CRC14_POLYNOMIAL
        word >>= 1
    return crc


def modified_crc14_words(words, crc=0):
    """Fold modified_crc14 over an ordered sequence of 16-bit words."""
    return reduce(lambda acc, word: modified_crc14(int(word), acc), words, crc)


def crc32(data, crc=CRC32_SEED):
    """CRC-32 with a raw register seed and no final XOR.

    zlib keeps the register inverted on entry and exit, so the seed is
    flipped going in and the result flipped coming out.

    Args:
        data: bytes-like object
        crc: raw register value to start from (default 0xFFFFFFFF)

    Returns:
        the raw 32-bit register after the last byte
    """
    return zlib.crc32(bytes(data), crc ^ 0xFFFFFFFF) ^ 0xFFFFFFFF
