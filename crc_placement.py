"""Compute the bootloader checksum and store it in its reserved slot."""

from checksums import modified_crc14_words
from conversion_errors import ChecksumSlotConflictError

# Word addresses
CODE_OFFSET_ADDRESS = 0x200
HIGH_ENDURANCE_ADDRESS = 0x1F80

CHECKSUM_START = CODE_OFFSET_ADDRESS << 1
# Last word before the high-endurance flash holds the checksum itself
CHECKSUM_SLOT = (HIGH_ENDURANCE_ADDRESS << 1) - 2


def compute_checksum(image):
    """Modified CRC-14 over bytes [0x400, 0x3EFE), seed 0."""
    return modified_crc14_words(image.words(CHECKSUM_START, CHECKSUM_SLOT))


def place_checksum(image):
    """Store the checksum low byte first at 0x3EFE.

    Raises:
        ChecksumSlotConflictError: the slot no longer holds erased flash,
            meaning application code was placed there

    Returns:
        the checksum value written
    """
    crc = compute_checksum(image)

    if not image.is_erased(CHECKSUM_SLOT):
        raise ChecksumSlotConflictError(
            CHECKSUM_SLOT, (image[CHECKSUM_SLOT], image[CHECKSUM_SLOT + 1]))

    image[CHECKSUM_SLOT] = crc & 0x00FF
    image[CHECKSUM_SLOT + 1] = (crc & 0xFF00) >> 8
    return crc
