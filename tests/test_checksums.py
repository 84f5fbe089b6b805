import zlib

from checksums import crc32, modified_crc14, modified_crc14_words


def reference_crc32(data, crc=0xFFFFFFFF):
    """Bit-at-a-time reflected CRC-32, no final XOR."""
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ (0xEDB88320 if crc & 1 else 0)
    return crc


def test_crc14_zero_word_keeps_zero_state():
    assert modified_crc14(0x0000, 0) == 0


def test_crc14_single_bit():
    assert modified_crc14(0x0001, 0) == 0x2614


def test_crc14_fits_in_14_bits():
    crc = 0
    for word in (0x3FFF, 0xFFFF, 0x1234, 0x8000, 0x0001):
        crc = modified_crc14(word, crc)
        assert 0 <= crc < 0x4000


def test_crc14_words_is_deterministic():
    words = [0x3FFF, 0x0000, 0x1234, 0x2A5C] * 50
    assert modified_crc14_words(words) == modified_crc14_words(list(words))


def test_crc14_words_is_order_sensitive():
    assert modified_crc14_words([0x0000, 0x0001]) == 0x2614
    assert modified_crc14_words([0x0001, 0x0000]) != 0x2614
    assert (modified_crc14_words([0x1234, 0x2A5C, 0x3FFF])
            != modified_crc14_words([0x3FFF, 0x2A5C, 0x1234]))


def test_crc14_words_matches_manual_fold():
    words = [0x0102, 0x3FFF, 0x00A5]
    crc = 0
    for word in words:
        crc = modified_crc14(word, crc)
    assert modified_crc14_words(words) == crc


def test_crc14_words_empty_returns_seed():
    assert modified_crc14_words([]) == 0
    assert modified_crc14_words([], 0x155) == 0x155


def test_crc32_empty_returns_seed():
    assert crc32(b'') == 0xFFFFFFFF
    assert crc32(b'', 0x12345678) == 0x12345678


def test_crc32_check_value():
    # Standard CRC-32 check value is 0xCBF43926 after the final XOR
    assert crc32(b'123456789') ^ 0xFFFFFFFF == 0xCBF43926


def test_crc32_matches_bitwise_reference():
    data = bytes(range(256)) * 3
    assert crc32(data) == reference_crc32(data)
    assert crc32(data, 0) == reference_crc32(data, 0)


def test_crc32_chains():
    a, b = b'\xff\x3f' * 100, b'UFD\x10'
    assert crc32(b, crc32(a)) == crc32(a + b)


def test_crc32_accepts_bytearray():
    data = bytearray(b'\x00\x01\x02')
    assert crc32(data) == zlib.crc32(bytes(data)) ^ 0xFFFFFFFF
