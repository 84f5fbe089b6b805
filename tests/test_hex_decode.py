import pytest

from conversion_errors import MalformedRecordError
from hex_decode import read_hex


def test_reads_msb_first():
    assert read_hex(':10040000', 3, 4) == 0x0400
    assert read_hex(':10040000', 1, 2) == 0x10


def test_case_insensitive():
    assert read_hex('aBcD', 0, 4) == 0xABCD
    assert read_hex('abcd', 0, 4) == read_hex('ABCD', 0, 4)


def test_non_hex_characters_count_as_zero():
    assert read_hex('1G2', 0, 3) == 0x102
    assert read_hex('zz', 0, 2) == 0


def test_zero_digits():
    assert read_hex('', 0, 0) == 0


def test_truncated_field_is_an_error():
    with pytest.raises(MalformedRecordError) as excinfo:
        read_hex(':1004', 3, 4, line_number=7)
    assert excinfo.value.line_number == 7
    assert 'line 7' in str(excinfo.value)
