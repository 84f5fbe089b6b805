import pytest


def hex_record(address, data=b'', record_type=0):
    """Format one Intel HEX line with a correct trailing checksum."""
    body = bytes([len(data), (address >> 8) & 0xFF, address & 0xFF,
                  record_type]) + bytes(data)
    checksum = (-sum(body)) & 0xFF
    return ':' + (body + bytes([checksum])).hex().upper() + '\n'


EOF_RECORD = ':00000001FF\n'


@pytest.fixture
def write_hex(tmp_path):
    """Write HEX lines to a file under tmp_path and return its path."""
    def _write(lines, name='app.hex'):
        path = tmp_path / name
        path.write_text(''.join(lines))
        return path
    return _write
