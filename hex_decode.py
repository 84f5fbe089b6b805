"""Fixed-width hex field decoding for Intel HEX records."""

from conversion_errors import MalformedRecordError

HEX_DIGITS = {c: int(c, 16) for c in '0123456789abcdefABCDEF'}


def read_hex(text, offset, digits, line_number=None):
    """Decode ``digits`` hex characters of ``text`` starting at ``offset``.

    Most significant digit first, case-insensitive. A character that is not
    a hex digit counts as 0. Running off the end of ``text`` is an error.

    Returns:
        the unsigned integer value
    """
    if offset + digits > len(text):
        raise MalformedRecordError(
            f"expected {digits} hex digits at column {offset + 1}, "
            f"line has only {len(text)} characters", line_number)

    result = 0
    for c in text[offset:offset + digits]:
        result = (result << 4) + HEX_DIGITS.get(c, 0)
    return result
