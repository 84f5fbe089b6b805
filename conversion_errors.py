"""Failure kinds for the HEX to DFU conversion.

Every failure is fatal for the run; main() turns them into an ``ERROR:``
line and a non-zero exit status.
"""


class ConversionError(RuntimeError):
    """Base class for everything that aborts a conversion."""


class InputUnavailableError(ConversionError):
    pass


class OutputUnavailableError(ConversionError):
    pass


class MalformedRecordError(ConversionError):
    """A ``:`` line is too short for the fields it declares."""

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class AddressOutOfBoundsError(ConversionError):
    def __init__(self, address, line_number=None):
        message = (f"supplied input file is faulty and used out-of-bounds "
                   f"addresses (first at 0x{address:04X}")
        if line_number is not None:
            message += f", line {line_number}"
        super().__init__(message + ")")
        self.address = address
        self.line_number = line_number


class ChecksumSlotConflictError(ConversionError):
    def __init__(self, address, found):
        super().__init__(
            f"CRC address 0x{address:04X} was occupied "
            f"({' '.join(f'{b:02X}' for b in found)}); "
            f"app is in conflict with bootloader")
        self.address = address
        self.found = bytes(found)
