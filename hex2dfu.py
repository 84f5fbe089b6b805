#!/usr/bin/env python3
"""
Convert a PIC16F1454 Intel HEX file into a binary for USB DFU download.

Pipeline:
1. Parse HEX records into a 16 KB program memory image (erased = FF 3F)
2. Reject images that touch addresses outside 0x400-0x7FFF
3. Compute the bootloader's modified CRC-14 over 0x400-0x3EFD and store it
   at 0x3EFE (fails if the application already uses that word)
4. Append the 16-byte DFU suffix (VID/PID, "UFD", CRC-32)

The binary is meant for the PIC16F1-USB-DFU-Bootloader; the VID/PID defaults
must match what that bootloader enumerates as.

Output is only written when every step succeeds. Otherwise nothing is left
at the output path.
"""

import argparse
import os
import sys
import tempfile
from collections import namedtuple

from conversion_errors import (
    AddressOutOfBoundsError,
    ConversionError,
    InputUnavailableError,
    OutputUnavailableError,
)
from crc_placement import CHECKSUM_SLOT, place_checksum
from dfu_suffix import (
    FIRMWARE_VERSION,
    USB_PRODUCT_ID,
    USB_VENDOR_ID,
    append_dfu_suffix,
    parse_dfu_suffix,
)
from memory_image import build_image

ConversionResult = namedtuple('ConversionResult', ['blob', 'build', 'checksum'])


def convert(lines, vendor_id=USB_VENDOR_ID, product_id=USB_PRODUCT_ID,
            firmware_version=FIRMWARE_VERSION):
    """Run the whole HEX -> DFU pipeline in memory.

    Args:
        lines: iterable of Intel HEX text lines
        vendor_id, product_id, firmware_version: DFU suffix fields

    Returns:
        ConversionResult with the complete output bytes

    Raises:
        ConversionError subclasses; no partial result is ever returned
    """
    build = build_image(lines)
    if build.out_of_bounds:
        raise AddressOutOfBoundsError(build.first_bad_address,
                                      build.first_bad_line)

    checksum = place_checksum(build.image)
    blob = append_dfu_suffix(build.image.tobytes(), vendor_id, product_id,
                             firmware_version)
    return ConversionResult(blob, build, checksum)


def read_input(path):
    """Read all lines of the HEX file. Undecodable bytes never fail."""
    try:
        with open(path, 'r', encoding='latin-1', newline='') as f:
            return f.readlines()
    except OSError as e:
        raise InputUnavailableError(
            f"unable to open input file {path}: {e.strerror}") from e


def open_output(path):
    """Open a temporary file next to ``path`` to be renamed on success."""
    if os.path.isdir(path):
        raise OutputUnavailableError(
            f"unable to open output file {path}: is a directory")
    directory = os.path.dirname(os.path.abspath(path))
    try:
        return tempfile.NamedTemporaryFile(
            'wb', dir=directory, prefix=f'.{os.path.basename(path)}.',
            suffix='.tmp', delete=False)
    except OSError as e:
        raise OutputUnavailableError(
            f"unable to open output file {path}: {e.strerror}") from e


def hex2dfu(input_path, output_path, vendor_id=USB_VENDOR_ID,
            product_id=USB_PRODUCT_ID, firmware_version=FIRMWARE_VERSION):
    """Convert input_path to output_path; the output appears only on success."""
    lines = read_input(input_path)
    output = open_output(output_path)
    committed = False
    try:
        result = convert(lines, vendor_id, product_id, firmware_version)
        try:
            output.write(result.blob)
            output.close()
            os.replace(output.name, output_path)
        except OSError as e:
            raise OutputUnavailableError(
                f"unable to write output file {output_path}: {e.strerror}") from e
        committed = True
    finally:
        if not committed:
            output.close()
            os.remove(output.name)
    return result


def verify_output(path):
    """Re-read a written DFU file and check its suffix."""
    with open(path, 'rb') as f:
        blob = f.read()
    return parse_dfu_suffix(blob)


def print_summary(input_path, output_path, result):
    build = result.build
    print(f"Input: {input_path} ({build.records} records)")
    print(f"  Program bytes set: {build.bytes_written}")
    if build.bytes_skipped:
        print(f"  Note: skipped {build.bytes_skipped} data bytes above the "
              f"64 KB window (config/EEPROM records)")
    print(f"  Checksum: 0x{result.checksum:04X} at 0x{CHECKSUM_SLOT:04X}")
    suffix = parse_dfu_suffix(result.blob)
    print(f"  DFU suffix: VID {suffix.vendor_id:04X} PID {suffix.product_id:04X} "
          f"bcdDevice {suffix.firmware_version:04X} CRC {suffix.crc:08X}")
    print(f"Output written to {output_path} ({len(result.blob)} bytes)")


def usb_id(text):
    """argparse type for 16-bit identifiers: hex with 0x prefix or decimal."""
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"out of 16-bit range: {text}")
    return value


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Convert PIC16F1454 Intel HEX to a DFU binary")
    parser.add_argument("input_hex", help="Intel HEX file from the compiler")
    parser.add_argument("output_dfu", help="DFU binary to write")
    parser.add_argument("--vid", type=usb_id, default=USB_VENDOR_ID,
                        help=f"USB vendor ID (default: 0x{USB_VENDOR_ID:04X})")
    parser.add_argument("--pid", type=usb_id, default=USB_PRODUCT_ID,
                        help=f"USB product ID (default: 0x{USB_PRODUCT_ID:04X})")
    parser.add_argument("--fw-version", type=usb_id, default=FIRMWARE_VERSION,
                        help=f"bcdDevice (default: 0x{FIRMWARE_VERSION:04X}, any)")
    parser.add_argument("--verify", action="store_true",
                        help="Re-read the output and check its DFU suffix")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Only print errors")
    args = parser.parse_args(argv)

    try:
        result = hex2dfu(args.input_hex, args.output_dfu,
                         vendor_id=args.vid, product_id=args.pid,
                         firmware_version=args.fw_version)
    except ConversionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print_summary(args.input_hex, args.output_dfu, result)

    if args.verify:
        suffix = verify_output(args.output_dfu)
        if not suffix.crc_valid:
            print(f"ERROR: {args.output_dfu} failed DFU CRC check", file=sys.stderr)
            return 1
        if not args.quiet:
            print("  Verify: DFU suffix CRC OK")

    return 0


if __name__ == '__main__':
    sys.exit(main())
