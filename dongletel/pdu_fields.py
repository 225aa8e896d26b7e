"""Field-level encoding and decoding of SMS PDUs in hexadecimal text form."""

from __future__ import annotations

import string

__all__ = [
    "NUMBER_TYPE_INTERNATIONAL",
    "PDUTYPE_MTI_MASK",
    "PDUTYPE_MTI_SMS_DELIVER",
    "PDUTYPE_MTI_SMS_SUBMIT",
    "PDUTYPE_RD_ACCEPT",
    "PDUTYPE_VPF_RELATIVE",
    "PDUTYPE_SRR_REQUESTED",
    "PDUTYPE_UDHI_MASK",
    "PDUTYPE_UDHI_HAS_HEADER",
    "PDU_MESSAGE_REFERENCE",
    "PDU_PID_SMS",
    "PDU_PID_EMAIL",
    "PDU_DCS_ALPHABET_SHIFT",
    "PDU_DCS_ALPHABET_7BIT",
    "PDU_DCS_ALPHABET_8BIT",
    "PDU_DCS_ALPHABET_UCS2",
    "PDU_DCS_ALPHABET_MASK",
    "PDU_DCS_COMPRESSION_MASK",
    "PDU_DCS_76_MASK",
    "TIMESTAMP_LENGTH",
    "PduError",
    "digit2code",
    "code2digit",
    "relative_validity",
    "store_number",
    "parse_byte",
    "parse_number",
    "parse_sca",
    "parse_timestamp",
]

NUMBER_TYPE_INTERNATIONAL = 0x91

# PDU-type octet
PDUTYPE_MTI_MASK = 0x03
PDUTYPE_MTI_SMS_DELIVER = 0x00
PDUTYPE_MTI_SMS_SUBMIT = 0x01
PDUTYPE_RD_ACCEPT = 0x00
PDUTYPE_VPF_RELATIVE = 0x02 << 3
PDUTYPE_SRR_REQUESTED = 0x01 << 5
PDUTYPE_UDHI_MASK = 0x01 << 6
PDUTYPE_UDHI_HAS_HEADER = 0x01 << 6

PDU_MESSAGE_REFERENCE = 0x00

PDU_PID_SMS = 0x00
PDU_PID_EMAIL = 0x32

# Data coding scheme
PDU_DCS_ALPHABET_SHIFT = 2
PDU_DCS_ALPHABET_7BIT = 0x00 << PDU_DCS_ALPHABET_SHIFT
PDU_DCS_ALPHABET_8BIT = 0x01 << PDU_DCS_ALPHABET_SHIFT
PDU_DCS_ALPHABET_UCS2 = 0x02 << PDU_DCS_ALPHABET_SHIFT
PDU_DCS_ALPHABET_MASK = 0x03 << PDU_DCS_ALPHABET_SHIFT
PDU_DCS_COMPRESSION_MASK = 0x01 << 5
PDU_DCS_76_MASK = 0x03 << 6

TIMESTAMP_LENGTH = 14

_DIGIT_CODES = {
    **{d: d for d in string.digits},
    "*": "A",
    "#": "B",
    "a": "C",
    "A": "C",
    "b": "D",
    "B": "D",
    "c": "E",
    "C": "E",
}

_CODE_DIGITS = {
    **{d: d for d in string.digits},
    "a": "*",
    "A": "*",
    "b": "#",
    "B": "#",
    "c": "A",
    "C": "A",
    "d": "B",
    "D": "B",
    "e": "C",
    "E": "C",
    "F": "",
}


class PduError(ValueError):
    """A PDU field could not be encoded or decoded."""


def digit2code(digit: str) -> str | None:
    """Return the semi-octet code for a dial digit, or None if it is not dialable."""
    return _DIGIT_CODES.get(digit)


def code2digit(code: str) -> str:
    """Return the dial digit for a semi-octet code.

    The filler code ``F`` yields an empty string; any other unknown code raises PduError.
    """
    try:
        return _CODE_DIGITS[code]
    except KeyError:
        raise PduError(f"invalid number code {code!r}") from None


def _div_up(value: int, divisor: int) -> int:
    return (value + divisor - 1) // divisor


def relative_validity(minutes: int) -> int:
    """Convert a validity period in minutes to the relative TP-VP octet value."""
    if minutes <= 720:
        return _div_up(minutes, 5) - 1
    if minutes <= 1440:
        return _div_up(minutes, 30) + 119
    if minutes <= 43200:
        return _div_up(minutes, 1440) + 166
    if minutes <= 635040:
        return _div_up(minutes, 10080) + 192
    return 0xFF


def _round_up2(value: int) -> int:
    return (value + 1) & ~1


def store_number(number: str) -> str:
    """Encode a number without leading '+' as swapped semi-octets, padded with 'F'."""
    codes = []
    for digit in number:
        code = digit2code(digit)
        if code is None:
            raise PduError(f"invalid digit {digit!r} in number")
        codes.append(code)
    if len(codes) % 2:
        codes.append("F")
    return "".join(codes[i + 1] + codes[i] for i in range(0, len(codes), 2))


def parse_byte(pdu: str, pos: int) -> tuple[int, int]:
    """Decode two hex digits at ``pos``; return the value and the position after them."""
    pair = pdu[pos:pos + 2]
    if len(pair) < 2 or any(ch not in string.hexdigits for ch in pair):
        raise PduError(f"cannot parse octet at position {pos}")
    return int(pair, 16), pos + 2


def parse_number(pdu: str, pos: int, digits: int) -> tuple[str, int]:
    """Decode an address of ``digits`` digits (type octet first) starting at ``pos``.

    Returns the number, with a leading '+' for international numbers, and the
    position after the address.
    """
    toa, pos = parse_byte(pdu, pos)
    remaining = _round_up2(digits)
    if remaining > len(pdu) - pos:
        raise PduError("address is longer than the PDU")
    collected = []
    while remaining > 0:
        first = code2digit(pdu[pos + 1])
        if not first:
            raise PduError(f"unexpected filler in address at position {pos + 1}")
        second = code2digit(pdu[pos])
        if not second and (remaining != 2 or digits % 2 == 0):
            raise PduError(f"unexpected filler in address at position {pos}")
        collected.append(first)
        collected.append(second)
        pos += 2
        remaining -= 2
    number = "".join(collected)[:digits]
    if toa == NUMBER_TYPE_INTERNATIONAL:
        number = "+" + number
    return number, pos


def parse_sca(pdu: str) -> int:
    """Return the number of characters the service centre address occupies."""
    sca_len, pos = parse_byte(pdu, 0)
    sca_len *= 2
    if sca_len > len(pdu) - pos:
        raise PduError("cannot parse SCA")
    return sca_len + 2


def parse_timestamp(pdu: str, pos: int) -> int:
    """Skip the service centre timestamp at ``pos``; return the position after it."""
    if len(pdu) - pos < TIMESTAMP_LENGTH:
        raise PduError("cannot parse timestamp")
    return pos + TIMESTAMP_LENGTH