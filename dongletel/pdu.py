"""Decoding of received SMS-DELIVER PDUs in hexadecimal text form."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from .pdu_fields import (
    PDU_DCS_76_MASK,
    PDU_DCS_ALPHABET_7BIT,
    PDU_DCS_ALPHABET_8BIT,
    PDU_DCS_ALPHABET_MASK,
    PDU_DCS_ALPHABET_SHIFT,
    PDU_DCS_ALPHABET_UCS2,
    PDU_DCS_COMPRESSION_MASK,
    PDU_PID_SMS,
    PDUTYPE_MTI_MASK,
    PDUTYPE_MTI_SMS_DELIVER,
    PDUTYPE_UDHI_HAS_HEADER,
    PDUTYPE_UDHI_MASK,
    PduError,
    parse_byte,
    parse_number,
    parse_sca,
    parse_timestamp,
)

__all__ = ["StrEncoding", "ParsedPdu", "dcs_alphabet2encoding", "parse_pdu"]


class StrEncoding(Enum):
    """Encoding of a text field taken from a PDU."""

    UNKNOWN = auto()
    SEVEN_BIT = auto()
    SEVEN_BIT_HEX = auto()
    EIGHT_BIT_HEX = auto()
    UCS2_HEX = auto()


@dataclass(frozen=True)
class ParsedPdu:
    """Originator address and user data of an SMS-DELIVER PDU."""

    oa: str
    oa_encoding: StrEncoding
    message: str
    message_encoding: StrEncoding


_ALPHABET_ENCODINGS = {
    PDU_DCS_ALPHABET_7BIT >> PDU_DCS_ALPHABET_SHIFT: StrEncoding.SEVEN_BIT_HEX,
    PDU_DCS_ALPHABET_8BIT >> PDU_DCS_ALPHABET_SHIFT: StrEncoding.EIGHT_BIT_HEX,
    PDU_DCS_ALPHABET_UCS2 >> PDU_DCS_ALPHABET_SHIFT: StrEncoding.UCS2_HEX,
}

_SUPPORTED_ALPHABETS = frozenset(
    {PDU_DCS_ALPHABET_7BIT, PDU_DCS_ALPHABET_8BIT, PDU_DCS_ALPHABET_UCS2}
)


def dcs_alphabet2encoding(alphabet: int) -> StrEncoding:
    """Map the alphabet bits of a DCS octet to the encoding of the user data."""
    return _ALPHABET_ENCODINGS.get(alphabet >> PDU_DCS_ALPHABET_SHIFT, StrEncoding.UNKNOWN)


def _octet(pdu: str, pos: int, error: str) -> tuple[int, int]:
    try:
        return parse_byte(pdu, pos)
    except PduError:
        raise PduError(error) from None


def parse_pdu(pdu: str, tpdu_length: int) -> ParsedPdu:
    """Parse SCA + TPDU text of an SMS-DELIVER whose TPDU is ``tpdu_length`` octets.

    Raises PduError carrying a description of the first problem found.
    """
    try:
        pos = parse_sca(pdu)
    except PduError:
        raise PduError("Can't parse SCA") from None

    if tpdu_length * 2 != len(pdu) - pos:
        raise PduError("TPDU length not matched with actual length")

    pdu_type, pos = _octet(pdu, pos, "Can't parse PDU Type")
    if pdu_type & PDUTYPE_MTI_MASK != PDUTYPE_MTI_SMS_DELIVER:
        raise PduError("Unhandled PDU Type MTI only SMS-DELIVER supported")

    try:
        oa_digits, pos = parse_byte(pdu, pos)
    except PduError:
        oa_digits = 0
    if oa_digits <= 0:
        raise PduError("Can't parse length of OA")

    try:
        oa, pos = parse_number(pdu, pos, oa_digits)
    except PduError:
        raise PduError("Can't parse OA") from None

    pid, pos = _octet(pdu, pos, "Can't parse PID")
    if pid != PDU_PID_SMS:
        raise PduError("Unhandled PID value, only SMS supported")

    dcs, pos = _octet(pdu, pos, "Can't parse DSC")
    alphabet = dcs & PDU_DCS_ALPHABET_MASK
    if (
        dcs & PDU_DCS_76_MASK
        or dcs & PDU_DCS_COMPRESSION_MASK
        or alphabet not in _SUPPORTED_ALPHABETS
    ):
        raise PduError("Unsupported DCS value")

    try:
        pos = parse_timestamp(pdu, pos)
    except PduError:
        raise PduError("Can't parse Timestamp") from None
    message_encoding = dcs_alphabet2encoding(alphabet)

    udl, pos = _octet(pdu, pos, "Can't parse UDL")
    if alphabet == PDU_DCS_ALPHABET_7BIT:
        udl = ((udl + 1) * 7) >> 3
    if udl * 2 != len(pdu) - pos:
        raise PduError("UDL not match with UD length")

    if pdu_type & PDUTYPE_UDHI_MASK == PDUTYPE_UDHI_HAS_HEADER:
        udhl, pos = _octet(pdu, pos, "Can't parse UDHL")
        if len(pdu) - pos < udhl * 2:
            raise PduError("Invalid UDH")
        pos += udhl * 2

    return ParsedPdu(
        oa=oa,
        oa_encoding=StrEncoding.SEVEN_BIT,
        message=pdu[pos:],
        message_encoding=message_encoding,
    )