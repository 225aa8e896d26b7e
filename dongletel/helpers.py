"""Validation and parameter helpers for USSD, SMS and calling presentation."""

from __future__ import annotations

import logging
import re

from .pdu_fields import digit2code

__all__ = [
    "AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED",
    "AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN",
    "AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN",
    "AST_PRES_ALLOWED_NETWORK_NUMBER",
    "AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED",
    "AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN",
    "AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN",
    "AST_PRES_PROHIB_NETWORK_NUMBER",
    "AST_PRES_NUMBER_NOT_AVAILABLE",
    "AST_PRES_RESTRICTION",
    "AST_PRES_ALLOWED",
    "CLIR_DEFAULT",
    "CLIR_INVOKE",
    "CLIR_SUPPRESS",
    "is_valid_ussd_string",
    "is_valid_phone_number",
    "at_clir_value",
    "sms_parameters",
]

logger = logging.getLogger(__name__)

AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED = 0x00
AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN = 0x01
AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN = 0x02
AST_PRES_ALLOWED_NETWORK_NUMBER = 0x03
AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED = 0x20
AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN = 0x21
AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN = 0x22
AST_PRES_PROHIB_NETWORK_NUMBER = 0x23
AST_PRES_NUMBER_NOT_AVAILABLE = 0x43
AST_PRES_RESTRICTION = 0x60
AST_PRES_ALLOWED = 0x00

# Values of the AT+CLIR <n> parameter.
CLIR_DEFAULT = 0
CLIR_INVOKE = 1
CLIR_SUPPRESS = 2

_ALLOWED = frozenset({
    AST_PRES_ALLOWED_NETWORK_NUMBER,
    AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN,
    AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED,
    AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN,
    AST_PRES_NUMBER_NOT_AVAILABLE,
})

_PROHIBITED = frozenset({
    AST_PRES_PROHIB_NETWORK_NUMBER,
    AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN,
    AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED,
    AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN,
})

_TRUE_WORDS = frozenset({"yes", "true", "y", "t", "1", "on"})
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def is_valid_ussd_string(text: str) -> bool:
    """True if every character of ``text`` is a dialable digit."""
    return all(digit2code(ch) is not None for ch in text)


def is_valid_phone_number(number: str) -> bool:
    """True if ``number``, after an optional leading '+', holds only dialable digits."""
    return is_valid_ussd_string(number[1:] if number.startswith("+") else number)


def at_clir_value(clir: int) -> int:
    """Map a caller presentation value to the AT+CLIR parameter."""
    if clir in _ALLOWED:
        logger.debug("callingpres: %#04x allowed", clir)
        return CLIR_SUPPRESS
    if clir in _PROHIBITED:
        logger.debug("callingpres: %#04x prohibited", clir)
        return CLIR_INVOKE
    logger.warning("Unsupported callingpres: %d", clir)
    if (clir & AST_PRES_RESTRICTION) != AST_PRES_ALLOWED:
        return CLIR_DEFAULT
    return CLIR_SUPPRESS


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _is_true(value: str) -> bool:
    return value.strip().lower() in _TRUE_WORDS


def sms_parameters(validity: str | None, report: str | None) -> tuple[int, bool]:
    """Turn textual SMS options into (validity minutes, status report requested).

    Unparsable or non-positive validity becomes 0; a missing report means no report.
    """
    minutes = 0
    if validity is not None:
        minutes = max(_leading_int(validity), 0)
    requested = _is_true(report) if report is not None else False
    return minutes, requested