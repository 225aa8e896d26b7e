"""Discovery of modem ports under sysfs and identification by IMEI / IMSI."""

from __future__ import annotations

import logging
import os
import re
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto

__all__ = [
    "SYS_BUS_USB_DEVICES",
    "PDISCOVERY_TIMEOUT",
    "IMEI_SIZE",
    "IMSI_SIZE",
    "INTERFACE_TYPE_NUMBERS",
    "InterfaceType",
    "DeviceIds",
    "DEVICE_IDS",
    "DiscoveryRequest",
    "DiscoveryResult",
    "DiscoveryCache",
    "lookup_device_ids",
    "read_hex_id",
    "handle_ati",
    "handle_cimi",
    "handle_response",
    "select_command",
    "find_port_name",
    "find_interfaces",
    "request_matches",
]

logger = logging.getLogger(__name__)

SYS_BUS_USB_DEVICES = "/sys/bus/usb/devices"
# Timeout for reading a port, in milliseconds.
PDISCOVERY_TIMEOUT = 500

IMEI_SIZE = 15
IMSI_SIZE = 15

_PORT_NUMBER = "port_number"
_IMEI_MARK = "\r\nIMEI:"
_HEX_NUMBER = re.compile(r"\s*(?:0[xX])?([0-9a-fA-F]+)")

_CMD_CIMI = b"AT+CIMI\r"
_CMD_ATI = b"ATI\r"
_CMD_BOTH = b"ATI; +CIMI\r"
_COMMANDS = (_CMD_CIMI, _CMD_ATI, _CMD_BOTH)
# Indexed by [want_imei][want_imsi].
_WANT_MAP = ((2, 0), (1, 2))


class InterfaceType(IntEnum):
    """Role of a modem port."""

    DATA = 0
    VOICE = 1


INTERFACE_TYPE_NUMBERS = len(InterfaceType)


@dataclass(frozen=True)
class DeviceIds:
    """USB identity of a known modem and its interface number for each port role."""

    vendor_id: int
    product_id: int
    interfaces: tuple[int, int]


DEVICE_IDS: tuple[DeviceIds, ...] = (
    DeviceIds(0x12D1, 0x1001, (2, 1)),  # E1550 and generic
    DeviceIds(0x12D1, 0x140C, (3, 2)),  # E17xx
    DeviceIds(0x12D1, 0x1436, (4, 3)),  # E1750
    DeviceIds(0x12D1, 0x1506, (1, 2)),  # E171 firmware 21.x
)


@dataclass(frozen=True)
class DiscoveryRequest:
    """What a device is searched by; empty identifiers count as not given."""

    name: str
    imei: str | None = None
    imsi: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "imei", self.imei or None)
        object.__setattr__(self, "imsi", self.imsi or None)


def _empty_ports() -> list[str | None]:
    return [None] * INTERFACE_TYPE_NUMBERS


@dataclass
class DiscoveryResult:
    """Identity read from a modem and the ports found for it, indexed by InterfaceType."""

    imei: str | None = None
    imsi: str | None = None
    ports: list[str | None] = field(default_factory=_empty_ports)

    def copy(self) -> DiscoveryResult:
        """Return an independent copy."""
        return DiscoveryResult(self.imei, self.imsi, list(self.ports))


def lookup_device_ids(vendor_id: int, product_id: int) -> DeviceIds | None:
    """Return the known device with these USB ids, or None."""
    return next(
        (
            device
            for device in DEVICE_IDS
            if device.vendor_id == vendor_id and device.product_id == product_id
        ),
        None,
    )


def read_hex_id(path: str | os.PathLike[str]) -> int | None:
    """Read a hexadecimal number from the start of a file; None if unreadable."""
    try:
        with open(path, encoding="ascii", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return None
    match = _HEX_NUMBER.match(text)
    return int(match.group(1), 16) if match else None


def handle_ati(text: str) -> str | None:
    """Extract the IMEI from an ATI response (``\\r\\nIMEI: <15 digits>\\r\\n``)."""
    start = text.find(_IMEI_MARK)
    if start < 0:
        return None
    pos = start + len(_IMEI_MARK)
    while pos < len(text) and text[pos] == " ":
        pos += 1
    end = pos
    while end < len(text) and "0" <= text[end] <= "9":
        end += 1
    if end - pos == IMEI_SIZE and text[end:end + 2] == "\r\n":
        imei = text[pos:end]
        logger.debug("found IMEI %s", imei)
        return imei
    return None


class _CimiState(Enum):
    BEGIN = auto()
    CR1 = auto()
    LF1 = auto()
    DIGITS = auto()
    CR2 = auto()


def handle_cimi(text: str) -> str | None:
    """Extract the IMSI from a CIMI response (``\\r\\n<15 digits>\\r\\n``)."""
    state = _CimiState.BEGIN
    start = 0
    for pos, char in enumerate(text):
        is_digit = "0" <= char <= "9"
        if state is _CimiState.BEGIN:
            if char == "\r":
                state = _CimiState.CR1
        elif state is _CimiState.CR1:
            state = _CimiState.LF1 if char == "\n" else _CimiState.BEGIN
        elif state is _CimiState.LF1:
            if is_digit:
                state = _CimiState.DIGITS
                start = pos
            elif char == "\r":
                state = _CimiState.CR1
            else:
                state = _CimiState.BEGIN
        elif state is _CimiState.DIGITS:
            if is_digit:
                continue
            if char == "\r":
                state = _CimiState.CR2 if pos - start == IMSI_SIZE else _CimiState.CR1
            else:
                state = _CimiState.BEGIN
        else:
            if char == "\n":
                imsi = text[start:pos - 1]
                logger.debug("found IMSI %s", imsi)
                return imsi
            state = _CimiState.BEGIN
    return None


def handle_response(
    request: DiscoveryRequest, text: str | bytes, result: DiscoveryResult
) -> bool:
    """Take the wanted identifiers from collected response data into ``result``.

    The last character of ``text`` is treated as still incomplete and not examined.
    Returns True once the response holds a final OK or ERROR.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")
    if not text:
        return False
    text = text[:-1]
    logger.debug("[%s discovery] < %s", request.name, text)
    done = "OK" in text or "ERROR" in text
    if request.imei and result.imei is None:
        result.imei = handle_ati(text)
    if request.imsi and result.imsi is None:
        result.imsi = handle_cimi(text)
    return done


def select_command(request: DiscoveryRequest, result: DiscoveryResult) -> bytes:
    """Return the AT command that asks for the identifiers still missing."""
    want_imei = int(bool(request.imei) and result.imei is None)
    want_imsi = int(bool(request.imsi) and result.imsi is None)
    return _COMMANDS[_WANT_MAP[want_imei][want_imsi]]


def _sorted_entries(path: str | os.PathLike[str]) -> list[str]:
    try:
        return sorted(os.listdir(path))
    except OSError:
        return []


def find_port_name(interface_dir: str | os.PathLike[str]) -> str | None:
    """Return the ``/dev`` path of the tty under a USB interface directory, or None."""
    for entry in _sorted_entries(interface_dir):
        path = os.path.join(interface_dir, entry)
        if os.path.isdir(path) and os.path.isfile(os.path.join(path, _PORT_NUMBER)):
            return f"/dev/{entry}"
    return None


def find_interfaces(
    device_dir: str | os.PathLike[str], device: DeviceIds
) -> list[str | None]:
    """Map the tty ports of a USB device directory to port roles of ``device``."""
    ports = _empty_ports()
    found = 0
    for entry in _sorted_entries(device_dir):
        if ":" not in entry:
            continue
        path = os.path.join(device_dir, entry)
        if not os.path.isdir(path):
            continue
        interface = read_hex_id(os.path.join(path, "bInterfaceNumber"))
        if interface is None:
            continue
        port = find_port_name(path)
        if port is None:
            continue
        logger.debug("found InterfaceNumber %02x port %s", interface, port)
        for index, wanted in enumerate(device.interfaces):
            if wanted != interface:
                continue
            if ports[index] is None:
                ports[index] = port
                found += 1
                if found == INTERFACE_TYPE_NUMBERS:
                    break
            else:
                logger.debug(
                    "port %s for bInterfaceNumber %02x already exists new is %s",
                    ports[index], interface, port,
                )
    return ports


def request_matches(request: DiscoveryRequest, result: DiscoveryResult) -> bool:
    """True if every identifier given in ``request`` equals the one in ``result``."""
    return (not request.imei or result.imei == request.imei) and (
        not request.imsi or result.imsi == request.imsi
    )


def _ports_match(first: list[str | None], second: list[str | None]) -> bool:
    return all(a is not None and b is not None and a == b for a, b in zip(first, second))


@dataclass
class _CacheItem:
    result: DiscoveryResult
    failed: bool
    valid_till: float


class DiscoveryCache:
    """Identities read from ports, remembered for ``interval`` seconds."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._items: list[_CacheItem] = []
        self._lock = threading.RLock()

    def _valid_till(self) -> float:
        return time.monotonic() + self.interval

    def search(self, ports: list[str | None]) -> _CacheItem | None:
        """Return the live entry for ``ports``, dropping expired entries on the way."""
        now = time.monotonic()
        with self._lock:
            kept: list[_CacheItem] = []
            found = None
            for position, item in enumerate(self._items):
                if now < item.valid_till:
                    kept.append(item)
                    if _ports_match(item.result.ports, ports):
                        found = item
                        kept.extend(self._items[position + 1:])
                        break
            self._items = kept
            return found

    def lookup(self, request: DiscoveryRequest, result: DiscoveryResult) -> bool | None:
        """Answer ``request`` from the cache.

        Copies cached identifiers into ``result``. Returns None if the cache cannot
        answer, otherwise whether the cached attempt failed.
        """
        item = self.search(result.ports)
        if item is None:
            return None
        result.imei = item.result.imei
        result.imsi = item.result.imsi
        answered = item.failed or (
            bool(request.imei or item.result.imei) and bool(request.imsi or item.result.imsi)
        )
        return item.failed if answered else None

    def update(self, result: DiscoveryResult, failed: bool) -> None:
        """Remember the identity read for the ports of ``result``."""
        with self._lock:
            item = self.search(result.ports)
            if item is None:
                self._items.append(
                    _CacheItem(result.copy(), bool(failed), self._valid_till())
                )
            else:
                item.result.imei = result.imei
                item.result.imsi = result.imsi
                item.failed = bool(failed)
                item.valid_till = self._valid_till()

    def items(self) -> list[DiscoveryResult]:
        """Copies of the cached results, oldest first."""
        with self._lock:
            return [item.result.copy() for item in self._items]

    def clear(self) -> None:
        """Forget everything."""
        with self._lock:
            self._items.clear()