"""List USB modem ports of serial drivers and query their identity."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from .memmem import memmem
from .tty import close_tty, open_tty, write_all

__all__ = [
    "DevDescr",
    "SYS_DRIVER",
    "read_result",
    "count_lines",
    "split_results",
    "read_results",
    "get_info_item",
    "parse_interface_name",
    "discovery_port",
    "get_info",
    "discovery_driver",
    "format_devices",
    "main",
]

SYS_DRIVER = "/sys/bus/usb/drivers"
PORT_NUMBER = "port_number"

_RESULT_SIZE = 4096
_OK = b"\r\nOK\r\n"
_ERROR = b"\r\nERROR\r\n"
_ATI = b"ATI\r"
_CIMI = "AT+CIMI\r"
_INTERFACE_NAME = re.compile(r"\s*([+-]?\d+)-([^:]{1,39}):\s*([+-]?\d+)\.\s*([+-]?\d+)")

Info = tuple["str | None", "str | None", "str | None", "str | None"]


@dataclass
class DevDescr:
    """One USB interface bound to a serial driver."""

    busnum: int
    devpath: str
    configuration: int
    interfaceno: int
    port: str = ""


def read_result(fd: int) -> str | None:
    """Read a command response up to the final OK; None on ERROR, EOF or overflow."""
    buf = bytearray()
    while len(buf) < _RESULT_SIZE:
        try:
            chunk = os.read(fd, _RESULT_SIZE - len(buf))
        except OSError:
            return None
        if not chunk:
            return None
        buf += chunk
        found = memmem(buf, _OK)
        if found >= 0:
            return buf[:found].decode("latin-1")
        if memmem(buf, _ERROR) >= 0:
            return None
    return None


def count_lines(text: str) -> int:
    """Number of CRLF-separated lines in ``text``."""
    return text.count("\r\n") + 1


def split_results(text: str) -> list[str]:
    """Return the non-empty CRLF-terminated lines of ``text``."""
    return [line for line in text.split("\r\n")[:-1] if line]


def read_results(fd: int) -> list[str] | None:
    """Read a response and split it into lines; None if the command failed."""
    text = read_result(fd)
    return None if text is None else split_results(text)


def get_info_item(lines: Iterable[str], name: str) -> str | None:
    """Return the value of the first line starting with ``name``, leading spaces removed."""
    for line in lines:
        if line.startswith(name):
            return line[len(name):].lstrip(" ")
    return None


def parse_interface_name(name: str) -> DevDescr | None:
    """Parse a sysfs interface name like ``1-1.2:1.0``; None if it is not one."""
    match = _INTERFACE_NAME.match(name)
    if match is None:
        return None
    busnum, devpath, configuration, interfaceno = match.groups()
    return DevDescr(int(busnum), devpath, int(configuration), int(interfaceno))


def discovery_port(descr: DevDescr, path: str) -> bool:
    """Find the tty under interface directory ``path`` and store it in ``descr``."""
    try:
        entries = sorted(os.listdir(path))
    except OSError:
        return False
    for entry in entries:
        if os.path.exists(os.path.join(path, entry, PORT_NUMBER)):
            descr.port = f"/dev/{entry}"
            return True
    return False


def get_info(port: str) -> Info:
    """Ask the modem on ``port`` for manufacturer, model, IMEI and IMSI."""
    manufacturer = model = imei = imsi = None
    try:
        fd = open_tty(port)
    except OSError:
        return manufacturer, model, imei, imsi
    try:
        write_all(fd, _ATI)
        lines = read_results(fd)
        if lines is not None:
            manufacturer = get_info_item(lines, "Manufacturer:")
            model = get_info_item(lines, "Model:")
            imei = get_info_item(lines, "IMEI:")

        write_all(fd, _CIMI.encode("ascii"))
        lines = read_results(fd)
        if lines:
            index = 1 if lines[0].startswith(_CIMI) else 0
            if index < len(lines):
                imsi = lines[index]
    finally:
        close_tty(port, fd)
    return manufacturer, model, imei, imsi


def discovery_driver(driver: str, sys_driver: str = SYS_DRIVER) -> list[DevDescr]:
    """Return the interfaces bound to ``driver`` that expose a tty port."""
    name = os.path.join(sys_driver, driver)
    try:
        entries = sorted(os.listdir(name))
    except OSError:
        return []
    devices = []
    for entry in entries:
        descr = parse_interface_name(entry)
        if descr is None:
            continue
        path = os.path.join(name, entry)
        try:
            path = os.path.realpath(path, strict=True)
        except OSError:
            pass
        if discovery_port(descr, path):
            devices.append(descr)
    return devices


def _show(value: str | None) -> str:
    return "(null)" if value is None else value


def format_devices(
    devs: Iterable[DevDescr], info_getter: Callable[[str], Info] = get_info
) -> Iterator[str]:
    """Yield report lines for ``devs``, querying the first interface of each device."""
    for dev in devs:
        if dev.interfaceno == 0:
            yield f"Bus: {dev.busnum} Dev: {dev.devpath} Conf: {dev.configuration}"
            info = info_getter(dev.port)
            if any(info):
                manufacturer, model, imei, imsi = map(_show, info)
                yield (
                    f"Manufacturer: {manufacturer}  Model: {model} "
                    f"IMEI: {imei} IMSI: {imsi}"
                )
        yield f"\tInterface: {dev.interfaceno} Port: {dev.port}"


def main(argv: list[str] | None = None) -> int:
    """Report modems of the ``option`` driver and of the drivers named in ``argv``."""
    if argv is None:
        argv = sys.argv[1:]
    for driver in ["option", *argv]:
        for line in format_devices(discovery_driver(driver)):
            print(line)
    return 0