import os

import pytest

from dongletel.discovery import (
    DevDescr,
    count_lines,
    discovery_driver,
    discovery_port,
    format_devices,
    get_info,
    get_info_item,
    parse_interface_name,
    read_result,
    read_results,
    split_results,
)


def feed(data, close=True):
    read_fd, write_fd = os.pipe()
    os.write(write_fd, data)
    if close:
        os.close(write_fd)
    return read_fd


def test_count_lines():
    assert count_lines("") == 1
    assert count_lines("a\r\nb\r\nc") == 3


def test_split_results_drops_empty_and_unterminated():
    text = "ATI\r\r\nManufacturer: huawei\r\n\r\nModel: E1550\r\nrest"
    assert split_results(text) == ["ATI\r", "Manufacturer: huawei", "Model: E1550"]


def test_get_info_item():
    lines = ["Manufacturer:   huawei", "Model: E1550"]
    assert get_info_item(lines, "Manufacturer:") == "huawei"
    assert get_info_item(lines, "IMEI:") is None


def test_read_result_until_ok():
    fd = feed(b"ATI\r\r\nModel: E1550\r\n\r\nOK\r\n")
    try:
        assert read_result(fd) == "ATI\r\r\nModel: E1550\r\n"
    finally:
        os.close(fd)


def test_read_results_lines():
    fd = feed(b"AT+CIMI\r\r\n000000000000000\r\n\r\nOK\r\n")
    try:
        assert read_results(fd) == ["AT+CIMI\r", "000000000000000"]
    finally:
        os.close(fd)


@pytest.mark.parametrize("data", [b"\r\nERROR\r\n", b"partial"])
def test_read_result_failures(data):
    fd = feed(data)
    try:
        assert read_results(fd) is None
    finally:
        os.close(fd)


def test_parse_interface_name():
    assert parse_interface_name("1-1.2:1.0") == DevDescr(1, "1.2", 1, 0)
    assert parse_interface_name("usb1") is None
    assert parse_interface_name("module") is None


def make_interface(root, name, tty=None):
    iface = root / name
    iface.mkdir(parents=True)
    if tty:
        (iface / tty).mkdir()
        (iface / tty / "port_number").write_text("0\n")
    return iface


def test_discovery_port(tmp_path):
    iface = make_interface(tmp_path, "2-1:1.1", "ttyUSB1")
    descr = DevDescr(2, "1", 1, 1)
    assert discovery_port(descr, str(iface)) is True
    assert descr.port == "/dev/ttyUSB1"
    assert discovery_port(DevDescr(2, "1", 1, 2), str(tmp_path / "missing")) is False


def test_discovery_driver(tmp_path):
    driver = tmp_path / "option"
    make_interface(driver, "1-1:1.0", "ttyUSB0")
    make_interface(driver, "1-1:1.2")
    (driver / "module").mkdir()
    assert discovery_driver("option", str(tmp_path)) == [DevDescr(1, "1", 1, 0, "/dev/ttyUSB0")]
    assert discovery_driver("absent", str(tmp_path)) == []


def test_get_info_unopenable(tmp_path):
    assert get_info(str(tmp_path / "missing")) == (None, None, None, None)


def test_format_devices():
    devs = [DevDescr(1, "1", 1, 0, "/dev/ttyUSB0"), DevDescr(1, "1", 1, 1, "/dev/ttyUSB1")]
    queried = []

    def info(port):
        queried.append(port)
        return ("huawei", None, None, "000000000000000")

    assert list(format_devices(devs, info)) == [
        "Bus: 1 Dev: 1 Conf: 1",
        "Manufacturer: huawei  Model: (null) IMEI: (null) IMSI: 000000000000000",
        "\tInterface: 0 Port: /dev/ttyUSB0",
        "\tInterface: 1 Port: /dev/ttyUSB1",
    ]
    assert queried == ["/dev/ttyUSB0"]


def test_format_devices_without_info():
    devs = [DevDescr(3, "2", 1, 0, "/dev/ttyUSB4")]
    lines = list(format_devices(devs, lambda port: (None, None, None, None)))
    assert lines == ["Bus: 3 Dev: 2 Conf: 1", "\tInterface: 0 Port: /dev/ttyUSB4"]