import pytest

from dongletel.pdiscovery import (
    DiscoveryCache,
    DiscoveryRequest,
    DiscoveryResult,
    InterfaceType,
    find_interfaces,
    find_port_name,
    handle_ati,
    handle_cimi,
    handle_response,
    lookup_device_ids,
    read_hex_id,
    request_matches,
    select_command,
)

IMEI = "123456789012345"
IMSI = "001010000000001"


def test_lookup_known_device():
    device = lookup_device_ids(0x12D1, 0x1001)
    assert device.interfaces == (2, 1)
    assert lookup_device_ids(0x12D1, 0x1436).interfaces == (4, 3)


def test_lookup_unknown_device():
    assert lookup_device_ids(0x12D1, 0x1465) is None


@pytest.mark.parametrize(
    ("content", "expected"),
    [("12d1\n", 0x12D1), ("0x1f", 0x1F), ("  02\n", 2)],
)
def test_read_hex_id(tmp_path, content, expected):
    path = tmp_path / "id"
    path.write_text(content)
    assert read_hex_id(path) == expected


def test_read_hex_id_missing_or_garbage(tmp_path):
    assert read_hex_id(tmp_path / "missing") is None
    bad = tmp_path / "bad"
    bad.write_text("zz")
    assert read_hex_id(bad) is None


def test_handle_ati_finds_imei():
    text = f"ATI\r\r\nManufacturer: maker\r\nIMEI: {IMEI}\r\n\r\nOK\r\n"
    assert handle_ati(text) == IMEI


@pytest.mark.parametrize(
    "text",
    [f"\r\nIMEI: {IMEI[:-1]}\r\n", f"\r\nIMEI: {IMEI}", "no identity here"],
)
def test_handle_ati_rejects(text):
    assert handle_ati(text) is None


def test_handle_cimi_skips_short_line():
    assert handle_cimi(f"\r\n123\r\n{IMSI}\r\n") == IMSI


@pytest.mark.parametrize("text", [f"\r\n{IMSI[:-2]}\r\n", f"\r\n{IMSI}", f"{IMSI}\r\n"])
def test_handle_cimi_rejects(text):
    assert handle_cimi(text) is None


def test_handle_response_collects_both():
    request = DiscoveryRequest("dev", IMEI, IMSI)
    result = DiscoveryResult()
    text = f"\r\nIMEI: {IMEI}\r\n\r\n{IMSI}\r\n\r\nOK\r\n"
    assert handle_response(request, text, result) is True
    assert (result.imei, result.imsi) == (IMEI, IMSI)


def test_handle_response_not_done_and_not_wanted():
    request = DiscoveryRequest("dev", None, IMSI)
    result = DiscoveryResult()
    assert handle_response(request, f"\r\nIMEI: {IMEI}\r\n", result) is False
    assert result.imei is None


def test_handle_response_bytes_and_empty():
    request = DiscoveryRequest("dev", "ANY", "ANY")
    assert handle_response(request, b"\r\nERROR\r\n", DiscoveryResult()) is True
    assert handle_response(request, "", DiscoveryResult()) is False


def test_request_normalizes_empty():
    request = DiscoveryRequest("dev", "", "")
    assert (request.imei, request.imsi) == (None, None)


@pytest.mark.parametrize(
    ("imei", "imsi", "command"),
    [
        (IMEI, IMSI, b"ATI; +CIMI\r"),
        (IMEI, None, b"ATI\r"),
        (None, IMSI, b"AT+CIMI\r"),
        (None, None, b"ATI; +CIMI\r"),
    ],
)
def test_select_command(imei, imsi, command):
    assert select_command(DiscoveryRequest("dev", imei, imsi), DiscoveryResult()) == command


def test_select_command_skips_known():
    result = DiscoveryResult(imei=IMEI)
    assert select_command(DiscoveryRequest("dev", IMEI, IMSI), result) == b"AT+CIMI\r"


def _interface(device_dir, name, number, tty):
    iface = device_dir / name
    iface.mkdir(parents=True)
    (iface / "bInterfaceNumber").write_text(f"{number:02x}\n")
    port = iface / tty
    port.mkdir()
    (port / "port_number").write_text("0\n")
    return iface


def test_find_port_name(tmp_path):
    iface = _interface(tmp_path, "1-1:1.0", 0, "ttyUSB0")
    assert find_port_name(iface) == "/dev/ttyUSB0"


def test_find_port_name_none(tmp_path):
    (tmp_path / "ttyUSB0").mkdir()
    (tmp_path / "ttyUSB1" / "port_number").mkdir(parents=True)
    assert find_port_name(tmp_path) is None


def test_find_interfaces(tmp_path):
    for number in range(3):
        _interface(tmp_path, f"1-1:1.{number}", number, f"ttyUSB{number}")
    (tmp_path / "power").mkdir()
    ports = find_interfaces(tmp_path, lookup_device_ids(0x12D1, 0x1001))
    assert ports[InterfaceType.DATA] == "/dev/ttyUSB2"
    assert ports[InterfaceType.VOICE] == "/dev/ttyUSB1"


def test_find_interfaces_missing(tmp_path):
    _interface(tmp_path, "1-1:1.0", 0, "ttyUSB0")
    assert find_interfaces(tmp_path, lookup_device_ids(0x12D1, 0x1001)) == [None, None]


def test_request_matches():
    result = DiscoveryResult(IMEI, IMSI)
    assert request_matches(DiscoveryRequest("d", IMEI, None), result)
    assert request_matches(DiscoveryRequest("d", None, None), DiscoveryResult())
    assert not request_matches(DiscoveryRequest("d", IMEI, IMSI), DiscoveryResult(IMEI))


def _ports():
    return ["/dev/ttyUSB2", "/dev/ttyUSB1"]


def test_cache_update_and_search():
    cache = DiscoveryCache(60)
    cache.update(DiscoveryResult(IMEI, IMSI, _ports()), False)
    item = cache.search(_ports())
    assert item.result.imei == IMEI
    assert item.failed is False
    assert cache.search(["/dev/ttyUSB2", None]) is None


def test_cache_expired_entries_dropped():
    cache = DiscoveryCache(-1)
    cache.update(DiscoveryResult(IMEI, IMSI, _ports()), False)
    assert cache.search(_ports()) is None
    assert cache.items() == []


def test_cache_lookup_complete():
    cache = DiscoveryCache(60)
    cache.update(DiscoveryResult(IMEI, IMSI, _ports()), False)
    result = DiscoveryResult(ports=_ports())
    assert cache.lookup(DiscoveryRequest("d", IMEI, IMSI), result) is False
    assert (result.imei, result.imsi) == (IMEI, IMSI)


def test_cache_lookup_failed_entry():
    cache = DiscoveryCache(60)
    cache.update(DiscoveryResult(ports=_ports()), True)
    result = DiscoveryResult(ports=_ports())
    assert cache.lookup(DiscoveryRequest("d", IMEI, IMSI), result) is True


def test_cache_update_replaces_and_clear():
    cache = DiscoveryCache(60)
    cache.update(DiscoveryResult(IMEI, None, _ports()), False)
    cache.update(DiscoveryResult(IMEI, IMSI, _ports()), False)
    items = cache.items()
    assert len(items) == 1
    assert items[0].imsi == IMSI
    cache.clear()
    assert cache.items() == []


def test_cache_stores_copies():
    cache = DiscoveryCache(60)
    result = DiscoveryResult(IMEI, IMSI, _ports())
    cache.update(result, False)
    result.ports[0] = "/dev/other"
    assert cache.items()[0].ports == _ports()