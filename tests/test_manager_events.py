import pytest

from dongletel.manager_events import (
    ManagerEvent,
    escape_newlines,
    event_call_state_change,
    event_cend,
    event_device_status,
    event_message,
    event_message_raw,
    event_new_sms,
    event_new_sms_base64,
    event_new_ussd,
    event_sent_notify,
    split_message_lines,
)


def test_escape_newlines():
    assert escape_newlines("a\r\nb") == "a\\r\\nb"


def test_escape_newlines_plain_text_unchanged():
    assert escape_newlines("hello world") == "hello world"


@pytest.mark.parametrize(
    "message, expected",
    [
        ("one\r\ntwo", ["one", "two"]),
        ("\r\n\r\n", []),
        ("single", ["single"]),
        ("a\nb\rc", ["a", "b", "c"]),
    ],
)
def test_split_message_lines(message, expected):
    assert split_message_lines(message) == expected


def test_render_format():
    event = ManagerEvent("Test", (("Key", "Value"),), trailer="X")
    assert event.render() == "Event: Test\r\nKey: Value\r\nX"


def test_event_message_escapes():
    event = event_message("DongleNewCMGR", "dongle0", "line1\r\nline2")
    assert dict(event.fields)["Message"] == "line1\\r\\nline2"
    assert "\n" not in dict(event.fields)["Message"]


def test_event_message_raw_keeps_text():
    event = event_message_raw("DonglePortFail", "/dev/ttyUSB1", "Response Failed")
    assert event.name == "DonglePortFail"
    assert event.fields == (("Device", "/dev/ttyUSB1"), ("Message", "Response Failed"))


def test_event_new_ussd_lines():
    event = event_new_ussd("dongle0", "Balance\r\n\r\nbye")
    fields = dict(event.fields)
    assert event.name == "DongleNewUSSD"
    assert fields["LineCount"] == "2"
    assert fields["MessageLine0"] == "Balance"
    assert fields["MessageLine1"] == "bye"
    assert event.render().endswith("MessageLine1: bye\r\n")


def test_event_new_sms_has_trailer():
    event = event_new_sms("dongle0", "+100", "hi")
    fields = dict(event.fields)
    assert fields["From"] == "+100"
    assert fields["LineCount"] == "1"
    assert event.render().endswith("MessageLine0: hi\r\n\r\n")


def test_event_new_sms_base64():
    event = event_new_sms_base64("dongle0", "+100", "aGk=")
    assert event.name == "DongleNewSMSBase64"
    assert dict(event.fields)["Message"] == "aGk="


def test_event_cend_fields():
    event = event_cend("dongle0", 1, 30, 2, 16)
    assert event.name == "DongleCEND"
    assert [key for key, _ in event.fields] == [
        "Device", "CallIdx", "Duration", "EndStatus", "CCCause"
    ]
    assert dict(event.fields)["Duration"] == "30"


def test_event_call_state_change():
    event = event_call_state_change("dongle0", 3, "active")
    assert event.name == "DongleCallStateChange"
    assert dict(event.fields)["NewState"] == "active"
    assert dict(event.fields)["CallIdx"] == "3"


def test_event_device_status():
    event = event_device_status("dongle0", "Connect")
    assert event.render() == "Event: DongleStatus\r\nDevice: dongle0\r\nStatus: Connect\r\n"


def test_event_sent_notify_name_and_nil_id():
    event = event_sent_notify("dongle0", "SMS", None, "Sent")
    assert event.name == "DongleSMSStatus"
    assert dict(event.fields)["ID"] == "(nil)"


def test_event_sent_notify_int_id_is_hex():
    event = event_sent_notify("dongle0", "USSD", 255, "Sent")
    assert dict(event.fields)["ID"] == hex(255)


def test_event_sent_notify_name_truncated():
    event = event_sent_notify("dongle0", "X" * 60, None, "Sent")
    assert len(event.name) == 39
    assert event.name.startswith("Dongle")