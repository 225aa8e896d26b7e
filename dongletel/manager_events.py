"""Events reported to the management interface."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "ManagerEvent",
    "escape_newlines",
    "split_message_lines",
    "event_message",
    "event_message_raw",
    "event_new_ussd",
    "event_new_sms",
    "event_new_sms_base64",
    "event_cend",
    "event_call_state_change",
    "event_device_status",
    "event_sent_notify",
]

_EVENT_NAME_SIZE = 40
_LINE_BREAK = re.compile(r"[\r\n]")


def _format_id(msg_id: object) -> str:
    if msg_id is None:
        return "(nil)"
    if isinstance(msg_id, int):
        return hex(msg_id)
    return str(msg_id)


@dataclass(frozen=True)
class ManagerEvent:
    """A named event with ordered header fields and optional trailing text."""

    name: str
    fields: tuple[tuple[str, str], ...] = ()
    trailer: str = ""

    def render(self) -> str:
        """Render the event in the CRLF-separated header form."""
        body = "".join(f"{key}: {value}\r\n" for key, value in self.fields)
        return f"Event: {self.name}\r\n{body}{self.trailer}"


def escape_newlines(text: str) -> str:
    """Replace CR and LF with the two-character escapes ``\\r`` and ``\\n``."""
    return text.replace("\r", "\\r").replace("\n", "\\n")


def split_message_lines(message: str) -> list[str]:
    """Split ``message`` at every CR or LF, dropping empty pieces."""
    return [line for line in _LINE_BREAK.split(message) if line]


def event_message_raw(event: str, devname: str, message: str) -> ManagerEvent:
    """Event carrying ``message`` unchanged."""
    return ManagerEvent(event, (("Device", devname), ("Message", message)))


def event_message(event: str, devname: str, message: str) -> ManagerEvent:
    """Event carrying ``message`` with line breaks escaped."""
    return event_message_raw(event, devname, escape_newlines(message))


def _message_lines(message: str) -> list[tuple[str, str]]:
    return [
        (f"MessageLine{index}", line)
        for index, line in enumerate(split_message_lines(message))
    ]


def event_new_ussd(devname: str, message: str) -> ManagerEvent:
    """DongleNewUSSD event with the message split into numbered lines."""
    lines = _message_lines(message)
    return ManagerEvent(
        "DongleNewUSSD",
        (("Device", devname), ("LineCount", str(len(lines))), *lines),
    )


def event_new_sms(devname: str, number: str, message: str) -> ManagerEvent:
    """DongleNewSMS event with the message split into numbered lines."""
    lines = _message_lines(message)
    return ManagerEvent(
        "DongleNewSMS",
        (("Device", devname), ("From", number), ("LineCount", str(len(lines))), *lines),
        trailer="\r\n",
    )


def event_new_sms_base64(devname: str, number: str, message_base64: str) -> ManagerEvent:
    """DongleNewSMSBase64 event carrying the encoded message."""
    return ManagerEvent(
        "DongleNewSMSBase64",
        (("Device", devname), ("From", number), ("Message", message_base64)),
    )


def event_cend(
    devname: str, call_index: int, duration: int, end_status: int, cc_cause: int
) -> ManagerEvent:
    """DongleCEND event describing the end of a call."""
    return ManagerEvent(
        "DongleCEND",
        (
            ("Device", devname),
            ("CallIdx", str(call_index)),
            ("Duration", str(duration)),
            ("EndStatus", str(end_status)),
            ("CCCause", str(cc_cause)),
        ),
    )


def event_call_state_change(devname: str, call_index: int, newstate: str) -> ManagerEvent:
    """DongleCallStateChange event."""
    return ManagerEvent(
        "DongleCallStateChange",
        (("Device", devname), ("CallIdx", str(call_index)), ("NewState", newstate)),
    )


def event_device_status(devname: str, newstate: str) -> ManagerEvent:
    """DongleStatus event."""
    return ManagerEvent("DongleStatus", (("Device", devname), ("Status", newstate)))


def event_sent_notify(devname: str, kind: str, msg_id: object, result: str) -> ManagerEvent:
    """Dongle<kind>Status event reporting the outcome of a queued message."""
    name = f"Dongle{kind}Status"[:_EVENT_NAME_SIZE - 1]
    return ManagerEvent(
        name,
        (("Device", devname), ("ID", _format_id(msg_id)), ("Status", result)),
    )