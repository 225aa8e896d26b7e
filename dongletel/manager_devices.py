"""Rendering of the device list reported to the management interface."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .dc_config import DevState, PvtConfig, cw_setting2str, dev_state2str, dtmf_setting2str
from .helpers import (
    AST_PRES_ALLOWED_NETWORK_NUMBER,
    AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN,
    AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED,
    AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN,
    AST_PRES_NUMBER_NOT_AVAILABLE,
    AST_PRES_PROHIB_NETWORK_NUMBER,
    AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN,
    AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED,
    AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN,
)

__all__ = [
    "DeviceState",
    "yes_no",
    "render_device_entry",
    "render_devices_complete",
    "render_device_list",
]

_PRESENTATION_DESCRIPTIONS = {
    AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED: "Presentation Allowed, Not Screened",
    AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN: "Presentation Allowed, Passed Screen",
    AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN: "Presentation Allowed, Failed Screen",
    AST_PRES_ALLOWED_NETWORK_NUMBER: "Presentation Allowed, Network Number",
    AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED: "Presentation Prohibited, Not Screened",
    AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN: "Presentation Prohibited, Passed Screen",
    AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN: "Presentation Prohibited, Failed Screen",
    AST_PRES_PROHIB_NETWORK_NUMBER: "Presentation Prohibited, Network Number",
    AST_PRES_NUMBER_NOT_AVAILABLE: "Number Unavailable",
}


@dataclass
class DeviceState:
    """Run-time state of a device as shown in the device list."""

    state: str = ""
    audio_state: str = ""
    data_state: str = ""
    has_voice: bool = False
    has_sms: bool = False
    manufacturer: str = ""
    model: str = ""
    firmware: str = ""
    imei: str = ""
    imsi: str = ""
    gsm_registration_status: str = ""
    rssi: int = 0
    rssi_dbm: str = ""
    mode: str = ""
    submode: str = ""
    provider_name: str = ""
    location_area_code: str = ""
    cell_id: str = ""
    subscriber_number: str = ""
    sms_scenter: str = ""
    use_ucs2_encoding: bool = False
    cusd_use_7bit_encoding: bool = False
    cusd_use_ucs2_decoding: bool = False
    at_tasks: int = 0
    at_cmds: int = 0
    has_call_waiting: bool = False
    current_state: DevState = DevState.STOPPED
    desired_state: DevState = DevState.STOPPED
    channels: int = 0
    active: int = 0
    held: int = 0
    dialing: int = 0
    alerting: int = 0
    incoming: int = 0
    waiting: int = 0
    releasing: int = 0
    initializing: int = 0


def yes_no(flag: object) -> str:
    """'Yes' for a true value, 'No' otherwise."""
    return "Yes" if flag else "No"


def _describe_presentation(pres: int) -> str:
    if pres < 0:
        return "<Not set>"
    return _PRESENTATION_DESCRIPTIONS.get(pres, "unknown")


def _block(fields: Iterable[tuple[str, object]]) -> str:
    return "".join(f"{key}: {value}\r\n" for key, value in fields)


def render_device_entry(
    name: str, config: PvtConfig, state: DeviceState, action_id: str | None = None
) -> str:
    """Render one DongleDeviceEntry event, terminated by an empty line."""
    unique, shared = config.unique, config.shared
    fields: list[tuple[str, object]] = [("Event", "DongleDeviceEntry")]
    if action_id:
        fields.append(("ActionID", action_id))
    fields += [
        ("Device", name),
        ("AudioSetting", unique.audio_tty),
        ("DataSetting", unique.data_tty),
        ("IMEISetting", unique.imei),
        ("IMSISetting", unique.imsi),
        ("ChannelLanguage", shared.language),
        ("Context", shared.context),
        ("Exten", shared.exten),
        ("Group", shared.group),
        ("RXGain", shared.rxgain),
        ("TXGain", shared.txgain),
        ("U2DIAG", shared.u2diag),
        ("UseCallingPres", yes_no(shared.usecallingpres)),
        ("DefaultCallingPres", _describe_presentation(shared.callingpres)),
        ("AutoDeleteSMS", yes_no(shared.autodeletesms)),
        ("DisableSMS", yes_no(shared.disablesms)),
        ("ResetDongle", yes_no(shared.resetdongle)),
        ("SMSPDU", yes_no(shared.smsaspdu)),
        ("CallWaitingSetting", cw_setting2str(shared.callwaiting)),
        ("DTMF", dtmf_setting2str(shared.dtmf)),
        ("MinimalDTMFGap", shared.mindtmfgap),
        ("MinimalDTMFDuration", shared.mindtmfduration),
        ("MinimalDTMFInterval", shared.mindtmfinterval),
        ("State", state.state),
        ("AudioState", state.audio_state),
        ("DataState", state.data_state),
        ("Voice", yes_no(state.has_voice)),
        ("SMS", yes_no(state.has_sms)),
        ("Manufacturer", state.manufacturer),
        ("Model", state.model),
        ("Firmware", state.firmware),
        ("IMEIState", state.imei),
        ("IMSIState", state.imsi),
        ("GSMRegistrationStatus", state.gsm_registration_status),
        ("RSSI", f"{state.rssi}, {state.rssi_dbm}"),
        ("Mode", state.mode),
        ("Submode", state.submode),
        ("ProviderName", state.provider_name),
        ("LocationAreaCode", state.location_area_code),
        ("CellID", state.cell_id),
        ("SubscriberNumber", state.subscriber_number),
        ("SMSServiceCenter", state.sms_scenter),
        ("UseUCS2Encoding", yes_no(state.use_ucs2_encoding)),
        ("USSDUse7BitEncoding", yes_no(state.cusd_use_7bit_encoding)),
        ("USSDUseUCS2Decoding", yes_no(state.cusd_use_ucs2_decoding)),
        ("TasksInQueue", state.at_tasks),
        ("CommandsInQueue", state.at_cmds),
        ("CallWaitingState", "Enabled" if state.has_call_waiting else "Disabled"),
        ("CurrentDeviceState", dev_state2str(state.current_state)),
        ("DesiredDeviceState", dev_state2str(state.desired_state)),
        ("CallsChannels", state.channels),
        ("Active", state.active),
        ("Held", state.held),
        ("Dialing", state.dialing),
        ("Alerting", state.alerting),
        ("Incoming", state.incoming),
        ("Waiting", state.waiting),
        ("Releasing", state.releasing),
        ("Initializing", state.initializing),
    ]
    return _block(fields) + "\r\n"


def render_devices_complete(count: int, action_id: str | None = None) -> str:
    """Render the DongleShowDevicesComplete event closing a device list."""
    fields: list[tuple[str, object]] = [("Event", "DongleShowDevicesComplete")]
    if action_id:
        fields.append(("ActionID", action_id))
    fields += [("EventList", "Complete"), ("ListItems", count)]
    return _block(fields) + "\r\n"


def render_device_list(
    devices: Iterable[tuple[str, PvtConfig, DeviceState]],
    device: str | None = None,
    action_id: str | None = None,
) -> str:
    """Render entries for ``devices`` (only ``device`` if given) and the closing event."""
    entries = [
        render_device_entry(name, config, state, action_id)
        for name, config, state in devices
        if not device or device == name
    ]
    return "".join(entries) + render_devices_complete(len(entries), action_id)