# dongletel

Building blocks for working with GSM USB modems (voice-capable
"dongles") from Python. The package uses only the standard library.

## Modules

- `dongletel.pdu`: `parse_pdu(pdu, tpdu_length)` decodes the hex text
  of a received SMS-DELIVER PDU. It returns a `ParsedPdu` with `oa`
  (the originating address, with a leading `+` for international
  numbers), `oa_encoding`, `message` (the user data, still hex, with
  any user data header skipped) and `message_encoding`, a
  `StrEncoding`. Problems raise `PduError` with a description such as
  `"Unsupported DCS value"`.
- `dongletel.pdu_fields`: the field helpers: `digit2code` /
  `code2digit` for dial-digit semi-octets, `store_number` (swapped
  semi-octets, padded with `F`), `relative_validity` (minutes to the
  TP-VP octet), `parse_byte`, `parse_number`, `parse_sca` and
  `parse_timestamp`.
- `dongletel.ringbuffer`: `RingBuffer`, a fixed-size circular byte
  buffer. It has `write`, `read_all`, `read_n`, `read_until_char`,
  `read_until_mem`, `read_upd` to consume data, and `write_space` /
  `write_upd` for filling free space through memoryviews.
- `dongletel.mixbuffer`: `MixBuffer` and `MixStream` mix several
  streams of native-endian signed 16-bit samples into one buffer.
  `saturated_sum` adds samples with clipping.
- `dongletel.dc_config`: device configuration read from `(name, value)`
  pairs or a mapping. `SharedConfig.fill` applies inheritable settings,
  `UniqueConfig.from_section` reads a device's identity,
  `GlobalConfig.from_section` reads the general section including
  `jb*` jitter buffer options, and `PvtConfig.from_section` combines
  them. A device section that cannot be used raises `ValueError`.
- `dongletel.helpers`: `is_valid_phone_number`, `is_valid_ussd_string`,
  `at_clir_value` (caller presentation to the AT+CLIR parameter) and
  `sms_parameters` (textual validity and report options).
- `dongletel.manager_events`: `ManagerEvent` and the `event_*`
  functions build manager-interface events. `ManagerEvent.render()`
  gives the CRLF-separated text.
- `dongletel.manager_devices`: `render_device_list` and
  `render_device_entry` produce the device list events from a
  `PvtConfig` and a `DeviceState`.
- `dongletel.tty`: `open_tty` opens a serial port raw at 115200 baud
  and takes a `LOCK..<name>` file in `/var/lock` (or in the `lock_dir`
  you pass). `close_tty` releases it, and `write_all` writes a whole
  buffer to a descriptor.
- `dongletel.pdiscovery`: helpers for finding a modem's data and voice
  ports under sysfs (`lookup_device_ids`, `find_interfaces`,
  `find_port_name`). It also picks the AT command for the missing
  identifiers (`select_command`), pulls the IMEI / IMSI out of responses
  (`handle_response`, `handle_ati`, `handle_cimi`), and keeps them in a
  time-limited `DiscoveryCache`.

## Examples

```python
from dongletel.ringbuffer import RingBuffer

rb = RingBuffer(16)
rb.write(b"\r\nOK\r\n")
rb.used()                      # 6
rb.read_until_mem(b"OK")       # b"\r\n"
```

```python
from dongletel.dc_config import DtmfSetting, PvtConfig, SharedConfig

defaults = SharedConfig()
defaults.fill({"context": "dongle-incoming", "dtmf": "inband"})
cfg = PvtConfig.from_section(
    "dongle0", {"audio": "/dev/ttyUSB1", "data": "/dev/ttyUSB2"}, defaults
)
assert cfg.shared.dtmf is DtmfSetting.INBAND
```

```python
from dongletel.manager_events import event_device_status

event_device_status("dongle0", "Free").render()
# "Event: DongleStatus\r\nDevice: dongle0\r\nStatus: Free\r\n"
```

## Listing attached modems

```
dongletel-discovery [driver ...]
```

This scans `/sys/bus/usb/drivers/option` and any other drivers you name.
For each interface bound to a serial port it prints the bus, device path,
configuration and port. For interface 0 it also asks the modem for its
manufacturer, model, IMEI and IMSI.

## What the package does not do

- It does not run modems. There is no AT command queue, no call or
  audio channel handling, and no SMS or USSD sending.
- It does not build outgoing SMS PDUs. Only the field helpers for them
  are provided; `parse_pdu` handles received SMS-DELIVER PDUs only.
- It does not handle manager-interface actions. It only renders events
  and device lists as text; sending them somewhere is up to you.
- `dongletel.pdiscovery` does not open ports itself. You read the
  responses and pass them to `handle_response`.

## Running the tests

```
pip install -e .[test]
pytest
```