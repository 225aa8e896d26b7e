"""GSM USB modem helpers: SMS PDU decoding, ring and mix buffers, device configuration, manager events, serial port locking and port discovery."""

__version__ = "0.1.0"