"""Device configuration: shared, unique and global settings read from config sections."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Union

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
from .mutils import enum2str, str2enum

__all__ = [
    "CONFIG_FILE",
    "DEVNAMELEN",
    "IMEI_SIZE",
    "IMSI_SIZE",
    "DEVPATHLEN",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MINDTMFGAP",
    "DEFAULT_MINDTMFDURATION",
    "DEFAULT_MINDTMFINTERVAL",
    "DEFAULT_DISCOVERY_INT",
    "DEV_STATE_NAMES",
    "DevState",
    "CallWaiting",
    "DtmfSetting",
    "JitterBufferConfig",
    "SharedConfig",
    "UniqueConfig",
    "GlobalConfig",
    "PvtConfig",
    "is_true",
    "parse_caller_presentation",
    "dtmf_str2setting",
    "dtmf_setting2str",
    "cw_setting2str",
    "dev_state2str",
]

logger = logging.getLogger(__name__)

CONFIG_FILE = "dongle.conf"
DEVNAMELEN = 31
IMEI_SIZE = 15
IMSI_SIZE = 15
DEVPATHLEN = 256

_MAX_CONTEXT = 80
_MAX_EXTENSION = 80
_MAX_LANGUAGE = 40
_JB_IMPL_NAME_SIZE = 12

DEFAULT_LANGUAGE = "en"
DEFAULT_MINDTMFGAP = 45
DEFAULT_MINDTMFDURATION = 80
DEFAULT_MINDTMFINTERVAL = 200
DEFAULT_DISCOVERY_INT = 60


class DevState(IntEnum):
    """Device life-cycle state."""

    STOPPED = 0
    RESTARTED = 1
    REMOVED = 2
    STARTED = 3


DEV_STATE_NAMES = ("stop", "restart", "remove", "start")


class CallWaiting(IntEnum):
    """Call waiting setting."""

    DISALLOWED = 0
    ALLOWED = 1
    AUTO = 2


_CW_NAMES = ("disabled", "allowed", "auto")


class DtmfSetting(IntEnum):
    """Incoming DTMF detection mode."""

    OFF = 0
    INBAND = 1
    RELAX = 2


_DTMF_NAMES = ("off", "inband", "relax")

_TRUE_WORDS = frozenset({"yes", "true", "y", "t", "1", "on"})
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_PRESENTATIONS = {
    "allowed_not_screened": AST_PRES_ALLOWED_USER_NUMBER_NOT_SCREENED,
    "allowed_passed_screen": AST_PRES_ALLOWED_USER_NUMBER_PASSED_SCREEN,
    "allowed_failed_screen": AST_PRES_ALLOWED_USER_NUMBER_FAILED_SCREEN,
    "allowed": AST_PRES_ALLOWED_NETWORK_NUMBER,
    "prohib_not_screened": AST_PRES_PROHIB_USER_NUMBER_NOT_SCREENED,
    "prohib_passed_screen": AST_PRES_PROHIB_USER_NUMBER_PASSED_SCREEN,
    "prohib_failed_screen": AST_PRES_PROHIB_USER_NUMBER_FAILED_SCREEN,
    "prohib": AST_PRES_PROHIB_NETWORK_NUMBER,
    "unavailable": AST_PRES_NUMBER_NOT_AVAILABLE,
}

Section = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def is_true(value: str | None) -> bool:
    """True for yes/true/y/t/1/on in any case; False otherwise or for None."""
    return value is not None and value.strip().lower() in _TRUE_WORDS


def parse_caller_presentation(value: str) -> int:
    """Return the caller presentation code named by ``value``, or -1."""
    return _PRESENTATIONS.get(value.strip().lower(), -1)


def dtmf_str2setting(value: str) -> DtmfSetting | None:
    """Parse a DTMF setting name; None if it is not one."""
    index = str2enum(value, _DTMF_NAMES)
    return None if index is None else DtmfSetting(index)


def dtmf_setting2str(setting: int) -> str:
    """Name of a DTMF setting, or 'unknown'."""
    return enum2str(int(setting), _DTMF_NAMES)


def cw_setting2str(setting: int) -> str:
    """Name of a call waiting setting, or 'unknown'."""
    return enum2str(int(setting), _CW_NAMES)


def dev_state2str(state: int) -> str:
    """Name of a device state, or 'unknown'."""
    return enum2str(int(state), DEV_STATE_NAMES)


def _strtol(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _limit(text: str, size: int) -> str:
    return text[:size - 1]


def _pairs(section: Section) -> list[tuple[str, str]]:
    if isinstance(section, Mapping):
        return list(section.items())
    return list(section)


def _retrieve(pairs: Iterable[tuple[str, str]], name: str) -> str | None:
    wanted = name.lower()
    return next((value for key, value in pairs if key.lower() == wanted), None)


@dataclass
class JitterBufferConfig:
    """Jitter buffer settings; disabled by default."""

    enabled: bool = False
    forced: bool = False
    log: bool = False
    max_size: int = -1
    resync_threshold: int = -1
    impl: str = ""
    target_extra: int = -1

    def read_option(self, name: str, value: str) -> bool:
        """Apply a ``jb*`` option; return False if ``name`` is not a jitter buffer option."""
        lowered = name.lower()
        if not lowered.startswith("jb"):
            return False
        match lowered[2:]:
            case "enable":
                self.enabled = is_true(value)
            case "force":
                self.forced = is_true(value)
            case "maxsize":
                number = _strtol(value) or 0
                if number > 0:
                    self.max_size = number
            case "resyncthreshold":
                number = _strtol(value) or 0
                if number > 0:
                    self.resync_threshold = number
            case "impl":
                if value:
                    self.impl = _limit(value, _JB_IMPL_NAME_SIZE)
            case "targetextra":
                number = _strtol(value)
                if number is not None:
                    self.target_extra = number
            case "log":
                self.log = is_true(value)
            case _:
                return False
        return True


@dataclass
class SharedConfig:
    """Settings a device section may inherit from the defaults section."""

    context: str = "default"
    exten: str = ""
    language: str = DEFAULT_LANGUAGE
    group: int = 0
    rxgain: int = 0
    txgain: int = 0
    u2diag: int = -1
    callingpres: int = -1
    usecallingpres: bool = False
    autodeletesms: bool = False
    resetdongle: bool = True
    disablesms: bool = False
    smsaspdu: bool = False
    initstate: DevState = DevState.STARTED
    callwaiting: CallWaiting = CallWaiting.AUTO
    dtmf: DtmfSetting = DtmfSetting.RELAX
    mindtmfgap: int = DEFAULT_MINDTMFGAP
    mindtmfduration: int = DEFAULT_MINDTMFDURATION
    mindtmfinterval: int = DEFAULT_MINDTMFINTERVAL

    def fill(self, items: Section) -> None:
        """Override settings from the ``(name, value)`` pairs of a section."""
        for name, value in _pairs(items):
            match name.lower():
                case "context":
                    self.context = _limit(value, _MAX_CONTEXT)
                case "exten":
                    self.exten = _limit(value, _MAX_EXTENSION)
                case "language":
                    self.language = _limit(value, _MAX_LANGUAGE)
                case "group":
                    self.group = _strtol(value) or 0
                case "rxgain":
                    self.rxgain = _strtol(value) or 0
                case "txgain":
                    self.txgain = _strtol(value) or 0
                case "u2diag":
                    number = _strtol(value)
                    self.u2diag = -1 if number is None else number
                case "callingpres":
                    pres = parse_caller_presentation(value)
                    if pres == -1:
                        number = _strtol(value)
                        pres = -1 if number is None else number
                    self.callingpres = pres
                case "usecallingpres":
                    self.usecallingpres = is_true(value)
                case "autodeletesms":
                    self.autodeletesms = is_true(value)
                case "resetdongle":
                    self.resetdongle = is_true(value)
                case "disablesms":
                    self.disablesms = is_true(value)
                case "smsaspdu":
                    self.smsaspdu = is_true(value)
                case "disable":
                    self.initstate = DevState.REMOVED if is_true(value) else DevState.STARTED
                case "initstate":
                    index = str2enum(value, DEV_STATE_NAMES)
                    if index in (DevState.STOPPED, DevState.STARTED, DevState.REMOVED):
                        self.initstate = DevState(index)
                    else:
                        logger.error(
                            "Invalid value for 'initstate': '%s', must be one of "
                            "'stop' 'start' 'remove' default is 'start'",
                            value,
                        )
                case "callwaiting":
                    if value.lower() != "auto":
                        self.callwaiting = (
                            CallWaiting.ALLOWED if is_true(value) else CallWaiting.DISALLOWED
                        )
                case "dtmf":
                    setting = dtmf_str2setting(value)
                    if setting is not None:
                        self.dtmf = setting
                    else:
                        logger.error(
                            "Invalid value for 'dtmf': '%s', setting default 'relax'", value
                        )
                case "mindtmfgap":
                    number = _strtol(value)
                    if number is None or number < 0:
                        logger.error(
                            "Invalid value for 'mindtmfgap' '%s', setting default %d",
                            value, DEFAULT_MINDTMFGAP,
                        )
                        number = DEFAULT_MINDTMFGAP
                    self.mindtmfgap = number
                case "mindtmfduration":
                    number = _strtol(value)
                    if number is None or number < 0:
                        logger.error(
                            "Invalid value for 'mindtmfduration' '%s', setting default %d",
                            value, DEFAULT_MINDTMFDURATION,
                        )
                        number = DEFAULT_MINDTMFDURATION
                    self.mindtmfduration = number
                case "mindtmfinterval":
                    number = _strtol(value)
                    self.mindtmfinterval = 0 if number is None else number
                    if number is None or number < 0:
                        logger.error(
                            "Invalid value for 'mindtmfinterval' '%s', setting default %d",
                            value, DEFAULT_MINDTMFINTERVAL,
                        )
                        self.mindtmfduration = DEFAULT_MINDTMFINTERVAL


@dataclass
class UniqueConfig:
    """Settings that identify one device."""

    id: str = ""
    audio_tty: str = ""
    data_tty: str = ""
    imei: str = ""
    imsi: str = ""

    @classmethod
    def from_section(cls, name: str, section: Section) -> UniqueConfig:
        """Read the device identity from section ``name``.

        Raises ValueError when the device must be skipped.
        """
        pairs = _pairs(section)
        audio_tty = _retrieve(pairs, "audio")
        data_tty = _retrieve(pairs, "data")
        imei = _retrieve(pairs, "imei")
        imsi = _retrieve(pairs, "imsi")

        if imei is not None and len(imei) != IMEI_SIZE:
            logger.warning("[%s] Ignore invalid IMEI value '%s'", name, imei)
            imei = None
        if imsi is not None and len(imsi) != IMSI_SIZE:
            logger.warning("[%s] Ignore invalid IMSI value '%s'", name, imsi)
            imsi = None

        if audio_tty is None and imei is None and imsi is None:
            raise ValueError(f"Skipping device {name}. Missing required audio_tty setting")
        if data_tty is None and imei is None and imsi is None:
            raise ValueError(f"Skipping device {name}. Missing required data_tty setting")
        if (data_tty is None) != (audio_tty is None):
            raise ValueError(
                f"Skipping device {name}. data_tty and audio_tty should use together"
            )

        return cls(
            id=_limit(name, DEVNAMELEN),
            audio_tty=_limit(audio_tty or "", DEVPATHLEN),
            data_tty=_limit(data_tty or "", DEVPATHLEN),
            imei=imei or "",
            imsi=imsi or "",
        )


@dataclass
class GlobalConfig:
    """Settings of the general section."""

    jbconf: JitterBufferConfig = field(default_factory=JitterBufferConfig)
    discovery_interval: int = DEFAULT_DISCOVERY_INT

    @classmethod
    def from_section(cls, section: Section) -> GlobalConfig:
        """Read the general section."""
        pairs = _pairs(section)
        config = cls()
        interval = _retrieve(pairs, "interval")
        if interval is not None:
            number = _strtol(interval)
            if number is None:
                logger.info(
                    "Error parsing 'interval' in general section, using default value %d",
                    config.discovery_interval,
                )
            else:
                config.discovery_interval = number
        for name, value in pairs:
            config.jbconf.read_option(name, value)
        return config


@dataclass
class PvtConfig:
    """Complete configuration of one device."""

    unique: UniqueConfig
    shared: SharedConfig

    @classmethod
    def from_section(cls, name: str, section: Section, parent: SharedConfig) -> PvtConfig:
        """Read section ``name``, inheriting shared settings from ``parent``.

        Raises ValueError when the device must be skipped.
        """
        pairs = _pairs(section)
        unique = UniqueConfig.from_section(name, pairs)
        shared = replace(parent)
        shared.fill(pairs)
        return cls(unique=unique, shared=shared)