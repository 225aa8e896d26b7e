[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dongletel"
version = "0.1.0"
description = "Building blocks for GSM USB modem telephony: SMS PDU decoding, ring and mix buffers, device configuration, manager events, serial port locking and port discovery"
requires-python = ">=3.10"
dependencies = []
keywords = ["gsm", "sms", "pdu", "usb modem", "telephony", "ussd", "ring buffer", "serial"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Telephony",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dongletel-discovery = "dongletel.discovery:main"

[tool.hatch.build.targets.wheel]
packages = ["dongletel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
