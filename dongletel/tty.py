"""Serial port opening with UUCP-style lock files."""

from __future__ import annotations

import errno
import os
import re
import termios
from contextlib import suppress

__all__ = [
    "DEFAULT_LOCK_DIR",
    "lock_path",
    "lock_create",
    "lock_try",
    "open_tty",
    "close_tty",
    "write_all",
]

DEFAULT_LOCK_DIR = "/var/lock"

_WRITE_RETRIES = 10
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def lock_path(devname: str, lock_dir: str = DEFAULT_LOCK_DIR) -> str:
    """Return the lock file path for ``devname``, following symlinks when possible."""
    try:
        devname = os.path.realpath(devname, strict=True)
    except OSError:
        pass
    basename = devname.rsplit("/", 1)[-1]
    return os.path.join(lock_dir, f"LOCK..{basename}")


def lock_create(lockfile: str) -> int:
    """Create ``lockfile`` holding our process id; return the number of bytes written."""
    fd = os.open(lockfile, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o444)
    try:
        return os.write(fd, str(os.getpid()).encode("ascii"))
    finally:
        os.close(fd)


def _process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def lock_try(devname: str, lock_dir: str = DEFAULT_LOCK_DIR) -> int:
    """Take the lock of ``devname``.

    Returns the id of a live process holding it, or 0 after the lock was taken.
    """
    name = lock_path(devname, lock_dir)
    pid = 0
    try:
        with open(name, "rb") as lock:
            content = lock.read(20)
    except OSError:
        content = b""
    if content:
        match = _LEADING_INT.match(content.decode("ascii", "replace"))
        candidate = int(match.group(1)) if match else 0
        if candidate > 0 and _process_alive(candidate):
            pid = candidate
    if pid == 0:
        with suppress(OSError):
            os.unlink(name)
        with suppress(OSError):
            lock_create(name)
    return pid


def open_tty(dev: str, lock_dir: str = DEFAULT_LOCK_DIR) -> int:
    """Open ``dev`` raw at 115200 baud with hardware flow control and lock it.

    Returns the file descriptor; raises OSError if it cannot be opened, is not a
    terminal, or is locked by another live process.
    """
    fd = os.open(dev, os.O_RDWR | os.O_NOCTTY)
    try:
        try:
            attrs = termios.tcgetattr(fd)
        except termios.error as exc:
            raise OSError(errno.ENOTTY, f"{dev} is not a terminal") from exc
        attrs[0] = 0
        attrs[1] = 0
        attrs[2] = (
            termios.B115200 | termios.CS8 | termios.CREAD | getattr(termios, "CRTSCTS", 0)
        )
        attrs[3] = 0
        attrs[4] = termios.B115200
        attrs[5] = termios.B115200
        cc = list(attrs[6])
        cc[termios.VMIN] = 1
        cc[termios.VTIME] = 0
        attrs[6] = cc
        with suppress(termios.error):
            termios.tcsetattr(fd, termios.TCSAFLUSH, attrs)

        pid = lock_try(dev, lock_dir)
        if pid:
            raise OSError(errno.EBUSY, f"{dev} is locked by process {pid}")
    except BaseException:
        os.close(fd)
        raise
    return fd


def close_tty(dev: str, fd: int, lock_dir: str = DEFAULT_LOCK_DIR) -> None:
    """Close ``fd`` and remove the lock of ``dev``."""
    os.close(fd)
    with suppress(FileNotFoundError):
        os.unlink(lock_path(dev, lock_dir))


def write_all(fd: int, data: bytes) -> int:
    """Write all of ``data`` to ``fd``, retrying interrupted writes; return bytes written."""
    view = memoryview(bytes(data))
    total = 0
    retries = _WRITE_RETRIES
    while view:
        try:
            written = os.write(fd, view)
        except (InterruptedError, BlockingIOError):
            retries -= 1
            if retries:
                continue
            break
        except OSError:
            break
        if written <= 0:
            break
        retries = _WRITE_RETRIES
        view = view[written:]
        total += written
    return total