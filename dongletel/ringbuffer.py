"""Fixed-size byte ring buffer."""

from __future__ import annotations

from collections.abc import Callable

from .memmem import memmem

__all__ = ["RingBuffer", "WriteMethod"]

WriteMethod = Callable[[memoryview, bytes], object]


def _copy(target: memoryview, source: bytes) -> None:
    target[:] = source


class RingBuffer:
    """A circular byte buffer with separate read and write positions.

    ``count`` bytes are stored starting at ``read_pos``; new data goes to ``write_pos``.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("ring buffer size must not be negative")
        self.size = size
        self.count = 0
        self.read_pos = 0
        self.write_pos = 0
        self._buffer = bytearray(size)
        self._view = memoryview(self._buffer)

    def used(self) -> int:
        """Number of bytes available for reading."""
        return self.count

    def free(self) -> int:
        """Number of bytes that can still be written."""
        return self.size - self.count

    def memcmp(self, mem: bytes) -> int:
        """Compare the start of the stored data with ``mem``.

        Returns 0 on a match, 1 on a mismatch and -1 when there is not enough data.
        """
        if self.count > 0 and len(mem) > 0 and self.count >= len(mem):
            return 0 if self.read_n(len(mem)) == bytes(mem) else 1
        return -1

    def _span(self, length: int) -> bytes:
        end = self.read_pos + length
        if end > self.size:
            return bytes(self._view[self.read_pos:]) + bytes(self._view[:end - self.size])
        return bytes(self._view[self.read_pos:end])

    def read_all(self) -> bytes:
        """Return all stored data without consuming it."""
        return self._span(self.count) if self.count > 0 else b""

    def read_n(self, length: int) -> bytes | None:
        """Return the first ``length`` stored bytes, or None if fewer are stored."""
        if self.count < length:
            return None
        return self._span(length) if length > 0 else b""

    def read_until_char(self, char: int | bytes) -> bytes | None:
        """Return the data before the first ``char``, or None if it is not stored."""
        if isinstance(char, int):
            char = bytes([char])
        if len(char) != 1:
            raise ValueError("expected a single byte")
        if self.count == 0:
            return None
        data = self.read_all()
        index = data.find(char)
        return data[:index] if index >= 0 else None

    def read_until_mem(self, mem: bytes) -> bytes | None:
        """Return the data before the first occurrence of ``mem``, or None."""
        if len(mem) == 1:
            return self.read_until_char(bytes(mem))
        if self.count > 0 and len(mem) > 0 and self.count >= len(mem):
            data = self.read_all()
            index = memmem(data, mem)
            if index >= 0:
                return data[:index]
        return None

    def read_upd(self, length: int) -> int:
        """Consume up to ``length`` bytes and return how many were consumed."""
        length = min(length, self.count)
        if length > 0:
            self.count -= length
            if self.count == 0:
                self.read_pos = 0
                self.write_pos = 0
            else:
                end = self.read_pos + length
                self.read_pos = end - self.size if end >= self.size else end
        return length

    def write_space(self) -> tuple[memoryview, ...]:
        """Return writable views over the free space, in write order."""
        free = self.free()
        if free == 0:
            return ()
        if self.write_pos + free > self.size:
            first = self._view[self.write_pos:]
            return (first, self._view[:free - len(first)])
        return (self._view[self.write_pos:self.write_pos + free],)

    def write_upd(self, length: int) -> int:
        """Commit up to ``length`` bytes written through ``write_space``."""
        length = min(length, self.free())
        if length > 0:
            end = self.write_pos + length
            self.write_pos = end - self.size if end > self.size else end
            self.count += length
        return length

    def write_core(self, data: bytes, method: WriteMethod) -> int:
        """Store ``data`` using ``method(target, source)``; return bytes stored.

        Data that does not fit into the free space is dropped.
        """
        data = bytes(data)
        length = min(len(data), self.free())
        if length > 0:
            end = self.write_pos + length
            if end > self.size:
                first = self.size - self.write_pos
                method(self._view[self.write_pos:], data[:first])
                method(self._view[:end - self.size], data[first:length])
                self.write_pos = end - self.size
            else:
                method(self._view[self.write_pos:end], data[:length])
                self.write_pos = 0 if end == self.size else end
            self.count += length
        return length

    def write(self, data: bytes) -> int:
        """Copy ``data`` into the buffer; return bytes stored."""
        return self.write_core(data, _copy)