"""Ring buffer that mixes 16-bit signed linear audio from several streams."""

from __future__ import annotations

from array import array
from dataclasses import dataclass

from .ringbuffer import RingBuffer

__all__ = ["MixBuffer", "MixStream", "saturated_sum"]

_SAMPLE_MAX = 32767
_SAMPLE_MIN = -32768


def saturated_sum(target, source: bytes):
    """Add native-endian int16 samples of ``source`` into ``target`` with clipping.

    A trailing odd byte is ignored. Returns ``target``.
    """
    length = (len(source) // 2) * 2
    if length:
        mixed = array("h", bytes(target[:length]))
        extra = array("h", bytes(source[:length]))
        result = array(
            "h",
            (max(_SAMPLE_MIN, min(_SAMPLE_MAX, a + b)) for a, b in zip(mixed, extra)),
        )
        target[:length] = result.tobytes()
    return target


@dataclass(eq=False)
class MixStream:
    """Per-stream state: bytes this stream has in the buffer and its write position."""

    used: int = 0
    write: int = 0


class MixBuffer:
    """Buffer where every attached stream writes from the common read position.

    Data a stream writes over bytes already present is mixed in; data past the
    current end is appended.
    """

    def __init__(self, size: int) -> None:
        self.ring = RingBuffer(size)
        self._streams: list[MixStream] = []

    def attach(self, stream: MixStream) -> None:
        """Attach ``stream``, starting it at the current read position."""
        stream.used = 0
        stream.write = self.ring.read_pos
        self._streams.append(stream)

    def detach(self, stream: MixStream) -> None:
        """Detach ``stream``; raises ValueError if it is not attached."""
        self._streams.remove(stream)

    def free(self, stream: MixStream) -> int:
        """Bytes ``stream`` can still write."""
        return self.ring.size - stream.used

    def used(self) -> int:
        """Bytes available for reading."""
        return self.ring.used()

    def streams(self) -> int:
        """Number of attached streams."""
        return len(self._streams)

    def _mix_write(self, stream: MixStream, data: bytes) -> int:
        ring = self.ring
        saved_write, saved_count = ring.write_pos, ring.count
        ring.write_pos, ring.count = stream.write, stream.used
        try:
            written = ring.write_core(data, saturated_sum)
            stream.write, stream.used = ring.write_pos, ring.count
        finally:
            ring.write_pos, ring.count = saved_write, saved_count
        return written

    def write(self, stream: MixStream, data: bytes) -> int:
        """Add ``data`` for ``stream``; return how many bytes were accepted."""
        data = bytes(data)
        length = min(len(data), self.free(stream))
        if length > 0:
            mixable = self.ring.count - stream.used
            if length > mixable:
                if mixable:
                    self._mix_write(stream, data[:mixable])
                self.ring.write(data[mixable:length])
                stream.write = self.ring.write_pos
                stream.used = self.ring.count
            else:
                self._mix_write(stream, data[:length])
        return length

    def read_upd(self, length: int) -> int:
        """Consume up to ``length`` bytes and move every stream along."""
        consumed = self.ring.read_upd(length)
        ring = self.ring
        for stream in self._streams:
            stream.used = stream.used - length if stream.used > length else 0
            stream.write = ring.read_pos + stream.used
            if stream.write >= ring.size:
                stream.write -= ring.size
        return consumed

    def read_all(self) -> bytes:
        """Return all mixed data without consuming it."""
        return self.ring.read_all()

    def read_n(self, length: int) -> bytes | None:
        """Return the first ``length`` mixed bytes, or None if fewer are stored."""
        return self.ring.read_n(length)