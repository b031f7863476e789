from __future__ import annotations
import string
import struct
from typing import Callable, Optional, TypeVar

from binshape.binary.errors import LiteralMismatch, OutOfBounds
from binshape.models.common import ByteOrder

T = TypeVar("T")

# fixed-width text fields are padded with spaces and/or NULs on either side
_PADDING = string.whitespace + "\x00"


class Cursor:
    __slots__ = ("buf", "pos", "mark", "_order")

    def __init__(self, data: bytes | bytearray | memoryview, byte_order: ByteOrder = ByteOrder.BIG):
        self.buf = memoryview(bytes(data))
        self.pos = 0
        self.mark: Optional[int] = None
        self._order = ByteOrder(byte_order)

    def length(self) -> int: return len(self.buf)
    def remaining(self) -> int: return len(self.buf) - self.pos
    def tell(self) -> int: return self.pos

    @property
    def byte_order(self) -> ByteOrder:
        return self._order

    def set_byte_order(self, order: ByteOrder) -> None:
        self._order = ByteOrder(order)

    # positioning
    def jump(self, pos: int) -> None:
        if not (0 <= pos <= len(self.buf)):
            raise OutOfBounds(self.pos, pos - self.pos, len(self.buf))
        self.pos = pos

    def skip(self, n: int) -> None: self.jump(self.pos + n)

    def peek(self, n: int, procedure: Callable[[], T]) -> T:
        """
        Run `procedure` with the cursor moved `n` bytes ahead (or back), then
        put the cursor back where it was. The position is restored whether the
        procedure returns or raises; its exception is propagated unchanged.
        """
        saved, outer_mark = self.pos, self.mark
        self.skip(n)
        self.mark = saved
        try:
            return procedure()
        finally:
            self.pos = saved
            self.mark = outer_mark

    def take(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("cannot take a negative number of bytes")
        end = self.pos + n
        if end > len(self.buf):
            raise OutOfBounds(self.pos, n, len(self.buf))
        out = self.buf[self.pos:end].tobytes()
        self.pos = end
        return out

    # integers in the configured byte order
    def read_int(self, width: int, signed: bool = False) -> int:
        if width < 1:
            raise ValueError("int width must be at least 1 byte")
        return int.from_bytes(self.take(width), self._order.value, signed=signed)

    def _unpack(self, fmt: str, n: int):
        return struct.unpack(self._order.struct_prefix + fmt, self.take(n))[0]
    def u8(self) -> int:  return self._unpack("B", 1)
    def s8(self) -> int:  return self._unpack("b", 1)
    def u16(self) -> int: return self._unpack("H", 2)
    def s16(self) -> int: return self._unpack("h", 2)
    def u32(self) -> int: return self._unpack("I", 4)
    def s32(self) -> int: return self._unpack("i", 4)
    def u64(self) -> int: return self._unpack("Q", 8)
    def s64(self) -> int: return self._unpack("q", 8)
    def f32(self) -> float: return self._unpack("f", 4)
    def f64(self) -> float: return self._unpack("d", 8)

    # text
    def read_fixed_string(self, length: int, encoding: str = "latin-1") -> str:
        raw = self.take(length)
        return raw.decode(encoding, errors="replace").strip(_PADDING)

    def match_literal(self, expected: str, encoding: str = "latin-1") -> str:
        # markers are compared byte for byte; padding is only trimmed from the result
        start = self.pos
        want = expected.encode(encoding)
        raw = self.take(len(want))
        if raw != want:
            raise LiteralMismatch(expected, raw.decode(encoding, errors="replace").strip(_PADDING), start)
        return raw.decode(encoding).strip(_PADDING)
