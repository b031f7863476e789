from __future__ import annotations
import logging
from typing import Callable, Optional, TypeVar

from binshape.binary.codecs.cursor import Cursor
from binshape.binary.errors import ParseError, SessionClosed, UnknownField
from binshape.binary.registry import FieldRegistry
from binshape.models.common import ByteOrder, FieldValue, SessionState

log = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V", bound=FieldValue)

Primitive = Callable[[Cursor], V]


class ParseSession:
    """
    The instruction set format descriptions are written against.

    Every instruction works on the session's own Cursor and FieldRegistry.
    A bound field records the cursor position taken immediately before its
    own read, so binds made inside a `peek` record the peeked offset and binds
    made after it record the restored outer position.

    A session runs once: the first instruction moves it to RUNNING, a
    procedure returning normally to COMPLETED, and any error to FAILED. A
    completed or failed session refuses further instructions.
    """

    def __init__(self, cursor: Cursor, registry: Optional[FieldRegistry] = None):
        self.cursor = cursor
        self.registry = registry if registry is not None else FieldRegistry()
        self.state = SessionState.NOT_STARTED
        self.failure: Optional[BaseException] = None

    # run state
    def run(self, procedure: Callable[["ParseSession"], T]) -> T:
        if self.state is not SessionState.NOT_STARTED:
            raise SessionClosed(f"session already {self.state.value}")
        try:
            result = procedure(self)
        except Exception as e:
            self._fail(e)
            raise
        self.state = SessionState.COMPLETED
        return result

    def _fail(self, exc: BaseException) -> None:
        if self.state is not SessionState.FAILED:
            log.debug("parse failed at offset %d: %s", self.cursor.tell(), exc)
            self.state = SessionState.FAILED
            self.failure = exc

    def _execute(self, op: Callable[[], T]) -> T:
        if self.state in (SessionState.COMPLETED, SessionState.FAILED):
            raise SessionClosed(f"session already {self.state.value}")
        self.state = SessionState.RUNNING
        try:
            return op()
        except ParseError as e:
            self._fail(e)
            raise

    # reads
    def read(self, primitive: Primitive[V], bind_as: Optional[str] = None) -> V:
        def op() -> V:
            offset = self.cursor.tell()
            value = primitive(self.cursor)
            if bind_as is not None:
                log.debug("bind %s=%r @%d", bind_as, value, offset)
                self.registry.bind(bind_as, value, offset)
            return value
        return self._execute(op)

    def bind_as(self, name: str, primitive: Primitive[V]) -> V:
        return self.read(primitive, bind_as=name)

    def integer(self, width: int, signed: bool = False, name: Optional[str] = None) -> int:
        return self.read(lambda c: c.read_int(width, signed), name)

    def u8(self, name: Optional[str] = None) -> int: return self.integer(1, name=name)
    def u16(self, name: Optional[str] = None) -> int: return self.integer(2, name=name)
    def u32(self, name: Optional[str] = None) -> int: return self.integer(4, name=name)

    def string(self, length: int, name: Optional[str] = None, encoding: str = "latin-1") -> str:
        return self.read(lambda c: c.read_fixed_string(length, encoding), name)

    def literal(self, expected: str, name: Optional[str] = None) -> str:
        return self.read(lambda c: c.match_literal(expected), name)

    # lookups
    def value_of(self, name: str) -> Optional[FieldValue]:
        return self.registry.value_of(name)

    def position_of(self, name: str) -> int:
        # lookups stay usable after the run, but a miss during it is fatal
        try:
            return self.registry.offset_of(name)
        except UnknownField as e:
            if self.state is SessionState.RUNNING:
                self._fail(e)
            raise

    # positioning
    def jump(self, pos: int) -> None:
        self._execute(lambda: self.cursor.jump(pos))

    def skip(self, n: int) -> None:
        self._execute(lambda: self.cursor.skip(n))

    def peek(self, n: int, procedure: Callable[["ParseSession"], T]) -> T:
        """
        Run `procedure` against this session `n` bytes away from the current
        position, restoring the position afterwards. Names bound inside stay
        bound. A failure inside the procedure fails the whole session.
        """
        return self._execute(lambda: self.cursor.peek(n, lambda: procedure(self)))

    def set_byte_order(self, order: ByteOrder) -> None:
        self._execute(lambda: self.cursor.set_byte_order(order))

    def tell(self) -> int: return self.cursor.tell()
    def length(self) -> int: return self.cursor.length()
    def remaining(self) -> int: return self.cursor.remaining()
