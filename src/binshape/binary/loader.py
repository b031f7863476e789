from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple, Type, TypeVar, Union

from binshape.binary.codecs.cursor import Cursor
from binshape.binary.errors import UnknownShape
from binshape.binary.registry import FieldRegistry
from binshape.binary.session import ParseSession

log = logging.getLogger(__name__)

BytesLike = Union[str, Path, bytes, bytearray, memoryview]


class Parseable(Protocol):
    """What the loader needs from a result shape."""

    def __init__(self, session: ParseSession, source: Optional[str] = None) -> None: ...

    def parse(self, session: ParseSession) -> None: ...


S = TypeVar("S", bound=Parseable)

_SHAPES: Dict[str, Type[Parseable]] = {}


# -----------------------------
# Shape registry
# -----------------------------

def register_shape(tag: str) -> Callable[[Type[S]], Type[S]]:
    """Class decorator making a shape loadable by `tag`."""
    def deco(cls: Type[S]) -> Type[S]:
        if tag in _SHAPES and _SHAPES[tag] is not cls:
            raise ValueError(f"shape tag {tag!r} already registered to {_SHAPES[tag].__name__}")
        _SHAPES[tag] = cls
        cls.shape_tag = tag
        return cls
    return deco


def get_shape(tag: str) -> Type[Parseable]:
    _register_builtin_shapes()
    try:
        return _SHAPES[tag]
    except KeyError:
        raise UnknownShape(tag) from None


def available_shapes() -> Tuple[str, ...]:
    _register_builtin_shapes()
    return tuple(sorted(_SHAPES))


def _register_builtin_shapes() -> None:
    # importing the format modules runs their @register_shape decorators
    from binshape.formats import id3v1, zip_local  # noqa: F401


# -----------------------------
# Loading
# -----------------------------

def _load_bytes(inp: BytesLike) -> Tuple[bytes, str]:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        data = bytes(inp)
        return data, f"<{len(data)} bytes>"
    p = Path(str(inp))
    return p.read_bytes(), str(p)


def load(shape: Type[S], data: BytesLike) -> S:
    """
    Parse `data` (a path or the raw bytes) as `shape`.

    The shape instance is built first, around a fresh session, and then its
    `parse` procedure is run to completion. The first failure propagates.
    """
    raw, source = _load_bytes(data)
    log.debug("loading %s as %s (%d bytes)", source, shape.__name__, len(raw))

    session = ParseSession(Cursor(raw), FieldRegistry())
    instance = shape(session, source=source)
    session.run(instance.parse)

    log.info("parsed %s as %s: %d fields", source, shape.__name__, len(session.registry))
    return instance


def load_by_name(tag: str, data: BytesLike) -> Parseable:
    return load(get_shape(tag), data)
