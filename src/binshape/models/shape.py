from __future__ import annotations
from functools import lru_cache
from typing import Any, ClassVar, List, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from binshape.binary.errors import TypeMismatch, UnknownField
from binshape.binary.registry import FieldEntry
from binshape.binary.session import ParseSession

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or str(type_)


class ParseableFile:
    """
    Base for result shapes: a file layout described by `parse`, plus typed
    accessors reading the values that procedure bound.

    Subclasses are registered with the loader under a tag, implement
    `parse`, expose their fields as properties built on `int_field` /
    `str_field` / `field`, and declare a pydantic `Record` whose field names
    match those properties.
    """

    shape_tag: ClassVar[str] = ""
    Record: ClassVar[Type[BaseModel]]

    def __init__(self, session: ParseSession, source: Optional[str] = None):
        self.session = session
        self.source = source

    def parse(self, session: ParseSession) -> None:
        raise NotImplementedError

    # typed access
    def field(self, name: str, type_: Type[T]) -> T:
        registry = self.session.registry
        if name not in registry:
            raise UnknownField(name)
        value = registry.value_of(name)
        try:
            return _adapter(type_).validate_python(value, strict=True)
        except ValidationError:
            raise TypeMismatch(name, _type_name(type_), type(value).__name__) from None

    def optional_field(self, name: str, type_: Type[T]) -> Optional[T]:
        if name not in self.session.registry:
            return None
        return self.field(name, type_)

    def int_field(self, name: str) -> int: return self.field(name, int)
    def str_field(self, name: str) -> str: return self.field(name, str)
    def bytes_field(self, name: str) -> bytes: return self.field(name, bytes)

    def offset_of(self, name: str) -> int:
        return self.session.position_of(name)

    def fields(self) -> List[FieldEntry]:
        return list(self.session.registry)

    def record(self) -> BaseModel:
        """Snapshot of the declared fields as the shape's pydantic `Record`."""
        return self.Record(**{name: getattr(self, name) for name in self.Record.model_fields})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source!r}, fields={len(self.session.registry)})"
