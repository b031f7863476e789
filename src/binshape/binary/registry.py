from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from binshape.binary.errors import UnknownField
from binshape.models.common import FieldValue


@dataclass(frozen=True)
class FieldEntry:
    name: str
    value: FieldValue
    offset: int  # cursor position right before the value was read


class FieldRegistry:
    """
    Name -> (value, offset) table filled while a parse runs.

    Binding is an upsert: a name holds only its most recent value and the
    offset of that read. There is no history and no scoping.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, FieldEntry] = {}

    def bind(self, name: str, value: FieldValue, offset: int) -> None:
        self._entries[name] = FieldEntry(name, value, offset)

    def value_of(self, name: str) -> Optional[FieldValue]:
        entry = self._entries.get(name)
        return None if entry is None else entry.value

    def offset_of(self, name: str) -> int:
        return self.entry(name).offset

    def entry(self, name: str) -> FieldEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownField(name) from None

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool: return name in self._entries
    def __len__(self) -> int: return len(self._entries)
    def __iter__(self) -> Iterator[FieldEntry]: return iter(self._entries.values())
