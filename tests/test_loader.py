from typing import Optional

import pytest
from pydantic import BaseModel

from binshape.binary.errors import TypeMismatch, UnknownField, UnknownShape
from binshape.binary.loader import available_shapes, get_shape, load, load_by_name, register_shape
from binshape.binary.session import ParseSession
from binshape.formats.id3v1 import Id3v1Tag
from binshape.models.common import SessionState
from binshape.models.shape import ParseableFile


class PairRecord(BaseModel):
    count: int
    label: str


@register_shape("test-pair")
class Pair(ParseableFile):
    Record = PairRecord

    def __init__(self, session: ParseSession, source: Optional[str] = None):
        super().__init__(session, source)
        self.parsed_with = None

    def parse(self, s: ParseSession) -> None:
        self.parsed_with = s
        s.u8(name="count")
        s.string(s.value_of("count"), name="label")

    @property
    def count(self) -> int: return self.int_field("count")

    @property
    def label(self) -> str: return self.str_field("label")


def test_load_builds_instance_around_its_session():
    p = load(Pair, b"\x03abc")
    assert p.parsed_with is p.session
    assert p.session.state is SessionState.COMPLETED
    assert (p.count, p.label) == (3, "abc")
    assert p.source == "<4 bytes>"
    assert p.record() == PairRecord(count=3, label="abc")
    assert [(e.name, e.offset) for e in p.fields()] == [("count", 0), ("label", 1)]


def test_each_load_gets_a_fresh_session():
    a = load(Pair, b"\x01x")
    b = load(Pair, b"\x02yz")
    assert a.session is not b.session
    assert a.session.registry is not b.session.registry
    assert a.label == "x"


def test_typed_accessor_errors():
    p = load(Pair, b"\x01x")
    with pytest.raises(TypeMismatch) as ei:
        p.str_field("count")
    assert ei.value.name == "count"
    assert ei.value.actual == "int"

    with pytest.raises(TypeMismatch):
        p.int_field("label")
    with pytest.raises(UnknownField):
        p.int_field("absent")
    assert p.optional_field("absent", int) is None


def test_registry_lookup_by_tag():
    assert get_shape("test-pair") is Pair
    assert get_shape("id3v1") is Id3v1Tag
    assert {"id3v1", "zip", "test-pair"} <= set(available_shapes())
    assert Pair.shape_tag == "test-pair"

    p = load_by_name("test-pair", b"\x00")
    assert isinstance(p, Pair)
    assert p.label == ""


def test_unknown_tag():
    with pytest.raises(UnknownShape) as ei:
        load_by_name("gif", b"GIF89a")
    assert ei.value.tag == "gif"


def test_tag_cannot_be_claimed_twice():
    with pytest.raises(ValueError):
        register_shape("test-pair")(Id3v1Tag)
