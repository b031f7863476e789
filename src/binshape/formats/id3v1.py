from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field

from binshape.binary.loader import register_shape
from binshape.binary.session import ParseSession
from binshape.models.shape import ParseableFile

TAG_SIZE = 128


class Id3v1Record(BaseModel):
    tag: str
    title: str
    artist: str
    album: str
    year: str
    comment: str
    track: Optional[int] = Field(default=None, ge=0, le=255)
    genre: int = Field(..., ge=0, le=255)


@register_shape("id3v1")
class Id3v1Tag(ParseableFile):
    """
    ID3v1 tag stored in the last 128 bytes of an MP3 file.

    ID3v1.1 reuses the last two comment bytes as a zero marker plus a track
    number. When the marker is non-zero the tag is plain v1, so the comment is
    re-read at full width from where it started.
    """

    Record = Id3v1Record

    def parse(self, s: ParseSession) -> None:
        s.jump(s.length() - TAG_SIZE)
        s.literal("TAG", name="tag")
        s.string(30, name="title")
        s.string(30, name="artist")
        s.string(30, name="album")
        s.string(4, name="year")
        s.string(28, name="comment")
        if s.u8(name="zero") != 0:
            s.jump(s.position_of("comment"))
            s.string(30, name="comment")
        else:
            s.u8(name="track")
        s.u8(name="genre")

    @property
    def tag(self) -> str: return self.str_field("tag")

    @property
    def title(self) -> str: return self.str_field("title")

    @property
    def artist(self) -> str: return self.str_field("artist")

    @property
    def album(self) -> str: return self.str_field("album")

    @property
    def year(self) -> str: return self.str_field("year")

    @property
    def comment(self) -> str: return self.str_field("comment")

    @property
    def track(self) -> Optional[int]:
        return self.optional_field("track", int)

    @property
    def genre(self) -> int: return self.int_field("genre")
