from __future__ import annotations
import datetime
from enum import IntFlag
from typing import Optional

from pydantic import BaseModel, Field

from binshape.binary.codecs.cursor import Cursor
from binshape.binary.loader import register_shape
from binshape.binary.session import ParseSession
from binshape.models.common import ByteOrder
from binshape.models.shape import ParseableFile

LOCAL_HEADER_SIGNATURE = "PK\x03\x04"
EOCD_SIGNATURE = b"PK\x05\x06"
EOCD_SIZE = 22


class ZipEntryFlags(IntFlag):
    DATA_DESCRIPTOR = 1 << 3
    UTF8 = 1 << 11


# -----------------------------
# Packed DOS date/time
# -----------------------------

class PackedDateTime(BaseModel):
    """Date and time as stored in two 16-bit DOS/FAT words (2 second resolution)."""
    year: int = Field(..., ge=1980, le=2107)
    month: int = Field(..., ge=0, le=15)
    day: int = Field(..., ge=0, le=31)
    hours: int = Field(..., ge=0, le=31)
    minutes: int = Field(..., ge=0, le=63)
    seconds: int = Field(..., ge=0, le=62)

    def to_datetime(self) -> datetime.datetime:
        # raw words can hold month 0, day 0, 25:61 etc.; datetime rejects those
        return datetime.datetime(self.year, self.month, self.day, self.hours, self.minutes, self.seconds)


def decode_packed_datetime(time: int, date: int) -> PackedDateTime:
    # low bits carry the finer unit in both words
    return PackedDateTime(
        seconds=(time & 0x1F) * 2,
        minutes=(time >> 5) & 0x3F,
        hours=(time >> 11) & 0x1F,
        day=date & 0x1F,
        month=(date >> 5) & 0x0F,
        year=((date >> 9) & 0x7F) + 1980,
    )


def read_packed_datetime(cur: Cursor) -> PackedDateTime:
    """Time word first, then date word, as in ZIP headers."""
    time = cur.read_int(2)
    date = cur.read_int(2)
    return decode_packed_datetime(time, date)


# -----------------------------
# Local file header
# -----------------------------

class ZipLocalRecord(BaseModel):
    version_needed: int
    flags: int
    method: int
    modified: PackedDateTime
    crc32: int
    compressed_size: int
    uncompressed_size: int
    file_name: str
    data_offset: Optional[int] = None
    entry_count: Optional[int] = None
    central_directory_offset: Optional[int] = None


def _read_eocd(s: ParseSession) -> bool:
    if s.read(lambda c: c.take(4)) != EOCD_SIGNATURE:
        return False
    s.skip(6)  # disk numbers, entries on this disk
    s.u16(name="entry_count")
    s.u32(name="central_directory_size")
    s.u32(name="central_directory_offset")
    return True


@register_shape("zip")
class ZipLocalFile(ParseableFile):
    """
    First local file header of a ZIP archive.

    If the archive has no trailing comment its end-of-central-directory record
    sits in the last 22 bytes; it is peeked at before the header is read so the
    entry count is available without moving the cursor.
    """

    Record = ZipLocalRecord

    def parse(self, s: ParseSession) -> None:
        s.set_byte_order(ByteOrder.LITTLE)

        if s.length() >= EOCD_SIZE:
            s.peek(s.length() - EOCD_SIZE - s.tell(), _read_eocd)

        s.literal(LOCAL_HEADER_SIGNATURE, name="signature")
        s.u16(name="version_needed")
        flags = s.u16(name="flags")
        s.u16(name="method")
        s.bind_as("modified", read_packed_datetime)
        s.u32(name="crc32")
        compressed_size = s.u32(name="compressed_size")
        s.u32(name="uncompressed_size")
        name_length = s.u16(name="name_length")
        extra_length = s.u16(name="extra_length")
        s.string(name_length, name="file_name",
                 encoding="utf-8" if flags & ZipEntryFlags.UTF8 else "cp437")
        s.skip(extra_length)

        # with a data descriptor the sizes above are zero; nothing to bind
        if not flags & ZipEntryFlags.DATA_DESCRIPTOR:
            s.bind_as("data", lambda c: c.take(compressed_size))

    @property
    def version_needed(self) -> int: return self.int_field("version_needed")

    @property
    def flags(self) -> int: return self.int_field("flags")

    @property
    def method(self) -> int: return self.int_field("method")

    @property
    def modified(self) -> PackedDateTime:
        return self.field("modified", PackedDateTime)

    @property
    def crc32(self) -> int: return self.int_field("crc32")

    @property
    def compressed_size(self) -> int: return self.int_field("compressed_size")

    @property
    def uncompressed_size(self) -> int: return self.int_field("uncompressed_size")

    @property
    def file_name(self) -> str: return self.str_field("file_name")

    @property
    def data(self) -> Optional[bytes]:
        return self.bytes_field("data") if "data" in self.session.registry else None

    @property
    def data_offset(self) -> Optional[int]:
        return self.offset_of("data") if "data" in self.session.registry else None

    @property
    def entry_count(self) -> Optional[int]:
        return self.optional_field("entry_count", int)

    @property
    def central_directory_offset(self) -> Optional[int]:
        return self.optional_field("central_directory_offset", int)
