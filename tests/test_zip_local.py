import datetime
import struct

import pytest

from binshape.binary.codecs.cursor import Cursor
from binshape.binary.errors import LiteralMismatch
from binshape.binary.loader import load
from binshape.formats.zip_local import (
    PackedDateTime,
    ZipLocalFile,
    decode_packed_datetime,
    read_packed_datetime,
)
from binshape.models.common import ByteOrder

# 09:37:22 on 2016-02-29
TIME = (0b01001 << 11) | (0b100101 << 5) | 0b01011
DATE = (36 << 9) | (2 << 5) | 29


def _local_header(name: bytes, payload: bytes, flags: int = 0) -> bytes:
    return struct.pack(
        "<4sHHHHHIIIHH",
        b"PK\x03\x04", 20, flags, 0, TIME, DATE, 0xDEADBEEF,
        len(payload), len(payload), len(name), 4,
    ) + name + b"\xaa\xbb\xcc\xdd" + payload


def _eocd(entries: int, cd_size: int, cd_offset: int) -> bytes:
    return struct.pack("<4sHHHHIIH", b"PK\x05\x06", 0, 0, entries, entries, cd_size, cd_offset, 0)


def test_decode_packed_datetime_bit_fields():
    dt = decode_packed_datetime(TIME, DATE)
    assert (dt.year, dt.month, dt.day) == (2016, 2, 29)
    assert (dt.hours, dt.minutes, dt.seconds) == (9, 37, 22)
    assert dt.to_datetime() == datetime.datetime(2016, 2, 29, 9, 37, 22)


def test_decode_packed_datetime_extremes():
    dt = decode_packed_datetime(0xFFFF, 0xFFFF)
    assert (dt.year, dt.month, dt.day) == (2107, 15, 31)
    assert (dt.hours, dt.minutes, dt.seconds) == (31, 63, 62)

    zero = decode_packed_datetime(0, 0)
    assert (zero.year, zero.month, zero.day) == (1980, 0, 0)
    with pytest.raises(ValueError):
        zero.to_datetime()


def test_read_packed_datetime_reads_time_then_date():
    cur = Cursor(struct.pack("<HH", TIME, DATE), byte_order=ByteOrder.LITTLE)
    dt = read_packed_datetime(cur)
    assert dt == PackedDateTime(year=2016, month=2, day=29, hours=9, minutes=37, seconds=22)
    assert cur.remaining() == 0


def test_local_header_with_end_of_central_directory():
    header = _local_header(b"hello.txt", b"hello")
    data = header + b"\x00" * 10 + _eocd(entries=1, cd_size=10, cd_offset=len(header))
    z = load(ZipLocalFile, data)

    assert z.version_needed == 20
    assert z.flags == 0
    assert z.method == 0
    assert z.modified.to_datetime() == datetime.datetime(2016, 2, 29, 9, 37, 22)
    assert z.crc32 == 0xDEADBEEF
    assert z.compressed_size == z.uncompressed_size == 5
    assert z.file_name == "hello.txt"
    assert z.data == b"hello"
    assert z.data_offset == 30 + len("hello.txt") + 4
    assert z.entry_count == 1
    assert z.central_directory_offset == len(header)

    # the directory was peeked at; the header still starts at 0
    assert z.offset_of("signature") == 0
    assert z.offset_of("entry_count") == len(data) - 22 + 10


def test_local_header_without_directory_record():
    data = _local_header(b"a", b"xyz")
    z = load(ZipLocalFile, data)
    assert z.entry_count is None
    assert z.central_directory_offset is None
    assert z.data == b"xyz"


def test_data_descriptor_leaves_data_unbound():
    z = load(ZipLocalFile, _local_header(b"streamed.bin", b"", flags=0x0008))
    assert z.data is None
    assert z.data_offset is None


def test_data_is_read_back_as_bytes():
    z = load(ZipLocalFile, _local_header(b"b.bin", b"\x00\x01\x02"))
    assert z.data == z.bytes_field("data") == b"\x00\x01\x02"


def test_utf8_file_name():
    name = "déjà.txt".encode("utf-8")
    z = load(ZipLocalFile, _local_header(name, b"", flags=0x0800))
    assert z.file_name == "déjà.txt"


def test_not_a_zip():
    with pytest.raises(LiteralMismatch):
        load(ZipLocalFile, b"GIF89a" + b"\x00" * 40)


def test_record_dump():
    z = load(ZipLocalFile, _local_header(b"n", b"1"))
    out = z.record().model_dump(mode="json")
    assert out["modified"] == {
        "year": 2016, "month": 2, "day": 29, "hours": 9, "minutes": 37, "seconds": 22,
    }
    assert out["file_name"] == "n"
    assert out["entry_count"] is None
