import struct
from typing import Iterable, Iterator, List, NamedTuple, Tuple

from charcard.errors import NotAnImage, TruncatedChunkHeader, TruncatedChunkPayload

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
IEND = b"IEND"
TEXT_CHUNK = b"tEXt"

_HEADER = struct.Struct(">I4s")  # length, type tag
_CHECKSUM = struct.Struct(">I")


class Chunk(NamedTuple):
    type_tag: bytes
    payload: bytes
    checksum: int


def extract_chunks(data: bytes) -> List[Chunk]:
    """
    Splits a PNG buffer into its chunks, in file order.

    Parsing stops right after IEND, so anything appended to the image is ignored.
    A buffer that simply runs out on a chunk boundary before IEND is accepted.
    Checksums are read as stored and never verified.

    Args:
        data (bytes): The complete PNG file.

    Returns:
        List[Chunk]: Parsed chunks, IEND included when present.
    """
    if len(data) < len(PNG_SIGNATURE) or data[:len(PNG_SIGNATURE)] != PNG_SIGNATURE:
        raise NotAnImage("not a PNG file")

    chunks: List[Chunk] = []
    pos = len(PNG_SIGNATURE)
    end = len(data)

    while pos < end:
        if pos + _HEADER.size > end:
            raise TruncatedChunkHeader(f"incomplete PNG chunk header at offset {pos}")
        length, type_tag = _HEADER.unpack_from(data, pos)

        payload_start = pos + _HEADER.size
        payload_end = payload_start + length
        if payload_end + _CHECKSUM.size > end:
            raise TruncatedChunkPayload(
                f"incomplete PNG chunk data for {type_tag!r} at offset {pos} "
                f"(declared {length} bytes, {end - payload_start} available)"
            )

        (checksum,) = _CHECKSUM.unpack_from(data, payload_end)
        chunks.append(Chunk(bytes(type_tag), bytes(data[payload_start:payload_end]), checksum))
        pos = payload_end + _CHECKSUM.size

        if type_tag == IEND:
            break

    return chunks


def encode_chunks(chunks: Iterable[Chunk]) -> bytes:
    """
    Writes chunks back out as a standalone PNG. Lengths follow the payloads,
    checksums are carried over untouched.
    """
    parts = [PNG_SIGNATURE]
    for chunk in chunks:
        parts.append(_HEADER.pack(len(chunk.payload), chunk.type_tag))
        parts.append(chunk.payload)
        parts.append(_CHECKSUM.pack(chunk.checksum))
    return b"".join(parts)


def split_text_payload(payload: bytes) -> Tuple[bytes, bytes, bool]:
    """Splits a tEXt payload on its first null byte: (keyword, text, found)."""
    keyword, sep, text = payload.partition(b"\x00")
    return keyword, text, bool(sep)


def iter_text_chunks(chunks: Iterable[Chunk]) -> Iterator[Tuple[int, bytes, bytes]]:
    """Yields (index, keyword, text) for every well-formed tEXt chunk."""
    for index, chunk in enumerate(chunks):
        if chunk.type_tag != TEXT_CHUNK:
            continue
        keyword, text, found = split_text_payload(chunk.payload)
        if found:
            yield index, keyword, text
