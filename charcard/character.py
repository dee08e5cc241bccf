import base64
import binascii
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from charcard.errors import InvalidMetadataSchema, MalformedEncoding, NoMetadataFound
from charcard.metadata import V2_SPEC_VERSION, CardEnvelope, CardSchema, CharacterMetadata
from charcard.png_chunks import Chunk, TEXT_CHUNK, encode_chunks, extract_chunks, split_text_payload

CHARA_KEYWORD = b"chara"
AVATAR_URI_PREFIX = "data:image/png;base64,"
NO_AVATAR = "none"


@dataclass(frozen=True)
class Character:
    metadata: CharacterMetadata
    fallback_avatar: str
    schema: CardSchema = CardSchema.V1

    @property
    def name(self) -> str:
        return self.metadata.name or self.metadata.char_name

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def avatar(self) -> str:
        """The card's own avatar field, or the embedded image when it is unset or "none"."""
        explicit = self.metadata.avatar
        if explicit and explicit != NO_AVATAR:
            return explicit
        return self.fallback_avatar

    @property
    def has_explicit_avatar(self) -> bool:
        explicit = self.metadata.avatar
        return bool(explicit) and explicit != NO_AVATAR


def partition_chunks(chunks: Iterable[Chunk]) -> Tuple[Optional[bytes], List[Chunk]]:
    """
    Separates the chara text chunk from everything else.

    Returns:
        Tuple[Optional[bytes], List[Chunk]]: The raw (still base64) value of the
        last chara chunk, or None, and the remaining chunks in original order.
    """
    chara_value: Optional[bytes] = None
    image_chunks: List[Chunk] = []

    for chunk in chunks:
        if chunk.type_tag == TEXT_CHUNK:
            keyword, text, found = split_text_payload(chunk.payload)
            if found and keyword == CHARA_KEYWORD:
                chara_value = text  # keep scanning, the last one wins
                continue
        image_chunks.append(chunk)

    return chara_value, image_chunks


def decode_metadata(raw: bytes) -> Tuple[CardSchema, CharacterMetadata]:
    """
    Decodes a base64 chara value into metadata, tagged with the layout it was found in.

    A V2 envelope is only trusted when spec_version is exactly "2.0". Anything
    else, including an envelope with another version, is read again as a flat
    V1 object.
    """
    try:
        json_bytes = base64.b64decode(raw.replace(b"\r", b"").replace(b"\n", b""), validate=True)
    except binascii.Error as e:
        raise MalformedEncoding(f"failed to decode base64 character data: {e}", cause=e) from e

    # invalid UTF-8 becomes U+FFFD instead of failing the whole card
    json_text = json_bytes.decode("utf-8", errors="replace")

    try:
        envelope = CardEnvelope.model_validate_json(json_text)
    except ValidationError:
        envelope = None
    if envelope is not None and envelope.spec_version == V2_SPEC_VERSION:
        return CardSchema.V2, envelope.data

    try:
        return CardSchema.V1, CharacterMetadata.model_validate_json(json_text)
    except ValidationError as e:
        raise InvalidMetadataSchema(f"failed to parse character data: {e}", cause=e) from e


def encode_avatar(image_chunks: Iterable[Chunk]) -> str:
    return AVATAR_URI_PREFIX + base64.b64encode(encode_chunks(image_chunks)).decode("ascii")


def resolve(chunks: Iterable[Chunk]) -> Character:
    chara_value, image_chunks = partition_chunks(chunks)
    if chara_value is None:
        raise NoMetadataFound("no character data found in PNG")

    schema, metadata = decode_metadata(chara_value)
    return Character(metadata=metadata, fallback_avatar=encode_avatar(image_chunks), schema=schema)


def from_bytes(data: bytes) -> Character:
    """Parses a complete character card PNG held in memory."""
    return resolve(extract_chunks(data))
