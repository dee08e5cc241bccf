from charcard.character import Character, from_bytes, resolve
from charcard.errors import (
    FormatError,
    InvalidMetadataSchema,
    MalformedEncoding,
    NoMetadataFound,
    NotAnImage,
    TruncatedChunkHeader,
    TruncatedChunkPayload,
)
from charcard.metadata import CardSchema, CharacterMetadata
from charcard.png_chunks import Chunk, encode_chunks, extract_chunks
