import base64
import binascii
from io import BytesIO
from pathlib import Path
from typing import Tuple, Union

from PIL import Image

from charcard.character import AVATAR_URI_PREFIX, Character, from_bytes


def read_card_bytes(card_path: Union[str, Path]) -> bytes:
    card_path = Path(card_path)
    if not card_path.is_file():
        raise FileNotFoundError(f"Card file not found: {card_path}")
    return card_path.read_bytes()


def load_character(card_path: Union[str, Path]) -> Character:
    """Reads a card PNG from disk and parses it."""
    return from_bytes(read_card_bytes(card_path))


def decode_data_uri(uri: str) -> bytes:
    """
    Returns the PNG bytes behind a data:image/png;base64 URI.

    Avatars that point somewhere else (URLs, file names) are not embedded images,
    so they raise ValueError rather than being fetched.
    """
    if not uri.startswith(AVATAR_URI_PREFIX):
        raise ValueError(f"Avatar is not an embedded PNG data URI: {uri[:40]!r}")
    try:
        return base64.b64decode(uri[len(AVATAR_URI_PREFIX):], validate=True)
    except binascii.Error as e:
        raise ValueError(f"Avatar data URI has invalid base64: {e}") from e


def save_avatar_png(character: Character, output_path: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Writes the character's avatar out as a PNG file.

    The bytes are written exactly as reassembled, so chunk checksums are
    whatever the source card carried.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file: {output_path}")

    png_bytes = decode_data_uri(character.avatar)

    if not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    return output_path


def describe_avatar(png_bytes: bytes) -> Tuple[int, int, str]:
    """
    Opens avatar bytes with Pillow.

    Returns:
        Tuple[int, int, str]: (width, height, mode) of the image.
    """
    with Image.open(BytesIO(png_bytes)) as img:
        return img.size[0], img.size[1], img.mode
