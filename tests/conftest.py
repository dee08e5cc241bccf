# tests/conftest.py
import base64
import json
import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image, PngImagePlugin

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def encode_card_payload(card) -> str:
    return base64.b64encode(json.dumps(card).encode("utf-8")).decode("ascii")


def make_card_png(*cards, size=(8, 6), color=(200, 60, 90), extra_text=None) -> bytes:
    """Builds a real PNG with Pillow, one chara tEXt chunk per card, in order."""
    img = Image.new("RGB", size, color=color)
    png_info = PngImagePlugin.PngInfo()
    for key, value in (extra_text or {}).items():
        png_info.add_text(key, value)
    for card in cards:
        payload = card if isinstance(card, str) else encode_card_payload(card)
        png_info.add_text("chara", payload)
    buf = BytesIO()
    img.save(buf, "PNG", pnginfo=png_info)
    return buf.getvalue()


def raw_chunk(type_tag: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(type_tag + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + type_tag + payload + struct.pack(">I", crc)


def raw_png(*chunks: bytes) -> bytes:
    return PNG_SIGNATURE + b"".join(chunks)


@pytest.fixture
def card_png():
    return make_card_png


@pytest.fixture
def card_file(tmp_path):
    def _write(*cards, name="card.png", **kwargs):
        path = tmp_path / name
        path.write_bytes(make_card_png(*cards, **kwargs))
        return path
    return _write
