from __future__ import annotations

import base64
import binascii
import re

_ID_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def encode_id(url: str) -> str:
    encoded = base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def decode_id(value: str | None) -> str:
    if not value or not _ID_ALPHABET.fullmatch(value):
        return ""
    if len(value) % 4 == 1:
        return ""
    padded = value + "=" * (-len(value) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""
