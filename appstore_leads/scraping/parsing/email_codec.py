"""
Cloudflare-style protected email decoding.

A protected address is a hex string whose first byte is an XOR key; every
following byte XOR'd with that key yields one character of the address.
"""

from __future__ import annotations

import string


def _hex_byte(pair: str) -> int | None:
    if not pair or any(char not in string.hexdigits for char in pair):
        return None
    return int(pair, 16)


def decode_protected_email(encoded: str) -> str:
    """
    Decode a protected email hex string.

    Never raises. An unreadable key yields an empty string and unreadable
    byte pairs are skipped, so malformed input decodes to a partial string.
    """

    encoded = encoded.strip()
    key = _hex_byte(encoded[:2])
    if key is None:
        return ""

    chars: list[str] = []
    for index in range(2, len(encoded), 2):
        byte = _hex_byte(encoded[index : index + 2])
        if byte is None:
            continue
        chars.append(chr(byte ^ key))
    return "".join(chars)


def encode_protected_email(email: str, key: int) -> str:
    """
    Inverse of `decode_protected_email` for single-byte characters.
    """

    if not 0 <= key <= 0xFF:
        raise ValueError(f"XOR key must fit in one byte, got {key}.")
    return f"{key:02x}" + "".join(f"{ord(char) ^ key:02x}" for char in email)
