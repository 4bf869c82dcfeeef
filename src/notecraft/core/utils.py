"""Utility functions for notecraft."""

import struct

_DIGITS36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """
    Render an integer in base 36, lowercase, with a leading ``-`` when negative.

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(-71)
        '-1z'
    """
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS36[rem])
    return sign + "".join(reversed(digits))


def content_hash(content: str) -> str:
    """
    Cheap fingerprint of note content.

    32-bit rolling multiplicative hash (``hash * 31 + unit``) over the UTF-16
    code units of ``content``, wrapped to a signed 32-bit integer and
    rendered in base 36. Characters outside the BMP count as their two
    surrogate units, so hashes match editors that work in UTF-16.

    Not a cryptographic digest: collisions are possible and only cost a
    skipped re-analysis.
    Never use it for integrity checks.
    """
    h = 0
    data = content.encode("utf-16-le", "surrogatepass")
    for (unit,) in struct.iter_unpack("<H", data):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return to_base36(h)
