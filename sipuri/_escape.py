"""
Percent-encoding for SIP URI components.

Follows the escaping rules of RFC 3986 as applied by RFC 3261 Section 19.1,
with a separate reserved set for the host, the user-info and the
parameters/headers. Unlike form encoding, a space is always written as
``%20`` and never as ``+``.

Escaping and unescaping work on UTF-8 bytes. Bytes which do not form valid
UTF-8 survive a round-trip through the ``surrogateescape`` error handler.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum, auto

from ._types import EscapeError

UPPERHEX = "0123456789ABCDEF"
HEXDIGITS = frozenset(b"0123456789abcdefABCDEF")

# Unreserved marks (RFC 3986 Section 2.3)
_MARKS = frozenset(b"-_.~")

# Characters legal unescaped in the host production
_HOST_SAFE = frozenset(b"!$&'()*+,;=:[]<>\"")

# Reserved characters (RFC 3986 Section 2.2) which some components allow
_RESERVED = frozenset(b"$&+,/:;=?@")

# userinfo allows ';', '&', '=', '+', '$' and ',' but ':' splits user from
# password so it is escaped alongside '@', '/' and '?'
_USERINFO_ESCAPED = frozenset(b"@/?:")


class Encoding(Enum):
    """The URI component being escaped."""

    HOST = auto()
    USER_PASSWORD = auto()
    QUERY_COMPONENT = auto()


def _is_alnum(c: int) -> bool:
    return 0x61 <= c <= 0x7A or 0x41 <= c <= 0x5A or 0x30 <= c <= 0x39


def should_escape(c: int, mode: Encoding) -> bool:
    """
    Check if byte ``c`` must be percent-encoded within the given component.

    Args:
        c: Byte value (0-255)
        mode: Component the byte appears in

    Returns:
        True if the byte must be written as ``%XY``
    """
    if _is_alnum(c):
        return False

    if mode is Encoding.HOST and c in _HOST_SAFE:
        return False

    if c in _MARKS:
        return False

    if c in _RESERVED:
        if mode is Encoding.USER_PASSWORD:
            return c in _USERINFO_ESCAPED
        return True

    # Everything else must be escaped
    return True


def _to_bytes(s: str) -> bytes:
    return s.encode("utf-8", "surrogateescape")


def escape(s: str, mode: Encoding) -> str:
    """
    Percent-encode ``s`` for the given component.

    Example:
        >>> escape("project x", Encoding.QUERY_COMPONENT)
        'project%20x'
        >>> escape("j@s0n", Encoding.USER_PASSWORD)
        'j%40s0n'
    """
    data = _to_bytes(s)
    if not any(should_escape(c, mode) for c in data):
        return s

    parts = []
    for c in data:
        if should_escape(c, mode):
            parts.append("%" + UPPERHEX[c >> 4] + UPPERHEX[c & 15])
        else:
            parts.append(chr(c))
    return "".join(parts)


def _scan(data: bytes) -> int:
    """Validate every escape in ``data`` and return how many there are."""
    count = 0
    i = 0
    while i < len(data):
        if data[i] == 0x25:  # '%'
            if i + 2 >= len(data) or (
                data[i + 1] not in HEXDIGITS or data[i + 2] not in HEXDIGITS
            ):
                raise EscapeError(_fragment(data, i))
            count += 1
            i += 3
        else:
            i += 1
    return count


def _fragment(data: bytes, i: int) -> str:
    return data[i : i + 3].decode("utf-8", "surrogateescape")


def check_unescape(s: str) -> None:
    """
    Validate the percent-encoding of ``s`` without decoding it.

    Raises:
        EscapeError: If a '%' is not followed by two hex digits
    """
    _scan(_to_bytes(s))


def unescape(s: str) -> str:
    """
    Decode every ``%XY`` triplet in ``s``.

    Each triplet is decoded to a single byte and the bytes are reassembled
    as UTF-8, so ``%CE%94`` yields ``Δ``. A ``+`` is left as is.

    Raises:
        EscapeError: If a '%' is not followed by two hex digits; the error
            carries the offending fragment ('%', '%X' or '%XY')

    Example:
        >>> unescape("j%40s0n")
        'j@s0n'
    """
    data = _to_bytes(s)
    if _scan(data) == 0:
        return s

    out = bytearray()
    i = 0
    while i < len(data):
        if data[i] == 0x25:
            out.append(int(data[i + 1 : i + 3], 16))
            i += 3
        else:
            out.append(data[i])
            i += 1
    return out.decode("utf-8", "surrogateescape")


def encode_values(values: Mapping[str, Iterable[str]], separator: str = "&") -> str:
    """
    Encode a multi-valued mapping as ``key=value`` pairs.

    Keys are sorted so the output is deterministic. A key is repeated once
    per value it holds, and both key and value are escaped as query
    components (a space becomes ``%20``).

    Example:
        >>> encode_values({"dog": ["bark!", "woof@"], "cat": ["meow"]})
        'cat=meow&dog=bark%21&dog=woof%40'
    """
    pairs = []
    for key in sorted(values):
        key_escaped = escape(key, Encoding.QUERY_COMPONENT)
        for value in values[key]:
            pairs.append(f"{key_escaped}={escape(value, Encoding.QUERY_COMPONENT)}")
    return separator.join(pairs)


__all__ = [
    "Encoding",
    "should_escape",
    "escape",
    "unescape",
    "check_unescape",
    "encode_values",
]
