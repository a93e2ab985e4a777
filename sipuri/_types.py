"""
Type definitions and exceptions for SIP URIs.

This module centralizes the scheme enum, the malform causes and the
exception hierarchy raised while escaping, decoding and parsing URIs.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ._utils import SIP_PROTOCOL, SIPS_PROTOCOL


# =============================================================================
# Scheme
# =============================================================================


class Scheme(Enum):
    """The two SIP URI schemes (RFC 3261 Section 19.1)."""

    SIP = "sip"
    SIPS = "sips"

    @property
    def prefix(self) -> str:
        """The literal prefix including the colon, e.g. ``sips:``."""
        return SIPS_PROTOCOL if self is Scheme.SIPS else SIP_PROTOCOL

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Malform causes
# =============================================================================


class MalformCause(Enum):
    """
    Which part of the URI failed to parse.

    The cause relating to the earliest part of the URI is reported.
    UNSPECIFIED is used as a wildcard when matching errors.
    """

    UNSPECIFIED = "unspecified"
    MISSING_USER = "missing user"
    MISSING_HOST = "missing host"
    MALFORMED_USER = "malformed user"
    MALFORMED_HOST = "malformed host"
    MALFORMED_PARAMS = "malformed params"
    MALFORMED_HEADERS = "malformed headers"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Exceptions
# =============================================================================


class SIPURIError(ValueError):
    """Base exception for SIP URI errors."""

    pass


class InvalidSchemeError(SIPURIError):
    """Raised when a string does not start with sip: or sips:."""

    def __init__(self, message: str = "sip: scheme invalid") -> None:
        super().__init__(message)


class EscapeError(SIPURIError):
    """Raised when a byte has been incorrectly percent-encoded."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f'sip: invalid URL escape "{fragment}"')


class HostPortError(SIPURIError):
    """Raised when the host portion has a malformed IPv6 literal or port."""

    def __init__(self, host: str, reason: str) -> None:
        self.host = host
        self.reason = reason
        super().__init__(f"address {host}: {reason}")


class MalformedURIError(SIPURIError):
    """
    Raised when a sip or sips URI cannot be processed.

    Attributes:
        cause: The part of the URI that is malformed
        err: The underlying error, if any (also chained as __cause__)
    """

    def __init__(
        self,
        cause: MalformCause = MalformCause.UNSPECIFIED,
        err: Optional[Exception] = None,
    ) -> None:
        self.cause = cause
        self.err = err
        super().__init__(self._describe())

    def _describe(self) -> str:
        message = "sip: malformed uri"
        if self.cause is not MalformCause.UNSPECIFIED:
            message += f": {self.cause}"
        if self.err is not None:
            message += f": {self.err}"
        return message

    def matches(self, other: object) -> bool:
        """
        Check whether this error satisfies ``other``.

        A target with an UNSPECIFIED cause matches any MalformedURIError,
        otherwise the causes must be equal.

        Example:
            >>> MalformedURIError(MalformCause.MISSING_USER).matches(MalformedURIError())
            True
            >>> MalformedURIError().matches(MalformedURIError(MalformCause.MISSING_USER))
            False
        """
        if not isinstance(other, MalformedURIError):
            return False
        return other.cause is MalformCause.UNSPECIFIED or other.cause is self.cause

    def __repr__(self) -> str:
        return f"MalformedURIError(cause={self.cause.name}, err={self.err!r})"


__all__ = [
    "Scheme",
    "MalformCause",
    "SIPURIError",
    "InvalidSchemeError",
    "EscapeError",
    "HostPortError",
    "MalformedURIError",
]
