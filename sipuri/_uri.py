"""
SIP URI model.

A general SIP URI looks like::

    sip:user:password@host:port;uri-parameters?headers

See RFC 3261 Section 19.1.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional, Union

import rich.repr

from ._escape import Encoding, escape
from ._store import EmptyStore, KeyValuePairs, KeyValueStore
from ._types import HostPortError, MalformCause, MalformedURIError, Scheme
from ._utils import (
    DEFAULT_TLS_PORT,
    DEFAULT_TRANSPORTS,
    HEADERS_SEPARATOR,
    PARAMS_SEPARATOR,
    TRANSPORT_PORTS,
    logger,
)

StoreLike = Union[KeyValueStore, Mapping[str, Iterable[str]]]


def split_host_port(host: str) -> tuple[str, str]:
    """
    Split an optional port from a host.

    A host beginning with '[' is a bracketed IPv6 literal which may be
    followed by ':port' and must hold an even number of colons. Otherwise
    a single colon separates host and port.
    The brackets are removed from the returned hostname.

    Examples:
        >>> split_host_port("atlanta.com")
        ('atlanta.com', '')
        >>> split_host_port("[::1]:5060")
        ('::1', '5060')

    Raises:
        HostPortError: If the brackets or colons are malformed
    """
    if host.startswith("["):
        end = host.find("]")
        if end < 0:
            raise HostPortError(host, "missing ']' in address")
        hostname = host[1:end]
        if "[" in hostname:
            raise HostPortError(host, "unexpected '[' in address")
        if hostname.count(":") % 2 == 1:
            raise HostPortError(host, "odd number of colons in IPv6 address")
        rest = host[end + 1 :]
        if not rest:
            return hostname, ""
        if rest[0] != ":":
            raise HostPortError(host, "unexpected text after ']' in address")
        port = rest[1:]
        if ":" in port or "]" in port or "[" in port:
            raise HostPortError(host, "too many colons in address")
        return hostname, port

    colons = host.count(":")
    if colons == 0:
        return host, ""
    if colons > 1:
        raise HostPortError(host, "too many colons in address")

    hostname, _, port = host.partition(":")
    if "[" in hostname or "]" in hostname:
        raise HostPortError(host, "unexpected '[' or ']' in address")
    if "[" in port or "]" in port:
        raise HostPortError(host, "unexpected '[' or ']' in address")
    return hostname, port


def _as_store(value: Optional[StoreLike]) -> KeyValueStore:
    if value is None:
        return EmptyStore()
    if isinstance(value, KeyValueStore):
        return value
    if isinstance(value, Mapping):
        return KeyValuePairs(value)
    raise TypeError("params and headers must be a KeyValueStore or Mapping")


@dataclass(frozen=True)
class URI:
    """
    The components that make up a SIP or SIPS URI.

    Values are held decoded. The ``had_*`` flags record whether a delimiter
    was present in the source so that ``str()`` reproduces it even when
    the component after it is empty.

    Examples:
        >>> uri = URI(Scheme.SIP, user="alice", host="atlanta.com")
        >>> str(uri)
        'sip:alice@atlanta.com'
        >>> uri.transport, uri.port
        ('UDP', '5060')
    """

    scheme: Scheme = Scheme.SIP
    user: str = ""
    password: str = ""
    host: str = ""
    # Stores compare by content but are not hashable
    params: KeyValueStore = field(default_factory=EmptyStore, hash=False)
    headers: KeyValueStore = field(default_factory=EmptyStore, hash=False)

    had_password: bool = False
    had_params: bool = False
    had_headers: bool = False

    def __post_init__(self) -> None:
        # §19.1.2 host is mandatory in all contexts
        if not self.host:
            raise MalformedURIError(MalformCause.MISSING_HOST)

        object.__setattr__(self, "params", _as_store(self.params))
        object.__setattr__(self, "headers", _as_store(self.headers))

        if self.password and not self.had_password:
            object.__setattr__(self, "had_password", True)

    @property
    def is_secure(self) -> bool:
        """Check if the URI uses the SIPS scheme."""
        return self.scheme is Scheme.SIPS

    @property
    def transport(self) -> str:
        """
        Transport protocol used to reach the host.

        The ``transport`` parameter wins, otherwise §19.1.2 "For sip:, it is
        UDP. For sips:, it is TCP."
        """
        transport = self.params.get("transport")
        if transport:
            return transport.upper()
        return DEFAULT_TRANSPORTS[self.scheme.value]

    @property
    def port(self) -> str:
        """
        Port split from the host, or the default for scheme and transport.

        §19.1.2 "The default is 5060 for sip: using UDP, TCP, or SCTP. The
        default is 5061 for sip: using TLS over TCP and sips: over TCP."
        Empty for sip: with an unknown transport.
        """
        try:
            _, port = self.split_host_port()
        except HostPortError as e:
            logger.debug(f"Ignoring malformed host for port lookup: {e}")
            port = ""

        if port:
            return port

        if self.is_secure:
            return DEFAULT_TLS_PORT

        return TRANSPORT_PORTS.get(self.transport, "")

    def split_host_port(self) -> tuple[str, str]:
        """Split the port from the host portion, see :func:`split_host_port`."""
        return split_host_port(self.host)

    def to_string(self) -> str:
        """Rebuild the URI string, respecting the delimiters of the input."""
        parts = [self.scheme.prefix]

        if self.user:
            parts.append(escape(self.user, Encoding.USER_PASSWORD))
            if self.had_password or self.password:
                parts.append(":")
            if self.password:
                parts.append(escape(self.password, Encoding.USER_PASSWORD))
            parts.append("@")  # only present when user is non-empty

        parts.append(escape(self.host, Encoding.HOST))

        if self.had_params or not self.params.empty():
            parts.append(";")
        if not self.params.empty():
            parts.append(self.params.encode(PARAMS_SEPARATOR))

        if self.had_headers or not self.headers.empty():
            parts.append("?")
        if not self.headers.empty():
            parts.append(self.headers.encode(HEADERS_SEPARATOR))

        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def __rich_repr__(self) -> rich.repr.Result:
        yield "scheme", self.scheme
        yield "user", self.user, ""
        yield "password", self.password, ""
        yield "host", self.host
        yield "params", self.params
        yield "headers", self.headers


def new(
    user: str,
    host: str,
    *,
    password: Optional[str] = None,
    params: Optional[StoreLike] = None,
    headers: Optional[StoreLike] = None,
    secure: bool = False,
) -> URI:
    """
    Construct a SIP URI from its components.

    Supplying ``password``, ``params`` or ``headers`` (even empty) marks the
    matching delimiter as present. Use of a password is not advised and is
    inherently insecure.

    Example:
        >>> str(new("alice", "atlanta.com", params={"transport": ["tcp"]}, secure=True))
        'sips:alice@atlanta.com;transport=tcp'

    Raises:
        MalformedURIError: If ``host`` is empty
    """
    return URI(
        scheme=Scheme.SIPS if secure else Scheme.SIP,
        user=user,
        password=password or "",
        host=host,
        params=_as_store(params),
        headers=_as_store(headers),
        had_password=password is not None,
        had_params=params is not None,
        had_headers=headers is not None,
    )


__all__ = [
    "URI",
    "new",
    "split_host_port",
]
