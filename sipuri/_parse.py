"""
Parser for SIP and SIPS URIs.

Splits the URI on fixed single-character delimiters in one pass, decodes
each component and raises on the first malformed part found when reading
left to right.
"""

from __future__ import annotations

from ._escape import unescape
from ._store import EmptyStore, KeyValuePairs, KeyValueStore, LazyStore
from ._types import (
    EscapeError,
    HostPortError,
    InvalidSchemeError,
    MalformCause,
    MalformedURIError,
    Scheme,
)
from ._uri import URI, split_host_port
from ._utils import HEADERS_SEPARATOR, PARAMS_SEPARATOR, SIP_PROTOCOL, SIPS_PROTOCOL, logger


def parse(uri: str) -> URI:
    """
    Parse a SIP or SIPS URI, decoding parameters and headers immediately.

    Example:
        >>> uri = parse("sip:alice:secretword@atlanta.com;transport=tcp")
        >>> uri.user, uri.password, uri.host, uri.transport
        ('alice', 'secretword', 'atlanta.com', 'TCP')

    Raises:
        InvalidSchemeError: If the URI does not start with sip: or sips:
        MalformedURIError: If any component is missing or malformed
    """
    return _parse_scheme(uri, lazy=False)


def parse_lazy(uri: str) -> URI:
    """
    Parse a SIP or SIPS URI, deferring parameter and header decoding.

    Escapes are still validated up front, so this raises exactly what
    :func:`parse` raises for the same input.
    """
    return _parse_scheme(uri, lazy=True)


def _parse_scheme(uri: str, lazy: bool) -> URI:
    if uri.startswith(SIP_PROTOCOL):
        return _parse(Scheme.SIP, uri[len(SIP_PROTOCOL) :], lazy)

    if uri.startswith(SIPS_PROTOCOL):
        return _parse(Scheme.SIPS, uri[len(SIPS_PROTOCOL) :], lazy)

    logger.debug(f"Rejected URI without sip: or sips: scheme: {uri!r}")
    raise InvalidSchemeError()


def _malformed(uri: str, cause: MalformCause, err: Exception | None = None) -> MalformedURIError:
    logger.debug(f"Malformed URI {uri!r}: {cause}")
    return MalformedURIError(cause, err)


def _decode_store(raw: str, separator: str, lazy: bool) -> KeyValueStore:
    if not raw:
        return EmptyStore()
    store: KeyValueStore = LazyStore() if lazy else KeyValuePairs()
    store.decode(raw, separator)
    return store


def _parse(scheme: Scheme, uri: str, lazy: bool) -> URI:
    # '@' is reserved in the user portion, so the first one ends the userinfo
    userinfo, has_at, postfix = uri.partition("@")

    if has_at:
        # §19.1.1 "If the @ sign is present in a SIP or SIPS URI, the user
        # field MUST NOT be empty."
        if not userinfo:
            raise _malformed(uri, MalformCause.MISSING_USER)
    else:
        userinfo, postfix = "", userinfo

    # The uri must have been a single '@'
    if not postfix:
        raise _malformed(uri, MalformCause.MISSING_HOST)

    prefix, had_headers, headers = postfix.partition("?")
    host, had_params, params = prefix.partition(";")

    # §19.1.2 host is mandatory in all contexts
    if not host:
        raise _malformed(uri, MalformCause.MISSING_HOST)

    # ':' must be escaped in the userinfo, so the first one splits it
    user, had_password, password = userinfo.partition(":")

    try:
        user = unescape(user)
        password = unescape(password)
    except EscapeError as e:
        raise _malformed(uri, MalformCause.MALFORMED_USER, e) from e

    # Typically the host has no escapes but the grammar allows them
    try:
        host = unescape(host)
    except EscapeError as e:
        raise _malformed(uri, MalformCause.MALFORMED_HOST, e) from e

    try:
        split_host_port(host)
    except HostPortError as e:
        raise _malformed(uri, MalformCause.MALFORMED_HOST, e) from e

    try:
        param_store = _decode_store(params, PARAMS_SEPARATOR, lazy)
    except EscapeError as e:
        raise _malformed(uri, MalformCause.MALFORMED_PARAMS, e) from e

    try:
        header_store = _decode_store(headers, HEADERS_SEPARATOR, lazy)
    except EscapeError as e:
        raise _malformed(uri, MalformCause.MALFORMED_HEADERS, e) from e

    return URI(
        scheme=scheme,
        user=user,
        password=password,
        host=host,
        params=param_store,
        headers=header_store,
        had_password=bool(had_password),
        had_params=bool(had_params),
        had_headers=bool(had_headers),
    )


__all__ = [
    "parse",
    "parse_lazy",
]
