"""sipuri - Parse, validate and rebuild SIP and SIPS URIs (RFC 3261 Section 19.1)."""

from __future__ import annotations

# Parsing
from ._parse import parse, parse_lazy

# URI model
from ._uri import URI, new, split_host_port

# Key-value stores
from ._store import EmptyStore, KeyValuePairs, KeyValueStore, LazyStore

# Escaping
from ._escape import (
    Encoding,
    check_unescape,
    encode_values,
    escape,
    should_escape,
    unescape,
)

# Types
from ._types import (
    EscapeError,
    HostPortError,
    InvalidSchemeError,
    MalformCause,
    MalformedURIError,
    Scheme,
    SIPURIError,
)

# Utilities
from ._utils import (
    DEFAULT_PORT,
    DEFAULT_TLS_PORT,
    SIP_PROTOCOL,
    SIPS_PROTOCOL,
    console,
    logger,
)

__version__ = "0.1.0"

__all__ = [
    # Parsing - Main API
    "parse",
    "parse_lazy",
    # URI - Model
    "URI",
    "Scheme",
    "new",
    "split_host_port",
    # Stores - Base class
    "KeyValueStore",
    # Stores - Implementations
    "KeyValuePairs",
    "LazyStore",
    "EmptyStore",
    # Escaping
    "Encoding",
    "should_escape",
    "escape",
    "unescape",
    "check_unescape",
    "encode_values",
    # Errors
    "SIPURIError",
    "InvalidSchemeError",
    "MalformedURIError",
    "MalformCause",
    "EscapeError",
    "HostPortError",
    # Utilities - Console & Logging
    "console",
    "logger",
    # Constants
    "SIP_PROTOCOL",
    "SIPS_PROTOCOL",
    "DEFAULT_PORT",
    "DEFAULT_TLS_PORT",
    # Metadata
    "__version__",
]
