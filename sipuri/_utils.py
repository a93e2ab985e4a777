"""Utilities and constants for SIP URIs."""

import logging
from rich.console import Console
from rich.logging import RichHandler

# Rich Console for pretty printing
console = Console()

# Package logger with a RichHandler; quiet unless the caller lowers the level
logger = logging.getLogger("sipuri")
_handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
logger.addHandler(_handler)
logger.setLevel(logging.WARNING)

# Scheme prefixes (RFC 3261 Section 19.1)
SIP_PROTOCOL = "sip:"
SIPS_PROTOCOL = "sips:"

# Separators used by the uri-parameters and headers blocks
PARAMS_SEPARATOR = ";"
HEADERS_SEPARATOR = "&"

DEFAULT_PORT = "5060"
DEFAULT_TLS_PORT = "5061"

# Default transport per scheme (RFC 3261 Section 19.1.2)
DEFAULT_TRANSPORTS = {
    "sip": "UDP",
    "sips": "TCP",
}

# Default port for sip: keyed by transport (RFC 3261 Section 19.1.2)
TRANSPORT_PORTS = {
    "UDP": DEFAULT_PORT,
    "TCP": DEFAULT_PORT,
    "SCTP": DEFAULT_PORT,
    "TLS": DEFAULT_TLS_PORT,
}
