"""General helper utilities."""

import logging
import socket
import uuid

logger = logging.getLogger(__name__)


def generate_request_id() -> str:
    """Generate a fresh unique request id."""
    return f"agent-{uuid.uuid4()}"


def get_default_ip() -> str:
    """Return the local IPv4 address used for outbound traffic, or loopback."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # UDP connect sends no packets; it only selects the outbound interface.
        sock.connect(("8.8.8.8", 80))
        address = sock.getsockname()[0]
    except OSError as exc:
        logger.debug("Default interface lookup failed: %s", exc)
        return "127.0.0.1"
    finally:
        sock.close()
    if not address or address.startswith("127."):
        return "127.0.0.1"
    return address
