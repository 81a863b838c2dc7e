"""Validation of caller-supplied webhook and status URLs (SSRF guard)."""

from __future__ import annotations

import asyncio
import ipaddress
import socket
from urllib.parse import urlparse

from n8n_gateway.middleware.error_handler import UrlOverrideRejectedError


# Private/reserved IP networks
_PRIVATE_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

_ALLOWED_SCHEMES = {"http", "https"}


def is_private_ip(ip_str: str) -> bool:
    """Check if an IP address is in a private/reserved range."""
    try:
        addr = ipaddress.ip_address(ip_str)
        return any(addr in network for network in _PRIVATE_NETWORKS)
    except ValueError:
        return True  # Invalid IP → reject


async def validate_url(url: str, allow_private: bool = False) -> bool:
    """Validate a webhook or status URL supplied by a caller.

    Returns True if the URL uses http/https and, unless ``allow_private`` is
    set, resolves only to public IPs. Self-hosted n8n instances on a private
    network need ``allow_private=True``.
    """
    try:
        parsed = urlparse(url)
        if parsed.scheme not in _ALLOWED_SCHEMES:
            return False
        if not parsed.hostname:
            return False
        if allow_private:
            return True

        infos = await asyncio.get_running_loop().getaddrinfo(parsed.hostname, None)
        for info in infos:
            ip = info[4][0]
            if is_private_ip(ip):
                return False
        return True
    except (socket.gaierror, ValueError, OSError):
        return False


async def ensure_url_allowed(
    url: str | None,
    *,
    allow_override: bool,
    allow_private: bool,
) -> None:
    """Reject a caller-supplied URL override that policy or validation forbids.

    ``None`` means no override and always passes.
    """
    if url is None:
        return
    if not allow_override:
        raise UrlOverrideRejectedError("URL overrides are disabled")
    if not await validate_url(url, allow_private=allow_private):
        raise UrlOverrideRejectedError(
            "Invalid URL: only http/https URLs to public hosts are allowed"
        )
