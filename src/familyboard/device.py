"""Device identity used to namespace artifact filenames."""

import re
import socket
from typing import Optional

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def sanitize_device_name(name: str) -> str:
    """Replace every character that is not ASCII alphanumeric with '-'."""
    return _UNSAFE.sub("-", name)


def device_identity(hostname: Optional[str] = None, override: Optional[str] = None) -> str:
    """Compute the filesystem-safe device identity.

    Args:
        hostname: Hostname to derive from (defaults to the local hostname)
        override: Configured device name; takes precedence over the hostname

    Returns:
        Identity string, e.g. "family-mac" for "family.mac"
    """
    if override:
        return sanitize_device_name(override)
    return sanitize_device_name(hostname if hostname is not None else socket.gethostname())
