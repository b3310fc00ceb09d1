"""Connection parameter validators for nativeftp.

Each validator returns an ``(is_valid, error_message)`` tuple so callers
can decide whether to raise or report.
"""

import ipaddress
import re
from typing import Optional, Tuple

ValidationResult = Tuple[bool, Optional[str]]

# One DNS label: letters, digits and inner hyphens
HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")

PORT_RANGE = (1, 65535)

# Connect timeout bounds in seconds
MIN_TIMEOUT = 1
MAX_TIMEOUT = 600


def validate_ip_address(ip: str) -> ValidationResult:
    """
    Validate an IPv4 or IPv6 address.

    IPv6 addresses may be given in brackets, as in URLs.
    """
    if not ip or not ip.strip():
        return False, "IP address is required"

    candidate = ip.strip()
    if candidate.startswith("[") and candidate.endswith("]"):
        candidate = candidate[1:-1]

    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return False, f"Invalid IP address format: {ip.strip()}"
    return True, None


def validate_hostname(hostname: str) -> ValidationResult:
    """Validate a DNS hostname; a single trailing dot is accepted."""
    if not hostname or not hostname.strip():
        return False, "Hostname is required"

    hostname = hostname.strip()
    name = hostname[:-1] if hostname.endswith(".") else hostname
    if len(name) > 253 or not all(HOSTNAME_LABEL.match(label) for label in name.split(".")):
        return False, f"Invalid hostname format: {hostname}"
    return True, None


def validate_host(host: str) -> ValidationResult:
    """
    Validate a host given as an IP address or hostname.

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    if validate_ip_address(host)[0] or validate_hostname(host)[0]:
        return True, None

    return False, f"Invalid host: {host.strip()}. Must be a valid IP address or hostname."


def _validate_range(value, label: str, low: int, high: int, unit: str = "") -> ValidationResult:
    if isinstance(value, bool):
        return False, f"{label} must be a number"
    try:
        value = int(value)
    except (ValueError, TypeError):
        return False, f"{label} must be a number"

    if not low <= value <= high:
        return False, f"{label} must be between {low} and {high}{unit}, got {value}"
    return True, None


def validate_port(port: int) -> ValidationResult:
    """Validate a TCP port number."""
    return _validate_range(port, "Port", *PORT_RANGE)


def validate_timeout(timeout: int) -> ValidationResult:
    """Validate a connect timeout in seconds."""
    return _validate_range(timeout, "Timeout", MIN_TIMEOUT, MAX_TIMEOUT, unit=" seconds")
