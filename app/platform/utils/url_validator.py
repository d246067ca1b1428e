from urllib.parse import urlparse
from typing import Tuple


def normalize_url(url: str) -> Tuple[str, bool]:

    url = url.strip()

    parsed = urlparse(url)

    if not parsed.scheme:
        normalized = f"https://{url}"
        return normalized, True

    return url, False


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Check that a scan target is an absolute http(s) URL with a host.

    Returns:
        (is_valid, normalized_url, error_message)
    """
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    normalized_url, _ = normalize_url(url)

    try:
        parsed = urlparse(normalized_url)
        hostname = parsed.hostname
        # Accessing .port validates it
        parsed.port
    except ValueError as e:
        return False, normalized_url, f"URL parsing error: {str(e)}"

    if parsed.scheme not in ['http', 'https']:
        return False, normalized_url, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

    if not hostname:
        return False, normalized_url, "Invalid URL format: missing domain"

    if any(ch.isspace() for ch in hostname):
        return False, normalized_url, f"Invalid URL format: bad host {hostname!r}"

    return True, normalized_url, ""
