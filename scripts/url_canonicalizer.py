#!/usr/bin/env python3
"""
URL Canonicalizer

Produces the identity key used to decide whether two document URLs refer to
the same resource. Query string and fragment never take part in identity, and
a single trailing slash is insignificant:

    canonicalize("https://x.com/a?b=1#c") == canonicalize("https://x.com/a/")
                                          == canonicalize("https://x.com/a")

Scheme and host are lowercased and a scheme's default port is dropped, the
same way a browser URL parser serializes them.

A valid URL needs both a scheme and a host. Host-less URLs such as
mailto:docs@x.com or urn:isbn:123 are invalid, and validate-frontmatter
reports them as invalid_url.
"""

from typing import Optional
from urllib.parse import SplitResult, urlsplit


DEFAULT_PORTS = {
    'http': 80,
    'https': 443,
    'ws': 80,
    'wss': 443,
    'ftp': 21,
}


class InvalidURLError(ValueError):
    """Raised when a string cannot be parsed as an absolute URL."""
    pass


def _split(url: str) -> SplitResult:
    """Split and sanity-check a URL, raising InvalidURLError on failure."""
    if not isinstance(url, str) or not url:
        raise InvalidURLError(f"Not a URL: {url!r}")

    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL {url!r}: {e}") from e

    if not parts.scheme:
        raise InvalidURLError(f"URL has no scheme: {url!r}")
    if not parts.hostname:
        raise InvalidURLError(f"URL has no host: {url!r}")
    if any(ch.isspace() for ch in parts.netloc):
        raise InvalidURLError(f"URL host contains whitespace: {url!r}")

    return parts


def _host(parts: SplitResult) -> str:
    """Lowercased host with non-default port, brackets restored for IPv6."""
    host = parts.hostname
    if ':' in host:
        host = f"[{host}]"
    port = parts.port
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme.lower()):
        host = f"{host}:{port}"
    return host


def is_valid_url(url: object) -> bool:
    """Return True if url parses as an absolute URL with a host."""
    try:
        _split(url)
    except InvalidURLError:
        return False
    return True


def canonicalize(url: str) -> str:
    """
    Compute the canonical identity key for a URL.

    Args:
        url: URL string as found in document frontmatter

    Returns:
        Canonical key: scheme://[userinfo@]host[:port]/path without query,
        fragment, or one trailing slash

    Raises:
        InvalidURLError: If url cannot be parsed

    Example:
        >>> canonicalize("HTTPS://Docs.Example.com:443/guide/?tab=1#intro")
        'https://docs.example.com/guide'
    """
    parts = _split(url)

    userinfo, sep, _ = parts.netloc.rpartition('@')
    authority = f"{userinfo}{sep}{_host(parts)}"

    key = f"{parts.scheme.lower()}://{authority}{parts.path}"
    if key.endswith('/'):
        key = key[:-1]
    return key


def has_query_or_fragment(url: str) -> bool:
    """Return True if url is valid and carries a non-empty query or fragment."""
    try:
        parts = _split(url)
    except InvalidURLError:
        return False
    return bool(parts.query or parts.fragment)


def strip_query_and_fragment(url: str) -> Optional[str]:
    """
    Rewrite url to scheme, host and path only.

    Trailing slashes left at the end of the path are removed as well.

    Returns:
        Rewritten URL, or None if url is not a valid URL
    """
    try:
        parts = _split(url)
    except InvalidURLError:
        return None
    return f"{parts.scheme.lower()}://{_host(parts)}{parts.path}".rstrip('/')
