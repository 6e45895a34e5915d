"""
Common utility functions for URI handling.

Shared helpers used by the schema loader and the command line interface
to move between CURIEs, full URIs and short display names.
"""

from typing import Dict, Optional


def expand_curie(curie: str, prefixes: Dict[str, str]) -> str:
    """Expand a CURIE (prefix:local) to a full URI.

    Full URIs, optionally wrapped in angle brackets, are returned
    unwrapped.  CURIEs with an unknown prefix are returned unchanged.
    """
    curie = str(curie).strip()
    if curie.startswith("<") and curie.endswith(">"):
        return curie[1:-1]
    if ":" not in curie or curie.startswith(("http://", "https://")):
        return curie
    pfx, local = curie.split(":", 1)
    ns = prefixes.get(pfx)
    return f"{ns}{local}" if ns else curie


def get_local_name(uri: str) -> str:
    """Extract the local name from a URI.

    Examples::

        >>> get_local_name("http://example.org/foo#Bar")
        'Bar'
        >>> get_local_name("http://example.org/foo/Bar")
        'Bar'
    """
    if "#" in uri:
        return uri.split("#")[-1]
    return uri.rstrip("/").rsplit("/", 1)[-1] if "/" in uri else uri


def compact_uri(uri: str, prefixes: Dict[str, str]) -> str:
    """Compact a URI using the given prefix map.

    Returns ``prefix:localName`` if a match is found, otherwise the
    original URI.
    """
    for pfx, ns in prefixes.items():
        if uri.startswith(ns):
            return f"{pfx}:{uri[len(ns):]}"
    return uri


def shorten_for_display(
    uri: str,
    prefixes: Optional[Dict[str, str]] = None,
) -> str:
    """Shorten a URI for display: try CURIE first, then local name."""
    if prefixes:
        compact = compact_uri(uri, prefixes)
        if compact != uri:
            return compact
    return get_local_name(uri)
