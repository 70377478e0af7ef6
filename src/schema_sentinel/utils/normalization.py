import re
from typing import List, Pattern, Tuple
from urllib.parse import urlsplit

_UUID_SEGMENT = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
_HASH_SEGMENT = re.compile(r"[0-9a-f]{8,}", re.IGNORECASE)


def normalize_segment(seg: str) -> str:
    """
    Replaces one dynamic path segment with a placeholder.

    - UUIDs:        550e8400-e29b-41d4-a716-446655440000  → {uuid}
    - Numeric IDs:  12345                                 → {id}
    - Hex hashes:   a1b2c3d4e5f6 (8+ hex chars)           → {hash}
    """
    if not seg:
        return seg
    if _UUID_SEGMENT.fullmatch(seg):
        return "{uuid}"
    if seg.isdigit():
        return "{id}"
    if _HASH_SEGMENT.fullmatch(seg):
        return "{hash}"
    return seg


class EndpointNormalizer:
    """
    Maps a request (method + URI) to its endpoint key, e.g.
    ``GET https://api.example.com/orders/123?page=2`` → ``GET /orders/{id}``.

    Custom patterns registered with ``add_pattern`` run before the built-in
    segment rules, in registration order.
    """

    def __init__(self):
        self._patterns: List[Tuple[Pattern, str]] = []

    def add_pattern(self, pattern: str, replacement: str) -> "EndpointNormalizer":
        self._patterns.append((re.compile(pattern), replacement))
        return self

    def normalize(self, method: str, uri: str, strip_query: bool = True) -> str:
        parts = urlsplit(uri)
        path = parts.path

        for pattern, replacement in self._patterns:
            path = pattern.sub(replacement, path)

        path = "/".join(normalize_segment(seg) for seg in path.split("/"))
        if not path.startswith("/"):
            path = "/" + path

        if not strip_query and parts.query:
            path = f"{path}?{parts.query}"

        return f"{method.upper()} {path}"
