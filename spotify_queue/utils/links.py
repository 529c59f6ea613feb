"""
Utilities for parsing Spotify links pasted into chat.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from spotify_queue.models.track import ResourceKind, SpotifyLink

# Checked in this order; the first kind found in the path wins.
_KIND_ORDER = (
    ResourceKind.PLAYLIST,
    ResourceKind.ALBUM,
    ResourceKind.TRACK,
    ResourceKind.ARTIST,
)

# Chat clients such as TeamSpeak wrap pasted links in BBCode.
_BBCODE = re.compile(r"\[/?url(?:=[^\]]*)?\]", re.IGNORECASE)


def _parse_uri(link: str) -> Optional[SpotifyLink]:
    """Parses 'spotify:<kind>:<id>' URIs."""
    parts = link.split(":")
    if len(parts) != 3 or not parts[2]:
        return None
    for kind in _KIND_ORDER:
        if parts[1] == kind.value:
            return SpotifyLink(kind=kind, id=parts[2])
    return None


def parse_spotify_link(link: str) -> Optional[SpotifyLink]:
    """
    Parses a Spotify web link to extract the resource kind and id.

    The id is the last non-empty path segment. The kind is a substring match
    on the segments before it. Query strings and fragments are ignored.

    Returns:
        The parsed link, or None if the link is not a supported Spotify link.
    """
    link = _BBCODE.sub("", link or "").strip()
    if not link:
        return None

    if link.lower().startswith("spotify:"):
        return _parse_uri(link)

    path = urlsplit(link).path if "://" in link else link.split("?", 1)[0]
    segments = [s for s in path.split("/") if s.strip()]
    if not segments:
        return None

    resource_id = segments[-1].strip()
    prefix = "/".join(segments[:-1])
    for kind in _KIND_ORDER:
        if kind.value in prefix:
            return SpotifyLink(kind=kind, id=resource_id)
    return None
