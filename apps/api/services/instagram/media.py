"""Post reference parsing and shortcode to media id decoding."""

from __future__ import annotations

import re
import string

SHORTCODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"

_SHORTCODE_RE = re.compile(r"/(?:p|reel|tv)/([A-Za-z0-9_-]+)")


class InvalidPostReferenceError(ValueError):
    """Raised when a post URL does not carry an extractable shortcode."""


def extract_shortcode(post_url: str) -> str:
    """Return the shortcode from a post URL such as https://www.instagram.com/p/ABC123/."""
    match = _SHORTCODE_RE.search(str(post_url or ""))
    if not match:
        raise InvalidPostReferenceError("Invalid post URL format")
    return match.group(1)


def shortcode_to_media_id(shortcode: str) -> str:
    """
    Decode a shortcode into Instagram's numeric media id.

    Each character is a base-64 digit over SHORTCODE_ALPHABET, most significant
    first. The result is returned as a decimal string.
    """
    if not shortcode:
        raise InvalidPostReferenceError("Shortcode is empty")
    media_id = 0
    for char in shortcode:
        digit = SHORTCODE_ALPHABET.find(char)
        if digit < 0:
            raise InvalidPostReferenceError(f"Invalid shortcode character: {char!r}")
        media_id = media_id * 64 + digit
    return str(media_id)


def media_id_from_post_url(post_url: str) -> str:
    return shortcode_to_media_id(extract_shortcode(post_url))
