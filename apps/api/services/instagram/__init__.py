"""Instagram web client utilities."""

from services.instagram.client import InstagramClient, build_http_client, parse_cookie_string
from services.instagram.media import (
    InvalidPostReferenceError,
    extract_shortcode,
    media_id_from_post_url,
    shortcode_to_media_id,
)
from services.instagram.session import CookieRetrievalResult, is_logged_in, retrieve_session_cookies

__all__ = [
    "CookieRetrievalResult",
    "InstagramClient",
    "InvalidPostReferenceError",
    "build_http_client",
    "extract_shortcode",
    "is_logged_in",
    "media_id_from_post_url",
    "parse_cookie_string",
    "retrieve_session_cookies",
    "shortcode_to_media_id",
]
