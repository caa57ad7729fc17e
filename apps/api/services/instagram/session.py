"""Web login cookie retrieval and session cookie checks."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx

from services.instagram.client import InstagramClient

logger = logging.getLogger(__name__)

ESSENTIAL_COOKIES = ("csrftoken", "sessionid", "ds_user_id", "mid", "ig_did", "ig_nrcb", "rur")


@dataclass(frozen=True)
class CookieRetrievalResult:
    success: bool
    message: str
    cookies: Dict[str, str] = field(default_factory=dict)
    cookie_string: str = ""


def _collect_set_cookies(response: httpx.Response, into: Dict[str, str]) -> None:
    for header in response.headers.get_list("set-cookie"):
        name, sep, value = header.split(";", 1)[0].partition("=")
        if name.strip() and sep:
            into[name.strip()] = value.strip()


def _join_cookies(cookies: Dict[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items() if value)


def _json_object(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


async def retrieve_session_cookies(client: InstagramClient, username: str, password: str) -> CookieRetrievalResult:
    """
    Log in through the web form and return the essential session cookies.

    Never raises: transport failures and rejected logins come back as an
    unsuccessful result with a message.
    """
    try:
        login_page = await client.login_page()
        cookies: Dict[str, str] = {}
        _collect_set_cookies(login_page, cookies)

        csrftoken = cookies.get("csrftoken")
        if not csrftoken:
            logger.warning("Instagram login page returned no CSRF token")
            return CookieRetrievalResult(success=False, message="Failed to retrieve CSRF token")

        payload = {
            "username": username,
            "enc_password": f"#PWD_INSTAGRAM_BROWSER:0:{int(time.time())}:{password}",
            "queryParams": "{}",
            "optIntoOneTap": "false",
        }
        response = await client.login_ajax(payload, csrftoken, _join_cookies(cookies))
        body = _json_object(response)
        if response.status_code != 200 or not body.get("authenticated"):
            message = body.get("message") or "Authentication failed. Please check your credentials."
            logger.warning("Instagram login rejected for %s: %s", username, message)
            return CookieRetrievalResult(success=False, message=str(message))

        _collect_set_cookies(response, cookies)
        essential = {name: cookies[name] for name in ESSENTIAL_COOKIES if cookies.get(name)}
        return CookieRetrievalResult(
            success=True,
            message="Successfully retrieved Instagram cookies",
            cookies=essential,
            cookie_string=_join_cookies(essential),
        )
    except httpx.HTTPError as exc:
        logger.warning("Instagram login request failed for %s: %s", username, exc)
        return CookieRetrievalResult(success=False, message=str(exc) or "Unknown error occurred")


async def is_logged_in(client: InstagramClient, cookie_string: str) -> bool:
    """True when the cookie opens the account settings page without a redirect."""
    try:
        response = await client.accounts_edit(cookie_string)
    except httpx.HTTPError as exc:
        logger.warning("Instagram session check failed: %s", exc)
        return False
    return response.status_code == 200
