"""Async client for the Instagram web endpoints used by automation actions."""

from __future__ import annotations

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from config import settings


def parse_cookie_string(cookie_string: str) -> Dict[str, str]:
    """Split "a=1; b=2" into {"a": "1", "b": "2"}, skipping malformed pieces."""
    cookies: Dict[str, str] = {}
    for part in (cookie_string or "").split(";"):
        key, sep, value = part.partition("=")
        key = key.strip()
        value = value.strip()
        if key and sep and value:
            cookies[key] = value
    return cookies


def build_http_client(timeout_seconds: Optional[float] = None) -> httpx.AsyncClient:
    """Shared HTTP client for outbound Instagram calls."""
    timeout = float(timeout_seconds if timeout_seconds is not None else settings.INSTAGRAM_HTTP_TIMEOUT_SECONDS)
    # Cookies only travel in explicit headers; responses never feed a shared jar.
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout), cookies=jar)


class InstagramClient:
    """Builds authenticated requests against www.instagram.com on top of an injected httpx client."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        base_url: Optional[str] = None,
        app_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        login_user_agent: Optional[str] = None,
    ) -> None:
        self._http = http
        self.base_url = (base_url or settings.INSTAGRAM_BASE_URL).rstrip("/")
        self.app_id = app_id or settings.INSTAGRAM_APP_ID
        self.user_agent = user_agent or settings.INSTAGRAM_USER_AGENT
        self.login_user_agent = login_user_agent or settings.INSTAGRAM_LOGIN_USER_AGENT

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def profile_url(self, username: str) -> str:
        return self.url(f"{quote(username, safe='')}/")

    def headers(
        self,
        cookie_string: str,
        *,
        referer: Optional[str] = None,
        api: bool = False,
        form: bool = False,
    ) -> Dict[str, str]:
        cookies = parse_cookie_string(cookie_string)
        headers = {
            "User-Agent": self.user_agent,
            "X-CSRFToken": cookies.get("csrftoken", ""),
            "Cookie": cookie_string,
        }
        if api:
            headers["X-IG-App-ID"] = self.app_id
            headers["Origin"] = self.base_url
            headers["X-Requested-With"] = "XMLHttpRequest"
        if referer:
            # Header values must be ASCII.
            headers["Referer"] = quote(referer, safe=":/?#[]@!$&'()*+,;=%~")
        if form:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
        return headers

    async def _get(
        self,
        path: str,
        cookie_string: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        referer: Optional[str] = None,
        api: bool = False,
    ) -> httpx.Response:
        return await self._http.get(
            self.url(path),
            params=params,
            headers=self.headers(cookie_string, referer=referer, api=api),
            follow_redirects=False,
        )

    async def _post(
        self,
        path: str,
        cookie_string: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        referer: Optional[str] = None,
        api: bool = False,
    ) -> httpx.Response:
        return await self._http.post(
            self.url(path),
            data=dict(data or {}),
            headers=self.headers(cookie_string, referer=referer, api=api, form=True),
            follow_redirects=False,
        )

    # Profiles and friendships

    async def web_profile_info(self, username: str, cookie_string: str) -> httpx.Response:
        return await self._get(
            "api/v1/users/web_profile_info/",
            cookie_string,
            params={"username": username},
            referer=self.profile_url(username),
            api=True,
        )

    async def create_friendship(self, user_pk: str, username: str, cookie_string: str) -> httpx.Response:
        return await self._post(
            f"api/v1/friendships/create/{user_pk}/",
            cookie_string,
            referer=self.profile_url(username),
            api=True,
        )

    async def destroy_friendship(self, user_pk: str, username: str, cookie_string: str) -> httpx.Response:
        return await self._post(
            f"api/v1/friendships/destroy/{user_pk}/",
            cookie_string,
            referer=self.profile_url(username),
            api=True,
        )

    # Media

    async def like_media(self, media_id: str, post_url: str, cookie_string: str) -> httpx.Response:
        return await self._post(f"web/likes/{media_id}/like/", cookie_string, referer=post_url)

    async def unlike_media(self, media_id: str, post_url: str, cookie_string: str) -> httpx.Response:
        return await self._post(f"web/likes/{media_id}/unlike/", cookie_string, referer=post_url)

    async def add_comment(self, media_id: str, comment_text: str, post_url: str, cookie_string: str) -> httpx.Response:
        return await self._post(
            f"web/comments/{media_id}/add/",
            cookie_string,
            data={"comment_text": comment_text},
            referer=post_url,
        )

    async def delete_comment(self, comment_id: str, post_url: Optional[str], cookie_string: str) -> httpx.Response:
        return await self._post(
            f"web/comments/{comment_id}/delete/",
            cookie_string,
            data={"comment_id": comment_id},
            referer=post_url or None,
        )

    # Session

    async def accounts_edit(self, cookie_string: str) -> httpx.Response:
        return await self._get("accounts/edit/", cookie_string)

    async def login_page(self) -> httpx.Response:
        return await self._http.get(
            self.url("accounts/login/"),
            headers={
                "User-Agent": self.login_user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
        )

    async def login_ajax(self, payload: Mapping[str, str], csrftoken: str, cookie_string: str) -> httpx.Response:
        return await self._http.post(
            self.url("accounts/login/ajax/"),
            data=dict(payload),
            headers={
                "User-Agent": self.login_user_agent,
                "X-Requested-With": "XMLHttpRequest",
                "Referer": self.url("accounts/login/"),
                "Origin": self.base_url,
                "X-CSRFToken": csrftoken,
                "Cookie": cookie_string,
            },
        )
