"""
WordPress Auth Bridge - Form login against wp-login.php backed by local opaque sessions.

Login flow:
1. GET the login page without credentials and keep any Set-Cookie values (test cookie).
2. POST the login form with those cookies, without following the redirect.
3. Merge cookies from both responses, later values winning.
4. Require a logged-in cookie (name containing one of `login_cookie_markers`).
5. Confirm the merged cookies against /users/me.
6. Store {id, user_id, credentials, expires_at} under a random token and hand the
   token to the browser in an HTTP-only cookie.

Any failure surfaces as AuthenticationError and leaves no session behind.
"""

import secrets
import time
from collections.abc import Callable, Mapping
from typing import Any, Literal
from urllib.parse import urlsplit

import aiohttp
from fastapi import Request, Response
from pydantic import ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from wpbridge.adapters.session_store import InMemorySessionStore, SessionStore
from wpbridge.auth import CookieCredentials, Credentials
from wpbridge.core import WordPressClientConfig, WordPressService
from wpbridge.errors import AuthenticationError, WordPressAPIError
from wpbridge.loaders import WordPressLoaderConfig, wordpress_user_loader
from wpbridge.models import WordPressAuthor
from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.pydantic_tools import BaseModelWithMethods

logger = get_logger(__name__)

DEFAULT_COOKIE_NAME = "wpbridge_auth"
DEFAULT_SESSION_DURATION_SECONDS = 60 * 60 * 12
REST_NONCE_PATH = "/wp-admin/admin-ajax.php"

_REDIRECT_STRIP = str.maketrans("", "", "\t\r\n")


class AuthBridgeConfig(BaseModelWithMethods):
    base_url: str
    cookie_name: str = DEFAULT_COOKIE_NAME
    cookie_path: str = "/"
    cookie_same_site: Literal["lax", "strict", "none"] = "lax"
    secure_cookies: bool | None = None  # None: secure when the request came in over https
    session_duration_seconds: int = Field(default=DEFAULT_SESSION_DURATION_SECONDS, gt=0)
    login_path: str = "/wp-login.php"
    login_cookie_markers: tuple[str, ...] = ("logged_in_",)
    fetch_rest_nonce: bool = True
    timeout: int = 30


class LoginInput(BaseModelWithMethods):
    """Login form payload. `email` also accepts a WordPress username."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: str = Field(min_length=1)
    password: str = Field(min_length=1, max_length=512)
    redirect_to: str | None = Field(default=None, alias="redirectTo")

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class LoginResult(BaseModelWithMethods):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    redirect_to: str
    user_id: int
    user_name: str


class WordPressAuthSession(BaseModelWithMethods):
    id: str
    user_id: int
    credentials: Credentials
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


def sanitize_redirect_path(candidate: str | None) -> str:
    """Only same-origin paths that do not point back at /login or /logout survive.

    Tabs and newlines are dropped and backslashes read as slashes before the
    check, the way browsers parse a Location value. The normalized path is returned.
    """
    if not candidate:
        return "/"
    path = candidate.translate(_REDIRECT_STRIP).replace("\\", "/")
    if not path.startswith("/") or path.startswith("//"):
        return "/"
    parts = urlsplit(path)
    if parts.scheme or parts.netloc:
        return "/"
    if path == "/login" or path.startswith("/login?"):
        return "/"
    if path == "/logout" or path.startswith("/logout?"):
        return "/"
    return path


def _response_cookies(response: aiohttp.ClientResponse) -> dict[str, str]:
    """Name -> value for every Set-Cookie on a response, cleared ones as empty strings."""
    return {name: morsel.value for name, morsel in response.cookies.items()}


def merge_cookies(*jars: Mapping[str, str]) -> dict[str, str]:
    """Later jars win; an empty value in a later jar removes the cookie."""
    merged: dict[str, str] = {}
    for jar in jars:
        for name, value in jar.items():
            if value:
                merged[name] = value
            else:
                merged.pop(name, None)
    return merged


def cookie_header(cookies: Mapping[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


class WordPressAuthBridge:
    """
    Mints and validates local sessions backed by WordPress login cookies.

    Sessions live in the injected SessionStore (in-memory by default) and carry
    the upstream cookie credentials used for later per-user REST calls.
    """

    def __init__(
        self,
        config: AuthBridgeConfig,
        store: SessionStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.store = store if store is not None else InMemorySessionStore(clock=clock)
        self.clock = clock

    @property
    def cookie_name(self) -> str:
        return self.config.cookie_name

    # ------------------------------------------------------------------
    # Login handshake
    # ------------------------------------------------------------------

    async def _form_login(self, username: str, password: str) -> dict[str, str]:
        """Steps 1-3: returns the merged cookie jar from the login page and form POST."""
        login_url = f"{self.base_url}{self.config.login_path}"
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar(), timeout=timeout) as session:
            async with session.get(login_url, allow_redirects=False) as response:
                harvested = merge_cookies(_response_cookies(response))

            form = {
                "log": username,
                "pwd": password,
                "wp-submit": "Log In",
                "testcookie": "1",
                "redirect_to": f"{self.base_url}/wp-admin/",
            }
            headers = {"Cookie": cookie_header(harvested)} if harvested else {}
            async with session.post(login_url, data=form, headers=headers, allow_redirects=False) as response:
                issued = _response_cookies(response)

        return merge_cookies(harvested, issued)

    async def _fetch_rest_nonce(self, cookie: str) -> str | None:
        """wp_rest nonce for the logged-in cookies; None when WordPress refuses."""
        url = f"{self.base_url}{REST_NONCE_PATH}"
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar(), timeout=timeout) as session:
            async with session.get(
                url, params={"action": "rest-nonce"}, headers={"Cookie": cookie}, allow_redirects=False
            ) as response:
                if response.status != 200:
                    logger.warning(f"REST nonce request returned {response.status}")
                    return None
                nonce = (await response.text(errors="replace")).strip()

        return nonce if nonce.isalnum() and nonce != "0" else None

    async def _verify_user(self, credentials: CookieCredentials) -> WordPressAuthor:
        client = WordPressService(
            WordPressClientConfig(base_url=self.base_url, auth=credentials, timeout=self.config.timeout)
        )
        return await client.get_current_user()

    def _has_logged_in_cookie(self, cookies: Mapping[str, str]) -> bool:
        return any(marker in name for name in cookies for marker in self.config.login_cookie_markers)

    async def login(
        self, login_input: LoginInput | Mapping[str, Any]
    ) -> tuple[WordPressAuthSession, WordPressAuthor]:
        """Run the login handshake and persist a new session.

        Raises:
            ValidationError: if the payload is malformed
            AuthenticationError: for rejected credentials or any upstream failure
        """
        if not isinstance(login_input, LoginInput):
            login_input = LoginInput.model_validate(login_input)

        try:
            cookies = await self._form_login(login_input.email, login_input.password)
            if not self._has_logged_in_cookie(cookies):
                raise AuthenticationError()

            credentials = CookieCredentials(cookie=cookie_header(cookies))
            if self.config.fetch_rest_nonce:
                credentials.nonce = await self._fetch_rest_nonce(credentials.cookie)

            user = await self._verify_user(credentials)
        except AuthenticationError:
            logger.warning(f"WordPress login rejected for {login_input.email}")
            raise
        except (WordPressAPIError, aiohttp.ClientError, TimeoutError, ValidationError) as e:
            logger.warning(f"WordPress login failed for {login_input.email}: {e}")
            raise AuthenticationError() from e

        session = await self.create_session(user.id, credentials)
        logger.info(f"Created session for WordPress user {user.id}")
        return session, user

    async def login_action(self, payload: Any, request: Request, response: Response) -> LoginResult:
        """Validate the payload, log in, and set the session cookie on `response`."""
        login_input = LoginInput.model_validate(payload)
        session, user = await self.login(login_input)

        self.set_cookie(response, session.id, secure=self._secure_for(request))

        return LoginResult(
            redirect_to=sanitize_redirect_path(login_input.redirect_to),
            user_id=user.id,
            user_name=user.name,
        )

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(self, user_id: int, credentials: Credentials) -> WordPressAuthSession:
        ttl = self.config.session_duration_seconds
        session = WordPressAuthSession(
            id=secrets.token_urlsafe(32),
            user_id=user_id,
            credentials=credentials,
            expires_at=self.clock() + ttl,
        )
        await self.store.set(session.id, session.model_dump_json(), ttl)
        return session

    async def get_session(self, session_id: str | None) -> WordPressAuthSession | None:
        """Load a session; expired or unreadable entries are deleted and read as absent."""
        if not session_id:
            return None

        raw = await self.store.get(session_id)
        if raw is None:
            return None

        try:
            session = WordPressAuthSession.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable session entry: {e}")
            await self.store.delete(session_id)
            return None

        if session.is_expired(self.clock()):
            await self.store.delete(session_id)
            return None

        return session

    async def delete_session(self, session_id: str | None) -> None:
        if not session_id:
            return
        await self.store.delete(session_id)

    async def resolve_user_by_session_id(self, session_id: str | None) -> WordPressAuthor | None:
        """Fetch the session's user with its own credentials; drops the session if that fails."""
        session = await self.get_session(session_id)
        if session is None:
            return None

        loader = wordpress_user_loader(WordPressLoaderConfig(base_url=self.base_url, auth=session.credentials))
        result = await loader.load_entry({"id": session.user_id})

        if result.error or not result.data:
            logger.info(f"Dropping session for user {session.user_id}: {result.error}")
            await self.delete_session(session.id)
            return None

        return WordPressAuthor.model_validate(result.data)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def session_id_from_request(self, request: Request) -> str | None:
        return request.cookies.get(self.config.cookie_name)

    def _secure_for(self, request: Request) -> bool:
        if self.config.secure_cookies is not None:
            return self.config.secure_cookies
        return request.url.scheme == "https"

    def set_cookie(self, response: Response, session_id: str, secure: bool | None = None) -> None:
        if secure is None:
            secure = bool(self.config.secure_cookies)
        response.set_cookie(
            key=self.config.cookie_name,
            value=session_id,
            max_age=self.config.session_duration_seconds,
            path=self.config.cookie_path,
            httponly=True,
            samesite=self.config.cookie_same_site,
            secure=secure,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.config.cookie_name, path=self.config.cookie_path)

    async def clear_authentication(self, response: Response, session_id: str | None) -> None:
        """Local logout only; WordPress itself is not told."""
        await self.delete_session(session_id)
        self.clear_cookie(response)
