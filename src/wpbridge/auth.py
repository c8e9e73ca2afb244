"""
WordPress Auth Service - Credential types and environment-backed credential loading.
Provides credentials for use by other services (core, loaders, actions, session).
"""

import base64
import os
from typing import Annotated, Literal

from pydantic import Field

from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.pydantic_tools import BaseModelWithMethods

logger = get_logger(__name__)


class BasicAuthCredentials(BaseModelWithMethods):
    """Username + application password, sent as HTTP Basic auth."""

    kind: Literal["basic"] = "basic"
    username: str
    password: str


class CookieCredentials(BaseModelWithMethods):
    """Raw upstream cookie header captured from a wp-login.php handshake.

    WordPress ignores REST cookie auth unless the request also carries an X-WP-Nonce.
    """

    kind: Literal["cookie"] = "cookie"
    cookie: str
    nonce: str | None = None


Credentials = Annotated[BasicAuthCredentials | CookieCredentials, Field(discriminator="kind")]


def create_basic_auth_header(credentials: BasicAuthCredentials) -> str:
    """Creates a Basic Auth header value from credentials."""
    token = f"{credentials.username}:{credentials.password}".encode()
    return f"Basic {base64.b64encode(token).decode('ascii')}"


def auth_headers(credentials: BasicAuthCredentials | CookieCredentials | None) -> dict[str, str]:
    """Request headers that carry the given credentials upstream."""
    if credentials is None:
        return {}
    if isinstance(credentials, CookieCredentials):
        headers = {"Cookie": credentials.cookie}
        if credentials.nonce:
            headers["X-WP-Nonce"] = credentials.nonce
        return headers
    return {"Authorization": create_basic_auth_header(credentials)}


class WordPressAuth:
    """
    Centralized WordPress configuration and credential loading.
    Reads WP_BASE_URL, WP_USERNAME and WP_APP_PASSWORD from the environment on first use.
    """

    _base_url: str | None = None
    _username: str | None = None
    _app_password: str | None = None

    def __init__(self):
        self._base_url = None
        self._username = None
        self._app_password = None

    @property
    def base_url(self) -> str | None:
        if self._base_url is None:
            self._base_url = os.getenv("WP_BASE_URL")
            if not self._base_url:
                logger.error("WP_BASE_URL not available in environment")
        return self._base_url

    @property
    def username(self) -> str | None:
        if self._username is None:
            self._username = os.getenv("WP_USERNAME")
        return self._username

    @property
    def app_password(self) -> str | None:
        if self._app_password is None:
            self._app_password = os.getenv("WP_APP_PASSWORD")
            if self._app_password:
                logger.info("Loaded WordPress application password via env var")
        return self._app_password

    @property
    def credentials(self) -> BasicAuthCredentials | None:
        """Basic credentials when both username and app password are configured."""
        if self.username and self.app_password:
            return BasicAuthCredentials(username=self.username, password=self.app_password)
        return None

    def get_auth_status(self) -> dict:
        """
        Status information about the configured credentials, for debugging.
        Never includes the password itself.
        """
        return {
            "has_base_url": bool(self.base_url),
            "has_username": bool(self.username),
            "has_app_password": bool(self.app_password),
        }


# Singleton instance for use across the application
wordpress_auth = WordPressAuth()
