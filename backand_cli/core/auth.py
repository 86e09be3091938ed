"""
Session state: configuration, authentication mode and credential headers.

A Session is created once and shared by reference with the client; there is
no module-level state. It performs no locking, so callers serialize access.
"""

import logging
from typing import Any

from backand_cli.core.routes import DEFAULT_API_VERSION
from backand_cli.core.store import MemoryStore, SecretStore
from backand_cli.core.types import AuthMode

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.backand.com"
USER_TOKEN_KEY = "userTokenKey"


class Session:
    """
    Process-wide session for one app.

    Args:
        app_name: Backand app name (sent as the AppName header)
        anonymous_token: Token used while anonymous
        sign_up_token: Token used while a sign-up is pending
        base_url: API origin
        api_version: API version path segment
        store: Secret store holding the user token

    """

    def __init__(
        self,
        app_name: str | None = None,
        anonymous_token: str | None = None,
        sign_up_token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        store: SecretStore | None = None,
    ):
        self.app_name = app_name
        self.anonymous_token = anonymous_token
        self.sign_up_token = sign_up_token
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.store: SecretStore = store if store is not None else MemoryStore()
        self.mode = AuthMode.ANONYMOUS

    def __repr__(self) -> str:
        return f"Session(app_name={self.app_name!r}, base_url={self.base_url!r}, mode={self.mode.value})"

    # =========================================================================
    # User token (read and written through the store)
    # =========================================================================

    def get_user_token(self) -> str | None:
        return self.store.get(USER_TOKEN_KEY)

    def set_user_token(self, token: str) -> None:
        self.store.set(USER_TOKEN_KEY, token)

    def clear_user_token(self) -> None:
        self.store.remove(USER_TOKEN_KEY)

    def user_signed_in(self) -> bool:
        """Check if a user token is stored, whatever the current mode."""
        return self.get_user_token() is not None

    # =========================================================================
    # Mode transitions
    # =========================================================================

    def set_mode(self, mode: AuthMode) -> None:
        mode = AuthMode(mode)
        if mode != self.mode:
            logger.debug("Auth mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode

    def begin_sign_up(self) -> None:
        """Switch to the sign-up token before a sign-up request is built."""
        self.set_mode(AuthMode.SIGN_UP)

    def complete_sign_up(self, response: Any, sign_in_after_sign_up: bool) -> bool:
        """
        Apply a successful sign-up response.

        Returns:
            True if the user is now signed in

        """
        if not sign_in_after_sign_up:
            return False
        token = response.get("token") if isinstance(response, dict) else None
        if not isinstance(token, str):
            return False
        self.set_user_token(token)
        self.set_mode(AuthMode.USER)
        return True

    def complete_sign_in(self, response: Any) -> bool:
        """
        Apply a successful sign-in response.

        Returns:
            True if the response carried an access token

        """
        token = response.get("access_token") if isinstance(response, dict) else None
        if not isinstance(token, str):
            logger.warning("Sign-in response did not contain an access token")
            return False
        self.set_user_token(token)
        self.set_mode(AuthMode.USER)
        return True

    def sign_out(self) -> None:
        self.clear_user_token()
        self.set_mode(AuthMode.ANONYMOUS)

    # =========================================================================
    # Headers
    # =========================================================================

    def headers(self) -> dict[str, str]:
        """
        Credential headers for the current mode, followed by AppName.

        Headers whose configured value is missing are left out, except
        Authorization, which always carries a (possibly empty) bearer token.
        """
        headers: dict[str, str] = {}
        if self.mode == AuthMode.ANONYMOUS:
            if self.anonymous_token is not None:
                headers["AnonymousToken"] = self.anonymous_token
        elif self.mode == AuthMode.USER:
            headers["Authorization"] = f"Bearer {self.get_user_token() or ''}"
        elif self.mode == AuthMode.SIGN_UP:
            if self.sign_up_token is not None:
                headers["SignUpToken"] = self.sign_up_token
        if self.app_name is not None:
            headers["AppName"] = self.app_name
        return headers
