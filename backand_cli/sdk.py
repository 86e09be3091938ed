"""
Backand SDK - High-level client with nice ergonomics.

Every request method delivers exactly one Result to its handler and
returns that same Result. API and token-storage failures never raise past
this layer.
"""

import os
from collections.abc import Callable, Iterable
from typing import Any

from backand_cli.core.auth import DEFAULT_BASE_URL, Session
from backand_cli.core.client import DEFAULT_TIMEOUT, APIClient, APIError, StorageError, Transport
from backand_cli.core.query import encode_options
from backand_cli.core.store import SecretStore
from backand_cli.core.types import (
    Action,
    AuthMode,
    CreateItem,
    DeleteItem,
    Failure,
    Operation,
    PerformActions,
    ReadItem,
    ReadItems,
    RequestOption,
    Result,
    RunQuery,
    SignIn,
    SignUp,
    Success,
    UpdateItem,
)

CompletionHandler = Callable[[Result], None]


def _query(options: Iterable[RequestOption] | None) -> str | None:
    if options is None:
        return None
    return encode_options(options)


class BackandClient:
    """
    High-level Backand API client.

    Example:
        client = BackandClient(app_name="myapp", anonymous_token="...")

        client.sign_in("jane@example.com", "secret")
        result = client.get_items("todos", options=[PageSize(10), Deep()])
        if result.ok:
            print(result.value["data"])

    """

    def __init__(
        self,
        app_name: str | None = None,
        anonymous_token: str | None = None,
        sign_up_token: str | None = None,
        api_url: str | None = None,
        store: SecretStore | None = None,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Backand client.

        Args:
            app_name: App name (or BACKAND_APP_NAME env var)
            anonymous_token: Anonymous token (or BACKAND_ANONYMOUS_TOKEN env var)
            sign_up_token: Sign-up token (or BACKAND_SIGNUP_TOKEN env var)
            api_url: API base URL (or BACKAND_API_URL env var)
            store: Secret store for the user token (in-memory by default)
            transport: HTTP transport (urllib by default)
            timeout: Request timeout in seconds

        """
        self._session = Session(
            app_name=app_name or os.environ.get("BACKAND_APP_NAME"),
            anonymous_token=anonymous_token or os.environ.get("BACKAND_ANONYMOUS_TOKEN"),
            sign_up_token=sign_up_token or os.environ.get("BACKAND_SIGNUP_TOKEN"),
            base_url=api_url or os.environ.get("BACKAND_API_URL") or DEFAULT_BASE_URL,
            store=store,
        )
        self._client = APIClient(self._session, transport=transport, timeout=timeout)

    @property
    def session(self) -> Session:
        """The session shared by every call of this client."""
        return self._session

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_app_name(self, name: str) -> None:
        self._session.app_name = name

    def set_anonymous_token(self, token: str) -> None:
        self._session.anonymous_token = token

    def set_sign_up_token(self, token: str) -> None:
        self._session.sign_up_token = token

    def set_api_url(self, url: str) -> None:
        """Set the base API URL (default https://api.backand.com)."""
        self._session.base_url = url.rstrip("/")

    def get_api_url(self) -> str:
        return self._session.base_url

    def set_auth_mode(self, mode: AuthMode) -> None:
        """Override the authentication mode."""
        self._session.set_mode(mode)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _execute(
        self,
        operation: Operation,
        handler: CompletionHandler | None,
        on_success: Callable[[Any], None] | None = None,
    ) -> Result:
        request = self._client.build_request(operation)
        result: Result
        try:
            value = self._client.send(request)
        except APIError as e:
            result = Failure(e)
        else:
            result = Success(value)
            if on_success is not None:
                try:
                    on_success(value)
                except OSError as e:
                    result = Failure(StorageError(f"Could not store the user token: {e}"))
        if handler is not None:
            handler(result)
        return result

    # =========================================================================
    # Authentication
    # =========================================================================

    def sign_up(
        self,
        user: dict[str, Any],
        sign_in_after_sign_up: bool = True,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """
        Register a user for the application.

        The sign-up token is used for the request. On success, and when
        sign_in_after_sign_up is set, a token in the response signs the user in.

        Args:
            user: User fields (e.g. firstName, lastName, email, password, confirmPassword)
            sign_in_after_sign_up: Sign the user in with the returned token
            handler: Called once with the Result

        """
        self._session.begin_sign_up()
        return self._execute(
            SignUp(user=user),
            handler,
            on_success=lambda value: self._session.complete_sign_up(value, sign_in_after_sign_up),
        )

    def sign_in(self, username: str, password: str, handler: CompletionHandler | None = None) -> Result:
        """
        Sign a user in.

        Args:
            username: The user's email
            password: The user's password
            handler: Called once with the Result

        """
        return self._execute(
            SignIn(username=username, password=password),
            handler,
            on_success=self._session.complete_sign_in,
        )

    def sign_out(self) -> None:
        """Forget the user token and go back to anonymous access."""
        self._session.sign_out()

    def user_signed_in(self) -> bool:
        return self._session.user_signed_in()

    # =========================================================================
    # Objects
    # =========================================================================

    def get_item(
        self,
        name: str,
        item_id: str,
        options: Iterable[RequestOption] | None = None,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """
        Get a single item.

        Args:
            name: The object name
            item_id: The item id
            options: Request options
            handler: Called once with the Result

        """
        return self._execute(ReadItem(name, str(item_id), _query(options)), handler)

    def get_items(
        self,
        name: str,
        options: Iterable[RequestOption] | None = None,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """
        Get a list of items with filter, sort and paging options.

        Args:
            name: The object name
            options: Request options
            handler: Called once with the Result

        """
        return self._execute(ReadItems(name, _query(options)), handler)

    def create_item(
        self,
        name: str,
        item: dict[str, Any],
        options: Iterable[RequestOption] | None = None,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """Create a new item."""
        return self._execute(CreateItem(name, item, _query(options)), handler)

    def update_item(
        self,
        name: str,
        item_id: str,
        item: dict[str, Any],
        options: Iterable[RequestOption] | None = None,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """Update a single item."""
        return self._execute(UpdateItem(name, str(item_id), item, _query(options)), handler)

    def delete_item(self, name: str, item_id: str, handler: CompletionHandler | None = None) -> Result:
        """Delete an item."""
        return self._execute(DeleteItem(name, str(item_id)), handler)

    # =========================================================================
    # Queries and bulk actions
    # =========================================================================

    def run_query(
        self,
        name: str,
        parameters: dict[str, Any] | None = None,
        handler: CompletionHandler | None = None,
    ) -> Result:
        """
        Run a query defined in the Backand dashboard.

        Args:
            name: The query name
            parameters: Query parameters
            handler: Called once with the Result

        """
        return self._execute(RunQuery(name, parameters), handler)

    def perform_actions(self, actions: Iterable[Action], handler: CompletionHandler | None = None) -> Result:
        """Run several create/update/delete actions in one bulk request."""
        return self._execute(PerformActions(list(actions)), handler)
