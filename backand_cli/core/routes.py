"""
Routing table: logical operation -> (method, path, body).
"""

from typing import Any, NamedTuple

from backand_cli.core.types import (
    CreateItem,
    DeleteItem,
    Method,
    Operation,
    PerformActions,
    ReadItem,
    ReadItems,
    RunQuery,
    SignIn,
    SignUp,
    UpdateItem,
)

DEFAULT_API_VERSION = "1"
TOKEN_PATH = "/token"


class Route(NamedTuple):
    """Resolved method, path (relative to the base URL) and JSON body."""

    method: Method
    path: str
    body: Any = None


def resolve(
    operation: Operation,
    api_version: str = DEFAULT_API_VERSION,
    app_name: str | None = None,
) -> Route:
    """
    Resolve an operation into a route.

    Args:
        operation: The operation to resolve
        api_version: API version path segment
        app_name: App name, sent in the sign-in body

    Returns:
        Route with method, path and body

    Raises:
        TypeError: If the operation type is unknown

    """
    prefix = f"/{api_version}"

    if isinstance(operation, CreateItem):
        path = f"{prefix}/objects/{operation.object_name}{operation.query or ''}"
        return Route(Method.POST, path, operation.body)

    if isinstance(operation, ReadItem):
        path = f"{prefix}/objects/{operation.object_name}/{operation.item_id}{operation.query or ''}"
        return Route(Method.GET, path)

    if isinstance(operation, ReadItems):
        return Route(Method.GET, f"{prefix}/objects/{operation.object_name}{operation.query or ''}")

    if isinstance(operation, UpdateItem):
        path = f"{prefix}/objects/{operation.object_name}/{operation.item_id}{operation.query or ''}"
        return Route(Method.PUT, path, operation.body)

    if isinstance(operation, DeleteItem):
        return Route(Method.DELETE, f"{prefix}/objects/{operation.object_name}/{operation.item_id}")

    if isinstance(operation, RunQuery):
        # The server reads query parameters from the body, even on GET
        return Route(Method.GET, f"{prefix}/query/data/{operation.query_name}", operation.params)

    if isinstance(operation, PerformActions):
        return Route(Method.POST, f"{prefix}/bulk", [action.to_dict() for action in operation.actions])

    if isinstance(operation, SignUp):
        return Route(Method.POST, f"{prefix}/user/signup", operation.user)

    if isinstance(operation, SignIn):
        body = {
            "username": operation.username,
            "password": operation.password,
            "grant_type": "password",
            "appName": app_name or "",
        }
        return Route(Method.POST, TOKEN_PATH, body)

    raise TypeError(f"Unsupported operation: {operation!r}")
