"""
Core layer - Wire rules, session state and HTTP client.

This layer provides:
- Typed dataclasses for options, criteria, operations and results
- Query string rendering and the routing table
- Session state with credential headers and token storage
- Low-level HTTP client with error handling
"""

from backand_cli.core.auth import DEFAULT_BASE_URL, USER_TOKEN_KEY, Session
from backand_cli.core.client import (
    APIClient,
    APIError,
    BackandError,
    DecodingError,
    HTTPStatusError,
    StorageError,
    Transport,
    TransportError,
    TransportResponse,
    UrllibTransport,
    ValidationError,
)
from backand_cli.core.query import encode_option, encode_options
from backand_cli.core.routes import Route, resolve
from backand_cli.core.store import FileStore, MemoryStore, SecretStore
from backand_cli.core.types import (
    Action,
    AuthMode,
    CreateItem,
    Deep,
    DeleteItem,
    Exclude,
    ExcludeOption,
    Failure,
    Filter,
    FilterOperator,
    Filters,
    Method,
    PageNumber,
    PageSize,
    PerformActions,
    ReadItem,
    ReadItems,
    RelatedObjects,
    RequestDescriptor,
    ReturnObject,
    RunQuery,
    Search,
    SignIn,
    SignUp,
    Sort,
    Sorter,
    SortOrder,
    Success,
    UpdateItem,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "USER_TOKEN_KEY",
    "APIClient",
    "APIError",
    "Action",
    "AuthMode",
    "BackandError",
    "CreateItem",
    "DecodingError",
    "Deep",
    "DeleteItem",
    "Exclude",
    "ExcludeOption",
    "Failure",
    "FileStore",
    "Filter",
    "FilterOperator",
    "Filters",
    "HTTPStatusError",
    "MemoryStore",
    "Method",
    "PageNumber",
    "PageSize",
    "PerformActions",
    "ReadItem",
    "ReadItems",
    "RelatedObjects",
    "RequestDescriptor",
    "ReturnObject",
    "Route",
    "RunQuery",
    "Search",
    "SecretStore",
    "Session",
    "SignIn",
    "SignUp",
    "Sort",
    "SortOrder",
    "Sorter",
    "StorageError",
    "Success",
    "Transport",
    "TransportError",
    "TransportResponse",
    "UpdateItem",
    "UrllibTransport",
    "ValidationError",
    "encode_option",
    "encode_options",
    "resolve",
]
