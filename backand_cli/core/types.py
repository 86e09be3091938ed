"""
Core types for the Backand REST API.

These dataclasses describe request options, filter/sort criteria, bulk
actions, logical operations and the uniform result handed back to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# =============================================================================
# Enumerations
# =============================================================================


class Method(str, Enum):
    """HTTP methods used by the API."""

    POST = "POST"
    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"


class FilterOperator(str, Enum):
    """Comparison applied by a Filter."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    GREATER_THAN_OR_EQUALS_TO = "greaterThanOrEqualsTo"
    LESS_THAN = "lessThan"
    LESS_THAN_OR_EQUALS_TO = "lessThanOrEqualsTo"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    EMPTY = "empty"
    NOT_EMPTY = "notEmpty"
    IN = "in"


class SortOrder(str, Enum):
    """Sort direction for a Sorter."""

    ASC = "asc"
    DESC = "desc"


class ExcludeOption(str, Enum):
    """Response sections the server can leave out."""

    METADATA = "__metadata"
    TOTAL_ROWS = "totalRows"


class AuthMode(str, Enum):
    """Which credential is attached to outgoing requests."""

    ANONYMOUS = "anonymous"
    USER = "user"
    SIGN_UP = "signUp"


# =============================================================================
# Criteria
# =============================================================================


@dataclass(frozen=True)
class Filter:
    """
    A constraint applied to the data that is returned.

    Args:
        field_name: The field the filter applies to
        operator: The comparison to apply
        value: The JSON-serializable value to compare with

    """

    field_name: str
    operator: FilterOperator
    value: Any = None

    def __post_init__(self) -> None:
        if not self.field_name:
            raise ValueError("Filter field_name must not be empty")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for the query string."""
        return {
            "fieldName": self.field_name,
            "operator": FilterOperator(self.operator).value,
            "value": self.value,
        }


@dataclass(frozen=True)
class Sorter:
    """Sorting applied to the data that is returned."""

    field_name: str
    order: SortOrder = SortOrder.ASC

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for the query string."""
        return {"fieldName": self.field_name, "order": SortOrder(self.order).value}


@dataclass(frozen=True)
class Action:
    """
    A single step of a bulk request.

    Args:
        method: POST, PUT or DELETE
        url: The URL of the object the action targets
        data: Optional JSON object sent with the action

    """

    method: Method
    url: str
    data: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Action":
        """Create from a JSON object (as found in a bulk file)."""
        return cls(
            method=Method(str(data["method"]).upper()),
            url=data["url"],
            data=data.get("data"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for the bulk request body."""
        result: dict[str, Any] = {"method": Method(self.method).value, "url": self.url}
        if self.data is not None:
            result["data"] = self.data
        return result


# =============================================================================
# Request Options
# =============================================================================


@dataclass(frozen=True)
class PageSize:
    size: int


@dataclass(frozen=True)
class PageNumber:
    number: int


@dataclass(frozen=True)
class Sort:
    sorters: list[Sorter] = field(default_factory=list)


@dataclass(frozen=True)
class Filters:
    filters: list[Filter] = field(default_factory=list)


@dataclass(frozen=True)
class Exclude:
    options: list[ExcludeOption] = field(default_factory=list)


@dataclass(frozen=True)
class Deep:
    enabled: bool = True


@dataclass(frozen=True)
class RelatedObjects:
    enabled: bool = True


@dataclass(frozen=True)
class ReturnObject:
    enabled: bool = True


@dataclass(frozen=True)
class Search:
    text: str


RequestOption = PageSize | PageNumber | Sort | Filters | Exclude | Deep | RelatedObjects | ReturnObject | Search


# =============================================================================
# Operations
# =============================================================================


@dataclass(frozen=True)
class CreateItem:
    object_name: str
    body: dict[str, Any]
    query: str | None = None


@dataclass(frozen=True)
class UpdateItem:
    object_name: str
    item_id: str
    body: dict[str, Any]
    query: str | None = None


@dataclass(frozen=True)
class ReadItem:
    object_name: str
    item_id: str
    query: str | None = None


@dataclass(frozen=True)
class ReadItems:
    object_name: str
    query: str | None = None


@dataclass(frozen=True)
class DeleteItem:
    object_name: str
    item_id: str


@dataclass(frozen=True)
class RunQuery:
    query_name: str
    params: dict[str, Any] | None = None


@dataclass(frozen=True)
class PerformActions:
    actions: list[Action] = field(default_factory=list)


@dataclass(frozen=True)
class SignUp:
    user: dict[str, Any]


@dataclass(frozen=True)
class SignIn:
    username: str
    password: str


Operation = (
    CreateItem | UpdateItem | ReadItem | ReadItems | DeleteItem | RunQuery | PerformActions | SignUp | SignIn
)


# =============================================================================
# Request / Result
# =============================================================================


@dataclass
class RequestDescriptor:
    """A fully assembled HTTP request, ready for the transport."""

    method: Method
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def has_body(self) -> bool:
        """Check if a JSON body is sent."""
        return self.body is not None


@dataclass
class Success(Generic[T]):
    """A request that completed with a decoded JSON body."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the decoded value."""
        return self.value


@dataclass
class Failure:
    """A request that failed in transport, on status, or while decoding."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the carried error."""
        raise self.error


Result = Success[Any] | Failure
