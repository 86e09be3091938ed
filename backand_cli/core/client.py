"""
Core HTTP client for the Backand REST API.

Turns operations into request descriptors, sends them through a transport
and maps responses to decoded JSON or a typed error.
"""

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Protocol

from backand_cli.core.auth import Session
from backand_cli.core.routes import resolve
from backand_cli.core.types import Operation, RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

# Statuses whose success carries no body
EMPTY_BODY_STATUSES = (204, 205)


# =============================================================================
# Errors
# =============================================================================


class BackandError(Exception):
    """Base error class for SDK and CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(BackandError):
    """A request that did not produce a usable response."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class TransportError(APIError):
    """Network or connection failure; no response was received."""


class HTTPStatusError(APIError):
    """The server answered with a non-2xx status."""


class DecodingError(APIError):
    """The response body is not valid JSON."""


class ValidationError(BackandError):
    """Validation error for local input/data issues (not API errors)."""


class StorageError(BackandError):
    """The secret store could not save or remove the user token."""


# =============================================================================
# Transport
# =============================================================================


@dataclass
class TransportResponse:
    """Raw response as received from the wire."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class Transport(Protocol):
    """Sends one request and returns the raw response."""

    def send(self, request: RequestDescriptor, timeout: float) -> TransportResponse: ...


class UrllibTransport:
    """Default transport built on urllib."""

    def send(self, request: RequestDescriptor, timeout: float) -> TransportResponse:
        headers = dict(request.headers)
        headers.setdefault("Accept", "application/json")
        if request.has_body:
            headers.setdefault("Content-Type", "application/json")

        try:
            req = urllib.request.Request(
                request.url,
                data=request.body,
                headers=headers,
                method=request.method.value,
            )
            with urllib.request.urlopen(req, timeout=timeout) as response:
                return TransportResponse(
                    status=response.status,
                    headers=dict(response.headers.items()),
                    body=response.read(),
                )

        except urllib.error.HTTPError as e:
            # A status response, validated by the client
            return TransportResponse(
                status=e.code,
                headers=dict(e.headers.items()) if e.headers else {},
                body=e.read() or b"",
            )

        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}")

        except TimeoutError:
            raise TransportError(f"Request timed out after {timeout} seconds")

        except (http.client.InvalidURL, ValueError) as e:
            raise TransportError(f"Invalid request URL: {e}")

        # Failures while reading the response are not wrapped by urllib
        except (http.client.HTTPException, OSError) as e:
            raise TransportError(f"Connection error: {e}")


# =============================================================================
# Client
# =============================================================================


def _error_message(data: Any, status: int) -> str:
    """Pick the most useful message out of an error body."""
    if isinstance(data, dict):
        for key in ("error_description", "Message", "message"):
            if isinstance(data.get(key), str):
                return data[key]
        # Handle both {"error": "message"} and {"error": {"message": "..."}}
        error_field = data.get("error")
        if isinstance(error_field, str):
            return error_field
        if isinstance(error_field, dict) and isinstance(error_field.get("message"), str):
            return error_field["message"]
    elif isinstance(data, str) and data:
        return data
    return f"HTTP {status}"


class APIClient:
    """
    Low-level HTTP client for the Backand REST API.

    Handles:
    - Request construction (route, query string, credential headers)
    - Sending through a pluggable transport
    - Status validation and JSON decoding
    """

    def __init__(
        self,
        session: Session,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.session = session
        self.transport: Transport = transport or UrllibTransport()
        self.timeout = timeout

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        return f"{self.session.base_url}{path}"

    def build_request(self, operation: Operation) -> RequestDescriptor:
        """
        Assemble the request for an operation.

        Headers reflect the session mode at the time of the call.

        Raises:
            TypeError: If the body cannot be JSON-encoded

        """
        route = resolve(
            operation,
            api_version=self.session.api_version,
            app_name=self.session.app_name,
        )
        body = None
        if route.body is not None:
            body = json.dumps(route.body, separators=(",", ":")).encode("utf-8")
        return RequestDescriptor(
            method=route.method,
            url=self._build_url(route.path),
            headers=self.session.headers(),
            body=body,
        )

    def send(self, request: RequestDescriptor) -> Any:
        """
        Send a request and decode the response.

        Returns:
            Parsed JSON response (None for an empty 204/205 response)

        Raises:
            TransportError: On connection failure or timeout
            HTTPStatusError: On a non-2xx status
            DecodingError: If the body is missing or not valid UTF-8 JSON

        """
        logger.debug("%s %s", request.method.value, request.url)
        try:
            response = self.transport.send(request, self.timeout)
        except TransportError as e:
            logger.warning("%s %s failed: %s", request.method.value, request.url, e.message)
            raise
        logger.debug("%s %s -> %s", request.method.value, request.url, response.status)

        if not 200 <= response.status < 300:
            text = response.body.decode("utf-8", errors="replace") if response.body else ""
            try:
                error_data: Any = json.loads(text) if text else None
            except json.JSONDecodeError:
                error_data = text
            message = _error_message(error_data, response.status)
            logger.warning("%s %s returned %s: %s", request.method.value, request.url, response.status, message)
            details = error_data if isinstance(error_data, dict) else None
            raise HTTPStatusError(message, status=response.status, details=details)

        if not response.body.strip():
            if response.status in EMPTY_BODY_STATUSES:
                return None
            raise DecodingError("Empty response body", status=response.status)
        try:
            return json.loads(response.body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodingError(f"Invalid JSON response: {e}", status=response.status)

    def request(self, operation: Operation) -> Any:
        """Build and send an operation in one step."""
        return self.send(self.build_request(operation))
