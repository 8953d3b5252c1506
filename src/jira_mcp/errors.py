"""Error taxonomy for Jira backend failures.

Every backend call goes through translate_error(), which maps the HTTP status
of a failed call onto one of five error kinds:

    400      -> UserInputError
    401      -> AuthenticationError
    403      -> ForbiddenError
    404      -> NotFoundError
    >= 500   -> InternalServerError
    anything else (network error, timeout, malformed body) -> InternalServerError

The mapping is total: no failure escapes unclassified.
"""
from dataclasses import dataclass
from typing import Any, Optional

import httpx


@dataclass(frozen=True)
class ErrorContext:
    """Diagnostic details attached to a translated error.

    Logged for operators, never rendered to MCP clients.
    """

    status: Optional[int] = None
    response_body: Any = None
    request_input: Any = None
    endpoint: Optional[str] = None


class JiraApiError(Exception):
    """Base class for every translated backend error."""

    kind = "internal_server_error"

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class UserInputError(JiraApiError):
    """The request was malformed or failed validation."""

    kind = "user_input_error"


class AuthenticationError(JiraApiError):
    """The backend rejected the configured credentials."""

    kind = "authentication_error"


class ForbiddenError(JiraApiError):
    """The credentials are valid but lack permission."""

    kind = "forbidden_error"


class NotFoundError(JiraApiError):
    """The requested entity, tool or resource does not exist."""

    kind = "not_found_error"


class InternalServerError(JiraApiError):
    """Backend 5xx, transport failure, or anything unclassifiable."""

    kind = "internal_server_error"


def _status_of(error: BaseException) -> Optional[int]:
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _body_of(error: BaseException) -> Any:
    response = getattr(error, "response", None)
    if not isinstance(response, httpx.Response):
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None


def translate_error(
    error: BaseException,
    operation: str,
    *,
    request_input: Any = None,
    endpoint: Optional[str] = None,
    not_found_message: Optional[str] = None,
) -> JiraApiError:
    """Map a failed backend call onto the error taxonomy.

    Errors that are already translated pass through untouched so nested
    service calls do not re-wrap them.
    """
    if isinstance(error, JiraApiError):
        return error

    status = _status_of(error)
    context = ErrorContext(
        status=status,
        response_body=_body_of(error),
        request_input=request_input,
        endpoint=endpoint,
    )

    if status == 400:
        return UserInputError(f"Invalid input for {operation}.", context)
    if status == 401:
        return AuthenticationError(f"Authentication failed for {operation}.", context)
    if status == 403:
        return ForbiddenError(f"Access forbidden for {operation}.", context)
    if status == 404:
        return NotFoundError(not_found_message or f"Resource not found for {operation}.", context)
    if status is not None and status >= 500:
        return InternalServerError(f"Internal server error in {operation}.", context)
    return InternalServerError(f"Unexpected error in {operation}.", context)
