"""
Failure Explanation Envelope and error taxonomy.

Every HTTP response is wrapped in ApiResponse so the client can tell a
success from a recoverable, explainable failure without parsing messages.

Error taxonomy:
- ValidationError / InvalidCatalogError: malformed catalog document
- MissingSelectionError / MissingParallelError: setup or capture incomplete
- NoParallelsError: a set defines no parallels, capture cannot proceed
- StorageError: the durable store rejected a read or write
- EmptyExportError: nothing to export
- InvalidStateError: operation not valid in the current state
- NotFoundError: a product/set/card/entry name that does not exist

INVARIANT: User-visible failures are transient. Nothing here is persisted.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    INVALID_CATALOG = "invalid_catalog"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"
    NO_PARALLELS = "no_parallels"

    # State machine violations
    INVALID_STATE = "invalid_state"

    # Service failures
    STORAGE_FAILURE = "storage_failure"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    Every response is classified into one of three outcome types.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: no parallel selected, catalog missing required keys.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ValidationError(KnownError):
    """Input document is structurally wrong."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        kind: FailureKind = FailureKind.INVALID_INPUT,
        suggestion: str | None = None,
    ):
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            suggestion=suggestion,
            status_code=400,
        )


class InvalidCatalogError(ValidationError):
    """
    Raised when a catalog document lacks `products` or `tags`.

    Fatal to the load attempt only. The previously loaded catalog stays active.
    """

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            message="Invalid catalog file. Expected products and tags.",
            detail=f"Missing keys: {', '.join(missing)}",
            kind=FailureKind.INVALID_CATALOG,
            suggestion="Export the catalog again from the desktop app and reload it.",
        )


class MissingSelectionError(KnownError):
    """
    Setup or capture is incomplete.

    Recoverable: the operation simply does not proceed.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED,
            message=message,
            detail=f"field={field}" if field else None,
            status_code=400,
        )


class MissingParallelError(MissingSelectionError):
    """Capture confirmed without a parallel selected."""

    def __init__(self) -> None:
        super().__init__("Please select a parallel.", field="parallel")


class NoParallelsError(KnownError):
    """The set defines zero parallels, so no card in it can be captured."""

    def __init__(self, product: str, set_name: str):
        self.product = product
        self.set_name = set_name
        super().__init__(
            kind=FailureKind.NO_PARALLELS,
            message=f"Set '{set_name}' in '{product}' has no parallels to capture against.",
            suggestion="Add at least a base parallel to this set in the desktop catalog.",
            status_code=422,
        )


class StorageError(KnownError):
    """
    The durable store failed a read or write.

    In-memory state is left exactly as it was before the call.
    """

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        super().__init__(
            kind=FailureKind.STORAGE_FAILURE,
            message=f"Storage failed during {operation}. Nothing was changed.",
            detail=detail,
            suggestion="Retry the action. If it keeps failing, export what you have.",
            status_code=503,
        )


class EmptyExportError(KnownError):
    """Export requested with no pending changes."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.EMPTY_RESULT,
            message="No pending changes to export.",
            status_code=400,
        )


class InvalidStateError(KnownError):
    """Operation is not valid in the current application state."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_STATE,
            message=message,
            detail=detail,
            status_code=409,
        )


class NotFoundError(KnownError):
    """A named product, set, card or pending entry does not exist."""

    def __init__(self, what: str, name: str):
        self.what = what
        self.name = name
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{what} '{name}' not found.",
            status_code=404,
        )


# =============================================================================
# RESPONSE BOUNDARY
# =============================================================================

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: (
        "Something went wrong and the cause is unknown. Retry the last action."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the response boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    return response


def create_success(data: Any) -> ApiResponse[Any]:
    """Create and finalize a success response."""
    return finalize_response(ApiResponse.success(data))


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create and finalize a known failure response from a KnownError."""
    return finalize_response(error.to_response())
