"""
Failure classification for user-visible errors.

Every error the service knows how to explain is a `KnownError` carrying a
`FailureKind`, a user-appropriate message and the HTTP status to answer with.
The application-level handler in `cardledger.main` renders them; nothing
below the API layer builds HTTP responses itself.

Response body shape:
    {"detail": <message>, "failure": {kind, message, detail, suggestion}}
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint violations
    PREMIUM_REQUIRED = "premium_required"
    CARD_LIMIT_REACHED = "card_limit_reached"
    PROTECTED_RESOURCE = "protected_resource"
    RESOURCE_IN_USE = "resource_in_use"


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
    redirect_to: str | None = Field(
        default=None,
        description="Client route that resolves the failure, if any",
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
        redirect_to: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        self.redirect_to = redirect_to
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            redirect_to=self.redirect_to,
        )

    def to_body(self) -> dict[str, Any]:
        """JSON body for the HTTP response."""
        return {"detail": self.message, "failure": self.to_detail().model_dump(mode="json")}


class CardValidationError(KnownError):
    """A card payload violates a card invariant at the write boundary."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=f"field: {field}" if field else None,
            status_code=400,
        )


class NotFoundError(KnownError):
    """The resource does not exist or belongs to another user."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource} not found",
            status_code=404,
        )


class PremiumRequiredError(KnownError):
    """The feature is reserved to Premium subscribers."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(
            kind=FailureKind.PREMIUM_REQUIRED,
            message=f"{feature} is reserved to Premium users",
            suggestion="Upgrade to Premium to unlock this feature.",
            status_code=403,
            redirect_to="/subscription",
        )


class CardLimitExceededError(KnownError):
    """A Free user tried to go past the plan's card cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            kind=FailureKind.CARD_LIMIT_REACHED,
            message=f"The Free plan is limited to {limit} cards",
            suggestion="Upgrade to Premium or remove some existing cards.",
            status_code=403,
            redirect_to="/subscription",
        )


class MainCollectionProtectedError(KnownError):
    """The Main Collection cannot be modified or deleted."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(
            kind=FailureKind.PROTECTED_RESOURCE,
            message=f"Cannot {action} the Main Collection",
            status_code=403,
        )


class CollectionNotEmptyError(KnownError):
    """Collections still holding cards cannot be deleted."""

    def __init__(self, card_count: int):
        self.card_count = card_count
        super().__init__(
            kind=FailureKind.RESOURCE_IN_USE,
            message="Cannot delete collection that contains cards",
            detail=f"{card_count} cards in collection",
            suggestion="Move or delete the cards first.",
            status_code=400,
        )


class SpreadsheetImportError(KnownError):
    """The uploaded spreadsheet cannot be imported as a whole."""

    def __init__(self, message: str, row_errors: list[str] | None = None):
        self.row_errors = row_errors or []
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail="; ".join(self.row_errors) or None,
            suggestion="Fix the listed rows and upload the file again.",
            status_code=400,
        )


class UploadRejectedError(KnownError):
    """An uploaded file was missing, too large or of the wrong type."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            status_code=400,
        )
