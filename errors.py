"""
Errores del backend de contacto.

Every client-facing error derives from ContactAPIError, which carries its HTTP
status and renders the `{success: false, message, ...}` body used by the API.
NotifyError is internal only: it never leaves the notification layer.
"""
from typing import Any, Dict, List, Optional


class ContactAPIError(Exception):
    """Base class for errors rendered as JSON responses."""

    status_code = 500

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        extra_data: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        self.extra_data = extra_data or {}
        super().__init__(self.message)

    def to_dict(self, expose_detail: bool = False) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": False, "message": self.message}
        result.update(self.extra_data)
        if expose_detail and self.detail:
            result["error"] = self.detail
        return result


class ValidationError(ContactAPIError):
    """Field validation failed (400). `errors` lists every violation."""

    status_code = 400

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        super().__init__("Validation failed", extra_data={"errors": errors})


class SpamRejected(ContactAPIError):
    status_code = 400

    def __init__(self, message: str = "Captcha verification failed. Please try again."):
        super().__init__(message)


class DuplicateSubmission(ContactAPIError):
    status_code = 429

    def __init__(
        self,
        message: str = (
            "A submission with this email or phone number was already received recently. "
            "Please wait before submitting again."
        ),
    ):
        super().__init__(message)


class NotFound(ContactAPIError):
    status_code = 404

    def __init__(self, message: str = "Contact not found"):
        super().__init__(message)


class InvalidStatus(ContactAPIError):
    status_code = 400

    def __init__(self, status: Any = None):
        self.status = status
        super().__init__("Invalid status value")


class PersistenceError(ContactAPIError):
    """Storage backend failed (500). The cause goes in `detail`."""

    status_code = 500

    def __init__(
        self,
        message: str = "An error occurred while processing your request. Please try again later.",
        detail: Optional[str] = None,
    ):
        super().__init__(message, detail=detail)


class NotifyError(Exception):
    """Delivery of a notification failed. Logged and discarded by the dispatcher."""

    def __init__(self, kind: str, recipient: str, reason: str):
        self.kind = kind
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"{kind} notification to {recipient} failed: {reason}")
