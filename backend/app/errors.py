"""Error taxonomy for invite issuance, acceptance and access resolution.

Every error carries a stable ``code`` and the HTTP status the API maps it to.
Services raise these; routers never translate them by hand, the handlers in
``app.error_handlers`` do.
"""

from typing import Any


class AccessError(Exception):
    """Base class for all provisioning and authorization failures."""

    code: str = "error"
    http_status: int = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code, **self.extra}


class ValidationError(AccessError):
    code = "validation_error"
    http_status = 400


class Unauthorized(AccessError):
    code = "unauthorized"
    http_status = 401


class Forbidden(AccessError):
    code = "forbidden"
    http_status = 403


class AdminCannotBecomeEmployee(Forbidden):
    code = "admin_cannot_become_employee"

    def __init__(self, message: str = "Admin accounts cannot accept employee invites"):
        super().__init__(message)


class PlanLimitExceeded(AccessError):
    code = "plan_limit_exceeded"
    http_status = 403

    def __init__(self, plan: str, limit: int, current: int):
        super().__init__(
            f"Your {plan} plan allows only {limit} employee(s). "
            f"You currently have {current}. Upgrade to add more.",
            plan=plan,
            limit=limit,
            current=current,
        )
        self.plan = plan
        self.limit = limit
        self.current = current


class NotFoundOrExpired(AccessError):
    """Raised for every token lookup failure.

    Missing, already accepted and expired tokens are indistinguishable on
    purpose so tokens cannot be enumerated.
    """

    code = "invalid_or_expired_invite"
    http_status = 404

    def __init__(self):
        super().__init__("Invalid or expired invite")


class NotFound(AccessError):
    code = "not_found"
    http_status = 404


class Conflict(AccessError):
    code = "conflict"
    http_status = 409


class StorageError(AccessError):
    code = "storage_error"
    http_status = 500

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message)


class UpstreamError(AccessError):
    code = "upstream_error"
    http_status = 502

    def __init__(self, message: str = "Credential provider request failed"):
        super().__init__(message)
