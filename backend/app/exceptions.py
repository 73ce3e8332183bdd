from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class ValidationError(DomainException):
    """Malformed input, rejected before any state is touched."""

    def __init__(self, detail: str, *, code: str = "validation_error") -> None:
        super().__init__(
            status_code=400,
            title="Invalid request",
            detail=detail,
            code=code,
        )


class NotFoundError(DomainException):
    def __init__(self, resource: str, resource_id: object) -> None:
        super().__init__(
            status_code=404,
            title=f"{resource.capitalize()} not found",
            detail=f"{resource} '{resource_id}' not found",
            code=f"{resource}_not_found",
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(DomainException):
    def __init__(self, detail: str, *, code: str = "conflict") -> None:
        super().__init__(
            status_code=409,
            title="Conflict",
            detail=detail,
            code=code,
        )


class PermissionDenied(DomainException):
    def __init__(self, detail: str = "forbidden", *, code: str = "forbidden") -> None:
        super().__init__(
            status_code=403,
            title="Forbidden",
            detail=detail,
            code=code,
        )


class SamePlayers(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            "You cannot play against yourself",
            code="match_same_players",
        )


class MatchAlreadyValidated(ConflictError):
    def __init__(self, match_id: int, status: str) -> None:
        super().__init__(
            f"match '{match_id}' is already {status}; only pending matches can be validated",
            code="match_not_pending",
        )
        self.match_id = match_id
        self.status = status


class AccountSuspended(PermissionDenied):
    def __init__(self, until: str) -> None:
        super().__init__(
            f"Your account is suspended until {until}",
            code="account_suspended",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
