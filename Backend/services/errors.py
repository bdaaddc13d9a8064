"""
Error taxonomy shared by the reminder, plan and CRUD services.

Services raise these internally and hand a Result back across the component
boundary; routers turn a failed Result into an HTTP response.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

T = TypeVar("T")


class PetMedsError(Exception):
    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.message}


class ValidationError(PetMedsError):
    code = "validation_error"
    status_code = 400


class NotFound(PetMedsError):
    code = "not_found"
    status_code = 404


class AlreadyCompleted(PetMedsError):
    code = "already_completed"
    status_code = 409


class PlanLimitExceeded(PetMedsError):
    code = "plan_limit_exceeded"
    status_code = 403

    def __init__(self, resource: str, limit: int):
        plural = "pets" if resource == "pet" else "medications"
        noun = resource if limit == 1 else plural
        super().__init__(f"Free plan allows only {limit} {noun}. Please upgrade to add more {plural}.")
        self.resource = resource
        self.limit = limit

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"resource": self.resource, "limit": self.limit})
        return data


class StoreError(PetMedsError):
    """Wraps a data-store failure; the driver message is kept verbatim."""

    code = "store_error"

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": "Database operation failed", "error": self.message}


@dataclass
class Result(Generic[T]):
    value: T | None = None
    error: PetMedsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PetMedsError) -> "Result":
        return cls(error=error)


def store_error(db: Session, exc: SQLAlchemyError) -> StoreError:
    db.rollback()
    return StoreError(str(getattr(exc, "orig", None) or exc))


def unwrap(result: Result[T]) -> T:
    """Value of a successful Result; re-raises the error otherwise."""
    if result.error is not None:
        raise result.error
    return result.value
