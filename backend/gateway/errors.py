from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class GatewayError(Exception):
    """Base class for errors raised by the submission services."""


class ValidationError(GatewayError):
    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))


class InvalidTransitionError(ValidationError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__([FieldError("status", f"Cannot move a submission from {current} to {target}.")])


class NotFoundError(GatewayError):
    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class PersistenceError(GatewayError):
    """The submission store could not be read or written."""


class FileStorageError(GatewayError):
    """An attachment could not be stored, read or removed."""


class NotificationError(GatewayError):
    """The SMTP relay rejected or failed to deliver a message."""
