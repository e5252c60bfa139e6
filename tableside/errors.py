"""Domain error taxonomy

Every failure the table lifecycle core can report has its own exception
class with a stable ``code``. The API layer renders them through a single
exception handler, so routers never translate errors by hand.
"""

from typing import Any, Dict, Optional


class TablesideError(Exception):
    """Base class for client-facing domain errors"""
    code = "TablesideError"
    status_code = 400
    message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "error": self.code}
        body.update(self.extra)
        return body


# 404

class TableNotFound(TablesideError):
    code = "TableNotFound"
    status_code = 404
    message = "Table not found"


class TokenNotFound(TablesideError):
    code = "TokenNotFound"
    status_code = 404
    message = "QR token not found"


class UsageSessionNotFound(TablesideError):
    code = "UsageSessionNotFound"
    status_code = 404
    message = "Usage session not found"


class AreaNotFound(TablesideError):
    code = "AreaNotFound"
    status_code = 404
    message = "Area not found"


# 400

class InvalidCapacity(TablesideError):
    code = "InvalidCapacity"
    status_code = 400
    message = "Capacity must be greater than zero"


class InvalidTableNumber(TablesideError):
    code = "InvalidTableNumber"
    status_code = 400
    message = "Table number cannot be blank"


class UnknownArea(TablesideError):
    code = "UnknownArea"
    status_code = 400
    message = "Area is not registered"


class InvalidMilestoneOrder(TablesideError):
    code = "InvalidMilestoneOrder"
    status_code = 400
    message = "Milestone timestamp is earlier than the recorded one"


# 409

class DuplicateTableNumber(TablesideError):
    code = "DuplicateTableNumber"
    status_code = 409
    message = "Table number already exists"


class InvalidTransition(TablesideError):
    code = "InvalidTransition"
    status_code = 409
    message = "Status transition is not allowed"


class ConcurrentModification(TablesideError):
    code = "ConcurrentModification"
    status_code = 409
    message = "Table was modified by another request"


class SessionAlreadyOpen(TablesideError):
    code = "SessionAlreadyOpen"
    status_code = 409
    message = "Table already has an open usage session"


class NoOpenSession(TablesideError):
    code = "NoOpenSession"
    status_code = 409
    message = "Table has no open usage session"


class SessionClosed(TablesideError):
    code = "SessionClosed"
    status_code = 409
    message = "Usage session is closed and cannot be modified"


class AreaInUse(TablesideError):
    code = "AreaInUse"
    status_code = 409
    message = "Area is referenced by active tables"


class DuplicateArea(TablesideError):
    code = "DuplicateArea"
    status_code = 409
    message = "Area already exists"


class TableInUse(TablesideError):
    code = "TableInUse"
    status_code = 409
    message = "Table has an open usage session"


# 410

class TokenExpired(TablesideError):
    code = "TokenExpired"
    status_code = 410
    message = "QR token is no longer valid"


# 503

class StorageUnavailable(TablesideError):
    """The unit of work failed before commit; nothing was applied"""
    code = "StorageUnavailable"
    status_code = 503
    message = "Storage unavailable, request was not applied"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        extra.setdefault("applied", False)
        super().__init__(message, **extra)


class CommitOutcomeUnknown(TablesideError):
    """Commit was attempted and failed; the caller must re-read state"""
    code = "CommitOutcomeUnknown"
    status_code = 503
    message = "Commit outcome unknown, re-check current state before retrying"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        extra.setdefault("applied", "unknown")
        super().__init__(message, **extra)
